"""
Factory functions for creating hornlog terms.

This module provides convenience functions for creating terms without
circular import issues.
"""

from typing import Any
from .terms import Term, Atom, Variable, Integer, Float, String, Compound


def atom(name: str) -> Atom:
    """
    Create an atomic constant.

    Examples:
        >>> atom("john")
        Atom("john")
    """
    return Atom(name)


def var(name: str) -> Variable:
    """
    Create a logical variable.

    Variables should start with uppercase letters by convention; the
    textual parser relies on it.

    Examples:
        >>> var("X")
        Variable("X")
    """
    return Variable(name)


def integer(value: int) -> Integer:
    """Create an integer literal"""
    return Integer(int(value))


def real(value: float) -> Float:
    """Create a floating point literal"""
    return Float(float(value))


def string(text: str) -> String:
    """Create a string literal"""
    return String(text)


def compound(functor: str, *args: Term) -> Compound:
    """
    Create a compound term.

    Examples:
        >>> compound("parent", atom("john"), atom("mary"))
        Compound("parent", (Atom("john"), Atom("mary")))
        >>> compound("+", integer(2), integer(3))
        Compound("+", (Integer(2), Integer(3)))
    """
    return Compound(functor, list(args))


def term_from_value(value: Any) -> Term:
    """
    Create a term from a plain Python value.

    Terms pass through, ints become Integer, floats become Float, and
    strings become a Variable when they start with an uppercase letter,
    an Atom otherwise.

    Examples:
        >>> term_from_value("X")
        Variable("X")
        >>> term_from_value(3)
        Integer(3)
    """
    if isinstance(value, Term):
        return value
    if isinstance(value, bool):
        raise TypeError("Booleans have no term representation")
    if isinstance(value, int):
        return Integer(value)
    if isinstance(value, float):
        return Float(value)
    if isinstance(value, str):
        if not value:
            raise ValueError("Cannot build a term from an empty string")
        if value[0].isupper():
            return Variable(value)
        return Atom(value)
    raise TypeError(f"Cannot convert {type(value).__name__} to a term")
