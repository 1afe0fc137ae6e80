"""
Term representations for hornlog

This module defines the core term types used by the engine:
- Variable: Logical variables like 'X', 'Person'
- Atom: Symbolic constants like 'john', 'mary'
- Integer / Float / String: Literal values
- Compound: Structured terms like 'parent(john, mary)' or '+(2, 3)'

Terms are immutable values compared structurally.
"""

import sys
from typing import Dict, List, Set, Tuple, Union
from dataclasses import dataclass
from abc import ABC, abstractmethod


# Tolerance used when comparing floats
FLOAT_EPSILON = sys.float_info.epsilon


class Term(ABC):
    """Abstract base class for all terms"""

    @abstractmethod
    def substitute(self, bindings: Dict[str, 'Term']) -> 'Term':
        """
        Apply variable substitutions to this term.

        Args:
            bindings: Dictionary mapping variable names to terms.
                     Chains of variables are followed transitively.

        Returns:
            New term with all bound variables replaced.
            Returns self if no substitutions apply.

        Examples:
            >>> term = compound("p", var("X"), var("Y"))
            >>> term.substitute({"X": atom("a"), "Y": atom("b")})
            Compound("p", (Atom("a"), Atom("b")))
        """
        pass

    @abstractmethod
    def get_variables(self) -> Set[str]:
        """Get all variable names in this term"""
        pass

    @property
    def is_ground(self) -> bool:
        """True if the term contains no variables"""
        return not self.get_variables()


@dataclass(frozen=True)
class Variable(Term):
    """Represents a logical variable"""
    name: str

    def substitute(self, bindings: Dict[str, Term]) -> Term:
        """Apply substitution to this variable, following chains"""
        from .utils import dereference_variable
        resolved = dereference_variable(self, bindings)
        if resolved is self or isinstance(resolved, Variable):
            return resolved
        return resolved.substitute(bindings)

    def get_variables(self) -> Set[str]:
        return {self.name}

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Atom(Term):
    """Represents a symbolic constant"""
    name: str

    def substitute(self, bindings: Dict[str, Term]) -> Term:
        return self

    def get_variables(self) -> Set[str]:
        return set()

    def __str__(self) -> str:
        return self.name


class Number(Term):
    """Common base for the numeric literals"""

    value: Union[int, float]

    def substitute(self, bindings: Dict[str, Term]) -> Term:
        return self

    def get_variables(self) -> Set[str]:
        return set()


@dataclass(frozen=True)
class Integer(Number):
    """Represents an integer literal"""
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, eq=False)
class Float(Number):
    """Represents a floating point literal, compared with an epsilon"""
    value: float

    def __eq__(self, other) -> bool:
        if not isinstance(other, Float):
            return NotImplemented
        return abs(self.value - other.value) < FLOAT_EPSILON

    def __hash__(self) -> int:
        # Epsilon equality is not transitive, so all floats share a bucket
        return hash(Float)

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class String(Term):
    """Represents a quoted string literal"""
    value: str

    def substitute(self, bindings: Dict[str, Term]) -> Term:
        return self

    def get_variables(self) -> Set[str]:
        return set()

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class Compound(Term):
    """Represents a compound term with functor and arguments"""
    functor: str
    args: Tuple[Term, ...]  # Using tuple for immutability

    def __init__(self, functor: str, args: Union[List[Term], Tuple[Term, ...]]):
        if not functor:
            raise ValueError("Compound term functor cannot be empty")
        if not isinstance(args, (list, tuple)):
            raise TypeError(f"Compound args must be list or tuple, got {type(args)}")
        object.__setattr__(self, 'functor', functor)
        object.__setattr__(self, 'args', tuple(args))

    @property
    def arity(self) -> int:
        """Number of arguments"""
        return len(self.args)

    def substitute(self, bindings: Dict[str, Term]) -> Term:
        """Apply substitutions to all arguments"""
        if not bindings:
            return self
        return Compound(self.functor, [arg.substitute(bindings) for arg in self.args])

    def get_variables(self) -> Set[str]:
        """Get variables from all arguments"""
        variables = set()
        for arg in self.args:
            variables.update(arg.get_variables())
        return variables

    def __str__(self) -> str:
        if not self.args:
            return self.functor
        args_str = ", ".join(str(arg) for arg in self.args)
        return f"{self.functor}({args_str})"


def is_numeric(term: Term) -> bool:
    """True for Integer and Float terms"""
    return isinstance(term, (Integer, Float))


def ordered_variables(terms) -> List[str]:
    """
    Variable names in order of first appearance, left to right.

    Unlike get_variables() this keeps the order the names were written in,
    which is what query results are reported in.
    """
    seen: List[str] = []

    def walk(term: Term) -> None:
        if isinstance(term, Variable):
            if term.name not in seen:
                seen.append(term.name)
        elif isinstance(term, Compound):
            for arg in term.args:
                walk(arg)

    for term in terms:
        walk(term)
    return seen


# Note: Factory functions live in factories.py to avoid circular imports
