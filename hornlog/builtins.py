"""
Built-in predicates for hornlog

All built-ins take exactly two arguments:

    =      unify both sides
    <, >, <=, >=   numeric comparison (Integer/Float, mixed allowed)
    is     evaluate the right side arithmetically, unify with the left

A built-in that cannot apply to its arguments (wrong arity, non-numeric
operand, unbound variable, division by zero) simply fails. None of these
are errors.
"""

import operator
from typing import Callable, Dict, Optional, Union
from .terms import Term, Integer, Float, Compound, is_numeric
from .knowledge import Goal
from .unification import Unifier
from .types import Bindings
from .utils import resolve_term


BUILTIN_ARITY = 2

COMPARISONS: Dict[str, Callable[[float, float], bool]] = {
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}

ARITHMETIC: Dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}

BUILTIN_PREDICATES = ("=",) + tuple(COMPARISONS) + ("is",)


class ArithmeticFailure(Exception):
    """Raised internally when an expression cannot be evaluated"""


def is_builtin(predicate: str) -> bool:
    return predicate in BUILTIN_PREDICATES


def number_value(term: Term) -> Union[int, float]:
    """Numeric value of an Integer/Float term"""
    if not is_numeric(term):
        raise ArithmeticFailure(f"{term} is not a number")
    return term.value


def make_number(value: Union[int, float]) -> Term:
    """Integer when the value has no fractional part, Float otherwise"""
    if isinstance(value, int):
        return Integer(value)
    if value.is_integer():
        return Integer(int(value))
    return Float(value)


def evaluate(term: Term, bindings: Bindings) -> Union[int, float]:
    """
    Evaluate an arithmetic expression under the given bindings.

    Numbers evaluate to themselves; a binary compound whose functor is one
    of + - * / evaluates its operands recursively.

    Raises:
        ArithmeticFailure: unbound variables, non-numeric leaves, unknown
            operators, division by zero or results too large for a float
    """
    term = resolve_term(term, bindings)

    if is_numeric(term):
        return term.value

    if isinstance(term, Compound) and term.arity == 2:
        op = ARITHMETIC.get(term.functor)
        if op is None:
            raise ArithmeticFailure(f"Unknown arithmetic operator: {term.functor}")
        left = evaluate(term.args[0], bindings)
        right = evaluate(term.args[1], bindings)
        if term.functor == "/" and right == 0:
            raise ArithmeticFailure("Division by zero")
        try:
            # Mixed arithmetic widens to float
            if isinstance(left, float) or isinstance(right, float):
                left, right = float(left), float(right)
            return op(left, right)
        except OverflowError as exc:
            raise ArithmeticFailure(f"Arithmetic overflow in {term}") from exc

    raise ArithmeticFailure(f"Invalid arithmetic expression: {term}")


def solve_builtin(goal: Goal, bindings: Bindings,
                  unifier: Optional[Unifier] = None) -> Optional[Bindings]:
    """
    Evaluate a built-in goal.

    Args:
        goal: A goal whose predicate is one of BUILTIN_PREDICATES
        bindings: Current bindings (never modified)
        unifier: Unifier to use for '=' and 'is'

    Returns:
        The (possibly extended) bindings on success, None on failure
    """
    if goal.arity != BUILTIN_ARITY:
        return None

    unifier = unifier or Unifier()
    left = resolve_term(goal.args[0], bindings)
    right = resolve_term(goal.args[1], bindings)

    if goal.predicate == "=":
        return unifier.unify_or_none(left, right, bindings)

    if goal.predicate in COMPARISONS:
        if not (is_numeric(left) and is_numeric(right)):
            return None
        if COMPARISONS[goal.predicate](left.value, right.value):
            return bindings
        return None

    if goal.predicate == "is":
        try:
            value = make_number(evaluate(right, bindings))
        except ArithmeticFailure:
            return None
        return unifier.unify_or_none(left, value, bindings)

    return None
