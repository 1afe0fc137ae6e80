"""
Utility functions for hornlog

Common functionality used across multiple modules.
"""

from typing import Dict
from .terms import Term, Variable


def dereference_variable(var: Variable, bindings: Dict[str, Term]) -> Term:
    """
    Follow variable bindings to find the final value.

    This function follows chains of variable-to-variable bindings
    until it finds a non-variable term or an unbound variable.
    Handles circular references by tracking visited variables, so it
    always terminates within len(bindings) steps.

    Args:
        var: The variable to dereference
        bindings: Dictionary mapping variable names to terms

    Returns:
        The final term after following all bindings, or the
        original variable if unbound

    Examples:
        >>> bindings = {"X": Variable("Y"), "Y": Atom("a")}
        >>> dereference_variable(Variable("X"), bindings)
        Atom("a")

        >>> bindings = {"X": Variable("Y"), "Y": Variable("X")}  # Circular
        >>> dereference_variable(Variable("X"), bindings)
        Variable("X")  # Stops at cycle
    """
    if var.name not in bindings:
        return var

    result = bindings[var.name]
    visited = {var.name}

    # Follow the chain of variable substitutions
    while isinstance(result, Variable) and result.name in bindings:
        if result.name in visited:
            break  # Circular reference detected
        visited.add(result.name)
        result = bindings[result.name]

    return result


def resolve_term(term: Term, bindings: Dict[str, Term]) -> Term:
    """
    Resolve a term one level through the bindings.

    A bound variable is replaced by whatever its chain ends in; any other
    term (including compounds, whose arguments are left alone) is returned
    unchanged.
    """
    if isinstance(term, Variable):
        return dereference_variable(term, bindings)
    return term

