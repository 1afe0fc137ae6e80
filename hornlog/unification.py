"""
Unification for hornlog

Two terms unify when some substitution makes them syntactically identical.
The unifier here:
- resolves both terms through the current bindings first
- runs an occurs check before binding a variable
- never mutates the bindings it is given; a successful binding copies the
  mapping and extends the copy
- can record a step-by-step trace for debugging
"""

from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
from .terms import Term, Variable, Compound
from .utils import resolve_term


@dataclass
class UnificationResult:
    """Result of unification with optional trace"""
    success: bool
    bindings: Optional[Dict[str, Term]] = None
    steps: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.success


class UnificationTrace:
    """Trace unification steps for debugging"""

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self.steps: List[str] = []

    def add(self, message: str) -> None:
        if self.enabled:
            self.steps.append(message)

    def get_trace(self) -> List[str]:
        return self.steps.copy()

    def reset(self) -> None:
        self.steps.clear()


# ============================================================================
# Functional API - Simple, clean interface
# ============================================================================

def unify(term1: Term, term2: Term,
          bindings: Optional[Dict[str, Term]] = None,
          occurs_check: bool = True) -> Optional[Dict[str, Term]]:
    """
    Simple functional unification interface.

    Returns the extended bindings, or None if the terms do not unify.

    Examples:
        >>> unify(compound("f", var("X"), atom("b")), compound("f", atom("a"), var("Y")))
        {"X": Atom("a"), "Y": Atom("b")}
        >>> unify(var("X"), compound("f", var("X")))
        None
    """
    return Unifier(occurs_check=occurs_check).unify_or_none(term1, term2, bindings)


def unify_terms(term1: Term, term2: Term,
                bindings: Dict[str, Term]) -> Tuple[bool, Dict[str, Term]]:
    """
    Unify two terms, returning (success, bindings).

    On failure the input bindings are handed back untouched.
    """
    result = Unifier().unify_or_none(term1, term2, bindings)
    if result is None:
        return False, bindings
    return True, result


def unify_sequences(args1: Sequence[Term], args2: Sequence[Term],
                    bindings: Optional[Dict[str, Term]] = None,
                    unifier: Optional['Unifier'] = None) -> Optional[Dict[str, Term]]:
    """Unify two argument lists pairwise, threading bindings left to right"""
    return (unifier or Unifier()).unify_args(args1, args2, bindings or {})


def occurs_in(var_name: str, term: Term, bindings: Dict[str, Term]) -> bool:
    """Check if a variable occurs anywhere inside term"""
    term = resolve_term(term, bindings)

    if isinstance(term, Variable):
        return var_name == term.name
    if isinstance(term, Compound):
        return any(occurs_in(var_name, arg, bindings) for arg in term.args)
    return False


# ============================================================================
# Unifier Class
# ============================================================================

class Unifier:
    """
    Unification with occurs check and optional tracing.
    """

    def __init__(self, occurs_check: bool = True, trace: bool = False):
        """
        Initialize unifier with options.

        Args:
            occurs_check: Enable occurs check (prevent infinite structures)
            trace: Enable step-by-step tracing
        """
        self.occurs_check = occurs_check
        self.trace = UnificationTrace(trace)

    def unify(self, term1: Term, term2: Term,
              bindings: Optional[Dict[str, Term]] = None) -> UnificationResult:
        """
        Main unification method.
        """
        if bindings is None:
            bindings = {}

        self.trace.reset()
        result_bindings = self._unify_internal(term1, term2, bindings)
        success = result_bindings is not None
        return UnificationResult(success, result_bindings, self.trace.get_trace())

    def unify_or_none(self, term1: Term, term2: Term,
                      bindings: Optional[Dict[str, Term]] = None) -> Optional[Dict[str, Term]]:
        """Unify and return only the bindings (None on failure)"""
        return self._unify_internal(term1, term2, {} if bindings is None else bindings)

    def unify_args(self, args1: Sequence[Term], args2: Sequence[Term],
                   bindings: Dict[str, Term]) -> Optional[Dict[str, Term]]:
        """Unify argument lists of equal length, left to right"""
        if len(args1) != len(args2):
            self.trace.add(f"Different arity: {len(args1)} vs {len(args2)}")
            return None

        current_bindings = bindings
        for i, (arg1, arg2) in enumerate(zip(args1, args2)):
            self.trace.add(f"  Unifying arg {i}: {arg1} with {arg2}")
            result = self._unify_internal(arg1, arg2, current_bindings)
            if result is None:
                return None
            current_bindings = result

        return current_bindings

    def _unify_internal(self, term1: Term, term2: Term,
                        bindings: Dict[str, Term]) -> Optional[Dict[str, Term]]:
        """Internal unification logic"""

        # Apply existing bindings
        term1 = resolve_term(term1, bindings)
        term2 = resolve_term(term2, bindings)

        self.trace.add(f"Unifying: {term1} with {term2}")

        if isinstance(term1, Variable):
            if isinstance(term2, Variable) and term1.name == term2.name:
                self.trace.add("Same variable")
                return bindings
            return self._bind_variable(term1, term2, bindings)

        if isinstance(term2, Variable):
            return self._bind_variable(term2, term1, bindings)

        if isinstance(term1, Compound) and isinstance(term2, Compound):
            return self._unify_compound(term1, term2, bindings)

        # Constants: same tag and equal value (Float compares by epsilon)
        if type(term1) is type(term2) and term1 == term2:
            self.trace.add("Terms are identical")
            return bindings

        self.trace.add(f"Cannot unify: {term1} vs {term2}")
        return None

    def _bind_variable(self, var: Variable, term: Term,
                       bindings: Dict[str, Term]) -> Optional[Dict[str, Term]]:
        """Bind a variable to a term with occurs check"""

        if self.occurs_check and occurs_in(var.name, term, bindings):
            self.trace.add(f"Occurs check failed: {var.name} occurs in {term}")
            return None

        # Copy-on-write: the caller's bindings are never touched
        new_bindings = bindings.copy()
        new_bindings[var.name] = term
        self.trace.add(f"Bound: {var.name} = {term}")
        return new_bindings

    def _unify_compound(self, comp1: Compound, comp2: Compound,
                        bindings: Dict[str, Term]) -> Optional[Dict[str, Term]]:
        """Unify compound terms"""

        if comp1.functor != comp2.functor:
            self.trace.add(f"Different functors: {comp1.functor} vs {comp2.functor}")
            return None

        return self.unify_args(comp1.args, comp2.args, bindings)
