"""
Validation for facts and rules entering the knowledge base.

Provides the checks a compile-time analyser would normally guarantee:
structural well-formedness, rule safety (range restriction), fact
groundness, and arity consistency against known predicate signatures.
"""

from typing import Dict, List, Optional, Set
from dataclasses import dataclass
from .builtins import is_builtin, BUILTIN_ARITY
from .knowledge import Fact, Goal, Rule
from .terms import Variable, Compound


@dataclass
class ValidationResult:
    """Result of a validation check"""
    is_valid: bool
    error_message: Optional[str] = None
    warning_message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.is_valid


def _combine(results: List[ValidationResult]) -> ValidationResult:
    """First failure wins; warnings from passing checks are joined"""
    warnings = []
    for result in results:
        if not result.is_valid:
            return result
        if result.warning_message:
            warnings.append(result.warning_message)
    if warnings:
        return ValidationResult(is_valid=True, warning_message="; ".join(warnings))
    return ValidationResult(is_valid=True)


class StructuralValidator:
    """Validates structural properties of facts and rules"""

    def __init__(self, warn_singletons: bool = True):
        self.warn_singletons = warn_singletons

    def validate_rule(self, rule: Rule) -> ValidationResult:
        """
        Perform all structural validations on a rule.

        Checks:
        1. Well-formedness (non-empty body, head not a built-in)
        2. Variable safety: all head variables must appear in a positive body goal
        3. No singleton variables (warning only)
        """
        checks = [
            self._check_well_formed,  # Check well-formedness FIRST
            self._check_variable_safety,
        ]
        if self.warn_singletons:
            checks.append(self._check_singleton_variables)

        results = []
        for check in checks:
            result = check(rule)
            results.append(result)
            if not result.is_valid:
                break
        return _combine(results)

    def validate_fact(self, fact: Fact) -> ValidationResult:
        """A fact must be ground and must not redefine a built-in"""
        if is_builtin(fact.predicate):
            return ValidationResult(
                is_valid=False,
                error_message=f"Cannot assert a fact for built-in predicate {fact.predicate}"
            )
        variables = fact.get_variables()
        if variables:
            var_list = ", ".join(sorted(variables))
            return ValidationResult(
                is_valid=False,
                error_message=f"Fact is not ground: variables {var_list} in {fact}"
            )
        return ValidationResult(is_valid=True)

    def _check_variable_safety(self, rule: Rule) -> ValidationResult:
        """
        Check that all variables in the head appear in the body.

        This is the "safety" or "range-restriction" requirement in logic
        programming. Negated goals bind nothing, so they do not count.
        """
        head_vars = rule.head.get_variables()
        body_vars: Set[str] = set()
        for goal in rule.body:
            if not goal.negated:
                body_vars.update(goal.get_variables())

        unbound_vars = head_vars - body_vars

        if unbound_vars:
            var_list = ", ".join(sorted(unbound_vars))
            return ValidationResult(
                is_valid=False,
                error_message=f"Unsafe rule: variables {var_list} appear in head but not in body"
            )

        return ValidationResult(is_valid=True)

    def _check_singleton_variables(self, rule: Rule) -> ValidationResult:
        """
        Check for singleton variables (variables that appear exactly once).

        These are usually typos, though they are legal. Warning only.
        """
        var_counts: Dict[str, int] = {}

        def count(args) -> None:
            for arg in args:
                for name in _variable_occurrences(arg):
                    var_counts[name] = var_counts.get(name, 0) + 1

        count(rule.head.args)
        for goal in rule.body:
            count(goal.args)

        singletons = [var for var, n in var_counts.items() if n == 1]

        if singletons:
            var_list = ", ".join(sorted(singletons))
            return ValidationResult(
                is_valid=True,  # Warning, not error
                warning_message=f"Singleton variables: {var_list} (appear only once)"
            )

        return ValidationResult(is_valid=True)

    def _check_well_formed(self, rule: Rule) -> ValidationResult:
        """Check that the rule is well-formed"""
        if not rule.body:
            return ValidationResult(
                is_valid=False,
                error_message="Rule body cannot be empty"
            )

        if is_builtin(rule.head.predicate):
            return ValidationResult(
                is_valid=False,
                error_message=f"Rule head cannot redefine built-in predicate {rule.head.predicate}"
            )

        return ValidationResult(is_valid=True)


def _variable_occurrences(term) -> List[str]:
    """Variable names with repetition, unlike Term.get_variables()"""
    if isinstance(term, Variable):
        return [term.name]
    if isinstance(term, Compound):
        names = []
        for arg in term.args:
            names.extend(_variable_occurrences(arg))
        return names
    return []


class SignatureValidator:
    """Checks arities against the signature table of a knowledge base"""

    def __init__(self, predicates: Dict[str, int]):
        self.predicates = predicates

    def check(self, predicate: str, arity: int) -> ValidationResult:
        if is_builtin(predicate):
            if arity != BUILTIN_ARITY:
                return ValidationResult(
                    is_valid=False,
                    error_message=f"Arity mismatch: {predicate}/{arity} (built-in is {predicate}/{BUILTIN_ARITY})"
                )
            return ValidationResult(is_valid=True)

        known = self.predicates.get(predicate)
        if known is not None and known != arity:
            return ValidationResult(
                is_valid=False,
                error_message=f"Arity mismatch: {predicate}/{arity} (existing: {predicate}/{known})"
            )
        return ValidationResult(is_valid=True)

    def validate_fact(self, fact: Fact) -> ValidationResult:
        return self.check(fact.predicate, fact.arity)

    def validate_rule(self, rule: Rule) -> ValidationResult:
        results = [self.check(rule.head.predicate, rule.head.arity)]
        for goal in rule.body:
            results.append(self.check(goal.predicate, goal.arity))
        return _combine(results)

    def validate_goals(self, goals: List[Goal]) -> ValidationResult:
        return _combine([self.check(goal.predicate, goal.arity) for goal in goals])


class RuleValidator:
    """
    Main validator combining structural and signature checks.
    """

    def __init__(self, predicates: Optional[Dict[str, int]] = None,
                 warn_singletons: bool = True):
        self.structural_validator = StructuralValidator(warn_singletons)
        self.signature_validator = SignatureValidator(predicates) if predicates is not None else None

    def validate(self, rule: Rule,
                 structural: bool = True,
                 signatures: bool = True) -> ValidationResult:
        """
        Validate a rule with specified checks.

        Args:
            rule: Rule to validate
            structural: Perform structural validation
            signatures: Perform arity checks (requires a signature table)

        Returns:
            ValidationResult with overall result and any messages
        """
        results = []
        if structural:
            results.append(self.structural_validator.validate_rule(rule))
        if signatures and self.signature_validator:
            results.append(self.signature_validator.validate_rule(rule))
        return _combine(results)

    def validate_fact(self, fact: Fact) -> ValidationResult:
        results = [self.structural_validator.validate_fact(fact)]
        if self.signature_validator:
            results.append(self.signature_validator.validate_fact(fact))
        return _combine(results)
