"""
Main engine for hornlog

Provides a high-level interface over the knowledge base and evaluator:
textual and structured assert / retract / add-rule / query operations,
built-in registration, and query statistics.
"""

import logging
import time
from typing import Dict, Iterable, List, Optional, Sequence

from .builtins import BUILTIN_PREDICATES, BUILTIN_ARITY
from .config import HornlogConfig
from .errors import ValidationError
from .evaluator import PrologEvaluator, Solution
from .knowledge import KnowledgeBase, Fact, Goal, Rule
from .logging_config import log_query_performance, log_clause_change
from .parser import parse_fact, parse_rule, parse_query, parse_program
from .types import QueryResult
from .unification import Unifier
from .validation import RuleValidator, ValidationResult

logger = logging.getLogger(__name__)


class LogicEngine:
    """
    Main interface for hornlog - one knowledge base plus its evaluator
    """

    def __init__(self, config: Optional[HornlogConfig] = None):
        """
        Initialize the engine

        Args:
            config: Engine configuration; defaults are used if None
        """
        self.config = config or HornlogConfig()
        self.kb = KnowledgeBase()
        query_config = self.config.query
        self.evaluator = PrologEvaluator(
            self.kb,
            max_depth=query_config.max_depth,
            strategy=query_config.strategy,
            renaming=query_config.renaming,
            unifier=Unifier(occurs_check=query_config.occurs_check),
            trace=query_config.trace_enabled,
        )
        self.validator = RuleValidator(self.kb.predicates,
                                       warn_singletons=self.config.validation.warn_singletons)
        self._queries_executed = 0
        self._initialized = False
        self._debug = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Register the built-in predicate signatures; safe to call twice"""
        for name in BUILTIN_PREDICATES:
            self.kb.register_predicate(name, BUILTIN_ARITY)
        if not self._initialized:
            logger.info("Logic engine initialized (max_depth=%d, strategy=%s)",
                        self.max_depth, self.evaluator.strategy)
        self._initialized = True

    def shutdown(self) -> None:
        """Drop every fact, rule and signature"""
        self.kb.clear()
        self._initialized = False
        logger.info("Logic engine shut down")

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def max_depth(self) -> int:
        return self.evaluator.max_depth

    def set_debug(self, debug: bool) -> None:
        """Log every query and its solutions at INFO level"""
        self._debug = debug

    # ------------------------------------------------------------------
    # Textual interface
    # ------------------------------------------------------------------

    def assert_fact(self, fact_str: str) -> None:
        """
        Parse and add a fact such as 'parent(john, mary).'

        Raises:
            ParseError: malformed text
            ValidationError: strict mode and the fact is not ground
        """
        self.add_fact_clause(parse_fact(fact_str))

    def assert_facts(self, fact_strings: Iterable[str]) -> None:
        """Assert several facts; stops at the first bad one"""
        for fact_str in fact_strings:
            self.assert_fact(fact_str)

    def retract_fact(self, fact_str: str) -> int:
        """
        Remove every stored copy of a fact.

        Returns:
            Number of facts removed; 0 is not an error
        """
        return self.retract_fact_clause(parse_fact(fact_str))

    def add_rule(self, rule_str: str) -> None:
        """
        Parse and add a rule such as 'grandparent(X, Z) :- parent(X, Y), parent(Y, Z).'

        Raises:
            ParseError: malformed text or missing ':-'
            ValidationError: strict mode and the rule is unsafe
        """
        self.add_rule_clause(parse_rule(rule_str))

    def consult(self, program: str) -> None:
        """Load a multi-clause program text, facts and rules in source order"""
        facts, rules = parse_program(program)
        for fact in facts:
            self.add_fact_clause(fact)
        for rule in rules:
            self.add_rule_clause(rule)

    def solve_query(self, query_str: str) -> QueryResult:
        """
        Solve a query and render every solution.

        Args:
            query_str: Comma-separated goals, e.g. 'grandparent(john, Z).'

        Returns:
            One dict per proof mapping each query variable to the text of
            its value. Ground queries give an empty dict per proof. No
            proof gives an empty list.

        Raises:
            ParseError: malformed query
            DepthExceededError: the search went past max_depth
        """
        self._queries_executed += 1
        goals = parse_query(query_str)
        solutions = self._run(goals, query_str)
        return [solution.render() for solution in solutions]

    def ask(self, query_str: str) -> bool:
        """True if the query has at least one proof"""
        self._queries_executed += 1
        return self.evaluator.ask(parse_query(query_str))

    # ------------------------------------------------------------------
    # Structured interface
    # ------------------------------------------------------------------

    def add_fact_clause(self, fact: Fact) -> None:
        """Add an already-built fact"""
        self._check(self.validator.validate_fact(fact), fact)
        self.kb.add_fact(fact)
        self._register(fact.predicate, fact.arity)
        log_clause_change(logger, "Asserted fact", str(fact))

    def retract_fact_clause(self, fact: Fact) -> int:
        removed = self.kb.remove_fact(fact)
        log_clause_change(logger, f"Retracted {removed} fact(s)", str(fact))
        return removed

    def add_rule_clause(self, rule: Rule) -> None:
        """Add an already-built rule"""
        self._check(self.validator.validate(rule), rule)
        self.kb.add_rule(rule)
        self._register(rule.head.predicate, rule.head.arity)
        log_clause_change(logger, "Added rule", str(rule))

    def query(self, goals: Sequence[Goal]) -> List[Solution]:
        """Solve already-built goals and return Solution objects"""
        self._queries_executed += 1
        return self._run(list(goals), ", ".join(str(goal) for goal in goals))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def facts_count(self) -> int:
        return self.kb.facts_count

    def rules_count(self) -> int:
        return self.kb.rules_count

    def queries_executed(self) -> int:
        return self._queries_executed

    @property
    def predicates(self) -> Dict[str, int]:
        return dict(self.kb.predicates)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(self, goals: List[Goal], query_text: str) -> List[Solution]:
        start = time.perf_counter()
        solutions = self.evaluator.query(goals)
        elapsed_ms = (time.perf_counter() - start) * 1000

        log_query_performance(logger, query_text, len(solutions), elapsed_ms,
                              level=logging.INFO if self._debug else logging.DEBUG)
        if self._debug:
            for i, solution in enumerate(solutions, 1):
                logger.info("  %d. %s", i, self._format_bindings(solution.render()))
        return solutions

    def _register(self, predicate: str, arity: int) -> None:
        if self.kb.predicates.get(predicate) != arity:
            logger.debug("Registered predicate %s/%d", predicate, arity)
        self.kb.register_predicate(predicate, arity)

    def _check(self, result: ValidationResult, clause) -> None:
        """Enforce or report a validation result depending on strict mode"""
        if result.warning_message:
            logger.warning("%s: %s", clause, result.warning_message)
        if result.is_valid:
            return
        if self.config.validation.strict:
            raise ValidationError(f"{result.error_message}: {clause}")
        logger.warning("Accepting %s despite: %s", clause, result.error_message)

    @staticmethod
    def _format_bindings(bindings: Dict[str, str]) -> str:
        if not bindings:
            return "Yes"
        return ", ".join(f"{name} = {value}" for name, value in bindings.items())

    def __str__(self) -> str:
        return f"LogicEngine: {self.facts_count()} facts, {self.rules_count()} rules"


def create_family_engine() -> LogicEngine:
    """An initialized engine with a small family knowledge base"""
    engine = LogicEngine()
    engine.initialize()
    engine.consult("""
        parent(john, mary).
        parent(john, tom).
        parent(mary, susan).
        grandparent(X, Z) :- parent(X, Y), parent(Y, Z).
    """)
    return engine
