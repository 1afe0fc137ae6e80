"""
SLD resolution for hornlog

Implements exhaustive, depth-first query evaluation with backtracking:
- built-in predicates, then facts, then rules for every selected goal
- negation as failure in a disposable sub-search
- fresh variable renaming for every rule application
- an optional constrained strategy that propagates bindings from
  single-fact predicates and picks the most constrained goal first

Backtracking never undoes anything. Each branch works on its own copy of
the bindings, and abandoning a branch just drops that copy.

The search is driven by an explicit stack of child iterators rather than
Python recursion, so max_depth is the only limit on how deep it goes.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from .builtins import is_builtin, solve_builtin, COMPARISONS
from .errors import DepthExceededError
from .knowledge import KnowledgeBase, Fact, Goal, Rule
from .terms import Term, Variable, ordered_variables
from .unification import Unifier
from .types import Bindings, RenderedBindings
from .utils import resolve_term

logger = logging.getLogger(__name__)


DEFAULT_MAX_DEPTH = 1000

STRATEGIES = ("baseline", "constrained")

# "application": a fresh suffix for every rule application (default)
# "depth": suffix is the search depth, reproducing the older behaviour
RENAMING_MODES = ("application", "depth")

UNBOUND_VARIABLE_WEIGHT = 10


@dataclass
class Solution:
    """One proof of a query"""
    bindings: Bindings
    query_variables: Tuple[str, ...] = ()

    def get_binding(self, var_name: str) -> Optional[Term]:
        """Get the raw binding for a variable"""
        return self.bindings.get(var_name)

    def resolved(self, var_name: str) -> Term:
        """The fully resolved value of a variable (itself when unbound)"""
        return Variable(var_name).substitute(self.bindings)

    def values(self) -> Bindings:
        return {name: self.resolved(name) for name in self.query_variables}

    def render(self) -> RenderedBindings:
        """Query variables mapped to the textual form of their values"""
        return {name: str(value) for name, value in self.values().items()}


@dataclass
class SearchStats:
    """Counters for the last query, reported through logging"""
    inferences: int = 0
    rule_applications: int = 0
    max_depth_reached: int = 0
    pruned: int = 0


@dataclass
class _State:
    goals: Tuple[Goal, ...]
    bindings: Bindings = field(default_factory=dict)
    depth: int = 0


class PrologEvaluator:
    """
    Evaluates queries against a knowledge base using SLD resolution
    """

    def __init__(self, knowledge_base: KnowledgeBase,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 strategy: str = "constrained",
                 renaming: str = "application",
                 unifier: Optional[Unifier] = None,
                 trace: bool = False):
        """
        Initialize the evaluator

        Args:
            knowledge_base: The knowledge base to query against
            max_depth: Deepest resolution step allowed before the search
                is abandoned with DepthExceededError
            strategy: "constrained" (goal reordering + propagation) or
                "baseline" (strict left-to-right)
            renaming: "application" or "depth", see RENAMING_MODES
            unifier: Unifier to use; a default one with occurs check if None
            trace: Log every resolution step at DEBUG level
        """
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy {strategy!r}, expected one of {STRATEGIES}")
        if renaming not in RENAMING_MODES:
            raise ValueError(f"Unknown renaming mode {renaming!r}, expected one of {RENAMING_MODES}")
        if max_depth < 0:
            raise ValueError("max_depth must be non-negative")

        self.kb = knowledge_base
        self.max_depth = max_depth
        self.strategy = strategy
        self.renaming = renaming
        self.unifier = unifier or Unifier()
        self.trace = trace
        self.stats = SearchStats()
        self._applications = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def solve(self, goals: Sequence[Goal],
              bindings: Optional[Bindings] = None) -> List[Bindings]:
        """
        Find every proof of a conjunction of goals.

        Args:
            goals: Goals to solve, in the order written
            bindings: Starting bindings (empty if None)

        Returns:
            One bindings mapping per proof, in search order. Empty when
            there is no proof.

        Raises:
            DepthExceededError: the search went deeper than max_depth
        """
        self.stats = SearchStats()
        self._applications = 0
        results = self._search(tuple(goals), dict(bindings or {}), 0)
        logger.debug("Solved %d goal(s): %d solution(s), %d inferences, %d rule applications, depth %d",
                     len(goals), len(results), self.stats.inferences,
                     self.stats.rule_applications, self.stats.max_depth_reached)
        return results

    def query(self, goals: Sequence[Goal]) -> List[Solution]:
        """Solve goals and wrap each proof as a Solution over the query variables"""
        query_variables = tuple(ordered_variables(arg for goal in goals for arg in goal.args))
        return [Solution(bindings, query_variables) for bindings in self.solve(goals)]

    def ask(self, goals: Sequence[Goal]) -> bool:
        """True if at least one proof exists; stops at the first one"""
        self.stats = SearchStats()
        self._applications = 0
        return bool(self._search(tuple(goals), {}, 0, limit=1))

    def solve_goals(self, goals: Sequence[Goal], bindings: Bindings,
                    results: List[Bindings], depth: int = 0) -> None:
        """
        Strict left-to-right resolution, appending each proof to results.

        This is the baseline procedure regardless of the configured
        strategy.
        """
        results.extend(self._search(tuple(goals), bindings, depth, expand=self._expand_baseline))

    def solve_goals_constrained(self, goals: Sequence[Goal], bindings: Bindings,
                                results: List[Bindings], depth: int = 0) -> None:
        """Resolution with propagation and most-constrained-goal selection"""
        results.extend(self._search(tuple(goals), bindings, depth, expand=self._expand_constrained))

    # ------------------------------------------------------------------
    # Search driver
    # ------------------------------------------------------------------

    def _search(self, goals: Tuple[Goal, ...], bindings: Bindings, depth: int,
                limit: Optional[int] = None, expand=None) -> List[Bindings]:
        """
        Depth-first search over resolution states.

        Each stack entry is an iterator over the children of one state, so
        alternatives are produced lazily and in clause order.
        """
        if expand is None:
            expand = (self._expand_constrained if self.strategy == "constrained"
                      else self._expand_baseline)

        results: List[Bindings] = []
        stack: List[Iterator[_State]] = [iter((_State(goals, bindings, depth),))]

        while stack:
            state = next(stack[-1], None)
            if state is None:
                stack.pop()
                continue

            if state.depth > self.max_depth:
                logger.error("Maximum search depth %d exceeded while solving %s",
                             self.max_depth, ", ".join(str(goal) for goal in state.goals[:3]))
                raise DepthExceededError(state.depth, self.max_depth)
            if state.depth > self.stats.max_depth_reached:
                self.stats.max_depth_reached = state.depth

            if not state.goals:
                results.append(state.bindings.copy())
                if limit is not None and len(results) >= limit:
                    break
                continue

            self.stats.inferences += 1
            stack.append(expand(state))

        return results

    def _expand_baseline(self, state: _State) -> Iterator[_State]:
        goal, rest = state.goals[0], state.goals[1:]
        return self._resolve(goal, rest, state.bindings, state.depth)

    def _expand_constrained(self, state: _State) -> Iterator[_State]:
        bindings = self.propagate_constraints(state.goals, state.bindings)
        if bindings is None:
            self.stats.pruned += 1
            return iter(())

        index = self.select_most_constrained_goal(state.goals, bindings)
        goal = state.goals[index]
        rest = state.goals[:index] + state.goals[index + 1:]
        return self._resolve(goal, rest, bindings, state.depth)

    def _resolve(self, goal: Goal, rest: Tuple[Goal, ...],
                 bindings: Bindings, depth: int) -> Iterator[_State]:
        """Yield the successor states of resolving one goal"""
        if self.trace:
            logger.debug("[%d] %s", depth, goal.substitute(bindings))

        if goal.negated:
            # Negation as failure: the sub-search bindings are thrown away
            proofs = self._search((goal.positive(),), bindings, depth + 1, limit=1)
            if not proofs:
                yield _State(rest, bindings, depth + 1)
            return

        if is_builtin(goal.predicate):
            new_bindings = solve_builtin(goal, bindings, self.unifier)
            if new_bindings is not None:
                yield _State(rest, new_bindings, depth + 1)
            return

        # Snapshot so clauses added mid-search are not seen by this goal
        facts = tuple(self.kb.facts_for(goal.predicate))
        rules = tuple(self.kb.rules_for(goal.predicate))

        for fact in facts:
            if fact.arity != goal.arity:
                continue
            if not fact.is_ground:
                fact = self._rename_fact(fact, depth)
            new_bindings = self.unifier.unify_args(fact.args, goal.args, bindings)
            if new_bindings is not None:
                yield _State(rest, new_bindings, depth + 1)

        for rule in rules:
            if rule.head.arity != goal.arity:
                continue
            renamed = self.rename_rule(rule, depth)
            new_bindings = self.unifier.unify_args(renamed.head.args, goal.args, bindings)
            if new_bindings is not None:
                self.stats.rule_applications += 1
                yield _State(renamed.body + rest, new_bindings, depth + 1)

    # ------------------------------------------------------------------
    # Renaming
    # ------------------------------------------------------------------

    def _suffix(self, depth: int) -> int:
        if self.renaming == "depth":
            return depth
        self._applications += 1
        return self._applications

    def rename_rule(self, rule: Rule, depth: int) -> Rule:
        """A copy of the rule whose variables are private to this use"""
        return rule.rename_variables(self._suffix(depth))

    def _rename_fact(self, fact: Fact, depth: int) -> Fact:
        # Non-ground facts act as patterns, so each use gets fresh variables
        return fact.rename_variables(self._suffix(depth))

    # ------------------------------------------------------------------
    # Constraint propagation and goal ordering
    # ------------------------------------------------------------------

    def propagate_constraints(self, goals: Sequence[Goal],
                              bindings: Bindings) -> Optional[Bindings]:
        """
        Bind variables that only one fact can ever satisfy.

        A positive goal whose predicate has exactly one fact and no rules can
        only be proved by that fact, so its unbound arguments are bound to
        the fact's arguments up front. If the goal cannot unify with that
        fact the whole conjunction is unprovable and None is returned.
        """
        propagated = bindings
        for goal in goals:
            if goal.negated or is_builtin(goal.predicate):
                continue
            facts = self.kb.facts_for(goal.predicate)
            if len(facts) != 1 or self.kb.rule_count_for(goal.predicate):
                continue
            fact = facts[0]
            if fact.arity != goal.arity:
                return None
            if not fact.is_ground:
                continue
            if not any(isinstance(resolve_term(arg, propagated), Variable) for arg in goal.args):
                continue
            result = self.unifier.unify_args(fact.args, goal.args, propagated)
            if result is None:
                return None
            propagated = result
        return propagated

    def goal_score(self, goal: Goal, bindings: Bindings) -> float:
        """10 per unbound variable argument plus the number of candidate clauses"""
        unbound = sum(1 for arg in goal.args
                      if isinstance(resolve_term(arg, bindings), Variable))
        candidates = self.kb.fact_count_for(goal.predicate) + self.kb.rule_count_for(goal.predicate)
        return UNBOUND_VARIABLE_WEIGHT * unbound + candidates

    def select_most_constrained_goal(self, goals: Sequence[Goal],
                                     bindings: Bindings) -> int:
        """
        Index of the lowest-scoring goal that is ready to run.

        Ties keep the written order. If no goal is ready the first goal is
        taken, as the baseline would.
        """
        best_index = None
        best_score = math.inf
        for i, goal in enumerate(goals):
            if not self._is_ready(goal, bindings):
                continue
            score = self.goal_score(goal, bindings)
            if score < best_score:
                best_score = score
                best_index = i
        return 0 if best_index is None else best_index

    def _is_ready(self, goal: Goal, bindings: Bindings) -> bool:
        """
        Whether running the goal now gives the same answers as running it
        later. Negations and numeric built-ins need their inputs bound.
        """
        if goal.negated:
            return not goal.substitute(bindings).get_variables()
        if goal.predicate in COMPARISONS and goal.arity == 2:
            return not goal.substitute(bindings).get_variables()
        if goal.predicate == "is" and goal.arity == 2:
            return goal.args[1].substitute(bindings).is_ground
        return True
