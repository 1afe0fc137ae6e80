"""
Knowledge representation for hornlog

This module defines facts, goals, rules, and the knowledge base structure.
"""

from typing import Dict, Iterator, List, Set, Tuple, Union
from dataclasses import dataclass
from .terms import Term, Variable, Compound, Atom


def _format_literal(predicate: str, args: Tuple[Term, ...]) -> str:
    if not args:
        return predicate
    return f"{predicate}({', '.join(str(arg) for arg in args)})"


def renaming_for(names: Set[str], suffix: Union[int, str]) -> Dict[str, Term]:
    """
    Map each variable name to <name>#<suffix>. The parser never produces a
    name containing '#', so renamed clause variables cannot meet user ones.
    """
    return {name: Variable(f"{name}#{suffix}") for name in names}


@dataclass(frozen=True)
class Fact:
    """A predicate applied to arguments, asserted as true"""
    predicate: str
    args: Tuple[Term, ...]

    def __init__(self, predicate: str, args: Union[List[Term], Tuple[Term, ...]] = ()):
        if not predicate:
            raise ValueError("Fact predicate cannot be empty")
        object.__setattr__(self, 'predicate', predicate)
        object.__setattr__(self, 'args', tuple(args))
        # Checked once per fact; the evaluator asks on every lookup
        object.__setattr__(self, '_ground', all(arg.is_ground for arg in self.args))

    @property
    def arity(self) -> int:
        return len(self.args)

    @property
    def is_ground(self) -> bool:
        return self._ground

    def get_variables(self) -> Set[str]:
        """Get all variables in this fact"""
        variables = set()
        for arg in self.args:
            variables.update(arg.get_variables())
        return variables

    def substitute(self, bindings: Dict[str, Term]) -> 'Fact':
        """Apply substitutions to create a new fact"""
        return Fact(self.predicate, [arg.substitute(bindings) for arg in self.args])

    def rename_variables(self, suffix: Union[int, str]) -> 'Fact':
        """Copy of the fact with every variable renamed apart"""
        if self._ground:
            return self
        return self.substitute(renaming_for(self.get_variables(), suffix))

    def to_term(self) -> Term:
        """The fact as a single term: an atom for arity 0, else a compound"""
        if not self.args:
            return Atom(self.predicate)
        return Compound(self.predicate, self.args)

    @classmethod
    def from_term(cls, term: Term) -> 'Fact':
        if isinstance(term, Compound):
            return cls(term.functor, term.args)
        if isinstance(term, Atom):
            return cls(term.name)
        raise TypeError(f"Cannot build a fact from {term!r}")

    def __str__(self) -> str:
        return f"{_format_literal(self.predicate, self.args)}."


@dataclass(frozen=True)
class Goal:
    """One literal in a rule body or query"""
    predicate: str
    args: Tuple[Term, ...]
    negated: bool = False

    def __init__(self, predicate: str,
                 args: Union[List[Term], Tuple[Term, ...]] = (),
                 negated: bool = False):
        if not predicate:
            raise ValueError("Goal predicate cannot be empty")
        object.__setattr__(self, 'predicate', predicate)
        object.__setattr__(self, 'args', tuple(args))
        object.__setattr__(self, 'negated', negated)

    @property
    def arity(self) -> int:
        return len(self.args)

    def positive(self) -> 'Goal':
        """The same literal without negation"""
        if not self.negated:
            return self
        return Goal(self.predicate, self.args, False)

    def get_variables(self) -> Set[str]:
        variables = set()
        for arg in self.args:
            variables.update(arg.get_variables())
        return variables

    def substitute(self, bindings: Dict[str, Term]) -> 'Goal':
        return Goal(self.predicate, [arg.substitute(bindings) for arg in self.args], self.negated)

    @classmethod
    def from_fact(cls, fact: Fact, negated: bool = False) -> 'Goal':
        return cls(fact.predicate, fact.args, negated)

    def __str__(self) -> str:
        text = _format_literal(self.predicate, self.args)
        return f"not {text}" if self.negated else text


@dataclass(frozen=True)
class Rule:
    """Represents a rule - head holds when every body goal holds"""
    head: Fact
    body: Tuple[Goal, ...]  # Immutable tuple

    def __init__(self, head: Fact, body: Union[List[Goal], Tuple[Goal, ...]]):
        object.__setattr__(self, 'head', head)
        object.__setattr__(self, 'body', tuple(body))

    @property
    def predicate(self) -> str:
        return self.head.predicate

    def get_variables(self) -> Set[str]:
        """Get all variables in this rule"""
        variables = self.head.get_variables()
        for goal in self.body:
            variables.update(goal.get_variables())
        return variables

    def substitute(self, bindings: Dict[str, Term]) -> 'Rule':
        """Apply substitutions to create a new rule"""
        return Rule(self.head.substitute(bindings),
                    [goal.substitute(bindings) for goal in self.body])

    def rename_variables(self, suffix: Union[int, str]) -> 'Rule':
        """
        Rename every variable to <name>#<suffix>, consistently across
        head and body, so the copy shares no variables with the caller.
        """
        renaming = renaming_for(self.get_variables(), suffix)
        if not renaming:
            return self
        return self.substitute(renaming)

    def __str__(self) -> str:
        if not self.body:
            return str(self.head)
        body_str = ", ".join(str(goal) for goal in self.body)
        return f"{_format_literal(self.head.predicate, self.head.args)} :- {body_str}."


class KnowledgeBase:
    """Facts and rules grouped by predicate name, plus known signatures"""

    def __init__(self):
        # Insertion ordered; duplicates are kept on purpose
        self.facts: Dict[str, List[Fact]] = {}
        self.rules: Dict[str, List[Rule]] = {}
        self.predicates: Dict[str, int] = {}

    def add_fact(self, fact: Fact) -> None:
        """Append a fact under its predicate"""
        self.facts.setdefault(fact.predicate, []).append(fact)

    def remove_fact(self, fact: Fact) -> int:
        """
        Remove every fact structurally equal to the given one.

        Returns:
            How many entries were removed (0 when nothing matched)
        """
        existing = self.facts.get(fact.predicate)
        if not existing:
            return 0
        kept = [f for f in existing if f != fact]
        removed = len(existing) - len(kept)
        existing[:] = kept
        return removed

    def add_rule(self, rule: Rule) -> None:
        """Append a rule under its head predicate"""
        self.rules.setdefault(rule.head.predicate, []).append(rule)

    def register_predicate(self, name: str, arity: int) -> None:
        """Record (or overwrite) a predicate signature"""
        self.predicates[name] = arity

    def facts_for(self, predicate: str) -> List[Fact]:
        return self.facts.get(predicate, [])

    def rules_for(self, predicate: str) -> List[Rule]:
        return self.rules.get(predicate, [])

    def fact_count_for(self, predicate: str) -> int:
        return len(self.facts.get(predicate, ()))

    def rule_count_for(self, predicate: str) -> int:
        return len(self.rules.get(predicate, ()))

    def all_facts(self) -> Iterator[Fact]:
        for facts in self.facts.values():
            yield from facts

    def all_rules(self) -> Iterator[Rule]:
        for rules in self.rules.values():
            yield from rules

    @property
    def facts_count(self) -> int:
        return sum(len(facts) for facts in self.facts.values())

    @property
    def rules_count(self) -> int:
        return sum(len(rules) for rules in self.rules.values())

    def clear(self) -> None:
        """Clear all facts, rules and signatures"""
        self.facts.clear()
        self.rules.clear()
        self.predicates.clear()

    def __len__(self) -> int:
        """Total number of facts and rules"""
        return self.facts_count + self.rules_count

    def __str__(self) -> str:
        """String representation of the knowledge base"""
        lines = []

        facts = list(self.all_facts())
        if facts:
            lines.append("Facts:")
            for fact in facts:
                lines.append(f"  {fact}")

        rules = list(self.all_rules())
        if rules:
            if lines:
                lines.append("")
            lines.append("Rules:")
            for rule in rules:
                lines.append(f"  {rule}")

        return "\n".join(lines) if lines else "Empty knowledge base"
