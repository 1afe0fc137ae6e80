"""
hornlog - an embeddable Prolog-style logic engine

Stores facts and rules and answers queries against them with SLD
resolution: unification with occurs check, exhaustive backtracking search,
negation as failure, arithmetic and comparison built-ins, and
constraint-guided goal ordering.
"""

from .terms import Term, Variable, Atom, Integer, Float, String, Compound
from .factories import atom, var, integer, real, string, compound, term_from_value
from .knowledge import Fact, Goal, Rule, KnowledgeBase
from .unification import Unifier, unify, unify_terms
from .evaluator import PrologEvaluator, Solution
from .parser import parse_term, parse_fact, parse_rule, parse_query, parse_program
from .engine import LogicEngine, create_family_engine
from .runtime import LogicRuntime, RuntimeStats
from .config import HornlogConfig
from .errors import LogicError, ParseError, DepthExceededError, ValidationError, FeatureDisabledError

__version__ = "0.1.0"
__all__ = [
    "Term", "Variable", "Atom", "Integer", "Float", "String", "Compound",
    "atom", "var", "integer", "real", "string", "compound", "term_from_value",
    "Fact", "Goal", "Rule", "KnowledgeBase",
    "Unifier", "unify", "unify_terms", "PrologEvaluator", "Solution",
    "parse_term", "parse_fact", "parse_rule", "parse_query", "parse_program",
    "LogicEngine", "create_family_engine", "LogicRuntime", "RuntimeStats",
    "HornlogConfig",
    "LogicError", "ParseError", "DepthExceededError", "ValidationError", "FeatureDisabledError",
]
