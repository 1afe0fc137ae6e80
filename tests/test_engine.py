"""
Tests for the hornlog engine
"""
import logging

import pytest
from hornlog import (
    LogicEngine, HornlogConfig, create_family_engine, atom, var, Fact, Goal,
    ParseError, DepthExceededError, ValidationError, LogicError,
)
from hornlog.config import QueryConfig, ValidationConfig


@pytest.fixture
def engine():
    engine = LogicEngine()
    engine.initialize()
    return engine


@pytest.fixture
def family():
    return create_family_engine()


class TestLifecycle:
    """Test initialize / shutdown"""

    def test_initialize_registers_builtins(self, engine):
        assert engine.initialized
        for name in ("=", "<", ">", "<=", ">=", "is"):
            assert engine.predicates[name] == 2

    def test_initialize_is_idempotent(self, engine):
        engine.assert_fact("p(a).")
        engine.initialize()
        assert engine.facts_count() == 1
        assert engine.predicates["is"] == 2

    def test_shutdown_clears_everything(self, family):
        family.shutdown()
        assert not family.initialized
        assert family.facts_count() == 0
        assert family.rules_count() == 0
        assert family.predicates == {}

    def test_max_depth_from_config(self):
        config = HornlogConfig(query=QueryConfig(max_depth=42))
        assert LogicEngine(config).max_depth == 42


class TestAssertAndRetract:
    """Test knowledge base updates through text"""

    def test_assert_fact(self, engine):
        engine.assert_fact("parent(john, mary).")
        assert engine.facts_count() == 1
        assert engine.predicates["parent"] == 2

    def test_assert_facts(self, engine):
        engine.assert_facts(["a(1).", "a(2).", "b(x)."])
        assert engine.facts_count() == 3

    def test_assert_bad_fact(self, engine):
        with pytest.raises(ParseError):
            engine.assert_fact("parent(john, mary")
        assert engine.facts_count() == 0

    def test_retract_removes_every_copy(self, engine):
        engine.assert_facts(["p(a).", "p(a).", "p(b)."])
        assert engine.retract_fact("p(a).") == 2
        assert engine.solve_query("p(X)") == [{"X": "b"}]

    def test_retract_missing_returns_zero(self, engine):
        assert engine.retract_fact("p(zzz).") == 0

    def test_add_rule(self, engine):
        engine.add_rule("grandparent(X, Z) :- parent(X, Y), parent(Y, Z).")
        assert engine.rules_count() == 1
        assert engine.predicates["grandparent"] == 2

    def test_add_rule_without_neck(self, engine):
        with pytest.raises(ParseError, match="missing ':-'"):
            engine.add_rule("grandparent(X, Z).")

    def test_consult(self, engine):
        engine.consult("""
            % colours
            colour(red).
            colour(green).
            warm(C) :- colour(C), C = red.
        """)
        assert engine.facts_count() == 2
        assert engine.rules_count() == 1
        assert engine.solve_query("warm(C)") == [{"C": "red"}]


class TestQueries:
    """Test query answers end to end"""

    def test_grandparent(self, family):
        assert family.solve_query("grandparent(john, Z).") == [{"Z": "susan"}]

    def test_ground_query(self, family):
        assert family.solve_query("parent(john, mary).") == [{}]

    def test_failed_query(self, family):
        assert family.solve_query("parent(susan, X).") == []

    def test_underscore_numbered_variable(self, family):
        assert family.solve_query("grandparent(Y_1, Z).") == [{"Y_1": "john", "Z": "susan"}]

    def test_negation(self, engine):
        engine.assert_fact("p(a).")
        assert len(engine.solve_query("not p(b)")) == 1
        assert len(engine.solve_query("not p(a)")) == 0

    def test_arithmetic(self, engine):
        assert engine.solve_query("X is 2 + 3") == [{"X": "5"}]
        assert engine.solve_query("X is 7 / 2") == [{"X": "3.5"}]

    def test_arithmetic_overflow_fails(self, engine):
        big = " * ".join(["9223372036854775807"] * 18)
        assert engine.solve_query(f"X is {big} / 2") == []

    def test_duplicate_facts(self, engine):
        engine.assert_facts(["p(a).", "p(a)."])
        assert engine.solve_query("p(a)") == [{}, {}]

    def test_depth_exceeded(self, engine):
        engine.add_rule("loop(X) :- loop(X).")
        with pytest.raises(DepthExceededError):
            engine.solve_query("loop(a)")

    def test_bad_query(self, engine):
        with pytest.raises(ParseError):
            engine.solve_query("parent(X")
        with pytest.raises(LogicError):
            engine.solve_query("")

    def test_multiple_variables_in_order(self, family):
        results = family.solve_query("parent(P, C)")
        assert results == [
            {"P": "john", "C": "mary"},
            {"P": "john", "C": "tom"},
            {"P": "mary", "C": "susan"},
        ]
        assert list(results[0]) == ["P", "C"]

    def test_strings_and_numbers_render(self, engine):
        engine.assert_fact('item("widget", 2.5, 3).')
        assert engine.solve_query("item(N, P, Q)") == [{"N": '"widget"', "P": "2.5", "Q": "3"}]

    def test_ask(self, family):
        assert family.ask("parent(john, mary)")
        assert not family.ask("parent(mary, john)")

    def test_baseline_strategy(self):
        config = HornlogConfig(query=QueryConfig(strategy="baseline"))
        engine = LogicEngine(config)
        engine.initialize()
        engine.consult("parent(a, b). parent(b, c). gp(X, Z) :- parent(X, Y), parent(Y, Z).")
        assert engine.solve_query("gp(a, Z)") == [{"Z": "c"}]


class TestStructuredInterface:

    def test_clause_objects(self, engine):
        engine.add_fact_clause(Fact("likes", [atom("mary"), atom("wine")]))
        solutions = engine.query([Goal("likes", [var("Who"), atom("wine")])])
        assert solutions[0].resolved("Who") == atom("mary")

    def test_retract_clause(self, engine):
        fact = Fact("likes", [atom("mary"), atom("wine")])
        engine.add_fact_clause(fact)
        assert engine.retract_fact_clause(fact) == 1
        assert engine.query([Goal("likes", [var("X"), var("Y")])]) == []


class TestCounters:

    def test_queries_executed(self, family):
        family.solve_query("parent(john, X)")
        family.solve_query("parent(nobody, X)")
        assert family.queries_executed() == 2

    def test_failed_parse_still_counted(self, engine):
        with pytest.raises(ParseError):
            engine.solve_query("???")
        assert engine.queries_executed() == 1

    def test_string_summary(self, family):
        assert str(family) == "LogicEngine: 3 facts, 1 rules"


class TestValidation:
    """Test lenient and strict clause validation"""

    def test_unsafe_rule_accepted_with_warning(self, engine, caplog):
        with caplog.at_level(logging.WARNING, logger="hornlog.engine"):
            engine.add_rule("p(X, Y) :- q(X).")
        assert engine.rules_count() == 1
        assert "Unsafe rule" in caplog.text

    def test_unsafe_rule_rejected_in_strict_mode(self):
        engine = LogicEngine(HornlogConfig(validation=ValidationConfig(strict=True)))
        engine.initialize()
        with pytest.raises(ValidationError):
            engine.add_rule("p(X, Y) :- q(X).")
        assert engine.rules_count() == 0

    def test_non_ground_fact_rejected_in_strict_mode(self):
        engine = LogicEngine(HornlogConfig(validation=ValidationConfig(strict=True)))
        engine.initialize()
        with pytest.raises(ValidationError, match="not ground"):
            engine.assert_fact("likes(X, wine).")

    def test_arity_mismatch_rejected_in_strict_mode(self):
        engine = LogicEngine(HornlogConfig(validation=ValidationConfig(strict=True)))
        engine.initialize()
        engine.assert_fact("parent(a, b).")
        with pytest.raises(ValidationError, match="Arity mismatch"):
            engine.assert_fact("parent(a).")

    def test_non_ground_fact_usable_when_lenient(self, engine):
        engine.assert_fact("likes(X, wine).")
        assert engine.solve_query("likes(mary, W)") == [{"W": "wine"}]


class TestLogging:

    def test_query_logged_in_debug_mode(self, family, caplog):
        family.set_debug(True)
        with caplog.at_level(logging.INFO, logger="hornlog.engine"):
            family.solve_query("grandparent(john, Z)")
        assert "Query executed: grandparent(john, Z)" in caplog.text
        assert "Z = susan" in caplog.text

    def test_clause_change_logged(self, engine, caplog):
        with caplog.at_level(logging.DEBUG, logger="hornlog.engine"):
            engine.assert_fact("p(a).")
        records = [r for r in caplog.records if getattr(r, "extra_fields", None)]
        assert records[0].extra_fields["event_type"] == "clause_change"
