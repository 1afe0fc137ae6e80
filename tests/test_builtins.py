"""
Tests for the built-in predicates
"""
import pytest
from hornlog import atom, var, integer, real, string, compound, Goal
from hornlog.builtins import (
    solve_builtin, evaluate, make_number, is_builtin, ArithmeticFailure, BUILTIN_PREDICATES,
)


def goal(predicate, left, right):
    return Goal(predicate, [left, right])


class TestRegistry:

    def test_builtin_names(self):
        assert set(BUILTIN_PREDICATES) == {"=", "<", ">", "<=", ">=", "is"}
        assert is_builtin("is")
        assert not is_builtin("parent")


class TestUnifyBuiltin:
    """Test the = predicate"""

    def test_binds_variable(self):
        assert solve_builtin(goal("=", var("X"), atom("a")), {}) == {"X": atom("a")}

    def test_fails_on_mismatch(self):
        assert solve_builtin(goal("=", atom("a"), atom("b")), {}) is None

    def test_structures(self):
        result = solve_builtin(goal("=", compound("f", var("X")), compound("f", integer(1))), {})
        assert result == {"X": integer(1)}

    def test_wrong_arity_fails(self):
        assert solve_builtin(Goal("=", [atom("a")]), {}) is None


class TestComparisons:
    """Test the numeric comparisons"""

    @pytest.mark.parametrize("predicate,left,right,expected", [
        ("<", 1, 2, True),
        ("<", 2, 2, False),
        (">", 3, 2, True),
        ("<=", 2, 2, True),
        (">=", 1, 2, False),
    ])
    def test_integers(self, predicate, left, right, expected):
        result = solve_builtin(goal(predicate, integer(left), integer(right)), {})
        assert (result is not None) == expected

    def test_mixed_numbers(self):
        assert solve_builtin(goal("<", integer(1), real(1.5)), {}) == {}
        assert solve_builtin(goal(">=", real(2.0), integer(2)), {}) == {}

    def test_bound_variables_are_resolved(self):
        bindings = {"X": integer(10)}
        assert solve_builtin(goal(">", var("X"), integer(5)), bindings) is bindings

    def test_unbound_variable_fails(self):
        assert solve_builtin(goal("<", var("X"), integer(5)), {}) is None

    def test_non_numeric_fails(self):
        assert solve_builtin(goal("<", atom("a"), atom("b")), {}) is None
        assert solve_builtin(goal("<", string("1"), integer(2)), {}) is None


class TestArithmetic:
    """Test the is predicate"""

    def test_addition(self):
        result = solve_builtin(goal("is", var("X"), compound("+", integer(2), integer(3))), {})
        assert result == {"X": integer(5)}

    def test_nested_expression(self):
        expr = compound("+", integer(2), compound("*", integer(3), var("Y")))
        result = solve_builtin(goal("is", var("X"), expr), {"Y": integer(4)})
        assert result["X"] == integer(14)

    def test_whole_float_becomes_integer(self):
        assert make_number(4.0) == integer(4)
        assert make_number(2.5) == real(2.5)
        result = solve_builtin(goal("is", var("X"), compound("/", integer(6), integer(2))), {})
        assert result["X"] == integer(3)

    def test_fractional_division(self):
        result = solve_builtin(goal("is", var("X"), compound("/", integer(7), integer(2))), {})
        assert result["X"] == real(3.5)

    def test_check_mode(self):
        expr = compound("-", integer(5), integer(2))
        assert solve_builtin(goal("is", integer(3), expr), {}) == {}
        assert solve_builtin(goal("is", integer(4), expr), {}) is None

    def test_division_by_zero_fails(self):
        expr = compound("/", integer(1), integer(0))
        assert solve_builtin(goal("is", var("X"), expr), {}) is None

    def test_unbound_operand_fails(self):
        expr = compound("+", var("Y"), integer(1))
        assert solve_builtin(goal("is", var("X"), expr), {}) is None

    def test_unknown_operator(self):
        with pytest.raises(ArithmeticFailure):
            evaluate(compound("mod", integer(5), integer(2)), {})

    def test_non_numeric_leaf(self):
        with pytest.raises(ArithmeticFailure):
            evaluate(compound("+", atom("a"), integer(1)), {})

    def test_huge_integer_division_fails(self):
        expr = compound("/", integer(10 ** 400), integer(2))
        assert solve_builtin(goal("is", var("X"), expr), {}) is None

    def test_huge_integer_widened_to_float_fails(self):
        expr = compound("+", integer(10 ** 400), real(1.5))
        with pytest.raises(ArithmeticFailure, match="overflow"):
            evaluate(expr, {})
        assert solve_builtin(goal("is", var("X"), expr), {}) is None

    def test_large_integers_stay_exact(self):
        expr = compound("*", integer(10 ** 200), integer(10 ** 200))
        assert evaluate(expr, {}) == 10 ** 400
