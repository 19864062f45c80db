import math

import pytest

from lpbridge.errors import UnsimplifiedMultiplication, UnsupportedExpression
from lpbridge.expr import CompExpr, ExpressionArena, decompose, decompose_expression, lp_sum
from lpbridge.schemas import Variable


def test_decompose_nested_expression():
    a = Variable(name="a")
    b = Variable(name="b")
    expr = (4 * (3 * a - b * 2 + a)) * 1 + b

    decomposed = decompose_expression(expr)

    assert decomposed.coefficients() == {"a": 16.0, "b": -7.0}
    assert decomposed.constant == 0.0


def test_decompose_expression_leaves_input_untouched():
    a = Variable(name="a")
    expr = a * 2 + 0
    before = expr.nodes
    decompose_expression(expr)
    assert expr.nodes == before


def test_decompose_large_sum():
    count = 1000
    expr = lp_sum(Variable(name=f"v{i}") * 2 for i in range(count))

    decomposed = decompose_expression(expr)

    assert len(decomposed.variables) == count
    assert all(agg.coefficient == 2.0 for agg in decomposed.variables.values())


def test_bounds_are_intersected():
    first = Variable(name="x", lb=0.0, ub=10.0)
    second = Variable(name="x", lb=2.0, ub=20.0)

    aggregate = decompose_expression(first + second).variables["x"]

    assert aggregate.coefficient == 2.0
    assert (aggregate.lb, aggregate.ub) == (2.0, 10.0)


def test_unbounded_variable_keeps_infinite_bounds():
    aggregate = decompose_expression(3 * Variable(name="y")).variables["y"]
    assert aggregate.lb == -math.inf
    assert aggregate.ub == math.inf


def test_literals_collect_into_residual_constant():
    a = Variable(name="a")
    decomposed = decompose_expression(2 * (a + 3) - 1)
    assert decomposed.coefficients() == {"a": 2.0}
    assert decomposed.constant == pytest.approx(5.0)


def test_unsimplified_multiplication_is_rejected():
    arena = ExpressionArena()
    x = arena.add_variable(Variable(name="x"))
    two = arena.add_literal(2.0)
    arena.add_op("mul", x, two)

    with pytest.raises(UnsimplifiedMultiplication):
        decompose(arena)


def test_unknown_node_shape_is_unsupported():
    arena = ExpressionArena()
    x = arena.add_variable(Variable(name="x"))
    y = arena.add_variable(Variable(name="y"))
    root = arena.add_op("add", x, y)
    arena.replace(root, CompExpr.model_construct(op="div", lhs=x, rhs=y))

    with pytest.raises(UnsupportedExpression):
        decompose(arena)
