from types import SimpleNamespace

import numpy as np
import pytest

from lpbridge.errors import MissingObjective, MissingVariableName, NotSimplified, SolverError
from lpbridge.expr import ExpressionArena
from lpbridge.problem import Constraint, Problem
from lpbridge.schemas import Variable
from lpbridge.solvers import HighsSolver
from lpbridge.solvers.highs import problem_to_highs, solution_from_highs


def make_problem() -> Problem:
    a = Variable(name="a")
    b = Variable(name="b")
    problem = Problem("One Problem", "max")
    problem += 10 * a + 20 * b
    problem += (500 * a - 1000 * b).ge(10000)
    problem += a.le(b)
    return problem


def test_solve_free_variables():
    problem = make_problem()
    solution = HighsSolver().solve(problem)

    assert solution.status == "optimal"
    assert set(solution.values) == {"a", "b"}
    assert solution.values["a"] == pytest.approx(-20.0, abs=1e-6)
    assert solution.values["b"] == pytest.approx(-20.0, abs=1e-6)
    assert solution.eval(problem.objective) == pytest.approx(-600.0, abs=1e-6)


def test_problem_is_not_mutated():
    problem = make_problem()
    objective_nodes = problem.objective.nodes
    constraint_nodes = [c.lhs.nodes for c in problem.constraints]

    HighsSolver().solve(problem)

    assert problem.objective.nodes == objective_nodes
    assert [c.lhs.nodes for c in problem.constraints] == constraint_nodes


def test_translation_columns_and_rows():
    x = Variable(name="x", lb=0.0, ub=4.0)
    y = Variable(name="y", lb=1.0)
    problem = Problem("p", "min")
    problem += 3 * x + 2 * y
    problem.add_constraint(x + 2 * y + 1, ">=", 8)
    problem.add_constraint(x + Variable(name="z", lb=5.0), "==", 6)

    c, A_ub, b_ub, A_eq, b_eq, bounds, names = problem_to_highs(problem)

    assert names == ["x", "y", "z"]
    np.testing.assert_allclose(c, [3.0, 2.0, 0.0])
    np.testing.assert_allclose(A_ub, [[-1.0, -2.0, 0.0]])
    np.testing.assert_allclose(b_ub, [-7.0])
    np.testing.assert_allclose(A_eq, [[1.0, 0.0, 1.0]])
    np.testing.assert_allclose(b_eq, [6.0])
    # constraint-only columns start free
    assert bounds == [(0.0, 4.0), (1.0, None), (None, None)]


def test_non_literal_rhs_is_modeling_error():
    a = Variable(name="a")
    b = Variable(name="b")
    problem = Problem("p")
    problem += a + b
    problem.add_constraint(
        Constraint(lhs=ExpressionArena.from_value(a), cmp="<=", rhs=ExpressionArena.from_value(b))
    )

    with pytest.raises(NotSimplified):
        HighsSolver().solve(problem)


def test_missing_objective():
    with pytest.raises(MissingObjective):
        HighsSolver().solve(Problem("p"))


def test_infeasible_problem():
    a = Variable(name="a")
    problem = Problem("p", "max")
    problem += a
    problem += a.ge(1)
    problem += a.le(0)

    solution = HighsSolver().solve(problem)

    assert solution.status == "infeasible"
    assert solution.values == {}


def test_crossed_bounds_are_infeasible():
    problem = Problem("p")
    problem += Variable(name="x", lb=5.0) + Variable(name="x", ub=1.0)

    assert HighsSolver().solve(problem).status == "infeasible"


def test_outcome_mapping():
    names = ["a", "b"]
    optimal = solution_from_highs(SimpleNamespace(status=0, x=np.array([1.0, 2.0]), message=""), names)
    assert optimal.status == "optimal"
    assert optimal.values == {"a": 1.0, "b": 2.0}

    for code, status in ((2, "infeasible"), (3, "unbounded")):
        outcome = solution_from_highs(SimpleNamespace(status=code, x=None, message=""), names)
        assert outcome.status == status
        assert outcome.values == {}

    with pytest.raises(SolverError):
        solution_from_highs(SimpleNamespace(status=1, x=None, message="iteration limit"), names)


def test_column_name_mismatch():
    res = SimpleNamespace(status=0, x=np.array([1.0, 2.0, 3.0]), message="")
    with pytest.raises(MissingVariableName):
        solution_from_highs(res, ["a", "b"])


def test_unbounded_problem():
    a = Variable(name="a")
    problem = Problem("p", "max")
    problem += a
    problem += a.ge(0)

    solution = HighsSolver().solve(problem)

    assert solution.status == "unbounded"
    assert solution.values == {}


def constant_problem(lhs: float, cmp: str, rhs: float) -> Problem:
    problem = Problem("constants")
    problem += ExpressionArena.from_value(5)
    problem.add_constraint(
        Constraint(lhs=ExpressionArena.from_value(lhs), cmp=cmp, rhs=ExpressionArena.from_value(rhs))
    )
    return problem


def test_violated_constant_constraint_is_infeasible():
    assert HighsSolver().solve(constant_problem(0, ">=", 1)).status == "infeasible"
    assert HighsSolver().solve(constant_problem(2, "<=", 1)).status == "infeasible"
    assert HighsSolver().solve(constant_problem(1, "==", 3)).status == "infeasible"


def test_satisfied_constant_constraint_is_optimal():
    solution = HighsSolver().solve(constant_problem(1, ">=", 0))

    assert solution.status == "optimal"
    assert solution.values == {}
    assert HighsSolver().solve(constant_problem(3, "==", 3)).status == "optimal"
