from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from scipy.optimize import linprog

from ..errors import MissingObjective, MissingVariableName, NotSimplified, SolverError
from ..expr.arena import LitVal
from ..expr.decompose import decompose_expression
from ..expr.simplify import simplify
from ..problem import Problem
from ..schemas import Solution
from .base import SolverBackend

logger = logging.getLogger(__name__)

Bound = Tuple[Optional[float], Optional[float]]

_CONSTANT_TOL = 1e-9


class HighsSolver(SolverBackend):
    """In-process solve with SciPy's ``linprog(method="highs")``."""

    name = "highs"

    def __init__(self, options: Optional[Dict[str, Any]] = None) -> None:
        self.options = dict(options or {})

    def solve(self, problem: Problem) -> Solution:
        c, A_ub, b_ub, A_eq, b_eq, bounds, names = problem_to_highs(problem)
        if not names:
            # only constant rows remain: A_ub @ x <= b_ub reduces to 0 <= b_ub
            violated = np.any(b_ub < -_CONSTANT_TOL) or np.any(np.abs(b_eq) > _CONSTANT_TOL)
            return Solution.with_problem("infeasible" if violated else "optimal", {}, problem)
        if any(lb is not None and ub is not None and lb > ub for lb, ub in bounds):
            return Solution.with_problem("infeasible", {}, problem)

        sense_factor = 1.0 if problem.sense == "min" else -1.0
        res = linprog(
            c * sense_factor,
            A_ub=A_ub if A_ub.size else None,
            b_ub=b_ub if b_ub.size else None,
            A_eq=A_eq if A_eq.size else None,
            b_eq=b_eq if b_eq.size else None,
            bounds=bounds,
            method="highs",
            options=self.options or None,
        )
        logger.debug("HiGHS finished with status %s: %s", res.status, res.message)
        return solution_from_highs(res, names, problem)


def problem_to_highs(
    problem: Problem,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray, List[Bound], List[str]]:
    """
    Translate a problem into ``linprog`` arrays.

    Columns are created from the objective first, in decomposition order,
    then from constraint terms the objective did not mention (cost 0, free).
    The returned name list is indexed by column.
    """

    if problem.objective is None:
        raise MissingObjective("Missing objective")

    names: List[str] = []
    columns: Dict[str, int] = {}
    costs: List[float] = []
    bounds: List[Bound] = []

    def add_column(name: str, cost: float, bound: Bound) -> int:
        columns[name] = len(names)
        names.append(name)
        costs.append(cost)
        bounds.append(bound)
        return columns[name]

    objective = decompose_expression(problem.objective)
    for name, aggregate in objective.variables.items():
        add_column(name, aggregate.coefficient, (_finite(aggregate.lb), _finite(aggregate.ub)))

    upper_rows: List[Tuple[Dict[int, float], float]] = []
    equality_rows: List[Tuple[Dict[int, float], float]] = []
    for position, constraint in enumerate(problem.constraints, start=1):
        rhs = simplify(constraint.rhs.copy())
        constant = rhs.node_at(rhs.root_index())
        if not isinstance(constant, LitVal):
            label = constraint.name or f"#{position}"
            raise NotSimplified(f"Right-hand side of constraint {label} is not properly simplified")

        lhs = decompose_expression(constraint.lhs)
        row: Dict[int, float] = {}
        for name, aggregate in lhs.variables.items():
            idx = columns.get(name)
            if idx is None:
                idx = add_column(name, 0.0, (None, None))
            row[idx] = row.get(idx, 0.0) + aggregate.coefficient
        value = constant.value - lhs.constant

        if constraint.cmp == "<=":
            upper_rows.append((row, value))
        elif constraint.cmp == ">=":
            upper_rows.append(({idx: -coef for idx, coef in row.items()}, -value))
        else:
            equality_rows.append((row, value))

    n = len(names)
    A_ub, b_ub = _densify(upper_rows, n)
    A_eq, b_eq = _densify(equality_rows, n)
    return np.array(costs, dtype=float), A_ub, b_ub, A_eq, b_eq, bounds, names


def solution_from_highs(res: Any, names: List[str], problem: Optional[Problem] = None) -> Solution:
    if res.status == 0:
        values = np.asarray(res.x, dtype=float)
        if len(values) != len(names):
            raise MissingVariableName(
                f"HiGHS returned {len(values)} columns for {len(names)} named variables"
            )
        return Solution.with_problem(
            "optimal", {name: float(value) for name, value in zip(names, values)}, problem
        )
    if res.status == 2:
        return Solution.with_problem("infeasible", {}, problem)
    if res.status == 3:
        return Solution.with_problem("unbounded", {}, problem)
    raise SolverError(f"HiGHS did not reach a conclusion (status {res.status}): {res.message}")


def _finite(bound: float) -> Optional[float]:
    return None if math.isinf(bound) else bound


def _densify(rows: List[Tuple[Dict[int, float], float]], n: int) -> Tuple[np.ndarray, np.ndarray]:
    if not rows:
        return np.empty((0, n)), np.empty(0)
    A = np.zeros((len(rows), n))
    b = np.zeros(len(rows))
    for i, (row, value) in enumerate(rows):
        for idx, coef in row.items():
            A[i, idx] = coef
        b[i] = value
    return A, b
