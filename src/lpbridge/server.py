from __future__ import annotations

import os
import sys
from typing import Dict

from mcp.server.fastmcp import FastMCP

from .config import SolverConfig, configure_logging
from .expr.arena import ExpressionArena, lp_sum
from .problem import Problem
from .schemas import LinearExpr, LPModel, Variable
from .solvers import BACKENDS, get_solver

app = FastMCP("lpbridge")


def build_problem(model: LPModel) -> Problem:
    """Turn the JSON model into a symbolic :class:`Problem`."""
    declared: Dict[str, Variable] = {var.name: var for var in model.variables}
    problem = Problem(model.name, model.sense)
    problem += _expression(model.objective, declared, "objective")
    for cons in model.constraints:
        problem.add_constraint(
            _expression(cons.lhs, declared, f"constraint '{cons.name}'"),
            cons.cmp,
            cons.rhs,
            name=cons.name,
        )
    return problem


def _expression(expr: LinearExpr, declared: Dict[str, Variable], where: str) -> ExpressionArena:
    terms = []
    for term in expr.terms:
        if term.var not in declared:
            raise ValueError(f"{where.capitalize()} references unknown variable '{term.var}'")
        terms.append(term.coef * declared[term.var])
    if expr.constant:
        terms.append(expr.constant)
    return lp_sum(terms)


@app.tool()
def solve_lp(model: LPModel, backend: str | None = None) -> dict:
    """Solve a linear program on the chosen backend (highs, glpk or gurobi)."""
    solver = get_solver(backend, SolverConfig.from_env())
    solution = solver.solve(build_problem(model))
    return solution.model_dump()


@app.tool()
def list_backends() -> list:
    """Names accepted by the ``backend`` argument of solve_lp."""
    return list(BACKENDS)


if __name__ == "__main__":
    configure_logging(SolverConfig.from_env().log_level)
    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    if transport == "stdio" or "--stdio" in sys.argv:
        app.run(transport="stdio")
    else:
        app.settings.host = "0.0.0.0"
        app.settings.port = int(os.environ.get("PORT", "8081"))
        app.run(transport="streamable-http")
