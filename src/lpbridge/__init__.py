"""Symbolic linear programs dispatched to interchangeable solver backends."""

from .errors import (
    LpBridgeError,
    ModelingError,
    SolutionFormatError,
    SolverError,
    SolverProcessError,
)
from .expr import ExpressionArena, decompose, decompose_expression, lp_sum, simplify
from .problem import Constraint, Problem
from .schemas import Solution, Status, Variable
from .solvers import GlpkSolver, GurobiSolver, HighsSolver, get_solver

__all__ = [
    "Constraint",
    "ExpressionArena",
    "GlpkSolver",
    "GurobiSolver",
    "HighsSolver",
    "LpBridgeError",
    "ModelingError",
    "Problem",
    "Solution",
    "SolutionFormatError",
    "SolverError",
    "SolverProcessError",
    "Status",
    "Variable",
    "decompose",
    "decompose_expression",
    "get_solver",
    "lp_sum",
    "simplify",
]
