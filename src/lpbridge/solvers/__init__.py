"""Solver backends sharing the :class:`SolverBackend` contract."""

from typing import Optional

from ..config import SolverConfig
from .base import ExternalProcessSolver, SolutionFileParser, SolverBackend
from .glpk import GlpkSolver
from .gurobi import GurobiSolver
from .highs import HighsSolver

BACKENDS = ("highs", "glpk", "gurobi")


def get_solver(name: Optional[str] = None, config: Optional[SolverConfig] = None) -> SolverBackend:
    config = config or SolverConfig()
    name = (name or config.default_backend).lower()
    if name == "highs":
        return HighsSolver()
    if name == "glpk":
        return GlpkSolver(command_name=config.glpk_command, workdir=config.workdir)
    if name == "gurobi":
        return GurobiSolver(command_name=config.gurobi_command, workdir=config.workdir)
    raise ValueError(f"Unknown backend {name!r}; expected one of {', '.join(BACKENDS)}")


__all__ = [
    "BACKENDS",
    "ExternalProcessSolver",
    "GlpkSolver",
    "GurobiSolver",
    "HighsSolver",
    "SolutionFileParser",
    "SolverBackend",
    "get_solver",
]
