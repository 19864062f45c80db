from pathlib import Path

import pytest

from lpbridge.config import SolverConfig
from lpbridge.solvers import GlpkSolver, GurobiSolver, HighsSolver, get_solver


def test_defaults():
    config = SolverConfig()
    assert config.glpk_command == "glpsol"
    assert config.gurobi_command == "gurobi_cl"
    assert config.default_backend == "highs"


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("LPBRIDGE_GLPK_COMMAND", "/usr/local/bin/glpsol")
    monkeypatch.setenv("LPBRIDGE_WORKDIR", str(tmp_path))
    monkeypatch.setenv("LPBRIDGE_BACKEND", "glpk")

    config = SolverConfig.from_env()

    assert config.glpk_command == "/usr/local/bin/glpsol"
    assert config.workdir == Path(tmp_path)
    solver = get_solver(config=config)
    assert isinstance(solver, GlpkSolver)
    assert solver.command_name == "/usr/local/bin/glpsol"
    assert solver.workdir == Path(tmp_path)


def test_get_solver_by_name():
    assert isinstance(get_solver("highs"), HighsSolver)
    assert isinstance(get_solver("Gurobi"), GurobiSolver)
    with pytest.raises(ValueError):
        get_solver("cplex")
