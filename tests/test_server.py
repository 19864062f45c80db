import json
from pathlib import Path

import pytest

from lpbridge.schemas import LPModel
from lpbridge.server import build_problem, list_backends, solve_lp


def load_example(name: str) -> LPModel:
    data = json.loads(Path(__file__).parent.parent.joinpath("examples", name).read_text())
    return LPModel.model_validate(data)


def test_build_problem_from_json():
    problem = build_problem(load_example("small_lp.json"))

    assert problem.sense == "min"
    assert [c.name for c in problem.constraints] == ["c1", "c2"]
    assert {v.name: v.lb for v in problem.variables()} == {"x": 0.0, "y": 0.0}


def test_unknown_variable_is_rejected():
    model = load_example("small_lp.json")
    model.objective.terms[0].var = "w"
    with pytest.raises(ValueError):
        build_problem(model)


def test_solve_lp_tool(monkeypatch):
    monkeypatch.delenv("LPBRIDGE_BACKEND", raising=False)
    result = solve_lp(load_example("small_lp.json"))

    assert result["status"] == "optimal"
    assert result["values"]["x"] == pytest.approx(0.8, rel=1e-6)
    assert result["values"]["y"] == pytest.approx(3.6, rel=1e-6)
    assert "problem" not in result


def test_list_backends():
    assert list_backends() == ["highs", "glpk", "gurobi"]
