"""Export a :class:`~lpbridge.problem.Problem` to the CPLEX LP text format."""

from __future__ import annotations

import math
import re
from pathlib import Path
from typing import Dict, List, Tuple, Union

from .errors import MissingObjective, ModelingError, NotSimplified
from .expr.decompose import Decomposition, decompose_expression
from .problem import Problem

_LP_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\[\]]*$")
_COMPARATORS = {"<=": "<=", ">=": ">=", "==": "="}


def write_lp(problem: Problem, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(to_lp_string(problem))
    return path


def to_lp_string(problem: Problem) -> str:
    if problem.objective is None:
        raise MissingObjective(f"Problem {problem.name!r} has no objective")

    objective = decompose_expression(problem.objective)
    bounds: Dict[str, Tuple[float, float]] = {}
    _merge_bounds(bounds, objective)

    lines: List[str] = [f"\\ {problem.name}", ""]
    lines.append("Maximize" if problem.sense == "max" else "Minimize")
    lines.append(f"  obj: {_format_terms(objective, with_constant=True)}")
    lines.append("Subject To")
    for position, constraint in enumerate(problem.constraints, start=1):
        lhs = decompose_expression(constraint.lhs)
        rhs = decompose_expression(constraint.rhs)
        if rhs.variables:
            raise NotSimplified(
                f"Right-hand side of constraint {position} does not reduce to a constant"
            )
        _merge_bounds(bounds, lhs)
        name = _check_name(constraint.name or f"c{position}")
        value = rhs.constant - lhs.constant
        lines.append(
            f"  {name}: {_format_terms(lhs, with_constant=False)} "
            f"{_COMPARATORS[constraint.cmp]} {_number(value)}"
        )

    lines.append("Bounds")
    for name, (lb, ub) in bounds.items():
        if math.isinf(lb) and math.isinf(ub):
            lines.append(f"  {name} free")
        elif math.isinf(ub):
            lines.append(f"  {name} >= {_number(lb)}")
        elif math.isinf(lb):
            lines.append(f"  -inf <= {name} <= {_number(ub)}")
        else:
            lines.append(f"  {_number(lb)} <= {name} <= {_number(ub)}")
    lines.append("End")
    return "\n".join(lines) + "\n"


def _merge_bounds(bounds: Dict[str, Tuple[float, float]], decomposition: Decomposition) -> None:
    for name, aggregate in decomposition.variables.items():
        _check_name(name)
        lb, ub = bounds.get(name, (-math.inf, math.inf))
        bounds[name] = (max(lb, aggregate.lb), min(ub, aggregate.ub))


def _check_name(name: str) -> str:
    if not _LP_NAME.match(name):
        raise ModelingError(f"{name!r} is not a valid LP-format name")
    return name


def _number(value: float) -> str:
    return f"{value:.17g}"


def _format_terms(decomposition: Decomposition, with_constant: bool) -> str:
    parts: List[str] = []
    for name, aggregate in decomposition.variables.items():
        coef = aggregate.coefficient
        sign = "-" if coef < 0 else "+"
        parts.append(f"{sign} {_number(abs(coef))} {name}")
    if with_constant and decomposition.constant != 0:
        sign = "-" if decomposition.constant < 0 else "+"
        parts.append(f"{sign} {_number(abs(decomposition.constant))}")
    if not parts:
        return "0"
    text = " ".join(parts)
    return text[2:] if text.startswith("+ ") else "-" + text[2:]
