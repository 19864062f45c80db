from __future__ import annotations

import logging
from itertools import islice
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import SolutionFormatError
from ..problem import Problem
from ..schemas import Solution, Status
from .base import ExternalProcessSolver

logger = logging.getLogger(__name__)

GLPK_STATUSES: Dict[str, Status] = {
    "INTEGER OPTIMAL": "optimal",
    "OPTIMAL": "optimal",
    "INFEASIBLE (FINAL)": "infeasible",
    "INTEGER EMPTY": "infeasible",
    "UNDEFINED": "not_solved",
    "INTEGER UNDEFINED": "unbounded",
    "UNBOUNDED": "unbounded",
}

STATUS_PREFIX = "Status:"
# rows and column headings between the status line and the first column entry
_HEADER_LINES = 7

Line = Tuple[int, str]


def parse_status(line: str, line_number: Optional[int] = None) -> Status:
    """
    Map a glpsol ``Status:`` line to a unified status.

    glpsol pads the label to a 12 character column; the token is read after
    the label rather than at a fixed offset so narrower padding still parses.
    """
    if not line.startswith(STATUS_PREFIX):
        raise SolutionFormatError("no solution status found", line=line_number, field="status")
    token = line[len(STATUS_PREFIX):].strip()
    try:
        return GLPK_STATUSES[token]
    except KeyError:
        raise SolutionFormatError(
            f"unknown solution status {token!r}", line=line_number, field="status"
        ) from None


def _read_size(entry: Optional[Line], label: str) -> int:
    if entry is None:
        raise SolutionFormatError(f"missing {label} count", field=label)
    number, line = entry
    fields = line.split()
    if len(fields) < 2:
        raise SolutionFormatError(f"missing {label} count", line=number, field=label)
    try:
        count = int(fields[1])
    except ValueError:
        raise SolutionFormatError(
            f"{label} count {fields[1]!r} is not an integer", line=number, field=label
        ) from None
    if count < 0:
        raise SolutionFormatError(f"{label} count {count} is negative", line=number, field=label)
    return count


class GlpkSolver(ExternalProcessSolver):
    """GLPK through ``glpsol --lp <model> -o <solution>``."""

    name = "glpk"
    default_command = "glpsol"

    def build_arguments(self, model_path: Path, solution_path: Path) -> List[str]:
        return ["--lp", str(model_path), "-o", str(solution_path)]

    def parse_solution(self, lines: Iterable[str], problem: Optional[Problem] = None) -> Solution:
        entries: Iterator[Line] = enumerate((line.rstrip("\r\n") for line in lines), start=1)

        next(entries, None)  # problem name
        rows = _read_size(next(entries, None), "rows")
        columns = _read_size(next(entries, None), "columns")
        next(entries, None)  # non-zeros

        status_entry = next(entries, None)
        if status_entry is None:
            raise SolutionFormatError("no solution status found", field="status")
        status = parse_status(status_entry[1], status_entry[0])
        logger.debug("glpsol reported %s (%d rows, %d columns)", status, rows, columns)

        remaining = islice(entries, rows + _HEADER_LINES, None)
        values: Dict[str, float] = {}
        for _ in range(columns):
            entry = next(remaining, None)
            if entry is None:
                raise SolutionFormatError(
                    f"not all columns are present (expected {columns}, got {len(values)})"
                )
            number, line = entry
            fields = line.split()
            if len(fields) < 4:
                raise SolutionFormatError(
                    "column specification has too few fields", line=number
                )
            try:
                values[fields[1]] = float(fields[3])
            except ValueError:
                raise SolutionFormatError(
                    f"value {fields[3]!r} is not numeric", line=number, field=fields[1]
                ) from None

        return Solution.with_problem(status, values, problem)
