from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..errors import SolutionFormatError
from ..problem import Problem
from ..schemas import Solution, Status
from .base import ExternalProcessSolver

logger = logging.getLogger(__name__)


def status_from_output(stdout: str) -> Status:
    """Classify a successful ``gurobi_cl`` run from its console log."""
    if "Optimal solution found" in stdout:
        return "optimal"
    # sic, alongside the current wording
    if "infesible" in stdout or "Infeasible model" in stdout:
        return "infeasible"
    return "suboptimal"


class GurobiSolver(ExternalProcessSolver):
    """
    Gurobi through ``gurobi_cl ResultFile=<solution> <model>``.

    The status comes from the console log: the result file only carries
    values. When the log reports anything but an optimum and no result
    file was written, an empty assignment is returned with that status.
    """

    name = "gurobi"
    default_command = "gurobi_cl"

    def build_arguments(self, model_path: Path, solution_path: Path) -> List[str]:
        return [f"ResultFile={solution_path}", str(model_path)]

    def interpret(
        self,
        completed: subprocess.CompletedProcess,
        solution_path: Path,
        problem: Problem,
    ) -> Solution:
        status = status_from_output(completed.stdout or "")
        logger.debug("gurobi_cl reported %s", status)
        if status != "optimal" and not solution_path.exists():
            return Solution.with_problem(status, {}, problem)
        solution = self.read_solution(solution_path, problem)
        return solution.model_copy(update={"status": status})

    def parse_solution(self, lines: Iterable[str], problem: Optional[Problem] = None) -> Solution:
        entries = enumerate(lines, start=1)
        header = next(entries, None)
        if header is None or not header[1].split():
            raise SolutionFormatError("missing header line", line=1)

        values: Dict[str, float] = {}
        for number, raw in entries:
            line = raw.rstrip("\r\n")
            # Gurobi 7+ writes comments after the header
            if line.startswith("#"):
                continue
            fields = line.split()
            if len(fields) != 2:
                raise SolutionFormatError("expected 'name value'", line=number)
            try:
                values[fields[0]] = float(fields[1])
            except ValueError:
                raise SolutionFormatError(
                    f"value {fields[1]!r} is not numeric", line=number, field=fields[0]
                ) from None

        return Solution.with_problem("optimal", values, problem)
