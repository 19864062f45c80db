from __future__ import annotations

import logging
import subprocess
import tempfile
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, ClassVar, Iterable, List, Optional, Union

from ..errors import SolutionFormatError, SolverNotFound, SolverProcessError
from ..lp_format import write_lp
from ..problem import Problem
from ..schemas import Solution

logger = logging.getLogger(__name__)

Exporter = Callable[[Problem, Path], Any]


class SolverBackend(ABC):
    """Anything that can turn a :class:`Problem` into a :class:`Solution`."""

    name: ClassVar[str] = "solver"

    @abstractmethod
    def solve(self, problem: Problem) -> Solution:
        """Solve ``problem`` without mutating it."""


class SolutionFileParser(ABC):
    """Mixin for backends that report results through a text file."""

    def read_solution(self, path: Union[str, Path], problem: Optional[Problem] = None) -> Solution:
        try:
            with open(path, encoding="utf-8") as handle:
                return self.parse_solution(handle, problem)
        except FileNotFoundError as exc:
            raise SolutionFormatError(f"solution file {str(path)!r} was not written") from exc

    @abstractmethod
    def parse_solution(self, lines: Iterable[str], problem: Optional[Problem] = None) -> Solution:
        """Parse the backend's solution grammar."""


class ExternalProcessSolver(SolverBackend, SolutionFileParser):
    """
    Export the model, run an external optimizer, parse the file it writes.

    The model file is named after ``problem.unique_name``. The solution file
    is ``temp_solution_file`` when one was configured, otherwise a fresh
    ``<uuid4>.sol`` per call, so concurrent solves on one instance never share
    it. Both are removed once, whatever the outcome of the solve.
    """

    default_command: ClassVar[str]

    def __init__(
        self,
        command_name: Optional[str] = None,
        temp_solution_file: Union[str, Path, None] = None,
        workdir: Union[str, Path, None] = None,
        exporter: Optional[Exporter] = None,
    ) -> None:
        self.command_name = command_name or self.default_command
        self.temp_solution_file = Path(temp_solution_file) if temp_solution_file else None
        self.workdir = Path(workdir) if workdir is not None else Path(tempfile.gettempdir())
        self.exporter: Exporter = exporter or write_lp

    def _replace(self, **changes: Any) -> "ExternalProcessSolver":
        settings = {
            "command_name": self.command_name,
            "temp_solution_file": self.temp_solution_file,
            "workdir": self.workdir,
            "exporter": self.exporter,
        }
        settings.update(changes)
        return type(self)(**settings)

    def with_command_name(self, command_name: str) -> "ExternalProcessSolver":
        return self._replace(command_name=command_name)

    def with_temp_solution_file(self, temp_solution_file: Union[str, Path]) -> "ExternalProcessSolver":
        return self._replace(temp_solution_file=temp_solution_file)

    def new_solution_path(self) -> Path:
        return self.workdir / (self.temp_solution_file or f"{uuid.uuid4()}.sol")

    @abstractmethod
    def build_arguments(self, model_path: Path, solution_path: Path) -> List[str]:
        """Command-line arguments following the executable name."""

    def solve(self, problem: Problem) -> Solution:
        model_path = self.workdir / f"{problem.unique_name}.lp"
        solution_path = self.new_solution_path()
        try:
            self.exporter(problem, model_path)
            completed = self._run(self.build_arguments(model_path, solution_path))
            return self.interpret(completed, solution_path, problem)
        finally:
            _remove_quietly(model_path)
            _remove_quietly(solution_path)

    def interpret(
        self,
        completed: subprocess.CompletedProcess,
        solution_path: Path,
        problem: Problem,
    ) -> Solution:
        return self.read_solution(solution_path, problem)

    def _run(self, arguments: List[str]) -> subprocess.CompletedProcess:
        command = [self.command_name, *arguments]
        logger.debug("Running %s", " ".join(command))
        try:
            completed = subprocess.run(command, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise SolverNotFound(
                f"Error running the {self.name} solver ({self.command_name}): {exc}"
            ) from exc
        if completed.returncode != 0:
            raise SolverProcessError(
                self.command_name, completed.returncode, completed.stdout, completed.stderr
            )
        return completed


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove temporary file %s: %s", path, exc)
