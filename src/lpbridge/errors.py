from __future__ import annotations

from typing import Optional


class LpBridgeError(Exception):
    """Base class for every error raised by lpbridge."""


class ModelingError(LpBridgeError, ValueError):
    """The model was built in a way the backends cannot accept."""


class NonlinearExpression(ModelingError):
    pass


class UnsimplifiedMultiplication(ModelingError):
    pass


class UnsupportedExpression(ModelingError):
    pass


class NotSimplified(ModelingError):
    pass


class MissingObjective(ModelingError):
    pass


class InvalidIndex(LpBridgeError, IndexError):
    pass


class SolverError(LpBridgeError, RuntimeError):
    """A backend could not produce a solution."""


class SolverNotFound(SolverError):
    pass


class MissingVariableName(SolverError):
    pass


class SolverProcessError(SolverError):
    def __init__(self, command: str, returncode: int, stdout: str = "", stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"{command} exited with {returncode}\n\nSTDOUT:\n{stdout}\n\nSTDERR:\n{stderr}\n"
        )


class SolutionFormatError(SolverError):
    def __init__(self, message: str, line: Optional[int] = None, field: Optional[str] = None) -> None:
        self.line = line
        self.field = field
        location = []
        if line is not None:
            location.append(f"line {line}")
        if field is not None:
            location.append(f"field {field!r}")
        suffix = f" ({', '.join(location)})" if location else ""
        super().__init__(f"Incorrect solution format: {message}{suffix}")
