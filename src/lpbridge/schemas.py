from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

Sense = Literal["min", "max"]
Cmp = Literal["<=", ">=", "=="]
Status = Literal["optimal", "suboptimal", "infeasible", "unbounded", "not_solved"]


class Variable(BaseModel):
    """A continuous decision variable, identified by name."""

    model_config = ConfigDict(frozen=True)

    name: str
    lb: float | None = None
    ub: float | None = None

    def _expr(self):
        from .expr.arena import ExpressionArena  # local import to avoid cycle

        return ExpressionArena.from_value(self)

    def __add__(self, other):
        return self._expr() + other

    def __radd__(self, other):
        return other + self._expr()

    def __sub__(self, other):
        return self._expr() - other

    def __rsub__(self, other):
        return other - self._expr()

    def __mul__(self, other):
        return self._expr() * other

    def __rmul__(self, other):
        return other * self._expr()

    def __neg__(self):
        return -self._expr()

    def le(self, other):
        return self._expr().le(other)

    def ge(self, other):
        return self._expr().ge(other)

    def equal(self, other):
        return self._expr().equal(other)


class Solution(BaseModel):
    """Outcome of a single solve, identical in shape for every backend."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    status: Status
    values: Dict[str, float] = Field(default_factory=dict)
    problem: Optional[Any] = Field(default=None, exclude=True, repr=False)

    @classmethod
    def with_problem(cls, status: Status, values: Dict[str, float], problem: Any) -> "Solution":
        """Attach ``problem`` and drop any value whose name it does not declare."""
        if problem is None:
            return cls(status=status, values=values)
        declared = {var.name for var in problem.variables()}
        unknown = [name for name in values if name not in declared]
        if unknown:
            logger.warning("Dropping values for undeclared variables: %s", ", ".join(unknown))
        kept = {name: value for name, value in values.items() if name in declared}
        return cls(status=status, values=kept, problem=problem)

    def value(self, name: str) -> float:
        return self.values[name]

    def eval(self, expression: Any) -> float:
        """Evaluate an expression (or variable, or number) against this assignment."""
        from .expr.arena import ExpressionArena
        from .expr.decompose import decompose_expression

        decomposition = decompose_expression(ExpressionArena.from_value(expression))
        total = decomposition.constant
        for name, aggregate in decomposition.variables.items():
            total += aggregate.coefficient * self.values[name]
        return total


# JSON-facing model, used by the MCP server.


class LinearTerm(BaseModel):
    var: str
    coef: float


class LinearExpr(BaseModel):
    terms: List[LinearTerm] = Field(default_factory=list)
    constant: float = 0.0


class ConstraintSpec(BaseModel):
    name: str
    lhs: LinearExpr
    cmp: Cmp
    rhs: float


class LPModel(BaseModel):
    name: str = "problem"
    sense: Sense
    objective: LinearExpr
    variables: List[Variable]
    constraints: List[ConstraintSpec]
