from __future__ import annotations

import math
from typing import Dict, List, Tuple

from pydantic import BaseModel, Field

from ..errors import UnsimplifiedMultiplication, UnsupportedExpression
from ..schemas import Variable
from .arena import CompExpr, ExpressionArena, LitVal, VarRef
from .simplify import simplify


class VariableAggregate(BaseModel):
    """Accumulated coefficient and intersected bounds of one variable."""

    coefficient: float = 0.0
    lb: float = -math.inf
    ub: float = math.inf

    def absorb(self, variable: Variable, factor: float) -> None:
        self.coefficient += factor
        if variable.lb is not None:
            self.lb = max(self.lb, variable.lb)
        if variable.ub is not None:
            self.ub = min(self.ub, variable.ub)


class Decomposition(BaseModel):
    variables: Dict[str, VariableAggregate] = Field(default_factory=dict)
    constant: float = 0.0

    def coefficients(self) -> Dict[str, float]:
        return {name: agg.coefficient for name, agg in self.variables.items()}


def decompose(arena: ExpressionArena) -> Decomposition:
    """
    Reduce a simplified expression to per-variable coefficients.

    Depth-first over an explicit stack of (factor, node index). Literals are
    collected into ``constant`` scaled by their factor. The arena must
    already be in canonical form: a ``mul`` whose left operand is not a
    literal raises :class:`UnsimplifiedMultiplication`.
    """

    result = Decomposition()
    stack: List[Tuple[float, int]] = [(1.0, arena.root_index())]

    while stack:
        factor, idx = stack.pop()
        node = arena.node_at(idx)
        if isinstance(node, VarRef):
            aggregate = result.variables.get(node.variable.name)
            if aggregate is None:
                aggregate = result.variables[node.variable.name] = VariableAggregate()
            aggregate.absorb(node.variable, factor)
        elif isinstance(node, LitVal):
            result.constant += factor * node.value
        elif isinstance(node, CompExpr) and node.op == "mul":
            lhs = arena.node_at(node.lhs)
            if not isinstance(lhs, LitVal):
                raise UnsimplifiedMultiplication(
                    f"Non-simplified multiplication at node {idx}: {node!r}"
                )
            stack.append((factor * lhs.value, node.rhs))
        elif isinstance(node, CompExpr) and node.op == "add":
            # rhs first so variables come out left to right
            stack.append((factor, node.rhs))
            stack.append((factor, node.lhs))
        elif isinstance(node, CompExpr) and node.op == "sub":
            stack.append((-factor, node.rhs))
            stack.append((factor, node.lhs))
        else:
            raise UnsupportedExpression(f"Unsupported expression: {node!r}")

    return result


def decompose_expression(arena: ExpressionArena) -> Decomposition:
    """Simplify a copy of ``arena`` and decompose it; ``arena`` is left as is."""
    return decompose(simplify(arena.copy()))
