from __future__ import annotations

import logging
import re
import uuid
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from .expr.arena import CompExpr, ExpressionArena, VarRef
from .schemas import Cmp, Sense, Variable

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_]+")


class Constraint(BaseModel):
    """``lhs cmp rhs``; ``rhs`` must simplify to a single literal."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    lhs: ExpressionArena
    cmp: Cmp
    rhs: ExpressionArena
    name: Optional[str] = None


class Problem:
    """
    An objective and an ordered list of constraints.

    Nothing is validated while the model is built; malformed models fail
    when a backend solves them. Constraint order is kept as added. Objective
    and constraint arenas are copied on the way in, so rewriting the caller's
    expression afterwards leaves the problem untouched.
    """

    def __init__(self, name: str = "problem", sense: Sense = "min") -> None:
        if sense not in ("min", "max"):
            raise ValueError(f"Objective sense must be 'min' or 'max', got {sense!r}")
        self.name = name
        self.sense: Sense = sense
        self.objective: Optional[ExpressionArena] = None
        self.constraints: List[Constraint] = []
        slug = _UNSAFE_CHARS.sub("_", name).strip("_") or "problem"
        self.unique_name = f"{slug}_{uuid.uuid4().hex}"

    def set_objective(self, expression: Union[ExpressionArena, Variable, float]) -> None:
        if self.objective is not None:
            logger.debug("Replacing objective of problem %s", self.name)
        self.objective = ExpressionArena.from_value(expression).copy()

    def add_constraint(
        self,
        constraint: Union[Constraint, ExpressionArena, Variable],
        cmp: Optional[Cmp] = None,
        rhs: Union[ExpressionArena, Variable, float, None] = None,
        name: Optional[str] = None,
    ) -> Constraint:
        if not isinstance(constraint, Constraint):
            if cmp is None or rhs is None:
                raise TypeError("add_constraint needs a Constraint or (lhs, cmp, rhs)")
            constraint = Constraint(
                lhs=ExpressionArena.from_value(constraint).copy(),
                cmp=cmp,
                rhs=ExpressionArena.from_value(rhs).copy(),
                name=name,
            )
        else:
            update = {"lhs": constraint.lhs.copy(), "rhs": constraint.rhs.copy()}
            if name is not None:
                update["name"] = name
            constraint = constraint.model_copy(update=update)
        self.constraints.append(constraint)
        return constraint

    def __iadd__(self, item):
        if isinstance(item, Constraint):
            self.add_constraint(item)
        else:
            self.set_objective(item)
        return self

    def variables(self) -> List[Variable]:
        """Every variable referenced by the model, in first-seen order."""
        seen: Dict[str, Variable] = {}
        expressions: List[ExpressionArena] = []
        if self.objective is not None:
            expressions.append(self.objective)
        for constraint in self.constraints:
            expressions.extend((constraint.lhs, constraint.rhs))
        for expression in expressions:
            for node in _reachable(expression):
                if isinstance(node, VarRef):
                    seen.setdefault(node.variable.name, node.variable)
        return list(seen.values())

    def __repr__(self) -> str:
        return f"Problem(name={self.name!r}, sense={self.sense!r}, constraints={len(self.constraints)})"


def _reachable(expression: ExpressionArena):
    stack = [expression.root_index()]
    visited = set()
    while stack:
        idx = stack.pop()
        if idx in visited:
            continue
        visited.add(idx)
        node = expression.node_at(idx)
        yield node
        if isinstance(node, CompExpr):
            stack.append(node.rhs)
            stack.append(node.lhs)
