from __future__ import annotations

from numbers import Real
from typing import Iterable, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from ..errors import InvalidIndex
from ..schemas import Variable

Op = Literal["add", "sub", "mul"]
OPS: Tuple[str, ...] = ("add", "sub", "mul")
_SYMBOLS = {"add": "+", "sub": "-", "mul": "*"}


class LitVal(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float


class VarRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    variable: Variable


class CompExpr(BaseModel):
    model_config = ConfigDict(frozen=True)

    op: Op
    lhs: int
    rhs: int


ExprNode = Union[LitVal, VarRef, CompExpr]


class ExpressionArena:
    """
    Flat, index-addressed storage for one expression tree.

    Children are referenced by position in the arena, so the simplifier can
    rewrite a node in place without touching its parents. The root defaults
    to the most recently added node.
    """

    def __init__(self, nodes: Optional[Iterable[ExprNode]] = None, root: Optional[int] = None) -> None:
        self._nodes: List[ExprNode] = list(nodes) if nodes is not None else []
        if root is None and self._nodes:
            root = len(self._nodes) - 1
        self._root = root
        if root is not None:
            self._check(root)

    @classmethod
    def from_value(cls, value: Union["ExpressionArena", Variable, Real]) -> "ExpressionArena":
        if isinstance(value, ExpressionArena):
            return value
        arena = cls()
        if isinstance(value, Variable):
            arena.add_variable(value)
        elif isinstance(value, Real) and not isinstance(value, bool):
            arena.add_literal(float(value))
        else:
            raise TypeError(f"Cannot build an expression from {type(value).__name__}")
        return arena

    @property
    def nodes(self) -> Tuple[ExprNode, ...]:
        return tuple(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def _check(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self._nodes):
            raise InvalidIndex(f"Node index {index!r} out of range for arena of size {len(self._nodes)}")

    def _push(self, node: ExprNode) -> int:
        self._nodes.append(node)
        self._root = len(self._nodes) - 1
        return self._root

    def add_literal(self, value: float) -> int:
        return self._push(LitVal(value=value))

    def add_variable(self, variable: Variable) -> int:
        return self._push(VarRef(variable=variable))

    def add_op(self, op: Op, lhs: int, rhs: int) -> int:
        if op not in OPS:
            raise ValueError(f"Unknown operator {op!r}; expected one of {', '.join(OPS)}")
        self._check(lhs)
        self._check(rhs)
        return self._push(CompExpr(op=op, lhs=lhs, rhs=rhs))

    def node_at(self, index: int) -> ExprNode:
        self._check(index)
        return self._nodes[index]

    def root_index(self) -> int:
        if self._root is None:
            raise InvalidIndex("Expression is empty")
        return self._root

    def set_root(self, index: int) -> None:
        self._check(index)
        self._root = index

    def replace(self, index: int, node: ExprNode) -> None:
        """Overwrite a node in place. Only the simplifier should need this."""
        self._check(index)
        self._nodes[index] = node

    def copy(self) -> "ExpressionArena":
        return ExpressionArena(self._nodes, self._root)

    def _absorb(self, other: "ExpressionArena") -> int:
        """Append ``other``'s nodes, shifting child indices; return its root here."""
        offset = len(self._nodes)
        for node in other._nodes:
            if isinstance(node, CompExpr):
                node = CompExpr(op=node.op, lhs=node.lhs + offset, rhs=node.rhs + offset)
            self._nodes.append(node)
        return other.root_index() + offset

    def _combine(self, op: Op, other, reflected: bool = False) -> "ExpressionArena":
        try:
            other = ExpressionArena.from_value(other)
        except TypeError:
            return NotImplemented
        left, right = (other, self) if reflected else (self, other)
        result = left.copy()
        lhs = result.root_index()
        rhs = result._absorb(right)
        result.add_op(op, lhs, rhs)
        return result

    def __add__(self, other):
        return self._combine("add", other)

    def __radd__(self, other):
        return self._combine("add", other, reflected=True)

    def __sub__(self, other):
        return self._combine("sub", other)

    def __rsub__(self, other):
        return self._combine("sub", other, reflected=True)

    def __mul__(self, other):
        return self._combine("mul", other)

    def __rmul__(self, other):
        return self._combine("mul", other, reflected=True)

    def __neg__(self) -> "ExpressionArena":
        result = ExpressionArena()
        lhs = result.add_literal(-1.0)
        rhs = result._absorb(self)
        result.add_op("mul", lhs, rhs)
        return result

    def _constraint(self, cmp: str, other):
        from ..problem import Constraint  # local import to avoid cycle

        if isinstance(other, Real) and not isinstance(other, bool):
            return Constraint(lhs=self, cmp=cmp, rhs=ExpressionArena.from_value(other))
        return Constraint(lhs=self - other, cmp=cmp, rhs=ExpressionArena.from_value(0.0))

    def le(self, other):
        return self._constraint("<=", other)

    def ge(self, other):
        return self._constraint(">=", other)

    def equal(self, other):
        return self._constraint("==", other)

    def to_string(self) -> str:
        """Infix rendering of the tree under the root, fully parenthesised."""
        rendered: dict = {}
        stack = [(self.root_index(), False)]
        while stack:
            idx, expanded = stack.pop()
            if idx in rendered:
                continue
            node = self._nodes[idx]
            if isinstance(node, LitVal):
                rendered[idx] = f"{node.value:g}"
            elif isinstance(node, VarRef):
                rendered[idx] = node.variable.name
            elif not expanded:
                stack.append((idx, True))
                stack.append((node.rhs, False))
                stack.append((node.lhs, False))
            else:
                rendered[idx] = f"({rendered[node.lhs]} {_SYMBOLS[node.op]} {rendered[node.rhs]})"
        return rendered[self.root_index()]

    def __repr__(self) -> str:
        if self._root is None:
            return "ExpressionArena(<empty>)"
        return f"ExpressionArena({self.to_string()})"


def lp_sum(items: Iterable[Union[ExpressionArena, Variable, Real]]) -> ExpressionArena:
    """Sum many terms into a single arena without re-copying the partial sum."""
    arena = ExpressionArena()
    root: Optional[int] = None
    for item in items:
        term_root = arena._absorb(ExpressionArena.from_value(item))
        root = term_root if root is None else arena.add_op("add", root, term_root)
    if root is None:
        root = arena.add_literal(0.0)
    arena.set_root(root)
    return arena
