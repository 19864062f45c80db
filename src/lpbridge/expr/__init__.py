"""Expression arena, simplifier and decomposer."""

from .arena import CompExpr, ExpressionArena, LitVal, VarRef, lp_sum
from .decompose import Decomposition, VariableAggregate, decompose, decompose_expression
from .simplify import simplify

__all__ = [
    "CompExpr",
    "Decomposition",
    "ExpressionArena",
    "LitVal",
    "VarRef",
    "VariableAggregate",
    "decompose",
    "decompose_expression",
    "lp_sum",
    "simplify",
]
