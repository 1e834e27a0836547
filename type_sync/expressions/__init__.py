"""Expression layer - traced lambdas, expression trees and their evaluation."""

from __future__ import annotations

from type_sync.expressions.capture import capture
from type_sync.expressions.evaluator import Evaluator, compile_lambda
from type_sync.expressions.nodes import (
    Binary,
    Binding,
    Call,
    Conditional,
    Constant,
    Construct,
    Convert,
    Lambda,
    Member,
    Node,
    Parameter,
    Unary,
    render,
)
from type_sync.expressions.nullsafe import evaluate, guard_chain
from type_sync.expressions.visitor import NodeTransformer, NodeVisitor, ParameterReplacer

__all__ = [
    "capture",
    "evaluate",
    "guard_chain",
    "compile_lambda",
    "Evaluator",
    "NodeVisitor",
    "NodeTransformer",
    "ParameterReplacer",
    "Node",
    "Parameter",
    "Constant",
    "Member",
    "Call",
    "Conditional",
    "Binary",
    "Unary",
    "Convert",
    "Binding",
    "Construct",
    "Lambda",
    "render",
]
