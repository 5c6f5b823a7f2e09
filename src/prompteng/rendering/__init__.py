"""
Prompteng rendering components.

This package provides value semantics, built-in filters, directive tree
nodes, and the per-render context. Directive classes and the extension
registry live in ``prompteng.rendering.directives`` and
``prompteng.rendering.registry``.
"""

from prompteng.rendering.context import (
    Constraint,
    OutputSink,
    RenderContext,
    RenderMetadata,
    StringSink,
)
from prompteng.rendering.filters import BUILTIN_FILTERS
from prompteng.rendering.nodes import Node, OutputNode, TextNode, render_nodes
from prompteng.rendering.values import is_truthy, to_text, values_equal

__all__ = [
    "BUILTIN_FILTERS",
    "Constraint",
    "Node",
    "OutputNode",
    "OutputSink",
    "RenderContext",
    "RenderMetadata",
    "StringSink",
    "TextNode",
    "is_truthy",
    "render_nodes",
    "to_text",
    "values_equal",
]
