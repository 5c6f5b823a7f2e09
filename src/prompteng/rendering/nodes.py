"""
Directive tree nodes.

A parsed template is a list of nodes. Rendering walks the list in source
order and each node writes to whichever sink the render context currently
exposes, which is how section and capture blocks divert output.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from prompteng.rendering.values import to_text

if TYPE_CHECKING:
    from prompteng.parsing.expressions import Expression
    from prompteng.rendering.context import RenderContext


class Node:
    """Base class for renderable tree nodes."""

    def render(self, context: "RenderContext") -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class TextNode(Node):
    """Literal template text."""

    text: str

    def render(self, context: "RenderContext") -> None:
        context.write(self.text)


@dataclass(frozen=True)
class OutputNode(Node):
    """``{{ expression }}`` markup."""

    expression: "Expression | None"

    def render(self, context: "RenderContext") -> None:
        if self.expression is not None:
            context.write(to_text(self.expression.evaluate(context)))


def render_nodes(nodes: Sequence[Node], context: "RenderContext") -> None:
    """Render nodes in order against a context."""
    for node in nodes:
        node.render(context)
