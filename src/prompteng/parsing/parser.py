"""
Parser turning template tokens into an immutable directive tree.

Directive names are resolved to handler classes once, here; rendering only
walks the resulting nodes. Block directives consume their own bodies through
``TemplateTreeParser.parse_body`` so nesting is handled uniformly.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from prompteng.exceptions import (
    ErrorContext,
    TemplateSyntaxError,
    UnclosedTagError,
    UnknownDirectiveError,
)
from prompteng.parsing.expressions import Expression, ExpressionParser
from prompteng.parsing.lexer import Token, TokenKind, tokenize
from prompteng.rendering.nodes import Node, OutputNode, TextNode, render_nodes

if TYPE_CHECKING:
    from prompteng.rendering.context import RenderContext
    from prompteng.rendering.registry import ExtensionRegistry


class TokenStream:
    """Cursor over a token list shared by the parser and block directives."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.position = 0

    def at_end(self) -> bool:
        return self.position >= len(self.tokens)

    def next(self) -> Token:
        token = self.tokens[self.position]
        self.position += 1
        return token


@dataclass(frozen=True)
class ParsedTemplate:
    """
    Immutable result of parsing one template source.

    Safe to share between concurrent renders: all per-render state lives in
    the RenderContext passed to ``render``.
    """

    nodes: tuple[Node, ...]
    name: str | None = None

    def render(self, context: "RenderContext") -> None:
        render_nodes(self.nodes, context)


class TemplateTreeParser:
    """Builds a directive tree from template source using a registry."""

    def __init__(self, registry: "ExtensionRegistry", template_name: str | None = None):
        """
        Initialize the parser.

        Params:
            registry: Filters and directives available to this parse
            template_name: Identifier used in error messages
        """
        self.registry = registry
        self.template_name = template_name
        # End tags of every block currently being parsed, outermost first
        self._open_blocks: list[frozenset[str]] = []

    def error_context(self, token: Token) -> ErrorContext:
        return ErrorContext(
            template_name=self.template_name, line=token.line, source=token.source.strip()
        )

    def expression_parser(self, source: str, token: Token) -> ExpressionParser:
        """Create an expression parser for a directive's custom argument grammar."""
        return ExpressionParser(source, self.registry.filters, self.error_context(token))

    def parse_expression(self, source: str, token: Token) -> Expression:
        return self.expression_parser(source, token).parse()

    def parse(self, source: str) -> ParsedTemplate:
        """
        Parse template source into a ParsedTemplate.

        Params:
            source: Template text

        Returns:
            Immutable directive tree

        Raises:
            TemplateSyntaxError: For malformed markup or stray block delimiters
            UnclosedTagError: If a block directive is never closed
            UnknownDirectiveError: If a directive name is not registered
            UnknownFilterError: If a filter name is not registered
        """
        stream = TokenStream(tokenize(source, self.template_name))
        self._open_blocks = []
        nodes, _ = self._parse_nodes(stream, end_tags=frozenset())
        return ParsedTemplate(nodes=tuple(nodes), name=self.template_name)

    def parse_body(
        self, stream: TokenStream, opener: Token, end_tags: frozenset[str] | set[str]
    ) -> tuple[list[Node], Token]:
        """
        Parse nodes until one of ``end_tags`` is reached.

        Params:
            stream: Token stream positioned after the opening tag
            opener: The opening tag, reported if the block is never closed
            end_tags: Directive names that end (or split) this block

        Returns:
            Tuple of (body nodes, the delimiter token that ended the body)

        Raises:
            UnclosedTagError: If the stream ends, or an enclosing block's
                delimiter appears, before any end tag
        """
        end_tags = frozenset(end_tags)
        self._open_blocks.append(end_tags)
        try:
            nodes, closing = self._parse_nodes(stream, end_tags)
        finally:
            self._open_blocks.pop()
        if closing is None or closing.tag_name not in end_tags:
            raise UnclosedTagError(opener.source, self.error_context(opener))
        return nodes, closing

    def _closes_enclosing_block(self, name: str) -> bool:
        return any(name in end_tags for end_tags in self._open_blocks[:-1])

    def _parse_nodes(
        self, stream: TokenStream, end_tags: frozenset[str]
    ) -> tuple[list[Node], Token | None]:
        nodes: list[Node] = []

        while not stream.at_end():
            token = stream.next()

            if token.kind is TokenKind.TEXT:
                if token.content:
                    nodes.append(TextNode(token.content))
                continue

            if token.kind is TokenKind.OUTPUT:
                if token.content.strip():
                    nodes.append(OutputNode(self.parse_expression(token.content, token)))
                continue

            name = token.tag_name
            if not name:
                raise TemplateSyntaxError("Empty directive", self.error_context(token))
            if name in end_tags or self._closes_enclosing_block(name):
                return nodes, token

            directive = self.registry.get_directive(name)
            if directive is None:
                if name in self.registry.block_delimiters():
                    raise TemplateSyntaxError(
                        f"Unexpected '{name}' outside of its block", self.error_context(token)
                    )
                raise UnknownDirectiveError(name, self.error_context(token))
            nodes.append(directive.parse(token, stream, self))

        return nodes, None


def parse_template(
    source: str, registry: "ExtensionRegistry", template_name: str | None = None
) -> ParsedTemplate:
    """
    Convenience function to parse template source.

    Params:
        source: Template text
        registry: Filters and directives to resolve against
        template_name: Identifier used in error messages

    Returns:
        Immutable directive tree
    """
    return TemplateTreeParser(registry, template_name).parse(source)
