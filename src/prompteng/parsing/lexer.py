"""
Template lexer.

Splits template source into literal text, output markup (``{{ ... }}``) and
directive markup (``{% ... %}``). A ``-`` just inside a delimiter strips
the whitespace of the adjacent literal text on that side.
"""

import re
from dataclasses import dataclass
from enum import Enum

from prompteng.exceptions import ErrorContext, TemplateSyntaxError


class TokenKind(Enum):
    """Kind of template token."""

    TEXT = "text"
    OUTPUT = "output"
    TAG = "tag"


@dataclass
class Token:
    """
    A lexical unit of template source.

    Params:
        kind: Whether this is literal text, output markup, or a directive
        content: Text for TEXT tokens, inner markup (delimiters removed) otherwise
        line: 1-based line where the token starts
        source: Original markup including delimiters, for error messages
        trim_left: Strip whitespace from the preceding text token
        trim_right: Strip whitespace from the following text token
    """

    kind: TokenKind
    content: str
    line: int
    source: str
    trim_left: bool = False
    trim_right: bool = False

    @property
    def tag_name(self) -> str:
        """Directive name for TAG tokens (first word of the markup)."""
        return self.content.strip().split(None, 1)[0] if self.content.strip() else ""

    @property
    def tag_args(self) -> str:
        """Everything after the directive name for TAG tokens."""
        parts = self.content.strip().split(None, 1)
        return parts[1] if len(parts) > 1 else ""


DELIMITERS = {"{{": ("}}", TokenKind.OUTPUT), "{%": ("%}", TokenKind.TAG)}

QUOTED_STRING = re.compile(r""""(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'""", re.DOTALL)


def _find_opening(source: str, start: int) -> int:
    """Position of the next ``{{`` or ``{%``, or -1."""
    candidates = [
        index for index in (source.find("{{", start), source.find("{%", start)) if index != -1
    ]
    return min(candidates) if candidates else -1


def _find_closing(source: str, closing_delimiter: str, start: int) -> int:
    """
    Position of the delimiter closing markup opened before ``start``, or -1.

    Quoted string literals are skipped, so ``{{ "}}" }}`` closes at the second
    ``}}``. An unterminated quote is treated as plain text from that point on.
    """
    position = start
    while position < len(source):
        if source[position] in ("'", '"'):
            literal = QUOTED_STRING.match(source, position)
            if literal is None:
                return source.find(closing_delimiter, position)
            position = literal.end()
        elif source.startswith(closing_delimiter, position):
            return position
        else:
            position += 1
    return -1


def tokenize(source: str, template_name: str | None = None) -> list[Token]:
    """
    Tokenize template source.

    Params:
        source: Template text
        template_name: Identifier used in error messages

    Returns:
        Tokens in source order with whitespace control already applied

    Raises:
        TemplateSyntaxError: If an output or directive delimiter is never closed
    """
    tokens: list[Token] = []
    position = 0
    line = 1

    while position < len(source):
        opening = _find_opening(source, position)
        if opening == -1:
            tokens.append(Token(TokenKind.TEXT, source[position:], line, source[position:]))
            break

        if opening > position:
            text = source[position:opening]
            tokens.append(Token(TokenKind.TEXT, text, line, text))
            line += text.count("\n")

        closing_delimiter, kind = DELIMITERS[source[opening : opening + 2]]
        closing = _find_closing(source, closing_delimiter, opening + 2)
        if closing == -1:
            fragment = source[opening : opening + 40].splitlines()[0]
            markup = "output" if kind is TokenKind.OUTPUT else "tag"
            raise TemplateSyntaxError(
                f"{markup} {fragment!r} not closed, expected '{closing_delimiter}'",
                ErrorContext(template_name=template_name, line=line),
            )

        markup = source[opening : closing + 2]
        inner = source[opening + 2 : closing]
        trim_left = inner.startswith("-")
        trim_right = inner.endswith("-") and len(inner) > (1 if trim_left else 0)
        if trim_left:
            inner = inner[1:]
        if trim_right:
            inner = inner[:-1]

        tokens.append(Token(kind, inner, line, markup, trim_left, trim_right))
        line += markup.count("\n")
        position = closing + 2

    _apply_whitespace_control(tokens)
    return tokens


def _apply_whitespace_control(tokens: list[Token]) -> None:
    for index, token in enumerate(tokens):
        if token.kind is TokenKind.TEXT:
            continue
        if token.trim_left and index > 0 and tokens[index - 1].kind is TokenKind.TEXT:
            tokens[index - 1].content = tokens[index - 1].content.rstrip()
        if (
            token.trim_right
            and index + 1 < len(tokens)
            and tokens[index + 1].kind is TokenKind.TEXT
        ):
            tokens[index + 1].content = tokens[index + 1].content.lstrip()
