"""
Expression tokenizer, tree, and parser for template markup.

Expressions appear inside ``{{ ... }}`` output markup and as directive
arguments. Grammar (lowest to highest precedence):

    expression  := and_expr ("or" and_expr)*
    and_expr    := comparison ("and" comparison)*
    comparison  := filtered (OPERATOR filtered)?
    filtered    := primary ("|" IDENT (":" argument ("," argument)*)?)*
    argument    := IDENT ":" primary | primary
    primary     := literal | range | path
    range       := "(" primary ".." primary ")"
    path        := IDENT ("." IDENT | "[" expression "]")*

Filter names are resolved while parsing, so an unknown filter is a parse
error and evaluation never dispatches on strings.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from prompteng.core.path_utils import resolve_path
from prompteng.core.types import FilterFunction
from prompteng.exceptions import ErrorContext, TemplateSyntaxError, UnknownFilterError
from prompteng.rendering.values import (
    BLANK,
    EMPTY,
    contains,
    is_truthy,
    values_equal,
)

if TYPE_CHECKING:
    from prompteng.rendering.context import RenderContext

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(
    r"""
    (?P<whitespace>\s+)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<range>\.\.)
  | (?P<number>-?\d+(?:\.\d+)?)
  | (?P<operator>==|!=|<>|<=|>=|<|>)
  | (?P<identifier>[A-Za-z_][\w-]*\??)
  | (?P<punctuation>[.\[\]|:,()=])
    """,
    re.VERBOSE,
)

KEYWORD_LITERALS: dict[str, Any] = {
    "true": True,
    "false": False,
    "nil": None,
    "null": None,
    "empty": EMPTY,
    "blank": BLANK,
}


@dataclass(frozen=True)
class ExpressionToken:
    """A single lexical token of an expression."""

    kind: str
    value: str
    position: int


def unquote(value_str: str) -> str:
    """
    Strip quotes from a string literal and process escape sequences.

    Params:
        value_str: Quoted literal including its delimiters

    Returns:
        The literal's text content
    """
    quote_char = value_str[0]
    unquoted = value_str[1:-1]
    return (
        unquoted.replace("\\n", "\n")
        .replace("\\t", "\t")
        .replace(f"\\{quote_char}", quote_char)
        .replace("\\\\", "\\")
    )


def tokenize_expression(
    source: str, context: ErrorContext | None = None
) -> list[ExpressionToken]:
    """
    Split expression source into tokens, dropping whitespace.

    Params:
        source: Expression text
        context: Location used for error reporting

    Returns:
        List of tokens in source order

    Raises:
        TemplateSyntaxError: If a character cannot start any token
    """
    tokens = []
    position = 0
    while position < len(source):
        match = TOKEN_PATTERN.match(source, position)
        if match is None:
            raise TemplateSyntaxError(
                f"Unexpected character '{source[position]}' in expression '{source.strip()}'",
                context,
            )
        kind = match.lastgroup
        if kind != "whitespace":
            tokens.append(ExpressionToken(kind, match.group(), position))
        position = match.end()
    return tokens


class Expression:
    """Base class for evaluable expression nodes."""

    def evaluate(self, context: "RenderContext") -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Literal(Expression):
    value: Any

    def evaluate(self, context: "RenderContext") -> Any:
        return self.value


@dataclass(frozen=True)
class VariablePath(Expression):
    """Variable reference with optional dotted/bracketed segments."""

    name: str
    segments: tuple[Expression, ...] = ()

    def evaluate(self, context: "RenderContext") -> Any:
        root = context.get(self.name)
        if not self.segments:
            return root
        keys = [segment.evaluate(context) for segment in self.segments]
        return resolve_path(root, keys)


@dataclass(frozen=True)
class RangeExpression(Expression):
    """Inclusive integer range ``(start..end)``."""

    start: Expression
    end: Expression

    def evaluate(self, context: "RenderContext") -> list[int]:
        try:
            low = int(self.start.evaluate(context))
            high = int(self.end.evaluate(context))
        except (TypeError, ValueError):
            return []
        return list(range(low, high + 1))


@dataclass(frozen=True)
class FilterCall:
    """A resolved filter with its literal arguments."""

    name: str
    function: FilterFunction
    arguments: tuple[Expression, ...] = ()
    keyword_arguments: tuple[tuple[str, Expression], ...] = ()

    def apply(self, value: Any, context: "RenderContext") -> Any:
        args = [argument.evaluate(context) for argument in self.arguments]
        kwargs = {key: argument.evaluate(context) for key, argument in self.keyword_arguments}
        try:
            return self.function(value, *args, **kwargs)
        except (TypeError, ValueError) as e:
            logger.warning(f"Filter '{self.name}' failed, passing input through: {e}")
            return value


@dataclass(frozen=True)
class FilteredExpression(Expression):
    """A base expression piped through filters left to right."""

    base: Expression
    filters: tuple[FilterCall, ...] = field(default_factory=tuple)

    def evaluate(self, context: "RenderContext") -> Any:
        value = self.base.evaluate(context)
        for filter_call in self.filters:
            value = filter_call.apply(value, context)
        return value


def _compare_ordered(operator: str, left: Any, right: Any) -> bool:
    try:
        if operator == "<":
            return left < right
        if operator == ">":
            return left > right
        if operator == "<=":
            return left <= right
        return left >= right
    except TypeError:
        return False


@dataclass(frozen=True)
class Comparison(Expression):
    operator: str
    left: Expression
    right: Expression

    def evaluate(self, context: "RenderContext") -> bool:
        left = self.left.evaluate(context)
        right = self.right.evaluate(context)
        if self.operator == "==":
            return values_equal(left, right)
        if self.operator in ("!=", "<>"):
            return not values_equal(left, right)
        if self.operator == "contains":
            return contains(left, right)
        return _compare_ordered(self.operator, left, right)


@dataclass(frozen=True)
class BooleanOperation(Expression):
    """Short-circuiting ``and``/``or`` returning a boolean."""

    operator: str
    left: Expression
    right: Expression

    def evaluate(self, context: "RenderContext") -> bool:
        left = is_truthy(self.left.evaluate(context))
        if self.operator == "and":
            return left and is_truthy(self.right.evaluate(context))
        return left or is_truthy(self.right.evaluate(context))


class ExpressionParser:
    """
    Recursive-descent parser over expression tokens.

    Directives with their own argument grammar (``for``, ``case``, ``assign``)
    drive the parser piecewise through the peek/accept/expect helpers and the
    individual ``parse_*`` methods.
    """

    def __init__(
        self,
        source: str,
        filters: Mapping[str, FilterFunction],
        context: ErrorContext | None = None,
    ):
        """
        Initialize the parser.

        Params:
            source: Expression text to parse
            filters: Filter table used to resolve filter names
            context: Location used for error reporting
        """
        self.source = source
        self.filters = filters
        self.context = context
        self.tokens = tokenize_expression(source, context)
        self.position = 0

    def error(self, reason: str) -> TemplateSyntaxError:
        return TemplateSyntaxError(reason, self.context)

    def peek(self, offset: int = 0) -> ExpressionToken | None:
        index = self.position + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def at_end(self) -> bool:
        return self.position >= len(self.tokens)

    def next(self) -> ExpressionToken:
        token = self.peek()
        if token is None:
            raise self.error(f"Unexpected end of expression '{self.source.strip()}'")
        self.position += 1
        return token

    def accept(self, kind: str, value: str | None = None) -> ExpressionToken | None:
        """Consume and return the next token if it matches, else None."""
        token = self.peek()
        if token is None or token.kind != kind:
            return None
        if value is not None and token.value != value:
            return None
        self.position += 1
        return token

    def expect(self, kind: str, value: str | None = None) -> ExpressionToken:
        token = self.accept(kind, value)
        if token is None:
            found = self.peek()
            expected = value or kind
            got = f"'{found.value}'" if found else "end of expression"
            raise self.error(
                f"Expected {expected} but found {got} in '{self.source.strip()}'"
            )
        return token

    def expect_identifier(self) -> str:
        return self.expect("identifier").value

    def expect_end(self) -> None:
        token = self.peek()
        if token is not None:
            raise self.error(
                f"Unexpected '{token.value}' in expression '{self.source.strip()}'"
            )

    def parse(self) -> Expression:
        """Parse the whole source as one expression."""
        expression = self.parse_expression()
        self.expect_end()
        return expression

    def parse_expression(self) -> Expression:
        left = self.parse_and()
        while self.accept("identifier", "or"):
            left = BooleanOperation("or", left, self.parse_and())
        return left

    def parse_and(self) -> Expression:
        left = self.parse_comparison()
        while self.accept("identifier", "and"):
            left = BooleanOperation("and", left, self.parse_comparison())
        return left

    def parse_comparison(self) -> Expression:
        left = self.parse_filtered()
        operator = self.accept("operator") or self.accept("identifier", "contains")
        if operator is None:
            return left
        return Comparison(operator.value, left, self.parse_filtered())

    def parse_filtered(self) -> Expression:
        base = self.parse_primary()
        filters = []
        while self.accept("punctuation", "|"):
            filters.append(self.parse_filter_call())
        if not filters:
            return base
        return FilteredExpression(base, tuple(filters))

    def parse_filter_call(self) -> FilterCall:
        name = self.expect_identifier()
        function = self.filters.get(name)
        if function is None:
            raise UnknownFilterError(name, self.context)

        arguments: list[Expression] = []
        keyword_arguments: list[tuple[str, Expression]] = []
        if self.accept("punctuation", ":"):
            while True:
                token = self.peek()
                following = self.peek(1)
                if (
                    token is not None
                    and token.kind == "identifier"
                    and following is not None
                    and following.value == ":"
                ):
                    self.position += 2
                    keyword_arguments.append((token.value, self.parse_primary()))
                else:
                    arguments.append(self.parse_primary())
                if not self.accept("punctuation", ","):
                    break
        return FilterCall(name, function, tuple(arguments), tuple(keyword_arguments))

    def parse_primary(self) -> Expression:
        token = self.next()

        if token.kind == "string":
            return Literal(unquote(token.value))
        if token.kind == "number":
            if "." in token.value:
                return Literal(float(token.value))
            return Literal(int(token.value))
        if token.kind == "punctuation" and token.value == "(":
            start = self.parse_primary()
            self.expect("range")
            end = self.parse_primary()
            self.expect("punctuation", ")")
            return RangeExpression(start, end)
        if token.kind == "punctuation" and token.value == "[":
            # Bracketed root, e.g. ["key with spaces"].child
            key = self.parse_expression()
            self.expect("punctuation", "]")
            if not isinstance(key, Literal) or not isinstance(key.value, str):
                raise self.error("Bracketed variable name must be a string literal")
            return self._parse_path_segments(key.value)
        if token.kind == "identifier":
            if token.value in KEYWORD_LITERALS:
                return Literal(KEYWORD_LITERALS[token.value])
            return self._parse_path_segments(token.value)

        raise self.error(f"Unexpected '{token.value}' in expression '{self.source.strip()}'")

    def _parse_path_segments(self, name: str) -> VariablePath:
        segments: list[Expression] = []
        while True:
            if self.accept("punctuation", "."):
                index = self.accept("number")
                if index is None:
                    segments.append(Literal(self.expect_identifier()))
                else:
                    # "items.0.1" tokenizes its indexes as the float "0.1"
                    segments.extend(Literal(int(part)) for part in index.value.split("."))
            elif self.accept("punctuation", "["):
                segments.append(self.parse_expression())
                self.expect("punctuation", "]")
            else:
                break
        return VariablePath(name, tuple(segments))


def parse_expression(
    source: str,
    filters: Mapping[str, FilterFunction],
    context: ErrorContext | None = None,
) -> Expression:
    """
    Convenience function to parse a complete expression.

    Params:
        source: Expression text
        filters: Filter table for resolving filter names
        context: Location used for error reporting

    Returns:
        Parsed expression tree

    Raises:
        TemplateSyntaxError: If the expression is malformed
        UnknownFilterError: If a filter name is not registered
    """
    return ExpressionParser(source, filters, context).parse()
