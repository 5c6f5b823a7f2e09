"""
Built-in directive implementations.

Each directive class parses its own arguments (and, for block directives,
its body) at parse time and renders against a RenderContext. Custom
directives subclass ``Directive`` or, for the common "evaluate an argument
and emit text" shape, ``InlineDirective``.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from prompteng.core.path_utils import is_sequence
from prompteng.exceptions import TemplateSyntaxError, UnclosedTagError
from prompteng.parsing.expressions import Expression, unquote
from prompteng.parsing.lexer import TokenKind
from prompteng.rendering.context import Constraint, RenderContext
from prompteng.rendering.nodes import Node, render_nodes
from prompteng.rendering.values import is_truthy, to_text, values_equal

if TYPE_CHECKING:
    from prompteng.parsing.lexer import Token
    from prompteng.parsing.parser import TemplateTreeParser, TokenStream

MUST_INCLUDE_EACH_LEAD_IN = "IMPORTANT: You MUST use EACH of these words at least once:"


class Directive(Node):
    """
    Base class for directives.

    Subclasses set ``delimiters`` to the intermediate and end tag names their
    block owns (e.g. ``else``/``endif``) so stray delimiters can be reported.
    """

    delimiters: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def parse(
        cls, token: "Token", stream: "TokenStream", parser: "TemplateTreeParser"
    ) -> "Directive":
        """
        Build the directive node from its opening tag.

        Params:
            token: The directive's tag token
            stream: Token stream positioned after the tag
            parser: Parser providing expression and body helpers

        Returns:
            The parsed directive node
        """
        raise NotImplementedError

    def render(self, context: RenderContext) -> None:
        raise NotImplementedError


class InlineDirective(Directive):
    """Directive evaluating one expression argument and emitting text inline."""

    def __init__(self, expression: Expression):
        self.expression = expression

    @classmethod
    def parse(
        cls, token: "Token", stream: "TokenStream", parser: "TemplateTreeParser"
    ) -> "InlineDirective":
        if not token.tag_args.strip():
            raise TemplateSyntaxError(
                f"'{token.tag_name}' requires an argument", parser.error_context(token)
            )
        return cls(parser.parse_expression(token.tag_args, token))

    def render(self, context: RenderContext) -> None:
        context.write(self.render_value(self.expression.evaluate(context), context))

    def render_value(self, value: Any, context: RenderContext) -> str:
        """Turn the evaluated argument into inline text."""
        raise NotImplementedError


def make_inline_directive(
    name: str, function: Callable[[Any, RenderContext], Any]
) -> type[InlineDirective]:
    """
    Wrap a plain function as an inline directive class.

    Params:
        name: Directive name, used for the generated class name
        function: Called with the evaluated argument and the render context;
            its result is rendered as text

    Returns:
        InlineDirective subclass delegating to ``function``
    """

    def render_value(self, value: Any, context: RenderContext) -> str:
        return to_text(function(value, context))

    class_name = "".join(part.capitalize() for part in name.split("_")) + "Directive"
    return type(class_name, (InlineDirective,), {"render_value": render_value})


class UpperDirective(InlineDirective):
    """``{% upper expr %}`` emits the uppercased text of its argument."""

    def render_value(self, value: Any, context: RenderContext) -> str:
        return to_text(value).upper()


def constraint_words(value: Any) -> list[str]:
    """
    Normalize a constraint argument to a word list.

    Sequences contribute each element's text; strings are split on commas with
    pieces trimmed and empties dropped; anything else yields no words.
    """
    if is_sequence(value):
        return [to_text(item) for item in value]
    if isinstance(value, str):
        return [piece.strip() for piece in value.split(",") if piece.strip()]
    return []


class MustIncludeEachDirective(InlineDirective):
    """
    ``{% must_include_each expr %}`` records a word constraint.

    Appends a ``must_include_each`` constraint to the render metadata and
    emits an instruction sentence listing the words (nothing when empty).
    """

    def render_value(self, value: Any, context: RenderContext) -> str:
        words = constraint_words(value)
        context.ensure_metadata().constraints.append(Constraint.must_include_each(words))
        if not words:
            return ""
        return f"{MUST_INCLUDE_EACH_LEAD_IN} {', '.join(words)}."


class IfDirective(Directive):
    """``if`` / ``elsif`` / ``else`` / ``endif`` conditional."""

    delimiters = frozenset({"elsif", "elif", "else", "endif"})

    def __init__(
        self,
        branches: Sequence[tuple[Expression, Sequence[Node]]],
        else_body: Sequence[Node] = (),
    ):
        self.branches = tuple((condition, tuple(body)) for condition, body in branches)
        self.else_body = tuple(else_body)

    @classmethod
    def parse(
        cls, token: "Token", stream: "TokenStream", parser: "TemplateTreeParser"
    ) -> "IfDirective":
        branch_tags = {"elsif", "elif", "else", "endif"}
        branches = []
        else_body: list[Node] = []

        condition = parser.parse_expression(token.tag_args, token)
        body, closing = parser.parse_body(stream, token, branch_tags)
        branches.append((condition, body))

        while closing.tag_name in ("elsif", "elif"):
            condition = parser.parse_expression(closing.tag_args, closing)
            body, closing = parser.parse_body(stream, token, branch_tags)
            branches.append((condition, body))

        if closing.tag_name == "else":
            else_body, closing = parser.parse_body(stream, token, {"endif"})

        return cls(branches, else_body)

    def render(self, context: RenderContext) -> None:
        for condition, body in self.branches:
            if is_truthy(condition.evaluate(context)):
                render_nodes(body, context)
                return
        render_nodes(self.else_body, context)


class CaseDirective(Directive):
    """``case`` / ``when`` / ``else`` / ``endcase`` multi-way branch."""

    delimiters = frozenset({"when", "else", "endcase"})

    def __init__(
        self,
        subject: Expression,
        whens: Sequence[tuple[Sequence[Expression], Sequence[Node]]],
        else_body: Sequence[Node] = (),
    ):
        self.subject = subject
        self.whens = tuple((tuple(values), tuple(body)) for values, body in whens)
        self.else_body = tuple(else_body)

    @classmethod
    def _parse_when_values(
        cls, closing: "Token", parser: "TemplateTreeParser"
    ) -> list[Expression]:
        expression_parser = parser.expression_parser(closing.tag_args, closing)
        values = [expression_parser.parse_filtered()]
        while expression_parser.accept("punctuation", ",") or expression_parser.accept(
            "identifier", "or"
        ):
            values.append(expression_parser.parse_filtered())
        expression_parser.expect_end()
        return values

    @classmethod
    def parse(
        cls, token: "Token", stream: "TokenStream", parser: "TemplateTreeParser"
    ) -> "CaseDirective":
        branch_tags = {"when", "else", "endcase"}
        subject = parser.parse_expression(token.tag_args, token)
        whens = []
        else_body: list[Node] = []

        # Anything between "case" and the first "when" is ignored
        _, closing = parser.parse_body(stream, token, branch_tags)

        while closing.tag_name == "when":
            values = cls._parse_when_values(closing, parser)
            body, closing = parser.parse_body(stream, token, branch_tags)
            whens.append((values, body))

        if closing.tag_name == "else":
            else_body, closing = parser.parse_body(stream, token, {"endcase"})

        return cls(subject, whens, else_body)

    def render(self, context: RenderContext) -> None:
        subject = self.subject.evaluate(context)
        for values, body in self.whens:
            if any(values_equal(subject, value.evaluate(context)) for value in values):
                render_nodes(body, context)
                return
        render_nodes(self.else_body, context)


class ForDirective(Directive):
    """
    ``for item in collection`` loop.

    Supports ``reversed``, ``limit: n`` and ``offset: n`` modifiers and an
    ``else`` branch rendered when there is nothing to iterate. Each iteration
    runs in its own scope frame binding only the loop variable and ``forloop``.
    """

    delimiters = frozenset({"else", "endfor"})

    def __init__(
        self,
        variable: str,
        collection: Expression,
        body: Sequence[Node],
        else_body: Sequence[Node] = (),
        reversed_order: bool = False,
        limit: Expression | None = None,
        offset: Expression | None = None,
    ):
        self.variable = variable
        self.collection = collection
        self.body = tuple(body)
        self.else_body = tuple(else_body)
        self.reversed_order = reversed_order
        self.limit = limit
        self.offset = offset

    @classmethod
    def parse(
        cls, token: "Token", stream: "TokenStream", parser: "TemplateTreeParser"
    ) -> "ForDirective":
        expression_parser = parser.expression_parser(token.tag_args, token)
        variable = expression_parser.expect_identifier()
        expression_parser.expect("identifier", "in")
        collection = expression_parser.parse_primary()

        reversed_order = False
        modifiers: dict[str, Expression] = {}
        while not expression_parser.at_end():
            name = expression_parser.expect_identifier()
            if name == "reversed":
                reversed_order = True
            elif name in ("limit", "offset"):
                expression_parser.expect("punctuation", ":")
                modifiers[name] = expression_parser.parse_primary()
            else:
                raise TemplateSyntaxError(
                    f"Unknown for-loop modifier '{name}'", parser.error_context(token)
                )

        body, closing = parser.parse_body(stream, token, {"else", "endfor"})
        else_body: list[Node] = []
        if closing.tag_name == "else":
            else_body, closing = parser.parse_body(stream, token, {"endfor"})

        return cls(
            variable,
            collection,
            body,
            else_body,
            reversed_order=reversed_order,
            limit=modifiers.get("limit"),
            offset=modifiers.get("offset"),
        )

    @staticmethod
    def _as_int(expression: Expression | None, context: RenderContext) -> int | None:
        if expression is None:
            return None
        try:
            return int(expression.evaluate(context))
        except (TypeError, ValueError):
            return None

    def _items(self, context: RenderContext) -> list[Any]:
        collection = self.collection.evaluate(context)
        if not is_sequence(collection):
            return []
        items = list(collection)

        offset = self._as_int(self.offset, context)
        if offset is not None and offset > 0:
            items = items[offset:]
        limit = self._as_int(self.limit, context)
        if limit is not None:
            items = items[: max(limit, 0)]
        if self.reversed_order:
            items.reverse()
        return items

    def render(self, context: RenderContext) -> None:
        items = self._items(context)
        if not items:
            render_nodes(self.else_body, context)
            return

        length = len(items)
        for index, item in enumerate(items):
            forloop = {
                "index": index + 1,
                "index0": index,
                "rindex": length - index,
                "rindex0": length - index - 1,
                "first": index == 0,
                "last": index == length - 1,
                "length": length,
            }
            with context.scope({self.variable: item, "forloop": forloop}):
                render_nodes(self.body, context)


class AssignDirective(Directive):
    """``{% assign name = expression %}`` binds a value for the rest of the render."""

    def __init__(self, name: str, expression: Expression):
        self.name = name
        self.expression = expression

    @classmethod
    def parse(
        cls, token: "Token", stream: "TokenStream", parser: "TemplateTreeParser"
    ) -> "AssignDirective":
        expression_parser = parser.expression_parser(token.tag_args, token)
        name = expression_parser.expect_identifier()
        expression_parser.expect("punctuation", "=")
        expression = expression_parser.parse_expression()
        expression_parser.expect_end()
        return cls(name, expression)

    def render(self, context: RenderContext) -> None:
        context.assign(self.name, self.expression.evaluate(context))


def _literal_name(token: "Token", parser: "TemplateTreeParser") -> str:
    """Read a directive's single literal name argument, quoted or bare."""
    name = token.tag_args.strip()
    if len(name) >= 2 and name[0] == name[-1] and name[0] in ("'", '"'):
        name = unquote(name)
    if not name:
        raise TemplateSyntaxError(
            f"'{token.tag_name}' requires a name", parser.error_context(token)
        )
    return name


class CaptureDirective(Directive):
    """``{% capture name %}...{% endcapture %}`` binds rendered text to a variable."""

    delimiters = frozenset({"endcapture"})

    def __init__(self, name: str, body: Sequence[Node]):
        self.name = name
        self.body = tuple(body)

    @classmethod
    def parse(
        cls, token: "Token", stream: "TokenStream", parser: "TemplateTreeParser"
    ) -> "CaptureDirective":
        name = _literal_name(token, parser)
        body, _ = parser.parse_body(stream, token, {"endcapture"})
        return cls(name, body)

    def render(self, context: RenderContext) -> None:
        with context.capture() as sink:
            render_nodes(self.body, context)
        context.assign(self.name, sink.getvalue())


class SectionDirective(Directive):
    """
    ``{% section name %}...{% endsection %}`` captures a named output.

    The block renders into its own sink; the stripped text is stored under
    ``sections[name]`` in the render metadata (last write wins) and nothing
    is emitted inline.
    """

    delimiters = frozenset({"endsection"})

    def __init__(self, name: str, body: Sequence[Node]):
        self.name = name
        self.body = tuple(body)

    @classmethod
    def parse(
        cls, token: "Token", stream: "TokenStream", parser: "TemplateTreeParser"
    ) -> "SectionDirective":
        name = _literal_name(token, parser)
        body, _ = parser.parse_body(stream, token, {"endsection"})
        return cls(name, body)

    def render(self, context: RenderContext) -> None:
        metadata = context.ensure_metadata()
        with context.capture() as sink:
            render_nodes(self.body, context)
        metadata.sections[self.name] = sink.getvalue().strip()


class CommentDirective(Directive):
    """``{% comment %}...{% endcomment %}`` discards its body unparsed."""

    delimiters = frozenset({"endcomment"})

    @classmethod
    def parse(
        cls, token: "Token", stream: "TokenStream", parser: "TemplateTreeParser"
    ) -> "CommentDirective":
        depth = 0
        while not stream.at_end():
            current = stream.next()
            if current.kind is not TokenKind.TAG:
                continue
            if current.tag_name == "comment":
                depth += 1
            elif current.tag_name == "endcomment":
                if depth == 0:
                    return cls()
                depth -= 1
        raise UnclosedTagError(token.source, parser.error_context(token))

    def render(self, context: RenderContext) -> None:
        return None


BUILTIN_DIRECTIVES: Mapping[str, type[Directive]] = {
    "if": IfDirective,
    "case": CaseDirective,
    "for": ForDirective,
    "assign": AssignDirective,
    "capture": CaptureDirective,
    "upper": UpperDirective,
    "must_include_each": MustIncludeEachDirective,
    "section": SectionDirective,
    "comment": CommentDirective,
}
