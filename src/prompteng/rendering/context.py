"""
Render context and output sinks for a single template evaluation.

A RenderContext owns all mutable state of one render call: the stack of
variable scope frames, the currently active output sink, and the lazily
created side-channel metadata (constraints and sections). Nothing in it is
shared between calls, so concurrent renders of one parsed template cannot
observe each other.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Literal

from prompteng.core.types import Sections


class OutputSink(ABC):
    """Destination for rendered text."""

    @abstractmethod
    def write(self, text: str) -> None:
        """Append rendered text to the sink."""
        pass


class StringSink(OutputSink):
    """In-memory sink accumulating text fragments."""

    def __init__(self):
        self._parts: list[str] = []

    def write(self, text: str) -> None:
        if text:
            self._parts.append(text)

    def getvalue(self) -> str:
        return "".join(self._parts)


@dataclass(frozen=True)
class Constraint:
    """
    Structured requirement recorded by a constraint directive.

    Params:
        type: Constraint variant tag
        words: Words the completion must contain, in template order
    """

    type: Literal["must_include_each"]
    words: tuple[str, ...]

    @classmethod
    def must_include_each(cls, words: list[str]) -> "Constraint":
        return cls(type="must_include_each", words=tuple(words))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "words": list(self.words)}


@dataclass
class RenderMetadata:
    """Side-channel output of one render: constraints and named sections."""

    constraints: list[Constraint] = field(default_factory=list)
    sections: Sections = field(default_factory=dict)


class RenderContext:
    """
    Mutable evaluation state for one render call.

    Variable lookup walks scope frames from innermost to outermost. The
    caller's bindings live in a copied bottom frame. Above it sits the
    render-global frame that receives every assignment, so a binding made
    inside a loop body outlives the iteration. Block frames holding loop
    variables sit on top.
    """

    def __init__(self, variables: Mapping[str, Any] | None = None):
        """
        Initialize a fresh context.

        Params:
            variables: Caller-supplied bindings for this render
        """
        self._frames: list[dict[str, Any]] = [dict(variables or {}), {}]
        self._primary = StringSink()
        self._sinks: list[OutputSink] = [self._primary]
        self._metadata: RenderMetadata | None = None

    @property
    def sink(self) -> OutputSink:
        """The sink currently receiving output."""
        return self._sinks[-1]

    @property
    def metadata(self) -> RenderMetadata | None:
        """Side-channel metadata, or None if no directive produced any."""
        return self._metadata

    def ensure_metadata(self) -> RenderMetadata:
        """Return the render metadata, creating it on first use."""
        if self._metadata is None:
            self._metadata = RenderMetadata()
        return self._metadata

    def write(self, text: str) -> None:
        self.sink.write(text)

    def get(self, name: str) -> Any:
        """Look up a variable; missing names resolve to None."""
        for frame in reversed(self._frames):
            if name in frame:
                return frame[name]
        return None

    def assign(self, name: str, value: Any) -> None:
        """Bind a value in the render-global frame, visible until the render ends."""
        self._frames[1][name] = value

    @contextmanager
    def scope(self, bindings: Mapping[str, Any] | None = None) -> Iterator[None]:
        """Push a scope frame for the duration of the block."""
        self._frames.append(dict(bindings or {}))
        try:
            yield
        finally:
            self._frames.pop()

    @contextmanager
    def capture(self) -> Iterator[StringSink]:
        """Divert output into a fresh sink for the duration of the block."""
        sink = StringSink()
        self._sinks.append(sink)
        try:
            yield sink
        finally:
            self._sinks.pop()

    def output(self) -> str:
        """Text accumulated by the primary sink."""
        return self._primary.getvalue()
