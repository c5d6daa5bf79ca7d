"""Adapter from the Markdown tokenizer to a flat block/text event stream."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterator, List, Union

from markdown_it import MarkdownIt

_LINE_PATTERN = re.compile(r"[^\n]*\n|[^\n]+\Z")
_CODE_TOKEN_TYPES = {"fence", "code_block"}


@dataclass(frozen=True)
class CodeBlockStart:
    """A fenced or indented code block opens."""

    info: str


@dataclass(frozen=True)
class CodeBlockEnd:
    """The most recently opened code block closes."""

    info: str


@dataclass(frozen=True)
class Text:
    """A verbatim text fragment."""

    text: str


Event = Union[CodeBlockStart, CodeBlockEnd, Text]


def split_lines(text: str) -> List[str]:
    """Split ``text`` into lines, keeping each line's trailing newline."""
    return _LINE_PATTERN.findall(text)


def iter_events(markdown: str) -> Iterator[Event]:
    """Yield block and text events for a Markdown document.

    Code block content is emitted one line per ``Text`` event so consumers
    can rewrite individual lines. Indented code blocks carry an empty info
    string.
    """
    parser = MarkdownIt("commonmark")
    for token in parser.parse(markdown):
        if token.type in _CODE_TOKEN_TYPES:
            info = token.info or ""
            yield CodeBlockStart(info)
            for line in split_lines(token.content):
                yield Text(line)
            yield CodeBlockEnd(info)
        elif token.type == "inline" and token.content:
            yield Text(token.content)


__all__ = [
    "CodeBlockEnd",
    "CodeBlockStart",
    "Event",
    "Text",
    "iter_events",
    "split_lines",
]
