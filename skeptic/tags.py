"""Parsing of fenced code block info strings into sample flags."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import List, Optional

RUST_TAG = "rust"
SHOULD_PANIC_TAG = "should_panic"
IGNORE_TAG = "ignore"
NO_RUN_TAG = "no_run"
LEGACY_TEMPLATE_TAG = "skeptic-template"
TEMPLATE_PREFIX = "skt-"

# Same separators as rustdoc: anything other than a word character or a dash.
_SEPARATOR_PATTERN = re.compile(r"[^\w-]")


@dataclass(frozen=True)
class CodeBlockInfo:
    """Flags derived from a single code block's info string."""

    is_rust: bool = False
    should_panic: bool = False
    ignore: bool = False
    no_run: bool = False
    is_old_template: bool = False
    template: Optional[str] = None


def tokenize_info(info: str) -> List[str]:
    """Split an info string into non-empty tag tokens."""
    return [token for token in _SEPARATOR_PATTERN.split(info) if token]


def parse_code_block_info(info: str) -> CodeBlockInfo:
    """Classify a code block from its info string.

    A block counts as a runnable sample only when it carries the ``rust`` tag
    and either has no unrecognised tags or carries at least one recognised
    one. ``rust,ignore`` and ``rust,no_run,foo`` are samples; ``rust,foo`` is
    not.
    """
    is_rust = False
    should_panic = False
    ignore = False
    no_run = False
    is_old_template = False
    template: Optional[str] = None
    seen_rust_tags = False
    seen_other_tags = False

    for token in tokenize_info(info):
        if token == RUST_TAG:
            is_rust = True
        elif token == SHOULD_PANIC_TAG:
            should_panic = True
            seen_rust_tags = True
        elif token == IGNORE_TAG:
            ignore = True
            seen_rust_tags = True
        elif token == NO_RUN_TAG:
            no_run = True
            seen_rust_tags = True
        elif token == LEGACY_TEMPLATE_TAG:
            is_old_template = True
            seen_rust_tags = True
        elif token.startswith(TEMPLATE_PREFIX):
            template = token[len(TEMPLATE_PREFIX):] or None
            seen_rust_tags = True
        else:
            seen_other_tags = True

    is_rust = is_rust and (not seen_other_tags or seen_rust_tags)
    if is_old_template:
        template = None

    return CodeBlockInfo(
        is_rust=is_rust,
        should_panic=should_panic,
        ignore=ignore,
        no_run=no_run,
        is_old_template=is_old_template,
        template=template,
    )


__all__ = ["CodeBlockInfo", "parse_code_block_info", "tokenize_info"]
