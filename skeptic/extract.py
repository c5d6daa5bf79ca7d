"""Extraction of code samples and templates from Markdown documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .logging import get_logger
from .markdown import CodeBlockEnd, CodeBlockStart, Event, Text, iter_events
from .tags import CodeBlockInfo, parse_code_block_info
from .templates import TemplateStore, template_file_for

_LOGGER = get_logger("extract")


@dataclass(frozen=True)
class SampleTest:
    """One runnable sample extracted from a document."""

    name: str
    text: Sequence[str]
    ignore: bool = False
    no_run: bool = False
    should_panic: bool = False
    template: Optional[str] = None


@dataclass
class DocTest:
    """Samples and templates extracted from a single document."""

    path: Path
    tests: List[SampleTest] = field(default_factory=list)
    templates: TemplateStore = field(default_factory=TemplateStore)


@dataclass
class DocTestSuite:
    """Extraction results for every configured document, in input order."""

    doc_tests: List[DocTest] = field(default_factory=list)


class State(Enum):
    """Extractor position relative to code blocks."""

    OUTSIDE = "outside"
    ACCUMULATING_SAMPLE = "accumulating_sample"


def sanitize_test_name(name: str) -> str:
    """Lower-case ``name`` and replace anything but ASCII letters and digits with ``_``."""
    return "".join(
        char if char.isascii() and char.isalnum() else "_" for char in name.lower()
    )


class TestNameGen:
    """Generates ``<stem>_<n>`` names for the samples of one document."""

    __test__ = False

    def __init__(self, path: Path) -> None:
        self.root = sanitize_test_name(path.stem)
        self.count = 0

    def advance(self) -> str:
        name = f"{self.root}_{self.count}"
        self.count += 1
        return name


class BlockExtractor:
    """State machine that turns an event stream into samples or templates.

    In document mode, closed sample blocks become tests and
    ``skeptic-template`` blocks replace the legacy template. In template-file
    mode every sample block must carry an ``skt-<name>`` tag; blocks without
    one are dropped.
    """

    def __init__(self, path: Path, *, templates_only: bool = False) -> None:
        self.path = path
        self.templates_only = templates_only
        self.state = State.OUTSIDE
        self.tests: List[SampleTest] = []
        self.legacy_template: Optional[str] = None
        self.named_templates: Dict[str, str] = {}
        self._names = TestNameGen(path)
        self._info: Optional[CodeBlockInfo] = None
        self._buffer: List[str] = []

    def feed(self, event: Event) -> None:
        if isinstance(event, CodeBlockStart):
            self._start(event.info)
        elif isinstance(event, Text):
            if self.state is State.ACCUMULATING_SAMPLE:
                self._buffer.append(event.text)
        elif isinstance(event, CodeBlockEnd):
            self._end()

    def feed_all(self, events: Iterable[Event]) -> "BlockExtractor":
        for event in events:
            self.feed(event)
        return self

    def _start(self, info: str) -> None:
        if self.state is State.ACCUMULATING_SAMPLE:
            _LOGGER.debug("%s: abandoning unterminated code block", self.path)
        code_block_info = parse_code_block_info(info)
        if code_block_info.is_rust:
            self.state = State.ACCUMULATING_SAMPLE
            self._info = code_block_info
        else:
            self.state = State.OUTSIDE
            self._info = None
        self._buffer = []

    def _end(self) -> None:
        if self.state is not State.ACCUMULATING_SAMPLE or self._info is None:
            return
        info = self._info
        lines = self._buffer
        self.state = State.OUTSIDE
        self._info = None
        self._buffer = []

        if self.templates_only:
            if info.template is not None:
                self.named_templates[info.template] = "".join(lines)
            return
        if info.is_old_template:
            self.legacy_template = "".join(lines)
            return
        self.tests.append(
            SampleTest(
                name=self._names.advance(),
                text=tuple(lines),
                ignore=info.ignore,
                no_run=info.no_run,
                should_panic=info.should_panic,
                template=info.template,
            )
        )


def extract_tests_from_file(path: Path) -> DocTest:
    """Extract samples, the legacy template and named templates for ``path``."""
    markdown = path.read_text(encoding="utf-8")
    extractor = BlockExtractor(path).feed_all(iter_events(markdown))
    named = load_templates(path)
    _LOGGER.debug(
        "%s: %d samples, %d named templates%s",
        path,
        len(extractor.tests),
        len(named),
        ", legacy template" if extractor.legacy_template is not None else "",
    )
    return DocTest(
        path=path,
        tests=extractor.tests,
        templates=TemplateStore(legacy=extractor.legacy_template, named=named),
    )


def load_templates(path: Path) -> Dict[str, str]:
    """Load named templates from the document's ``.skt.md`` sibling, if any."""
    template_path = template_file_for(path)
    if not template_path.exists():
        return {}
    markdown = template_path.read_text(encoding="utf-8")
    extractor = BlockExtractor(template_path, templates_only=True)
    extractor.feed_all(iter_events(markdown))
    return extractor.named_templates


def extract_tests(root_dir: Path, docs: Iterable[str]) -> DocTestSuite:
    """Extract every document, resolving each path against ``root_dir``."""
    suite = DocTestSuite()
    for doc in docs:
        suite.doc_tests.append(extract_tests_from_file(root_dir / doc))
    return suite


__all__ = [
    "BlockExtractor",
    "DocTest",
    "DocTestSuite",
    "SampleTest",
    "State",
    "TestNameGen",
    "extract_tests",
    "extract_tests_from_file",
    "load_templates",
    "sanitize_test_name",
]
