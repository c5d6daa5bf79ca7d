"""Generation pipeline: extract samples, assemble tests, write the module."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Sequence

from .config import SkepticConfig, filter_documents, load_config
from .extract import DocTestSuite, extract_tests
from .logging import get_logger
from .templates import TEMPLATE_FILE_SUFFIX
from .writer import emit_tests

_LOGGER = get_logger("orchestrator")

RERUN_DIRECTIVE = "cargo:rerun-if-changed={}"


def rerun_directives(docs: Iterable[str]) -> List[str]:
    """Return the rebuild directives for every document and its template file."""
    directives: List[str] = []
    for doc in docs:
        directives.append(RERUN_DIRECTIVE.format(doc))
        directives.append(RERUN_DIRECTIVE.format(f"{doc}{TEMPLATE_FILE_SUFFIX}"))
    return directives


def run(config: SkepticConfig) -> bool:
    """Run one generation pass; returns ``True`` when the module was rewritten."""
    _LOGGER.debug("Extracting samples from %d documents", len(config.docs))
    suite: DocTestSuite = extract_tests(config.root_dir, config.docs)
    total = sum(len(doc_test.tests) for doc_test in suite.doc_tests)
    _LOGGER.debug("Extracted %d samples", total)
    return emit_tests(config, suite)


def generate_doc_tests(
    docs: Sequence[str],
    config: Optional[SkepticConfig] = None,
    *,
    emit: Callable[[str], None] = print,
) -> Optional[bool]:
    """Generate the test module for ``docs``.

    An empty document list is a no-op so README examples can call this
    outside of a build. Otherwise the rebuild directives are emitted and the
    configuration is read from ``OUT_DIR``/``CARGO_MANIFEST_DIR`` when not
    supplied.
    """
    if not docs:
        return None

    selected = filter_documents(docs)
    for directive in rerun_directives(selected):
        emit(directive)

    if config is None:
        config = load_config(docs=selected)
    else:
        config = replace(config, docs=selected)
    return run(config)


__all__ = ["filter_documents", "generate_doc_tests", "rerun_directives", "run"]
