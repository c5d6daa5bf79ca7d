"""Serialisation of assembled units into the generated test module."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from .assemble import AssembledUnit, create_test_runner
from .config import SkepticConfig
from .extract import DocTestSuite
from .logging import get_logger
from .templates import validate_template

_LOGGER = get_logger("writer")

# Generated units call into skeptic.rt at test time.
PREAMBLE = (
    "# Generated by skeptic from documentation samples. Do not edit.\n"
    "import pytest\n"
    "\n"
    "from skeptic import rt\n"
)


class GenerationError(RuntimeError):
    """Raised when the samples cannot be turned into a valid test module."""


def render_tests(config: SkepticConfig, suite: DocTestSuite) -> str:
    """Return the full generated module for ``suite``.

    Raises ``TemplateError`` before anything is rendered to disk when a sample
    references an unknown template or a template is malformed, and
    ``GenerationError`` when two documents yield the same test function.
    """
    units: List[AssembledUnit] = []
    origins: Dict[str, Path] = {}
    for doc_test in suite.doc_tests:
        for test in doc_test.tests:
            template = doc_test.templates.resolve(test, doc_test.path)
            validate_template(template, name=test.template)
            unit = create_test_runner(test, template, config.out_dir)
            # Documents with the same sanitized stem, e.g. README.md and docs/README.md.
            if unit.function_name in origins:
                raise GenerationError(
                    f"{unit.function_name} is generated from both "
                    f"{origins[unit.function_name]} and {doc_test.path}; "
                    "rename one of the documents"
                )
            origins[unit.function_name] = doc_test.path
            units.append(unit)

    parts = [PREAMBLE]
    for unit in units:
        parts.append("\n\n")
        parts.append(unit.text)
    return "".join(parts)


def emit_tests(config: SkepticConfig, suite: DocTestSuite) -> bool:
    """Write the generated module, returning ``True`` if the file changed."""
    contents = render_tests(config, suite)
    written = write_if_contents_changed(config.out_file, contents)
    if written:
        _LOGGER.info("Wrote %s", config.out_file)
    else:
        _LOGGER.info("%s already up to date", config.out_file)
    return written


def write_if_contents_changed(path: Path, contents: str) -> bool:
    """Write ``contents`` unless ``path`` already holds exactly that text.

    Skipping the write keeps the file's modification time, so build tools
    watching it do not rebuild needlessly.
    """
    try:
        current = path.read_bytes()
    except FileNotFoundError:
        pass
    else:
        if current == contents.encode("utf-8"):
            return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8", newline="\n")
    return True


__all__ = [
    "GenerationError",
    "PREAMBLE",
    "emit_tests",
    "render_tests",
    "write_if_contents_changed",
]
