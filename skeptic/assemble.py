"""Assembly of extracted samples into generated pytest functions."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from .extract import SampleTest

IGNORE_MARKER = "skeptic_ignore"
OMITTED_LINE_MARKER = "#"


@dataclass(frozen=True)
class AssembledUnit:
    """Generated source for one sample's test function."""

    name: str
    function_name: str
    text: str


def clean_omitted_line(line: str) -> str:
    """Strip the rustdoc ``#`` marker used to hide a line from rendered docs.

    A bare ``#`` line becomes a blank line and ``# code`` becomes ``code``.
    Anything else, including attributes such as ``#[derive(Debug)]``, is
    returned unchanged.
    """
    trimmed = line.lstrip()
    if trimmed == f"{OMITTED_LINE_MARKER}\n":
        return trimmed[1:]
    if trimmed.startswith(f"{OMITTED_LINE_MARKER} "):
        return trimmed[2:]
    return line


def create_test_input(lines: Iterable[str]) -> str:
    """Return the compiled form of a sample body."""
    return "".join(clean_omitted_line(line) for line in lines)


def create_test_runner(test: SampleTest, template: str, out_dir: Path) -> AssembledUnit:
    """Render the pytest function that substitutes and runs one sample."""
    function_name = f"test_{test.name}"
    test_text = create_test_input(test.text)

    format_string = "\n" + template

    lines: List[str] = []
    if test.ignore:
        lines.append(f"@pytest.mark.{IGNORE_MARKER}")
    if test.should_panic:
        lines.append("@pytest.mark.xfail(raises=rt.CommandFailed, strict=True)")
    lines.append(f"def {function_name}():")
    lines.append(f"    s = {format_string!r}.format({test_text!r})")
    # no_run samples are only checked for compilation.
    entry_point = "compile_only" if test.no_run else "compile_and_run"
    lines.append(f"    rt.{entry_point}({str(out_dir)!r}, s)")

    return AssembledUnit(
        name=test.name,
        function_name=function_name,
        text="\n".join(lines) + "\n",
    )


__all__ = [
    "AssembledUnit",
    "clean_omitted_line",
    "create_test_input",
    "create_test_runner",
]
