"""pytest hooks for generated documentation tests."""

from __future__ import annotations

import pytest

from .assemble import IGNORE_MARKER

RUN_IGNORED_OPTION = "--run-ignored"


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("skeptic")
    group.addoption(
        RUN_IGNORED_OPTION,
        action="store_true",
        default=False,
        help="Also run documentation samples tagged `ignore`.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"{IGNORE_MARKER}: documentation sample tagged `ignore`; "
        f"skipped unless {RUN_IGNORED_OPTION} is given",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption(RUN_IGNORED_OPTION):
        return
    skip_ignored = pytest.mark.skip(
        reason=f"sample tagged ignore; pass {RUN_IGNORED_OPTION} to run it"
    )
    for item in items:
        if item.get_closest_marker(IGNORE_MARKER) is not None:
            item.add_marker(skip_ignored)
