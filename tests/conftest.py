from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.doc_builder import DocBuilder

pytest_plugins = ["pytester"]


@pytest.fixture
def doc_builder(tmp_path: Path) -> DocBuilder:
    """Provide a documentation tree rooted at the pytest tmp_path."""
    return DocBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_skeptic_logger() -> Iterator[None]:
    """Undo CLI logging setup so handlers never outlive a test's capture streams."""
    yield
    logger = logging.getLogger("skeptic")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
