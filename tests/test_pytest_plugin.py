"""Tests for the pytest hooks that handle `ignore`-tagged samples."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from skeptic import pytest_plugin
from skeptic.config import SkepticConfig
from skeptic.orchestrator import run


class _FakeConfig:
    def __init__(self, run_ignored: bool) -> None:
        self._options: Dict[str, bool] = {"--run-ignored": run_ignored}
        self.ini_lines: List[tuple[str, str]] = []

    def getoption(self, name: str) -> bool:
        return self._options[name]

    def addinivalue_line(self, name: str, line: str) -> None:
        self.ini_lines.append((name, line))


class _FakeItem:
    def __init__(self, *markers: str) -> None:
        self._markers = {name: getattr(pytest.mark, name) for name in markers}
        self.added: List[pytest.MarkDecorator] = []

    def get_closest_marker(self, name: str) -> Optional[pytest.MarkDecorator]:
        return self._markers.get(name)

    def add_marker(self, marker: pytest.MarkDecorator) -> None:
        self.added.append(marker)


def test_ignored_samples_are_skipped_by_default() -> None:
    ignored = _FakeItem("skeptic_ignore")
    regular = _FakeItem()

    pytest_plugin.pytest_collection_modifyitems(_FakeConfig(False), [ignored, regular])  # type: ignore[arg-type]

    assert [marker.name for marker in ignored.added] == ["skip"]
    assert regular.added == []


def test_run_ignored_option_keeps_ignored_samples() -> None:
    ignored = _FakeItem("skeptic_ignore")

    pytest_plugin.pytest_collection_modifyitems(_FakeConfig(True), [ignored])  # type: ignore[arg-type]

    assert ignored.added == []


def test_marker_is_registered() -> None:
    config = _FakeConfig(False)
    pytest_plugin.pytest_configure(config)  # type: ignore[arg-type]
    assert config.ini_lines[0][0] == "markers"
    assert config.ini_lines[0][1].startswith("skeptic_ignore:")


_SAMPLES = """
```rust
fn main() {}
```

```rust,ignore
fn main() { unimplemented!() }
```
"""

# Stands in for the toolchain so the generated tests only exercise collection.
_NO_TOOLCHAIN_CONFTEST = """
import pytest

from skeptic import rt


@pytest.fixture(autouse=True)
def _no_toolchain(monkeypatch):
    monkeypatch.setattr(rt, "compile_and_run", lambda out_dir, text: None)
    monkeypatch.setattr(rt, "compile_only", lambda out_dir, text: None)
"""


@pytest.fixture
def generated_module(pytester: pytest.Pytester, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Generate a test module from a sample document inside the pytester directory."""
    (pytester.path / "README.md").write_text(_SAMPLES.lstrip("\n"), encoding="utf-8")
    config = SkepticConfig(
        out_dir=pytester.path,
        root_dir=pytester.path,
        out_file=pytester.path / "test_samples.py",
        docs=["README.md"],
    )
    run(config)
    pytester.makeconftest(_NO_TOOLCHAIN_CONFTEST)
    # Load the plugin explicitly whether or not the package's entry point is installed.
    monkeypatch.setenv("PYTEST_DISABLE_PLUGIN_AUTOLOAD", "1")
    return config.out_file


def test_generated_ignored_sample_is_skipped(
    pytester: pytest.Pytester, generated_module: Path
) -> None:
    result = pytester.runpytest("-p", "skeptic.pytest_plugin", "--strict-markers", "-rs")

    result.assert_outcomes(passed=1, skipped=1)
    result.stdout.fnmatch_lines(["*sample tagged ignore; pass --run-ignored to run it*"])


def test_generated_ignored_sample_runs_with_option(
    pytester: pytest.Pytester, generated_module: Path
) -> None:
    result = pytester.runpytest(
        "-p", "skeptic.pytest_plugin", "--strict-markers", "--run-ignored"
    )

    result.assert_outcomes(passed=2)
