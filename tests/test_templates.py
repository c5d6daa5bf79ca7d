"""Tests for template resolution and placeholder validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from skeptic.extract import SampleTest
from skeptic.templates import (
    IDENTITY_TEMPLATE,
    TemplateError,
    TemplateStore,
    count_placeholders,
    template_file_for,
    validate_template,
)


def _test(template: str | None = None) -> SampleTest:
    return SampleTest(name="readme_0", text=("let x = 1;\n",), template=template)


def test_explicit_reference_overrides_legacy_template() -> None:
    store = TemplateStore(legacy="legacy {}", named={"main": "named {}"})
    assert store.resolve(_test("main"), Path("README.md")) == "named {}"


def test_legacy_template_applies_without_reference() -> None:
    store = TemplateStore(legacy="legacy {}", named={"main": "named {}"})
    assert store.resolve(_test(), Path("README.md")) == "legacy {}"


def test_identity_template_without_reference_or_legacy() -> None:
    assert TemplateStore().resolve(_test(), Path("README.md")) == IDENTITY_TEMPLATE


def test_missing_named_template_names_template_and_document() -> None:
    store = TemplateStore(legacy="legacy {}")
    with pytest.raises(TemplateError) as excinfo:
        store.resolve(_test("absent"), Path("docs/guide.md"))
    message = str(excinfo.value)
    assert "absent" in message
    assert "docs/guide.md" in message


def test_template_file_for_appends_suffix() -> None:
    assert template_file_for(Path("docs/guide.md")) == Path("docs/guide.md.skt.md")


def test_count_placeholders_ignores_escaped_braces() -> None:
    assert count_placeholders("fn main() {{ {} }}") == 1
    assert count_placeholders("{{}}") == 0


@pytest.mark.parametrize(
    "template",
    ["no placeholder", "{} and {}", "{name}", "{1}", "unbalanced }", "{!r}", "{:x}", "{:?}", "{0!s:>4}"],
)
def test_validate_template_rejects_bad_placeholders(template: str) -> None:
    with pytest.raises(TemplateError):
        validate_template(template, name="main")


@pytest.mark.parametrize("template", ["{}", "{0}", "use std::io;\nfn main() {{\n{}\n}}\n"])
def test_validate_template_accepts_single_placeholder(template: str) -> None:
    assert validate_template(template) == template


def test_conversion_in_placeholder_is_reported() -> None:
    with pytest.raises(TemplateError, match=r"template main: template placeholder \{!r\} is not supported"):
        validate_template("fn main() {{ {!r} }}", name="main")
