"""Template storage and resolution for wrapping bare samples."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import string
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .extract import SampleTest

TEMPLATE_FILE_SUFFIX = ".skt.md"
IDENTITY_TEMPLATE = "{}"

_FORMATTER = string.Formatter()


class TemplateError(RuntimeError):
    """Raised when a template cannot be resolved or has a bad placeholder."""


@dataclass
class TemplateStore:
    """Templates available to the tests of one document."""

    legacy: Optional[str] = None
    named: Dict[str, str] = field(default_factory=dict)

    def resolve(self, test: "SampleTest", document: Path | str) -> str:
        """Return the template text for ``test``.

        An explicit ``skt-<name>`` reference wins over the document's legacy
        template; with neither, the sample is used as-is.
        """
        if test.template is not None:
            try:
                return self.named[test.template]
            except KeyError:
                raise TemplateError(
                    f"template {test.template} not found for {document}"
                ) from None
        if self.legacy is not None:
            return self.legacy
        return IDENTITY_TEMPLATE


def template_file_for(path: Path) -> Path:
    """Return the sibling template file path for a document."""
    return path.with_name(f"{path.name}{TEMPLATE_FILE_SUFFIX}")


def count_placeholders(template: str) -> int:
    """Count replacement fields in ``template`` using ``str.format`` syntax."""
    try:
        fields = [
            (field_name, format_spec, conversion)
            for _, field_name, format_spec, conversion in _FORMATTER.parse(template)
            if field_name is not None
        ]
    except ValueError as exc:
        raise TemplateError(f"malformed template: {exc}") from exc
    for field_name, format_spec, conversion in fields:
        if field_name not in ("", "0"):
            raise TemplateError(
                f"template placeholder {{{field_name}}} is not supported; use {{}}"
            )
        # The sample is substituted verbatim; "{!r}" or "{:x}" would alter or reject it.
        if conversion is not None or format_spec:
            suffix = f"!{conversion}" if conversion is not None else ""
            suffix += f":{format_spec}" if format_spec else ""
            raise TemplateError(
                f"template placeholder {{{field_name}{suffix}}} is not supported; use {{}}"
            )
    return len(fields)


def validate_template(template: str, *, name: str | None = None) -> str:
    """Ensure ``template`` has exactly one ``{}`` substitution point."""
    label = f"template {name}" if name else "template"
    try:
        count = count_placeholders(template)
    except TemplateError as exc:
        raise TemplateError(f"{label}: {exc}") from exc
    if count != 1:
        raise TemplateError(
            f"{label} must contain exactly one {{}} placeholder, found {count}"
        )
    return template


__all__ = [
    "IDENTITY_TEMPLATE",
    "TEMPLATE_FILE_SUFFIX",
    "TemplateError",
    "TemplateStore",
    "count_placeholders",
    "template_file_for",
    "validate_template",
]
