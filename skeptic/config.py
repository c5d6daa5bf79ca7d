"""Configuration loading for skeptic (environment and .skeptic.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import yaml

from .templates import TEMPLATE_FILE_SUFFIX

CONFIG_FILE_NAME = ".skeptic.yml"
DEFAULT_OUT_FILE = "skeptic_tests.py"

ENV_OUT_DIR = "OUT_DIR"
ENV_ROOT_DIR = "CARGO_MANIFEST_DIR"


class ConfigError(RuntimeError):
    """Raised when the configuration is incomplete or cannot be parsed."""


@dataclass
class SkepticConfig:
    """Settings for one generation pass, built once at the entry point."""

    out_dir: Path
    root_dir: Path
    out_file: Path
    docs: List[str] = field(default_factory=list)


def load_config(
    *,
    root_dir: Path | str | None = None,
    out_dir: Path | str | None = None,
    out_file: Path | str | None = None,
    docs: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SkepticConfig:
    """Resolve configuration from arguments, the environment and .skeptic.yml.

    Explicit arguments take precedence over ``OUT_DIR`` and
    ``CARGO_MANIFEST_DIR``; the project file only supplies ``docs`` and
    ``out_file`` when they were not given. Template files (``*.skt.md``) are
    dropped from ``docs`` whichever source supplied them.
    """
    env = os.environ if environ is None else environ

    root_str = _as_str(root_dir) if root_dir is not None else env.get(ENV_ROOT_DIR)
    root = Path(root_str).expanduser() if root_str else Path.cwd()
    root = root.resolve()

    out_str = _as_str(out_dir) if out_dir is not None else env.get(ENV_OUT_DIR)
    if not out_str:
        raise ConfigError(
            f"No output directory configured; pass --out-dir or set {ENV_OUT_DIR}"
        )
    resolved_out_dir = Path(out_str).expanduser().resolve()

    data = _read_config(root / CONFIG_FILE_NAME)

    if docs is None:
        resolved_docs = filter_documents(_as_str_list(data.get("docs")))
    else:
        resolved_docs = filter_documents(docs)

    out_file_str = _as_str(out_file) if out_file is not None else _as_str(data.get("out_file"))
    resolved_out_file = resolved_out_dir / (out_file_str or DEFAULT_OUT_FILE)

    return SkepticConfig(
        out_dir=resolved_out_dir,
        root_dir=root,
        out_file=resolved_out_file,
        docs=resolved_docs,
    )


def filter_documents(docs: Iterable[str | Path]) -> List[str]:
    """Drop template files, which are only read alongside their document."""
    return [str(doc) for doc in docs if not str(doc).endswith(TEMPLATE_FILE_SUFFIX)]


def _read_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, Path):
        return str(value)
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "DEFAULT_OUT_FILE",
    "SkepticConfig",
    "filter_documents",
    "load_config",
]
