"""Test Rust code samples embedded in Markdown documentation."""

from .config import ConfigError, SkepticConfig, load_config
from .orchestrator import generate_doc_tests
from .templates import TemplateError
from .writer import GenerationError

__all__ = [
    "ConfigError",
    "GenerationError",
    "SkepticConfig",
    "TemplateError",
    "generate_doc_tests",
    "load_config",
]
