"""CLI entrypoints for skeptic commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .extract import SampleTest, extract_tests
from .logging import configure_logging
from .orchestrator import rerun_directives, run
from .templates import TemplateError
from .writer import GenerationError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also append log records to this file.",
    )


def _add_root_dir_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root-dir",
        default=None,
        help="Project root that document paths are relative to (defaults to $CARGO_MANIFEST_DIR or the current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skeptic",
        description="Turn Rust samples in Markdown documentation into pytest tests.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate the test module for the given documents.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_log_file_option(generate_parser, suppress_default=True)
    _add_root_dir_option(generate_parser)
    generate_parser.add_argument(
        "docs",
        nargs="*",
        help="Markdown documents to extract (defaults to `docs` in .skeptic.yml).",
    )
    generate_parser.add_argument(
        "--out-dir",
        default=None,
        help="Build output directory (defaults to $OUT_DIR).",
    )
    generate_parser.add_argument(
        "--out-file",
        default=None,
        help="Name of the generated module inside the output directory.",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="Print the samples found in the given documents without generating anything.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_log_file_option(list_parser, suppress_default=True)
    _add_root_dir_option(list_parser)
    list_parser.add_argument(
        "docs",
        nargs="*",
        help="Markdown documents to extract (defaults to `docs` in .skeptic.yml).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for skeptic commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file).expanduser() if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    docs = args.docs or None

    if args.command == "generate":
        try:
            config = load_config(
                root_dir=args.root_dir,
                out_dir=args.out_dir,
                out_file=args.out_file,
                docs=docs,
            )
            if not config.docs:
                parser.exit(1, "No documents given and none listed in .skeptic.yml\n")
            for directive in rerun_directives(config.docs):
                print(directive)
            written = run(config)
        except (ConfigError, GenerationError, TemplateError) as exc:
            parser.exit(1, f"skeptic generate failed: {exc}\n")
        except OSError as exc:
            parser.exit(1, f"skeptic generate failed: {exc}\nRun with --verbose for more details.\n")
        rel_path = _relativize(config.out_file)
        if written:
            print(f"Tests written to {rel_path}", file=sys.stderr)
        else:
            print(f"{rel_path} already up to date", file=sys.stderr)
    elif args.command == "list":
        try:
            # Listing never writes, so the output directory is irrelevant.
            config = load_config(root_dir=args.root_dir, out_dir=".", docs=docs)
            suite = extract_tests(config.root_dir, config.docs)
        except ConfigError as exc:
            parser.exit(1, f"skeptic list failed: {exc}\n")
        except OSError as exc:
            parser.exit(1, f"skeptic list failed: {exc}\n")
        for doc_test in suite.doc_tests:
            print(_relativize(doc_test.path))
            for test in doc_test.tests:
                print(f"  {test.name}{_describe_flags(test)}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _describe_flags(test: SampleTest) -> str:
    flags = [
        flag
        for flag, enabled in (
            ("ignore", test.ignore),
            ("no_run", test.no_run),
            ("should_panic", test.should_panic),
        )
        if enabled
    ]
    if test.template is not None:
        flags.append(f"template={test.template}")
    return f" [{', '.join(flags)}]" if flags else ""


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
