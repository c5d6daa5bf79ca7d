"""Runtime harness used by generated tests to compile and run samples."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import os
from pathlib import Path
import shlex
import subprocess
import sys
import tempfile
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from .logging import get_logger

DEFAULT_COMPILER = "rustc"
ENV_COMPILER = "RUSTC"
TEMP_PREFIX = "rust-skeptic"
TEST_SOURCE_NAME = "test.rs"
BINARY_NAME = "out.exe"
DEPENDENCY_SUFFIX = ".rlib"
_LIB_PREFIX = "lib"

# OUT_DIR is target/<profile>/build/<pkg>-<hash>/out; the profile directory
# holding the built crates sits three levels up.
_OUT_DIR_DEPTH = 3

_LOGGER = get_logger("rt")

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class HarnessState(Enum):
    """Lifecycle of a single harness invocation."""

    PENDING = "pending"
    COMPILING = "compiling"
    COMPILE_FAILED = "compile_failed"
    COMPILED = "compiled"
    COMPILED_ONLY = "compiled_only"
    RUNNING = "running"
    RUN_FAILED = "run_failed"
    PASSED = "passed"


class HarnessError(RuntimeError):
    """Raised when a sample cannot be compiled or executed."""


class CommandFailed(HarnessError):
    """Raised when the compiler or the sample binary exits unsuccessfully."""

    def __init__(self, command: Sequence[str], returncode: int, state: HarnessState) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.state = state
        super().__init__(f"Command failed:\n{shlex.join(self.command)}")


@dataclass(frozen=True)
class Toolchain:
    """External compiler used to build samples."""

    compiler: str = DEFAULT_COMPILER

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Toolchain":
        env = os.environ if environ is None else environ
        return cls(compiler=env.get(ENV_COMPILER) or DEFAULT_COMPILER)


def parse_dependency_name(stem: str) -> Optional[str]:
    """Return the crate name encoded in a dependency archive stem.

    ``libserde_json-4d1c2b3a9e8f7a6b`` yields ``serde_json``. Stems without a
    hash segment, without the ``lib`` prefix, or with nothing between the
    two yield ``None``.
    """
    prefix, separator, hash_segment = stem.rpartition("-")
    if not separator or not hash_segment:
        return None
    if not prefix.startswith(_LIB_PREFIX) or len(prefix) <= len(_LIB_PREFIX):
        return None
    return prefix[len(_LIB_PREFIX):]


def dependency_dirs(out_dir: Path | str) -> Tuple[Path, Path]:
    """Return ``(target_dir, deps_dir)`` derived from the build output directory."""
    target_dir = Path(out_dir)
    for _ in range(_OUT_DIR_DEPTH):
        target_dir = target_dir.parent
    return target_dir, target_dir / "deps"


def discover_dependencies(deps_dir: Path) -> List[Tuple[str, Path]]:
    """List ``(crate name, archive path)`` pairs for the archives in ``deps_dir``."""
    dependencies: List[Tuple[str, Path]] = []
    for entry in sorted(deps_dir.iterdir()):
        if entry.suffix != DEPENDENCY_SUFFIX:
            continue
        name = parse_dependency_name(entry.stem)
        if name is None:
            _LOGGER.debug("Skipping unrecognised dependency archive %s", entry.name)
            continue
        dependencies.append((name, entry))
    return dependencies


class Harness:
    """Compiles one sample with the toolchain and optionally runs it."""

    def __init__(self, toolchain: Toolchain, runner: Runner | None = None) -> None:
        self.toolchain = toolchain
        self._runner = runner or self._default_runner
        self.state = HarnessState.PENDING

    def execute(self, out_dir: Path | str, test_text: str, *, run: bool) -> HarnessState:
        """Compile ``test_text`` and, when ``run`` is set, execute the binary.

        Returns the terminal success state; failures raise ``CommandFailed``.
        """
        with tempfile.TemporaryDirectory(prefix=TEMP_PREFIX) as workdir:
            work_path = Path(workdir)
            testcase_path = work_path / TEST_SOURCE_NAME
            binary_path = work_path / BINARY_NAME
            testcase_path.write_text(test_text, encoding="utf-8")

            self.state = HarnessState.COMPILING
            command = self.compile_command(testcase_path, binary_path, out_dir)
            self._interpret_output(command, cwd=None, failed_state=HarnessState.COMPILE_FAILED)
            self.state = HarnessState.COMPILED

            if not run:
                self.state = HarnessState.COMPILED_ONLY
                return self.state

            self.state = HarnessState.RUNNING
            self._interpret_output(
                [str(binary_path)], cwd=work_path, failed_state=HarnessState.RUN_FAILED
            )
            self.state = HarnessState.PASSED
            return self.state

    def compile_command(
        self, in_path: Path, out_path: Path, out_dir: Path | str
    ) -> List[str]:
        """Build the compiler invocation, linking every discovered crate."""
        target_dir, deps_dir = dependency_dirs(out_dir)
        command = [
            self.toolchain.compiler,
            str(in_path),
            "--verbose",
            "-o",
            str(out_path),
            "--crate-type=bin",
            "-L",
            str(target_dir),
            "-L",
            str(deps_dir),
        ]
        try:
            dependencies = discover_dependencies(deps_dir)
        except OSError as exc:
            self.state = HarnessState.COMPILE_FAILED
            raise HarnessError(f"Failed to access dependency directory {deps_dir}: {exc}") from exc
        for name, archive in dependencies:
            command.extend(["--extern", f"{name}={archive}"])
        return command

    def _interpret_output(
        self, command: List[str], *, cwd: Path | None, failed_state: HarnessState
    ) -> None:
        _LOGGER.debug("Running %s", shlex.join(command))
        try:
            completed = self._runner(command, cwd=cwd)
        except FileNotFoundError as exc:
            self.state = failed_state
            raise HarnessError(f"Unable to launch '{command[0]}': {exc}") from exc
        sys.stdout.write(completed.stdout or "")
        sys.stderr.write(completed.stderr or "")
        if completed.returncode != 0:
            self.state = failed_state
            raise CommandFailed(command, completed.returncode, failed_state)

    @staticmethod
    def _default_runner(
        command: Sequence[str], *, cwd: Path | None = None
    ) -> "subprocess.CompletedProcess[str]":
        return subprocess.run(
            list(command),
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )


def compile_only(
    out_dir: Path | str, test_text: str, *, toolchain: Toolchain | None = None
) -> None:
    """Compile a generated sample without running it."""
    Harness(toolchain or Toolchain.from_env()).execute(out_dir, test_text, run=False)


def compile_and_run(
    out_dir: Path | str, test_text: str, *, toolchain: Toolchain | None = None
) -> None:
    """Compile a generated sample and run the resulting binary."""
    Harness(toolchain or Toolchain.from_env()).execute(out_dir, test_text, run=True)


__all__ = [
    "CommandFailed",
    "Harness",
    "HarnessError",
    "HarnessState",
    "Toolchain",
    "compile_and_run",
    "compile_only",
    "dependency_dirs",
    "discover_dependencies",
    "parse_dependency_name",
]
