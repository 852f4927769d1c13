"""Exercises: their description, compilation, execution and completion state."""

from __future__ import annotations

import enum
import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass
from pathlib import Path

RUSTC_COLOR_ARGS = ("--color", "always")
RUSTC_EDITION_ARGS = ("--edition", "2021")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file_path() -> str:
    """Return a temporary executable name unique to this process and thread."""
    thread_id = "".join(c for c in f"ThreadId{threading.get_ident()}" if c.isalnum())
    return f"./temp_{os.getpid()}_{thread_id}"


def _clean() -> None:
    try:
        os.remove(temp_file_path())
    except OSError:
        pass


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def _lines(source: str) -> list[str]:
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class Mode(enum.Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass
class ExerciseOutput:
    """Captured output of a compiler or compiled binary."""

    stdout: str
    stderr: str
    success: bool = True


class CompilationError(Exception):
    """Raised when an exercise fails to compile."""

    def __init__(self, output: ExerciseOutput):
        super().__init__(output.stderr)
        self.output = output


class CompiledExercise:
    """A successfully compiled exercise; removes its binary when closed."""

    def __init__(self, exercise: Exercise):
        self.exercise = exercise

    def run(self) -> ExerciseOutput:
        """Run the compiled binary and capture its output."""
        return self.exercise._run()

    def close(self) -> None:
        """Remove the compiled binary."""
        _clean()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@dataclass
class Exercise:
    """One exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str = ""

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def _cargo_manifest(self) -> str:
        return (
            "[package]\n"
            f'name = "{self.name}"\n'
            'version = "0.0.1"\n'
            'edition = "2021"\n'
            "[[bin]]\n"
            f'name = "{self.name}"\n'
            f'path = "{self.name}.rs"'
        )

    def compile(self) -> CompiledExercise:
        """Compile the exercise; raise CompilationError on failure."""
        source = str(self.path)
        target = temp_file_path()
        rustc_extra = [*RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
        match self.mode:
            case Mode.COMPILE:
                command = ["rustc", source, "-o", target, *rustc_extra]
            case Mode.TEST:
                command = ["rustc", "--test", source, "-o", target, *rustc_extra]
            case Mode.CLIPPY:
                Path(CLIPPY_CARGO_TOML_PATH).write_text(self._cargo_manifest())
                # Build an executable too so clippy exercises can be run.
                subprocess.run(["rustc", source, "-o", target, *rustc_extra], capture_output=True)
                # A clean is needed for clippy to report every lint.
                subprocess.run(
                    ["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH, *RUSTC_COLOR_ARGS],
                    capture_output=True,
                )
                command = [
                    "cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                    *RUSTC_COLOR_ARGS, "--", "-D", "warnings", "-D", "clippy::float_cmp",
                ]
            case Mode.BUILD_SCRIPT:
                Path(BUILD_SCRIPT_CARGO_TOML_PATH).write_text(self._cargo_manifest())
                command = ["cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH]
        result = subprocess.run(command, capture_output=True)
        if result.returncode == 0:
            return CompiledExercise(self)
        _clean()
        raise CompilationError(
            ExerciseOutput(_decode(result.stdout), _decode(result.stderr), success=False)
        )

    def _run(self) -> ExerciseOutput:
        if self.mode is Mode.BUILD_SCRIPT:
            return ExerciseOutput("", "")
        args = ["--show-output"] if self.mode is Mode.TEST else [""]
        result = subprocess.run([temp_file_path(), *args], capture_output=True)
        return ExerciseOutput(
            _decode(result.stdout), _decode(result.stderr), success=result.returncode == 0
        )

    def state(self) -> list[ContextLine]:
        """Return the lines around the pending marker; empty when the exercise is done."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return []
        lines = _lines(source)
        matched = next((i for i, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)), None)
        if matched is None:
            raise RuntimeError("pending marker spans several lines")
        low = max(matched - CONTEXT, 0)
        high = matched + CONTEXT
        return [
            ContextLine(line=line, number=i + 1, important=i == matched)
            for i, line in enumerate(lines)
            if low <= i <= high
        ]

    def looks_done(self) -> bool:
        """True when the pending marker has been removed from the source."""
        return not self.state()


def load_exercises(path: str | os.PathLike = "info.toml") -> list[Exercise]:
    """Read the exercise list from a TOML file."""
    with open(path, "rb") as handle:
        data = tomllib.load(handle)
    return [
        Exercise(name=entry["name"], path=Path(entry["path"]), mode=Mode(entry["mode"]), hint=entry["hint"])
        for entry in data["exercises"]
    ]