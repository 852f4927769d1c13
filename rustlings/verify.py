"""Checking exercises in order and reporting how each one went."""

from __future__ import annotations

import sys
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from .exercise import CompilationError, CompiledExercise, Exercise, Mode
from .ui import success, use_emoji, warn

_SEPARATOR = "===================="


class ExerciseFailed(Exception):
    """Raised when an exercise fails to compile, run or pass its tests."""

    def __init__(self, exercise: Exercise):
        super().__init__(f"{exercise} failed")
        self.exercise = exercise


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True)


class _Spinner:
    """A status spinner on stderr, shown only when stderr is a terminal."""

    def __init__(self, message: str):
        console = Console(stderr=True)
        self._status = console.status(message) if console.is_terminal else None
        self._running = False

    def __enter__(self) -> _Spinner:
        if self._status is not None:
            self._status.start()
            self._running = True
        return self

    def update(self, message: str) -> None:
        if self._status is not None:
            self._status.update(message)

    def stop(self) -> None:
        if self._status is not None and self._running:
            self._status.stop()
            self._running = False

    def __exit__(self, *exc_info) -> None:
        self.stop()


class _ProgressBar:
    """A textual progress bar drawn on stderr when it is a terminal."""

    WIDTH = 60

    def __init__(self, position: int, total: int):
        self.position = position
        self.total = total
        self.percentage = position / total * 100.0 if total else 100.0
        self._visible = sys.stderr.isatty()
        self._draw()

    def advance(self) -> None:
        self.position += 1
        if self.total:
            self.percentage += 100.0 / self.total
        self._draw()

    def _draw(self) -> None:
        if not self._visible:
            return
        if self.total:
            filled = min(self.WIDTH, self.position * self.WIDTH // self.total)
        else:
            filled = self.WIDTH
        bar = "#" * filled
        if filled < self.WIDTH:
            bar += ">" + "-" * (self.WIDTH - filled - 1)
        sys.stderr.write(
            f"Progress: [{bar}] {self.position}/{self.total} ({self.percentage:.1f} %)\n"
        )
        sys.stderr.flush()


def _compile(exercise: Exercise, spinner: _Spinner) -> CompiledExercise:
    try:
        return exercise.compile()
    except CompilationError as error:
        spinner.stop()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(error.output.stderr)
        raise ExerciseFailed(exercise) from error


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    with _Spinner(f"Compiling {exercise}...") as spinner:
        compiled = _compile(exercise, spinner)
    compiled.close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with _Spinner(f"Compiling {exercise}...") as spinner:
        with _compile(exercise, spinner) as compiled:
            spinner.update(f"Running {exercise}...")
            output = compiled.run()
    if not output.success:
        warn(f"Ran {exercise} with errors")
        print(output.stdout)
        print(output.stderr)
        raise ExerciseFailed(exercise)
    return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, interactive: bool, verbose: bool, success_hints: bool
) -> bool:
    with _Spinner(f"Testing {exercise}...") as spinner:
        with _compile(exercise, spinner) as compiled:
            output = compiled.run()
    if output.success:
        if verbose:
            print(output.stdout)
        if interactive:
            return prompt_for_completion(exercise, None, success_hints)
        return True
    warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
    print(output.stdout)
    raise ExerciseFailed(exercise)


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check each exercise in turn; raise ExerciseFailed at the first one not finished."""
    num_done, total = progress
    bar = _ProgressBar(num_done, total)
    for exercise in exercises:
        try:
            match exercise.mode:
                case Mode.TEST | Mode.BUILD_SCRIPT:
                    finished = _compile_and_test(exercise, True, verbose, success_hints)
                case Mode.COMPILE:
                    finished = _compile_and_run_interactively(exercise, success_hints)
                case Mode.CLIPPY:
                    finished = _compile_only(exercise, success_hints)
        except ExerciseFailed:
            finished = False
        if not finished:
            raise ExerciseFailed(exercise)
        bar.advance()


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run the exercise's tests; raise ExerciseFailed if they fail."""
    _compile_and_test(exercise, False, verbose, False)


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None = None, success_hints: bool = False
) -> bool:
    """Return True if the exercise is done; otherwise show where to continue and return False."""
    context = exercise.state()
    if not context:
        return True

    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")

    emoji = use_emoji()
    match exercise.mode:
        case Mode.COMPILE:
            message = "The code is compiling!"
        case Mode.TEST:
            message = "The code is compiling, and the tests pass!"
        case Mode.CLIPPY:
            message = (
                "The code is compiling, and 📎 Clippy 📎 is happy!"
                if emoji
                else "The code is compiling, and Clippy is happy!"
            )
        case Mode.BUILD_SCRIPT:
            message = "Build script works!"

    console = _console()
    separator = Text(_SEPARATOR, style="bold")

    print()
    print(f"🎉 🎉  {message} 🎉 🎉" if emoji else f"~*~ {message} ~*~")
    print()

    if prompt_output is not None:
        print("Output:")
        console.print(separator)
        print(prompt_output)
        console.print(separator)
        print()
    if success_hints:
        print("Hints:")
        console.print(separator)
        print(exercise.hint)
        console.print(separator)
        print()

    print("You can keep working on this exercise,")
    console.print(
        Text.assemble(
            "or jump into the next one by removing the ",
            ("`I AM NOT DONE`", "bold"),
            " comment:",
        )
    )
    print()
    for context_line in context:
        console.print(
            Text.assemble(
                (f"{context_line.number:>2}", "blue bold"),
                " ",
                ("|", "blue"),
                "  ",
                (context_line.line, "bold" if context_line.important else ""),
            )
        )
    return False