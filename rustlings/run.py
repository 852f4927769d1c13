"""Running a single exercise and resetting it."""

from __future__ import annotations

import subprocess

from .exercise import CompilationError, Exercise, Mode
from .ui import success, warn
from .verify import ExerciseFailed, _Spinner, test


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run, or test, the exercise; raise ExerciseFailed on failure."""
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            test(exercise, verbose)
        case Mode.COMPILE | Mode.CLIPPY:
            _compile_and_run(exercise)


def reset(exercise: Exercise) -> None:
    """Stash the learner's changes to the exercise with git."""
    try:
        subprocess.Popen(["git", "stash", "--", str(exercise.path)])
    except OSError as error:
        raise ExerciseFailed(exercise) from error


def _compile_and_run(exercise: Exercise) -> None:
    with _Spinner(f"Compiling {exercise}...") as spinner:
        try:
            compiled = exercise.compile()
        except CompilationError as error:
            spinner.stop()
            warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
            print(error.output.stderr)
            raise ExerciseFailed(exercise) from error
        with compiled:
            spinner.update(f"Running {exercise}...")
            output = compiled.run()

    if output.success:
        print(output.stdout)
        success(f"Successfully ran {exercise}")
        return
    print(output.stdout)
    print(output.stderr)
    warn(f"Ran {exercise} with errors")
    raise ExerciseFailed(exercise)