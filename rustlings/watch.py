"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import enum
import os
import queue
import subprocess
import sys
import threading
from collections.abc import Sequence
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .exercise import Exercise
from .verify import ExerciseFailed, verify

_DEBOUNCE_SECONDS = 1.0

_HELP = """Commands available to you in watch mode:
  hint   - prints the current exercise's hint
  clear  - clears the screen
  quit   - quits watch mode
  !<cmd> - executes a command, like `!rustc --explain E0381`
  help   - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""


class WatchStatus(enum.Enum):
    """How watch mode ended."""

    FINISHED = "finished"
    UNFINISHED = "unfinished"


class WatchShell:
    """The interactive commands accepted while watching."""

    def __init__(self, hint: str | None = None):
        self.hint = hint
        self.should_quit = threading.Event()

    def handle(self, line: str) -> None:
        """Carry out one command typed by the learner."""
        command = line.strip()
        if command == "hint":
            if self.hint is not None:
                print(self.hint)
        elif command == "clear":
            print("\x1B[2J\x1B[1;1H")
        elif command == "quit":
            self.should_quit.set()
            print("Bye!")
        elif command == "help":
            print(_HELP)
        elif command.startswith("!"):
            shell_command = command[1:]
            parts = shell_command.split()
            if not parts:
                print("no command provided")
                return
            try:
                subprocess.run(parts)
            except OSError as error:
                print(f"failed to execute command `{shell_command}`: {error}")
        else:
            print(f"unknown command: {command}")

    def _read_loop(self) -> None:
        while True:
            try:
                line = sys.stdin.readline()
            except (OSError, ValueError) as error:
                print(f"error reading command: {error}")
                return
            if not line:
                return
            self.handle(line)


def _spawn_shell(shell: WatchShell) -> None:
    print(
        "Welcome to watch mode! You can type 'help' to get an overview "
        "of the commands you can use here."
    )
    threading.Thread(target=shell._read_loop, daemon=True).start()


class _ChangeCollector(FileSystemEventHandler):
    def __init__(self, changes: queue.Queue):
        super().__init__()
        self._changes = changes

    def on_created(self, event: FileSystemEvent) -> None:
        self._push(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._push(event)

    def _push(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._changes.put(Path(os.fsdecode(event.src_path)))


def _next_changes(changes: queue.Queue, timeout: float) -> list[Path]:
    try:
        first = changes.get(timeout=timeout)
    except queue.Empty:
        return []
    paths = [first]
    while True:
        try:
            path = changes.get(timeout=_DEBOUNCE_SECONDS)
        except queue.Empty:
            break
        if path not in paths:
            paths.append(path)
    return paths


def _ends_with(path: Path, suffix: Path) -> bool:
    parts = suffix.parts
    return bool(parts) and path.parts[-len(parts):] == parts


def _clear_screen() -> None:
    print("\x1Bc")


def watch(
    exercises: Sequence[Exercise], verbose: bool = False, success_hints: bool = False
) -> WatchStatus:
    """Verify the exercises, then re-verify on every change until done or told to quit."""
    changes: queue.Queue = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeCollector(changes), "./exercises", recursive=True)
    observer.start()
    try:
        _clear_screen()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
            return WatchStatus.FINISHED
        except ExerciseFailed as failure:
            shell = WatchShell(failure.exercise.hint)
        _spawn_shell(shell)

        while not shell.should_quit.is_set():
            for changed in _next_changes(changes, _DEBOUNCE_SECONDS):
                if changed.suffix != ".rs" or not changed.exists():
                    continue
                filepath = changed.resolve()
                current = [
                    exercise for exercise in exercises if _ends_with(filepath, exercise.path)
                ][:1]
                others = [
                    exercise
                    for exercise in exercises
                    if not exercise.looks_done() and not _ends_with(filepath, exercise.path)
                ]
                num_done = sum(1 for exercise in exercises if exercise.looks_done())
                _clear_screen()
                try:
                    verify(
                        current + others, (num_done, len(exercises)), verbose, success_hints
                    )
                    return WatchStatus.FINISHED
                except ExerciseFailed as failure:
                    shell.hint = failure.exercise.hint
        return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()