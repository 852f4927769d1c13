# rustlings

A command-line companion for working through small Rust exercises. It reads
the list of exercises from an `info.toml` file in the current directory,
compiles and runs each exercise with `rustc` (or `cargo` for Clippy and
build-script exercises), and tells you which ones still need work.

## Requirements

- Python 3.11 or later
- A Rust toolchain with `rustc` on your `PATH` (and `cargo` for Clippy and
  build-script exercises)
- `git`, for `rustlings reset`

## Installation

```
pip install .
```

For running the test suite: `pip install .[test]` and then `pytest`.

## Usage

Run every command from the directory that holds `info.toml`. Without it, or
without a working `rustc`, the command prints a message and exits with
status 1.

```
rustlings                # print a welcome text and a short introduction
rustlings watch          # verify exercises and re-run them when files change
rustlings verify         # verify all exercises in the order of info.toml
rustlings run NAME       # compile and run, or test, a single exercise
rustlings run next       # run the first exercise that is not done yet
rustlings hint NAME      # print the hint for an exercise
rustlings reset NAME     # stash your changes to an exercise with git
rustlings list           # list all exercises with their status
rustlings lsp            # write rust-project.json for rust-analyzer
rustlings cicvverify     # run every exercise and write a JSON report
rustlings --version      # print the version
```

Options:

- `--nocapture` (global): show the output of test exercises.
- `-v`, `--version`: print the version and exit.
- `watch --success-hints`: show the hint of an exercise once it passes.
- `list` accepts `-p`/`--paths` (paths only), `-n`/`--names` (names only),
  `-f`/`--filter PATTERNS` (comma-separated substrings matched against names
  and paths, case-folded), `-u`/`--unsolved` and `-s`/`--solved`. It ends with
  a progress line.

`run`, `verify` and `reset` exit with status 1 when the exercise fails or
cannot be found.

### Exercise state

An exercise counts as pending while its source still contains a comment line
reading `// I AM NOT DONE`. When a pending exercise compiles and passes, the
lines around that comment are shown; delete the comment to move on to the next
exercise.

### info.toml

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "No hints this time ;)"
```

`mode` is one of `compile` (build and run a binary), `test` (build and run the
test harness), `clippy` (lint with `cargo clippy`, writing
`./exercises/clippy/Cargo.toml`) or `buildscript` (run `cargo test`, writing
`./exercises/tests/Cargo.toml`).

### Watch mode

While watching `./exercises`, type `hint`, `clear`, `quit`, `help`, or
`!<cmd>` to run a command such as `!rustc --explain E0381`.

### rust-analyzer

`rustlings lsp` writes `./rust-project.json` with one crate for every `.rs`
file under `./exercises`. The standard library path is taken from
`RUST_SRC_PATH`, or else derived from `rustc --print sysroot`.

### Batch report

`rustlings cicvverify` runs every exercise, prints a line per exercise and
writes a summary to `.github/result/check_result.json`; that directory must
already exist.

### Emoji

Set `NO_EMOJI` in the environment to replace emoji with plain symbols.

## Using it from Python

- `rustlings.exercise`: `load_exercises(path)`, `Exercise` (with `compile()`,
  `state()` and `looks_done()`), `Mode`, `CompilationError`.
- `rustlings.verify`: `verify(exercises, progress, verbose, success_hints)`
  raises `ExerciseFailed` at the first exercise that is not finished.
- `rustlings.run`: `run(exercise, verbose)` and `reset(exercise)`.
- `rustlings.cli`: `main(argv)` returns the exit status.

## What it does not do

The package contains only the runner. It does not ship any exercises or an
`info.toml`; those must be provided in the working directory.