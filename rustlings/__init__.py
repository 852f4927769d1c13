"""A runner that compiles, tests and tracks progress through small Rust exercises."""

__version__ = "5.5.1"