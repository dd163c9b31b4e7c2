"""Structure-aware kill and comment editing for Lisp-family buffers."""

__all__ = [
    "adapters",
    "buffer",
    "commands",
    "config",
    "dispatch",
    "host",
    "keymaps",
    "lisp",
    "runtime",
]

__version__ = "0.1.0"
