"""Structure-aware kill and comment commands for Lisp-family buffers."""

from .comment import CommentEngine, CommentResult, comment, toggle_lines
from .context import ContextKind, ContextRule, EditContext, RULES, classify
from .errors import LispyError, OracleUnavailable
from .kill import KillEngine, KillResult, kill
from .oracle import HeuristicOracle, PygmentsOracle, SyntaxOracle
from .scanner import (
    balanced_to_end_of_line,
    find_enclosing_close,
    find_sexp_end,
    find_string_end,
)

__all__ = [
    "CommentEngine",
    "CommentResult",
    "comment",
    "toggle_lines",
    "ContextKind",
    "ContextRule",
    "EditContext",
    "RULES",
    "classify",
    "LispyError",
    "OracleUnavailable",
    "KillEngine",
    "KillResult",
    "kill",
    "HeuristicOracle",
    "PygmentsOracle",
    "SyntaxOracle",
    "balanced_to_end_of_line",
    "find_enclosing_close",
    "find_sexp_end",
    "find_string_end",
]
