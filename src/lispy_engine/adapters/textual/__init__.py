"""Textual integration: UI hooks bridge and a demo editor app."""

from .controller import TextualLispyAdapter, TextualUIHooks

__all__ = ["TextualLispyAdapter", "TextualUIHooks"]
