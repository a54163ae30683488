"""CLI helpers exposed for other modules."""

from .ui import StepTracker, ask_text, multi_select_with_arrows, select_with_arrows

__all__ = ["StepTracker", "ask_text", "multi_select_with_arrows", "select_with_arrows"]
