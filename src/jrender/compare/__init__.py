"""Comparison layer — rendering a file against its last-committed version."""

from jrender.compare.checkout import HeadCheckout, checkout_path
from jrender.compare.orchestrator import CompareOrchestrator, Comparison

__all__ = [
    "CompareOrchestrator",
    "Comparison",
    "HeadCheckout",
    "checkout_path",
]
