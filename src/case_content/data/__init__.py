"""Bundled static dataset."""

from .static_cases import SEED_ORDER, STATIC_CASES

__all__ = ["SEED_ORDER", "STATIC_CASES"]
