"""Sponsored SPL token transfers with out-of-band dual signing."""

from __future__ import annotations

__version__ = "0.1.0"
