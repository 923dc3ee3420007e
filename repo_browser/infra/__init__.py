"""Infra layer utilities (document cache)."""

from .storage import SourceCache

__all__ = ["SourceCache"]
