"""Persistence for user preferences and portfolio."""

from goldtrackr.storage.state import JsonStateStore


__all__ = ["JsonStateStore"]
