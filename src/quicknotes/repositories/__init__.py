"""Repositories package."""

from quicknotes.repositories.state import StateRepository

__all__ = [
    "StateRepository",
]
