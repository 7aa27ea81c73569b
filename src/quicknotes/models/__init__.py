"""Models package - re-exports all models for convenient imports."""

from quicknotes.models.base import Base, TimestampMixin
from quicknotes.models.slot import StorageSlot

__all__ = [
    "Base",
    "TimestampMixin",
    "StorageSlot",
]
