"""
Storage Slot Model

Durable key-value slot holding a whole serialized application state.
One row per storage key; the value is the JSON blob written by
StateRepository.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quicknotes.models.base import Base, TimestampMixin


class StorageSlot(Base, TimestampMixin):
    """
    Key-value slot entity.

    Attributes:
        key: Fixed storage key (primary key).
        value: Serialized state blob (JSON text).
        updated_at: Time of the last write.
    """

    __tablename__ = "storage_slots"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<StorageSlot(key='{self.key}', size={len(self.value)})>"
