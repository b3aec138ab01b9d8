"""
SQLAlchemy ORM models for stored dice configurations.
"""
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.sql import func

from backend.core.database import Base


class DiceConfigRecord(Base):
    """Last configuration submitted by each browser session."""

    __tablename__ = "dice_configs"

    # One row per X-Session-ID
    session_id = Column(String(64), primary_key=True)

    dice_sides = Column(Integer, nullable=False)
    selection_method = Column(String(16), nullable=False)

    # Identifies the write that produced this row
    sync_key = Column(String(64), nullable=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "session_id": self.session_id,
            "dice_sides": self.dice_sides,
            "selection_method": self.selection_method,
            "sync_key": self.sync_key,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<DiceConfigRecord(session={self.session_id[:8]}, sides={self.dice_sides})>"
