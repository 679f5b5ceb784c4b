"""SQLAlchemy models for the settings store."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from toolgate.database import Base


class Setting(Base):
    """One key/value settings entry.

    Attributes:
        key: Setting key (e.g. "mcp.servers.v1").
        value: JSON document stored under the key.
        updated_at: Timestamp of the last write.
    """

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(200), primary_key=True, comment="Setting key")
    value: Mapped[Any] = mapped_column(JSON, nullable=True, comment="JSON document")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="Last write timestamp",
    )

    def __repr__(self) -> str:
        return f"<Setting(key='{self.key}')>"
