"""SQLAlchemy ORM models backing the persistent state."""

from __future__ import annotations

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class AppRecord(Base):
    """One canonical catalog app and the user's flags for it."""

    __tablename__ = "apps"
    __table_args__ = (
        Index("ix_apps_name", "name", "appid"),
        Index("ix_apps_seen", "seen", "appid"),
        Index("ix_apps_owned", "owned", "appid"),
        Index("ix_apps_ignored", "ignored", "appid"),
        Index("ix_apps_wishlisted", "wishlisted", "appid"),
    )

    appid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(Text)
    seen: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    owned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ignored: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    wishlisted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class CacheSlot(Base):
    """Scalar key/value pairs such as cache timestamps and the status blob."""

    __tablename__ = "cache_slots"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text)


class SchemaInfo(Base):
    """Single-row table recording the schema version of the ``apps`` store."""

    __tablename__ = "schema_info"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    version: Mapped[int] = mapped_column(Integer)
