"""
SQLAlchemy models for the catalog: artists own albums, albums own songs.

Rows carry data only. Stored file names are computed by `music_library.api.naming`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import BIGINT, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )


class Artist(TimestampMixin, Base):
    """Artist row with an optional cover image."""

    __tablename__ = "artists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_path: Mapped[str] = mapped_column(Text, nullable=False, default="")

    albums: Mapped[List["Album"]] = relationship(
        "Album",
        back_populates="artist",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="Album.year",
    )


class Album(TimestampMixin, Base):
    """Album row; `image_path` is relative to the image directory."""

    __tablename__ = "albums"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    artist_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_path: Mapped[str] = mapped_column(Text, nullable=False, default="")

    artist: Mapped[Artist] = relationship("Artist", back_populates="albums", lazy="selectin")
    songs: Mapped[List["Song"]] = relationship(
        "Song",
        back_populates="album",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="Song.id",
    )


class Song(TimestampMixin, Base):
    """Song row with metadata and the original upload filename."""

    __tablename__ = "songs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(BIGINT, nullable=False)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    album_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("albums.id", ondelete="CASCADE"), nullable=False, index=True
    )

    album: Mapped[Album] = relationship("Album", back_populates="songs", lazy="selectin")
