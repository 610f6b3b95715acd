"""
SQLAlchemy Database Models

Defines the database models for libraries, folders, words and sound change
presets.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, JSON, String, Text, Boolean
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class Library(Base):
    """
    A top-level word collection, usually one per language.

    Deleting a library deletes its folders and words.
    """
    __tablename__ = 'libraries'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    words: Mapped[List["Word"]] = relationship(
        "Word", back_populates="library", cascade="all, delete"
    )
    folders: Mapped[List["Folder"]] = relationship(
        "Folder", back_populates="library", cascade="all, delete"
    )

    def __repr__(self) -> str:
        return f"<Library(id={self.id}, name='{self.name}')>"


class Folder(Base):
    """A folder inside a library. Removing it leaves its words unfiled."""
    __tablename__ = 'folders'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    icon: Mapped[str] = mapped_column(String(64), nullable=False, default="folder")
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    library_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey('libraries.id', ondelete='CASCADE'), nullable=True, index=True
    )

    library: Mapped[Optional["Library"]] = relationship("Library", back_populates="folders")
    words: Mapped[List["Word"]] = relationship("Word", back_populates="folder")

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, name='{self.name}')>"


class Word(Base):
    """
    A dictionary entry.

    ``term`` is the only field the Sound Change Applier reads or writes.
    """
    __tablename__ = 'words'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    term: Mapped[str] = mapped_column(String(512), nullable=False, default="", index=True)
    pronunciation: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    definition: Mapped[str] = mapped_column(Text, nullable=False, default="")
    part_of_speech: Mapped[str] = mapped_column(String(64), nullable=False, default="Noun")
    example: Mapped[str] = mapped_column(Text, nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # JSON lists: [{language, text}], [{name, pronunciation, location, gender}], [str], [str]
    translations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    variations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    location_tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Etymology
    parent_word_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey('words.id', ondelete='SET NULL'), nullable=True, index=True
    )

    # Grammar: JSON object "row_col" -> form
    inflection_data: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    folder_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey('folders.id', ondelete='SET NULL'), nullable=True, index=True
    )
    library_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey('libraries.id', ondelete='CASCADE'), nullable=True, index=True
    )

    folder: Mapped[Optional["Folder"]] = relationship("Folder", back_populates="words")
    library: Mapped[Optional["Library"]] = relationship("Library", back_populates="words")
    parent_word: Mapped[Optional["Word"]] = relationship(
        "Word", remote_side=[id], back_populates="derived_words"
    )
    derived_words: Mapped[List["Word"]] = relationship("Word", back_populates="parent_word")

    __table_args__ = (
        Index('idx_words_library_term', 'library_id', 'term'),
    )

    def __repr__(self) -> str:
        return f"<Word(id={self.id}, term='{self.term}')>"


class SoundChangePreset(Base):
    """
    A saved Sound Change Applier rule set.

    ``rules_json`` holds the ordered rules as a JSON array of
    ``{"find", "replace"}`` objects.
    """
    __tablename__ = 'sound_change_presets'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), unique=True, nullable=False)
    rules_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    def __repr__(self) -> str:
        return f"<SoundChangePreset(id={self.id}, name='{self.name}')>"
