"""Database table definitions for the index, snippet and artifact stores"""

from datetime import datetime
from typing import List

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, JSON, Text


class IndexRow(SQLModel, table=True):
    """One publicly listed document; position preserves index order"""
    __tablename__ = "index_entries"
    id: str = Field(primary_key=True)
    position: int = Field(..., index=True, nullable=False, description="Order of first insertion")
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    authors: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    date: str = Field(default="", sa_column=Column(Text, nullable=False))
    thumbnail: str = Field(default="", sa_column=Column(Text, nullable=False))


class SnippetRow(SQLModel, table=True):
    """Derived plain-text excerpt for listings and search"""
    __tablename__ = "snippets"
    id: str = Field(primary_key=True)
    text: str = Field(default="", sa_column=Column(Text, nullable=False))


class ArtifactRow(SQLModel, table=True):
    """Rendered page followed by its editor trailer"""
    __tablename__ = "artifacts"
    id: str = Field(primary_key=True)
    html: str = Field(..., sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
