"""Database models for learner accounts and progress."""
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from farsiflow.models.base import Base, TimestampMixin


class Account(Base, TimestampMixin):
    """Learner account model."""

    __tablename__ = "accounts"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    contact_handle = Column(String, nullable=False)
    handle_key = Column(String, unique=True, nullable=False, index=True)  # lower-cased handle
    joined_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    progress = relationship(
        "Progress",
        back_populates="account",
        uselist=False,
        cascade="all, delete-orphan",
    )
    level_progress = relationship(
        "LevelProgress",
        back_populates="account",
        cascade="all, delete-orphan",
    )
    vocabulary = relationship(
        "VocabularyRecord",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="VocabularyRecord.position",
    )


class Progress(Base, TimestampMixin):
    """Scalar progress fields of an account."""

    __tablename__ = "progress"

    account_id = Column(String, ForeignKey("accounts.id"), primary_key=True)
    current_level = Column(Integer, nullable=False, default=1)
    xp = Column(Integer, nullable=False, default=0)
    streak = Column(Integer, nullable=False, default=1)
    last_activity_date = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    account = relationship("Account", back_populates="progress")


class LevelProgress(Base, TimestampMixin):
    """Completed stage count of one level for one account."""

    __tablename__ = "level_progress"
    __table_args__ = (
        UniqueConstraint("account_id", "level_id", name="uix_account_level"),
    )

    id = Column(Integer, primary_key=True)
    account_id = Column(String, ForeignKey("accounts.id"), nullable=False, index=True)
    level_id = Column(Integer, nullable=False)
    completed_stages = Column(Integer, nullable=False, default=0)  # 0-10

    # Relationships
    account = relationship("Account", back_populates="level_progress")


class VocabularyRecord(Base, TimestampMixin):
    """A word in an account's vocabulary ledger."""

    __tablename__ = "vocabulary_entries"
    __table_args__ = (
        UniqueConstraint("account_id", "word", name="uix_account_word"),
    )

    id = Column(Integer, primary_key=True)
    account_id = Column(String, ForeignKey("accounts.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)  # insertion order in the ledger
    word = Column(String, nullable=False)
    transliteration = Column(String, nullable=False, default="")
    meaning = Column(String, nullable=False, default="")
    learned_at_level = Column(Integer, nullable=False)
    learned_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    account = relationship("Account", back_populates="vocabulary")


class SessionPointer(Base, TimestampMixin):
    """Single-slot pointer to the account of the active session."""

    __tablename__ = "session_pointer"

    slot = Column(Integer, primary_key=True, default=1)
    account_id = Column(String, ForeignKey("accounts.id"), nullable=True)
