# usersync/infrastructure/database/models.py

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Identity, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from usersync.infrastructure.database.session import Base


class LedgerEntryRow(Base):
    """ORM model for the event ledger. seq is the insertion order used as the catch-up cursor."""

    __tablename__ = "event_ledger"

    seq = Column(BigInteger, Identity(always=False), primary_key=True)
    event_id = Column(String, nullable=False, unique=True, index=True)
    event_type = Column(String, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now())


class UserRow(Base):
    """ORM model for a mirrored provider user. id is the provider subject id."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    profile_picture_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    attributes = Column(JSONB, nullable=False, default=dict)

    mirrored_at = Column(DateTime(timezone=True), server_default=func.now())
    last_synced_at = Column(DateTime(timezone=True), onupdate=func.now())
