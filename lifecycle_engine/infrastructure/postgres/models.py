#lifecycle_engine\infrastructure\postgres\models.py
"""SQLAlchemy ORM models for database tables."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, Index, Integer, String, UniqueConstraint, Uuid

from lifecycle_engine.infrastructure.postgres.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApplicationORM(Base):
    """
    Application table - one row per live application record.

    Indexes:
    - Primary key on app_id
    - Unique (owner_id, name): one name per owner
    - Index on owner_id for listing an owner's applications
    """

    __tablename__ = "applications"

    # Primary key
    app_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4, nullable=False)

    # Identity
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(String(64), nullable=False)

    # Workload
    image = Column(String(256), nullable=False)
    replicas = Column(Integer, nullable=False, default=1)
    port = Column(Integer, nullable=False, default=0)
    namespace = Column(String(64), nullable=False)

    # Cached cluster status (AppStatus value)
    status = Column(String(32), nullable=False, default="pending")

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_applications_owner_name"),
        Index("ix_applications_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ApplicationORM(app_id={self.app_id}, "
            f"owner_id={self.owner_id}, name={self.name}, "
            f"status={self.status})>"
        )
