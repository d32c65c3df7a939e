#lifecycle_engine\infrastructure\postgres\repository.py

"""PostgreSQL repository implementation using SQLAlchemy."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from lifecycle_engine.core.repository import ApplicationRepository
from lifecycle_engine.core.models import Application, AppStatus
from lifecycle_engine.core.errors import AppConflict, PersistenceFailed
from lifecycle_engine.infrastructure.postgres.database import session_scope
from lifecycle_engine.infrastructure.postgres.models import ApplicationORM

logger = logging.getLogger(__name__)


# ============================================
# Mapping Functions
# ============================================

def orm_to_domain(orm: ApplicationORM) -> Application:
    """Convert ORM model to domain model."""
    return Application(
        app_id=orm.app_id,
        owner_id=orm.owner_id,
        name=orm.name,
        image=orm.image,
        replicas=orm.replicas,
        port=orm.port,
        namespace=orm.namespace,
        status=AppStatus(orm.status),
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


def domain_to_orm(app: Application) -> ApplicationORM:
    """Convert domain model to ORM model."""
    return ApplicationORM(
        app_id=app.app_id,
        owner_id=app.owner_id,
        name=app.name,
        image=app.image,
        replicas=app.replicas,
        port=app.port,
        namespace=app.namespace,
        status=app.status.value,
        created_at=app.created_at,
        updated_at=app.updated_at,
    )


# ============================================
# Repository Implementation
# ============================================

class PostgresApplicationRepository(ApplicationRepository):
    """PostgreSQL implementation using SQLAlchemy with dependency injection."""

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize repository.

        Args:
            session_factory: SQLAlchemy session factory (see database.get_session_factory)
        """
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        """Get new session from the injected factory."""
        return self._session_factory()

    # -------------------------
    # CREATE
    # -------------------------

    def create(self, app: Application) -> None:
        """Create a new application record."""
        session = self._get_session()
        try:
            session.add(domain_to_orm(app))
            session.commit()
            logger.debug(f"[postgres] create {app.app_id} -> done")
        except IntegrityError as e:
            session.rollback()
            raise AppConflict(
                f"Application {app.name!r} already exists for owner {app.owner_id}"
            ) from e
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceFailed(f"Failed to create application: {e}", cause=e) from e
        finally:
            session.close()

    # -------------------------
    # READ
    # -------------------------

    def get(self, app_id: UUID) -> Optional[Application]:
        """Get application by ID."""
        session = self._get_session()
        try:
            orm = session.get(ApplicationORM, app_id)
            return orm_to_domain(orm) if orm is not None else None
        except SQLAlchemyError as e:
            raise PersistenceFailed(f"Failed to get application: {e}", cause=e) from e
        finally:
            session.close()

    def list_by_owner(self, owner_id: int) -> List[Application]:
        session = self._get_session()
        try:
            orms = (
                session.query(ApplicationORM)
                .filter(ApplicationORM.owner_id == owner_id)
                .order_by(ApplicationORM.created_at.asc())
                .all()
            )
            return [orm_to_domain(orm) for orm in orms]
        except SQLAlchemyError as e:
            raise PersistenceFailed(f"Failed to list applications: {e}", cause=e) from e
        finally:
            session.close()

    def get_by_owner_and_name(self, owner_id: int, name: str) -> Optional[Application]:
        session = self._get_session()
        try:
            orm = (
                session.query(ApplicationORM)
                .filter(
                    ApplicationORM.owner_id == owner_id,
                    ApplicationORM.name == name,
                )
                .first()
            )
            return orm_to_domain(orm) if orm is not None else None
        except SQLAlchemyError as e:
            raise PersistenceFailed(f"Failed to get application: {e}", cause=e) from e
        finally:
            session.close()

    # -------------------------
    # DELETE / PARTIAL UPDATES
    # -------------------------

    def delete(self, app_id: UUID) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.query(ApplicationORM).filter(ApplicationORM.app_id == app_id).delete()
        except SQLAlchemyError as e:
            raise PersistenceFailed(f"Failed to delete application: {e}", cause=e) from e

    def update_status(self, app_id: UUID, status: AppStatus) -> None:
        self._update_fields(app_id, {ApplicationORM.status: AppStatus(status).value})

    def update_replicas(self, app_id: UUID, replicas: int) -> None:
        self._update_fields(app_id, {ApplicationORM.replicas: replicas})

    def _update_fields(self, app_id: UUID, values: dict) -> None:
        """UPDATE only the given columns (plus updated_at via onupdate)."""
        try:
            with session_scope(self._session_factory) as session:
                session.query(ApplicationORM).filter(
                    ApplicationORM.app_id == app_id
                ).update(values, synchronize_session=False)
        except SQLAlchemyError as e:
            raise PersistenceFailed(f"Failed to update application {app_id}: {e}", cause=e) from e
