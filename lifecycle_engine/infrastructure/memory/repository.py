# lifecycle_engine/infrastructure/memory/repository.py

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import List, Optional
from uuid import UUID

from lifecycle_engine.core.repository import ApplicationRepository
from lifecycle_engine.core.models import Application, AppStatus
from lifecycle_engine.core.errors import AppConflict


class InMemoryApplicationRepository(ApplicationRepository):
    def __init__(self):
        self._store: dict[UUID, Application] = {}
        self._lock = Lock()

    def create(self, app: Application) -> None:
        with self._lock:
            if app.app_id in self._store:
                raise AppConflict("Application already exists")
            for stored in self._store.values():
                if stored.owner_id == app.owner_id and stored.name == app.name:
                    raise AppConflict(f"Application {app.name!r} already exists")
            self._store[app.app_id] = replace(app)

    def get(self, app_id: UUID) -> Optional[Application]:
        with self._lock:
            stored = self._store.get(app_id)
            return replace(stored) if stored else None

    def list_by_owner(self, owner_id: int) -> List[Application]:
        with self._lock:
            apps = [replace(a) for a in self._store.values() if a.owner_id == owner_id]
        return sorted(apps, key=lambda a: a.created_at)

    def get_by_owner_and_name(self, owner_id: int, name: str) -> Optional[Application]:
        with self._lock:
            for stored in self._store.values():
                if stored.owner_id == owner_id and stored.name == name:
                    return replace(stored)
        return None

    def delete(self, app_id: UUID) -> None:
        with self._lock:
            self._store.pop(app_id, None)

    def update_status(self, app_id: UUID, status: AppStatus) -> None:
        with self._lock:
            stored = self._store.get(app_id)
            if not stored:
                return
            stored.status = status
            stored.updated_at = datetime.now(timezone.utc)

    def update_replicas(self, app_id: UUID, replicas: int) -> None:
        with self._lock:
            stored = self._store.get(app_id)
            if not stored:
                return
            stored.replicas = replicas
            stored.updated_at = datetime.now(timezone.utc)
