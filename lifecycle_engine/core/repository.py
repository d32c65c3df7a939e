# lifecycle_engine/core/repository.py

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from lifecycle_engine.core.models import Application, AppStatus


class ApplicationRepository(ABC):
    """
    Persistence contract for application records.
    """

    @abstractmethod
    def create(self, app: Application) -> None:
        """
        Persist a new application.
        Must raise AppConflict if app_id or (owner_id, name) already exists.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, app_id: UUID) -> Optional[Application]:
        """
        Fetch application by ID.
        Returns None if not found.
        """
        raise NotImplementedError

    @abstractmethod
    def list_by_owner(self, owner_id: int) -> List[Application]:
        raise NotImplementedError

    @abstractmethod
    def get_by_owner_and_name(self, owner_id: int, name: str) -> Optional[Application]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, app_id: UUID) -> None:
        """
        Remove the record. Deleting a missing record is a no-op.
        """
        raise NotImplementedError

    @abstractmethod
    def update_status(self, app_id: UUID, status: AppStatus) -> None:
        """
        Partial update of the status field only.
        """
        raise NotImplementedError

    @abstractmethod
    def update_replicas(self, app_id: UUID, replicas: int) -> None:
        """
        Partial update of the replicas field only.
        """
        raise NotImplementedError
