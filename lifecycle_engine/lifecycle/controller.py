"""Lifecycle controller - maps lifecycle commands onto the cluster and the record store."""

import logging
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from lifecycle_engine.cluster.adapter import ClusterAdapter
from lifecycle_engine.core.errors import (
    AppConflict,
    AppForbidden,
    AppNotFound,
    ClusterOperationFailed,
    LifecycleError,
    NotFoundError,
    PersistenceFailed,
)
from lifecycle_engine.core.models import (
    DEFAULT_NAMESPACE_PREFIX,
    AppStatus,
    Application,
    StatusInfo,
    WorkloadSpec,
)
from lifecycle_engine.core.repository import ApplicationRepository
from lifecycle_engine.reconciler.reconciler import StatusReconciler
from lifecycle_engine.reconciler.scheduler import ReconcileScheduler

logger = logging.getLogger(__name__)


class LifecycleController:
    """
    Application lifecycle commands.

    Every command checks existence and ownership first. The record store
    and the cluster are separate stores with no shared transaction:
    - create writes the record first and deletes it if the cluster rejects
      the workload
    - delete removes cluster resources first and keeps the record if that
      fails
    - start/stop/restart have no compensation; a mismatch persists until
      the next reconcile or manual retry
    """

    def __init__(
        self,
        repository: ApplicationRepository,
        adapter: ClusterAdapter,
        reconciler: StatusReconciler,
        scheduler: ReconcileScheduler,
        namespace_prefix: str = DEFAULT_NAMESPACE_PREFIX,
    ):
        self._repo = repository
        self._adapter = adapter
        self._reconciler = reconciler
        self._scheduler = scheduler
        self._namespace_prefix = namespace_prefix

    # -------------------------
    # CREATE
    # -------------------------

    def create_app(
        self,
        owner_id: int,
        name: str,
        image: str,
        replicas: int,
        port: int = 0,
        labels: Optional[Dict[str, str]] = None,
    ) -> Application:
        """
        Create an application record and its cluster workload.

        Raises:
            AppConflict: owner already has an application with this name
            ClusterOperationFailed: cluster rejected the workload (record removed)
            PersistenceFailed: record store failure
        """
        if self._persist(self._repo.get_by_owner_and_name, owner_id, name) is not None:
            raise AppConflict(f"Application {name!r} already exists")

        app = Application.new(
            owner_id=owner_id,
            name=name,
            image=image,
            replicas=replicas,
            port=port,
            namespace_prefix=self._namespace_prefix,
        )

        # Record goes in before the cluster is touched
        self._persist(self._repo.create, app)
        logger.info(f"[app:{app.app_id}] record created ({app.namespace}/{app.name})")

        spec = WorkloadSpec.for_application(app, labels)
        try:
            self._cluster("create_workload", self._adapter.create_workload, spec)
        except ClusterOperationFailed as e:
            logger.warning(f"[app:{app.app_id}] cluster create failed at {e.step}, removing record")
            self._compensate_create(app)
            raise

        self._schedule_reconcile(app)
        return app

    # -------------------------
    # DELETE
    # -------------------------

    def delete_app(self, app_id: UUID, owner_id: int) -> None:
        """Delete cluster resources, then the record. The record survives a cluster failure."""
        app = self._require_owned(app_id, owner_id)

        self._cluster("delete_workload", self._adapter.delete_workload, app.name, app.namespace)
        self._persist(self._repo.delete, app_id)

        logger.info(f"[app:{app_id}] deleted")

    # -------------------------
    # START / STOP / RESTART
    # -------------------------

    def start_app(self, app_id: UUID, owner_id: int) -> None:
        """Scale back to the last persisted replica count (at least 1)."""
        app = self._require_owned(app_id, owner_id)

        replicas = app.replicas or 1

        self._cluster("scale_workload", self._adapter.scale_workload, app.name, app.namespace, replicas)
        self._set_status(app_id, AppStatus.STARTING)
        self._schedule_reconcile(app)

        logger.info(f"[app:{app_id}] starting with {replicas} replica(s)")

    def stop_app(self, app_id: UUID, owner_id: int) -> None:
        """Scale to zero. The outcome is known locally, so no reconcile is scheduled."""
        app = self._require_owned(app_id, owner_id)

        self._cluster("scale_workload", self._adapter.scale_workload, app.name, app.namespace, 0)
        self._set_status(app_id, AppStatus.STOPPED)
        try:
            self._repo.update_replicas(app_id, 0)
        except Exception as e:
            logger.warning(f"[app:{app_id}] failed to persist replicas=0: {e}")

        logger.info(f"[app:{app_id}] stopped")

    def restart_app(self, app_id: UUID, owner_id: int) -> None:
        app = self._require_owned(app_id, owner_id)

        self._cluster("restart_workload", self._adapter.restart_workload, app.name, app.namespace)
        self._set_status(app_id, AppStatus.RESTARTING)
        self._schedule_reconcile(app)

        logger.info(f"[app:{app_id}] restarting")

    # -------------------------
    # READ
    # -------------------------

    def list_apps(self, owner_id: int) -> List[Application]:
        """
        Return the owner's records as currently persisted.

        One reconcile per record is scheduled in the background; the
        returned list does not wait for them.
        """
        apps = self._persist(self._repo.list_by_owner, owner_id)

        for app in apps:
            self._schedule_reconcile(app)

        return apps

    def get_app(self, app_id: UUID, owner_id: int) -> Application:
        """Reconcile synchronously, then return the refreshed record."""
        app = self._require_owned(app_id, owner_id)

        self._reconciler.reconcile(app.app_id, app.name, app.namespace)

        refreshed = self._persist(self._repo.get, app_id)
        if refreshed is None:
            raise AppNotFound(f"Application {app_id} not found")
        return refreshed

    def get_app_logs(self, app_id: UUID, owner_id: int, lines: int = 100) -> str:
        app = self._require_owned(app_id, owner_id)
        return self._cluster("fetch_logs", self._adapter.fetch_logs, app.name, app.namespace, lines)

    def get_app_status(self, app_id: UUID, owner_id: int) -> StatusInfo:
        """Live cluster view including member processes. Not persisted."""
        app = self._require_owned(app_id, owner_id)
        return self._cluster("query_status", self._adapter.query_status, app.name, app.namespace)

    # -------------------------
    # INTERNAL HELPERS
    # -------------------------

    def _require_owned(self, app_id: UUID, owner_id: int) -> Application:
        """Get application or raise NotFound/Forbidden."""
        app = self._persist(self._repo.get, app_id)
        if app is None:
            raise AppNotFound(f"Application {app_id} not found")
        if not app.is_owned_by(owner_id):
            raise AppForbidden(f"Application {app_id} is not owned by {owner_id}")
        return app

    def _schedule_reconcile(self, app: Application) -> None:
        self._scheduler.submit(self._reconciler.reconcile, app.app_id, app.name, app.namespace)

    def _set_status(self, app_id: UUID, status: AppStatus) -> None:
        # Cluster already changed; a failed write only leaves the cache stale
        try:
            self._repo.update_status(app_id, status)
        except Exception as e:
            logger.warning(f"[app:{app_id}] failed to persist status {status.value}: {e}")

    def _compensate_create(self, app: Application) -> None:
        try:
            self._repo.delete(app.app_id)
        except Exception as e:
            # Leaves an orphaned pending record; there is no sweep for it
            logger.error(f"[app:{app.app_id}] compensation failed, record left behind: {e}")

    @staticmethod
    def _persist(fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except LifecycleError:
            raise
        except Exception as e:
            raise PersistenceFailed(cause=e) from e

    @staticmethod
    def _cluster(operation: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except (ClusterOperationFailed, NotFoundError):
            raise
        except Exception as e:
            raise ClusterOperationFailed(operation, cause=e) from e
