# lifecycle_engine/reconciler/reconciler.py
"""
Status Reconciler - refreshes a record's cached status/replicas from the
cluster.

Strictly best-effort: a failed query or write leaves the record stale
until the next successful reconcile. Nothing is raised or retried.
"""

import logging
from uuid import UUID

from lifecycle_engine.cluster.adapter import ClusterAdapter
from lifecycle_engine.core.repository import ApplicationRepository

logger = logging.getLogger(__name__)


class StatusReconciler:
    """Copies the orchestrator's view of one application into its record."""

    def __init__(self, repository: ApplicationRepository, adapter: ClusterAdapter):
        self._repo = repository
        self._adapter = adapter

    def reconcile(self, app_id: UUID, name: str, namespace: str) -> bool:
        """
        Sync status and replicas for one application.

        Status is always overwritten. Replicas are overwritten only when
        the observed count is > 0, so a zero read during a query race never
        wipes a healthy replica count.

        Returns:
            True if the status was written
        """
        try:
            info = self._adapter.query_status(name, namespace)
        except Exception as e:
            logger.warning(f"[app:{app_id}] status query failed, skipping reconcile: {e}")
            return False

        try:
            self._repo.update_status(app_id, info.status)
        except Exception as e:
            logger.warning(f"[app:{app_id}] failed to persist reconciled status: {e}")
            return False

        if info.replicas > 0:
            try:
                self._repo.update_replicas(app_id, info.replicas)
            except Exception as e:
                logger.warning(f"[app:{app_id}] failed to persist reconciled replicas: {e}")

        logger.debug(
            f"[app:{app_id}] reconciled: status={info.status.value} "
            f"ready={info.ready_replicas}/{info.replicas}"
        )
        return True
