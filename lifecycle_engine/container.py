#lifecycle_engine\container.py

"""Dependency injection container - wires all services together."""

from dataclasses import dataclass

from lifecycle_engine.cluster.adapter import ClusterAdapter
from lifecycle_engine.cluster.kube import KubernetesClusterAdapter
from lifecycle_engine.config import LifecycleSettings
from lifecycle_engine.core.repository import ApplicationRepository
from lifecycle_engine.infrastructure.postgres.config import DatabaseSettings
from lifecycle_engine.infrastructure.postgres.database import create_db_engine, get_session_factory
from lifecycle_engine.infrastructure.postgres.repository import PostgresApplicationRepository
from lifecycle_engine.lifecycle.controller import LifecycleController
from lifecycle_engine.reconciler.reconciler import StatusReconciler
from lifecycle_engine.reconciler.scheduler import ReconcileScheduler, ThreadPoolScheduler


@dataclass
class Container:
    settings: LifecycleSettings
    repository: ApplicationRepository
    adapter: ClusterAdapter
    scheduler: ReconcileScheduler
    reconciler: StatusReconciler
    controller: LifecycleController


def build_container(
    settings: LifecycleSettings,
    repository: ApplicationRepository,
    adapter: ClusterAdapter,
    scheduler: ReconcileScheduler,
) -> Container:
    """Wire the controller from explicit collaborators (no globals)."""
    reconciler = StatusReconciler(repository=repository, adapter=adapter)
    controller = LifecycleController(
        repository=repository,
        adapter=adapter,
        reconciler=reconciler,
        scheduler=scheduler,
        namespace_prefix=settings.namespace_prefix,
    )
    return Container(
        settings=settings,
        repository=repository,
        adapter=adapter,
        scheduler=scheduler,
        reconciler=reconciler,
        controller=controller,
    )


def build_production_container() -> Container:
    """Postgres record store + Kubernetes adapter + thread-pool scheduler."""
    settings = LifecycleSettings()

    # ============================================
    # REPOSITORIES
    # ============================================
    engine = create_db_engine(DatabaseSettings())
    repository = PostgresApplicationRepository(session_factory=get_session_factory(engine))

    # ============================================
    # CLUSTER
    # ============================================
    adapter = KubernetesClusterAdapter.from_settings(settings)

    # ============================================
    # BACKGROUND WORK
    # ============================================
    scheduler = ThreadPoolScheduler(max_workers=settings.reconcile_workers)

    return build_container(settings, repository, adapter, scheduler)
