#tests\test_controller.py

"""Test lifecycle controller commands against in-memory collaborators."""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from lifecycle_engine.cluster.adapter import (
    RESTARTED_AT_ANNOTATION,
    STEP_EXPOSURE,
    STEP_READ_WORKLOAD,
    STEP_SCALE,
    STEP_WORKLOAD,
)
from lifecycle_engine.core.errors import (
    AppConflict,
    AppForbidden,
    AppNotFound,
    ClusterOperationFailed,
    NoMemberProcesses,
    NotFoundError,
    PersistenceFailed,
)
from lifecycle_engine.core.models import AppStatus
from lifecycle_engine.lifecycle.controller import LifecycleController
from lifecycle_engine.reconciler.scheduler import SynchronousScheduler


OWNER = 7
OTHER_OWNER = 8


@pytest.fixture
def web_app(controller, scheduler):
    """A created 3-replica app with its creation reconcile already drained."""
    app = controller.create_app(OWNER, "web", "x:1", 3)
    scheduler.run_pending()
    return app


class TestCreate:
    """Test create + compensation."""

    def test_create_without_port(self, controller, repository, adapter):
        """owner=7, web, x:1, replicas=3, port=0."""
        app = controller.create_app(owner_id=7, name="web", image="x:1", replicas=3, port=0)

        stored = repository.get(app.app_id)
        assert stored.status == AppStatus.PENDING
        assert stored.namespace == "astro-user-7"
        assert stored.replicas == 3

        assert len(adapter.calls_named("create_workload")) == 1
        assert adapter.calls_named("create_exposure") == []
        assert adapter.services == {}

    def test_create_with_port_exposes_workload(self, controller, adapter):
        controller.create_app(OWNER, "web", "x:1", 1, port=8080)

        assert adapter.calls_named("create_exposure") == [("astro-user-7", "web", 8080)]
        assert adapter.services[("astro-user-7", "web")]["port"] == 8080

    def test_create_passes_caller_labels(self, controller, adapter):
        controller.create_app(OWNER, "web", "x:1", 1, labels={"tier": "frontend"})

        workload = adapter.workloads[("astro-user-7", "web")]
        assert workload.labels == {"app": "web", "managed-by": "astro", "tier": "frontend"}

    def test_duplicate_name_conflicts(self, controller, adapter):
        controller.create_app(OWNER, "web", "x:1", 1)

        with pytest.raises(AppConflict):
            controller.create_app(OWNER, "web", "x:2", 1)

        assert len(adapter.calls_named("create_workload")) == 1

    def test_same_name_for_other_owner_allowed(self, controller):
        a = controller.create_app(OWNER, "web", "x:1", 1)
        b = controller.create_app(OTHER_OWNER, "web", "x:1", 1)

        assert a.namespace != b.namespace

    def test_cluster_failure_removes_record(self, controller, repository, adapter, scheduler):
        adapter.fail_on(STEP_WORKLOAD)

        with pytest.raises(ClusterOperationFailed) as exc_info:
            controller.create_app(OWNER, "web", "x:1", 3)

        assert exc_info.value.step == STEP_WORKLOAD
        assert repository.get_by_owner_and_name(OWNER, "web") is None
        assert repository.list_by_owner(OWNER) == []
        assert scheduler.pending == 0

    def test_exposure_failure_leaves_workload_live(self, controller, repository, adapter):
        """Compensation only touches the record, never the cluster."""
        adapter.fail_on(STEP_EXPOSURE)

        with pytest.raises(ClusterOperationFailed) as exc_info:
            controller.create_app(OWNER, "web", "x:1", 1, port=80)

        assert exc_info.value.step == STEP_EXPOSURE
        assert repository.get_by_owner_and_name(OWNER, "web") is None
        assert ("astro-user-7", "web") in adapter.workloads

    def test_unexpected_adapter_error_is_wrapped(self, repository, reconciler, scheduler):
        broken = MagicMock()
        broken.create_workload.side_effect = ConnectionError("api server down")
        controller = LifecycleController(repository, broken, reconciler, scheduler)

        with pytest.raises(ClusterOperationFailed) as exc_info:
            controller.create_app(OWNER, "web", "x:1", 1)

        assert isinstance(exc_info.value.cause, ConnectionError)
        assert repository.list_by_owner(OWNER) == []

    def test_failed_compensation_still_raises_cluster_error(self, adapter, reconciler, scheduler, repository):
        store = MagicMock(wraps=repository)
        store.delete.side_effect = RuntimeError("db gone")
        controller = LifecycleController(store, adapter, reconciler, scheduler)
        adapter.fail_on(STEP_WORKLOAD)

        with pytest.raises(ClusterOperationFailed):
            controller.create_app(OWNER, "web", "x:1", 1)

        # Orphaned pending record stays behind
        orphan = repository.get_by_owner_and_name(OWNER, "web")
        assert orphan is not None
        assert orphan.status == AppStatus.PENDING

    def test_store_failure_is_persistence_error(self, adapter, reconciler, scheduler):
        store = MagicMock()
        store.get_by_owner_and_name.side_effect = RuntimeError("connection reset")
        controller = LifecycleController(store, adapter, reconciler, scheduler)

        with pytest.raises(PersistenceFailed):
            controller.create_app(OWNER, "web", "x:1", 1)

        assert adapter.calls == []

    def test_success_schedules_reconcile(self, controller, repository, adapter, scheduler):
        app = controller.create_app(OWNER, "web", "x:1", 3)

        assert scheduler.pending_args() == [(app.app_id, "web", "astro-user-7")]

        adapter.set_ready("web", "astro-user-7", 3)
        scheduler.run_pending()

        assert repository.get(app.app_id).status == AppStatus.RUNNING


class TestDelete:
    """Test delete ordering."""

    def test_delete_removes_cluster_then_record(self, controller, repository, adapter, web_app):
        controller.delete_app(web_app.app_id, OWNER)

        assert repository.get(web_app.app_id) is None
        assert adapter.workloads == {}

    def test_cluster_failure_keeps_record(self, controller, repository, adapter, web_app):
        adapter.fail_on(STEP_WORKLOAD)

        with pytest.raises(ClusterOperationFailed):
            controller.delete_app(web_app.app_id, OWNER)

        assert repository.get(web_app.app_id) is not None

    def test_missing_cluster_resources_are_fine(self, controller, repository, adapter, web_app):
        adapter.workloads.clear()

        controller.delete_app(web_app.app_id, OWNER)

        assert repository.get(web_app.app_id) is None

    def test_delete_does_not_schedule(self, controller, scheduler, web_app):
        controller.delete_app(web_app.app_id, OWNER)

        assert scheduler.pending == 0


class TestOwnership:
    """Every command checks existence and ownership first."""

    COMMANDS = [
        ("delete_app", ()),
        ("start_app", ()),
        ("stop_app", ()),
        ("restart_app", ()),
        ("get_app", ()),
        ("get_app_logs", (10,)),
        ("get_app_status", ()),
    ]

    @pytest.mark.parametrize("command,extra", COMMANDS)
    def test_other_owner_is_forbidden(self, controller, adapter, web_app, command, extra):
        calls_before = len(adapter.calls)

        with pytest.raises(AppForbidden):
            getattr(controller, command)(web_app.app_id, OTHER_OWNER, *extra)

        assert len(adapter.calls) == calls_before

    @pytest.mark.parametrize("command,extra", COMMANDS)
    def test_missing_app_is_not_found(self, controller, command, extra):
        with pytest.raises(AppNotFound):
            getattr(controller, command)(uuid4(), OWNER, *extra)


class TestStartStopRestart:
    """Test scale/restart commands and their record updates."""

    def test_start_zero_replicas_targets_one(self, controller, adapter, repository, scheduler):
        app = controller.create_app(OWNER, "web", "x:1", 0)
        scheduler.run_pending()

        controller.start_app(app.app_id, OWNER)

        assert adapter.calls_named("scale_workload")[-1] == ("web", "astro-user-7", 1)
        assert repository.get(app.app_id).status == AppStatus.STARTING

    def test_start_restores_persisted_replicas(self, controller, adapter, web_app):
        controller.start_app(web_app.app_id, OWNER)

        assert adapter.calls_named("scale_workload")[-1] == ("web", "astro-user-7", 3)

    def test_start_schedules_reconcile(self, controller, repository, adapter, scheduler, web_app):
        controller.start_app(web_app.app_id, OWNER)
        assert scheduler.pending == 1

        adapter.set_ready("web", "astro-user-7", 3)
        scheduler.run_pending()

        assert repository.get(web_app.app_id).status == AppStatus.RUNNING

    def test_start_cluster_failure_leaves_status(self, controller, repository, adapter, scheduler, web_app):
        adapter.fail_on(STEP_SCALE)
        before = repository.get(web_app.app_id).status

        with pytest.raises(ClusterOperationFailed):
            controller.start_app(web_app.app_id, OWNER)

        assert repository.get(web_app.app_id).status == before
        assert scheduler.pending == 0

    def test_stop_sets_stopped_and_zero(self, controller, repository, adapter, scheduler, web_app):
        controller.stop_app(web_app.app_id, OWNER)

        stored = repository.get(web_app.app_id)
        assert stored.status == AppStatus.STOPPED
        assert stored.replicas == 0
        assert adapter.calls_named("scale_workload")[-1] == ("web", "astro-user-7", 0)
        assert scheduler.pending == 0

    def test_stop_then_get(self, controller, adapter, web_app):
        adapter.set_ready("web", "astro-user-7", 3)

        controller.stop_app(web_app.app_id, OWNER)
        app = controller.get_app(web_app.app_id, OWNER)

        assert app.status == AppStatus.STOPPED
        assert app.replicas == 0

    def test_stop_then_get_with_failing_query(self, controller, adapter, web_app):
        controller.stop_app(web_app.app_id, OWNER)
        adapter.fail_on(STEP_READ_WORKLOAD)

        app = controller.get_app(web_app.app_id, OWNER)

        assert app.status == AppStatus.STOPPED
        assert app.replicas == 0

    def test_stop_then_start_targets_one(self, controller, adapter, web_app):
        """Stop persists replicas=0, so the next start scales to 1."""
        controller.stop_app(web_app.app_id, OWNER)
        controller.start_app(web_app.app_id, OWNER)

        assert adapter.calls_named("scale_workload")[-1] == ("web", "astro-user-7", 1)

    def test_restart_stamps_and_schedules(self, controller, repository, adapter, scheduler, web_app):
        controller.restart_app(web_app.app_id, OWNER)

        assert repository.get(web_app.app_id).status == AppStatus.RESTARTING
        assert RESTARTED_AT_ANNOTATION in adapter.workloads[("astro-user-7", "web")].annotations
        assert scheduler.pending == 1

    def test_status_write_failure_does_not_fail_command(self, adapter, reconciler, scheduler, repository, web_app):
        store = MagicMock(wraps=repository)
        store.update_status.side_effect = RuntimeError("db gone")
        controller = LifecycleController(store, adapter, reconciler, scheduler)

        controller.restart_app(web_app.app_id, OWNER)

        assert RESTARTED_AT_ANNOTATION in adapter.workloads[("astro-user-7", "web")].annotations


class TestReads:
    """Test list/get/logs/status."""

    def test_list_returns_owner_records_and_schedules_each(self, controller, scheduler):
        a = controller.create_app(OWNER, "web", "x:1", 1)
        b = controller.create_app(OWNER, "api", "y:1", 1)
        controller.create_app(OTHER_OWNER, "web", "x:1", 1)
        scheduler.run_pending()

        apps = controller.list_apps(OWNER)

        assert {app.app_id for app in apps} == {a.app_id, b.app_id}
        assert sorted(args[0] for args in scheduler.pending_args()) == sorted([a.app_id, b.app_id])

    def test_list_returns_before_reconcile(self, controller, adapter, scheduler, web_app):
        adapter.set_ready("web", "astro-user-7", 3)

        apps = controller.list_apps(OWNER)

        assert apps[0].status == AppStatus.PENDING
        scheduler.run_pending()
        assert controller.list_apps(OWNER)[0].status == AppStatus.RUNNING

    def test_list_empty(self, controller, scheduler):
        assert controller.list_apps(OWNER) == []
        assert scheduler.pending == 0

    def test_get_reconciles_synchronously(self, controller, adapter, scheduler):
        app = controller.create_app(OWNER, "web", "x:1", 3)
        adapter.set_ready("web", "astro-user-7", 1)

        fetched = controller.get_app(app.app_id, OWNER)

        assert fetched.status == AppStatus.STARTING
        # The creation reconcile was never run
        assert scheduler.pending == 1

    def test_get_picks_up_out_of_band_scale(self, controller, adapter, web_app):
        adapter.scale_workload("web", "astro-user-7", 5)
        adapter.set_ready("web", "astro-user-7", 5)

        fetched = controller.get_app(web_app.app_id, OWNER)

        assert fetched.status == AppStatus.RUNNING
        assert fetched.replicas == 5

    def test_logs_without_members_not_found(self, controller, web_app):
        with pytest.raises(NotFoundError) as exc_info:
            controller.get_app_logs(web_app.app_id, OWNER, 100)

        assert isinstance(exc_info.value, NoMemberProcesses)

    def test_logs_tail(self, controller, adapter, web_app):
        adapter.add_member("web", "astro-user-7", "web-a", log="one\ntwo\nthree\n")

        assert controller.get_app_logs(web_app.app_id, OWNER, 2) == "two\nthree\n"

    def test_live_status_includes_members(self, controller, adapter, web_app):
        adapter.set_ready("web", "astro-user-7", 1)
        adapter.add_member("web", "astro-user-7", "web-a", ready=True)
        adapter.add_member("web", "astro-user-7", "web-b", phase="Pending", ready=False)

        info = controller.get_app_status(web_app.app_id, OWNER)

        assert info.status == AppStatus.STARTING
        assert info.ready_replicas == 1
        assert [m.name for m in info.members] == ["web-a", "web-b"]


class TestSynchronousScheduling:
    """Full graph with reconciles executed inline."""

    def test_create_reconciles_before_returning_to_test(self, sync_container, adapter):
        controller = sync_container.controller

        app = controller.create_app(OWNER, "web", "x:1", 0)

        # 0 desired replicas -> stopped once reconciled; replicas stay 0
        stored = sync_container.repository.get(app.app_id)
        assert stored.status == AppStatus.STOPPED
        assert stored.replicas == 0

    def test_scheduler_type(self, sync_container):
        assert isinstance(sync_container.scheduler, SynchronousScheduler)
