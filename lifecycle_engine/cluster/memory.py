# lifecycle_engine/cluster/memory.py

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

from lifecycle_engine.cluster.adapter import (
    ClusterAdapter,
    RESTARTED_AT_ANNOTATION,
    STEP_EXPOSURE,
    STEP_LIST_MEMBERS,
    STEP_LOGS,
    STEP_NAMESPACE,
    STEP_READ_WORKLOAD,
    STEP_RESTART,
    STEP_SCALE,
    STEP_WORKLOAD,
)
from lifecycle_engine.core.errors import ClusterOperationFailed, NoMemberProcesses
from lifecycle_engine.core.models import (
    DEFAULT_MANAGED_BY,
    MemberInfo,
    StatusInfo,
    WorkloadSpec,
)
from lifecycle_engine.core.status import derive_status


@dataclass
class FakeWorkload:
    spec: WorkloadSpec
    labels: Dict[str, str]
    replicas: int
    ready_replicas: int = 0
    annotations: Dict[str, str] = field(default_factory=dict)


@dataclass
class FakeMember:
    info: MemberInfo
    log: str = ""


class InMemoryClusterAdapter(ClusterAdapter):
    """
    Deterministic cluster double.

    Records every call in `calls` and lets tests inject a failure for any
    sub-step with fail_on().
    """

    def __init__(self, managed_by: str = DEFAULT_MANAGED_BY):
        self._managed_by = managed_by
        self._lock = Lock()

        self.namespaces: Dict[str, Dict[str, str]] = {}
        self.workloads: Dict[Tuple[str, str], FakeWorkload] = {}
        self.services: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.members: Dict[Tuple[str, str], List[FakeMember]] = {}

        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self._failures: Dict[str, BaseException] = {}

    # -------------------------
    # TEST CONTROLS
    # -------------------------

    def fail_on(self, step: str, error: Optional[BaseException] = None) -> None:
        """Make the given sub-step raise until clear_failures() is called."""
        self._failures[step] = error or RuntimeError(f"injected failure at {step}")

    def clear_failures(self) -> None:
        self._failures.clear()

    def set_ready(self, name: str, namespace: str, ready_replicas: int) -> None:
        self.workloads[(namespace, name)].ready_replicas = ready_replicas

    def add_member(
        self,
        name: str,
        namespace: str,
        member_name: str,
        phase: str = "Running",
        ready: bool = True,
        log: str = "",
    ) -> None:
        self.members.setdefault((namespace, name), []).append(
            FakeMember(info=MemberInfo(name=member_name, phase=phase, ready=ready), log=log)
        )

    def calls_named(self, operation: str) -> List[Tuple[Any, ...]]:
        return [args for op, args in self.calls if op == operation]

    # -------------------------
    # ADAPTER OPERATIONS
    # -------------------------

    def ensure_namespace(self, namespace: str) -> None:
        self._record("ensure_namespace", namespace)
        self._maybe_fail(STEP_NAMESPACE)
        with self._lock:
            self.namespaces.setdefault(namespace, {"managed-by": self._managed_by})

    def create_workload(self, spec: WorkloadSpec) -> None:
        self._record("create_workload", spec)
        self.ensure_namespace(spec.namespace)

        key = (spec.namespace, spec.name)
        labels = spec.merged_labels(self._managed_by)

        self._maybe_fail(STEP_WORKLOAD)
        with self._lock:
            if key in self.workloads:
                raise ClusterOperationFailed(STEP_WORKLOAD, f"deployment {spec.namespace}/{spec.name} already exists")
            self.workloads[key] = FakeWorkload(spec=spec, labels=labels, replicas=spec.replicas)

        if spec.port <= 0:
            return

        self._record("create_exposure", spec.namespace, spec.name, spec.port)
        self._maybe_fail(STEP_EXPOSURE)
        with self._lock:
            self.services[key] = {"port": spec.port, "selector": spec.selector(), "labels": labels}

    def delete_workload(self, name: str, namespace: str) -> None:
        self._record("delete_workload", name, namespace)
        key = (namespace, name)

        self._maybe_fail(STEP_WORKLOAD)
        with self._lock:
            self.workloads.pop(key, None)
            self.members.pop(key, None)

        self._maybe_fail(STEP_EXPOSURE)
        with self._lock:
            self.services.pop(key, None)

    def scale_workload(self, name: str, namespace: str, replicas: int) -> None:
        self._record("scale_workload", name, namespace, replicas)
        workload = self._read(name, namespace)
        self._maybe_fail(STEP_SCALE)
        workload.replicas = replicas

    def query_status(self, name: str, namespace: str) -> StatusInfo:
        self._record("query_status", name, namespace)
        self._maybe_fail(STEP_READ_WORKLOAD)

        workload = self.workloads.get((namespace, name))
        if workload is None:
            return StatusInfo.unknown()

        self._maybe_fail(STEP_LIST_MEMBERS)
        members = [m.info for m in self.members.get((namespace, name), [])]

        return StatusInfo(
            status=derive_status(workload.replicas, workload.ready_replicas),
            ready_replicas=workload.ready_replicas,
            replicas=workload.replicas,
            members=members,
        )

    def restart_workload(self, name: str, namespace: str) -> None:
        self._record("restart_workload", name, namespace)
        workload = self._read(name, namespace)
        self._maybe_fail(STEP_RESTART)
        workload.annotations[RESTARTED_AT_ANNOTATION] = datetime.now(timezone.utc).isoformat()

    def fetch_logs(self, name: str, namespace: str, lines: int) -> str:
        self._record("fetch_logs", name, namespace, lines)
        self._maybe_fail(STEP_LIST_MEMBERS)

        members = self.members.get((namespace, name), [])
        if not members:
            raise NoMemberProcesses(f"no member processes found for {namespace}/{name}")

        self._maybe_fail(STEP_LOGS)
        log_lines = members[0].log.splitlines(keepends=True)
        return "".join(log_lines[-lines:]) if lines > 0 else ""

    # -------------------------
    # INTERNAL HELPERS
    # -------------------------

    def _record(self, operation: str, *args: Any) -> None:
        with self._lock:
            self.calls.append((operation, args))

    def _maybe_fail(self, step: str) -> None:
        error = self._failures.get(step)
        if error is None:
            return
        if isinstance(error, ClusterOperationFailed):
            raise error
        raise ClusterOperationFailed(step, cause=error) from error

    def _read(self, name: str, namespace: str) -> FakeWorkload:
        self._maybe_fail(STEP_READ_WORKLOAD)
        workload = self.workloads.get((namespace, name))
        if workload is None:
            raise ClusterOperationFailed(STEP_READ_WORKLOAD, f"deployment {namespace}/{name} not found")
        return workload
