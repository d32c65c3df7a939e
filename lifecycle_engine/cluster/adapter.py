"""Cluster adapter contract."""

from abc import ABC, abstractmethod

from lifecycle_engine.core.models import StatusInfo, WorkloadSpec


# Sub-step names carried by ClusterOperationFailed.step
STEP_NAMESPACE = "namespace"
STEP_WORKLOAD = "workload"
STEP_EXPOSURE = "exposure"
STEP_READ_WORKLOAD = "read_workload"
STEP_SCALE = "scale"
STEP_RESTART = "restart"
STEP_LIST_MEMBERS = "list_members"
STEP_LOGS = "logs"

RESTARTED_AT_ANNOTATION = "kubectl.kubernetes.io/restartedAt"


class ClusterAdapter(ABC):
    """
    Capability interface over the cluster orchestrator.

    Every operation is scoped by (name, namespace). Failures raise
    ClusterOperationFailed tagged with the sub-step that failed.
    """

    @abstractmethod
    def ensure_namespace(self, namespace: str) -> None:
        """Create the namespace if missing. Losing a create race is not an error."""
        pass

    @abstractmethod
    def create_workload(self, spec: WorkloadSpec) -> None:
        """
        Create the workload, plus an exposure resource when spec.port > 0.

        The two writes are independent: if the exposure fails the workload
        stays live and the error step is "exposure".
        """
        pass

    @abstractmethod
    def delete_workload(self, name: str, namespace: str) -> None:
        """Delete workload and exposure. Missing resources count as deleted."""
        pass

    @abstractmethod
    def scale_workload(self, name: str, namespace: str, replicas: int) -> None:
        """Read-modify-write of desired replicas. Last writer wins."""
        pass

    @abstractmethod
    def query_status(self, name: str, namespace: str) -> StatusInfo:
        """Observed status. A missing workload yields status unknown, not an error."""
        pass

    @abstractmethod
    def restart_workload(self, name: str, namespace: str) -> None:
        """Rolling restart via a pod-template annotation. Last writer wins."""
        pass

    @abstractmethod
    def fetch_logs(self, name: str, namespace: str, lines: int) -> str:
        """Tail logs of one arbitrary member. Raises NoMemberProcesses if none."""
        pass
