"""Core domain models (business logic)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID, uuid4


DEFAULT_NAMESPACE_PREFIX = "astro-user"
DEFAULT_MANAGED_BY = "astro"


class AppStatus(str, Enum):
    """Last-known application status."""

    PENDING = "pending"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    RESTARTING = "restarting"
    UNKNOWN = "unknown"


def namespace_for(owner_id: int, prefix: str = DEFAULT_NAMESPACE_PREFIX) -> str:
    """One namespace per owner, derived from the owner identity only."""
    return f"{prefix}-{owner_id}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Application:
    """Persisted application record."""

    # Identity
    app_id: UUID
    owner_id: int
    name: str

    # Workload
    image: str
    replicas: int = 1
    port: int = 0
    namespace: str = ""

    # Cached cluster view
    status: AppStatus = AppStatus.PENDING

    # Timestamps
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def new(
        cls,
        owner_id: int,
        name: str,
        image: str,
        replicas: int,
        port: int = 0,
        namespace_prefix: str = DEFAULT_NAMESPACE_PREFIX,
    ) -> "Application":
        if replicas < 0:
            raise ValueError("replicas must be >= 0")
        return cls(
            app_id=uuid4(),
            owner_id=owner_id,
            name=name,
            image=image,
            replicas=replicas,
            port=port,
            namespace=namespace_for(owner_id, namespace_prefix),
            status=AppStatus.PENDING,
        )

    def is_owned_by(self, owner_id: int) -> bool:
        return self.owner_id == owner_id


@dataclass
class WorkloadSpec:
    """What the cluster is asked to run. Built fresh for every mutating call."""

    name: str
    namespace: str
    image: str
    replicas: int
    port: int = 0
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_application(
        cls,
        app: Application,
        labels: Optional[Dict[str, str]] = None,
    ) -> "WorkloadSpec":
        return cls(
            name=app.name,
            namespace=app.namespace,
            image=app.image,
            replicas=app.replicas,
            port=app.port,
            labels=dict(labels or {}),
        )

    def selector(self) -> Dict[str, str]:
        return {"app": self.name}

    def merged_labels(self, managed_by: str = DEFAULT_MANAGED_BY) -> Dict[str, str]:
        """Default labels overlaid with caller labels (caller wins)."""
        labels = {"app": self.name, "managed-by": managed_by}
        labels.update(self.labels)
        return labels


@dataclass
class MemberInfo:
    """One member process (pod) of a workload."""
    name: str
    phase: str
    ready: bool = False


@dataclass
class StatusInfo:
    """Orchestrator-side view of a workload. Not persisted."""

    status: AppStatus
    ready_replicas: int = 0
    replicas: int = 0
    members: List[MemberInfo] = field(default_factory=list)

    @classmethod
    def unknown(cls) -> "StatusInfo":
        return cls(status=AppStatus.UNKNOWN)
