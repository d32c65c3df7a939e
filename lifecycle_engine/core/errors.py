# lifecycle_engine/core/errors.py

from typing import Optional

# -----------------------------
# Base Errors
# -----------------------------

class LifecycleError(Exception):
    """Base class for all lifecycle engine errors."""

    code: int = 30001

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


# -----------------------------
# Lookup / Ownership Errors
# -----------------------------

class NotFoundError(LifecycleError):
    """Requested resource is absent."""
    code = 10004


class AppNotFound(NotFoundError):
    """Application record does not exist."""
    code = 21001


class NoMemberProcesses(NotFoundError):
    """Workload has no member processes to read logs from."""
    code = 21009


class AppConflict(LifecycleError):
    """Application name already taken within the owner's scope."""
    code = 21002


class AppForbidden(LifecycleError):
    """Application belongs to another owner."""
    code = 10003


# -----------------------------
# Backend Errors
# -----------------------------

class ClusterOperationFailed(LifecycleError):
    """
    Orchestrator call failed.

    `step` names the sub-step that failed, so callers of composite
    operations (create/delete workload) know what is left on the cluster.
    """
    code = 30003

    def __init__(self, step: str, message: str = "", cause: Optional[BaseException] = None):
        self.step = step
        self.cause = cause
        detail = message or (str(cause) if cause is not None else "cluster operation failed")
        super().__init__(f"[{step}] {detail}")


class PersistenceFailed(LifecycleError):
    """Record store call failed."""
    code = 30002

    def __init__(self, message: str = "", cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message or (str(cause) if cause is not None else "persistence failed"))
