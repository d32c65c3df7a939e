#lifecycle_engine\core\status.py

from typing import Optional

from lifecycle_engine.core.models import AppStatus


def derive_status(desired: Optional[int], ready: Optional[int]) -> AppStatus:
    """
    Map desired/ready replica counts to an application status.

    Check order matters: desired == 0 wins regardless of ready.
    """
    desired = desired or 0
    ready = ready or 0

    if desired == 0:
        return AppStatus.STOPPED

    if ready == desired:
        return AppStatus.RUNNING

    if ready == 0:
        return AppStatus.PENDING

    return AppStatus.STARTING
