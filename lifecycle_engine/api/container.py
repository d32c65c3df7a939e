#lifecycle_engine\api\container.py
from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException

from lifecycle_engine.container import Container, build_production_container


@lru_cache(maxsize=1)
def get_container() -> Container:
    return build_production_container()


def get_owner_id(x_owner_id: Optional[int] = Header(default=None)) -> int:
    """Owner identity set by the authenticating proxy."""
    if x_owner_id is None or x_owner_id <= 0:
        raise HTTPException(status_code=401, detail="Missing owner identity")
    return x_owner_id
