from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from lifecycle_engine.api.container import get_container, get_owner_id
from lifecycle_engine.api.schemas.apps import (
    AppCreateRequest,
    AppLogsResponse,
    AppResponse,
    AppStatusResponse,
    ErrorResponse,
)

ERROR_RESPONSES = {
    status_code: {"model": ErrorResponse}
    for status_code in (403, 404, 409, 500, 502)
}

router = APIRouter(prefix="/apps", tags=["apps"], responses=ERROR_RESPONSES)


@router.post("", response_model=AppResponse, status_code=201)
def create_app(
    request: AppCreateRequest,
    owner_id: int = Depends(get_owner_id),
    container=Depends(get_container),
):
    app = container.controller.create_app(
        owner_id=owner_id,
        name=request.name,
        image=request.image,
        replicas=request.replicas,
        port=request.port,
        labels=request.labels,
    )
    return AppResponse.from_domain(app)


@router.get("", response_model=List[AppResponse])
def list_apps(
    owner_id: int = Depends(get_owner_id),
    container=Depends(get_container),
):
    apps = container.controller.list_apps(owner_id)
    return [AppResponse.from_domain(app) for app in apps]


@router.get("/{app_id}", response_model=AppResponse)
def get_app(
    app_id: UUID,
    owner_id: int = Depends(get_owner_id),
    container=Depends(get_container),
):
    return AppResponse.from_domain(container.controller.get_app(app_id, owner_id))


@router.delete("/{app_id}", status_code=204)
def delete_app(
    app_id: UUID,
    owner_id: int = Depends(get_owner_id),
    container=Depends(get_container),
):
    container.controller.delete_app(app_id, owner_id)


@router.post("/{app_id}/start")
def start_app(
    app_id: UUID,
    owner_id: int = Depends(get_owner_id),
    container=Depends(get_container),
):
    container.controller.start_app(app_id, owner_id)
    return {"status": "starting"}


@router.post("/{app_id}/stop")
def stop_app(
    app_id: UUID,
    owner_id: int = Depends(get_owner_id),
    container=Depends(get_container),
):
    container.controller.stop_app(app_id, owner_id)
    return {"status": "stopped"}


@router.post("/{app_id}/restart")
def restart_app(
    app_id: UUID,
    owner_id: int = Depends(get_owner_id),
    container=Depends(get_container),
):
    container.controller.restart_app(app_id, owner_id)
    return {"status": "restarting"}


@router.get("/{app_id}/logs", response_model=AppLogsResponse)
def get_app_logs(
    app_id: UUID,
    lines: Optional[int] = Query(default=None, ge=1, le=10000),
    owner_id: int = Depends(get_owner_id),
    container=Depends(get_container),
):
    if lines is None:
        lines = container.settings.default_log_lines
    logs = container.controller.get_app_logs(app_id, owner_id, lines)
    return AppLogsResponse(logs=logs)


@router.get("/{app_id}/status", response_model=AppStatusResponse)
def get_app_status(
    app_id: UUID,
    owner_id: int = Depends(get_owner_id),
    container=Depends(get_container),
):
    info = container.controller.get_app_status(app_id, owner_id)
    return AppStatusResponse.from_domain(info)
