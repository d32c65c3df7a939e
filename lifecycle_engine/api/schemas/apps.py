from datetime import datetime
from typing import Dict, List
from uuid import UUID

from pydantic import BaseModel, Field

from lifecycle_engine.core.models import Application, StatusInfo


# DNS-1123 label: the name is used for the Deployment and Service objects
APP_NAME_PATTERN = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"


class AppCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=63, pattern=APP_NAME_PATTERN, description="Application name")
    image: str = Field(..., min_length=1, max_length=256, description="Container image (e.g., 'nginx:latest')")
    replicas: int = Field(..., ge=0, le=10, description="Desired replica count")
    port: int = Field(default=0, ge=0, le=65535, description="Container port to expose, 0 for none")
    labels: Dict[str, str] = Field(default_factory=dict, description="Extra workload labels")


class AppResponse(BaseModel):
    app_id: UUID
    owner_id: int
    name: str
    image: str
    replicas: int
    port: int
    namespace: str
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, app: Application) -> "AppResponse":
        return cls(
            app_id=app.app_id,
            owner_id=app.owner_id,
            name=app.name,
            image=app.image,
            replicas=app.replicas,
            port=app.port,
            namespace=app.namespace,
            status=app.status.value,
            created_at=app.created_at,
            updated_at=app.updated_at,
        )


class MemberResponse(BaseModel):
    name: str
    phase: str
    ready: bool


class AppStatusResponse(BaseModel):
    status: str
    ready_replicas: int
    replicas: int
    members: List[MemberResponse]

    @classmethod
    def from_domain(cls, info: StatusInfo) -> "AppStatusResponse":
        return cls(
            status=info.status.value,
            ready_replicas=info.ready_replicas,
            replicas=info.replicas,
            members=[
                MemberResponse(name=m.name, phase=m.phase, ready=m.ready)
                for m in info.members
            ],
        )


class AppLogsResponse(BaseModel):
    logs: str


class ErrorResponse(BaseModel):
    code: int
    message: str
