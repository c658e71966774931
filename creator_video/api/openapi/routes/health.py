"""Liveness, readiness and component health endpoints."""

from enum import Enum

from fastapi import APIRouter
from pydantic import BaseModel, Field

from creator_video.api.dependencies import FactoryDep, SettingsDep

router = APIRouter()


class ProbeState(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ComponentProbe(BaseModel):
    """Result of probing one backing component."""

    name: str = Field(description="Component name, e.g. 'document_db'")
    status: ProbeState
    latency_ms: float | None = Field(default=None, description="Probe round trip")
    message: str | None = None


class ServiceHealth(BaseModel):
    """Aggregate health of the service."""

    status: ProbeState = Field(description="Unhealthy if any component is")
    version: str
    environment: str
    components: list[ComponentProbe] = Field(default_factory=list)


class Liveness(BaseModel):
    status: str = "ok"


class Readiness(BaseModel):
    """Whether requests can be served, with the per-component checks."""

    ready: bool
    checks: dict[str, bool] = Field(default_factory=dict)


async def _probe_document_db(factory: FactoryDep, provider: str) -> ComponentProbe:
    result = await factory.get_document_db().health_check()
    return ComponentProbe(
        name="document_db",
        status=ProbeState.HEALTHY if result.healthy else ProbeState.UNHEALTHY,
        latency_ms=round(result.latency_ms, 2),
        message=f"Provider: {provider}. {result.message or ''}".strip(),
    )


@router.get(
    "/health",
    response_model=ServiceHealth,
    summary="Health check",
    description="Probe the document store and report overall service health.",
)
async def health_check(
    settings: SettingsDep,
    factory: FactoryDep,
) -> ServiceHealth:
    components = [await _probe_document_db(factory, settings.document_db.provider)]
    healthy = all(c.status == ProbeState.HEALTHY for c in components)
    return ServiceHealth(
        status=ProbeState.HEALTHY if healthy else ProbeState.UNHEALTHY,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=Liveness,
    summary="Liveness probe",
    description="Answers as long as the process serves requests.",
)
async def liveness() -> Liveness:
    return Liveness()


@router.get(
    "/health/ready",
    response_model=Readiness,
    summary="Readiness probe",
    description="Ready once the document store answers its ping.",
)
async def readiness(
    settings: SettingsDep,
    factory: FactoryDep,
) -> Readiness:
    probe = await _probe_document_db(factory, settings.document_db.provider)
    checks = {probe.name: probe.status == ProbeState.HEALTHY}
    return Readiness(ready=all(checks.values()), checks=checks)
