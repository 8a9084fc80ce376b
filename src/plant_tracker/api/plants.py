"""Plant API routes.

FastAPI routers define HTTP endpoints. Each route receives the caller's
identity and a PlantService via Depends() and delegates to the service.
The owner is always the token's email, never anything from the body.

Mounted behind get_current_user in api/__init__.py, so no handler here
runs for an unauthenticated request.
"""

import uuid

import structlog
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from plant_tracker.auth.dependencies import CurrentIdentity, get_current_user
from plant_tracker.db.engine import get_db
from plant_tracker.schemas.plant import PlantCreate, PlantRead, PlantRename
from plant_tracker.services.plant_service import DEFAULT_SORT, PlantService, PlantSort

logger = structlog.get_logger()

router = APIRouter(prefix="/plants")


def _svc(db: AsyncSession = Depends(get_db)) -> PlantService:
    return PlantService(db)


@router.post("", response_model=PlantRead, status_code=201)
async def create_plant(
    body: PlantCreate,
    response: Response,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlantService = Depends(_svc),
):
    logger.debug("plants.create", email=identity.email)
    plant = await svc.create_plant(name=body.name, owner_email=identity.email)
    response.headers["Location"] = f"/api/plants/{plant.id}"
    return plant


@router.get("", response_model=list[PlantRead])
async def list_plants(
    sort: str = Query(DEFAULT_SORT, description="<field>,<asc|desc>"),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlantService = Depends(_svc),
):
    """List the caller's plants, sorted by name ascending unless asked otherwise."""
    logger.debug("plants.list", email=identity.email, sort=sort)
    return await svc.list_plants(identity.email, PlantSort.parse(sort))


@router.patch("/{plant_id}/last-watered", response_model=PlantRead)
async def update_last_watered(
    plant_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlantService = Depends(_svc),
):
    logger.debug("plants.water", plant_id=str(plant_id), email=identity.email)
    return await svc.update_last_watered(plant_id, identity.email)


@router.patch("/{plant_id}/name", response_model=PlantRead)
async def rename_plant(
    plant_id: uuid.UUID,
    body: PlantRename,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlantService = Depends(_svc),
):
    logger.debug("plants.rename", plant_id=str(plant_id), email=identity.email)
    return await svc.rename_plant(plant_id, body.name, identity.email)


@router.delete("/{plant_id}", status_code=204)
async def delete_plant(
    plant_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlantService = Depends(_svc),
):
    logger.debug("plants.delete", plant_id=str(plant_id), email=identity.email)
    await svc.delete_plant(plant_id, identity.email)
    return Response(status_code=204)
