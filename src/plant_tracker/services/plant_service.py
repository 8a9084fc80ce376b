"""Plant service — ownership-scoped CRUD over plants.

Service layer separates business logic from HTTP routing. Every method
takes the caller's email (from the validated token), resolves the User
first, and only ever touches plants that pass owned_by(). A plant that
exists but belongs to someone else is reported exactly like a plant
that doesn't exist.
"""

import uuid
from dataclasses import dataclass

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from plant_tracker.db.models import Plant, User, utcnow
from plant_tracker.errors import InvalidSort, PlantAlreadyExists, PlantNotFound
from plant_tracker.services.user_service import UserService

logger = structlog.get_logger()

DEFAULT_SORT = "name,asc"

# Public sort keys → mapped columns
SORTABLE_FIELDS = {
    "name": Plant.name,
    "lastWateredAt": Plant.last_watered_at,
    "id": Plant.id,
}
SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class PlantSort:
    field: str = "name"
    direction: str = "asc"

    @classmethod
    def parse(cls, raw: str | None) -> "PlantSort":
        """Parse "<field>[,<direction>]", e.g. "name,desc".

        Direction defaults to asc and is case-insensitive. An unknown
        field or direction raises InvalidSort.
        """
        if raw is None or not raw.strip():
            raw = DEFAULT_SORT
        parts = [p.strip() for p in raw.split(",")]
        if len(parts) > 2:
            raise InvalidSort(raw)

        field = parts[0]
        direction = parts[1].lower() if len(parts) == 2 else "asc"
        if field not in SORTABLE_FIELDS or direction not in SORT_DIRECTIONS:
            raise InvalidSort(raw)
        return cls(field=field, direction=direction)

    def order_by(self):
        column = SORTABLE_FIELDS[self.field]
        return column.desc() if self.direction == "desc" else column.asc()


def owned_by(owner: User):
    """The ownership predicate. Every plant query goes through this."""
    return Plant.user_id == owner.id


class PlantService:
    """Business logic for a user's plants."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserService(db)

    async def create_plant(self, name: str, owner_email: str) -> Plant:
        owner = await self.users.get_by_email(owner_email)

        # Names are unique across all users, not per owner.
        if await self._name_taken(name):
            raise PlantAlreadyExists(name)

        plant = Plant(name=name, last_watered_at=None, user_id=owner.id)
        self.db.add(plant)
        await self._commit_or_conflict(name)

        logger.info("plants.created", plant_id=str(plant.id), user_id=str(owner.id))
        return plant

    async def list_plants(
        self, owner_email: str, sort: PlantSort | None = None
    ) -> list[Plant]:
        owner = await self.users.get_by_email(owner_email)
        sort = sort or PlantSort()

        result = await self.db.execute(
            select(Plant)
            .where(owned_by(owner))
            .order_by(sort.order_by(), Plant.id)
        )
        return list(result.scalars().all())

    async def update_last_watered(
        self, plant_id: uuid.UUID, owner_email: str
    ) -> Plant:
        """Stamp the plant as watered now. The time is always server-side."""
        owner = await self.users.get_by_email(owner_email)
        plant = await self._get_owned(plant_id, owner)

        plant.last_watered_at = utcnow()
        await self.db.commit()

        logger.info("plants.watered", plant_id=str(plant.id))
        return plant

    async def rename_plant(
        self, plant_id: uuid.UUID, name: str, owner_email: str
    ) -> Plant:
        owner = await self.users.get_by_email(owner_email)
        plant = await self._get_owned(plant_id, owner)

        if plant.name == name:
            return plant
        if await self._name_taken(name):
            raise PlantAlreadyExists(name)

        plant.name = name
        await self._commit_or_conflict(name)

        logger.info("plants.renamed", plant_id=str(plant.id))
        return plant

    async def delete_plant(self, plant_id: uuid.UUID, owner_email: str) -> None:
        owner = await self.users.get_by_email(owner_email)
        plant = await self._get_owned(plant_id, owner)

        await self.db.delete(plant)
        await self.db.commit()

        logger.info("plants.deleted", plant_id=str(plant_id))

    # ─── Helpers ────────────────────────────────────────

    async def _get_owned(self, plant_id: uuid.UUID, owner: User) -> Plant:
        result = await self.db.execute(
            select(Plant).where(Plant.id == plant_id, owned_by(owner))
        )
        plant = result.scalars().first()
        if plant is None:
            raise PlantNotFound(plant_id)
        return plant

    async def _name_taken(self, name: str) -> bool:
        result = await self.db.execute(select(Plant.id).where(Plant.name == name))
        return result.first() is not None

    async def _commit_or_conflict(self, name: str) -> None:
        # Lost a race with another insert/rename of the same name.
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise PlantAlreadyExists(name) from e
