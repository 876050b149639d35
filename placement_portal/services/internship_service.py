"""Internship postings."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser
from placement_portal.core.exceptions import NotFoundError, ValidationFailedError
from placement_portal.models.internship import Internship
from placement_portal.schemas.internship import InternshipCreate, InternshipUpdate
from placement_portal.services import access

logger = logging.getLogger(__name__)


class InternshipService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_postings(
        self,
        department: str | None = None,
        posted_by: int | None = None,
        include_inactive: bool = False,
    ) -> list[Internship]:
        query = select(Internship)
        if not include_inactive:
            query = query.where(Internship.is_active.is_(True))
        if posted_by is not None:
            query = query.where(Internship.posted_by == posted_by)
        result = await self.session.execute(query.order_by(Internship.created_at.desc()))
        internships = list(result.scalars().all())
        if department:
            # empty eligibility means open to every department
            internships = [
                i
                for i in internships
                if not i.eligible_departments or department in i.eligible_departments
            ]
        return internships

    async def get(self, internship_id: int, include_inactive: bool = False) -> Internship:
        internship = await access.get_internship(self.session, internship_id)
        if not internship.is_active and not include_inactive:
            raise NotFoundError("Internship", internship_id)
        return internship

    async def create(self, actor: CurrentUser, data: InternshipCreate) -> Internship:
        internship = Internship(**data.model_dump(), posted_by=actor.id, is_active=True)
        self.session.add(internship)
        await self.session.commit()
        logger.info(f"Internship {internship.id} posted by user {actor.id}")
        return internship

    async def update(
        self, actor: CurrentUser, internship_id: int, data: InternshipUpdate
    ) -> Internship:
        internship = await access.get_internship(self.session, internship_id)
        access.ensure_internship_owner(actor, internship)

        changes = data.model_dump(exclude_unset=True)
        stipend_min = changes.get("stipend_min", internship.stipend_min)
        stipend_max = changes.get("stipend_max", internship.stipend_max)
        if stipend_min is not None and stipend_max is not None and stipend_min > stipend_max:
            raise ValidationFailedError("stipend_min cannot exceed stipend_max")

        for field, value in changes.items():
            setattr(internship, field, value)
        await self.session.commit()
        logger.info(f"Internship {internship.id} updated by user {actor.id}: {sorted(changes)}")
        return internship

    async def deactivate(self, actor: CurrentUser, internship_id: int) -> Internship:
        """Soft delete: the posting disappears from listings and search."""
        internship = await access.get_internship(self.session, internship_id)
        access.ensure_internship_owner(actor, internship)
        internship.is_active = False
        await self.session.commit()
        logger.info(f"Internship {internship.id} deactivated by user {actor.id}")
        return internship
