"""Department-wise placement heatmap."""

import logging
from collections import defaultdict
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.storage import utc_now
from placement_portal.models.enums import OfferStatus, PlacementStatus, Role
from placement_portal.models.offer import PlacementOffer
from placement_portal.models.user import User
from placement_portal.schemas.analytics import DepartmentStats, HeatmapResponse

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=30)
UNASSIGNED_DEPARTMENT = "Unassigned"


def heat_score(placement_percentage: float, recent_placements: int) -> float:
    """Placement rate plus a capped bonus for recent activity, capped at 100."""
    return round(min(100.0, placement_percentage + min(50, recent_placements * 10)), 2)


class HeatmapService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def department_stats(self) -> HeatmapResponse:
        result = await self.session.execute(
            select(User.department, User.placement_status, func.count(User.id))
            .where(User.role == Role.STUDENT.value)
            .group_by(User.department, User.placement_status)
        )
        counts: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for department, placement_status, count in result.all():
            counts[department or UNASSIGNED_DEPARTMENT][placement_status] += count

        since = utc_now() - RECENT_WINDOW
        recent_result = await self.session.execute(
            select(User.department, func.count(PlacementOffer.id))
            .join(User, User.id == PlacementOffer.student_id)
            .where(
                PlacementOffer.offer_status == OfferStatus.ACCEPTED.value,
                PlacementOffer.acceptance_date >= since,
            )
            .group_by(User.department)
        )
        recent = {
            (department or UNASSIGNED_DEPARTMENT): count
            for department, count in recent_result.all()
        }

        departments = []
        for department in sorted(counts):
            by_status = counts[department]
            total = sum(by_status.values())
            placed = by_status.get(PlacementStatus.PLACED.value, 0)
            percentage = round(placed / total * 100, 2) if total else 0.0
            recent_count = recent.get(department, 0)
            departments.append(
                DepartmentStats(
                    department=department,
                    total_students=total,
                    placed_students=placed,
                    interning_students=by_status.get(PlacementStatus.INTERNING.value, 0),
                    available_students=by_status.get(PlacementStatus.AVAILABLE.value, 0),
                    placement_percentage=percentage,
                    recent_placements=recent_count,
                    heat_score=heat_score(percentage, recent_count),
                )
            )

        total_students = sum(d.total_students for d in departments)
        total_placed = sum(d.placed_students for d in departments)
        departments.sort(key=lambda d: d.heat_score, reverse=True)
        logger.info(f"Heatmap computed over {len(departments)} department(s)")
        return HeatmapResponse(
            departments=departments,
            total_students=total_students,
            total_placed=total_placed,
            overall_placement_percentage=(
                round(total_placed / total_students * 100, 2) if total_students else 0.0
            ),
            generated_at=utc_now(),
        )
