"""Calendar store and interview conflict checking."""

import logging
from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser
from placement_portal.core.config import Settings, settings
from placement_portal.core.exceptions import PermissionDeniedError
from placement_portal.models.calendar import CalendarEvent
from placement_portal.models.enums import (
    BLOCKING_EVENT_TYPES,
    CalendarEventStatus,
    CalendarEventType,
    Role,
)
from placement_portal.schemas.calendar import (
    AvailableSlot,
    CalendarEventCreate,
    CalendarEventResponse,
    ConflictItem,
    ConflictReport,
)

logger = logging.getLogger(__name__)

_INACTIVE_EVENT_STATUSES = (
    CalendarEventStatus.CANCELLED.value,
    CalendarEventStatus.RESCHEDULED.value,
)


def overlaps(
    start: datetime, end: datetime, other_start: datetime, other_end: datetime
) -> bool:
    """Half-open interval overlap test."""
    return other_start < end and other_end > start


def describe_conflict(event: CalendarEvent, user_id: int) -> tuple[bool, str]:
    """Return whether the event blocks scheduling, and a readable reason."""
    event_type = CalendarEventType(event.event_type)
    when = f"{event.start_datetime:%Y-%m-%d %H:%M}-{event.end_datetime:%H:%M}"
    if event_type == CalendarEventType.EXAM:
        return True, f"User {user_id} has an exam scheduled: {event.title} ({when})"
    if event_type in BLOCKING_EVENT_TYPES:
        return True, (
            f"User {user_id} has an academic commitment: {event.title} ({when})"
        )
    return False, (
        f"User {user_id} has an overlapping {event_type.value.lower()} event: "
        f"{event.title} ({when})"
    )


def iter_candidate_starts(
    after: datetime,
    duration: timedelta,
    config: Settings,
    skip_lunch: bool = False,
) -> Iterator[datetime]:
    """Yield slot starts after ``after`` that fit in weekday working hours."""
    step = timedelta(minutes=config.slot_step_minutes)
    horizon = after + timedelta(days=config.slot_search_horizon_days)
    cursor = after.replace(minute=0, second=0, microsecond=0) + step
    while cursor < horizon:
        day_start = datetime.combine(cursor.date(), time(config.working_day_start_hour))
        day_end = datetime.combine(cursor.date(), time()) + timedelta(
            hours=config.working_day_end_hour
        )
        fits = (
            cursor.weekday() < 5
            and cursor >= day_start
            and cursor + duration <= day_end
        )
        if fits and skip_lunch:
            lunch_start = datetime.combine(cursor.date(), time(config.lunch_start_hour))
            lunch_end = datetime.combine(cursor.date(), time(config.lunch_end_hour))
            fits = not overlaps(cursor, cursor + duration, lunch_start, lunch_end)
        if fits:
            yield cursor
        cursor += step


class CalendarService:
    """Reads and writes calendar events and checks proposed intervals.

    Conflict detection is a linear scan over the events of the users involved.
    """

    def __init__(self, session: AsyncSession, config: Settings = settings):
        self.session = session
        self.config = config

    async def events_overlapping(
        self,
        user_ids: Iterable[int],
        start: datetime,
        end: datetime,
        exclude_event_ids: Iterable[int] = (),
    ) -> list[tuple[int, CalendarEvent]]:
        """Active events overlapping [start, end) that involve any of the users."""
        query = select(CalendarEvent).where(
            CalendarEvent.start_datetime < end,
            CalendarEvent.end_datetime > start,
            CalendarEvent.status.not_in(_INACTIVE_EVENT_STATUSES),
        )
        excluded = list(exclude_event_ids)
        if excluded:
            query = query.where(CalendarEvent.id.not_in(excluded))
        result = await self.session.execute(query.order_by(CalendarEvent.start_datetime))
        events = result.scalars().all()

        matches = []
        for user_id in dict.fromkeys(user_ids):
            matches.extend((user_id, e) for e in events if e.involves(user_id))
        return matches

    async def check_conflicts(
        self,
        user_ids: Iterable[int],
        start: datetime,
        end: datetime,
        exclude_event_ids: Iterable[int] = (),
    ) -> ConflictReport:
        user_ids = list(user_ids)
        excluded = list(exclude_event_ids)
        found = await self.events_overlapping(user_ids, start, end, excluded)

        conflicts = []
        for user_id, event in found:
            blocking, reason = describe_conflict(event, user_id)
            conflicts.append(
                ConflictItem(
                    event=CalendarEventResponse.model_validate(event),
                    user_id=user_id,
                    blocking=blocking,
                    reason=reason,
                )
            )

        suggestions: list[str] = []
        if conflicts:
            slots = await self.suggest_times(user_ids, start, end - start, excluded)
            suggestions = [s.isoformat() for s in slots]
            logger.info(
                f"{len(conflicts)} conflict(s) for users {user_ids} at {start}; "
                f"suggested {len(suggestions)} alternative(s)"
            )

        return ConflictReport(
            has_conflicts=bool(conflicts),
            has_blocking_conflicts=any(c.blocking for c in conflicts),
            conflicts=conflicts,
            suggested_times=suggestions,
        )

    async def suggest_times(
        self,
        user_ids: list[int],
        after: datetime,
        duration: timedelta,
        exclude_event_ids: Iterable[int] = (),
        limit: int | None = None,
    ) -> list[datetime]:
        """First conflict-free slots after ``after`` within the search horizon."""
        limit = limit or self.config.max_suggested_slots
        window_end = after + timedelta(days=self.config.slot_search_horizon_days) + duration
        busy = [
            e
            for _, e in await self.events_overlapping(
                user_ids, after, window_end, exclude_event_ids
            )
        ]

        slots = []
        for candidate in iter_candidate_starts(after, duration, self.config):
            candidate_end = candidate + duration
            if any(
                overlaps(candidate, candidate_end, e.start_datetime, e.end_datetime)
                for e in busy
            ):
                continue
            slots.append(candidate)
            if len(slots) >= limit:
                break
        return slots

    async def available_slots(
        self, user_id: int, day: date, duration_minutes: int = 60
    ) -> list[AvailableSlot]:
        """Free slots for one user on one day, outside lunch."""
        duration = timedelta(minutes=duration_minutes)
        day_start = datetime.combine(day, time(self.config.working_day_start_hour))
        day_end = datetime.combine(day, time()) + timedelta(
            hours=self.config.working_day_end_hour
        )
        busy = [
            e for _, e in await self.events_overlapping([user_id], day_start, day_end)
        ]

        slots = []
        after = day_start - timedelta(minutes=self.config.slot_step_minutes)
        for start in iter_candidate_starts(after, duration, self.config, skip_lunch=True):
            if start.date() != day:
                break
            end = start + duration
            if not any(overlaps(start, end, e.start_datetime, e.end_datetime) for e in busy):
                slots.append(AvailableSlot(start=start, end=end))
        return slots

    def add_event(
        self,
        title: str,
        event_type: CalendarEventType,
        start: datetime,
        end: datetime,
        organizer_id: int | None,
        participants: list[int],
        description: str | None = None,
        location: str | None = None,
        meeting_url: str | None = None,
    ) -> CalendarEvent:
        event = CalendarEvent(
            title=title,
            description=description,
            event_type=event_type.value,
            start_datetime=start,
            end_datetime=end,
            organizer_id=organizer_id,
            participants=list(dict.fromkeys(participants)),
            location=location,
            meeting_url=meeting_url,
            status=CalendarEventStatus.SCHEDULED.value,
        )
        self.session.add(event)
        return event

    async def create_event(
        self, user: CurrentUser, data: CalendarEventCreate
    ) -> CalendarEvent:
        """Create an event organized by the caller.

        Students may only add events that involve nobody but themselves.
        """
        others = [p for p in data.participants if p != user.id]
        if user.role == Role.STUDENT and others:
            raise PermissionDeniedError("Students cannot add events for other users")

        event = self.add_event(
            title=data.title,
            event_type=data.event_type,
            start=data.start_datetime,
            end=data.end_datetime,
            organizer_id=user.id,
            participants=[user.id, *data.participants],
            description=data.description,
            location=data.location,
            meeting_url=data.meeting_url,
        )
        await self.session.commit()
        logger.info(f"Calendar event {event.id} ({data.event_type.value}) created by {user.id}")
        return event

    async def list_events(
        self, user_id: int, start: datetime, end: datetime
    ) -> list[CalendarEvent]:
        return [e for _, e in await self.events_overlapping([user_id], start, end)]
