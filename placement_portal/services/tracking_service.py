"""Tracking step ledger for applications."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.exceptions import NotFoundError
from placement_portal.core.storage import utc_now
from placement_portal.models.application import TrackingStep
from placement_portal.models.enums import TrackingStepStatus
from placement_portal.schemas.application import (
    ResumeViewStatus,
    TrackingProgress,
    TrackingStepResponse,
)

logger = logging.getLogger(__name__)

STEP_SUBMITTED = "Application Submitted"
STEP_RESUME_REVIEW = "Resume Review"
STEP_DOCUMENT_VERIFICATION = "Document Verification"
STEP_MENTOR_REVIEW = "Mentor Review"
STEP_EMPLOYER_REVIEW = "Employer Review"
STEP_INTERVIEW_SCHEDULING = "Interview Scheduling"
STEP_INTERVIEW_PROCESS = "Interview Process"
STEP_FEEDBACK_COLLECTION = "Feedback Collection"
STEP_FINAL_DECISION = "Final Decision"
STEP_OFFER_PROCESSING = "Offer Processing"

DEFAULT_TRACKING_STEPS: tuple[str, ...] = (
    STEP_SUBMITTED,
    STEP_RESUME_REVIEW,
    STEP_DOCUMENT_VERIFICATION,
    STEP_MENTOR_REVIEW,
    STEP_EMPLOYER_REVIEW,
    STEP_INTERVIEW_SCHEDULING,
    STEP_INTERVIEW_PROCESS,
    STEP_FEEDBACK_COLLECTION,
    STEP_FINAL_DECISION,
    STEP_OFFER_PROCESSING,
)

RESUME_VIEWED_NOTE = "Resume viewed by employer"


class TrackingService:
    """Seeds and updates the named milestones of an application.

    Steps are addressed by name and updated independently; no ordering between
    steps is enforced. This service never commits: callers own the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def seed_steps(
        self, application_id: int, actor_id: int | None = None
    ) -> list[TrackingStep]:
        """Add the default steps, with only the first one completed."""
        now = utc_now()
        steps = []
        for position, name in enumerate(DEFAULT_TRACKING_STEPS):
            first = position == 0
            steps.append(
                TrackingStep(
                    application_id=application_id,
                    step=name,
                    position=position,
                    status=(
                        TrackingStepStatus.COMPLETED.value
                        if first
                        else TrackingStepStatus.PENDING.value
                    ),
                    completed_at=now if first else None,
                    actor_id=actor_id if first else None,
                    created_at=now,
                )
            )
        self.session.add_all(steps)
        return steps

    async def get_steps(self, application_id: int) -> list[TrackingStep]:
        result = await self.session.execute(
            select(TrackingStep)
            .where(TrackingStep.application_id == application_id)
            .order_by(TrackingStep.position, TrackingStep.id)
        )
        return list(result.scalars().all())

    async def find_step(self, application_id: int, name: str) -> TrackingStep | None:
        result = await self.session.execute(
            select(TrackingStep).where(
                TrackingStep.application_id == application_id,
                TrackingStep.step == name,
            )
        )
        return result.scalars().first()

    @staticmethod
    def apply_update(
        step: TrackingStep,
        status: TrackingStepStatus,
        notes: str | None = None,
        actor_id: int | None = None,
    ) -> TrackingStep:
        """Set the status; completed_at is stamped iff the step is completed."""
        step.status = status.value
        step.completed_at = utc_now() if status == TrackingStepStatus.COMPLETED else None
        if notes is not None:
            step.notes = notes
        if actor_id is not None:
            step.actor_id = actor_id
        return step

    async def update_step(
        self,
        application_id: int,
        name: str,
        status: TrackingStepStatus,
        notes: str | None = None,
        actor_id: int | None = None,
    ) -> TrackingStep:
        step = await self.find_step(application_id, name)
        if step is None:
            raise NotFoundError("Tracking step", f"'{name}' of application {application_id}")
        self.apply_update(step, status, notes=notes, actor_id=actor_id)
        logger.debug(
            f"Tracking step '{name}' of application {application_id} set to {status.value}"
        )
        return step

    async def update_step_by_id(
        self,
        application_id: int,
        step_id: int,
        status: TrackingStepStatus,
        notes: str | None = None,
        actor_id: int | None = None,
    ) -> TrackingStep:
        step = await self.session.get(TrackingStep, step_id)
        if step is None or step.application_id != application_id:
            raise NotFoundError("Tracking step", step_id)
        return self.apply_update(step, status, notes=notes, actor_id=actor_id)

    async def get_progress(self, application_id: int) -> TrackingProgress:
        steps = await self.get_steps(application_id)
        completed = [s for s in steps if s.status == TrackingStepStatus.COMPLETED.value]
        current = next(
            (
                s.step
                for s in steps
                if s.status
                not in (TrackingStepStatus.COMPLETED.value, TrackingStepStatus.SKIPPED.value)
            ),
            None,
        )
        total = len(steps)
        return TrackingProgress(
            application_id=application_id,
            steps=[TrackingStepResponse.model_validate(s) for s in steps],
            completed_steps=len(completed),
            total_steps=total,
            progress_percentage=round(len(completed) / total * 100) if total else 0,
            current_step=current,
        )

    async def mark_resume_viewed(self, application_id: int, employer_id: int) -> TrackingStep:
        return await self.update_step(
            application_id,
            STEP_RESUME_REVIEW,
            TrackingStepStatus.COMPLETED,
            notes=RESUME_VIEWED_NOTE,
            actor_id=employer_id,
        )

    async def resume_view_status(self, application_id: int) -> ResumeViewStatus:
        step = await self.find_step(application_id, STEP_RESUME_REVIEW)
        viewed = step is not None and step.status == TrackingStepStatus.COMPLETED.value
        return ResumeViewStatus(
            application_id=application_id,
            viewed=viewed,
            viewed_at=step.completed_at if viewed else None,
            viewed_by=step.actor_id if viewed else None,
        )

    async def record_feedback(
        self, application_id: int, supervisor_id: int, notes: str | None = None
    ) -> TrackingStep:
        return await self.update_step(
            application_id,
            STEP_FEEDBACK_COLLECTION,
            TrackingStepStatus.COMPLETED,
            notes=notes or "Supervisor feedback received",
            actor_id=supervisor_id,
        )

    async def skip_open_steps(
        self, application_id: int, notes: str, actor_id: int | None = None
    ) -> list[TrackingStep]:
        """Mark every step that is not finished as SKIPPED."""
        open_statuses = (
            TrackingStepStatus.PENDING.value,
            TrackingStepStatus.IN_PROGRESS.value,
        )
        skipped = [
            s for s in await self.get_steps(application_id) if s.status in open_statuses
        ]
        for step in skipped:
            self.apply_update(step, TrackingStepStatus.SKIPPED, notes=notes, actor_id=actor_id)
        logger.debug(f"Skipped {len(skipped)} open step(s) of application {application_id}")
        return skipped
