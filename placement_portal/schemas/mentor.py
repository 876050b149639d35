"""Schemas for the mentor approval workqueue and its analytics."""

from datetime import datetime

from pydantic import BaseModel, Field

from placement_portal.models.enums import ApplicationStatus, ApprovalPriority


class WorkqueueItem(BaseModel):
    """One application waiting for the mentor's decision."""

    application_id: int
    student_id: int
    student_name: str
    internship_title: str
    company_name: str
    status: ApplicationStatus
    priority: ApprovalPriority
    applied_at: datetime
    application_deadline: datetime | None
    waiting_hours: int
    is_overdue: bool


class WorkqueueSummary(BaseModel):
    total_pending: int
    high_priority: int = Field(description="HIGH and URGENT requests")
    avg_waiting_time_hours: int


class MentorWorkqueue(BaseModel):
    pending_requests: list[WorkqueueItem]
    overdue_requests: list[WorkqueueItem]
    summary: WorkqueueSummary


class MentorPerformance(BaseModel):
    mentor_id: int
    mentor_name: str
    pending_requests: int
    requests_handled: int
    approval_rate: float = Field(ge=0, le=100)
    avg_response_time_hours: int


class MentorWorkflowAnalytics(BaseModel):
    """Mentor gate figures over applications submitted in the last 30 days."""

    total_requests: int
    decided_requests: int
    avg_approval_time_hours: int
    approval_rate: float = Field(ge=0, le=100)
    mentor_performance: list[MentorPerformance]
    generated_at: datetime
