"""Schemas for certificates and employability records."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class CertificateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    certificate_id: str
    application_id: int
    student_id: int
    certificate_type: str
    certificate_url: str
    qr_code_url: str
    verification_url: str
    issued_at: datetime


class CertificateVerification(BaseModel):
    valid: bool
    certificate_id: str
    certificate_data: dict[str, Any] | None = None
    verification_date: datetime


class EmployabilityRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: int
    internships_completed: int
    total_duration_weeks: int
    average_rating: float
    skills_acquired: list[str]
    certifications: list[str]
    placement_ready_score: int
    updated_at: datetime


class ReadinessReport(BaseModel):
    student_id: int
    overall_score: int
    readiness_level: Literal["BEGINNER", "INTERMEDIATE", "ADVANCED", "PLACEMENT_READY"]
    strengths: list[str]
    areas_for_improvement: list[str]
    completion_percentage: int
