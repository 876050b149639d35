"""Completion certificates and employability records."""

import logging
import math
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.config import settings
from placement_portal.core.storage import utc_now
from placement_portal.models.application import Application
from placement_portal.models.certificate import Certificate, EmployabilityRecord
from placement_portal.models.internship import Internship
from placement_portal.models.user import User
from placement_portal.schemas.certificate import CertificateVerification, ReadinessReport

logger = logging.getLogger(__name__)


@dataclass
class CompletionData:
    """Outcome of a finished internship."""

    performance_rating: int
    start_date: date
    end_date: date
    skills_demonstrated: list[str] = field(default_factory=list)
    supervisor_id: int | None = None
    supervisor_comments: str | None = None

    @property
    def duration_weeks(self) -> int:
        return calculate_duration_weeks(self.start_date, self.end_date)


def calculate_duration_weeks(start: date, end: date) -> int:
    return math.ceil((end - start).days / 7)


def generate_certificate_id() -> str:
    return f"CERT-{int(time.time() * 1000)}-{secrets.token_hex(3)}".upper()


def merge_skills(existing: list[str], new: list[str]) -> list[str]:
    """Case-insensitive union, keeping first-seen order."""
    merged: list[str] = []
    for skill in [*existing, *new]:
        normalized = skill.strip().lower()
        if normalized and normalized not in merged:
            merged.append(normalized)
    return merged


def running_average(current: float, count: int, new_value: float) -> float:
    if count <= 0:
        return float(new_value)
    return round((current * count + new_value) / (count + 1), 2)


def placement_readiness_score(
    internships_completed: int,
    average_rating: float,
    skills_count: int,
    total_duration_weeks: int,
) -> int:
    score = min(40, internships_completed * 20)
    score += (average_rating / 5) * 30
    score += min(20, skills_count * 2)
    score += min(10, total_duration_weeks / 4)
    return round(score)


def readiness_level(score: int) -> str:
    if score >= 80:
        return "PLACEMENT_READY"
    if score >= 60:
        return "ADVANCED"
    if score >= 40:
        return "INTERMEDIATE"
    return "BEGINNER"


class CertificateService(ABC):
    """Collaborator invoked whenever an application reaches COMPLETED."""

    @abstractmethod
    async def issue_certificate(
        self,
        application: Application,
        student: User,
        internship: Internship,
        completion: CompletionData,
    ) -> Certificate:
        """Generate a completion certificate.

        Args:
            application: The application being completed
            student: The student receiving the certificate
            internship: The completed internship
            completion: Ratings, dates and skills of the internship

        Returns:
            The issued certificate
        """
        pass

    @abstractmethod
    async def update_employability_record(
        self, student_id: int, completion: CompletionData, certificate_id: str
    ) -> EmployabilityRecord:
        """Fold a completed internship into the student's employability record.

        Args:
            student_id: Student whose record is updated
            completion: Ratings, dates and skills of the internship
            certificate_id: Identifier of the certificate just issued

        Returns:
            The updated record
        """
        pass

    @abstractmethod
    async def verify_certificate(self, certificate_id: str) -> CertificateVerification:
        pass

    @abstractmethod
    async def get_employability_record(
        self, student_id: int
    ) -> EmployabilityRecord | None:
        pass

    async def readiness_report(self, student_id: int) -> ReadinessReport:
        """Summarize how ready a student is for placement."""
        record = await self.get_employability_record(student_id)
        if record is None:
            return ReadinessReport(
                student_id=student_id,
                overall_score=0,
                readiness_level="BEGINNER",
                strengths=[],
                areas_for_improvement=[
                    "Complete at least one internship",
                    "Update profile with skills",
                ],
                completion_percentage=0,
            )

        strengths = []
        improvements = []
        skills = record.skills_acquired or []
        if record.internships_completed >= 2:
            strengths.append("Multiple internship experience")
        else:
            improvements.append("Gain more internship experience")
        if record.average_rating >= 4:
            strengths.append("Excellent performance record")
        elif record.average_rating < 3.5:
            improvements.append("Improve performance ratings")
        if len(skills) >= 8:
            strengths.append("Diverse skill set")
        elif len(skills) < 5:
            improvements.append("Develop more technical skills")
        if record.total_duration_weeks >= 20:
            strengths.append("Substantial work experience")

        return ReadinessReport(
            student_id=student_id,
            overall_score=record.placement_ready_score,
            readiness_level=readiness_level(record.placement_ready_score),
            strengths=strengths,
            areas_for_improvement=improvements,
            completion_percentage=min(100, record.internships_completed * 50),
        )


class DatabaseCertificateService(CertificateService):
    """Persists certificates and records in the caller's session."""

    def __init__(self, session: AsyncSession, base_url: str | None = None):
        self.session = session
        self.base_url = (base_url or settings.certificate_base_url).rstrip("/")

    async def issue_certificate(
        self,
        application: Application,
        student: User,
        internship: Internship,
        completion: CompletionData,
    ) -> Certificate:
        certificate_id = generate_certificate_id()
        certificate = Certificate(
            certificate_id=certificate_id,
            application_id=application.id,
            student_id=student.id,
            certificate_type="PLACEMENT" if internship.is_placement else "INTERNSHIP",
            certificate_data={
                "student_name": student.name,
                "student_id": student.id,
                "internship_title": internship.title,
                "company_name": internship.company_name,
                "supervisor_id": completion.supervisor_id,
                "start_date": completion.start_date.isoformat(),
                "end_date": completion.end_date.isoformat(),
                "duration_weeks": completion.duration_weeks,
                "performance_rating": completion.performance_rating,
                "skills_demonstrated": completion.skills_demonstrated,
                "completion_date": utc_now().date().isoformat(),
            },
            certificate_url=f"/certificates/{certificate_id}.pdf",
            qr_code_url=f"/qr-codes/{certificate_id}.png",
            verification_url=f"{self.base_url}/verify-certificate/{certificate_id}",
        )
        self.session.add(certificate)
        logger.info(
            f"Issued certificate {certificate_id} for application {application.id}"
        )
        return certificate

    async def get_employability_record(
        self, student_id: int
    ) -> EmployabilityRecord | None:
        result = await self.session.execute(
            select(EmployabilityRecord).where(
                EmployabilityRecord.student_id == student_id
            )
        )
        return result.scalars().first()

    async def update_employability_record(
        self, student_id: int, completion: CompletionData, certificate_id: str
    ) -> EmployabilityRecord:
        record = await self.get_employability_record(student_id)
        if record is None:
            record = EmployabilityRecord(
                student_id=student_id,
                internships_completed=0,
                total_duration_weeks=0,
                average_rating=0.0,
                skills_acquired=[],
                certifications=[],
                placement_ready_score=0,
            )
            self.session.add(record)

        record.average_rating = running_average(
            record.average_rating,
            record.internships_completed,
            completion.performance_rating,
        )
        record.internships_completed += 1
        record.total_duration_weeks += completion.duration_weeks
        # JSON columns are only persisted when reassigned
        record.skills_acquired = merge_skills(
            record.skills_acquired or [], completion.skills_demonstrated
        )
        record.certifications = [*(record.certifications or []), certificate_id]
        record.placement_ready_score = placement_readiness_score(
            record.internships_completed,
            record.average_rating,
            len(record.skills_acquired),
            record.total_duration_weeks,
        )
        logger.info(
            f"Employability record of student {student_id} updated, "
            f"score {record.placement_ready_score}"
        )
        return record

    async def verify_certificate(self, certificate_id: str) -> CertificateVerification:
        result = await self.session.execute(
            select(Certificate).where(Certificate.certificate_id == certificate_id)
        )
        certificate = result.scalars().first()
        return CertificateVerification(
            valid=certificate is not None,
            certificate_id=certificate_id,
            certificate_data=certificate.certificate_data if certificate else None,
            verification_date=utc_now(),
        )
