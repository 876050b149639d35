"""Demo data, loaded explicitly at startup when enabled."""

import logging
from datetime import timedelta

from sqlalchemy import func, select

from placement_portal.core.auth import hash_password
from placement_portal.core.storage import Database, utc_now
from placement_portal.models.calendar import CalendarEvent
from placement_portal.models.enums import CalendarEventType, PlacementStatus, Role
from placement_portal.models.internship import Internship
from placement_portal.models.user import User

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {
        "username": "staff",
        "email": "staff@university.edu",
        "name": "Placement Office",
        "role": Role.STAFF,
        "department": None,
    },
    {
        "username": "mentor.cse",
        "email": "mentor.cse@university.edu",
        "name": "Dr. Asha Rao",
        "role": Role.MENTOR,
        "department": "Computer Science",
    },
    {
        "username": "mentor.ece",
        "email": "mentor.ece@university.edu",
        "name": "Dr. Vikram Iyer",
        "role": Role.MENTOR,
        "department": "Electronics",
    },
    {
        "username": "employer.techcorp",
        "email": "hr@techcorp.example",
        "name": "TechCorp Recruiting",
        "role": Role.EMPLOYER,
        "department": None,
    },
    {
        "username": "student.cse",
        "email": "priya@university.edu",
        "name": "Priya Sharma",
        "role": Role.STUDENT,
        "department": "Computer Science",
        "current_semester": 6,
        "skills": ["Python", "React", "SQL"],
        "cgpa": 8.4,
    },
    {
        "username": "student.ece",
        "email": "arjun@university.edu",
        "name": "Arjun Mehta",
        "role": Role.STUDENT,
        "department": "Electronics",
        "current_semester": 7,
        "skills": ["Embedded C", "MATLAB"],
        "cgpa": 7.9,
    },
]

DEMO_INTERNSHIPS = [
    {
        "title": "Backend Engineering Intern",
        "description": "Build REST services and data pipelines.",
        "company_name": "TechCorp",
        "required_skills": ["Python", "SQL", "Docker"],
        "eligible_departments": ["Computer Science"],
        "stipend_min": 15000,
        "stipend_max": 25000,
        "is_placement": False,
        "location": "Bangalore",
        "duration_weeks": 12,
    },
    {
        "title": "Frontend Developer",
        "description": "Full-time role building React applications.",
        "company_name": "TechCorp",
        "required_skills": ["React", "TypeScript", "CSS"],
        "eligible_departments": ["Computer Science", "Electronics"],
        "stipend_min": 600000,
        "stipend_max": 900000,
        "is_placement": True,
        "location": "Remote",
        "duration_weeks": None,
    },
    {
        "title": "Hardware Validation Intern",
        "description": "Test firmware and board bring-up procedures.",
        "company_name": "TechCorp",
        "required_skills": ["Embedded C", "MATLAB"],
        "eligible_departments": ["Electronics"],
        "stipend_min": 12000,
        "stipend_max": 18000,
        "is_placement": False,
        "location": "Pune",
        "duration_weeks": 8,
    },
]


async def seed_demo_data(database: Database) -> bool:
    """Insert demo users, postings and an exam; returns False if data exists."""
    async with database.session() as session:
        existing = await session.scalar(select(func.count(User.id)))
        if existing:
            logger.info("Database already populated; skipping demo seed")
            return False

        users = {}
        for entry in DEMO_USERS:
            user = User(
                username=entry["username"],
                email=entry["email"],
                password_hash=hash_password(DEMO_PASSWORD),
                name=entry["name"],
                role=entry["role"].value,
                department=entry["department"],
                current_semester=entry.get("current_semester"),
                skills=entry.get("skills"),
                cgpa=entry.get("cgpa"),
                placement_status=PlacementStatus.AVAILABLE.value,
            )
            session.add(user)
            users[entry["username"]] = user
        await session.flush()

        employer = users["employer.techcorp"]
        now = utc_now()
        for entry in DEMO_INTERNSHIPS:
            session.add(
                Internship(
                    **entry,
                    application_deadline=now + timedelta(days=30),
                    posted_by=employer.id,
                    is_active=True,
                )
            )

        exam_start = (now + timedelta(days=3)).replace(
            hour=10, minute=0, second=0, microsecond=0
        )
        session.add(
            CalendarEvent(
                title="Data Structures end-semester exam",
                event_type=CalendarEventType.EXAM.value,
                start_datetime=exam_start,
                end_datetime=exam_start + timedelta(hours=3),
                organizer_id=users["staff"].id,
                participants=[users["student.cse"].id],
            )
        )
        await session.commit()

    logger.info(
        f"Seeded {len(DEMO_USERS)} users and {len(DEMO_INTERNSHIPS)} internships"
    )
    return True
