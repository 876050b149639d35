"""Initial placement portal schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OPEN_APPLICATION = sa.text(
    "status NOT IN ('COMPLETED', 'MENTOR_REJECTED', 'NOT_OFFERED', 'OFFER_REJECTED', 'WITHDRAWN')"
)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('department', sa.String(length=255), nullable=True),
        sa.Column('current_semester', sa.Integer(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=True),
        sa.Column('cgpa', sa.Float(), nullable=True),
        sa.Column('placement_status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_role', 'users', ['role'], unique=False)
    op.create_index('ix_users_department', 'users', ['department'], unique=False)
    op.create_index('ix_users_placement_status', 'users', ['placement_status'], unique=False)

    op.create_table(
        'internships',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('required_skills', sa.JSON(), nullable=False),
        sa.Column('eligible_departments', sa.JSON(), nullable=False),
        sa.Column('stipend_min', sa.Integer(), nullable=True),
        sa.Column('stipend_max', sa.Integer(), nullable=True),
        sa.Column('is_placement', sa.Boolean(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('duration_weeks', sa.Integer(), nullable=True),
        sa.Column('application_deadline', sa.DateTime(), nullable=True),
        sa.Column('posted_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_internships_company_name', 'internships', ['company_name'], unique=False)
    op.create_index('ix_internships_posted_by', 'internships', ['posted_by'], unique=False)
    op.create_index('ix_internships_is_active', 'internships', ['is_active'], unique=False)

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('internship_id', sa.Integer(), sa.ForeignKey('internships.id'), nullable=False),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('applied_at', sa.DateTime(), nullable=False),
        sa.Column('mentor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('mentor_approved_at', sa.DateTime(), nullable=True),
        sa.Column('interview_scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('offer_made_at', sa.DateTime(), nullable=True),
        sa.Column('offer_accepted_at', sa.DateTime(), nullable=True),
        sa.Column('completion_date', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_applications_student_id', 'applications', ['student_id'], unique=False)
    op.create_index('ix_applications_internship_id', 'applications', ['internship_id'], unique=False)
    op.create_index('ix_applications_status', 'applications', ['status'], unique=False)
    # At most one open application per student and internship
    op.create_index(
        'uq_applications_open_pair',
        'applications',
        ['student_id', 'internship_id'],
        unique=True,
        sqlite_where=OPEN_APPLICATION,
        postgresql_where=OPEN_APPLICATION,
    )

    op.create_table(
        'application_tracking',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('step', sa.String(length=100), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('actor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_application_tracking_application_id', 'application_tracking', ['application_id'], unique=False)

    op.create_table(
        'calendar_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_type', sa.String(length=20), nullable=False),
        sa.Column('start_datetime', sa.DateTime(), nullable=False),
        sa.Column('end_datetime', sa.DateTime(), nullable=False),
        sa.Column('organizer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('participants', sa.JSON(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('meeting_url', sa.String(length=500), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_calendar_events_start_datetime', 'calendar_events', ['start_datetime'], unique=False)
    op.create_index('ix_calendar_events_organizer_id', 'calendar_events', ['organizer_id'], unique=False)

    op.create_table(
        'interview_schedules',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('interviewer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('scheduled_datetime', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('mode', sa.String(length=20), nullable=False),
        sa.Column('meeting_link', sa.String(length=500), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('interview_type', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('rescheduled_from_id', sa.Integer(), sa.ForeignKey('interview_schedules.id'), nullable=True),
        sa.Column('calendar_event_id', sa.Integer(), sa.ForeignKey('calendar_events.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_interview_schedules_application_id', 'interview_schedules', ['application_id'], unique=False)
    op.create_index('ix_interview_schedules_interviewer_id', 'interview_schedules', ['interviewer_id'], unique=False)
    op.create_index('ix_interview_schedules_student_id', 'interview_schedules', ['student_id'], unique=False)

    op.create_table(
        'placement_offers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('position_title', sa.String(length=255), nullable=False),
        sa.Column('offer_type', sa.String(length=20), nullable=False),
        sa.Column('offer_details', sa.JSON(), nullable=False),
        sa.Column('offer_status', sa.String(length=20), nullable=False),
        sa.Column('offer_date', sa.DateTime(), nullable=False),
        sa.Column('response_deadline', sa.DateTime(), nullable=False),
        sa.Column('acceptance_date', sa.DateTime(), nullable=True),
        sa.Column('rejection_date', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('contract_signed', sa.Boolean(), nullable=False),
        sa.Column('contract_details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_placement_offers_application_id', 'placement_offers', ['application_id'], unique=False)
    op.create_index('ix_placement_offers_student_id', 'placement_offers', ['student_id'], unique=False)
    op.create_index('ix_placement_offers_offer_status', 'placement_offers', ['offer_status'], unique=False)

    op.create_table(
        'feedback',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('supervisor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('technical_skills_rating', sa.Integer(), nullable=True),
        sa.Column('communication_rating', sa.Integer(), nullable=True),
        sa.Column('professionalism_rating', sa.Integer(), nullable=True),
        sa.Column('recommendation_for_placement', sa.Boolean(), nullable=False),
        sa.Column('skills_gained', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_feedback_application_id', 'feedback', ['application_id'], unique=True)

    op.create_table(
        'chat_rooms',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('mentor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('application_id'),
    )
    op.create_index('ix_chat_rooms_student_id', 'chat_rooms', ['student_id'], unique=False)
    op.create_index('ix_chat_rooms_mentor_id', 'chat_rooms', ['mentor_id'], unique=False)

    op.create_table(
        'chat_messages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('chat_room_id', sa.Integer(), sa.ForeignKey('chat_rooms.id'), nullable=False),
        sa.Column('sender_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_chat_messages_chat_room_id', 'chat_messages', ['chat_room_id'], unique=False)
    op.create_index('ix_chat_messages_unread', 'chat_messages', ['chat_room_id', 'is_read'], unique=False)

    op.create_table(
        'certificates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('certificate_id', sa.String(length=64), nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('certificate_type', sa.String(length=20), nullable=False),
        sa.Column('certificate_data', sa.JSON(), nullable=False),
        sa.Column('certificate_url', sa.String(length=500), nullable=False),
        sa.Column('qr_code_url', sa.String(length=500), nullable=False),
        sa.Column('verification_url', sa.String(length=500), nullable=False),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_certificates_certificate_id', 'certificates', ['certificate_id'], unique=True)
    op.create_index('ix_certificates_application_id', 'certificates', ['application_id'], unique=False)
    op.create_index('ix_certificates_student_id', 'certificates', ['student_id'], unique=False)

    op.create_table(
        'employability_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('internships_completed', sa.Integer(), nullable=False),
        sa.Column('total_duration_weeks', sa.Integer(), nullable=False),
        sa.Column('average_rating', sa.Float(), nullable=False),
        sa.Column('skills_acquired', sa.JSON(), nullable=False),
        sa.Column('certifications', sa.JSON(), nullable=False),
        sa.Column('placement_ready_score', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id'),
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_user_unread', 'notifications', ['user_id', 'is_read'], unique=False)


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('employability_records')
    op.drop_table('certificates')
    op.drop_table('chat_messages')
    op.drop_table('chat_rooms')
    op.drop_table('feedback')
    op.drop_table('placement_offers')
    op.drop_table('interview_schedules')
    op.drop_table('calendar_events')
    op.drop_table('application_tracking')
    op.drop_table('applications')
    op.drop_table('internships')
    op.drop_table('users')
