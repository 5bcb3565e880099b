"""initial timetable scheduler schema

Revision ID: 20260301_0001
Revises: None
Create Date: 2026-03-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20260301_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("admin", "scheduler", "student", name="user_role")
room_type_enum = sa.Enum("classroom", "lab", "auditorium", name="room_type")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("code", sa.String(length=20), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("max_hours_per_week", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("availability", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_teachers_email", "teachers", ["email"], unique=True)
    op.create_index("ix_teachers_department_id", "teachers", ["department_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("hours_per_week", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("requires_lab", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("assigned_teacher_id", sa.String(length=36), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)
    op.create_index("ix_subjects_department_id", "subjects", ["department_id"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", room_type_enum, nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("department_id", sa.String(length=36), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_rooms_name", "rooms", ["name"], unique=True)

    op.create_table(
        "sections",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("student_count", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("subject_ids", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("department_id", "name", name="uq_sections_department_name"),
    )
    op.create_index("ix_sections_department_id", "sections", ["department_id"])

    op.create_table(
        "break_times",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("day", sa.String(length=20), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "scheduling_preferences",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("min_gap_between_classes", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("max_consecutive_hours", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("lunch_break_required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("lunch_break_start", sa.String(length=5), nullable=False, server_default="13:00"),
        sa.Column("lunch_break_end", sa.String(length=5), nullable=False, server_default="14:00"),
        sa.Column("avoid_back_to_back_same_subject", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("preferred_start_time", sa.String(length=5), nullable=False, server_default="09:00"),
        sa.Column("preferred_end_time", sa.String(length=5), nullable=False, server_default="17:00"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "generated_timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False, server_default=""),
        sa.Column("entries", sa.JSON(), nullable=False),
        sa.Column("constraints", sa.JSON(), nullable=False),
        sa.Column("conflicts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("generated_by_id", sa.String(length=36), nullable=True),
    )
    op.create_index("ix_generated_timetables_generated_at", "generated_timetables", ["generated_at"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("section_id", sa.String(length=36), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column("summary", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_activity_logs_actor_id", "activity_logs", ["actor_id"])
    op.create_index("ix_activity_logs_entity_type", "activity_logs", ["entity_type"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_created_at", table_name="activity_logs")
    op.drop_index("ix_activity_logs_entity_type", table_name="activity_logs")
    op.drop_index("ix_activity_logs_actor_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_generated_timetables_generated_at", table_name="generated_timetables")
    op.drop_table("generated_timetables")
    op.drop_table("scheduling_preferences")
    op.drop_table("break_times")
    op.drop_index("ix_sections_department_id", table_name="sections")
    op.drop_table("sections")
    op.drop_index("ix_rooms_name", table_name="rooms")
    op.drop_table("rooms")
    op.drop_index("ix_subjects_department_id", table_name="subjects")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_teachers_department_id", table_name="teachers")
    op.drop_index("ix_teachers_email", table_name="teachers")
    op.drop_table("teachers")
    op.drop_index("ix_departments_code", table_name="departments")
    op.drop_table("departments")
    room_type_enum.drop(op.get_bind(), checkfirst=True)
    user_role_enum.drop(op.get_bind(), checkfirst=True)
