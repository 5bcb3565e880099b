"""Seed a small sample campus for the timetable scheduler.

Run:
  PYTHONPATH=backend python scripts/seed_sample_data.py
"""

from __future__ import annotations

import os

from sqlalchemy import func, select

from app.core.security import get_password_hash
from app.db.bootstrap import ensure_runtime_schema
from app.db.session import SessionLocal
from app.models.department import Department
from app.models.room import Room, RoomType
from app.models.section import Section
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.user import User, UserRole

DEFAULT_PASSWORD = os.getenv("SEED_DEFAULT_PASSWORD", "Scheduler123!")
RESET_PASSWORDS = os.getenv("SEED_RESET_PASSWORDS", "true").strip().lower() in {"1", "true", "yes", "on"}

DEPARTMENTS = [
    ("Computer Science", "CS"),
    ("Mathematics", "MATH"),
    ("Physics", "PHY"),
]

# (name, email, department code, max hours per week)
TEACHERS = [
    ("Dr. Sarah Johnson", "sarah.johnson@university.edu", "CS", 20),
    ("Prof. Michael Chen", "michael.chen@university.edu", "CS", 18),
    ("Dr. Emily Rodriguez", "emily.rodriguez@university.edu", "MATH", 20),
    ("Prof. David Kim", "david.kim@university.edu", "PHY", 16),
    ("Dr. Amanda Williams", "amanda.williams@university.edu", "CS", 22),
]

# (code, name, department code, hours per week, requires lab, teacher email)
SUBJECTS = [
    ("CS201", "Data Structures", "CS", 3, True, "sarah.johnson@university.edu"),
    ("CS301", "Algorithms", "CS", 4, False, "michael.chen@university.edu"),
    ("CS302", "Database Systems", "CS", 3, True, "amanda.williams@university.edu"),
    ("MATH201", "Linear Algebra", "MATH", 3, False, "emily.rodriguez@university.edu"),
    ("MATH202", "Calculus II", "MATH", 4, False, "emily.rodriguez@university.edu"),
    ("PHY301", "Quantum Mechanics", "PHY", 3, True, "david.kim@university.edu"),
]

# (name, type, capacity, department code)
ROOMS = [
    ("Room 101", RoomType.classroom, 40, "CS"),
    ("Room 102", RoomType.classroom, 35, "CS"),
    ("Lab A1", RoomType.lab, 30, "CS"),
    ("Lab A2", RoomType.lab, 25, "CS"),
    ("Room 201", RoomType.classroom, 45, "MATH"),
    ("Physics Lab", RoomType.lab, 28, "PHY"),
    ("Auditorium", RoomType.auditorium, 150, None),
]

# (name, department code, semester, student count)
SECTIONS = [
    ("CS-A", "CS", 3, 35),
    ("CS-B", "CS", 3, 32),
    ("MATH-A", "MATH", 2, 40),
    ("PHY-A", "PHY", 5, 28),
]

ADMIN_PROFILE = {
    "name": "Timetable Admin",
    "email": "admin@university.edu",
    "role": UserRole.admin,
}

SCHEDULER_PROFILE = {
    "name": "Timetable Scheduler",
    "email": "scheduler@university.edu",
    "role": UserRole.scheduler,
}


def normalize_email(value: str) -> str:
    return value.strip().lower()


def upsert_user(session, *, name: str, email: str, role: UserRole, section_id: str | None = None) -> User:
    normalized_email = normalize_email(email)
    existing = session.execute(
        select(User).where(func.lower(User.email) == normalized_email)
    ).scalar_one_or_none()

    hashed_password = get_password_hash(DEFAULT_PASSWORD)
    if existing is None:
        existing = User(
            name=name,
            email=normalized_email,
            hashed_password=hashed_password,
            role=role,
            section_id=section_id if role == UserRole.student else None,
            is_active=True,
        )
        session.add(existing)
    else:
        existing.name = name
        existing.role = role
        existing.section_id = section_id if role == UserRole.student else None
        existing.is_active = True
        if RESET_PASSWORDS:
            existing.hashed_password = hashed_password
    session.flush()
    return existing


def upsert_departments(session) -> dict[str, Department]:
    by_code: dict[str, Department] = {}
    for name, code in DEPARTMENTS:
        department = session.execute(select(Department).where(Department.code == code)).scalar_one_or_none()
        if department is None:
            department = Department(name=name, code=code)
            session.add(department)
        else:
            department.name = name
        by_code[code] = department
    session.flush()
    return by_code


def upsert_teachers(session, departments: dict[str, Department]) -> dict[str, Teacher]:
    by_email: dict[str, Teacher] = {}
    for name, email, department_code, max_hours in TEACHERS:
        teacher = session.execute(select(Teacher).where(Teacher.email == email)).scalar_one_or_none()
        if teacher is None:
            teacher = Teacher(email=email, availability=[])
            session.add(teacher)
        teacher.name = name
        teacher.department_id = departments[department_code].id
        teacher.max_hours_per_week = max_hours
        by_email[email] = teacher
    session.flush()
    return by_email


def upsert_subjects(
    session,
    departments: dict[str, Department],
    teachers: dict[str, Teacher],
) -> dict[str, list[str]]:
    ids_by_department: dict[str, list[str]] = {code: [] for _, code in DEPARTMENTS}
    for code, name, department_code, hours, requires_lab, teacher_email in SUBJECTS:
        subject = session.execute(select(Subject).where(Subject.code == code)).scalar_one_or_none()
        if subject is None:
            subject = Subject(code=code)
            session.add(subject)
        subject.name = name
        subject.department_id = departments[department_code].id
        subject.hours_per_week = hours
        subject.requires_lab = requires_lab
        subject.assigned_teacher_id = teachers[teacher_email].id
        session.flush()
        ids_by_department[department_code].append(subject.id)
    return ids_by_department


def upsert_rooms(session, departments: dict[str, Department]) -> None:
    for name, room_type, capacity, department_code in ROOMS:
        room = session.execute(select(Room).where(Room.name == name)).scalar_one_or_none()
        if room is None:
            room = Room(name=name)
            session.add(room)
        room.type = room_type
        room.capacity = capacity
        room.department_id = departments[department_code].id if department_code else None
    session.flush()


def upsert_sections(
    session,
    departments: dict[str, Department],
    subject_ids: dict[str, list[str]],
) -> dict[str, Section]:
    by_name: dict[str, Section] = {}
    for name, department_code, semester, student_count in SECTIONS:
        department_id = departments[department_code].id
        section = session.execute(
            select(Section).where(Section.department_id == department_id, Section.name == name)
        ).scalar_one_or_none()
        if section is None:
            section = Section(name=name, department_id=department_id)
            session.add(section)
        section.semester = semester
        section.student_count = student_count
        section.subject_ids = list(subject_ids[department_code])
        by_name[name] = section
    session.flush()
    return by_name


def seed_users(session, sections: dict[str, Section]) -> None:
    upsert_user(session, **ADMIN_PROFILE)
    upsert_user(session, **SCHEDULER_PROFILE)
    for name, section in sections.items():
        slug = name.lower().replace("-", "")
        upsert_user(
            session,
            name=f"Student {name}",
            email=f"student.{slug}@university.edu",
            role=UserRole.student,
            section_id=section.id,
        )


def count_rows(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def main() -> None:
    ensure_runtime_schema()
    with SessionLocal() as session:
        departments = upsert_departments(session)
        teachers = upsert_teachers(session, departments)
        subject_ids = upsert_subjects(session, departments, teachers)
        upsert_rooms(session, departments)
        sections = upsert_sections(session, departments, subject_ids)
        seed_users(session, sections)

        session.commit()

        counts = {
            "departments": count_rows(session, Department),
            "teachers": count_rows(session, Teacher),
            "subjects": count_rows(session, Subject),
            "rooms": count_rows(session, Room),
            "sections": count_rows(session, Section),
            "users": count_rows(session, User),
        }

    print("Sample data seeded successfully.")
    print("")
    for label, count in counts.items():
        print(f"{label.capitalize()}: {count}")
    print("")
    print("Login credentials for seeded users (all use same password):")
    print(f"  Password:  {DEFAULT_PASSWORD}")
    print(f"  Admin:     {ADMIN_PROFILE['email']}")
    print(f"  Scheduler: {SCHEDULER_PROFILE['email']}")


if __name__ == "__main__":
    main()
