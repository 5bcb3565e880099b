from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.department import Department  # noqa: F401
from app.models.room import Room, RoomType  # noqa: F401
from app.models.scheduling import BreakTime, SchedulingPreferences  # noqa: F401
from app.models.section import Section  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.timetable import GeneratedTimetableRecord  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
