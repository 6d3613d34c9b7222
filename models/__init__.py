from models.meeting_time import MeetingTime
from models.section import ClassStatus, Section
from models.course import Course, block_out_course
from models.schedule import Schedule, ScheduleRecord, MalformedScheduleError
from models.catalog import Catalog

__all__ = [
    "MeetingTime",
    "ClassStatus",
    "Section",
    "Course",
    "block_out_course",
    "Schedule",
    "ScheduleRecord",
    "MalformedScheduleError",
    "Catalog",
]
