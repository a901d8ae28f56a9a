from dataclasses import dataclass, field
from typing import List, Optional
from .errors import ShortfallReport

# Component types
LECTURE = "Lecture"
LAB = "Lab"
STUDIO = "Studio"
INDEPENDENT_STUDY = "Independent Study"
COMPONENTS = (LECTURE, LAB, STUDIO, INDEPENDENT_STUDY)

# Room types
LAB_ROOM = "Lab"
STANDARD_CLASSROOM = "Standard Classroom"
LARGE_LECTURE_HALL = "Large Lecture Hall"
SEMINAR_ROOM = "Seminar Room"
BLACK_BOX = "Black Box"
DANCE_STUDIO = "Dance Studio"

# Class years, highest registration priority first
SENIOR = "Senior"
JUNIOR = "Junior"
SOPHOMORE = "Sophomore"
FIRST_YEAR = "FirstYear"
REGISTRATION_PRIORITY = (SENIOR, JUNIOR, SOPHOMORE, FIRST_YEAR)

UNDECLARED = "Undeclared"
NOT_APPLICABLE = "N/A"

@dataclass(frozen=True)
class Slot:
    room_id: str
    room_type: str
    building_code: str
    days: str  # day-pattern, e.g. "MWF", "TTh"
    start_time: str  # "HH:MM"
    end_time: str

@dataclass
class Section:
    section_id: str
    course_code: str
    department: str
    course_level: int
    component: str
    enrollment_cap: Optional[int]  # None = uncapped (Independent Study)
    slot: Optional[Slot] = None

    @property
    def is_independent_study(self) -> bool:
        return self.component == INDEPENDENT_STUDY

    @property
    def is_scheduled(self) -> bool:
        return self.slot is not None

@dataclass(frozen=True)
class ConflictInterval:
    section_id: str
    day: str
    start: int  # minutes since midnight
    end: int

@dataclass
class MasterCourse:
    course_code: str
    department: str
    course_level: int
    course_title: str = ""

@dataclass
class Student:
    student_id: int
    class_year: str
    major: str
    persona: str
    is_thesis: bool = False
    gender: str = ""
    is_athlete: bool = False

@dataclass(frozen=True)
class Enrollment:
    student_id: int
    section_id: str
    enrollment_pass: str = "primary"  # primary | backfill | thesis | thesis_fallback

@dataclass
class SimulationResult:
    sections: List[Section]  # master schedule order
    students: List[Student]
    enrollments: List[Enrollment]
    report: ShortfallReport
    conflicts: List[str] = field(default_factory=list)
