import copy
import pytest
from regsim.data_loader import DEFAULT_CONFIG
from regsim.model import Section, Slot, Student, LECTURE, STANDARD_CLASSROOM

@pytest.fixture
def config():
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg['n_total_students'] = 60
    cfg['n_thesis_seniors'] = 5
    return cfg

@pytest.fixture
def make_slot():
    def _make(days, start, end, room_id="F-Standard Classroom-1", room_type=STANDARD_CLASSROOM, building="F"):
        return Slot(room_id, room_type, building, days, start, end)
    return _make

@pytest.fixture
def make_section():
    def _make(section_id, cap=30, component=LECTURE, department="MATH", level=105, slot=None):
        return Section(
            section_id=section_id,
            course_code=section_id.rsplit('-', 1)[0],
            department=department,
            course_level=level,
            component=component,
            enrollment_cap=cap,
            slot=slot
        )
    return _make

@pytest.fixture
def make_student():
    def _make(student_id, class_year="Junior", major="MATH", is_thesis=False):
        return Student(student_id=student_id, class_year=class_year, major=major, persona="Well-Rounded",
                       is_thesis=is_thesis)
    return _make
