from collections import Counter, defaultdict
from typing import Dict, List, Optional
from .model import Section, Student, Enrollment
from .conflicts import ConflictIndex, check_overlap, slots_collide

class ScheduleAuditor:
    """
    Re-checks a finished run (or artifacts read back from disk) against the
    hard rules: rooms are never double-booked, no section is over its cap,
    no student is in two places at once and every thesis student has a thesis.
    """

    def __init__(self, sections: List[Section], index: Optional[ConflictIndex] = None, config: Optional[dict] = None):
        self.sections = {s.section_id: s for s in sections}
        self.index = index if index is not None else ConflictIndex(sections)
        self.config = config or {}

    def room_conflicts(self) -> List[str]:
        conflicts = []
        by_room: Dict[str, List[Section]] = defaultdict(list)
        for section in self.sections.values():
            if section.slot is not None:
                by_room[section.slot.room_id].append(section)

        for room_id, sections in by_room.items():
            for i, a in enumerate(sections):
                for b in sections[i + 1:]:
                    if slots_collide(a.slot, b.slot):
                        conflicts.append(f"ROOM CONFLICT: {room_id} hosts {a.section_id} and {b.section_id} at overlapping times")
        return conflicts

    def seat_conflicts(self, enrollments: List[Enrollment]) -> List[str]:
        conflicts = []
        counts = Counter(e.section_id for e in enrollments)
        for section_id, taken in counts.items():
            section = self.sections.get(section_id)
            if section is None:
                conflicts.append(f"UNKNOWN SECTION: {taken} enrollments in {section_id}, which is not in the schedule")
                continue
            if section.is_independent_study or section.enrollment_cap is None:
                continue
            if taken > section.enrollment_cap:
                conflicts.append(f"CAPACITY CONFLICT: {section_id} has {taken} students for {section.enrollment_cap} seats")
        return conflicts

    def student_conflicts(self, enrollments: List[Enrollment]) -> List[str]:
        conflicts = []
        by_student: Dict[int, List[str]] = defaultdict(list)
        for e in enrollments:
            by_student[e.student_id].append(e.section_id)

        for student_id, section_ids in by_student.items():
            intervals = self.index.schedule_for(section_ids)
            for i, a in enumerate(intervals):
                for b in intervals[i + 1:]:
                    if a.day == b.day and check_overlap(a.start, a.end, b.start, b.end):
                        conflicts.append(f"STUDENT CONFLICT: student {student_id} has {a.section_id} and {b.section_id} on {a.day}")
        return conflicts

    def thesis_gaps(self, students: List[Student], enrollments: List[Enrollment]) -> List[str]:
        level = self.config.get('thesis_course_level', 457)
        has_thesis = set()
        for e in enrollments:
            section = self.sections.get(e.section_id)
            if section is not None and section.is_independent_study and section.course_level == level:
                has_thesis.add(e.student_id)
        return [
            f"THESIS GAP: thesis student {s.student_id} has no thesis enrollment"
            for s in students if s.is_thesis and s.student_id not in has_thesis
        ]

    def get_conflicts(self, students: Optional[List[Student]], enrollments: List[Enrollment]) -> List[str]:
        conflicts = self.room_conflicts()
        conflicts += self.seat_conflicts(enrollments)
        conflicts += self.student_conflicts(enrollments)
        if students is not None:
            conflicts += self.thesis_gaps(students, enrollments)
        # Remove duplicates, keep order
        return list(dict.fromkeys(conflicts))
