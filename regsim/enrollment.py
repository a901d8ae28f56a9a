import random
from collections import defaultdict
from enum import Enum
from typing import Dict, List, Optional
from .model import Section, Student, Enrollment, ConflictInterval, REGISTRATION_PRIORITY
from .conflicts import ConflictIndex
from .errors import DataIntegrityError, EnrollmentShortfall, ThesisPlacementFallback, ShortfallReport

class StudentState(Enum):
    UNENROLLED = "Unenrolled"
    SHOPPING = "ShoppingPass1"
    COMPLETE = "Complete"
    NEEDS_BACKFILL = "NeedsBackfill"
    BACKFILL = "BackfillPass2"
    PARTIALLY_UNFILLED = "PartiallyUnfilled"
    THESIS_ASSIGNMENT = "ThesisAssignment"
    FINAL = "Final"

PRIMARY = "primary"
BACKFILL = "backfill"
THESIS = "thesis"
THESIS_FALLBACK = "thesis_fallback"

class EnrollmentSimulator:
    def __init__(self, sections: List[Section], students: List[Student], config: dict,
                 index: Optional[ConflictIndex] = None, report: Optional[ShortfallReport] = None):
        self.sections = sections
        self.students = students
        self.config = config
        self.index = index if index is not None else ConflictIndex(sections)
        self.report = report if report is not None else ShortfallReport()
        self.rng = random.Random(config['enrollment_seed'])

        # Remaining seats for every section that meets and has a cap.
        # Independent Study is uncapped and only reachable through the thesis pass.
        self.seats: Dict[str, int] = {
            s.section_id: s.enrollment_cap
            for s in sections
            if s.is_scheduled and not s.is_independent_study
        }

        self.enrollments: List[Enrollment] = []
        self.enrolled: Dict[int, List[str]] = defaultdict(list)
        self.schedules: Dict[int, List[ConflictInterval]] = defaultdict(list)
        self.states: Dict[int, StudentState] = {s.student_id: StudentState.UNENROLLED for s in students}
        self.history: Dict[int, List[StudentState]] = {s.student_id: [StudentState.UNENROLLED] for s in students}

    # --- Helpers ---

    def target_for(self, student: Student) -> int:
        if student.is_thesis:
            return self.config['thesis_course_target']
        return self.config['course_target']

    def registration_order(self) -> List[Student]:
        rank = {year: i for i, year in enumerate(REGISTRATION_PRIORITY)}
        return sorted(self.students, key=lambda s: (rank.get(s.class_year, len(rank)), s.student_id))

    def offered_sections(self) -> List[Section]:
        return [s for s in self.sections if self.seats.get(s.section_id, 0) > 0]

    def thesis_sections(self) -> List[Section]:
        level = self.config['thesis_course_level']
        return [s for s in self.sections if s.is_independent_study and s.course_level == level]

    def _set_state(self, student_id: int, state: StudentState):
        self.states[student_id] = state
        self.history[student_id].append(state)

    def _enroll(self, student: Student, section: Section, enrollment_pass: str):
        if section.section_id in self.seats:
            if self.seats[section.section_id] <= 0:
                raise RuntimeError(f"No seats left in {section.section_id}")
            self.seats[section.section_id] -= 1
        self.enrollments.append(Enrollment(student.student_id, section.section_id, enrollment_pass))
        self.enrolled[student.student_id].append(section.section_id)
        self.schedules[student.student_id].extend(self.index.intervals_for(section.section_id))

    # --- Passes ---

    def run_primary_pass(self):
        print("PASS 1: Enrolling students via primary 'shopping' period...")
        for student in self.registration_order():
            self._set_state(student.student_id, StudentState.SHOPPING)
            target = self.target_for(student)

            candidates = self.offered_sections()
            self.rng.shuffle(candidates)

            for section in candidates:
                if len(self.enrolled[student.student_id]) >= target:
                    break
                if self.seats[section.section_id] <= 0:
                    continue
                if self.index.conflicts(section.section_id, self.schedules[student.student_id]):
                    continue
                self._enroll(student, section, PRIMARY)

            if len(self.enrolled[student.student_id]) >= target:
                self._set_state(student.student_id, StudentState.COMPLETE)
            else:
                self._set_state(student.student_id, StudentState.NEEDS_BACKFILL)
        print(f"✅ Primary pass complete. Enrollments: {len(self.enrollments)}")

    def run_backfill_pass(self):
        print("PASS 2: Backfilling students with incomplete schedules...")
        to_backfill = [s for s in self.students if self.states[s.student_id] == StudentState.NEEDS_BACKFILL]
        to_backfill.sort(key=lambda s: s.student_id)

        if not to_backfill:
            print(" -> All students fully enrolled in the first pass. No backfill needed.")
            return

        print(f" -> Found {len(to_backfill)} students to backfill.")
        for student in to_backfill:
            sid = student.student_id
            self._set_state(sid, StudentState.BACKFILL)
            target = self.target_for(student)
            # Rebuild the current schedule from what the student already holds
            self.schedules[sid] = self.index.schedule_for(self.enrolled[sid])

            while len(self.enrolled[sid]) < target:
                # Recomputed every iteration: seat counts move as earlier students fill up
                valid = [
                    section for section in self.offered_sections()
                    if section.section_id not in self.enrolled[sid]
                    and not self.index.conflicts(section.section_id, self.schedules[sid])
                ]
                if not valid:
                    break
                self._enroll(student, self.rng.choice(valid), BACKFILL)

            if len(self.enrolled[sid]) >= target:
                self._set_state(sid, StudentState.COMPLETE)
            else:
                self._set_state(sid, StudentState.PARTIALLY_UNFILLED)
                self.report.enrollment_shortfalls.append(
                    EnrollmentShortfall(sid, len(self.enrolled[sid]), target)
                )

        shortfalls = len(self.report.enrollment_shortfalls)
        if shortfalls:
            print(f"⚠️ Warning: {shortfalls} students could not be backfilled completely.")

    def run_thesis_pass(self):
        print("Assigning guaranteed thesis enrollments for seniors...")
        thesis_sections = self.thesis_sections()
        by_department: Dict[str, List[Section]] = defaultdict(list)
        for section in thesis_sections:
            by_department[section.department].append(section)

        thesis_students = sorted((s for s in self.students if s.is_thesis), key=lambda s: s.student_id)
        for student in thesis_students:
            self._set_state(student.student_id, StudentState.THESIS_ASSIGNMENT)
            in_major = by_department.get(student.major)
            if in_major:
                self._enroll(student, self.rng.choice(in_major), THESIS)
            else:
                section = self.rng.choice(thesis_sections)
                self._enroll(student, section, THESIS_FALLBACK)
                self.report.thesis_fallbacks.append(
                    ThesisPlacementFallback(student.student_id, student.major, section.section_id)
                )

        fallbacks = len(self.report.thesis_fallbacks)
        if fallbacks:
            print(f"⚠️ Warning: {fallbacks} thesis students found no match in their major. Assigned a random thesis.")

    def run(self) -> List[Enrollment]:
        if any(s.is_thesis for s in self.students) and not self.thesis_sections():
            raise DataIntegrityError(["Thesis students exist but the schedule has no thesis section"])

        self.run_primary_pass()
        self.run_backfill_pass()
        self.run_thesis_pass()

        for student in self.students:
            self._set_state(student.student_id, StudentState.FINAL)
        return self.enrollments
