import random
from typing import List, Optional, Tuple
from .model import (
    Section, Slot, LAB, STUDIO, LAB_ROOM, STANDARD_CLASSROOM, LARGE_LECTURE_HALL, SEMINAR_ROOM, BLACK_BOX,
    DANCE_STUDIO
)
from .conflicts import slots_collide
from .errors import AllocationShortfall, ShortfallReport

class RegistrarAlgorithm:
    """
    Greedy room/time assignment. Sections are placed largest-first, each one
    into a random free slot whose room type suits it.
    """

    LARGE_SECTION_CAP = 40
    SEMINAR_SECTION_CAP = 16
    STUDIO_ROOM_TYPES = (BLACK_BOX, DANCE_STUDIO, SEMINAR_ROOM)

    def __init__(self, sections: List[Section], slots: List[Slot], config: dict, report: Optional[ShortfallReport] = None):
        self.sections = sections
        self.config = config
        self.rng = random.Random(config['room_assignment_seed'])
        self.report = report if report is not None else ShortfallReport()

        # Available pool, kept in inventory order so the seeded choice is reproducible
        self.available_slots: List[Slot] = list(slots)

        self.scheduled: List[Section] = []
        self.unscheduled: List[Section] = []
        self.independent: List[Section] = [s for s in sections if s.is_independent_study]

    def eligible_room_types(self, section: Section) -> Tuple[str, ...]:
        if section.component == LAB:
            return (LAB_ROOM,)
        if section.component == STUDIO:
            return self.STUDIO_ROOM_TYPES
        if section.enrollment_cap > self.LARGE_SECTION_CAP:
            return (LARGE_LECTURE_HALL,)
        if section.enrollment_cap > self.SEMINAR_SECTION_CAP:
            return (STANDARD_CLASSROOM,)
        return (SEMINAR_ROOM,)

    def sections_to_schedule(self) -> List[Section]:
        pending = [s for s in self.sections if not s.is_independent_study]
        # sorted() is stable, ties keep catalog order
        return sorted(pending, key=lambda s: s.enrollment_cap, reverse=True)

    def _consume(self, chosen: Slot):
        # Drop the slot and every other slot of the same room that overlaps it on a shared weekday
        self.available_slots = [
            slot for slot in self.available_slots
            if slot != chosen and not slots_collide(slot, chosen)
        ]

    def assign(self, section: Section) -> Optional[Slot]:
        room_types = self.eligible_room_types(section)
        candidates = [slot for slot in self.available_slots if slot.room_type in room_types]

        if not candidates:
            self.unscheduled.append(section)
            self.report.allocation_shortfalls.append(
                AllocationShortfall(section.section_id, section.component, section.enrollment_cap, room_types)
            )
            return None

        chosen = self.rng.choice(candidates)
        section.slot = chosen
        self.scheduled.append(section)
        self._consume(chosen)
        return chosen

    def schedule(self) -> List[Section]:
        """
        Assigns a slot to every section that needs one and returns the master
        schedule: scheduled sections in assignment order, then unscheduled
        sections, then Independent Study sections.
        """
        for section in self.sections_to_schedule():
            self.assign(section)

        print(f"✅ Scheduling complete. Sections with a room: {len(self.scheduled)}")
        if self.unscheduled:
            print(f"⚠️ Warning: {len(self.unscheduled)} sections could not be scheduled.")

        return self.master_schedule()

    def master_schedule(self) -> List[Section]:
        return self.scheduled + self.unscheduled + self.independent

