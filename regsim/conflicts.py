import re
from collections import defaultdict
from typing import Dict, Iterable, List
from .model import ConflictInterval, Section, Slot

WEEKDAY_TOKENS = re.compile(r"Th|Sa|Su|M|T|W|F")

def parse_days(pattern: str) -> List[str]:
    """'MWF' -> ['M', 'W', 'F'], 'TTh' -> ['T', 'Th']."""
    days = WEEKDAY_TOKENS.findall(pattern or "")
    if "".join(days) != (pattern or ""):
        raise ValueError(f"Unrecognised day pattern: {pattern!r}")
    return days

def parse_time(time_str: str) -> int:
    h, m = map(int, time_str.split(':'))
    return h * 60 + m

def check_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    # Half-open ranges: back-to-back meetings do not overlap
    return start1 < end2 and end1 > start2

def slot_intervals(slot: Slot, section_id: str = "") -> List[ConflictInterval]:
    start = parse_time(slot.start_time)
    end = parse_time(slot.end_time)
    return [ConflictInterval(section_id, day, start, end) for day in parse_days(slot.days)]

def intervals_overlap(first: Iterable[ConflictInterval], second: Iterable[ConflictInterval]) -> bool:
    by_day: Dict[str, List[ConflictInterval]] = defaultdict(list)
    for interval in second:
        by_day[interval.day].append(interval)
    for a in first:
        for b in by_day.get(a.day, ()):
            if check_overlap(a.start, a.end, b.start, b.end):
                return True
    return False

def slots_collide(a: Slot, b: Slot) -> bool:
    """True when two slots would put two meetings in the same room at the same time."""
    return a.room_id == b.room_id and intervals_overlap(slot_intervals(a), slot_intervals(b))

class ConflictIndex:
    """
    Per-weekday meeting intervals of every scheduled section.
    Unscheduled and Independent Study sections have no rows and never conflict.
    """

    def __init__(self, sections: Iterable[Section]):
        self.intervals: Dict[str, List[ConflictInterval]] = {}
        for section in sections:
            if section.slot is None or section.is_independent_study:
                self.intervals[section.section_id] = []
            else:
                self.intervals[section.section_id] = slot_intervals(section.slot, section.section_id)

    def intervals_for(self, section_id: str) -> List[ConflictInterval]:
        return self.intervals.get(section_id, [])

    def schedule_for(self, section_ids: Iterable[str]) -> List[ConflictInterval]:
        schedule = []
        for section_id in section_ids:
            schedule.extend(self.intervals_for(section_id))
        return schedule

    def conflicts(self, section_id: str, existing: Iterable[ConflictInterval]) -> bool:
        candidate = self.intervals_for(section_id)
        if not candidate:
            return False
        return intervals_overlap(candidate, existing)

    def rows(self) -> List[ConflictInterval]:
        return [i for intervals in self.intervals.values() for i in intervals]
