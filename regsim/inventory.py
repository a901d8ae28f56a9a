from typing import Dict, Iterable, List, Sequence, Tuple
from .model import (
    Slot, LAB_ROOM, STANDARD_CLASSROOM, LARGE_LECTURE_HALL, SEMINAR_ROOM, BLACK_BOX, DANCE_STUDIO, NOT_APPLICABLE
)

BUILDING_NAMES: Dict[str, str] = {
    "A": "HAMPTON HALL",
    "B": "PURNELL SCIENCE CENTER",
    "C": "CALDWELL HALL",
    "D": "MERRICK AUDITORIUM",
    "ARTS": "STERLING-MEAD PERF. ARTS",
    "THEATER": "WHITMAN THEATER",
    "E": "THORNTON HALL",
    "F": "PRESCOTT HALL",
    "G": "CHANDLER ACADEMIC CENTER",
    "H": "WHITEHILL ATHLETIC CENTER",
}

# (building code, room type, number of rooms)
ROOM_INVENTORY: List[Tuple[str, str, int]] = [
    ("A", LAB_ROOM, 6), ("A", STANDARD_CLASSROOM, 10),
    ("B", LAB_ROOM, 6), ("B", STANDARD_CLASSROOM, 10), ("B", LARGE_LECTURE_HALL, 1),
    ("C", STANDARD_CLASSROOM, 6), ("C", LARGE_LECTURE_HALL, 1),
    ("D", SEMINAR_ROOM, 8), ("D", STANDARD_CLASSROOM, 4),
    ("ARTS", STANDARD_CLASSROOM, 6), ("ARTS", SEMINAR_ROOM, 3),
    ("THEATER", STANDARD_CLASSROOM, 5), ("THEATER", LARGE_LECTURE_HALL, 1), ("THEATER", BLACK_BOX, 1),
    ("E", SEMINAR_ROOM, 10), ("E", STANDARD_CLASSROOM, 5),
    ("F", STANDARD_CLASSROOM, 8), ("F", SEMINAR_ROOM, 6),
    ("G", LARGE_LECTURE_HALL, 2), ("G", STANDARD_CLASSROOM, 20), ("G", SEMINAR_ROOM, 10),
    ("H", DANCE_STUDIO, 4), ("H", STANDARD_CLASSROOM, 1),
]

# (day-pattern, start, end)
DAYTIME_TIME_SLOTS = [
    ("MWF", "08:00", "08:50"), ("MWF", "09:00", "09:50"), ("MWF", "10:00", "10:50"), ("MWF", "11:00", "11:50"),
    ("MWF", "12:00", "12:50"), ("MWF", "13:00", "13:50"), ("MWF", "14:00", "14:50"), ("MWF", "15:00", "15:50"),
    ("TTh", "08:00", "09:20"), ("TTh", "09:30", "10:50"), ("TTh", "11:00", "12:20"), ("TTh", "12:30", "13:50"),
    ("TTh", "14:30", "15:50"),
]
LAB_TIME_SLOTS = [("M", "13:00", "15:30"), ("T", "13:00", "15:30"), ("W", "13:00", "15:30"), ("Th", "13:00", "15:30")]
EVENING_TIME_SLOTS = [("MW", "16:00", "17:50"), ("TTh", "18:00", "19:50")]

TIME_TEMPLATES = (DAYTIME_TIME_SLOTS, LAB_TIME_SLOTS, EVENING_TIME_SLOTS)

def expand_rooms(inventory: Iterable[Sequence]) -> List[Tuple[str, str, str]]:
    """Expands (building, room type, count) rows into (room_id, room_type, building) rows."""
    rooms = []
    for building_code, room_type, num_rooms in inventory:
        for number in range(1, int(num_rooms) + 1):
            rooms.append((f"{building_code}-{room_type}-{number}", room_type, building_code))
    return rooms

def build_slot_inventory(inventory: Iterable[Sequence] = None, templates: Sequence = TIME_TEMPLATES) -> List[Slot]:
    """
    Crosses every room with every meeting-time template.
    Order is template group -> room -> template row; duplicates are dropped.
    """
    rooms = expand_rooms(ROOM_INVENTORY if inventory is None else inventory)
    slots = []
    seen = set()
    for time_slots in templates:
        for room_id, room_type, building_code in rooms:
            for days, start, end in time_slots:
                slot = Slot(room_id, room_type, building_code, days, start, end)
                if slot in seen:
                    continue
                seen.add(slot)
                slots.append(slot)
    return slots

def building_name(building_code: str) -> str:
    return BUILDING_NAMES.get(building_code, NOT_APPLICABLE)
