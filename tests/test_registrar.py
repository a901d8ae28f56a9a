from regsim.audit import ScheduleAuditor
from regsim.conflicts import slots_collide
from regsim.inventory import build_slot_inventory
from regsim.model import (
    LAB, STUDIO, INDEPENDENT_STUDY, LAB_ROOM, LARGE_LECTURE_HALL, STANDARD_CLASSROOM, SEMINAR_ROOM, BLACK_BOX,
    DANCE_STUDIO
)
from regsim.registrar import RegistrarAlgorithm

def test_single_lab_slot_leaves_second_lab_unscheduled(make_section, config):
    slots = build_slot_inventory([("A", LAB_ROOM, 1)], templates=[[("M", "13:00", "15:30")]])
    first = make_section("CHEM 107A-1-LAB", cap=20, component=LAB, department="CHEM")
    second = make_section("CHEM 107A-2-LAB", cap=20, component=LAB, department="CHEM")

    registrar = RegistrarAlgorithm([first, second], slots, config)
    schedule = registrar.schedule()

    assert first.slot == slots[0]
    assert second.slot is None
    assert [s.section_id for s in schedule] == ["CHEM 107A-1-LAB", "CHEM 107A-2-LAB"]
    shortfalls = registrar.report.allocation_shortfalls
    assert len(shortfalls) == 1
    assert shortfalls[0].section_id == "CHEM 107A-2-LAB"
    assert shortfalls[0].room_types == (LAB_ROOM,)

def test_room_type_eligibility(make_section, config):
    registrar = RegistrarAlgorithm([], [], config)
    assert registrar.eligible_room_types(make_section("X-1", cap=20, component=LAB)) == (LAB_ROOM,)
    assert registrar.eligible_room_types(make_section("X-2", cap=15, component=STUDIO)) == (BLACK_BOX, DANCE_STUDIO, SEMINAR_ROOM)
    assert registrar.eligible_room_types(make_section("X-3", cap=75)) == (LARGE_LECTURE_HALL,)
    assert registrar.eligible_room_types(make_section("X-4", cap=41)) == (LARGE_LECTURE_HALL,)
    assert registrar.eligible_room_types(make_section("X-5", cap=40)) == (STANDARD_CLASSROOM,)
    assert registrar.eligible_room_types(make_section("X-6", cap=17)) == (STANDARD_CLASSROOM,)
    assert registrar.eligible_room_types(make_section("X-7", cap=16)) == (SEMINAR_ROOM,)

def test_sections_placed_largest_first(make_section, config):
    sections = [
        make_section("A-1", cap=15),
        make_section("B-1", cap=75),
        make_section("C-1", cap=30),
        make_section("D-1", cap=30),
        make_section("MATH 457-1", cap=None, component=INDEPENDENT_STUDY, level=457),
    ]
    registrar = RegistrarAlgorithm(sections, [], config)
    assert [s.section_id for s in registrar.sections_to_schedule()] == ["B-1", "C-1", "D-1", "A-1"]

def test_independent_study_bypasses_rooms(make_section, config):
    slots = build_slot_inventory([("F", STANDARD_CLASSROOM, 1)])
    thesis = make_section("MATH 457-1", cap=None, component=INDEPENDENT_STUDY, level=457)
    lecture = make_section("MATH 105-1", cap=30)

    registrar = RegistrarAlgorithm([thesis, lecture], slots, config)
    schedule = registrar.schedule()

    assert thesis.slot is None
    assert lecture.slot is not None
    assert schedule[-1] is thesis
    assert not registrar.report.allocation_shortfalls

def test_overlapping_templates_never_double_book_a_room(make_section, config):
    # TTh 12:30-13:50 and TTh 14:30-15:50 both overlap the T/Th lab blocks
    slots = build_slot_inventory([("A", LAB_ROOM, 1)])
    sections = [make_section(f"BIO 101-{n}-LAB", cap=20, component=LAB, department="BIO") for n in range(1, 31)]

    registrar = RegistrarAlgorithm(sections, slots, config)
    schedule = registrar.schedule()

    placed = [s.slot for s in schedule if s.slot is not None]
    for i, a in enumerate(placed):
        for b in placed[i + 1:]:
            assert not slots_collide(a, b)
    assert len(registrar.scheduled) + len(registrar.unscheduled) == 30
    assert len(registrar.report.allocation_shortfalls) == len(registrar.unscheduled)
    assert ScheduleAuditor(schedule).room_conflicts() == []

def test_same_seed_gives_same_assignment(make_section, config):
    def run():
        sections = [make_section(f"ECON 101-{n}", cap=30, department="ECON") for n in range(1, 11)]
        RegistrarAlgorithm(sections, build_slot_inventory(), config).schedule()
        return [(s.section_id, s.slot) for s in sections]

    assert run() == run()
