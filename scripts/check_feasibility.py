import os
import sys
from collections import defaultdict

# Add the project root to the path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from regsim.data_loader import load_config, load_section_catalog, resolve_path
from regsim.inventory import build_slot_inventory
from regsim.conflicts import slots_collide
from regsim.registrar import RegistrarAlgorithm

BASE_PATH = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_FILE = os.path.join(BASE_PATH, 'config.json')

def room_type_capacity(slots):
    """
    How many sections each room type can host: every room is filled greedily
    with non-overlapping slots in inventory order.
    """
    by_room = defaultdict(list)
    for slot in slots:
        by_room[slot.room_id].append(slot)

    capacity = defaultdict(int)
    for room_slots in by_room.values():
        taken = []
        for slot in room_slots:
            if not any(slots_collide(slot, other) for other in taken):
                taken.append(slot)
        capacity[room_slots[0].room_type] += len(taken)
    return capacity

def check_feasibility():
    print("⏳ Loading configuration and section catalog...")

    try:
        config = load_config(CONFIG_FILE if os.path.exists(CONFIG_FILE) else None)
        sections = load_section_catalog(resolve_path(config, 'section_catalog_file', BASE_PATH))
    except Exception as e:
        print(f"❌ Could not load inputs: {e}")
        return

    slots = build_slot_inventory()
    registrar = RegistrarAlgorithm(sections, slots, config)
    capacity = room_type_capacity(slots)

    print("\n--- 📊 FEASIBILITY ANALYSIS (Static Check) ---\n")

    # ---------------------------------------------------------
    # 1. Rooms: demand per eligible room-type set vs. placements available
    # ---------------------------------------------------------
    print("1. ROOM DEMAND BY ELIGIBLE ROOM TYPES:")
    demand = defaultdict(int)
    for section in registrar.sections_to_schedule():
        demand[registrar.eligible_room_types(section)] += 1

    for room_types, needed in sorted(demand.items(), key=lambda item: -item[1]):
        available = sum(capacity[t] for t in room_types)
        label = " / ".join(room_types)
        if needed > available:
            print(f"   ❌ [CRITICAL] {label}: {needed} sections for {available} placements ({needed - available} will stay unscheduled)")
        else:
            print(f"   ✅ [OK] {label}: {needed} sections for {available} placements")
    print()

    # ---------------------------------------------------------
    # 2. Seats: capped seats vs. course demand of the student body
    # ---------------------------------------------------------
    print("2. SEATS (Global):")
    seats = sum(s.enrollment_cap for s in sections if not s.is_independent_study)
    n_thesis = config['n_thesis_seniors']
    seat_demand = (config['n_total_students'] - n_thesis) * config['course_target'] + n_thesis * config['thesis_course_target']
    print(f"   - Demand (course requests): {seat_demand}")
    print(f"   - Supply (capped seats):    {seats}")
    if seats < seat_demand:
        print(f"   ❌ [CRITICAL] {seat_demand - seats} course requests cannot be met even without time conflicts.")
    else:
        print(f"   ✅ [OK] {seats - seat_demand} spare seats before time conflicts.")
    print()

    # ---------------------------------------------------------
    # 3. Thesis sections per major department
    # ---------------------------------------------------------
    print("3. THESIS COVERAGE:")
    level = config['thesis_course_level']
    thesis_departments = {s.department for s in sections if s.is_independent_study and s.course_level == level}
    excluded = set(config['non_major_departments'])
    majors = sorted({s.department for s in sections if s.department not in excluded})
    missing = [m for m in majors if m not in thesis_departments]
    if not thesis_departments:
        print("   ❌ [CRITICAL] No thesis section in the catalog. Thesis seniors cannot be placed.")
    elif missing:
        print(f"   ⚠️  Majors without a thesis section (students will get a cross-department thesis): {', '.join(missing)}")
    else:
        print("   ✅ [OK] Every major has a thesis section.")

if __name__ == "__main__":
    check_feasibility()
