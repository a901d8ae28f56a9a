import os
import sys
from collections import Counter, defaultdict

# Add the project root to the path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from regsim.data_loader import load_config, read_artifacts, resolve_path
from regsim.audit import ScheduleAuditor
from regsim.model import NOT_APPLICABLE

BASE_PATH = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_FILE = os.path.join(BASE_PATH, 'config.json')

def analyze():
    config = load_config(CONFIG_FILE if os.path.exists(CONFIG_FILE) else None)
    output_dir = resolve_path(config, 'output_dir', BASE_PATH)

    print(f"⏳ Reading artifacts from '{output_dir}'...")
    try:
        sections, enrollments = read_artifacts(output_dir)
    except FileNotFoundError as e:
        print(f"❌ {e}. Run the simulation first (python -m regsim.main).")
        return

    # Thesis coverage needs the roster, which the artifacts do not carry
    conflicts = ScheduleAuditor(sections, config=config).get_conflicts(None, enrollments)

    print("\n--- 🔍 ARTIFACT ANALYSIS ---\n")
    unscheduled = [s for s in sections if s.slot is None and not s.is_independent_study]
    print(f"Sections: {len(sections)} ({len(unscheduled)} without room/time)")
    for s in unscheduled:
        print(f"   ⚠️  {s.section_id} ({s.component}, cap {s.enrollment_cap}) has no room")

    per_student = Counter(e.student_id for e in enrollments)
    load = Counter(per_student.values())
    print(f"\nEnrollments: {len(enrollments)} across {len(per_student)} students")
    for courses in sorted(load):
        print(f"   - {load[courses]} students with {courses} courses")

    fill = defaultdict(int)
    for e in enrollments:
        fill[e.section_id] += 1
    full = [s.section_id for s in sections if s.enrollment_cap is not None and s.slot is not None
            and fill[s.section_id] >= s.enrollment_cap]
    print(f"\nFull sections: {len(full)}")

    rooms_used = {s.slot.room_id for s in sections if s.slot is not None}
    buildings = Counter(s.slot.building_code for s in sections if s.slot is not None)
    print(f"Rooms in use: {len(rooms_used)}")
    for code, count in buildings.most_common():
        print(f"   - building {code if code else NOT_APPLICABLE}: {count} sections")

    if conflicts:
        print(f"\n❌ {len(conflicts)} violations:")
        for c in conflicts:
            print(f"  [x] {c}")
    else:
        print("\n✅ [OK] No room, seat or student time conflicts.")

if __name__ == "__main__":
    analyze()
