import os
import sys

# Add the project root to the path when running as a script
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from regsim.data_loader import (
    load_config, load_section_catalog, load_master_catalog, resolve_path, schedule_rows, enrollment_rows,
    student_rows, write_csv, SCHEDULE_HEADERS, ENROLLMENT_HEADERS, STUDENT_HEADERS
)
from regsim.catalog import CatalogCurator
from regsim.errors import DataIntegrityError
from regsim.simulation import run_simulation

# GLOBAL CONFIGURATION
CONFIG_FILE = os.environ.get('REGSIM_CONFIG', 'config.json')

def load_sections(config: dict, base_path: str):
    master_path = resolve_path(config, 'master_catalog_file', base_path)
    if master_path:
        print(f"📚 Curating the semester from master catalog '{master_path}'...")
        courses = load_master_catalog(master_path)
        return CatalogCurator(courses, config).build_sections()

    catalog_path = resolve_path(config, 'section_catalog_file', base_path)
    print(f"📚 Loading section catalog '{catalog_path}'...")
    return load_section_catalog(catalog_path)

def main() -> int:
    base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    config_path = CONFIG_FILE if os.path.isabs(CONFIG_FILE) else os.path.join(base_path, CONFIG_FILE)

    print("🚀 Starting registration simulation...")

    try:
        # 1. Configuration and catalog
        config = load_config(config_path if os.path.exists(config_path) else None)
        sections = load_sections(config, base_path)

        print("✅ Inputs loaded:")
        print(f"   - Sections: {len(sections)}")
        print(f"   - Students: {config['n_total_students']} ({config['n_thesis_seniors']} thesis seniors)")
        print(f"   - Seeds: rooms {config['room_assignment_seed']}, roster {config['roster_seed']}, enrollment {config['enrollment_seed']}")

        # 2. Simulation
        result = run_simulation(sections, config)

        # 3. Audit report
        if result.conflicts:
            print("\n--- ⚠️ AUDIT VIOLATIONS ---")
            for c in result.conflicts[:20]:
                print(f"  [x] {c}")
            if len(result.conflicts) > 20:
                print(f"      ... and {len(result.conflicts) - 20} more.")
        else:
            print("\n✨ Audit clean: no room, seat, time or thesis violations.")

        # 4. Shortfall summary
        summary = result.report.summary()
        print("\n--- 📊 SHORTFALL SUMMARY ---")
        print(f"   Unscheduled sections:        {summary['allocation_shortfalls']}")
        print(f"   Under-enrolled students:     {summary['enrollment_shortfalls']}")
        print(f"   Cross-department theses:     {summary['thesis_fallbacks']}")

        # 5. Export CSV artifacts
        output_dir = resolve_path(config, 'output_dir', base_path)
        print(f"\n💾 Exporting artifacts to {output_dir}...")
        write_csv(schedule_rows(result.sections), SCHEDULE_HEADERS, os.path.join(output_dir, 'schedule.csv'))
        write_csv(enrollment_rows(result.enrollments), ENROLLMENT_HEADERS, os.path.join(output_dir, 'enrollment.csv'))
        write_csv(student_rows(result.students), STUDENT_HEADERS, os.path.join(output_dir, 'students.csv'))
        print(f"✅ Export complete. Enrollments: {len(result.enrollments)}")
        return 0

    except DataIntegrityError as e:
        print(f"\n❌ Inputs rejected, nothing was scheduled: {e}")
        for problem in e.problems:
            print(f"  [x] {problem}")
        return 1
    except Exception as e:
        print(f"\n❌ Critical error: {e}")
        import traceback
        traceback.print_exc()
        return 1

if __name__ == "__main__":
    sys.exit(main())
