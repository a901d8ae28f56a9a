import copy
from typing import Callable, List, Optional, Sequence
from .model import Section, SimulationResult
from .errors import DataIntegrityError, ShortfallReport
from .inventory import build_slot_inventory
from .registrar import RegistrarAlgorithm
from .roster import RosterGenerator
from .conflicts import ConflictIndex
from .enrollment import EnrollmentSimulator
from .audit import ScheduleAuditor

ProgressCallback = Callable[[str, int], None]

def check_run_inputs(sections: List[Section], config: dict):
    """Fatal checks that must pass before any room is assigned."""
    problems = []
    if not sections:
        problems.append("the section catalog is empty")

    for key in ['n_total_students', 'n_thesis_seniors', 'course_target', 'thesis_course_target']:
        if config[key] < 0:
            problems.append(f"{key} must not be negative (got {config[key]})")
    for key in ['class_year_distribution', 'athlete_distribution']:
        shares = config.get(key, {})
        if any(share < 0 for share in shares.values()):
            problems.append(f"{key} has negative shares: {shares}")
    if config['n_total_students'] > 0 and sum(config['class_year_distribution'].values()) <= 0:
        problems.append("class_year_distribution must have at least one positive share")

    if config['n_thesis_seniors'] > 0:
        level = config['thesis_course_level']
        if not any(s.is_independent_study and s.course_level == level for s in sections):
            problems.append(f"{config['n_thesis_seniors']} thesis seniors requested but no Independent Study section at level {level}")
    if problems:
        raise DataIntegrityError(problems)

def run_simulation(sections: List[Section], config: dict, rooms: Optional[Sequence] = None,
                   on_progress: Optional[ProgressCallback] = None) -> SimulationResult:
    """
    Runs the whole registration cycle: room/time assignment, roster
    generation, the three enrollment passes and the post-run audit.
    The input sections are not modified.
    """
    def report_progress(phase: str, percent: int):
        if on_progress:
            on_progress(phase, percent)

    check_run_inputs(sections, config)
    sections = copy.deepcopy(sections)
    report = ShortfallReport()

    report_progress("scheduling", 0)
    print("\nSTEP 1: Running the Registrar's Algorithm to assign rooms and times...")
    registrar = RegistrarAlgorithm(sections, build_slot_inventory(rooms), config, report)
    master_schedule = registrar.schedule()

    report_progress("roster", 40)
    print("\nSTEP 2: Generating the synthetic student roster...")
    students = RosterGenerator(master_schedule, config).generate()
    print(f"✅ Students generated: {len(students)} ({sum(s.is_thesis for s in students)} thesis seniors)")

    report_progress("enrollment", 50)
    print("\nSTEP 3: Running the enrollment simulation...")
    index = ConflictIndex(master_schedule)
    simulator = EnrollmentSimulator(master_schedule, students, config, index, report)
    enrollments = simulator.run()

    report_progress("audit", 90)
    auditor = ScheduleAuditor(master_schedule, index, config)
    conflicts = auditor.get_conflicts(students, enrollments)

    report_progress("completed", 100)
    return SimulationResult(
        sections=master_schedule,
        students=students,
        enrollments=enrollments,
        report=report,
        conflicts=conflicts
    )
