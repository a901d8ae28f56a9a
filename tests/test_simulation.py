import os
import pytest
from regsim.data_loader import (
    load_section_catalog, schedule_rows, enrollment_rows, student_rows, write_csv, SCHEDULE_HEADERS,
    ENROLLMENT_HEADERS, STUDENT_HEADERS
)
from regsim.errors import DataIntegrityError
from regsim.model import INDEPENDENT_STUDY
from regsim.simulation import run_simulation, check_run_inputs

CATALOG = os.path.join(os.path.dirname(__file__), '..', 'data', 'section_catalog.csv')

@pytest.fixture
def sections():
    return load_section_catalog(CATALOG)

@pytest.fixture
def run_config(config):
    config['n_total_students'] = 150
    config['n_thesis_seniors'] = 10
    return config

def write_artifacts(result, directory):
    write_csv(schedule_rows(result.sections), SCHEDULE_HEADERS, os.path.join(directory, 'schedule.csv'))
    write_csv(enrollment_rows(result.enrollments), ENROLLMENT_HEADERS, os.path.join(directory, 'enrollment.csv'))
    write_csv(student_rows(result.students), STUDENT_HEADERS, os.path.join(directory, 'students.csv'))

def test_full_run_passes_the_audit(sections, run_config):
    result = run_simulation(sections, run_config)

    assert result.conflicts == []
    assert len(result.sections) == len(sections)
    thesis_ids = {s.section_id for s in result.sections if s.is_independent_study and s.course_level == 457}
    for student in result.students:
        if student.is_thesis:
            assert any(e.student_id == student.student_id and e.section_id in thesis_ids for e in result.enrollments)

def test_master_schedule_order(sections, run_config):
    result = run_simulation(sections, run_config)
    kinds = []
    for s in result.sections:
        if s.component == INDEPENDENT_STUDY:
            kinds.append(2)
        elif s.slot is None:
            kinds.append(1)
        else:
            kinds.append(0)
    assert kinds == sorted(kinds)

def test_input_sections_are_not_modified(sections, run_config):
    run_simulation(sections, run_config)
    assert all(s.slot is None for s in sections)

def test_same_seeds_give_identical_artifacts(sections, run_config, tmp_path):
    first, second = tmp_path / 'first', tmp_path / 'second'
    write_artifacts(run_simulation(sections, run_config), str(first))
    write_artifacts(run_simulation(sections, run_config), str(second))

    for name in ('schedule.csv', 'enrollment.csv', 'students.csv'):
        assert (first / name).read_bytes() == (second / name).read_bytes()

def test_progress_phases(sections, run_config):
    phases = []
    run_simulation(sections, run_config, on_progress=lambda phase, percent: phases.append((phase, percent)))
    assert phases == [('scheduling', 0), ('roster', 40), ('enrollment', 50), ('audit', 90), ('completed', 100)]

def test_missing_thesis_section_is_fatal(sections, run_config):
    without_thesis = [s for s in sections if s.course_level != 457]
    with pytest.raises(DataIntegrityError):
        run_simulation(without_thesis, run_config)

def test_empty_catalog_is_fatal(run_config):
    run_config['n_thesis_seniors'] = 0
    with pytest.raises(DataIntegrityError) as excinfo:
        check_run_inputs([], run_config)
    assert excinfo.value.problems == ["the section catalog is empty"]

def test_thesis_section_with_a_cap_is_still_uncapped(make_section, run_config):
    catalog = [
        make_section("MATH 105-1", cap=40),
        make_section("MATH 106-1", cap=40, level=106),
        make_section("MATH 457-1", cap=1, component=INDEPENDENT_STUDY, level=457),
    ]
    run_config['n_total_students'] = 60
    run_config['n_thesis_seniors'] = 3

    result = run_simulation(catalog, run_config)

    thesis_enrollments = [e for e in result.enrollments if e.section_id == "MATH 457-1"]
    assert len(thesis_enrollments) == sum(s.is_thesis for s in result.students) > 1
    assert result.conflicts == []

@pytest.mark.parametrize("overrides", [
    {'n_thesis_seniors': -1},
    {'n_total_students': -5},
    {'course_target': -1},
    {'class_year_distribution': {'FirstYear': 0.0, 'Sophomore': 0.0, 'Junior': 0.0, 'Senior': 0.0}},
    {'athlete_distribution': {'FirstYear': -0.1}},
])
def test_bad_config_is_rejected_before_scheduling(sections, run_config, overrides):
    run_config.update(overrides)
    with pytest.raises(DataIntegrityError):
        check_run_inputs(sections, run_config)
