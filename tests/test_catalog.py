from regsim.catalog import CatalogCurator, enrollment_cap
from regsim.model import MasterCourse, LECTURE, LAB, STUDIO, INDEPENDENT_STUDY

MASTER = [
    MasterCourse("PSYC 101", "PSYC", 101, "Introduction to Psychology"),
    MasterCourse("CHEM 107A", "CHEM", 107, "General Chemistry I/Lab"),
    MasterCourse("MATH 105", "MATH", 105, "Calculus I"),
    MasterCourse("HISP 101", "HISP", 101, "Elementary Spanish I"),
    MasterCourse("THEA 231", "THEA", 231, "Acting I"),
    MasterCourse("THEA 101", "THEA", 101, "Introduction to Theater"),
    MasterCourse("BIO 457", "BIO", 457, "Senior Thesis"),
    MasterCourse("FYS 100", "FYS", 100, "First-Year Seminar"),
    MasterCourse("ENGL 210", "ENGL", 210, "The Novel"),
    MasterCourse("ENGL 320", "ENGL", 320, "Shakespeare"),
    MasterCourse("HIST 240", "HIST", 240, "Modern Europe"),
]

def test_component_classification():
    by_code = {c.course_code: c for c in MASTER}
    assert CatalogCurator.classify_component(by_code["BIO 457"]) == INDEPENDENT_STUDY
    assert CatalogCurator.classify_component(by_code["THEA 231"]) == STUDIO
    assert CatalogCurator.classify_component(MasterCourse("DANC 270B", "DANC", 270)) == STUDIO
    assert CatalogCurator.classify_component(by_code["ENGL 210"]) == LECTURE

def test_enrollment_caps():
    assert enrollment_cap(MasterCourse("PSYC 101", "PSYC", 101), LECTURE) == 75
    assert enrollment_cap(MasterCourse("CHEM 107A", "CHEM", 107), LAB) == 20
    assert enrollment_cap(MasterCourse("THEA 231", "THEA", 231), STUDIO) == 15
    assert enrollment_cap(MasterCourse("BIO 457", "BIO", 457), INDEPENDENT_STUDY) is None
    assert enrollment_cap(MasterCourse("FYS 100", "FYS", 100), LECTURE) == 16
    assert enrollment_cap(MasterCourse("HISP 101", "HISP", 101), LECTURE) == 25
    assert enrollment_cap(MasterCourse("HISP 201", "HISP", 201), LECTURE) == 30
    assert enrollment_cap(MasterCourse("MATH 105", "MATH", 105), LECTURE) == 40
    assert enrollment_cap(MasterCourse("ENGL 320", "ENGL", 320), LECTURE) == 15
    assert enrollment_cap(MasterCourse("GRAD 510", "GRAD", 510), LECTURE) == 20

def test_core_courses_run_in_several_sections(config):
    sections = CatalogCurator(MASTER, config).build_sections()
    ids = [s.section_id for s in sections]

    assert {"PSYC 101-1", "PSYC 101-2", "PSYC 101-3"} <= set(ids)
    assert "PSYC 101-4" not in ids
    assert {"MATH 105-1", "MATH 105-2"} <= set(ids)

def test_lab_courses_split_into_lecture_and_lab(config):
    sections = {s.section_id: s for s in CatalogCurator(MASTER, config).build_sections()}

    for n in (1, 2):
        lecture = sections[f"CHEM 107A-{n}-LEC"]
        lab = sections[f"CHEM 107A-{n}-LAB"]
        assert (lecture.component, lecture.enrollment_cap) == (LECTURE, 40)
        assert (lab.component, lab.enrollment_cap) == (LAB, 20)
    assert "CHEM 107A-1" not in sections

def test_guaranteed_courses_always_selected(config):
    codes = {c.course_code for c in CatalogCurator(MASTER, config).select_courses()}
    assert {"PSYC 101", "CHEM 107A", "MATH 105", "HISP 101", "BIO 457", "FYS 100", "THEA 231", "THEA 101"} <= codes

def test_same_seed_gives_same_catalog(config):
    first = [s.section_id for s in CatalogCurator(MASTER, config).build_sections()]
    second = [s.section_id for s in CatalogCurator(MASTER, config).build_sections()]
    assert first == second
