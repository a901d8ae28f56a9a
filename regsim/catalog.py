import random
from collections import defaultdict
from typing import Dict, List, Optional
from .model import MasterCourse, Section, LECTURE, LAB, STUDIO, INDEPENDENT_STUDY

INDEPENDENT_STUDY_LEVELS = (360, 457)

AVC_STUDIO_CODES = {
    "AVC 202", "AVC 203", "AVC 207", "AVC 209", "AVC 211", "AVC 212", "AVC 213", "AVC 214", "AVC 215", "AVC 219",
    "AVC 220", "AVC 224", "AVC 309", "AVC 311", "AVC 312", "AVC 314A", "AVC 315", "AVC 316", "AVC 318", "AVC 324",
    "AVC 344", "AVC 350",
}
DANCE_STUDIO_CODES = {"DNMU 290J", "DANC 300", "DANC 351", "DANC 251", "DANC 253"}
MUSIC_STUDIO_CODES = {
    "MUS 110", "MUS 218", "DCMU 219", "MUS 231", "MUS 232", "MUS 235", "MUS 262", "MUS 270", "MUS 331", "MUS 332",
    "MUS 333",
}
THEATER_STUDIO_CODES = {
    "THEA 231", "THEA 232", "THEA 233", "THEA 236", "THEA 240", "THEA 250", "THEA 261", "THEA 263", "THEA 270W",
    "THEA 290", "THEA 295", "THEA 339", "THEA 350", "THEA 362", "THEA 370", "THEA 373",
}
STUDIO_CODES = AVC_STUDIO_CODES | DANCE_STUDIO_CODES | MUSIC_STUDIO_CODES | THEATER_STUDIO_CODES
STUDIO_PREFIXES = ("DANC 270", "MUS 290")

# Core prerequisites: always offered, and offered in more than one section
CORE_CODES = [
    "PSYC 101", "MATH 105", "MATH 106", "CHEM 107A", "CHEM 108A", "PHYS 107", "PHYS 108", "ECON 101", "ECON 103",
    "PLTC 101", "NRSC 160", "SOC 101",
]
SECTION_COUNTS = {"PSYC 101": 3}
DEFAULT_CORE_SECTIONS = 2

FOREIGN_LANGUAGE_DEPTS = {"CHI", "FRE", "GER", "GRK", "JPN", "LATN", "HISP", "RUSS"}

# (department, component, how many to sample, excluded code prefix)
ARTS_QUOTAS = [
    ("AVC", LECTURE, 7, None),
    ("AVC", STUDIO, 7, None),
    ("DANC", LECTURE, 2, None),
    ("DANC", STUDIO, 5, None),
    ("THEA", LECTURE, 4, None),
    ("THEA", STUDIO, 6, None),
    ("MUS", LECTURE, 4, None),
    ("MUS", STUDIO, 2, "MUS 290"),
]
ARTS_REQUIRED_CODES = {"MUS 231", "MUS 331"}

BIO_TOPIC_CODES = {"BIO 195A", "BIO 195B", "BIO 195C", "BIO 195D", "BIO 195E", "BIO 195F", "BIO 195H", "BIO 195K"}
BIO_TOPIC_COUNT = 4
FYS_COUNT = 15

# Share of the remaining catalog sampled per level group
LEVEL_SAMPLING = {100: 0.30, 200: 0.40, 300: 0.30, 400: 0.25}
DEFAULT_LEVEL_SAMPLING = 0.15

LAB_TITLE_MARKERS = ("/Lab", "Lab-Based")

class CatalogCurator:
    """
    Turns the master course catalog into the semester's section catalog:
    picks which courses run, splits them into sections and sets enrollment caps.
    """

    def __init__(self, courses: List[MasterCourse], config: dict):
        self.courses = courses
        self.config = config
        self.rng = random.Random(config['catalog_seed'])
        self.components: Dict[str, str] = {c.course_code: self.classify_component(c) for c in courses}

    @staticmethod
    def classify_component(course: MasterCourse) -> str:
        if course.course_level in INDEPENDENT_STUDY_LEVELS:
            return INDEPENDENT_STUDY
        if course.course_code in STUDIO_CODES or course.course_code.startswith(STUDIO_PREFIXES):
            return STUDIO
        return LECTURE

    def _sample(self, pool: List[MasterCourse], n: int) -> List[MasterCourse]:
        return self.rng.sample(pool, min(n, len(pool)))

    def guaranteed_pool(self) -> List[MasterCourse]:
        courses = self.courses
        pool = [c for c in courses if c.course_code in CORE_CODES]
        pool += [c for c in courses if c.department in FOREIGN_LANGUAGE_DEPTS and c.course_level < 200]

        for department, component, n, excluded_prefix in ARTS_QUOTAS:
            candidates = [
                c for c in courses
                if c.department == department and self.components[c.course_code] == component
                and not (excluded_prefix and c.course_code.startswith(excluded_prefix))
            ]
            pool += self._sample(candidates, n)
        pool += [c for c in courses if c.course_code in ARTS_REQUIRED_CODES]

        pool += self._sample([c for c in courses if c.course_code in BIO_TOPIC_CODES], BIO_TOPIC_COUNT)
        pool += self._sample([c for c in courses if c.department == "FYS"], FYS_COUNT)
        pool += [c for c in courses if self.components[c.course_code] == INDEPENDENT_STUDY]
        return _distinct(pool)

    def probabilistic_fill(self, chosen: List[MasterCourse]) -> List[MasterCourse]:
        taken = {c.course_code for c in chosen}
        by_level: Dict[int, List[MasterCourse]] = defaultdict(list)
        for course in self.courses:
            if course.course_code not in taken:
                by_level[(course.course_level // 100) * 100].append(course)

        fill = []
        for level_group in sorted(by_level):
            group = by_level[level_group]
            share = LEVEL_SAMPLING.get(level_group, DEFAULT_LEVEL_SAMPLING)
            picked = set(self.rng.sample(range(len(group)), round(len(group) * share)))
            # Keep catalog order within the group
            fill += [c for i, c in enumerate(group) if i in picked]
        return fill

    def select_courses(self) -> List[MasterCourse]:
        guaranteed = self.guaranteed_pool()
        return _distinct(guaranteed + self.probabilistic_fill(guaranteed))

    def build_sections(self) -> List[Section]:
        sections = []
        for course in self.select_courses():
            if course.course_code in CORE_CODES:
                copies = SECTION_COUNTS.get(course.course_code, DEFAULT_CORE_SECTIONS)
            else:
                copies = 1
            has_lab = any(marker in course.course_title for marker in LAB_TITLE_MARKERS)

            for number in range(1, copies + 1):
                base_id = f"{course.course_code}-{number}"
                if has_lab:
                    sections.append(self._section(course, f"{base_id}-LEC", LECTURE))
                    sections.append(self._section(course, f"{base_id}-LAB", LAB))
                else:
                    sections.append(self._section(course, base_id, self.components[course.course_code]))

        print(f" -> Course selection complete. Total schedulable components: {len(sections)}")
        return sections

    def _section(self, course: MasterCourse, section_id: str, component: str) -> Section:
        return Section(
            section_id=section_id,
            course_code=course.course_code,
            department=course.department,
            course_level=course.course_level,
            component=component,
            enrollment_cap=enrollment_cap(course, component),
        )

def enrollment_cap(course: MasterCourse, component: str) -> Optional[int]:
    if component == STUDIO:
        return 15
    if component == LAB:
        return 20
    if course.course_code == "PSYC 101":
        return 75
    if component == INDEPENDENT_STUDY:
        return None
    if course.department == "FYS":
        return 16
    if course.department in FOREIGN_LANGUAGE_DEPTS and course.course_level < 111:
        return 25
    if course.course_level < 200:
        return 40
    if course.course_level < 300:
        return 30
    if course.course_level < 500:
        return 15
    return 20

def _distinct(courses: List[MasterCourse]) -> List[MasterCourse]:
    seen = set()
    unique = []
    for course in courses:
        if course.course_code not in seen:
            seen.add(course.course_code)
            unique.append(course)
    return unique
