import random
from typing import Dict, List
from .model import Section, Student, SENIOR, FIRST_YEAR, UNDECLARED

PERSONAS = ["STEM Scientist", "Humanities Scholar", "The Artist", "The Athlete", "Well-Rounded"]

# Probability a student of this persona is female; everyone else uses the default
FEMALE_SHARE_BY_PERSONA = {
    "Humanities Scholar": 0.60,
    "The Artist": 0.60,
    "STEM Scientist": 0.40,
}
DEFAULT_FEMALE_SHARE = 0.52

class RosterGenerator:
    """Builds the synthetic student body the enrollment simulation registers."""

    def __init__(self, sections: List[Section], config: dict):
        self.sections = sections
        self.config = config
        self.rng = random.Random(config['roster_seed'])

    def available_majors(self) -> List[str]:
        excluded = set(self.config.get('non_major_departments', []))
        majors = []
        for section in self.sections:
            if section.department not in excluded and section.department not in majors:
                majors.append(section.department)
        return majors

    def generate(self) -> List[Student]:
        n_students = self.config['n_total_students']
        distribution: Dict[str, float] = self.config['class_year_distribution']
        years = list(distribution.keys())
        weights = [distribution[y] for y in years]

        class_years = self.rng.choices(years, weights=weights, k=n_students)
        majors = self.available_majors()

        students = []
        for idx, class_year in enumerate(class_years, start=1):
            if class_year == FIRST_YEAR or not majors:
                major = UNDECLARED
            else:
                major = self.rng.choice(majors)
            students.append(Student(student_id=idx, class_year=class_year, major=major, persona=""))

        for student in students:
            student.persona = self.rng.choice(PERSONAS)
            female_share = FEMALE_SHARE_BY_PERSONA.get(student.persona, DEFAULT_FEMALE_SHARE)
            student.gender = "F" if self.rng.random() < female_share else "M"

        self._assign_athletes(students)
        self._assign_thesis(students)
        return students

    def _assign_athletes(self, students: List[Student]):
        athlete_share = self.config.get('athlete_distribution', {})
        for class_year in self.config['class_year_distribution']:
            cohort = [s for s in students if s.class_year == class_year]
            n_athletes = min(len(cohort), round(len(cohort) * athlete_share.get(class_year, 0.0)))
            for student in self.rng.sample(cohort, n_athletes):
                student.is_athlete = True
                student.gender = self.rng.choice(["F", "M"])

    def _assign_thesis(self, students: List[Student]):
        seniors = [s for s in students if s.class_year == SENIOR]
        n_thesis = self.config['n_thesis_seniors']
        if n_thesis > len(seniors):
            print(f"⚠️ Warning: {n_thesis} thesis seniors requested but only {len(seniors)} seniors exist. All seniors will write a thesis.")
            n_thesis = len(seniors)
        for student in self.rng.sample(seniors, n_thesis):
            student.is_thesis = True
