from dataclasses import dataclass, field
from typing import Dict, List, Tuple

class DataIntegrityError(ValueError):
    """
    Fatal error: the catalog (or the run setup derived from it) is malformed.
    Raised before any allocation happens; carries every problem found.
    """

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        detail = "; ".join(self.problems[:5])
        if len(self.problems) > 5:
            detail += f" ... and {len(self.problems) - 5} more"
        super().__init__(f"Integrity check failed ({len(self.problems)} problems): {detail}")

@dataclass(frozen=True)
class AllocationShortfall:
    section_id: str
    component: str
    enrollment_cap: int
    room_types: Tuple[str, ...]

    def describe(self) -> str:
        return f"UNSCHEDULED: {self.section_id} ({self.component}, cap {self.enrollment_cap}) found no free {'/'.join(self.room_types)} slot"

@dataclass(frozen=True)
class EnrollmentShortfall:
    student_id: int
    enrolled: int
    target: int

    def describe(self) -> str:
        return f"UNDER-ENROLLED: student {self.student_id} has {self.enrolled}/{self.target} courses"

@dataclass(frozen=True)
class ThesisPlacementFallback:
    student_id: int
    major: str
    section_id: str

    def describe(self) -> str:
        return f"THESIS FALLBACK: student {self.student_id} ({self.major}) placed in {self.section_id}"

@dataclass
class ShortfallReport:
    allocation_shortfalls: List[AllocationShortfall] = field(default_factory=list)
    enrollment_shortfalls: List[EnrollmentShortfall] = field(default_factory=list)
    thesis_fallbacks: List[ThesisPlacementFallback] = field(default_factory=list)

    def summary(self) -> Dict[str, int]:
        return {
            "allocation_shortfalls": len(self.allocation_shortfalls),
            "enrollment_shortfalls": len(self.enrollment_shortfalls),
            "thesis_fallbacks": len(self.thesis_fallbacks),
        }

    @property
    def total(self) -> int:
        return sum(self.summary().values())

    def describe(self) -> List[str]:
        lines = [s.describe() for s in self.allocation_shortfalls]
        lines += [s.describe() for s in self.enrollment_shortfalls]
        lines += [s.describe() for s in self.thesis_fallbacks]
        return lines
