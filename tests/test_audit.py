from regsim.audit import ScheduleAuditor
from regsim.model import Enrollment, INDEPENDENT_STUDY

def test_independent_study_never_over_capacity(make_section, make_slot):
    lecture = make_section("MATH 105-1", cap=1, slot=make_slot("MWF", "09:00", "09:50"))
    thesis = make_section("MATH 457-1", cap=1, component=INDEPENDENT_STUDY, level=457)
    enrollments = [Enrollment(n, "MATH 457-1", "thesis") for n in range(1, 4)]
    enrollments += [Enrollment(1, "MATH 105-1"), Enrollment(2, "MATH 105-1")]

    conflicts = ScheduleAuditor([lecture, thesis]).seat_conflicts(enrollments)

    assert conflicts == ["CAPACITY CONFLICT: MATH 105-1 has 2 students for 1 seats"]
