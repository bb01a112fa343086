"""Letter grade to point value lookup."""

GRADE_POINTS = {
    "A": 90,
    "B": 80,
    "C": 70,
    "D": 60,
    "E": 50,
    "F": 0,
}


def grade_points(grade) -> int:
    """Points for a letter grade; unknown or missing grades are worth 0."""
    if not isinstance(grade, str):
        return 0
    return GRADE_POINTS.get(grade.strip().upper(), 0)
