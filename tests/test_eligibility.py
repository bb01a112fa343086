import pytest

from career_api.services.eligibility_service import eligible_courses, grades_from_subjects, is_eligible
from career_api.services.grading import grade_points


def course(subjects, min_grades):
    return {"id": "c1", "requirements": {"subjects": subjects, "min_grades": min_grades}}


def student(**grades):
    subjects = [{"name": name, "grade": grade} for name, grade in grades.items()]
    return subjects, grades_from_subjects(subjects)


@pytest.mark.parametrize("grade,points", [
    ("A", 90), ("B", 80), ("C", 70), ("D", 60), ("E", 50), ("F", 0),
    ("a", 90), (" b ", 80), ("Z", 0), (None, 0), ("", 0),
])
def test_grade_points(grade, points):
    assert grade_points(grade) == points


def test_grades_at_or_above_minimum_are_eligible():
    c = course(["Math", "English"], {"Math": "B", "English": "B"})
    assert is_eligible(c, *student(Math="A", English="B")) is True


def test_missing_required_subject_is_ineligible():
    c = course(["Math", "English"], {"Math": "B", "English": "B"})
    assert is_eligible(c, *student(Math="A", Science="C")) is False


def test_grade_below_minimum_is_ineligible():
    c = course(["Math"], {"Math": "B"})
    assert is_eligible(c, *student(Math="C")) is False


def test_subject_names_match_case_insensitively():
    c = course(["mathematics"], {"Mathematics": "C"})
    assert is_eligible(c, *student(MATHEMATICS="B")) is True


def test_subject_without_minimum_only_needs_to_be_present():
    c = course(["Math", "Art"], {"Math": "C"})
    assert is_eligible(c, *student(Math="C", Art="F")) is True
    assert is_eligible(c, *student(Math="C")) is False


def test_empty_requirement_list_is_vacuously_eligible():
    assert is_eligible(course([], {}), *student(Math="F")) is True


@pytest.mark.parametrize("bad_course", [
    {},
    {"requirements": None},
    {"requirements": {"min_grades": {}}},
    {"requirements": {"subjects": ["Math"]}},
])
def test_course_without_requirements_fails_closed(bad_course):
    assert is_eligible(bad_course, *student(Math="A")) is False


def test_student_without_subjects_fails_closed():
    c = course(["Math"], {"Math": "C"})
    assert is_eligible(c, None, None) is False


def test_malformed_data_fails_closed_instead_of_raising():
    c = {"requirements": {"subjects": [42], "min_grades": {}}}
    assert is_eligible(c, *student(Math="A")) is False


def test_eligible_courses_filters_list():
    easy = {**course(["Math"], {"Math": "D"}), "id": "easy"}
    hard = {**course(["Math"], {"Math": "A"}), "id": "hard"}
    result = eligible_courses([easy, hard], *student(Math="B"))
    assert [c["id"] for c in result] == ["easy"]
