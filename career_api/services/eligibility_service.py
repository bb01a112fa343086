"""
Eligibility Service - decides whether a student's subject grades satisfy a
course's entry requirements.

Course requirements look like:
{
    "subjects": ["Mathematics", "English"],
    "min_grades": {"Mathematics": "B", "English": "C"}
}

The check fails closed: a course without requirements, a student without
subjects, or any unexpected data shape is treated as not eligible.
"""

import logging
from typing import Dict, List, Optional, Any

from career_api.services.grading import grade_points

logger = logging.getLogger(__name__)


def grades_from_subjects(subjects: Optional[List[dict]]) -> Dict[str, str]:
    """Build a {subject name: grade} map from [{"name", "grade"}] entries."""
    grades = {}
    for subject in subjects or []:
        if isinstance(subject, dict) and subject.get("name"):
            grades[subject["name"]] = subject.get("grade")
    return grades


def _lookup_grade(grades: Dict[str, Any], subject: str) -> Optional[str]:
    """Case-insensitive exact-name lookup."""
    wanted = subject.strip().lower()
    for name, grade in grades.items():
        if isinstance(name, str) and name.strip().lower() == wanted:
            return grade
    return None


def is_eligible(course: dict, student_subjects: Optional[List[dict]], student_grades: Optional[Dict[str, str]]) -> bool:
    """
    True when every required subject is present among the student's subjects
    and its grade is worth at least the course minimum.

    A required subject without a declared minimum only has to be present.
    An empty required-subject list is satisfied by anyone.
    """
    try:
        requirements = (course or {}).get("requirements")
        if not requirements or student_subjects is None or student_grades is None:
            return False

        required_subjects = requirements.get("subjects")
        min_grades = requirements.get("min_grades")
        if required_subjects is None or min_grades is None:
            return False

        subject_names = {
            s["name"].strip().lower() for s in student_subjects
            if isinstance(s, dict) and isinstance(s.get("name"), str)
        }

        for subject in required_subjects:
            if subject.strip().lower() not in subject_names:
                return False
            achieved = _lookup_grade(student_grades, subject)
            if achieved is None:
                return False
            required = _lookup_grade(min_grades, subject)
            if grade_points(achieved) < grade_points(required):
                return False
        return True
    except Exception:
        logger.exception("Eligibility check failed for course %s", (course or {}).get("id"))
        return False


def eligible_courses(courses: List[dict], student_subjects: List[dict], student_grades: Dict[str, str]) -> List[dict]:
    return [c for c in courses if is_eligible(c, student_subjects, student_grades)]
