"""
Eligibility Routes (public)

POST /eligibility/check - Courses a set of subject grades qualifies for
"""

from fastapi import APIRouter, Depends

from career_api.db.mongodb import COLLECTIONS
from career_api.schemas.schemas import EligibilityCheckRequest
from career_api.services.document_store import DocumentStore, get_document_store
from career_api.services.eligibility_service import eligible_courses, grades_from_subjects

router = APIRouter(prefix="/eligibility", tags=["Eligibility"])


@router.post("/check")
async def check_eligibility(request: EligibilityCheckRequest, store: DocumentStore = Depends(get_document_store)):
    """
    Check which courses the given subjects/grades satisfy.

    Body: {"subjects": [{"name": "Mathematics", "grade": "A"}, ...]}
    (a {"Mathematics": "A"} map is accepted too; "grades" defaults to the
    grades in "subjects")
    """
    subjects = request.subject_list()
    grades = request.grades if request.grades is not None else grades_from_subjects(subjects)

    courses = store.find(COLLECTIONS["courses"])
    eligible = eligible_courses(courses, subjects, grades)

    institutions = {}
    for course in eligible:
        institution_id = course["institution_id"]
        if institution_id not in institutions:
            institutions[institution_id] = store.get(COLLECTIONS["institutions"], institution_id)
        course["institution"] = institutions[institution_id]

    return {
        "success": True,
        "eligible_courses": eligible,
        "total_courses": len(courses),
        "eligible_count": len(eligible),
    }
