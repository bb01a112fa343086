"""
Institution Routes

GET /institutions - List approved institutions (public)
GET /institutions/profile - Get own profile
PUT /institutions/profile - Update profile
GET /institutions/courses - List own courses
POST /institutions/courses - Create course
PUT /institutions/courses/{course_id} - Update course
DELETE /institutions/courses/{course_id} - Delete course
GET /institutions/applications - List applications (filter by status/course)
PUT /institutions/applications/{application_id} - Decide on an application
PUT /institutions/applications/{application_id}/promote - Admit a waitlisted applicant
POST /institutions/admissions/publish - Publish admission results for a course
GET /institutions/prospectus - List own prospectuses
POST /institutions/prospectus - Upload prospectus (PDF data URI)
PUT /institutions/prospectus/{prospectus_id}/publish - Publish prospectus
DELETE /institutions/prospectus/{prospectus_id} - Delete prospectus
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from career_api.core.auth import get_current_institution
from career_api.db.mongodb import COLLECTIONS
from career_api.schemas.schemas import (
    OrganizationProfileUpdate, CourseCreate, CourseUpdate, ApplicationDecision,
    ApplicationStatus, PublishAdmissionsRequest, ProspectusCreate, MessageResponse
)
from career_api.services.admission_service import AdmissionService, get_admission_service
from career_api.services.document_store import DocumentStore, get_document_store, utcnow
from career_api.utils.file_upload import decode_pdf_data_uri
from career_api.utils.helpers import to_document, without_file_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/institutions", tags=["Institutions"])


def _owned_course(store: DocumentStore, institution_id: str, course_id: str) -> dict:
    course = store.get(COLLECTIONS["courses"], course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    if course["institution_id"] != institution_id:
        raise HTTPException(status_code=403, detail="Not authorized to manage this course")
    return course


def _owned_prospectus(store: DocumentStore, institution_id: str, prospectus_id: str) -> dict:
    prospectus = store.get(COLLECTIONS["prospectuses"], prospectus_id)
    if not prospectus:
        raise HTTPException(status_code=404, detail="Prospectus not found")
    if prospectus["institution_id"] != institution_id:
        raise HTTPException(status_code=403, detail="Not authorized to manage this prospectus")
    return prospectus


# ============================================================
# PUBLIC
# ============================================================

@router.get("")
async def list_institutions(store: DocumentStore = Depends(get_document_store)):
    """List approved institutions with their course counts."""
    institutions = store.find(COLLECTIONS["institutions"], {"approved": True}, sort=[("name", 1)])
    for institution in institutions:
        institution["course_count"] = store.count(COLLECTIONS["courses"], {"institution_id": institution["id"]})
    return {"success": True, "institutions": institutions}


# ============================================================
# PROFILE
# ============================================================

@router.get("/profile")
async def get_profile(institution: dict = Depends(get_current_institution)):
    return {"success": True, "institution": institution["profile"]}


@router.put("/profile")
async def update_profile(
    update: OrganizationProfileUpdate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    fields = to_document(update.model_dump(exclude_unset=True))
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = store.update(COLLECTIONS["institutions"], institution["user_id"], fields)
    return {"success": True, "message": "Profile updated successfully", "institution": updated}


# ============================================================
# COURSES
# ============================================================

@router.get("/courses")
async def list_courses(
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    courses = store.find(
        COLLECTIONS["courses"],
        {"institution_id": institution["user_id"]},
        sort=[("created_at", -1)]
    )
    return {"success": True, "courses": courses}


@router.post("/courses", status_code=201)
async def create_course(
    course: CourseCreate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    doc = to_document(course.model_dump())
    doc.update({
        "institution_id": institution["user_id"],
        "institution_name": institution["profile"].get("name"),
    })
    created = store.insert(COLLECTIONS["courses"], doc)
    logger.info("Institution %s created course %s", institution["user_id"], created["id"])
    return {"success": True, "message": "Course created successfully", "course": created}


@router.put("/courses/{course_id}")
async def update_course(
    course_id: str,
    update: CourseUpdate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    _owned_course(store, institution["user_id"], course_id)
    fields = to_document(update.model_dump(exclude_unset=True))
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = store.update(COLLECTIONS["courses"], course_id, fields)
    return {"success": True, "message": "Course updated successfully", "course": updated}


@router.delete("/courses/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    _owned_course(store, institution["user_id"], course_id)
    store.delete(COLLECTIONS["courses"], course_id)
    return MessageResponse(message="Course deleted successfully")


# ============================================================
# APPLICATIONS & ADMISSIONS
# ============================================================

@router.get("/applications")
async def list_applications(
    status: Optional[ApplicationStatus] = Query(None),
    course_id: Optional[str] = Query(None),
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    filters = {"institution_id": institution["user_id"]}
    if status:
        filters["status"] = status.value
    if course_id:
        filters["course_id"] = course_id

    applications = store.find(COLLECTIONS["applications"], filters, sort=[("applied_at", 1)])
    return {"success": True, "applications": applications}


@router.put("/applications/{application_id}")
async def decide_application(
    application_id: str,
    decision: ApplicationDecision,
    institution: dict = Depends(get_current_institution),
    admissions: AdmissionService = Depends(get_admission_service)
):
    """Admit, reject or waitlist an application."""
    application = admissions.decide(
        institution["user_id"], application_id, decision.status.value,
        decision.notes, decision.rejection_reason
    )
    return {"success": True, "message": f"Application {decision.status.value}", "application": application}


@router.put("/applications/{application_id}/promote")
async def promote_application(
    application_id: str,
    institution: dict = Depends(get_current_institution),
    admissions: AdmissionService = Depends(get_admission_service)
):
    """Admit a waitlisted applicant by hand (e.g. after a failed automatic promotion)."""
    application = admissions.promote(institution["user_id"], application_id)
    return {"success": True, "message": "Applicant promoted from waitlist", "application": application}


@router.post("/admissions/publish")
async def publish_admissions(
    request: PublishAdmissionsRequest,
    institution: dict = Depends(get_current_institution),
    admissions: AdmissionService = Depends(get_admission_service)
):
    published = admissions.publish(institution["user_id"], request.course_id)
    return {"success": True, "message": "Admissions published successfully", "published_count": published}


# ============================================================
# PROSPECTUS
# ============================================================

@router.get("/prospectus")
async def list_prospectuses(
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    prospectuses = store.find(
        COLLECTIONS["prospectuses"],
        {"institution_id": institution["user_id"]},
        sort=[("created_at", -1)]
    )
    return {"success": True, "prospectuses": [without_file_data(p) for p in prospectuses]}


@router.post("/prospectus", status_code=201)
async def upload_prospectus(
    prospectus: ProspectusCreate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    pdf = decode_pdf_data_uri(prospectus.file_data)
    created = store.insert(COLLECTIONS["prospectuses"], {
        "institution_id": institution["user_id"],
        "institution_name": institution["profile"].get("name"),
        "title": prospectus.title,
        "description": prospectus.description,
        "academic_year": prospectus.academic_year,
        "file_data": prospectus.file_data,
        "file_name": prospectus.file_name or "prospectus.pdf",
        "file_size": pdf.size,
        "published": False,
    })
    return {"success": True, "message": "Prospectus uploaded successfully", "prospectus": without_file_data(created)}


@router.put("/prospectus/{prospectus_id}/publish")
async def publish_prospectus(
    prospectus_id: str,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    _owned_prospectus(store, institution["user_id"], prospectus_id)
    updated = store.update(COLLECTIONS["prospectuses"], prospectus_id, {
        "published": True,
        "published_at": utcnow(),
    })
    return {"success": True, "message": "Prospectus published successfully", "prospectus": without_file_data(updated)}


@router.delete("/prospectus/{prospectus_id}", response_model=MessageResponse)
async def delete_prospectus(
    prospectus_id: str,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_document_store)
):
    _owned_prospectus(store, institution["user_id"], prospectus_id)
    store.delete(COLLECTIONS["prospectuses"], prospectus_id)
    return MessageResponse(message="Prospectus deleted successfully")
