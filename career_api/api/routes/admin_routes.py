"""
Admin Routes

GET /admin/dashboard - Platform statistics
GET /admin/users - List user accounts (optional role filter)
GET /admin/institutions - List institutions
GET /admin/companies - List companies
PUT /admin/institutions/{institution_id}/approve - Approve institution
PUT /admin/institutions/{institution_id}/suspend - Suspend institution
PUT /admin/companies/{company_id}/approve - Approve company
PUT /admin/companies/{company_id}/suspend - Suspend company
GET /admin/transcripts/pending - Transcripts awaiting verification
PUT /admin/transcripts/{student_id}/approve - Verify a student's transcript
PUT /admin/transcripts/{student_id}/reject - Reject a student's transcript
GET /admin/reports - Reports (type=applications|jobs)
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from career_api.core.auth import get_current_admin
from career_api.db.mongodb import COLLECTIONS
from career_api.schemas.schemas import TranscriptRejection, UserRole, MessageResponse
from career_api.services.document_store import DocumentStore, get_document_store, utcnow
from career_api.services.notification_service import NotificationService, get_notification_service
from career_api.utils.helpers import full_name, without_file_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(get_current_admin)])

ORGANIZATION_COLLECTIONS = {
    "institutions": (COLLECTIONS["institutions"], "Institution"),
    "companies": (COLLECTIONS["companies"], "Company"),
}


def _count_by(docs: list, field_name: str, default: str) -> dict:
    counts = {}
    for doc in docs:
        key = doc.get(field_name) or default
        counts[key] = counts.get(key, 0) + 1
    return counts


@router.get("/dashboard")
async def get_dashboard(store: DocumentStore = Depends(get_document_store)):
    users = store.find(COLLECTIONS["users"])
    return {
        "success": True,
        "stats": {
            "total_users": len(users),
            "users_by_role": _count_by(users, "role", "unknown"),
            "institutions": store.count(COLLECTIONS["institutions"]),
            "pending_institutions": store.count(COLLECTIONS["institutions"], {"approved": False}),
            "companies": store.count(COLLECTIONS["companies"]),
            "pending_companies": store.count(COLLECTIONS["companies"], {"approved": False}),
            "courses": store.count(COLLECTIONS["courses"]),
            "jobs": store.count(COLLECTIONS["jobs"]),
            "applications": store.count(COLLECTIONS["applications"]),
            "job_applications": store.count(COLLECTIONS["job_applications"]),
            "pending_transcripts": len(_pending_transcripts(store)),
        }
    }


@router.get("/users")
async def list_users(
    role: Optional[UserRole] = Query(None),
    store: DocumentStore = Depends(get_document_store)
):
    filters = {"role": role.value} if role else {}
    users = store.find(COLLECTIONS["users"], filters, sort=[("created_at", -1)])
    return {"success": True, "users": [without_file_data(u) for u in users]}


@router.get("/institutions")
async def list_institutions(store: DocumentStore = Depends(get_document_store)):
    institutions = store.find(COLLECTIONS["institutions"], sort=[("created_at", -1)])
    return {"success": True, "institutions": institutions}


@router.get("/companies")
async def list_companies(store: DocumentStore = Depends(get_document_store)):
    companies = store.find(COLLECTIONS["companies"], sort=[("created_at", -1)])
    return {"success": True, "companies": companies}


def _set_approval(store: DocumentStore, notifications: NotificationService,
                  kind: str, org_id: str, approved: bool) -> dict:
    """Approve or suspend an institution/company and (de)activate its login."""
    collection, label = ORGANIZATION_COLLECTIONS[kind]
    if not store.get(collection, org_id):
        raise HTTPException(status_code=404, detail=f"{label} not found")

    updated = store.update(collection, org_id, {
        "approved": approved,
        "approved_at" if approved else "suspended_at": utcnow(),
    })
    store.update(COLLECTIONS["users"], org_id, {"active": approved})

    if approved:
        notifications.emit(org_id, "Account Approved", "Your account has been approved by the administrator.", "success")
    logger.info("%s %s %s", kind, org_id, "approved" if approved else "suspended")
    return updated


@router.put("/institutions/{institution_id}/approve")
async def approve_institution(
    institution_id: str,
    store: DocumentStore = Depends(get_document_store),
    notifications: NotificationService = Depends(get_notification_service)
):
    updated = _set_approval(store, notifications, "institutions", institution_id, True)
    return {"success": True, "message": "Institution approved successfully", "institution": updated}


@router.put("/institutions/{institution_id}/suspend")
async def suspend_institution(
    institution_id: str,
    store: DocumentStore = Depends(get_document_store),
    notifications: NotificationService = Depends(get_notification_service)
):
    updated = _set_approval(store, notifications, "institutions", institution_id, False)
    return {"success": True, "message": "Institution suspended successfully", "institution": updated}


@router.put("/companies/{company_id}/approve")
async def approve_company(
    company_id: str,
    store: DocumentStore = Depends(get_document_store),
    notifications: NotificationService = Depends(get_notification_service)
):
    updated = _set_approval(store, notifications, "companies", company_id, True)
    return {"success": True, "message": "Company approved successfully", "company": updated}


@router.put("/companies/{company_id}/suspend")
async def suspend_company(
    company_id: str,
    store: DocumentStore = Depends(get_document_store),
    notifications: NotificationService = Depends(get_notification_service)
):
    updated = _set_approval(store, notifications, "companies", company_id, False)
    return {"success": True, "message": "Company suspended successfully", "company": updated}


# ============================================================
# TRANSCRIPT VERIFICATION
# ============================================================

def _pending_transcripts(store: DocumentStore) -> list:
    students = store.find(COLLECTIONS["students"], {"has_transcript": True})
    return [
        s for s in students
        if s.get("transcript_data") and not s.get("transcript_verified") and not s.get("transcript_rejected")
    ]


@router.get("/transcripts/pending")
async def list_pending_transcripts(store: DocumentStore = Depends(get_document_store)):
    """Students whose uploaded transcript has not been reviewed yet (includes the file)."""
    pending = [
        {
            "student_id": s["id"],
            "student_name": full_name(s),
            "email": s.get("email"),
            "transcript_data": s.get("transcript_data"),
            "transcript_file_name": s.get("transcript_file_name"),
            "transcript_file_size": s.get("transcript_file_size"),
            "transcript_uploaded_at": s.get("transcript_uploaded_at"),
        }
        for s in _pending_transcripts(store)
    ]
    return {"success": True, "pending_transcripts": pending}


def _student_with_transcript(store: DocumentStore, student_id: str) -> dict:
    student = store.get(COLLECTIONS["students"], student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    if not student.get("transcript_data"):
        raise HTTPException(status_code=400, detail="Student has not uploaded a transcript")
    return student


@router.put("/transcripts/{student_id}/approve", response_model=MessageResponse)
async def approve_transcript(
    student_id: str,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_document_store),
    notifications: NotificationService = Depends(get_notification_service)
):
    _student_with_transcript(store, student_id)
    store.update(COLLECTIONS["students"], student_id, {
        "transcript_verified": True,
        "transcript_rejected": False,
        "transcript_verified_at": utcnow(),
        "transcript_verified_by": admin["user_id"],
    })
    notifications.emit(student_id, "Transcript Verified", "Your academic transcript has been verified.", "success")
    return MessageResponse(message="Transcript approved successfully")


@router.put("/transcripts/{student_id}/reject", response_model=MessageResponse)
async def reject_transcript(
    student_id: str,
    rejection: TranscriptRejection,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_document_store),
    notifications: NotificationService = Depends(get_notification_service)
):
    _student_with_transcript(store, student_id)
    store.update(COLLECTIONS["students"], student_id, {
        "transcript_verified": False,
        "transcript_rejected": True,
        "transcript_rejection_reason": rejection.reason,
        "transcript_rejected_at": utcnow(),
        "transcript_rejected_by": admin["user_id"],
    })
    notifications.emit(
        student_id,
        "Transcript Rejected",
        f"Your transcript was rejected: {rejection.reason}. Please upload a new copy.",
        "warning"
    )
    return MessageResponse(message="Transcript rejected successfully")


# ============================================================
# REPORTS
# ============================================================

@router.get("/reports")
async def get_reports(
    type: str = Query("applications", pattern="^(applications|jobs)$"),
    store: DocumentStore = Depends(get_document_store)
):
    if type == "applications":
        applications = store.find(COLLECTIONS["applications"])
        report = {
            "by_status": _count_by(applications, "status", "pending"),
            "by_institution": _count_by(applications, "institution_name", "unknown"),
            "total": len(applications),
        }
    else:
        job_applications = store.find(COLLECTIONS["job_applications"])
        report = {
            "jobs_by_industry": _count_by(store.find(COLLECTIONS["jobs"]), "company_industry", "unspecified"),
            "applications_by_status": _count_by(job_applications, "status", "pending"),
            "interview_ready": sum(1 for a in job_applications if a.get("interview_ready")),
            "total_applications": len(job_applications),
        }
    return {"success": True, "type": type, "report": report}
