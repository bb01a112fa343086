"""
Student Routes

GET /students/profile - Get own profile
PUT /students/profile - Update profile (subjects, scores, skills, ...)
GET /students/dashboard - Application/job stats
GET /students/applications - List own course applications
POST /students/applications/apply - Apply to a course
DELETE /students/applications/{application_id} - Delete a pending application
GET /students/admissions - Published admission offers
POST /students/admissions/accept - Accept an admission offer
GET /students/jobs - Open jobs with match scores
GET /students/jobs/recommendations - Best matching jobs
GET /students/jobs/applications - List own job applications
POST /students/transcript - Upload academic transcript (PDF data URI)
POST /students/transcript/final - Upload final transcript (after completing studies)
POST /students/certificates - Upload a certificate (after completing studies)
POST /students/studies/completed - Mark studies as completed
GET /students/documents - List uploaded documents
DELETE /students/documents/{document_id} - Delete a document
"""

import logging

from fastapi import APIRouter, HTTPException, Depends

from career_api.core.auth import get_current_student
from career_api.db.mongodb import COLLECTIONS
from career_api.schemas.schemas import (
    StudentProfileUpdate, CourseApplicationCreate, AcceptOfferRequest,
    DocumentUpload, CertificateUpload, MessageResponse
)
from career_api.services.admission_service import AdmissionService, get_admission_service
from career_api.services.document_store import DocumentStore, get_document_store, utcnow
from career_api.services.matching_service import (
    RecommendationService, get_recommendation_service, score_applicant, is_interview_ready
)
from career_api.services.notification_service import NotificationService, get_notification_service
from career_api.utils.file_upload import decode_pdf_data_uri
from career_api.utils.helpers import to_document, without_file_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["Students"])

TRANSCRIPT_FIELDS = {
    "transcript_data": None,
    "transcript_file_name": None,
    "transcript_file_size": None,
    "transcript_uploaded_at": None,
    "transcript_verified": False,
    "transcript_rejected": False,
    "transcript_rejection_reason": None,
}

FINAL_TRANSCRIPT_FIELDS = {
    "final_transcript_data": None,
    "final_transcript_file_name": None,
    "final_transcript_file_size": None,
    "final_transcript_uploaded_at": None,
    "final_transcript_verified": False,
}


# ============================================================
# PROFILE
# ============================================================

@router.get("/profile")
async def get_profile(student: dict = Depends(get_current_student)):
    """Get the current student's profile (file payloads omitted)."""
    return {"success": True, "student": without_file_data(student["profile"])}


@router.put("/profile")
async def update_profile(
    update: StudentProfileUpdate,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store)
):
    """Update profile fields. Only fields present in the body change."""
    fields = to_document(update.model_dump(exclude_unset=True))
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = store.update(COLLECTIONS["students"], student["user_id"], fields)
    return {"success": True, "message": "Profile updated successfully", "student": without_file_data(updated)}


@router.get("/dashboard")
async def get_dashboard(
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store),
    notifications: NotificationService = Depends(get_notification_service)
):
    """Summary counts for the student's home screen."""
    student_id = student["user_id"]
    applications = store.find(COLLECTIONS["applications"], {"student_id": student_id})
    job_applications = store.find(COLLECTIONS["job_applications"], {"student_id": student_id})

    by_status = {}
    for application in applications:
        by_status[application["status"]] = by_status.get(application["status"], 0) + 1

    profile = student["profile"]
    return {
        "success": True,
        "stats": {
            "total_applications": len(applications),
            "applications_by_status": by_status,
            "admission_offers": sum(
                1 for a in applications if a["status"] == "admitted" and a.get("admission_published")
            ),
            "job_applications": len(job_applications),
            "interview_ready_applications": sum(1 for a in job_applications if a.get("interview_ready")),
            "unread_notifications": notifications.unread_count(student_id),
            "has_transcript": bool(profile.get("has_transcript")),
            "study_completed": bool(profile.get("study_completed")),
            "certificates": len(profile.get("certificates") or []),
        }
    }


# ============================================================
# COURSE APPLICATIONS
# ============================================================

@router.get("/applications")
async def list_applications(
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store)
):
    applications = store.find(
        COLLECTIONS["applications"],
        {"student_id": student["user_id"]},
        sort=[("applied_at", -1)]
    )
    return {"success": True, "applications": applications}


@router.post("/applications/apply", status_code=201)
async def apply_for_course(
    request: CourseApplicationCreate,
    student: dict = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service)
):
    """Apply to a course (max 2 per institution, must meet requirements)."""
    application = admissions.submit(student["user_id"], request.course_id)
    return {"success": True, "message": "Application submitted successfully", "application": application}


@router.delete("/applications/{application_id}", response_model=MessageResponse)
async def delete_application(
    application_id: str,
    student: dict = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service)
):
    admissions.withdraw(student["user_id"], application_id)
    return MessageResponse(message="Application deleted successfully")


@router.get("/admissions")
async def list_admissions(
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store)
):
    """Admitted applications whose results have been published."""
    admissions = store.find(COLLECTIONS["applications"], {
        "student_id": student["user_id"],
        "status": "admitted",
        "admission_published": True
    })
    return {"success": True, "admissions": admissions}


@router.post("/admissions/accept")
async def accept_admission(
    request: AcceptOfferRequest,
    student: dict = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service)
):
    """Accept one offer; other admitted offers are declined automatically."""
    result = admissions.accept_offer(student["user_id"], request.application_id)
    return {"success": True, "message": "Admission offer accepted successfully", **result}


# ============================================================
# JOBS
# ============================================================

@router.get("/jobs")
async def list_jobs(
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store),
    recommender: RecommendationService = Depends(get_recommendation_service)
):
    """Open jobs with the student's match score and whether they already applied."""
    applied = {
        a["job_id"] for a in store.find(COLLECTIONS["job_applications"], {"student_id": student["user_id"]})
    }
    jobs = []
    for job in recommender.open_jobs():
        match_score = score_applicant(student["profile"], job)
        jobs.append({
            **job,
            "has_applied": job["id"] in applied,
            "match_score": match_score,
            "interview_ready": is_interview_ready(match_score),
        })
    return {"success": True, "jobs": jobs}


@router.get("/jobs/recommendations")
async def job_recommendations(
    student: dict = Depends(get_current_student),
    recommender: RecommendationService = Depends(get_recommendation_service)
):
    """Jobs scoring 50 or more, best first. Needs an uploaded transcript."""
    if not student["profile"].get("has_transcript"):
        return {
            "success": True,
            "jobs": [],
            "message": "Upload your transcript to get job recommendations"
        }
    return {"success": True, "jobs": recommender.recommend(student["profile"])}


@router.get("/jobs/applications")
async def list_job_applications(
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store)
):
    applications = store.find(
        COLLECTIONS["job_applications"],
        {"student_id": student["user_id"]},
        sort=[("applied_at", -1)]
    )
    return {"success": True, "applications": applications}


# ============================================================
# DOCUMENTS
# ============================================================

@router.post("/transcript")
async def upload_transcript(
    upload: DocumentUpload,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store)
):
    """Upload the academic transcript. Replaces any previous one."""
    pdf = decode_pdf_data_uri(upload.file_data)
    store.update(COLLECTIONS["students"], student["user_id"], {
        "transcript_data": upload.file_data,
        "transcript_file_name": upload.file_name or "transcript.pdf",
        "transcript_file_size": pdf.size,
        "transcript_uploaded_at": utcnow(),
        "transcript_verified": False,
        "transcript_rejected": False,
        "transcript_rejection_reason": None,
        "has_transcript": True,
    })
    logger.info("Student %s uploaded transcript (%d bytes, %d pages)", student["user_id"], pdf.size, pdf.pages)
    return {"success": True, "message": "Transcript uploaded successfully", "file_size": pdf.size}


@router.post("/transcript/final")
async def upload_final_transcript(
    upload: DocumentUpload,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store)
):
    """Upload the final transcript. Only after studies are marked completed."""
    if not student["profile"].get("study_completed"):
        raise HTTPException(status_code=400, detail="Please mark your studies as completed first")

    pdf = decode_pdf_data_uri(upload.file_data)
    store.update(COLLECTIONS["students"], student["user_id"], {
        "final_transcript_data": upload.file_data,
        "final_transcript_file_name": upload.file_name or "final_transcript.pdf",
        "final_transcript_file_size": pdf.size,
        "final_transcript_uploaded_at": utcnow(),
        "final_transcript_verified": False,
        "has_transcript": True,
    })
    return {"success": True, "message": "Final transcript uploaded successfully", "file_size": pdf.size}


@router.post("/certificates", status_code=201)
async def upload_certificate(
    upload: CertificateUpload,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store)
):
    """Upload a certificate. Only after studies are marked completed."""
    if not student["profile"].get("study_completed"):
        raise HTTPException(status_code=400, detail="Please mark your studies as completed first")

    pdf = decode_pdf_data_uri(upload.file_data)
    certificates = list(student["profile"].get("certificates") or [])
    certificates.append({
        "name": upload.name,
        "data": upload.file_data,
        "file_name": upload.file_name or f"{upload.name}.pdf",
        "size": pdf.size,
        "file_type": "application/pdf",
        "verified": False,
        "uploaded_at": utcnow(),
    })
    store.update(COLLECTIONS["students"], student["user_id"], {"certificates": certificates})
    return {"success": True, "message": "Certificate uploaded successfully", "certificates_count": len(certificates)}


@router.post("/studies/completed", response_model=MessageResponse)
async def mark_studies_completed(
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store)
):
    store.update(COLLECTIONS["students"], student["user_id"], {
        "study_completed": True,
        "study_completed_at": utcnow(),
    })
    return MessageResponse(message="Studies marked as completed. You can now upload final documents.")


def _document_list(profile: dict) -> list:
    documents = []
    if profile.get("transcript_data"):
        documents.append({
            "id": "transcript",
            "type": "transcript",
            "name": "Academic Transcript",
            "file_name": profile.get("transcript_file_name"),
            "size": profile.get("transcript_file_size"),
            "uploaded_at": profile.get("transcript_uploaded_at"),
            "verified": bool(profile.get("transcript_verified")),
        })
    if profile.get("final_transcript_data"):
        documents.append({
            "id": "final-transcript",
            "type": "final_transcript",
            "name": "Final Transcript",
            "file_name": profile.get("final_transcript_file_name"),
            "size": profile.get("final_transcript_file_size"),
            "uploaded_at": profile.get("final_transcript_uploaded_at"),
            "verified": bool(profile.get("final_transcript_verified")),
        })
    for index, cert in enumerate(profile.get("certificates") or []):
        documents.append({
            "id": f"certificate-{index}",
            "type": "certificate",
            "name": cert.get("name"),
            "file_name": cert.get("file_name"),
            "size": cert.get("size"),
            "uploaded_at": cert.get("uploaded_at"),
            "verified": bool(cert.get("verified")),
        })
    return documents


@router.get("/documents")
async def list_documents(student: dict = Depends(get_current_student)):
    return {"success": True, "documents": _document_list(student["profile"])}


@router.delete("/documents/{document_id}", response_model=MessageResponse)
async def delete_document(
    document_id: str,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_document_store)
):
    """
    Delete a document by the id shown in GET /students/documents:
    "transcript", "final-transcript" or "certificate-<n>".
    """
    profile = student["profile"]

    if document_id == "transcript" and profile.get("transcript_data"):
        fields = {**TRANSCRIPT_FIELDS, "has_transcript": bool(profile.get("final_transcript_data"))}
    elif document_id == "final-transcript" and profile.get("final_transcript_data"):
        fields = {**FINAL_TRANSCRIPT_FIELDS, "has_transcript": bool(profile.get("transcript_data"))}
    elif document_id.startswith("certificate-"):
        certificates = list(profile.get("certificates") or [])
        index = document_id[len("certificate-"):]
        if not index.isdigit() or int(index) >= len(certificates):
            raise HTTPException(status_code=404, detail="Document not found")
        certificates.pop(int(index))
        fields = {"certificates": certificates}
    else:
        raise HTTPException(status_code=404, detail="Document not found")

    store.update(COLLECTIONS["students"], student["user_id"], fields)
    return MessageResponse(message="Document deleted successfully")
