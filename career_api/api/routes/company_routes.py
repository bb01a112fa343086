"""
Company Routes

GET /companies/profile - Get own profile
PUT /companies/profile - Update profile
GET /companies/dashboard - Job/applicant stats
GET /companies/jobs - List own jobs
POST /companies/jobs - Post a job
PUT /companies/jobs/{job_id} - Update job
DELETE /companies/jobs/{job_id} - Delete job
GET /companies/jobs/{job_id}/applicants - Applicants ranked by match score
GET /companies/jobs/{job_id}/qualified-applicants - Interview-ready applicants only
GET /companies/candidates/interview-ready - Interview-ready applicants across all jobs
PUT /companies/applications/{application_id}/status - Update job application status
"""

import logging

from fastapi import APIRouter, HTTPException, Depends

from career_api.core.auth import get_current_company
from career_api.db.mongodb import COLLECTIONS
from career_api.schemas.schemas import (
    CompanyProfileUpdate, JobCreate, JobUpdate, JobApplicationStatusUpdate, MessageResponse
)
from career_api.services.document_store import DocumentStore, get_document_store
from career_api.services.job_service import JobApplicationService, get_job_application_service
from career_api.services.matching_service import is_job_open
from career_api.utils.helpers import to_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["Companies"])


# ============================================================
# PROFILE
# ============================================================

@router.get("/profile")
async def get_profile(company: dict = Depends(get_current_company)):
    return {"success": True, "company": company["profile"]}


@router.put("/profile")
async def update_profile(
    update: CompanyProfileUpdate,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_document_store)
):
    fields = to_document(update.model_dump(exclude_unset=True))
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = store.update(COLLECTIONS["companies"], company["user_id"], fields)
    return {"success": True, "message": "Profile updated successfully", "company": updated}


@router.get("/dashboard")
async def get_dashboard(
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_document_store)
):
    company_id = company["user_id"]
    jobs = store.find(COLLECTIONS["jobs"], {"company_id": company_id})
    applications = store.find(COLLECTIONS["job_applications"], {"company_id": company_id})

    by_status = {}
    for application in applications:
        by_status[application["status"]] = by_status.get(application["status"], 0) + 1

    return {
        "success": True,
        "stats": {
            "total_jobs": len(jobs),
            "open_jobs": sum(1 for job in jobs if is_job_open(job)),
            "total_applications": len(applications),
            "interview_ready": sum(1 for a in applications if a.get("interview_ready")),
            "applications_by_status": by_status,
        },
        "recent_applications": sorted(
            applications, key=lambda a: a["applied_at"], reverse=True
        )[:5],
    }


# ============================================================
# JOBS
# ============================================================

@router.get("/jobs")
async def list_jobs(
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_document_store)
):
    jobs = store.find(COLLECTIONS["jobs"], {"company_id": company["user_id"]}, sort=[("created_at", -1)])
    return {"success": True, "jobs": jobs}


@router.post("/jobs", status_code=201)
async def create_job(
    job: JobCreate,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_document_store)
):
    """Post a new job. Weighted requirement fields feed the match score."""
    doc = to_document(job.model_dump())
    doc.update({
        "company_id": company["user_id"],
        "company_name": company["profile"].get("name"),
        "company_industry": company["profile"].get("industry"),
        "active": True,
        "applicant_count": 0,
    })
    created = store.insert(COLLECTIONS["jobs"], doc)
    logger.info("Company %s posted job %s", company["user_id"], created["id"])
    return {"success": True, "message": "Job posted successfully", "job": created}


@router.put("/jobs/{job_id}")
async def update_job(
    job_id: str,
    update: JobUpdate,
    company: dict = Depends(get_current_company),
    jobs: JobApplicationService = Depends(get_job_application_service)
):
    jobs.get_owned_job(company["user_id"], job_id)
    fields = to_document(update.model_dump(exclude_unset=True))
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = jobs.store.update(COLLECTIONS["jobs"], job_id, fields)
    return {"success": True, "message": "Job updated successfully", "job": updated}


@router.delete("/jobs/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: str,
    company: dict = Depends(get_current_company),
    jobs: JobApplicationService = Depends(get_job_application_service)
):
    jobs.get_owned_job(company["user_id"], job_id)
    jobs.store.delete(COLLECTIONS["jobs"], job_id)
    return MessageResponse(message="Job deleted successfully")


# ============================================================
# APPLICANTS
# ============================================================

@router.get("/jobs/{job_id}/applicants")
async def get_applicants(
    job_id: str,
    company: dict = Depends(get_current_company),
    jobs: JobApplicationService = Depends(get_job_application_service)
):
    applicants = jobs.applicants(company["user_id"], job_id)
    return {"success": True, "applicants": applicants, "total": len(applicants)}


@router.get("/jobs/{job_id}/qualified-applicants")
async def get_qualified_applicants(
    job_id: str,
    company: dict = Depends(get_current_company),
    jobs: JobApplicationService = Depends(get_job_application_service)
):
    applicants = jobs.applicants(company["user_id"], job_id, interview_ready_only=True)
    return {"success": True, "applicants": applicants, "total": len(applicants)}


@router.get("/candidates/interview-ready")
async def get_interview_ready_candidates(
    company: dict = Depends(get_current_company),
    jobs: JobApplicationService = Depends(get_job_application_service)
):
    candidates = jobs.interview_ready_candidates(company["user_id"])
    return {"success": True, "candidates": candidates, "total": len(candidates)}


@router.put("/applications/{application_id}/status")
async def update_application_status(
    application_id: str,
    update: JobApplicationStatusUpdate,
    company: dict = Depends(get_current_company),
    jobs: JobApplicationService = Depends(get_job_application_service)
):
    application = jobs.update_status(company["user_id"], application_id, update.status.value, update.notes)
    return {"success": True, "message": "Application status updated", "application": application}
