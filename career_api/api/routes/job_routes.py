"""
Job Routes

GET /jobs - List open jobs with filters
GET /jobs/{job_id} - Get job details
POST /jobs/{job_id}/apply - Apply to job (student only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from career_api.core.auth import get_current_student
from career_api.schemas.schemas import JobApplyRequest
from career_api.services.job_service import JobApplicationService, get_job_application_service
from career_api.services.matching_service import RecommendationService, get_recommendation_service

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("")
async def list_jobs(
    search: Optional[str] = Query(None, description="Search in title"),
    location: Optional[str] = Query(None),
    job_type: Optional[str] = Query(None),
    company_id: Optional[str] = Query(None),
    recommender: RecommendationService = Depends(get_recommendation_service)
):
    """List active jobs whose deadline has not passed, soonest deadline first."""
    jobs = recommender.open_jobs()

    if search:
        jobs = [j for j in jobs if search.lower() in (j.get("title") or "").lower()]
    if location:
        jobs = [j for j in jobs if location.lower() in (j.get("location") or "").lower()]
    if job_type:
        jobs = [j for j in jobs if j.get("job_type") == job_type]
    if company_id:
        jobs = [j for j in jobs if j.get("company_id") == company_id]

    return {"success": True, "jobs": jobs, "total": len(jobs)}


@router.get("/{job_id}")
async def get_job(job_id: str, jobs: JobApplicationService = Depends(get_job_application_service)):
    return {"success": True, "job": jobs.get_job(job_id)}


@router.post("/{job_id}/apply", status_code=201)
async def apply_to_job(
    job_id: str,
    request: Optional[JobApplyRequest] = None,
    student: dict = Depends(get_current_student),
    jobs: JobApplicationService = Depends(get_job_application_service)
):
    """Apply to a job. The match score is computed and stored with the application."""
    cover_letter = request.cover_letter if request else None
    application = jobs.apply(student["user_id"], job_id, cover_letter)
    return {
        "success": True,
        "message": "Job application submitted successfully",
        "application": application,
        "match_score": application["match_score"],
        "interview_ready": application["interview_ready"],
    }
