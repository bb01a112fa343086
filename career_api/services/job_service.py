"""
Job Application Service - students applying to jobs and companies
reviewing applicants.

Each job application stores the match score computed at apply time along
with interview_ready (score >= 70). Applicant listings rescore against the
student's current profile so companies see up-to-date rankings.
"""

import logging
from typing import List, Optional

from fastapi import Depends

from career_api.core.exceptions import BusinessRuleViolation, DuplicateRecord, NotFound, PermissionDenied
from career_api.db.mongodb import COLLECTIONS
from career_api.schemas.schemas import JobApplicationStatus
from career_api.services.document_store import DocumentStore, get_document_store, utcnow
from career_api.services.matching_service import (
    is_interview_ready, is_job_open, rank_applicants, score_applicant
)
from career_api.services.notification_service import NotificationService
from career_api.utils.helpers import full_name, without_file_data

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    "shortlisted": ("Application Shortlisted", "success"),
    "interview_scheduled": ("Interview Scheduled", "success"),
    "hired": ("Job Offer", "success"),
    "rejected": ("Application Update", "info"),
    "pending": ("Application Update", "info"),
}


class JobApplicationService:

    def __init__(self, store: DocumentStore, notifications: Optional[NotificationService] = None):
        self.store = store
        self.notifications = notifications or NotificationService(store)
        self.collection = COLLECTIONS["job_applications"]

    def get_job(self, job_id: str) -> dict:
        job = self.store.get(COLLECTIONS["jobs"], job_id)
        if not job:
            raise NotFound("Job not found")
        return job

    def get_owned_job(self, company_id: str, job_id: str) -> dict:
        job = self.get_job(job_id)
        if job["company_id"] != company_id:
            raise PermissionDenied("Not authorized to access this job")
        return job

    def apply(self, student_id: str, job_id: str, cover_letter: Optional[str] = None) -> dict:
        """Score the student against the job and record the application."""
        student = self.store.get(COLLECTIONS["students"], student_id)
        if not student:
            raise NotFound("Student profile not found")

        job = self.get_job(job_id)
        if not is_job_open(job):
            raise BusinessRuleViolation("This job is no longer accepting applications")

        if self.store.find_one(self.collection, {"job_id": job_id, "student_id": student_id}):
            raise BusinessRuleViolation("You have already applied for this job")

        match_score = score_applicant(student, job)
        try:
            application = self.store.insert(self.collection, {
                "job_id": job_id,
                "company_id": job["company_id"],
                "student_id": student_id,
                "job_title": job.get("title"),
                "company_name": job.get("company_name"),
                "student_name": full_name(student),
                "student_email": student.get("email"),
                "cover_letter": cover_letter,
                "match_score": match_score,
                "interview_ready": is_interview_ready(match_score),
                "status": JobApplicationStatus.pending.value,
                "applied_at": utcnow(),
            })
        except DuplicateRecord:
            raise BusinessRuleViolation("You have already applied for this job")
        self.store.increment(COLLECTIONS["jobs"], job_id, "applicant_count")

        self.notifications.emit(
            student_id,
            "Job Application Submitted",
            f"Your application for {job.get('title')} at {job.get('company_name')} has been submitted.",
            "success",
            "/student/jobs"
        )
        self.notifications.emit(
            job["company_id"],
            "New Job Application",
            f"{full_name(student)} applied for {job.get('title')} (match score {match_score}%).",
            "info",
            f"/company/jobs/{job_id}/applicants"
        )
        logger.info("Student %s applied to job %s with score %d", student_id, job_id, match_score)
        return application

    def applicants(self, company_id: str, job_id: str, interview_ready_only: bool = False) -> List[dict]:
        """Applicants for one of the company's jobs, rescored and ranked."""
        job = self.get_owned_job(company_id, job_id)
        return self._scored_entries(
            [job], self.store.find(self.collection, {"job_id": job_id}), interview_ready_only
        )

    def interview_ready_candidates(self, company_id: str) -> List[dict]:
        """Interview-ready applicants across all of the company's jobs."""
        jobs = self.store.find(COLLECTIONS["jobs"], {"company_id": company_id})
        applications = self.store.find(self.collection, {"company_id": company_id})
        return self._scored_entries(jobs, applications, interview_ready_only=True)

    def _scored_entries(self, jobs: List[dict], applications: List[dict], interview_ready_only: bool) -> List[dict]:
        jobs_by_id = {job["id"]: job for job in jobs}
        entries = []
        for application in applications:
            job = jobs_by_id.get(application["job_id"])
            student = self.store.get(COLLECTIONS["students"], application["student_id"])
            if not job or not student:
                continue

            match_score = score_applicant(student, job)
            ready = is_interview_ready(match_score)
            if interview_ready_only and not ready:
                continue
            entries.append({
                "application": application,
                "student": without_file_data(student),
                "job": {"id": job["id"], "title": job.get("title")},
                "match_score": match_score,
                "interview_ready": ready,
            })
        return rank_applicants(entries)

    def update_status(self, company_id: str, application_id: str, status: str, notes: Optional[str] = None) -> dict:
        application = self.store.get(self.collection, application_id)
        if not application:
            raise NotFound("Application not found")
        if application["company_id"] != company_id:
            raise PermissionDenied("Not authorized to update this application")

        fields = {"status": status}
        if notes is not None:
            fields["notes"] = notes
        updated = self.store.update(self.collection, application_id, fields)

        title, kind = STATUS_MESSAGES.get(status, ("Application Update", "info"))
        self.notifications.emit(
            application["student_id"],
            title,
            f"Your application for {application.get('job_title')} at {application.get('company_name')} "
            f"is now {status.replace('_', ' ')}.",
            kind,
            "/student/jobs"
        )
        return updated


def get_job_application_service(store: DocumentStore = Depends(get_document_store)) -> JobApplicationService:
    """FastAPI dependency - job application service over the request's store."""
    return JobApplicationService(store)
