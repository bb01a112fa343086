"""
Matching Service

PURPOSE:
Score how well a student fits a job posting (0-100) and use the score for
job recommendations and applicant ranking.

HOW IT WORKS:
A job may declare up to four weighted requirements:

    academic score     40   min_academic_score
    work experience    30   min_work_experience
    certificates       20   required_certificates
    skills             10   required_skills

Only the requirements the job actually declares take part. Each one earns
its full weight when met, or a proportional share when partially met. The
final score is the earned share of the applied weights, scaled to 100.

A job that declares none of them falls back to a coarse tier based on the
student's transcript, academic score and experience (80/70/60/50).
"""

import math
from datetime import datetime
from typing import List, Dict, Optional

from fastapi import Depends

from career_api.services.document_store import DocumentStore, get_document_store, utcnow
from career_api.db.mongodb import COLLECTIONS
from career_api.utils.helpers import is_past

WEIGHTS = {
    "academic": 40,
    "experience": 30,
    "certificates": 20,
    "skills": 10,
}

INTERVIEW_READY_THRESHOLD = 70
RECOMMENDATION_THRESHOLD = 50


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _number(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _ratio_score(weight: int, achieved: float, required: float) -> float:
    """Full weight when achieved >= required, otherwise the proportional share."""
    if achieved >= required:
        return float(weight)
    return weight * (max(achieved, 0.0) / required)


def _certificate_names(certificates) -> set:
    names = set()
    for cert in certificates or []:
        if isinstance(cert, dict):
            if cert.get("name"):
                names.add(cert["name"])
        elif cert:
            names.add(cert)
    return names


def compute_overlap_score(weight: int, owned: set, required: List[str]) -> float:
    """weight x (required items the student has / required items)."""
    matched = sum(1 for item in required if item in owned)
    return weight * matched / len(required)


def fallback_score(student: dict) -> int:
    has_transcript = bool(student.get("has_transcript"))
    academic = _number(student.get("academic_score"))
    experience = _number(student.get("work_experience"))

    if has_transcript and academic >= 60 and experience >= 1:
        return 80
    if has_transcript and academic >= 60:
        return 70
    if has_transcript:
        return 60
    return 50


def score_applicant(student: dict, job: dict) -> int:
    """
    Compute a 0-100 match score for a student against a job.

    Example: min academic 80 + min experience 2, student with 60 and 1
    -> round((30 + 15) / 70 * 100) = 64
    """
    score = 0.0
    total_weight = 0

    min_academic = _number(job.get("min_academic_score"))
    if min_academic:
        total_weight += WEIGHTS["academic"]
        score += _ratio_score(WEIGHTS["academic"], _number(student.get("academic_score")), min_academic)

    min_experience = _number(job.get("min_work_experience"))
    if min_experience:
        total_weight += WEIGHTS["experience"]
        score += _ratio_score(WEIGHTS["experience"], _number(student.get("work_experience")), min_experience)

    required_certificates = job.get("required_certificates") or []
    if required_certificates:
        total_weight += WEIGHTS["certificates"]
        score += compute_overlap_score(
            WEIGHTS["certificates"],
            _certificate_names(student.get("certificates")),
            required_certificates
        )

    required_skills = job.get("required_skills") or []
    if required_skills:
        total_weight += WEIGHTS["skills"]
        score += compute_overlap_score(
            WEIGHTS["skills"],
            set(student.get("skills") or []),
            required_skills
        )

    if total_weight == 0:
        return fallback_score(student)

    final = _round_half_up(score / total_weight * 100)
    return max(0, min(final, 100))


def is_interview_ready(score: int) -> bool:
    return score >= INTERVIEW_READY_THRESHOLD


def is_job_open(job: dict, now: Optional[datetime] = None) -> bool:
    """Active and deadline not passed."""
    return bool(job.get("active")) and not is_past(job.get("deadline"), now)


def rank_applicants(entries: List[dict]) -> List[dict]:
    """Sort scored applicant entries best first."""
    return sorted(entries, key=lambda e: e["match_score"], reverse=True)


# ============================================================
# RECOMMENDATION SERVICE
# ============================================================

class RecommendationService:
    """
    Job recommendations for a student.

    Process:
    1. Load active jobs whose deadline has not passed
    2. Score each job against the student
    3. Keep jobs scoring at least RECOMMENDATION_THRESHOLD, best first
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def open_jobs(self) -> List[dict]:
        now = utcnow()
        jobs = self.store.find(COLLECTIONS["jobs"], {"active": True}, sort=[("deadline", 1)])
        return [job for job in jobs if is_job_open(job, now)]

    def recommend(self, student: dict, min_score: int = RECOMMENDATION_THRESHOLD) -> List[Dict]:
        recommendations = []
        for job in self.open_jobs():
            match_score = score_applicant(student, job)
            if match_score >= min_score:
                recommendations.append({
                    **job,
                    "match_score": match_score,
                    "interview_ready": is_interview_ready(match_score)
                })

        recommendations.sort(key=lambda x: x["match_score"], reverse=True)
        return recommendations


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================

def get_recommendation_service(store: DocumentStore = Depends(get_document_store)) -> RecommendationService:
    """Get recommendation service instance."""
    return RecommendationService(store)
