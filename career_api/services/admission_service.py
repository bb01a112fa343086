"""
Admission Service - lifecycle of course applications.

Statuses:
    pending    -> admitted | rejected | waitlisted   (institution)
    waitlisted -> admitted | rejected                (institution or promotion)
    admitted   -> accepted                           (student, once published)
    admitted   -> rejected                           (student accepted elsewhere)
    accepted, rejected                               terminal

A student holds at most MAX_APPLICATIONS_PER_INSTITUTION applications per
institution and at most one accepted offer. Accepting an offer is planned
as a list of StatusChange records (accept, auto-declines, waitlist
promotions) which the document store commits as one batch. Each change
carries the status it expects to find, so a concurrent change aborts the
whole batch instead of leaving a half-applied acceptance.

The batch also claims the student profile (accepted_application_id must
still be empty), and every promotion checks the same field on the
promoted student's profile. Waitlisted students who already accepted
elsewhere are passed over.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from fastapi import Depends

from career_api.core.exceptions import (
    BusinessRuleViolation, CapacityExceeded, DuplicateRecord, NotFound, PermissionDenied, StaleWriteError
)
from career_api.db.mongodb import COLLECTIONS
from career_api.schemas.schemas import ApplicationStatus
from career_api.services.document_store import DocumentStore, Mutation, get_document_store, utcnow
from career_api.services.eligibility_service import is_eligible, grades_from_subjects
from career_api.services.notification_service import NotificationService
from career_api.utils.helpers import as_utc, full_name, is_past

logger = logging.getLogger(__name__)

MAX_APPLICATIONS_PER_INSTITUTION = 2
ACCEPTED_ELSEWHERE_REASON = "Student accepted another offer"

# Sort key for applications missing applied_at
LATEST = datetime.max.replace(tzinfo=timezone.utc)

PENDING = ApplicationStatus.pending.value
ADMITTED = ApplicationStatus.admitted.value
REJECTED = ApplicationStatus.rejected.value
WAITLISTED = ApplicationStatus.waitlisted.value
ACCEPTED = ApplicationStatus.accepted.value

# Decisions an institution may take on an application
INSTITUTION_TRANSITIONS = {
    PENDING: {ADMITTED, REJECTED, WAITLISTED},
    WAITLISTED: {ADMITTED, REJECTED},
    ADMITTED: set(),
    REJECTED: set(),
    ACCEPTED: set(),
}


class TransitionKind(str, Enum):
    ACCEPT = "accept"
    AUTO_DECLINE = "auto_decline"
    WAITLIST_PROMOTION = "waitlist_promotion"
    INSTITUTION_DECISION = "institution_decision"


@dataclass
class StatusChange:
    kind: TransitionKind
    application: dict
    to_status: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def from_status(self) -> str:
        return self.application["status"]

    def to_mutation(self) -> Mutation:
        return Mutation(
            collection=COLLECTIONS["applications"],
            doc_id=self.application["id"],
            fields={"status": self.to_status, **self.fields},
            expected={"status": self.from_status}
        )


@dataclass
class AcceptancePlan:
    changes: List[StatusChange]
    # (course_id, institution_id) pairs freed by auto-declines
    vacated: List[Tuple[str, str]]


def acceptance_claim(student_id: str, application_id: str) -> Mutation:
    """
    Record the accepted application on the student profile.

    Only matches while the profile holds no accepted application, so two
    concurrent accepts by one student cannot both commit.
    """
    return Mutation(
        collection=COLLECTIONS["students"],
        doc_id=student_id,
        fields={"accepted_application_id": application_id},
        expected={"accepted_application_id": None}
    )


def not_yet_accepted(student_id: str) -> Mutation:
    """Guard for a promotion: the promoted student must still be without an accepted offer."""
    return Mutation(
        collection=COLLECTIONS["students"],
        doc_id=student_id,
        fields={},
        expected={"accepted_application_id": None}
    )


def plan_acceptance(application: dict, admitted_applications: List[dict], now: datetime,
                    accepted_applications: Iterable[dict] = ()) -> AcceptancePlan:
    """
    Plan the transitions for a student accepting `application`.

    `admitted_applications` are the student's applications currently in the
    admitted state; every one other than the accepted application is
    declined and its course slot reported as vacated.
    `accepted_applications` are the student's already accepted ones; any
    of them blocks the acceptance.
    """
    if any(a["id"] != application["id"] for a in accepted_applications):
        raise BusinessRuleViolation("You have already accepted an admission offer")
    if application["status"] != ADMITTED:
        raise BusinessRuleViolation("Only admitted applications can be accepted")
    if not application.get("admission_published"):
        raise BusinessRuleViolation("Admission results for this course have not been published yet")

    changes = [StatusChange(
        TransitionKind.ACCEPT, application, ACCEPTED, {"accepted_at": now}
    )]
    vacated = []

    for other in admitted_applications:
        if other["id"] == application["id"] or other["status"] != ADMITTED:
            continue
        changes.append(StatusChange(
            TransitionKind.AUTO_DECLINE, other, REJECTED,
            {"rejection_reason": ACCEPTED_ELSEWHERE_REASON, "rejected_at": now}
        ))
        slot = (other["course_id"], other["institution_id"])
        if slot not in vacated:
            vacated.append(slot)

    return AcceptancePlan(changes=changes, vacated=vacated)


def acceptance_batch(changes: List[StatusChange], claim: Mutation,
                     promotions: Iterable[StatusChange] = ()) -> List[Mutation]:
    """Mutations for one acceptance; each promotion also checks its student has not accepted elsewhere."""
    mutations = [c.to_mutation() for c in changes] + [claim]
    for promotion in promotions:
        mutations.append(promotion.to_mutation())
        mutations.append(not_yet_accepted(promotion.application["student_id"]))
    return mutations


def select_for_promotion(waitlisted: List[dict], settled_students: Set[str] = frozenset()) -> Optional[dict]:
    """Earliest applicant on the waitlist whose student holds no accepted offer, or None."""
    candidates = [
        a for a in waitlisted
        if a.get("status") == WAITLISTED and a.get("student_id") not in settled_students
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda a: as_utc(a.get("applied_at")) or LATEST)


def promotion_change(application: dict, now: datetime) -> StatusChange:
    if application["status"] != WAITLISTED:
        raise BusinessRuleViolation("Only waitlisted applications can be promoted")
    return StatusChange(
        TransitionKind.WAITLIST_PROMOTION, application, ADMITTED,
        {"promoted_from_waitlist": True, "promotion_date": now}
    )


def decision_change(application: dict, to_status: str, now: datetime, notes: Optional[str] = None,
                    rejection_reason: Optional[str] = None) -> StatusChange:
    if to_status not in INSTITUTION_TRANSITIONS.get(application["status"], set()):
        raise BusinessRuleViolation(
            f"Cannot change application status from {application['status']} to {to_status}"
        )
    fields = {"decided_at": now}
    if notes is not None:
        fields["notes"] = notes
    if to_status == REJECTED and rejection_reason:
        fields["rejection_reason"] = rejection_reason
    return StatusChange(TransitionKind.INSTITUTION_DECISION, application, to_status, fields)


# ============================================================
# SERVICE
# ============================================================

class AdmissionService:
    """Applies the rules above against the document store."""

    def __init__(self, store: DocumentStore, notifications: Optional[NotificationService] = None):
        self.store = store
        self.notifications = notifications or NotificationService(store)
        self.applications = COLLECTIONS["applications"]

    # ---------------- lookups ----------------

    def get_application(self, application_id: str) -> dict:
        application = self.store.get(self.applications, application_id)
        if not application:
            raise NotFound("Application not found")
        return application

    def _owned_by_student(self, application_id: str, student_id: str) -> dict:
        application = self.get_application(application_id)
        if application["student_id"] != student_id:
            raise PermissionDenied("Not authorized to access this application")
        return application

    def _owned_by_institution(self, application_id: str, institution_id: str) -> dict:
        application = self.get_application(application_id)
        if application["institution_id"] != institution_id:
            raise PermissionDenied("Not authorized to manage this application")
        return application

    def _sync_institution_counter(self, student: dict, institution_id: str) -> None:
        """Store min(application count, limit) under applications_count[institution_id]."""
        current = self.store.count(self.applications, {
            "student_id": student["id"], "institution_id": institution_id
        })
        counts = dict(student.get("applications_count") or {})
        counts[institution_id] = min(current, MAX_APPLICATIONS_PER_INSTITUTION)
        self.store.update(COLLECTIONS["students"], student["id"], {"applications_count": counts})

    # ---------------- student actions ----------------

    def submit(self, student_id: str, course_id: str) -> dict:
        """Create a pending application after capacity, duplicate, deadline and eligibility checks."""
        student = self.store.get(COLLECTIONS["students"], student_id)
        if not student:
            raise NotFound("Student profile not found")

        course = self.store.get(COLLECTIONS["courses"], course_id)
        if not course:
            raise NotFound("Course not found")

        institution_id = course["institution_id"]
        existing = self.store.find(self.applications, {
            "student_id": student_id, "institution_id": institution_id
        })
        if len(existing) >= MAX_APPLICATIONS_PER_INSTITUTION:
            raise CapacityExceeded(
                f"You can only apply to a maximum of {MAX_APPLICATIONS_PER_INSTITUTION} courses per institution"
            )
        if any(a["course_id"] == course_id for a in existing):
            raise BusinessRuleViolation("You have already applied for this course")

        if is_past(course.get("application_deadline")):
            raise BusinessRuleViolation("The application deadline for this course has passed")

        subjects = student.get("subjects") or []
        if not is_eligible(course, subjects, grades_from_subjects(subjects)):
            raise BusinessRuleViolation("You do not meet the requirements for this course")

        now = utcnow()
        try:
            application = self.store.insert(self.applications, {
                "student_id": student_id,
                "course_id": course_id,
                "institution_id": institution_id,
                "course_name": course.get("name"),
                "institution_name": course.get("institution_name"),
                "student_name": full_name(student),
                "student_email": student.get("email"),
                "student_subjects": subjects,
                "status": PENDING,
                "admission_published": False,
                "applied_at": now,
            })
        except DuplicateRecord:
            raise BusinessRuleViolation("You have already applied for this course")
        self._sync_institution_counter(student, institution_id)

        self.notifications.emit(
            student_id,
            "Application Submitted",
            f"Your application for {course.get('name')} at {course.get('institution_name')} has been submitted.",
            "success",
            "/student/applications"
        )
        logger.info("Student %s applied to course %s", student_id, course_id)
        return application

    def accept_offer(self, student_id: str, application_id: str) -> dict:
        """
        Accept an admitted, published offer.

        Declines the student's other admitted offers and promotes the
        earliest waitlisted applicant into each vacated course, all in one
        batch. Promotions are best-effort: if planning one fails it is
        skipped, and if one has gone stale by commit time the batch is
        retried without promotions.
        """
        application = self._owned_by_student(application_id, student_id)
        admitted = self.store.find(self.applications, {"student_id": student_id, "status": ADMITTED})
        accepted = self.store.find(self.applications, {"student_id": student_id, "status": ACCEPTED})

        now = utcnow()
        plan = plan_acceptance(application, admitted, now, accepted)
        promotions = self._plan_promotions(plan.vacated, now)
        claim = acceptance_claim(student_id, application_id)

        try:
            self.store.commit(acceptance_batch(plan.changes, claim, promotions))
        except StaleWriteError:
            if not promotions:
                raise
            logger.warning(
                "Waitlist changed while accepting application %s; committing without %d promotion(s)",
                application_id, len(promotions)
            )
            self.store.commit(acceptance_batch(plan.changes, claim))
            promotions = []

        declined = [c.application["id"] for c in plan.changes if c.kind == TransitionKind.AUTO_DECLINE]
        logger.info(
            "Student %s accepted application %s; declined %s; promoted %s",
            student_id, application_id, declined, [c.application["id"] for c in promotions]
        )

        self.notifications.emit(
            student_id,
            "Offer Accepted",
            f"You have accepted your offer for {application.get('course_name')} at {application.get('institution_name')}.",
            "success",
            "/student/admissions"
        )
        for change in promotions:
            self._notify_promotion(change.application)

        return {
            "application": self.get_application(application_id),
            "declined": declined,
            "promoted": [c.application["id"] for c in promotions],
        }

    def withdraw(self, student_id: str, application_id: str) -> None:
        """Delete a still-pending application and free its institution slot."""
        application = self._owned_by_student(application_id, student_id)
        if application["status"] != PENDING:
            raise BusinessRuleViolation("Only pending applications can be deleted")

        self.store.delete(self.applications, application_id)
        student = self.store.get(COLLECTIONS["students"], student_id)
        if student:
            self._sync_institution_counter(student, application["institution_id"])

    # ---------------- waitlist promotion ----------------

    def _plan_promotions(self, vacated: List[Tuple[str, str]], now: datetime) -> List[StatusChange]:
        promotions = []
        for course_id, institution_id in vacated:
            try:
                waitlisted = self.store.find(self.applications, {
                    "course_id": course_id,
                    "institution_id": institution_id,
                    "status": WAITLISTED
                })
                settled = {a["student_id"] for a in waitlisted if self._has_accepted(a["student_id"])}
                chosen = select_for_promotion(waitlisted, settled)
                if chosen:
                    promotions.append(promotion_change(chosen, now))
            except Exception:
                logger.exception(
                    "Waitlist promotion failed for course %s at institution %s", course_id, institution_id
                )
        return promotions

    def _has_accepted(self, student_id: str) -> bool:
        return self.store.count(self.applications, {"student_id": student_id, "status": ACCEPTED}) > 0

    def _notify_promotion(self, application: dict) -> None:
        self.notifications.emit(
            application["student_id"],
            "Admission Offer",
            f"Good news! A place opened up and you have been admitted to {application.get('course_name')} "
            f"at {application.get('institution_name')}.",
            "success",
            "/student/admissions"
        )

    # ---------------- institution actions ----------------

    def decide(self, institution_id: str, application_id: str, status: str,
               notes: Optional[str] = None, rejection_reason: Optional[str] = None) -> dict:
        application = self._owned_by_institution(application_id, institution_id)
        change = decision_change(application, status, utcnow(), notes, rejection_reason)
        self.store.commit([change.to_mutation()])

        if status == ADMITTED:
            self.notifications.emit(
                application["student_id"],
                "Admission Offer",
                f"Congratulations! You have been admitted to {application.get('course_name')}.",
                "success",
                "/student/admissions"
            )
        else:
            self.notifications.emit(
                application["student_id"],
                "Application Update",
                f"Your application for {application.get('course_name')} is now {status}.",
                "info",
                "/student/applications"
            )
        return self.get_application(application_id)

    def promote(self, institution_id: str, application_id: str) -> dict:
        """Manually admit a waitlisted applicant."""
        application = self._owned_by_institution(application_id, institution_id)
        change = promotion_change(application, utcnow())
        if self._has_accepted(application["student_id"]):
            raise BusinessRuleViolation("This student has already accepted another offer")
        self.store.commit([change.to_mutation(), not_yet_accepted(application["student_id"])])
        self._notify_promotion(application)
        logger.info("Institution %s promoted application %s from waitlist", institution_id, application_id)
        return self.get_application(application_id)

    def publish(self, institution_id: str, course_id: str) -> int:
        """Publish admission results for every application to a course."""
        course = self.store.get(COLLECTIONS["courses"], course_id)
        if not course:
            raise NotFound("Course not found")
        if course["institution_id"] != institution_id:
            raise PermissionDenied("Not authorized to publish admissions for this course")

        applications = self.store.find(self.applications, {"course_id": course_id})
        if not applications:
            raise BusinessRuleViolation("No applications found for this course")

        now = utcnow()
        self.store.commit([
            Mutation(self.applications, a["id"], {"admission_published": True, "published_at": now})
            for a in applications
        ])

        for application in applications:
            self.notifications.emit(
                application["student_id"],
                "Admission Results Published",
                f"Admission results for {course.get('name')} are now available.",
                "info",
                "/student/admissions"
            )
        logger.info("Published admissions for course %s (%d applications)", course_id, len(applications))
        return len(applications)


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================

def get_admission_service(store: DocumentStore = Depends(get_document_store)) -> AdmissionService:
    """FastAPI dependency - admission service over the request's store."""
    return AdmissionService(store)
