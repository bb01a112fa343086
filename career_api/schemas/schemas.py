"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Dict, Union
from datetime import datetime, date
from enum import Enum

from career_api.services.grading import GRADE_POINTS


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    institution = "institution"
    company = "company"
    admin = "admin"


class ApplicationStatus(str, Enum):
    pending = "pending"
    admitted = "admitted"
    rejected = "rejected"
    waitlisted = "waitlisted"
    accepted = "accepted"


class JobApplicationStatus(str, Enum):
    pending = "pending"
    shortlisted = "shortlisted"
    interview_scheduled = "interview_scheduled"
    rejected = "rejected"
    hired = "hired"


class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    internship = "internship"
    contract = "contract"


class NotificationType(str, Enum):
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"


def _normalize_grade(value: str) -> str:
    grade = value.strip().upper()
    if grade not in GRADE_POINTS:
        raise ValueError(f"Invalid grade '{value}'. Use one of: {', '.join(GRADE_POINTS)}")
    return grade


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    confirm_password: str
    role: UserRole

    # Students and admins
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)

    # Students
    date_of_birth: Optional[date] = None
    phone: Optional[str] = None
    high_school: Optional[str] = None
    graduation_year: Optional[int] = Field(None, ge=1950, le=2100)

    # Institutions and companies
    organization_name: Optional[str] = Field(None, min_length=2, max_length=100)
    contact_phone: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    location: Optional[str] = None
    slogan: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    website: Optional[str] = None
    industry: Optional[str] = None

    # Admins
    admin_secret: Optional[str] = None

    @model_validator(mode="after")
    def check_role_fields(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")

        if self.role == UserRole.student:
            required = ["first_name", "last_name", "date_of_birth", "phone", "high_school", "graduation_year"]
        elif self.role in (UserRole.institution, UserRole.company):
            required = ["organization_name", "contact_phone", "contact_email", "location", "slogan", "description"]
        else:
            required = ["first_name", "last_name", "admin_secret"]

        missing = [name for name in required if getattr(self, name) in (None, "")]
        if missing:
            raise ValueError(f"Missing required fields for {self.role.value}: {', '.join(missing)}")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: str


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class SubjectGrade(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    grade: str

    @field_validator("grade")
    @classmethod
    def valid_grade(cls, v: str) -> str:
        return _normalize_grade(v)


class StudentProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    date_of_birth: Optional[date] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    high_school: Optional[str] = None
    graduation_year: Optional[int] = Field(None, ge=1950, le=2100)
    subjects: Optional[List[SubjectGrade]] = None
    academic_score: Optional[float] = Field(None, ge=0, le=100)
    work_experience: Optional[float] = Field(None, ge=0, le=60)
    skills: Optional[List[str]] = None


class DocumentUpload(BaseModel):
    """A PDF submitted as a base64 data URI."""
    file_data: str
    file_name: Optional[str] = None


class CertificateUpload(DocumentUpload):
    name: str = Field(..., min_length=1, max_length=200)


class CourseApplicationCreate(BaseModel):
    course_id: str


class AcceptOfferRequest(BaseModel):
    application_id: str


# ============================================================
# INSTITUTION SCHEMAS
# ============================================================

class OrganizationProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    contact_phone: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    location: Optional[str] = None
    slogan: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    website: Optional[str] = None
    logo_url: Optional[str] = None


class CompanyProfileUpdate(OrganizationProfileUpdate):
    industry: Optional[str] = None


class CourseRequirements(BaseModel):
    subjects: List[str] = []
    min_grades: Dict[str, str] = {}

    @field_validator("min_grades")
    @classmethod
    def valid_grades(cls, v: Dict[str, str]) -> Dict[str, str]:
        return {subject: _normalize_grade(grade) for subject, grade in v.items()}


class CourseCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=2)
    duration: str
    faculty: Optional[str] = None
    requirements: CourseRequirements = Field(default_factory=CourseRequirements)
    tuition_fee: Optional[float] = Field(None, ge=0)
    intake_period: Optional[str] = None
    available_seats: Optional[int] = Field(None, ge=0)
    application_deadline: Optional[datetime] = None


class CourseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    duration: Optional[str] = None
    faculty: Optional[str] = None
    requirements: Optional[CourseRequirements] = None
    tuition_fee: Optional[float] = Field(None, ge=0)
    intake_period: Optional[str] = None
    available_seats: Optional[int] = Field(None, ge=0)
    application_deadline: Optional[datetime] = None


class ApplicationDecision(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = Field(None, max_length=1000)
    rejection_reason: Optional[str] = Field(None, max_length=500)


class PublishAdmissionsRequest(BaseModel):
    course_id: str


class ProspectusCreate(DocumentUpload):
    title: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    academic_year: str


# ============================================================
# COMPANY / JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=2)
    requirements: Optional[str] = None
    qualifications: Optional[str] = None
    location: str
    salary: Optional[str] = None
    job_type: JobType = JobType.full_time
    deadline: datetime

    # Weighted requirements used by the match score
    min_academic_score: Optional[float] = Field(None, ge=0, le=100)
    min_work_experience: Optional[float] = Field(None, ge=0, le=60)
    required_certificates: List[str] = []
    required_skills: List[str] = []


class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    qualifications: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    job_type: Optional[JobType] = None
    deadline: Optional[datetime] = None
    min_academic_score: Optional[float] = Field(None, ge=0, le=100)
    min_work_experience: Optional[float] = Field(None, ge=0, le=60)
    required_certificates: Optional[List[str]] = None
    required_skills: Optional[List[str]] = None
    active: Optional[bool] = None


class JobApplyRequest(BaseModel):
    cover_letter: Optional[str] = Field(None, max_length=5000)


class JobApplicationStatusUpdate(BaseModel):
    status: JobApplicationStatus
    notes: Optional[str] = Field(None, max_length=1000)


# ============================================================
# ELIGIBILITY SCHEMAS
# ============================================================

class EligibilityCheckRequest(BaseModel):
    subjects: Union[List[SubjectGrade], Dict[str, str]]
    grades: Optional[Dict[str, str]] = None

    def subject_list(self) -> List[dict]:
        if isinstance(self.subjects, dict):
            return [{"name": name, "grade": grade} for name, grade in self.subjects.items()]
        return [s.model_dump() for s in self.subjects]


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class TranscriptRejection(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
