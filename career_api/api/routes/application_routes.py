"""
Application Routes

POST /applications - Apply to a course (student only)
GET /applications/{application_id} - Application details (owning student or institution)
POST /applications/{application_id}/accept - Accept an admission offer (student only)
DELETE /applications/{application_id} - Delete a pending application (student only)
"""

from fastapi import APIRouter, HTTPException, Depends

from career_api.core.auth import get_current_user, get_current_student
from career_api.schemas.schemas import CourseApplicationCreate, MessageResponse
from career_api.services.admission_service import AdmissionService, get_admission_service

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("", status_code=201)
async def create_application(
    request: CourseApplicationCreate,
    student: dict = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service)
):
    application = admissions.submit(student["user_id"], request.course_id)
    return {"success": True, "message": "Application submitted successfully", "application": application}


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    user: dict = Depends(get_current_user),
    admissions: AdmissionService = Depends(get_admission_service)
):
    application = admissions.get_application(application_id)
    owner = {"student": application["student_id"], "institution": application["institution_id"]}
    if user["role"] != "admin" and owner.get(user["role"]) != user["user_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to access this application")
    return {"success": True, "application": application}


@router.post("/{application_id}/accept")
async def accept_application(
    application_id: str,
    student: dict = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service)
):
    result = admissions.accept_offer(student["user_id"], application_id)
    return {"success": True, "message": "Admission offer accepted successfully", **result}


@router.delete("/{application_id}", response_model=MessageResponse)
async def delete_application(
    application_id: str,
    student: dict = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service)
):
    admissions.withdraw(student["user_id"], application_id)
    return MessageResponse(message="Application deleted successfully")
