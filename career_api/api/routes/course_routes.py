"""
Course Routes (public)

GET /courses - List all courses
GET /courses/institution/{institution_id} - Courses offered by an institution
GET /courses/{course_id} - Course details with institution
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from career_api.db.mongodb import COLLECTIONS
from career_api.services.document_store import DocumentStore, get_document_store

router = APIRouter(prefix="/courses", tags=["Courses"])


@router.get("")
async def list_courses(
    search: Optional[str] = Query(None, description="Search in course name"),
    faculty: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_document_store)
):
    filters = {"faculty": faculty} if faculty else {}
    courses = store.find(COLLECTIONS["courses"], filters, sort=[("name", 1)])
    if search:
        courses = [c for c in courses if search.lower() in (c.get("name") or "").lower()]
    return {"success": True, "courses": courses, "total": len(courses)}


@router.get("/institution/{institution_id}")
async def list_institution_courses(institution_id: str, store: DocumentStore = Depends(get_document_store)):
    institution = store.get(COLLECTIONS["institutions"], institution_id)
    if not institution:
        raise HTTPException(status_code=404, detail="Institution not found")

    courses = store.find(COLLECTIONS["courses"], {"institution_id": institution_id}, sort=[("name", 1)])
    return {"success": True, "institution": institution, "courses": courses}


@router.get("/{course_id}")
async def get_course(course_id: str, store: DocumentStore = Depends(get_document_store)):
    course = store.get(COLLECTIONS["courses"], course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    institution = store.get(COLLECTIONS["institutions"], course["institution_id"])
    return {"success": True, "course": {**course, "institution": institution}}
