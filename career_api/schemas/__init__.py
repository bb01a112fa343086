"""
Schemas module - Pydantic request/response models.

Usage:
    from career_api.schemas.schemas import RegisterRequest, CourseCreate
"""
