"""
Career Guidance Platform - Backend Application

A FastAPI backend connecting students, institutions and companies:
course applications with eligibility checks and an admission workflow,
job applications with match scoring, and admin moderation.
"""

__version__ = "1.0.0"
