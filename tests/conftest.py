import base64
import copy
import io
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from PyPDF2 import PdfWriter

from career_api.core.auth import create_access_token
from career_api.core.exceptions import StaleWriteError
from career_api.db.mongodb import COLLECTIONS
from career_api.main import app
from career_api.services.document_store import DocumentStore, get_document_store, new_id, utcnow


def _sort_key(value):
    # Missing values sort last
    return (value is None, value if value is not None else 0)


class InMemoryDocumentStore(DocumentStore):
    """DocumentStore over plain dicts, with the same batch semantics as MongoDB."""

    def __init__(self):
        self.data = {}
        self.commits = []

    def _collection(self, name):
        return self.data.setdefault(name, {})

    @staticmethod
    def _matches(doc, filters):
        return all(doc.get(k) == v for k, v in (filters or {}).items())

    def get(self, collection, doc_id):
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def find(self, collection, filters=None, sort=None, limit=None):
        docs = [copy.deepcopy(d) for d in self._collection(collection).values() if self._matches(d, filters)]
        for field_name, direction in reversed(sort or []):
            docs.sort(key=lambda d: _sort_key(d.get(field_name)), reverse=direction < 0)
        return docs[:limit] if limit else docs

    def count(self, collection, filters=None):
        return len(self.find(collection, filters))

    def insert(self, collection, doc, doc_id=None):
        now = utcnow()
        stored = copy.deepcopy(doc)
        stored["id"] = doc_id or new_id()
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", now)
        self._collection(collection)[stored["id"]] = stored
        return copy.deepcopy(stored)

    def update(self, collection, doc_id, fields):
        doc = self._collection(collection).get(doc_id)
        if doc is None:
            return None
        doc.update(copy.deepcopy(fields))
        doc["updated_at"] = fields.get("updated_at", utcnow())
        return copy.deepcopy(doc)

    def increment(self, collection, doc_id, field_name, amount=1):
        doc = self._collection(collection).get(doc_id)
        if doc is None:
            return False
        doc[field_name] = doc.get(field_name, 0) + amount
        return True

    def delete(self, collection, doc_id):
        return self._collection(collection).pop(doc_id, None) is not None

    def commit(self, mutations):
        for m in mutations:
            doc = self._collection(m.collection).get(m.doc_id)
            if doc is None or not self._matches(doc, m.expected):
                raise StaleWriteError(m.collection, m.doc_id)
        now = utcnow()
        for m in mutations:
            self._collection(m.collection)[m.doc_id].update({"updated_at": now, **copy.deepcopy(m.fields)})
        self.commits.append(list(mutations))


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_document_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id, role):
    token = create_access_token({"sub": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


def future(days=30):
    return datetime.now(timezone.utc) + timedelta(days=days)


def past(days=1):
    return datetime.now(timezone.utc) - timedelta(days=days)


@pytest.fixture
def make_user(store):
    """Insert a user (and role profile) directly; returns (id, headers)."""

    profile_collections = {
        "student": COLLECTIONS["students"],
        "institution": COLLECTIONS["institutions"],
        "company": COLLECTIONS["companies"],
    }

    def _make(role, **profile):
        user_id = new_id()
        email = profile.pop("email", f"{role}-{user_id}@example.com")
        store.insert(COLLECTIONS["users"], {
            "email": email, "password_hash": "x", "role": role, "active": True
        }, doc_id=user_id)
        if role in profile_collections:
            defaults = {"email": email}
            if role == "student":
                defaults.update({
                    "first_name": "Test", "last_name": "Student", "subjects": [],
                    "skills": [], "certificates": [], "has_transcript": False,
                    "study_completed": False, "applications_count": {},
                })
            else:
                defaults.update({"name": f"Test {role.capitalize()}", "approved": True})
            store.insert(profile_collections[role], {**defaults, **profile}, doc_id=user_id)
        return user_id, auth_headers(user_id, role)

    return _make


@pytest.fixture
def make_course(store):
    def _make(institution_id, name="Computer Science", subjects=None, min_grades=None, **fields):
        return store.insert(COLLECTIONS["courses"], {
            "institution_id": institution_id,
            "institution_name": "Test Institution",
            "name": name,
            "description": "A course",
            "duration": "4 years",
            "requirements": {"subjects": subjects or [], "min_grades": min_grades or {}},
            **fields,
        })
    return _make


@pytest.fixture
def make_application(store):
    def _make(student_id, course, status="pending", published=False, applied_at=None):
        return store.insert(COLLECTIONS["applications"], {
            "student_id": student_id,
            "course_id": course["id"],
            "institution_id": course["institution_id"],
            "course_name": course["name"],
            "institution_name": course.get("institution_name"),
            "status": status,
            "admission_published": published,
            "applied_at": applied_at or utcnow(),
        })
    return _make


@pytest.fixture
def make_job(store):
    def _make(company_id, **fields):
        doc = {
            "company_id": company_id,
            "company_name": "Test Company",
            "title": "Graduate Engineer",
            "description": "Build things",
            "location": "Maseru",
            "deadline": future(),
            "active": True,
            "applicant_count": 0,
        }
        doc.update(fields)
        return store.insert(COLLECTIONS["jobs"], doc)
    return _make


@pytest.fixture
def pdf_data_uri():
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)
    return "data:application/pdf;base64," + base64.b64encode(buffer.getvalue()).decode()
