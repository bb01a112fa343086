from career_api.db.mongodb import COLLECTIONS


def test_update_profile_subjects_and_scores(client, store, make_user):
    student_id, headers = make_user("student")
    response = client.put("/api/students/profile", headers=headers, json={
        "subjects": [{"name": "Math", "grade": "a"}, {"name": "English", "grade": "B"}],
        "academic_score": 78,
        "work_experience": 1,
        "skills": ["Python"],
    })
    assert response.status_code == 200

    profile = store.get(COLLECTIONS["students"], student_id)
    assert profile["subjects"][0] == {"name": "Math", "grade": "A"}
    assert profile["academic_score"] == 78


def test_update_profile_rejects_unknown_grade(client, make_user):
    _, headers = make_user("student")
    response = client.put("/api/students/profile", headers=headers, json={
        "subjects": [{"name": "Math", "grade": "A+"}]
    })
    assert response.status_code == 400


def test_course_application_flow(client, store, make_user, make_course):
    student_id, headers = make_user("student", subjects=[{"name": "Math", "grade": "B"}])
    courses = [make_course("inst-1", name=f"Course {i}", subjects=["Math"], min_grades={"Math": "C"}) for i in range(3)]

    for course in courses[:2]:
        response = client.post("/api/students/applications/apply", headers=headers, json={"course_id": course["id"]})
        assert response.status_code == 201

    response = client.post("/api/applications", headers=headers, json={"course_id": courses[2]["id"]})
    assert response.status_code == 400
    assert "maximum of 2" in response.json()["error"]

    listed = client.get("/api/students/applications", headers=headers).json()["applications"]
    assert len(listed) == 2
    assert {a["status"] for a in listed} == {"pending"}


def test_ineligible_application_is_rejected(client, make_user, make_course):
    _, headers = make_user("student", subjects=[{"name": "Math", "grade": "D"}])
    course = make_course("inst-1", subjects=["Math"], min_grades={"Math": "B"})
    response = client.post("/api/applications", headers=headers, json={"course_id": course["id"]})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_accept_admission_through_api(client, store, make_user, make_course, make_application):
    student_id, headers = make_user("student")
    chosen = make_application(student_id, make_course("inst-1", name="A"), "admitted", published=True)
    other = make_application(student_id, make_course("inst-2", name="B"), "admitted", published=True)

    admissions = client.get("/api/students/admissions", headers=headers).json()["admissions"]
    assert {a["id"] for a in admissions} == {chosen["id"], other["id"]}

    response = client.post("/api/students/admissions/accept", headers=headers, json={"application_id": chosen["id"]})
    assert response.status_code == 200
    assert response.json()["declined"] == [other["id"]]

    statuses = {a["id"]: a["status"] for a in store.find(COLLECTIONS["applications"])}
    assert statuses == {chosen["id"]: "accepted", other["id"]: "rejected"}

    # accepting again is not a legal transition
    response = client.post(f"/api/applications/{chosen['id']}/accept", headers=headers)
    assert response.status_code == 400


def test_accept_missing_application_is_404(client, make_user):
    _, headers = make_user("student")
    response = client.post("/api/applications/nope/accept", headers=headers)
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Application not found"}


def test_delete_pending_application_only(client, store, make_user, make_course, make_application):
    student_id, headers = make_user("student")
    pending = make_application(student_id, make_course("inst-1"))
    admitted = make_application(student_id, make_course("inst-2", name="B"), "admitted")

    assert client.delete(f"/api/students/applications/{pending['id']}", headers=headers).status_code == 200
    assert client.delete(f"/api/applications/{admitted['id']}", headers=headers).status_code == 400
    assert store.count(COLLECTIONS["applications"]) == 1


def test_transcript_upload_and_documents(client, store, make_user, pdf_data_uri):
    student_id, headers = make_user("student")

    response = client.post("/api/students/transcript", headers=headers, json={
        "file_data": pdf_data_uri, "file_name": "results.pdf"
    })
    assert response.status_code == 200
    profile = store.get(COLLECTIONS["students"], student_id)
    assert profile["has_transcript"] is True
    assert profile["transcript_verified"] is False

    documents = client.get("/api/students/documents", headers=headers).json()["documents"]
    assert [d["id"] for d in documents] == ["transcript"]
    assert "transcript_data" not in client.get("/api/students/profile", headers=headers).json()["student"]

    assert client.delete("/api/students/documents/transcript", headers=headers).status_code == 200
    assert store.get(COLLECTIONS["students"], student_id)["has_transcript"] is False
    assert client.delete("/api/students/documents/transcript", headers=headers).status_code == 404


def test_invalid_transcript_is_rejected(client, make_user):
    _, headers = make_user("student")
    response = client.post("/api/students/transcript", headers=headers, json={"file_data": "data:text/plain;base64,aGk="})
    assert response.status_code == 400


def test_final_documents_need_completed_studies(client, store, make_user, pdf_data_uri):
    student_id, headers = make_user("student")
    certificate = {"name": "AWS Cloud Practitioner", "file_data": pdf_data_uri}

    assert client.post("/api/students/certificates", headers=headers, json=certificate).status_code == 400
    assert client.post("/api/students/transcript/final", headers=headers, json={"file_data": pdf_data_uri}).status_code == 400

    assert client.post("/api/students/studies/completed", headers=headers).status_code == 200
    assert client.post("/api/students/certificates", headers=headers, json=certificate).status_code == 201
    assert client.post("/api/students/transcript/final", headers=headers, json={"file_data": pdf_data_uri}).status_code == 200

    documents = client.get("/api/students/documents", headers=headers).json()["documents"]
    assert [d["id"] for d in documents] == ["final-transcript", "certificate-0"]

    assert client.delete("/api/students/documents/certificate-0", headers=headers).status_code == 200
    assert store.get(COLLECTIONS["students"], student_id)["certificates"] == []
    assert client.delete("/api/students/documents/certificate-0", headers=headers).status_code == 404


def test_recommendations_need_transcript(client, make_user, make_job):
    make_job("co-1", min_academic_score=50)
    _, headers = make_user("student", academic_score=80)

    body = client.get("/api/students/jobs/recommendations", headers=headers).json()
    assert body["jobs"] == []
    assert "transcript" in body["message"]

    _, ready_headers = make_user("student", academic_score=80, has_transcript=True)
    jobs = client.get("/api/students/jobs/recommendations", headers=ready_headers).json()["jobs"]
    assert len(jobs) == 1
    assert jobs[0]["match_score"] == 100


def test_dashboard_counts(client, make_user, make_course, make_application):
    student_id, headers = make_user("student")
    make_application(student_id, make_course("inst-1"), "admitted", published=True)
    make_application(student_id, make_course("inst-2", name="B"), "pending")

    stats = client.get("/api/students/dashboard", headers=headers).json()["stats"]
    assert stats["total_applications"] == 2
    assert stats["admission_offers"] == 1
    assert stats["applications_by_status"] == {"admitted": 1, "pending": 1}
