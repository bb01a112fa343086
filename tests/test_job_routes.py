from career_api.db.mongodb import COLLECTIONS
from tests.conftest import future, past


def test_company_posts_and_updates_job(client, store, make_user):
    company_id, headers = make_user("company", name="Acme", industry="Software")

    response = client.post("/api/companies/jobs", headers=headers, json={
        "title": "Junior Developer",
        "description": "Write code",
        "location": "Maseru",
        "deadline": future().isoformat(),
        "min_academic_score": 70,
        "required_skills": ["Python"],
    })
    assert response.status_code == 201
    job = response.json()["job"]
    assert job["company_name"] == "Acme"
    assert job["active"] is True
    assert job["applicant_count"] == 0

    response = client.put(f"/api/companies/jobs/{job['id']}", headers=headers, json={"active": False})
    assert response.json()["job"]["active"] is False
    assert client.get("/api/jobs").json()["jobs"] == []


def test_public_job_list_hides_closed_jobs(client, make_job):
    open_job = make_job("co-1", title="Open Role")
    make_job("co-1", title="Expired Role", deadline=past())
    make_job("co-1", title="Inactive Role", active=False)

    jobs = client.get("/api/jobs").json()["jobs"]
    assert [j["id"] for j in jobs] == [open_job["id"]]
    assert client.get("/api/jobs?search=open").json()["total"] == 1
    assert client.get(f"/api/jobs/{open_job['id']}").json()["job"]["title"] == "Open Role"
    assert client.get("/api/jobs/missing").status_code == 404


def test_apply_to_job_scores_and_notifies(client, store, make_user, make_job):
    company_id, _ = make_user("company")
    student_id, headers = make_user("student", academic_score=60, work_experience=1)
    job = make_job(company_id, min_academic_score=80, min_work_experience=2)

    response = client.post(f"/api/jobs/{job['id']}/apply", headers=headers, json={"cover_letter": "Hire me"})
    assert response.status_code == 201
    body = response.json()
    assert body["match_score"] == 64
    assert body["interview_ready"] is False

    assert store.get(COLLECTIONS["jobs"], job["id"])["applicant_count"] == 1
    assert len(store.find(COLLECTIONS["notifications"], {"user_id": company_id})) == 1
    assert len(store.find(COLLECTIONS["notifications"], {"user_id": student_id})) == 1

    response = client.post(f"/api/jobs/{job['id']}/apply", headers=headers)
    assert response.status_code == 400
    assert "already applied" in response.json()["error"]


def test_cannot_apply_to_closed_job(client, make_user, make_job):
    _, headers = make_user("student")
    job = make_job("co-1", deadline=past())
    assert client.post(f"/api/jobs/{job['id']}/apply", headers=headers).status_code == 400
    assert client.post("/api/jobs/missing/apply", headers=headers).status_code == 404


def test_applicants_ranked_and_qualified_filter(client, make_user, make_job):
    company_id, headers = make_user("company")
    job = make_job(company_id, min_academic_score=80)

    strong_id, strong_headers = make_user("student", academic_score=90)
    weak_id, weak_headers = make_user("student", academic_score=40)
    client.post(f"/api/jobs/{job['id']}/apply", headers=weak_headers)
    client.post(f"/api/jobs/{job['id']}/apply", headers=strong_headers)

    applicants = client.get(f"/api/companies/jobs/{job['id']}/applicants", headers=headers).json()["applicants"]
    assert [a["student"]["id"] for a in applicants] == [strong_id, weak_id]
    assert [a["match_score"] for a in applicants] == [100, 50]

    qualified = client.get(f"/api/companies/jobs/{job['id']}/qualified-applicants", headers=headers).json()
    assert [a["student"]["id"] for a in qualified["applicants"]] == [strong_id]

    ready = client.get("/api/companies/candidates/interview-ready", headers=headers).json()
    assert ready["total"] == 1


def test_company_cannot_see_other_companies_applicants(client, make_user, make_job):
    _, headers = make_user("company")
    job = make_job("other-company")
    assert client.get(f"/api/companies/jobs/{job['id']}/applicants", headers=headers).status_code == 403


def test_update_job_application_status(client, store, make_user, make_job):
    company_id, headers = make_user("company")
    student_id, student_headers = make_user("student")
    job = make_job(company_id)
    application = client.post(f"/api/jobs/{job['id']}/apply", headers=student_headers).json()["application"]

    response = client.put(f"/api/companies/applications/{application['id']}/status", headers=headers,
                          json={"status": "shortlisted"})
    assert response.status_code == 200
    assert response.json()["application"]["status"] == "shortlisted"
    titles = [n["title"] for n in store.find(COLLECTIONS["notifications"], {"user_id": student_id})]
    assert "Application Shortlisted" in titles

    response = client.put(f"/api/companies/applications/{application['id']}/status", headers=headers,
                          json={"status": "promoted"})
    assert response.status_code == 400

    dashboard = client.get("/api/companies/dashboard", headers=headers).json()["stats"]
    assert dashboard["total_applications"] == 1
    assert dashboard["applications_by_status"] == {"shortlisted": 1}


def test_student_job_listing_marks_applied(client, make_user, make_job):
    _, headers = make_user("student", academic_score=90)
    applied = make_job("co-1", min_academic_score=60)
    other = make_job("co-1", title="Other")
    client.post(f"/api/jobs/{applied['id']}/apply", headers=headers)

    jobs = {j["id"]: j for j in client.get("/api/students/jobs", headers=headers).json()["jobs"]}
    assert jobs[applied["id"]]["has_applied"] is True
    assert jobs[other["id"]]["has_applied"] is False
    assert jobs[applied["id"]]["match_score"] == 100
