from career_api.db.mongodb import COLLECTIONS


def test_approve_and_suspend_company(client, store, make_user):
    _, admin_headers = make_user("admin")
    company_id, company_headers = make_user("company", approved=False)

    response = client.put(f"/api/admin/companies/{company_id}/approve", headers=admin_headers)
    assert response.status_code == 200
    assert store.get(COLLECTIONS["companies"], company_id)["approved"] is True

    response = client.put(f"/api/admin/companies/{company_id}/suspend", headers=admin_headers)
    assert response.status_code == 200
    assert store.get(COLLECTIONS["users"], company_id)["active"] is False
    assert client.get("/api/companies/profile", headers=company_headers).status_code == 403

    assert client.put("/api/admin/institutions/missing/approve", headers=admin_headers).status_code == 404


def test_transcript_verification(client, store, make_user, pdf_data_uri):
    admin_id, admin_headers = make_user("admin")
    student_id, student_headers = make_user("student")
    client.post("/api/students/transcript", headers=student_headers, json={"file_data": pdf_data_uri})

    pending = client.get("/api/admin/transcripts/pending", headers=admin_headers).json()["pending_transcripts"]
    assert [p["student_id"] for p in pending] == [student_id]

    response = client.put(f"/api/admin/transcripts/{student_id}/reject", headers=admin_headers, json={})
    assert response.status_code == 400

    response = client.put(f"/api/admin/transcripts/{student_id}/reject", headers=admin_headers,
                          json={"reason": "Unreadable scan"})
    assert response.status_code == 200
    assert client.get("/api/admin/transcripts/pending", headers=admin_headers).json()["pending_transcripts"] == []

    # a fresh upload goes back into the queue and can be approved
    client.post("/api/students/transcript", headers=student_headers, json={"file_data": pdf_data_uri})
    response = client.put(f"/api/admin/transcripts/{student_id}/approve", headers=admin_headers)
    assert response.status_code == 200

    student = store.get(COLLECTIONS["students"], student_id)
    assert student["transcript_verified"] is True
    assert student["transcript_verified_by"] == admin_id


def test_dashboard_users_and_reports(client, make_user, make_course, make_application):
    _, admin_headers = make_user("admin")
    student_id, _ = make_user("student")
    institution_id, _ = make_user("institution", approved=False)
    make_application(student_id, make_course(institution_id), "admitted")

    stats = client.get("/api/admin/dashboard", headers=admin_headers).json()["stats"]
    assert stats["total_users"] == 3
    assert stats["pending_institutions"] == 1
    assert stats["applications"] == 1

    users = client.get("/api/admin/users?role=student", headers=admin_headers).json()["users"]
    assert [u["id"] for u in users] == [student_id]
    assert "password_hash" not in users[0]

    report = client.get("/api/admin/reports?type=applications", headers=admin_headers).json()["report"]
    assert report["by_status"] == {"admitted": 1}
    assert client.get("/api/admin/reports?type=bogus", headers=admin_headers).status_code == 400


def test_notifications_read_flow(client, store, make_user):
    user_id, headers = make_user("student")
    for title in ("First", "Second"):
        store.insert(COLLECTIONS["notifications"], {
            "user_id": user_id, "title": title, "message": "...", "type": "info", "read": False
        })

    body = client.get("/api/notifications", headers=headers).json()
    assert body["unread_count"] == 2
    first_id = body["notifications"][0]["id"]

    assert client.put(f"/api/notifications/{first_id}/read", headers=headers).status_code == 200
    assert client.get("/api/notifications", headers=headers).json()["unread_count"] == 1

    _, other_headers = make_user("student")
    assert client.put(f"/api/notifications/{first_id}/read", headers=other_headers).status_code == 404

    assert client.put("/api/notifications/read-all", headers=headers).json()["updated"] == 1
    assert client.get("/api/notifications?unread_only=true", headers=headers).json()["notifications"] == []
