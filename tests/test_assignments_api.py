from bson import ObjectId


async def test_admin_creates_and_students_list_by_week(client, auth_headers, seed_course):
    course = await seed_course()
    admin = auth_headers("admin_1", "admin")
    url = f"/api/courses/{course['_id']}/assignments"

    for week, title, due in [(2, "Essay", "2030-02-10T00:00:00Z"), (1, "Kana drill", "2030-02-03T00:00:00Z"),
                             (1, "Greetings", "2030-02-01T00:00:00Z")]:
        created = await client.post(url, json={"week": week, "title": title, "dueDate": due}, headers=admin)
        assert created.status_code == 201

    listed = await client.get(url, headers=auth_headers())
    assert [a["title"] for a in listed.json()["assignments"]] == ["Greetings", "Kana drill", "Essay"]
    assert listed.json()["assignments"][0]["courseName"] == "Japanese for Beginners"

    week_one = await client.get(url, params={"week": 1}, headers=auth_headers())
    assert week_one.json()["total"] == 2


async def test_students_cannot_create_assignments(client, auth_headers, seed_course):
    course = await seed_course()
    response = await client.post(
        f"/api/courses/{course['_id']}/assignments", json={"week": 1, "title": "x"}, headers=auth_headers()
    )
    assert response.status_code == 403


async def test_update_and_delete_assignment(client, auth_headers, seed_course):
    course = await seed_course()
    admin = auth_headers("admin_1", "admin")
    created = await client.post(
        f"/api/courses/{course['_id']}/assignments", json={"week": 3, "title": "Draft"}, headers=admin
    )
    assignment_id = created.json()["assignment"]["_id"]

    updated = await client.patch(f"/api/assignments/{assignment_id}", json={"points": 50, "title": ""}, headers=admin)
    assert updated.json()["assignment"]["points"] == 50
    assert updated.json()["assignment"]["title"] == "Draft"

    deleted = await client.delete(f"/api/assignments/{assignment_id}", headers=admin)
    assert deleted.json()["success"] is True
    again = await client.delete(f"/api/assignments/{assignment_id}", headers=admin)
    assert again.status_code == 404


async def test_submission_is_attributed_to_caller(client, auth_headers, make_token, mongo_db):
    token = make_token("student_9", email="nine@example.com", first_name="Aiko", last_name="Sato")
    response = await client.post(
        "/api/assignments/submit",
        json={"courseId": "c1", "assignmentId": "a1", "assignmentTitle": "Essay", "textAnswer": "  こんにちは  "},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 201
    stored = await mongo_db.assignment_submissions.find_one({"assignmentId": "a1"})
    assert stored["studentId"] == "student_9"
    assert stored["studentName"] == "Aiko Sato"
    assert stored["studentEmail"] == "nine@example.com"
    assert stored["textAnswer"] == "こんにちは"
    assert stored["status"] == "submitted"


async def test_empty_submission_is_rejected(client, auth_headers, mongo_db):
    response = await client.post(
        "/api/assignments/submit", json={"courseId": "c1", "assignmentId": "a1", "textAnswer": "   "}, headers=auth_headers()
    )
    assert response.status_code == 400
    assert await mongo_db.assignment_submissions.count_documents({}) == 0


async def test_submission_without_ids_is_rejected(client, auth_headers):
    response = await client.post("/api/assignments/submit", json={"textAnswer": "hi"}, headers=auth_headers())
    assert response.status_code == 400


async def test_list_own_submissions(client, auth_headers):
    for answer in ["first", "second"]:
        await client.post(
            "/api/assignments/submit",
            json={"courseId": "c1", "assignmentId": "a1", "textAnswer": answer},
            headers=auth_headers(),
        )
    await client.post(
        "/api/assignments/submit",
        json={"courseId": "c1", "assignmentId": "a1", "textAnswer": "other"},
        headers=auth_headers("someone_else"),
    )

    response = await client.get("/api/assignments/submit", params={"assignmentId": "a1"}, headers=auth_headers())
    answers = [s["textAnswer"] for s in response.json()["submissions"]]
    assert sorted(answers) == ["first", "second"]


async def test_assignment_for_unknown_course_is_404(client, auth_headers):
    response = await client.post(
        f"/api/courses/{ObjectId()}/assignments", json={"week": 1, "title": "x"}, headers=auth_headers("admin_1", "admin")
    )
    assert response.status_code == 404
