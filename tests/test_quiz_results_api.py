from bson import ObjectId

from factories import mcq_quiz, module


async def seeded_quiz(seed_course, correct=(0, 1, 2, 0)):
    course = await seed_course(modules=[module(items=[mcq_quiz(correct=correct)])])
    quiz = course["curriculum"]["modules"][0]["items"][0]
    return str(course["_id"]), quiz["_id"]


def payload(course_id, quiz_id, answers, score):
    return {
        "courseId": course_id,
        "quizId": quiz_id,
        "quizTitle": "Kana quiz",
        "answers": answers,
        "score": score,
        "totalQuestions": 4,
        "correctAnswers": 0,
    }


async def test_three_of_four_is_stored_as_75(client, auth_headers, seed_course, mongo_db):
    """Scenario B."""
    course_id, quiz_id = await seeded_quiz(seed_course)

    response = await client.post(
        "/api/quiz-results", json=payload(course_id, quiz_id, {"0": 0, "1": 1, "2": 2, "3": 2}, 75), headers=auth_headers()
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["attempt"]["score"] == 75
    stored = await mongo_db.quiz_results.find_one({"quizId": quiz_id})
    assert stored["score"] == 75
    assert stored["correctAnswers"] == 3
    assert stored["answers"] == {"0": 0, "1": 1, "2": 2, "3": 2}


async def test_server_recomputes_inflated_client_score(client, auth_headers, seed_course):
    course_id, quiz_id = await seeded_quiz(seed_course)
    response = await client.post(
        "/api/quiz-results", json=payload(course_id, quiz_id, {"0": 2}, 100), headers=auth_headers()
    )
    assert response.json()["data"]["score"] == 0


async def test_best_score_is_kept(client, auth_headers, seed_course):
    course_id, quiz_id = await seeded_quiz(seed_course)
    good = {"0": 0, "1": 1, "2": 2, "3": 0}
    worse = {"0": 0}

    await client.post("/api/quiz-results", json=payload(course_id, quiz_id, good, 100), headers=auth_headers())
    second = await client.post("/api/quiz-results", json=payload(course_id, quiz_id, worse, 25), headers=auth_headers())

    body = second.json()
    assert body["improved"] is False
    assert body["attempt"]["score"] == 25
    assert body["data"]["score"] == 100
    assert body["data"]["attempts"] == 2

    listed = await client.get("/api/quiz-results", params={"courseId": course_id}, headers=auth_headers())
    assert [r["score"] for r in listed.json()["results"]] == [100]


async def test_client_score_used_when_quiz_is_not_in_curriculum(client, auth_headers, seed_course):
    course = await seed_course()
    response = await client.post(
        "/api/quiz-results", json=payload(str(course["_id"]), "legacy-quiz", {"0": 1}, 60), headers=auth_headers()
    )
    assert response.json()["data"]["score"] == 60


async def test_results_are_per_user(client, auth_headers, seed_course):
    course_id, quiz_id = await seeded_quiz(seed_course)
    await client.post("/api/quiz-results", json=payload(course_id, quiz_id, {"0": 0}, 25), headers=auth_headers("a"))

    other = await client.get("/api/quiz-results", headers=auth_headers("b"))
    assert other.json()["results"] == []


async def test_missing_fields_are_rejected(client, auth_headers):
    response = await client.post("/api/quiz-results", json={"courseId": "x", "answers": {}}, headers=auth_headers())
    assert response.status_code == 400
    fields = {d["field"] for d in response.json()["details"]}
    assert {"quizId", "quizTitle", "score"} <= fields


async def test_unknown_course_is_404(client, auth_headers):
    response = await client.post(
        "/api/quiz-results", json=payload(str(ObjectId()), "q1", {"0": 0}, 0), headers=auth_headers()
    )
    assert response.status_code == 404
