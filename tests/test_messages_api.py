async def send(client, headers, **fields):
    body = {"receiverId": "admin", "subject": "Question", "message": "When is the next class?", **fields}
    return await client.post("/api/messages", json=body, headers=headers)


async def test_student_message_fans_out_to_every_admin(client, auth_headers, seed_user, mongo_db):
    await seed_user()
    await seed_user("admin_1", role="admin")
    await seed_user("admin_2", role="admin")

    response = await send(client, auth_headers())

    assert response.status_code == 201
    copies = response.json()["data"]
    assert {m["receiverId"] for m in copies} == {"admin_1", "admin_2"}
    assert len({m["threadId"] for m in copies}) == 1
    assert copies[0]["senderName"] == "Test User"


async def test_without_admins_message_goes_to_admin_team(client, auth_headers, seed_user, mongo_db):
    await seed_user()
    response = await send(client, auth_headers())

    [message] = response.json()["data"]
    assert message["receiverId"] == "ADMIN_TEAM"

    await seed_user("admin_1", role="admin")
    inbox = await client.get("/api/messages", headers=auth_headers("admin_1", "admin"))
    assert inbox.json()["unreadCount"] == 1


async def test_students_cannot_message_other_students(client, auth_headers, seed_user):
    await seed_user()
    await seed_user("student_2")
    response = await send(client, auth_headers(), receiverId="student_2")
    assert response.status_code == 403


async def test_reply_keeps_thread_and_inbox_counts(client, auth_headers, seed_user):
    await seed_user()
    await seed_user("admin_1", role="admin")
    admin = auth_headers("admin_1", "admin")

    original = (await send(client, auth_headers())).json()["data"][0]
    reply = await send(client, admin, receiverId="student_1", replyToId=original["_id"], message="Tomorrow at 9")
    assert reply.json()["data"][0]["threadId"] == original["threadId"]

    inbox = await client.get("/api/messages", headers=auth_headers())
    assert inbox.json()["unreadCount"] == 1
    [received] = inbox.json()["messages"]

    marked = await client.patch("/api/messages", json={"messageId": received["_id"]}, headers=auth_headers())
    assert marked.json()["data"]["isRead"] is True

    thread = await client.get(
        "/api/messages", params={"type": "thread", "threadId": original["threadId"]}, headers=auth_headers()
    )
    assert len(thread.json()["messages"]) == 2
    assert thread.json()["unreadCount"] == 0


async def test_only_receiver_can_mark_read(client, auth_headers, seed_user):
    await seed_user()
    await seed_user("admin_1", role="admin")
    [message] = (await send(client, auth_headers())).json()["data"]

    response = await client.patch("/api/messages", json={"messageId": message["_id"]}, headers=auth_headers())
    assert response.status_code == 404


async def test_soft_delete_hides_message_for_both_sides(client, auth_headers, seed_user, mongo_db):
    await seed_user()
    await seed_user("admin_1", role="admin")
    await seed_user("student_2")
    [message] = (await send(client, auth_headers())).json()["data"]

    stranger = await client.delete("/api/messages", params={"messageId": message["_id"]}, headers=auth_headers("student_2"))
    assert stranger.status_code == 403

    deleted = await client.delete("/api/messages", params={"messageId": message["_id"]}, headers=auth_headers())
    assert deleted.json()["success"] is True

    inbox = await client.get("/api/messages", headers=auth_headers("admin_1", "admin"))
    assert inbox.json()["messages"] == []
    stored = await mongo_db.messages.find_one({})
    assert stored["isDeleted"] is True and stored["deletedBy"] == "student_1"


async def test_sent_box_and_validation(client, auth_headers, seed_user):
    await seed_user()
    await seed_user("admin_1", role="admin")
    await send(client, auth_headers())

    sent = await client.get("/api/messages", params={"type": "sent"}, headers=auth_headers())
    assert len(sent.json()["messages"]) == 1

    missing_thread = await client.get("/api/messages", params={"type": "thread"}, headers=auth_headers())
    assert missing_thread.status_code == 400

    too_long = await send(client, auth_headers(), subject="x" * 201)
    assert too_long.status_code == 400
