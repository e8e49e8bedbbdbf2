from tests.conftest import auth_header


def test_admin_lists_users_with_pagination(client, tokens):
    r = client.get("/api/users?limit=2&page=2", headers=auth_header(tokens["admin"]))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total"] == 6
    assert body["total_pages"] == 3
    assert body["current_page"] == 2
    assert len(body["users"]) == 2
    assert all("hashed_password" not in u for u in body["users"])


def test_admin_user_search_and_role_filter(client, tokens):
    r = client.get("/api/users?search=INSTRUCTOR", headers=auth_header(tokens["admin"]))
    assert {u["email"] for u in r.json()["users"]} == {
        "instructor1@example.com",
        "instructor2@example.com",
    }

    r = client.get("/api/users?role=student", headers=auth_header(tokens["admin"]))
    assert r.json()["total"] == 3


def test_user_search_treats_wildcards_literally(client, tokens):
    r = client.get("/api/users", params={"search": "_"}, headers=auth_header(tokens["admin"]))
    assert r.json()["total"] == 0

    r = client.get("/api/users", params={"search": "%example"}, headers=auth_header(tokens["admin"]))
    assert r.json()["total"] == 0


def test_non_admin_cannot_list_users(client, tokens):
    r = client.get("/api/users", headers=auth_header(tokens["student"]))
    assert r.status_code == 403


def test_user_can_read_self_but_not_others(client, tokens, seed):
    own = client.get(f"/api/users/{seed['student']}", headers=auth_header(tokens["student"]))
    assert own.status_code == 200
    assert [c["course_id"] for c in own.json()["enrolled_courses"]] == [seed["course"]]

    other = client.get(f"/api/users/{seed['other_student']}", headers=auth_header(tokens["student"]))
    assert other.status_code == 403


def test_missing_user_returns_404(client, tokens):
    r = client.get("/api/users/999999", headers=auth_header(tokens["admin"]))
    assert r.status_code == 404


def test_admin_creates_user(client, tokens):
    payload = {
        "email": "creator@example.com",
        "password": "secret123",
        "first_name": "Cora",
        "last_name": "Creator",
        "role": "content_creator",
    }
    r = client.post("/api/users", headers=auth_header(tokens["admin"]), json=payload)
    assert r.status_code == 201, r.text
    assert r.json()["role"] == "content_creator"
    assert r.json()["status"] == "active"

    dup = client.post("/api/users", headers=auth_header(tokens["admin"]), json=payload)
    assert dup.status_code == 400


def test_non_admin_update_ignores_role_and_status(client, tokens, seed):
    r = client.put(
        f"/api/users/{seed['student']}",
        headers=auth_header(tokens["student"]),
        json={"first_name": "Sammy", "role": "admin", "status": "inactive"},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["first_name"] == "Sammy"
    assert body["role"] == "student"
    assert body["status"] == "active"


def test_admin_can_change_role(client, tokens, seed):
    r = client.put(
        f"/api/users/{seed['other_student']}",
        headers=auth_header(tokens["admin"]),
        json={"role": "instructor"},
    )
    assert r.status_code == 200
    assert r.json()["role"] == "instructor"


def test_update_to_taken_email_returns_400(client, tokens, seed):
    r = client.put(
        f"/api/users/{seed['student']}",
        headers=auth_header(tokens["student"]),
        json={"email": "student2@example.com"},
    )
    assert r.status_code == 400


def test_user_cannot_update_someone_else(client, tokens, seed):
    r = client.put(
        f"/api/users/{seed['other_student']}",
        headers=auth_header(tokens["student"]),
        json={"first_name": "Hacked"},
    )
    assert r.status_code == 403


def test_admin_cannot_delete_self(client, tokens, seed):
    r = client.delete(f"/api/users/{seed['admin']}", headers=auth_header(tokens["admin"]))
    assert r.status_code == 400


def test_cannot_delete_instructor_with_courses(client, tokens, seed):
    r = client.delete(f"/api/users/{seed['instructor']}", headers=auth_header(tokens["admin"]))
    assert r.status_code == 400


def test_admin_deletes_student(client, tokens, seed):
    r = client.delete(f"/api/users/{seed['student']}", headers=auth_header(tokens["admin"]))
    assert r.status_code == 200
    assert client.get(f"/api/users/{seed['student']}", headers=auth_header(tokens["admin"])).status_code == 404


def test_user_stats_overview(client, tokens):
    r = client.get("/api/users/stats/overview", headers=auth_header(tokens["admin"]))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total_users"] == 6
    assert body["active_users"] == 5
    assert body["inactive_users"] == 1
    by_role = {row["role"]: row["count"] for row in body["users_by_role"]}
    assert by_role == {"admin": 1, "instructor": 2, "student": 3}
    assert len(body["recent_users"]) == 5


def test_enroll_through_user_route(client, tokens, seed):
    url = f"/api/users/{seed['other_student']}/enroll/{seed['course']}"
    r = client.post(url, headers=auth_header(tokens["other_student"]))
    assert r.status_code == 200, r.text

    again = client.post(url, headers=auth_header(tokens["other_student"]))
    assert again.status_code == 400


def test_enroll_other_user_requires_admin(client, tokens, seed):
    url = f"/api/users/{seed['other_student']}/enroll/{seed['course']}"
    assert client.post(url, headers=auth_header(tokens["student"])).status_code == 403
    assert client.post(url, headers=auth_header(tokens["admin"])).status_code == 200
