from lms_api.models.notification import Notification
from tests.conftest import auth_header

COURSE_PAYLOAD = {
    "title": "Data Wrangling",
    "description": "Cleaning messy data",
    "category": "Data Science",
    "level": "Intermediate",
    "duration_weeks": 5,
    "hours_per_week": 4,
    "max_students": 2,
    "price": 10.5,
    "tags": ["pandas"],
}


def test_public_listing_shows_only_published_courses(client):
    r = client.get("/api/courses")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total"] == 1
    assert body["courses"][0]["title"] == "Intro to Python"
    assert body["courses"][0]["instructor"]["email"] == "instructor1@example.com"


def test_unpublished_listing_depends_on_role(client, tokens):
    anon = client.get("/api/courses?published=false")
    assert anon.json()["total"] == 1

    owner = client.get("/api/courses?published=false", headers=auth_header(tokens["instructor"]))
    assert owner.json()["total"] == 2

    other = client.get("/api/courses?published=false", headers=auth_header(tokens["other_instructor"]))
    assert other.json()["total"] == 1

    admin = client.get("/api/courses?published=false", headers=auth_header(tokens["admin"]))
    assert admin.json()["total"] == 2


def test_course_search_matches_tags(client):
    r = client.get("/api/courses?search=basics")
    assert r.json()["total"] == 1
    r = client.get("/api/courses?search=nothing-like-this")
    assert r.json()["total"] == 0


def test_course_search_matches_each_tag_on_its_own(client, tokens):
    headers = auth_header(tokens["instructor"])
    created = client.post(
        "/api/courses",
        headers=headers,
        json={**COURSE_PAYLOAD, "tags": ["café", "data"]},
    )
    assert created.status_code == 201, created.text
    client.post(f"/api/courses/{created.json()['id']}/publish", headers=headers)

    r = client.get("/api/courses", params={"search": "café"})
    assert [c["title"] for c in r.json()["courses"]] == ["Data Wrangling"]

    # separators between tags are not part of any tag
    assert client.get("/api/courses", params={"search": "\", \""}).json()["total"] == 0
    assert client.get("/api/courses", params={"search": "%"}).json()["total"] == 0


def test_update_replaces_tags(client, tokens, seed):
    r = client.put(
        f"/api/courses/{seed['course']}",
        headers=auth_header(tokens["instructor"]),
        json={"tags": ["basics", "snakes", "basics"]},
    )
    assert r.status_code == 200, r.text
    assert r.json()["tags"] == ["basics", "snakes"]
    assert client.get("/api/courses?search=python").json()["total"] == 1
    assert client.get("/api/courses?search=snakes").json()["total"] == 1


def test_unpublished_course_hidden_from_public(client, tokens, seed):
    assert client.get(f"/api/courses/{seed['draft']}").status_code == 404
    r = client.get(f"/api/courses/{seed['draft']}", headers=auth_header(tokens["instructor"]))
    assert r.status_code == 200


def test_course_detail_lists_enrolled_students(client, seed):
    r = client.get(f"/api/courses/{seed['course']}")
    assert r.status_code == 200
    students = r.json()["enrolled_students"]
    assert [s["student"]["email"] for s in students] == ["student1@example.com"]
    assert students[0]["progress"] == 0


def test_student_cannot_create_course(client, tokens):
    r = client.post("/api/courses", headers=auth_header(tokens["student"]), json=COURSE_PAYLOAD)
    assert r.status_code == 403


def test_create_course_validation(client, tokens):
    bad = dict(COURSE_PAYLOAD, category="Cooking", max_students=0)
    r = client.post("/api/courses", headers=auth_header(tokens["instructor"]), json=bad)
    assert r.status_code == 400
    fields = {e["field"] for e in r.json()["errors"]}
    assert {"category", "max_students"} <= fields


def test_instructor_creates_course_without_fan_out(client, tokens, db_session):
    r = client.post("/api/courses", headers=auth_header(tokens["instructor"]), json=COURSE_PAYLOAD)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["is_published"] is False
    assert body["instructor"]["email"] == "instructor1@example.com"
    assert db_session.query(Notification).count() == 0


def test_admin_created_course_notifies_instructors(client, tokens, seed, db_session):
    r = client.post("/api/courses", headers=auth_header(tokens["admin"]), json=COURSE_PAYLOAD)
    assert r.status_code == 201, r.text

    rows = db_session.query(Notification).filter(Notification.type == "course_created").all()
    assert {n.recipient_id for n in rows} == {seed["instructor"], seed["other_instructor"]}
    assert all(n.related_course_id == r.json()["id"] for n in rows)


def test_non_owner_instructor_cannot_update(client, tokens, seed):
    r = client.put(
        f"/api/courses/{seed['course']}",
        headers=auth_header(tokens["other_instructor"]),
        json={"title": "Hijacked"},
    )
    assert r.status_code == 403


def test_owner_updates_course(client, tokens, seed):
    r = client.put(
        f"/api/courses/{seed['course']}",
        headers=auth_header(tokens["instructor"]),
        json={"title": "Intro to Python 3", "price": 5},
    )
    assert r.status_code == 200, r.text
    assert r.json()["title"] == "Intro to Python 3"
    assert r.json()["price"] == 5


def test_only_admin_reassigns_instructor(client, tokens, seed, db_session):
    url = f"/api/courses/{seed['course']}"
    denied = client.put(
        url,
        headers=auth_header(tokens["instructor"]),
        json={"instructor_id": seed["other_instructor"]},
    )
    assert denied.status_code == 403

    not_instructor = client.put(
        url,
        headers=auth_header(tokens["admin"]),
        json={"instructor_id": seed["student"]},
    )
    assert not_instructor.status_code == 400

    ok = client.put(
        url,
        headers=auth_header(tokens["admin"]),
        json={"instructor_id": seed["other_instructor"]},
    )
    assert ok.status_code == 200, ok.text
    assert ok.json()["instructor"]["id"] == seed["other_instructor"]

    n = db_session.query(Notification).filter(Notification.type == "course_assigned").one()
    assert n.recipient_id == seed["other_instructor"]


def test_enroll_twice_returns_400(client, tokens, seed, db_session):
    url = f"/api/courses/{seed['course']}/enroll"
    first = client.post(url, headers=auth_header(tokens["other_student"]))
    assert first.status_code == 200, first.text

    second = client.post(url, headers=auth_header(tokens["other_student"]))
    assert second.status_code == 400

    n = db_session.query(Notification).filter(Notification.type == "new_enrollment").one()
    assert n.recipient_id == seed["instructor"]
    assert n.related_user_id == seed["other_student"]


def test_enroll_in_unpublished_course_returns_400(client, tokens, seed):
    r = client.post(f"/api/courses/{seed['draft']}/enroll", headers=auth_header(tokens["student"]))
    assert r.status_code == 400


def test_enroll_in_full_course_returns_400(client, tokens, seed):
    client.put(
        f"/api/courses/{seed['course']}",
        headers=auth_header(tokens["instructor"]),
        json={"max_students": 1},
    )
    r = client.post(f"/api/courses/{seed['course']}/enroll", headers=auth_header(tokens["other_student"]))
    assert r.status_code == 400
    assert r.json()["detail"] == "Course is full"


def test_enroll_missing_course_returns_404(client, tokens):
    r = client.post("/api/courses/999999/enroll", headers=auth_header(tokens["student"]))
    assert r.status_code == 404


def test_unenroll_and_my_courses(client, tokens, seed):
    mine = client.get("/api/courses/me", headers=auth_header(tokens["student"]))
    assert [c["course"]["id"] for c in mine.json()] == [seed["course"]]

    r = client.post(f"/api/courses/{seed['course']}/unenroll", headers=auth_header(tokens["student"]))
    assert r.status_code == 200

    mine = client.get("/api/courses/me", headers=auth_header(tokens["student"]))
    assert mine.json() == []


def test_update_progress(client, tokens, seed):
    url = f"/api/courses/{seed['course']}/progress"
    r = client.put(url, headers=auth_header(tokens["student"]), json={"progress": 40, "completed_lessons": ["l1"]})
    assert r.status_code == 200, r.text
    assert r.json()["progress"] == 40
    assert r.json()["completed_lessons"] == ["l1"]

    too_much = client.put(url, headers=auth_header(tokens["student"]), json={"progress": 120})
    assert too_much.status_code == 400

    not_enrolled = client.put(url, headers=auth_header(tokens["other_student"]), json={"progress": 10})
    assert not_enrolled.status_code == 403


def test_cannot_delete_course_with_enrolled_students(client, tokens, seed):
    r = client.delete(f"/api/courses/{seed['course']}", headers=auth_header(tokens["instructor"]))
    assert r.status_code == 400


def test_owner_deletes_empty_course(client, tokens, seed):
    denied = client.delete(f"/api/courses/{seed['draft']}", headers=auth_header(tokens["other_instructor"]))
    assert denied.status_code == 403

    r = client.delete(f"/api/courses/{seed['draft']}", headers=auth_header(tokens["instructor"]))
    assert r.status_code == 200
    assert client.get(f"/api/courses/{seed['draft']}", headers=auth_header(tokens["admin"])).status_code == 404


def test_first_publish_notifies_students(client, tokens, seed, db_session):
    url = f"/api/courses/{seed['draft']}/publish"
    r = client.post(url, headers=auth_header(tokens["instructor"]))
    assert r.status_code == 200
    assert r.json()["is_published"] is True

    rows = db_session.query(Notification).filter(Notification.type == "course_published").all()
    # active students only
    assert {n.recipient_id for n in rows} == {seed["student"], seed["other_student"]}

    # unpublish then publish again: no second fan-out
    client.post(url, headers=auth_header(tokens["instructor"]))
    again = client.post(url, headers=auth_header(tokens["instructor"]))
    assert again.json()["is_published"] is True
    assert db_session.query(Notification).filter(Notification.type == "course_published").count() == 2


def test_instructor_course_listing(client, tokens, seed):
    public = client.get(f"/api/courses/instructor/{seed['instructor']}")
    assert [c["id"] for c in public.json()] == [seed["course"]]

    own = client.get(
        f"/api/courses/instructor/{seed['instructor']}",
        headers=auth_header(tokens["instructor"]),
    )
    assert {c["id"] for c in own.json()} == {seed["course"], seed["draft"]}
