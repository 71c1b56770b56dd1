from datetime import date, timedelta

from vitraya.core.security import create_access_token


def _add_task(client, headers, title: str) -> dict:
    response = client.post("/dashboard/tasks", headers=headers, json={"title": title})
    assert response.status_code == 201
    return next(task for task in response.json()["tasks"] if task["title"] == title)


def test_summary_for_new_user(client, auth_headers) -> None:
    response = client.get("/dashboard/summary", headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Ada Lovelace"
    assert body["has_data"] is False
    assert body["latest_quiz"] is None
    assert body["tasks"] == []
    assert body["today_progress"] == 0
    assert body["tracking"]["weekly_activity"] == [0, 0, 0, 0, 0, 0, 0]
    assert body["upcoming_appointments"] == []
    assert len(body["articles"]) == 3


def test_greeting_falls_back_to_email_local_part(client, create_user) -> None:
    user = create_user(display_name=None, email="jane.doe@example.com")
    headers = {"Authorization": f"Bearer {create_access_token(str(user.id))}"}
    assert client.get("/dashboard/summary", headers=headers).json()["name"] == "Jane.doe"


def test_toggle_task_updates_progress_and_streak(client, auth_headers) -> None:
    _add_task(client, auth_headers, "Take medication")
    exercise = _add_task(client, auth_headers, "Exercise for 30 minutes")
    _add_task(client, auth_headers, "Eat 2 servings of vegetables")

    done = client.post(f"/dashboard/tasks/{exercise['id']}/toggle", headers=auth_headers)
    assert done.status_code == 200
    body = done.json()
    assert body["today_progress"] == 33
    assert body["streak_days"] == 1
    assert body["completed_goals"] == 1
    assert body["tracking"]["today_activity"] == 33
    assert body["tracking"]["weekly_activity"][date.today().weekday()] == 33

    undone = client.post(f"/dashboard/tasks/{exercise['id']}/toggle", headers=auth_headers).json()
    assert undone["today_progress"] == 0
    assert undone["streak_days"] == 1
    assert undone["completed_goals"] == 1
    assert undone["tracking"]["today_activity"] == 33

    summary = client.get("/dashboard/summary", headers=auth_headers).json()
    assert summary["has_data"] is True
    assert [task["title"] for task in summary["tasks"]] == [
        "Take medication",
        "Exercise for 30 minutes",
        "Eat 2 servings of vegetables",
    ]


def test_water_task_toggle_sets_water_tracking(client, auth_headers) -> None:
    water = _add_task(client, auth_headers, "Drink 8 glasses of Water")

    done = client.post(f"/dashboard/tasks/{water['id']}/toggle", headers=auth_headers).json()
    assert done["tracking"]["water_intake"] == 100
    assert done["tracking"]["glasses_count"] == 8
    assert done["today_progress"] == 100

    undone = client.post(f"/dashboard/tasks/{water['id']}/toggle", headers=auth_headers).json()
    assert undone["tracking"]["water_intake"] == 0
    assert undone["tracking"]["glasses_count"] == 0


def test_water_glasses_drive_water_task(client, auth_headers) -> None:
    _add_task(client, auth_headers, "Drink 8 glasses of water")
    _add_task(client, auth_headers, "Walk 10k steps")

    for _ in range(7):
        body = client.post("/dashboard/water", headers=auth_headers, json={"increment": True}).json()
    assert body["glasses_count"] == 7
    assert body["water_intake"] == 88
    assert body["tasks"][0]["completed"] is False

    full = client.post("/dashboard/water", headers=auth_headers, json={"increment": True}).json()
    assert full["glasses_count"] == 8
    assert full["water_intake"] == 100
    assert full["tasks"][0]["completed"] is True
    assert full["today_progress"] == 50

    capped = client.post("/dashboard/water", headers=auth_headers, json={"increment": True}).json()
    assert capped["glasses_count"] == 8

    less = client.post("/dashboard/water", headers=auth_headers, json={"increment": False}).json()
    assert less["glasses_count"] == 7
    assert less["water_intake"] == 88
    assert less["tasks"][0]["completed"] is False
    assert less["tracking"]["glasses_count"] == 7
    assert less["tracking"]["water_intake"] == 88


def test_water_never_below_zero(client, auth_headers) -> None:
    body = client.post("/dashboard/water", headers=auth_headers, json={"increment": False}).json()
    assert body["glasses_count"] == 0
    assert body["water_intake"] == 0


def test_update_tracking_percentages(client, auth_headers) -> None:
    response = client.put("/dashboard/tracking", headers=auth_headers, json={"sleep_quality": 85})
    assert response.status_code == 200
    assert response.json()["sleep_quality"] == 85
    assert response.json()["nutrition"] == 0
    assert client.put("/dashboard/tracking", headers=auth_headers, json={"nutrition": 150}).status_code == 422


def test_toggle_unknown_task_404(client, auth_headers) -> None:
    assert client.post("/dashboard/tasks/999999/toggle", headers=auth_headers).status_code == 404


def test_blank_task_title_rejected(client, auth_headers) -> None:
    assert client.post("/dashboard/tasks", headers=auth_headers, json={"title": "   "}).status_code == 422


def test_summary_lists_upcoming_appointments_in_clock_order(client, auth_headers) -> None:
    doctor_id = client.get("/doctors").json()[0]["id"]
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    later = client.post(
        "/appointments", headers=auth_headers, json={"doctor_id": doctor_id, "date": tomorrow, "time": "1:00 PM"}
    ).json()
    earlier = client.post(
        "/appointments", headers=auth_headers, json={"doctor_id": doctor_id, "date": tomorrow, "time": "9:30 AM"}
    ).json()
    cancelled = client.post(
        "/appointments", headers=auth_headers, json={"doctor_id": doctor_id, "date": tomorrow, "time": "10:00 AM"}
    ).json()
    client.post(f"/appointments/{cancelled['id']}/cancel", headers=auth_headers)

    upcoming = client.get("/dashboard/summary", headers=auth_headers).json()["upcoming_appointments"]
    assert [item["id"] for item in upcoming] == [earlier["id"], later["id"]]
