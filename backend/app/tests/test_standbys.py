"""
Tests for adding, editing and listing standbys.
"""
from datetime import date, timedelta

TODAY = date.today()
YESTERDAY = TODAY - timedelta(days=1)
TOMORROW = TODAY + timedelta(days=1)


def list_view(client, headers, view, **params):
    response = client.get("/api/standbys", params={"view": view, **params}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_create_normalizes_name_and_lands_in_owed_to_me(client, auth_headers, create_standby):
    standby = create_standby(person_name="  john   smith ", shift_date=YESTERDAY.isoformat())

    assert standby["person_name"] == "John Smith"
    assert standby["settled"] is False
    assert standby["settlement_group_id"] is None
    assert standby["status"] == "Active"

    owed = list_view(client, auth_headers, "owed_to_me")
    assert [s["id"] for s in owed] == [standby["id"]]
    assert list_view(client, auth_headers, "i_owe") == []


def test_create_requires_name(client, auth_headers):
    response = client.post(
        "/api/standbys",
        json={"person_name": "   ", "shift_date": YESTERDAY.isoformat(), "shift_type": "Day"},
        headers=auth_headers
    )
    assert response.status_code == 422
    assert response.json()["field"] == "person_name"

    response = client.post(
        "/api/standbys",
        json={"person_name": "John", "shift_type": "Day"},
        headers=auth_headers
    )
    assert response.status_code == 422
    assert response.json()["field"] == "shift_date"


def test_future_shift_goes_to_upcoming(client, auth_headers, create_standby):
    standby = create_standby(shift_date=TOMORROW.isoformat())

    assert list_view(client, auth_headers, "owed_to_me") == []
    agreed = list_view(client, auth_headers, "upcoming_agreed")
    assert [s["id"] for s in agreed] == [standby["id"]]
    assert list_view(client, auth_headers, "upcoming_requested") == []


def test_today_is_not_upcoming(client, auth_headers, create_standby):
    standby = create_standby(shift_date=TODAY.isoformat(), worked_for_me=True)

    assert list_view(client, auth_headers, "upcoming_requested") == []
    assert [s["id"] for s in list_view(client, auth_headers, "i_owe")] == [standby["id"]]


def test_duty_platoon_comes_from_roster(client, auth_headers, create_standby):
    response = client.put(
        "/api/roster",
        json={"days": [{"date": YESTERDAY.isoformat(), "day_platoon": "B", "night_platoon": "D"}]},
        headers=auth_headers
    )
    assert response.status_code == 200

    day = create_standby(shift_type="Day")
    night = create_standby(shift_type="Night")
    manual = create_standby(shift_type="Night", duty_platoon="A")

    assert day["duty_platoon"] == "B"
    assert night["duty_platoon"] == "D"
    assert manual["duty_platoon"] == "A"


def test_missing_roster_leaves_duty_platoon_empty(create_standby):
    standby = create_standby(shift_date="2001-02-03")
    assert standby["duty_platoon"] is None


def test_edit_rederives_duty_platoon(client, auth_headers, create_standby):
    client.put(
        "/api/roster",
        json={"days": [
            {"date": YESTERDAY.isoformat(), "day_platoon": "B", "night_platoon": "D"},
            {"date": (YESTERDAY - timedelta(days=1)).isoformat(), "day_platoon": "C", "night_platoon": "A"},
        ]},
        headers=auth_headers
    )
    standby = create_standby()
    assert standby["duty_platoon"] == "B"

    response = client.patch(
        f"/api/standbys/{standby['id']}",
        json={"shift_date": (YESTERDAY - timedelta(days=1)).isoformat(), "person_name": "jane DOE"},
        headers=auth_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["duty_platoon"] == "C"
    assert data["person_name"] == "Jane Doe"
    assert data["shift_type"] == "Day"


def test_edit_does_not_touch_settlement(client, auth_headers, create_standby):
    a = create_standby()
    b = create_standby(worked_for_me=True)
    client.post("/api/settlements", json={"a_id": a["id"], "b_id": b["id"]}, headers=auth_headers)

    response = client.patch(f"/api/standbys/{a['id']}", json={"notes": "swapped at the station"}, headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["settled"] is True
    assert data["notes"] == "swapped at the station"


def test_edit_missing_standby(client, auth_headers):
    response = client.patch("/api/standbys/999", json={"notes": "x"}, headers=auth_headers)
    assert response.status_code == 404


def test_unknown_view_is_rejected(client, auth_headers):
    response = client.get("/api/standbys", params={"view": "everything"}, headers=auth_headers)
    assert response.status_code == 422
    assert response.json()["field"] == "view"


def test_search_filter_and_sort(client, auth_headers, create_standby):
    create_standby(person_name="alice jones", platoon="A", shift_date=(YESTERDAY - timedelta(days=2)).isoformat())
    create_standby(person_name="bob brown", platoon="B", shift_date=(YESTERDAY - timedelta(days=1)).isoformat())
    create_standby(person_name="carl jones", platoon="B", shift_date=YESTERDAY.isoformat())

    rows = list_view(client, auth_headers, "owed_to_me")
    assert [r["person_name"] for r in rows] == ["Carl Jones", "Bob Brown", "Alice Jones"]

    rows = list_view(client, auth_headers, "owed_to_me", search="JONES")
    assert [r["person_name"] for r in rows] == ["Carl Jones", "Alice Jones"]

    rows = list_view(client, auth_headers, "owed_to_me", platoon="B", sort="name_az")
    assert [r["person_name"] for r in rows] == ["Bob Brown", "Carl Jones"]

    rows = list_view(client, auth_headers, "owed_to_me", sort="date_asc")
    assert [r["person_name"] for r in rows] == ["Alice Jones", "Bob Brown", "Carl Jones"]

    response = client.get("/api/standbys", params={"sort": "sideways"}, headers=auth_headers)
    assert response.status_code == 422


def test_name_suggestions_and_platoons(client, auth_headers, create_standby):
    create_standby(person_name="john smith", platoon="C")
    create_standby(person_name="John Smith", platoon="A")
    create_standby(person_name="amy lee")

    response = client.get("/api/standbys/names", headers=auth_headers)
    assert response.json()["names"] == ["Amy Lee", "John Smith"]

    response = client.get("/api/standbys/platoons", headers=auth_headers)
    assert response.json() == ["A", "C"]


def test_narrative_for_unsettled_standby(client, auth_headers, create_standby):
    standby = create_standby(person_name="john smith", duty_platoon="B", worked_for_me=True)

    response = client.get(f"/api/standbys/{standby['id']}/narrative", headers=auth_headers)
    assert response.status_code == 200
    day = YESTERDAY.strftime("%d %b %Y")
    assert response.json()["narrative"] == (
        f"John Smith worked for you on {day} - B Platoon Day. You owe them a shift."
    )


def test_settle_candidates_run_the_other_way(client, auth_headers, create_standby):
    owed = create_standby()
    owe = create_standby(worked_for_me=True)
    create_standby(worked_for_me=True, person_name="someone else")
    other_owed = create_standby()

    response = client.get(f"/api/standbys/{owed['id']}/candidates", headers=auth_headers)
    assert response.status_code == 200
    ids = [c["id"] for c in response.json()]
    assert owe["id"] in ids
    assert other_owed["id"] not in ids
    assert owed["id"] not in ids
