from datetime import date, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from caltrack.extensions import db
from caltrack.models.food_entry import FoodEntry
from caltrack.controllers import copy_controller
from caltrack.services import quick_copy
from caltrack.services.day_log_service import add_entry, ensure_daily_log
from caltrack.services.quick_copy import (
    copy_entries,
    expand_group_keys,
    filter_candidates,
    group_by_name,
    load_copy_candidates,
    load_copy_view,
    normalize_name,
    resolve_range,
)
from caltrack.services.sequencing import RequestSequencer
from caltrack.utils.dates import to_iso_date, today_local

TODAY = date(2024, 5, 15)


def test_normalize_name():
    assert normalize_name("  Greek   Yogurt ") == "greek yogurt"
    assert normalize_name(None) == ""


def test_resolve_named_ranges_end_yesterday():
    r = resolve_range("yesterday", today=TODAY)
    assert (r.start, r.end, r.single_day) == (date(2024, 5, 14), date(2024, 5, 14), True)

    r = resolve_range("week", today=TODAY)
    assert (r.start, r.end, r.single_day) == (date(2024, 5, 8), date(2024, 5, 14), False)

    r = resolve_range("month", today=TODAY)
    assert (r.end - r.start).days == 29


def test_resolve_explicit_source_date_wins():
    r = resolve_range("month", source_date="2024-04-02", today=TODAY)
    assert r.start == r.end == date(2024, 4, 2)
    assert r.single_day


def test_resolve_rejects_unknown_range():
    with pytest.raises(ValueError):
        resolve_range("decade", today=TODAY)


def _candidate(id, name, day, meal="Snack", calories=100, protein_g=1):
    return {
        "id": id, "name": name, "source_date": day, "meal": meal,
        "calories": calories, "protein_g": protein_g, "carbs_g": 0, "fat_g": 0, "grams": None,
    }


def test_group_by_name_merges_spelling_variants():
    candidates = [
        _candidate(1, "Banana", "2024-05-14", meal="Snack", calories=105, protein_g=1),
        _candidate(2, " banana ", "2024-05-13", meal="Breakfast", calories=90, protein_g=1),
        _candidate(3, "BANANA", "2024-05-12", meal="Snack", calories=120, protein_g=2),
        _candidate(4, "Oatmeal", "2024-05-12", meal="Breakfast", calories=230, protein_g=8),
    ]
    groups = group_by_name(candidates)

    assert [g["key"] for g in groups] == ["banana", "oatmeal"]
    banana = groups[0]
    assert banana["count"] == 3
    assert banana["totals"]["calories"] == 315
    assert banana["totals"]["protein"] == 4
    assert banana["meals"] == ["Snack", "Breakfast"]
    assert banana["days"] == ["2024-05-14", "2024-05-13", "2024-05-12"]
    assert banana["entry_ids"] == [1, 2, 3]

    assert expand_group_keys(candidates, ["BANANA"]) == [1, 2, 3]


def test_filter_candidates_does_not_mutate_input():
    candidates = [
        _candidate(1, "Chicken Wrap", "2024-05-14", meal="Lunch"),
        _candidate(2, "Chicken soup", "2024-05-14", meal="Dinner"),
        _candidate(3, "Apple", "2024-05-14", meal="Snack"),
    ]
    before = list(candidates)

    assert [c["id"] for c in filter_candidates(candidates, meal="All", search="CHICKEN")] == [1, 2]
    assert [c["id"] for c in filter_candidates(candidates, meal="Dinner", search="chicken")] == [2]
    assert filter_candidates(candidates, meal="Breakfast") == []
    assert candidates == before


def test_load_candidates_orders_windows_newest_first(app, make_user):
    uid = make_user("copy@example.com", "Copy")
    today = today_local()
    add_entry(uid, today - timedelta(days=3), {"name": "Old toast", "calories": 150})
    add_entry(uid, today - timedelta(days=1), {"name": "Eggs", "calories": 140})
    add_entry(uid, today - timedelta(days=1), {"name": "Coffee", "calories": 5})
    add_entry(uid, today, {"name": "Not yet", "calories": 1})

    week = load_copy_candidates(uid, resolve_range("week"))
    assert [c["name"] for c in week] == ["Coffee", "Eggs", "Old toast"]
    assert week[0]["source_date"] == to_iso_date(today - timedelta(days=1))

    single = load_copy_candidates(uid, resolve_range(source_date=today - timedelta(days=1)))
    assert [c["name"] for c in single] == ["Eggs", "Coffee"]


def test_empty_window_reports_explicit_status(app, make_user):
    uid = make_user("empty@example.com")
    payload = load_copy_view(uid, resolve_range("week"))
    assert payload["status"] == "empty"
    assert payload["items"] == []
    assert payload["message"] == "No entries found for the last 7 days."


def test_stale_candidate_load_is_discarded(app, make_user, monkeypatch):
    uid = make_user("stale@example.com")
    add_entry(uid, today_local() - timedelta(days=1), {"name": "Eggs", "calories": 140})
    seq = RequestSequencer()
    real = quick_copy.load_copy_candidates

    def overtaken(user_id, copy_range):
        rows = real(user_id, copy_range)
        seq.issue(("copy", user_id))  # a newer request started meanwhile
        return rows

    monkeypatch.setattr(quick_copy, "load_copy_candidates", overtaken)
    payload = load_copy_view(uid, resolve_range("yesterday"), sequencer=seq)
    assert payload["stale"] is True
    assert payload["items"] == []

    monkeypatch.setattr(quick_copy, "load_copy_candidates", real)
    payload = load_copy_view(uid, resolve_range("yesterday"), sequencer=seq)
    assert payload["stale"] is False
    assert [c["name"] for c in payload["items"]] == ["Eggs"]


def test_copy_entries_copies_verbatim_with_fresh_identity(app, make_user):
    uid = make_user("dup@example.com")
    yesterday = today_local() - timedelta(days=1)
    src = add_entry(uid, yesterday, {"name": "Rice", "grams": None, "calories": 200, "meal": "Dinner"})

    result = copy_entries(uid, today_local(), [src["id"]])
    assert result["copied"] == 1
    assert result["message"] == f"Copied 1 item to {to_iso_date(today_local())}."

    copied = result["entries"][0]
    assert copied["id"] != src["id"]
    assert copied["daily_log_id"] != src["daily_log_id"]
    assert (copied["name"], copied["grams"], copied["calories"], copied["meal"]) == ("Rice", None, 200, "Dinner")
    assert copied["protein_g"] == 0


def test_copy_entries_rejects_foreign_ids_without_writing(app, make_user):
    me = make_user("me@example.com")
    other = make_user("other@example.com")
    theirs = add_entry(other, today_local(), {"name": "Cake", "calories": 400})
    mine = add_entry(me, today_local() - timedelta(days=1), {"name": "Salad", "calories": 150})

    with pytest.raises(ValueError) as exc:
        copy_entries(me, today_local(), [mine["id"], theirs["id"]])
    assert str(exc.value).startswith("ENTRY_NOT_FOUND")

    dest = ensure_daily_log(me, today_local())
    assert FoodEntry.query.filter_by(daily_log_id=dest.id).count() == 0


def test_copy_entries_is_all_or_nothing(app, make_user, monkeypatch):
    uid = make_user("atomic@example.com")
    yesterday = today_local() - timedelta(days=1)
    ids = [add_entry(uid, yesterday, {"name": n, "calories": 100})["id"] for n in ("A", "B", "C")]
    dest = ensure_daily_log(uid, today_local())
    dest_id = dest.id

    def failing_commit(self):
        raise SQLAlchemyError("connection dropped")

    monkeypatch.setattr(type(db.session), "commit", failing_commit)
    with pytest.raises(SQLAlchemyError):
        copy_entries(uid, today_local(), ids)
    monkeypatch.undo()

    assert FoodEntry.query.filter_by(daily_log_id=dest_id).count() == 0


def test_copy_api_expands_groups(client, auth):
    uid, headers = auth("grouped@example.com", "Grouped")
    yesterday = to_iso_date(today_local() - timedelta(days=1))
    three_days_ago = to_iso_date(today_local() - timedelta(days=3))
    for day, name in [(yesterday, "Banana"), (three_days_ago, " banana "), (three_days_ago, "Toast")]:
        r = client.post("/api/day/entries", headers=headers, json={"date": day, "name": name, "calories": 100})
        assert r.status_code == 201, r.data

    r = client.get("/api/copy/candidates?range=week&grouped=1", headers=headers)
    assert r.status_code == 200, r.data
    body = r.get_json()
    assert body["status"] == "ok"
    assert {g["key"]: g["count"] for g in body["items"]} == {"banana": 2, "toast": 1}

    r = client.post("/api/copy", headers=headers, json={"group_keys": ["banana"], "range": "week"})
    assert r.status_code == 201, r.data
    body = r.get_json()
    assert body["copied"] == 2
    assert body["day"]["totals"]["calories"] == 200


def test_copy_api_validation(client, auth):
    _, headers = auth("nothing@example.com")
    r = client.post("/api/copy", headers=headers, json={"entry_ids": []})
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "VALIDATION_ERROR"

    r = client.get("/api/copy/candidates?meal=Brunch", headers=headers)
    assert r.status_code == 400

    r = client.get("/api/copy/candidates?range=decade", headers=headers)
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "INVALID_RANGE"


def test_copy_group_respects_picker_filters(client, auth):
    _, headers = auth("filtered@example.com", "Filtered")
    yesterday = to_iso_date(today_local() - timedelta(days=1))
    three_days_ago = to_iso_date(today_local() - timedelta(days=3))
    for day, name, meal in [(yesterday, "Banana", "Breakfast"), (three_days_ago, "banana", "Snack")]:
        r = client.post("/api/day/entries", headers=headers, json={"date": day, "name": name, "meal": meal, "calories": 100})
        assert r.status_code == 201, r.data

    r = client.get("/api/copy/candidates?range=week&grouped=1&meal=Breakfast", headers=headers)
    assert [(g["key"], g["count"]) for g in r.get_json()["items"]] == [("banana", 1)]

    r = client.post("/api/copy", headers=headers, json={
        "group_keys": ["banana"], "range": "week", "meal": "Breakfast",
    })
    assert r.status_code == 201, r.data
    body = r.get_json()
    assert body["copied"] == 1
    assert [e["meal"] for e in body["entries"]] == ["Breakfast"]

    r = client.post("/api/copy", headers=headers, json={
        "group_keys": ["banana"], "range": "week", "search": "toast",
    })
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "NOTHING_SELECTED"

    r = client.post("/api/copy", headers=headers, json={"group_keys": ["banana"], "range": "week", "meal": "Brunch"})
    assert r.status_code == 400


def test_copy_reports_committed_rows_when_reload_fails(client, auth, monkeypatch):
    uid, headers = auth("reload@example.com", "Reload")
    yesterday = to_iso_date(today_local() - timedelta(days=1))
    r = client.post("/api/day/entries", headers=headers, json={"date": yesterday, "name": "Soup", "calories": 120})
    entry_id = r.get_json()["entry"]["id"]

    def broken_reload(user_id, day):
        raise SQLAlchemyError("read replica gone")

    monkeypatch.setattr(copy_controller, "load_day", broken_reload)
    r = client.post("/api/copy", headers=headers, json={"entry_ids": [entry_id]})
    assert r.status_code == 201, r.data
    body = r.get_json()
    assert body["copied"] == 1
    assert body["day"] is None
    assert "read replica gone" in body["reload_error"]

    dest = ensure_daily_log(uid, today_local())
    assert FoodEntry.query.filter_by(daily_log_id=dest.id).count() == 1
