from datetime import date

import pytest
from sqlalchemy.exc import SQLAlchemyError

from caltrack.services import group
from caltrack.services.day_log_service import add_entry
from caltrack.services.group import load_group_day, load_visible_group_day
from caltrack.services.sequencing import RequestSequencer
from caltrack.services.profiles import default_selection, list_group_members, upsert_profile

DAY = date(2024, 5, 15)


def test_member_without_log_contributes_zero(app, make_user):
    a = make_user("a@example.com", "Ann", "club")
    b = make_user("b@example.com", "Ben", "club")
    add_entry(b, DAY, {"name": "Eggs", "calories": 140, "protein_g": 12, "fat_g": 10})
    add_entry(b, DAY, {"name": "Toast", "calories": 90, "protein_g": 3, "carbs_g": 15, "grams": 30})

    result = load_group_day([a, b], DAY, names={a: "Ann", b: "Ben"})

    zero = {"calories": 0, "protein": 0, "carbs": 0, "fat": 0, "grams": 0}
    assert list(result["totals_by_user"]) == [str(a), str(b)]
    assert result["totals_by_user"][str(a)] == zero
    assert result["totals_by_user"][str(b)] == {"calories": 230, "protein": 15, "carbs": 15, "fat": 10, "grams": 30}
    assert result["grand_total"] == result["totals_by_user"][str(b)]
    assert [r["name"] for r in result["rows"]] == ["Eggs", "Toast"]


def test_rows_sorted_by_member_name_then_time(app, make_user):
    zoe = make_user("z@example.com", "Zoe", "club")
    amy = make_user("amy@example.com", "Amy", "club")
    add_entry(zoe, DAY, {"name": "Zoe breakfast", "calories": 300})
    add_entry(amy, DAY, {"name": "Amy breakfast", "calories": 250})
    add_entry(zoe, DAY, {"name": "Zoe lunch", "calories": 500})
    add_entry(amy, DAY, {"name": "Amy lunch", "calories": 450})

    result = load_group_day([zoe, amy], DAY, names={zoe: "Zoe", amy: "Amy"})

    assert [r["name"] for r in result["rows"]] == ["Amy breakfast", "Amy lunch", "Zoe breakfast", "Zoe lunch"]
    # Totals keep the caller's member order
    assert list(result["totals_by_user"]) == [str(zoe), str(amy)]
    assert result["grand_total"]["calories"] == 1500


def test_empty_member_list(app):
    result = load_group_day([], DAY)
    assert result["rows"] == []
    assert result["grand_total"]["calories"] == 0


def test_list_group_members_puts_me_first(app, make_user):
    me = make_user("me@example.com", "Mia", "club")
    make_user("x@example.com", "", "club")
    make_user("y@example.com", "Al", "club")
    make_user("outsider@example.com", "Olly", "other")

    members = list_group_members(me)
    assert [m["display_name"] for m in members] == ["Mia (you)", "(no name)", "Al"]
    assert members[0]["is_me"] is True


def test_list_group_members_requires_code(app, make_user):
    me = make_user("solo@example.com", "Solo", "")
    with pytest.raises(ValueError) as exc:
        list_group_members(me)
    assert str(exc.value).startswith("NO_GROUP_CODE")


def test_default_selection():
    members = [{"user_id": 1}, {"user_id": 2}, {"user_id": 3}]
    assert default_selection(members, me=2, previous=[3, 9]) == [3]
    assert default_selection(members, me=2, previous=[9]) == [2]
    assert default_selection(members, me=7) == [1]
    assert default_selection([], me=7) == []


def test_visible_group_day_rejects_outsiders(app, make_user):
    me = make_user("me2@example.com", "Me", "club")
    outsider = make_user("out@example.com", "Out", "elsewhere")
    with pytest.raises(ValueError) as exc:
        load_visible_group_day(me, [me, outsider], DAY)
    assert str(exc.value).startswith("FORBIDDEN")


def test_upsert_profile_replaces_values(app, make_user):
    uid = make_user("p@example.com", "Old", "old-code")
    profile = upsert_profile(uid, "  New name ", " new-code ")
    assert profile == {"user_id": uid, "display_name": "New name", "group_code": "new-code"}


def test_group_api_flow(client, auth):
    me, my_headers = auth("leader@example.com", "Lee")
    friend, friend_headers = auth("friend@example.com", "Fay")

    for headers in (my_headers, friend_headers):
        r = client.put("/api/group/profile", headers=headers, json={
            "display_name": "Lee" if headers is my_headers else "Fay", "group_code": "gym",
        })
        assert r.status_code == 200, r.data

    r = client.post("/api/day/entries", headers=friend_headers, json={
        "date": "2024-05-15", "name": "Protein shake", "calories": 200, "protein_g": 30,
    })
    assert r.status_code == 201, r.data

    r = client.get("/api/group/members", headers=my_headers)
    assert r.status_code == 200, r.data
    body = r.get_json()
    assert [m["display_name"] for m in body["members"]] == ["Lee (you)", "Fay"]
    assert body["selected"] == [me]

    r = client.get(f"/api/group/day?date=2024-05-15&members={me},{friend}", headers=my_headers)
    assert r.status_code == 200, r.data
    body = r.get_json()
    assert body["grand_total"]["protein"] == 30
    assert body["rows"][0]["member_name"] == "Fay"
    assert body["rows"][0]["reactions"] == []


def test_group_day_forbidden_resets_output(client, auth):
    _, headers = auth("lonely@example.com", "Lone")
    r = client.put("/api/group/profile", headers=headers, json={"display_name": "Lone", "group_code": "solo"})
    assert r.status_code == 200

    r = client.get("/api/group/day?date=2024-05-15&members=999", headers=headers)
    assert r.status_code == 403
    err = r.get_json()["error"]
    assert err["code"] == "FORBIDDEN"
    assert err["rows"] == []
    assert err["grand_total"]["calories"] == 0


def test_rows_and_members_share_case_insensitive_order(app, make_user):
    me = make_user("bo@example.com", "Bo", "club")
    amy = make_user("amy2@example.com", "amy", "club")
    cal = make_user("cal@example.com", "Cal", "club")
    for uid in (me, amy, cal):
        add_entry(uid, DAY, {"name": "Lunch", "calories": 500})

    members = list_group_members(me)
    assert [m["display_name"] for m in members] == ["Bo (you)", "amy", "Cal"]

    result = load_visible_group_day(me, [cal, amy], DAY)
    assert [r["member_name"] for r in result["rows"]] == ["amy", "Cal"]


def test_overtaken_group_load_is_discarded(app, make_user, monkeypatch):
    me = make_user("slow@example.com", "Slow", "club")
    add_entry(me, DAY, {"name": "Oats", "calories": 300})
    seq = RequestSequencer()
    real = group.load_group_day

    def overtaken(member_ids, day, names=None, viewer_id=None):
        result = real(member_ids, day, names=names, viewer_id=viewer_id)
        seq.issue(("group", me))  # the user picked another date meanwhile
        return result

    monkeypatch.setattr(group, "load_group_day", overtaken)
    result = load_visible_group_day(me, [me], DAY, sequencer=seq)
    assert result["stale"] is True
    assert result["rows"] == []
    assert result["totals_by_user"] == {}

    monkeypatch.setattr(group, "load_group_day", real)
    result = load_visible_group_day(me, [me], DAY, sequencer=seq)
    assert result["stale"] is False
    assert result["request_token"] == 3
    assert result["grand_total"]["calories"] == 300


def test_group_day_returns_request_token(client, auth):
    me, headers = auth("token@example.com", "Tok")
    client.put("/api/group/profile", headers=headers, json={"display_name": "Tok", "group_code": "tk"})

    first = client.get(f"/api/group/day?date=2024-05-15&members={me}", headers=headers).get_json()
    second = client.get(f"/api/group/day?date=2024-05-16&members={me}", headers=headers).get_json()
    assert first["stale"] is False
    assert second["request_token"] == first["request_token"] + 1


def test_group_day_query_failure_resets_outputs(client, auth, monkeypatch):
    me, headers = auth("broken@example.com", "Broke")
    client.put("/api/group/profile", headers=headers, json={"display_name": "Broke", "group_code": "bk"})
    client.post("/api/day/entries", headers=headers, json={"date": "2024-05-15", "name": "Rice", "calories": 200})

    def failing_load(*args, **kwargs):
        raise SQLAlchemyError("connection reset")

    monkeypatch.setattr(group, "load_group_day", failing_load)
    r = client.get(f"/api/group/day?date=2024-05-15&members={me}", headers=headers)
    assert r.status_code == 500
    err = r.get_json()["error"]
    assert err["code"] == "BACKEND_ERROR"
    assert err["rows"] == []
    assert err["totals_by_user"] == {}
    assert err["grand_total"] == {"calories": 0, "protein": 0, "carbs": 0, "fat": 0, "grams": 0}
