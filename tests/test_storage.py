from datetime import datetime, timedelta, timezone

from formdesk import services
from formdesk.utils import dumps_json, new_ulid


def _form(title, created_at, fields=None):
    return {
        "id": new_ulid(),
        "title": title,
        "description": "",
        "owner_name": "owner",
        "fields": fields
        or [
            {"id": "q1", "type": "text", "label": "Q1", "required": False, "placeholder": ""},
            {"id": "q2", "type": "select", "label": "Q2", "required": True, "placeholder": "", "options": ["A", "B"]},
        ],
        "is_published": False,
        "is_active": True,
        "published_at": None,
        "created_at": created_at,
        "updated_at": created_at,
    }


def test_form_round_trip_keeps_field_order_and_options(storage):
    now = datetime.now(timezone.utc)
    created = storage.forms.create_form(_form("One", now))
    loaded = storage.forms.get_form(created["id"])
    assert [field["id"] for field in loaded["fields"]] == ["q1", "q2"]
    assert [field["order"] for field in loaded["fields"]] == [0, 1]
    assert loaded["fields"][1]["options"] == ["A", "B"]
    assert "options" not in loaded["fields"][0]
    assert loaded["is_active"] is True


def test_list_forms_newest_first(storage):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    storage.forms.create_form(_form("old", base))
    storage.forms.create_form(_form("new", base + timedelta(days=1)))
    assert [form["title"] for form in storage.forms.list_forms()] == ["new", "old"]


def test_update_replaces_fields(storage):
    form = storage.forms.create_form(_form("One", datetime.now(timezone.utc)))
    updated = storage.forms.update_form(
        form["id"],
        {"title": "Renamed", "fields": [{"id": "only", "type": "email", "label": "E", "required": True}]},
    )
    assert updated["title"] == "Renamed"
    assert [field["id"] for field in updated["fields"]] == ["only"]


def test_delete_form_cascades_to_submissions(storage):
    now = datetime.now(timezone.utc)
    form = storage.forms.create_form(_form("One", now))
    other = storage.forms.create_form(_form("Two", now))
    for form_id in (form["id"], form["id"], other["id"]):
        storage.submissions.create_submission(
            {"id": new_ulid(), "form_id": form_id, "data": dumps_json({"q1": "x"}), "created_at": now}
        )
    assert storage.submissions.count_by_form() == {form["id"]: 2, other["id"]: 1}

    services.delete_form(storage, form["id"])

    assert storage.forms.get_form(form["id"]) is None
    remaining = storage.submissions.list_submissions()
    assert [item["form_id"] for item in remaining] == [other["id"]]


def test_submission_delete(storage):
    now = datetime.now(timezone.utc)
    form = storage.forms.create_form(_form("One", now))
    submission = storage.submissions.create_submission(
        {"id": new_ulid(), "form_id": form["id"], "data": "{}", "created_at": now}
    )
    assert storage.submissions.get_submission(submission["id"])["data"] == "{}"
    assert storage.submissions.delete_submission(submission["id"]) is True
    assert storage.submissions.delete_submission(submission["id"]) is False
    assert storage.forms.delete_form("missing") is False
