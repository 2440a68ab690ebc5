from formdesk.services import NOT_ACTIVE_MESSAGE, NOT_PUBLISHED_MESSAGE
from formdesk.validation import EMAIL_MESSAGE, REQUIRED_MESSAGE

VALID_DATA = {"name": "Ann", "email": "ann@example.com", "topics": ["News"]}


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_create_form_fills_defaults(client):
    response = client.post(
        "/api/forms",
        json={"fields": [{"type": "radio"}, {"id": "e", "type": "email", "label": "Email"}]},
    )
    assert response.status_code == 201
    form = response.json()
    assert form["title"] == "Untitled Form"
    assert form["is_published"] is False
    assert form["is_active"] is True
    assert form["submission_count"] == 0
    radio, email = form["fields"]
    assert radio["label"] == "Radio Field"
    assert radio["options"] == ["Option 1", "Option 2"]
    assert email["id"] == "e"
    assert [field["order"] for field in form["fields"]] == [0, 1]


def test_create_form_requires_fields(client):
    response = client.post("/api/forms", json={"title": "Empty", "fields": []})
    assert response.status_code == 400
    assert "Fields array is required" in response.json()["detail"]


def test_create_form_rejects_unknown_type_and_duplicates(client):
    assert client.post("/api/forms", json={"fields": [{"type": "signature"}]}).status_code == 400
    duplicate = client.post(
        "/api/forms",
        json={"fields": [{"id": "a", "type": "text"}, {"id": "a", "type": "text"}]},
    )
    assert duplicate.status_code == 400
    assert "duplicate field id" in duplicate.json()["detail"]


def test_invalid_json_body(client):
    response = client.post(
        "/api/forms", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert response.status_code == 400


def test_get_update_delete_form(client, contact_form_payload):
    form_id = client.post("/api/forms", json=contact_form_payload).json()["id"]
    assert client.get(f"/api/forms/{form_id}").json()["title"] == "Contact Us"

    updated = client.put(f"/api/forms/{form_id}", json={"title": "Renamed"})
    assert updated.status_code == 200
    assert updated.json()["title"] == "Renamed"
    assert len(updated.json()["fields"]) == 3

    assert client.put(f"/api/forms/{form_id}", json={"fields": []}).status_code == 400

    assert client.delete(f"/api/forms/{form_id}").status_code == 200
    assert client.get(f"/api/forms/{form_id}").status_code == 404
    assert client.delete(f"/api/forms/{form_id}").status_code == 404


def test_publish_sets_and_clears_timestamp(client, contact_form_payload):
    form_id = client.post("/api/forms", json=contact_form_payload).json()["id"]
    published = client.post(f"/api/forms/{form_id}/publish").json()
    assert published["is_published"] is True
    assert published["published_at"]
    unpublished = client.post(f"/api/forms/{form_id}/publish", json={"is_published": False}).json()
    assert unpublished["is_published"] is False
    assert unpublished["published_at"] is None
    assert client.post("/api/forms/missing/publish").status_code == 404


def test_submission_to_draft_form_rejected(client, contact_form_payload):
    form_id = client.post("/api/forms", json=contact_form_payload).json()["id"]
    response = client.post(f"/api/forms/{form_id}/submissions", json={"data": VALID_DATA})
    assert response.status_code == 400
    assert response.json()["detail"] == NOT_PUBLISHED_MESSAGE


def test_submission_to_archived_form_rejected(client, published_form):
    form_id = published_form["id"]
    archived = client.post(f"/api/forms/{form_id}/archive")
    assert archived.json()["is_active"] is False
    response = client.post(f"/api/forms/{form_id}/submissions", json={"data": VALID_DATA})
    assert response.status_code == 400
    assert response.json()["detail"] == NOT_ACTIVE_MESSAGE


def test_submission_to_missing_form(client):
    response = client.post("/api/forms/nope/submissions", json={"data": VALID_DATA})
    assert response.status_code == 404


def test_submission_validated_server_side(client, published_form):
    form_id = published_form["id"]
    response = client.post(
        f"/api/forms/{form_id}/submissions", json={"data": {"email": "broken"}}
    )
    assert response.status_code == 400
    body = response.json()
    assert body["errors"] == {"name": REQUIRED_MESSAGE, "email": EMAIL_MESSAGE}
    assert client.get(f"/api/forms/{form_id}/submissions").json() == []


def test_submission_payload_shape_checked(client, published_form):
    form_id = published_form["id"]
    response = client.post(f"/api/forms/{form_id}/submissions", json={"data": "text"})
    assert response.status_code == 400


def test_submit_list_and_delete(client, published_form):
    form_id = published_form["id"]
    created = client.post(
        f"/api/forms/{form_id}/submissions",
        json={"data": VALID_DATA, "submitter_name": "  Ann  "},
    )
    assert created.status_code == 201
    submission = created.json()
    assert submission["data"] == VALID_DATA
    assert submission["submitter_name"] == "Ann"

    per_form = client.get(f"/api/forms/{form_id}/submissions").json()
    assert [item["id"] for item in per_form] == [submission["id"]]
    assert per_form[0]["form_title"] == "Contact Us"

    everything = client.get("/api/submissions").json()
    assert everything[0]["form_title"] == "Contact Us"

    forms = client.get("/api/forms").json()
    assert forms[0]["submission_count"] == 1

    assert client.delete(f"/api/submissions/{submission['id']}").status_code == 200
    assert client.delete(f"/api/submissions/{submission['id']}").status_code == 404
    assert client.get("/api/submissions").json() == []


def test_deleting_form_removes_its_submissions(client, published_form):
    form_id = published_form["id"]
    client.post(f"/api/forms/{form_id}/submissions", json={"data": VALID_DATA})
    client.delete(f"/api/forms/{form_id}")
    assert client.get("/api/submissions").json() == []


def test_publish_and_archive_flags_must_be_booleans(client, contact_form_payload):
    form_id = client.post("/api/forms", json=contact_form_payload).json()["id"]
    rejected = client.post(f"/api/forms/{form_id}/publish", json={"is_published": "false"})
    assert rejected.status_code == 400
    assert "is_published" in rejected.json()["detail"]
    assert client.post(f"/api/forms/{form_id}/archive", json={"is_active": "no"}).status_code == 400
    form = client.get(f"/api/forms/{form_id}").json()
    assert form["is_published"] is False
    assert form["is_active"] is True

    unpublished = client.post(f"/api/forms/{form_id}/publish", json={"is_published": False})
    assert unpublished.json()["is_published"] is False


def test_submitter_name_is_a_reserved_field_id(client):
    response = client.post(
        "/api/forms",
        json={"fields": [{"id": "submitter_name", "type": "text"}, {"id": "q", "type": "text"}]},
    )
    assert response.status_code == 400
    assert "reserved" in response.json()["detail"]
