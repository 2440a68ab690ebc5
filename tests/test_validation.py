from formdesk.validation import EMAIL_MESSAGE, REQUIRED_MESSAGE, is_empty, validate

FIELDS = [
    {"id": "name", "type": "text", "label": "Name", "required": True},
    {"id": "email", "type": "email", "label": "Email", "required": True},
    {"id": "backup", "type": "email", "label": "Backup email", "required": False},
    {"id": "topics", "type": "checkbox", "label": "Topics", "required": True},
]


def test_empty_values_report_required_fields_only():
    errors = validate(FIELDS, {})
    assert errors == {
        "name": REQUIRED_MESSAGE,
        "email": REQUIRED_MESSAGE,
        "topics": REQUIRED_MESSAGE,
    }


def test_malformed_email_is_reported():
    errors = validate(
        FIELDS,
        {"name": "Ann", "email": "not-an-email", "backup": "", "topics": ["x"]},
    )
    assert errors == {"email": EMAIL_MESSAGE}


def test_optional_email_checked_only_when_filled():
    values = {"name": "Ann", "email": "ann@example.com", "topics": ["x"]}
    assert validate(FIELDS, values) == {}
    assert validate(FIELDS, {**values, "backup": "a@b"}) == {"backup": EMAIL_MESSAGE}


def test_empty_checkbox_list_counts_as_missing():
    errors = validate(FIELDS, {"name": "Ann", "email": "ann@example.com", "topics": []})
    assert errors == {"topics": REQUIRED_MESSAGE}


def test_is_empty():
    assert is_empty(None)
    assert is_empty("")
    assert is_empty([])
    assert not is_empty(" ")
    assert not is_empty(0)
    assert not is_empty(False)
    assert not is_empty(["a"])


def test_valid_values_produce_no_errors():
    assert validate([], {"anything": 1}) == {}


def test_reference_examples():
    assert validate([{"id": "f1", "required": True}], {}) == {"f1": REQUIRED_MESSAGE}
    assert validate(
        [{"id": "f1", "type": "email", "required": True}], {"f1": "not-an-email"}
    ) == {"f1": EMAIL_MESSAGE}
    assert validate([{"id": "f1", "type": "email", "required": False}], {}) == {}
