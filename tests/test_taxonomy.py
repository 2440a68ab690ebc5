from formdesk.taxonomy import (
    DEFAULT_OPTIONS,
    FIELD_TYPES,
    FieldType,
    coerce_field_type,
    default_field,
    default_label,
    is_choice_type,
)


def test_catalog_is_fixed():
    assert FIELD_TYPES == [
        "text", "email", "number", "textarea", "select",
        "checkbox", "radio", "date", "file", "url",
    ]


def test_coerce_field_type():
    assert coerce_field_type("email") is FieldType.EMAIL
    assert coerce_field_type(FieldType.URL) is FieldType.URL
    assert coerce_field_type("signature") is None
    assert coerce_field_type(None) is None


def test_choice_types():
    assert is_choice_type("select")
    assert is_choice_type(FieldType.CHECKBOX)
    assert not is_choice_type("text")


def test_default_field_ids_are_unique():
    taken = set()
    for _ in range(50):
        field = default_field("text", taken)
        assert field["id"] not in taken
        taken.add(field["id"])


def test_default_field_shape():
    field = default_field("select")
    assert field["label"] == default_label("select") == "Select Field"
    assert field["options"] == DEFAULT_OPTIONS
    assert field["options"] is not DEFAULT_OPTIONS
