import pytest
from markupsafe import escape

from formdesk.renderer import (
    HANDLERS,
    SELECT_PROMPT,
    UNKNOWN_TYPE_TEXT,
    FieldEvent,
    collect_values,
    parse_event,
    render_field,
)
from formdesk.taxonomy import FieldType


def field(field_type, **extra):
    return {"id": f"f_{field_type}", "type": field_type, "label": "L", "placeholder": "P", **extra}


def test_every_type_has_a_handler():
    assert set(HANDLERS) == set(FieldType)


@pytest.mark.parametrize(
    "field_type,input_type",
    [("text", "text"), ("email", "email"), ("number", "number"), ("url", "url"), ("date", "date")],
)
def test_single_line_inputs(field_type, input_type):
    html = str(render_field(field(field_type, required=True), "v"))
    assert f'type="{input_type}"' in html
    assert 'value="v"' in html
    assert " required" in html


def test_values_are_escaped():
    html = str(render_field(field("text"), '"><script>'))
    assert "<script>" not in html
    assert str(escape('"><script>')) in html


def test_textarea_and_disabled():
    html = str(render_field(field("textarea"), "body", disabled=True))
    assert html.startswith("<textarea")
    assert ">body</textarea>" in html
    assert " disabled" in html


def test_select_has_prompt_and_selected_option():
    html = str(render_field(field("select", options=["A", "B"]), "B"))
    assert SELECT_PROMPT in html
    assert '<option value="B" selected>' in html


def test_radio_group_shares_name():
    html = str(render_field(field("radio", options=["A", "B"]), "A"))
    assert html.count('name="f_radio"') == 2
    assert 'value="A" checked' in html


def test_checkbox_marks_selected_options():
    html = str(render_field(field("checkbox", options=["A", "B"]), ["B"]))
    assert 'value="B" checked' in html
    assert 'value="A" checked' not in html


def test_error_class_applied():
    html = str(render_field(field("text"), "", error="Required"))
    assert "has-error" in html


def test_unknown_type_renders_placeholder():
    html = str(render_field({"id": "x", "type": "signature"}))
    assert UNKNOWN_TYPE_TEXT in html


def test_checkbox_events_add_and_remove():
    checkbox = field("checkbox", options=["A", "B"])
    value = parse_event(checkbox, FieldEvent("A", True), [])
    value = parse_event(checkbox, FieldEvent("B", True), value)
    value = parse_event(checkbox, FieldEvent("A", True), value)
    assert value == ["A", "B"]
    assert parse_event(checkbox, FieldEvent("A", False), value) == ["B"]


def test_rendered_field_reports_changes():
    changes = []
    rendered = render_field(field("text"), "", on_change=lambda fid, value: changes.append((fid, value)))
    assert rendered.handle(FieldEvent("hello")) == "hello"
    assert changes == [("f_text", "hello")]


def test_file_event_keeps_filename():
    assert parse_event(field("file"), FieldEvent("cv.pdf")) == "cv.pdf"
    assert parse_event(field("file"), FieldEvent("")) is None


def test_collect_values_from_plain_mapping():
    fields = [field("text"), field("checkbox", options=["A", "B"]), field("file")]
    values = collect_values(fields, {"f_text": "hi", "f_checkbox": ["A", ""]})
    assert values == {"f_text": "hi", "f_checkbox": ["A"], "f_file": None}
