from formdesk.flatten import RAW_DATA_KEY, decode_payload, display_text, flatten, flatten_to_dict


def test_nested_objects_join_keys():
    payload = {"name": "Ann", "address": {"city": "Oslo", "geo": {"lat": 59.9}}}
    assert flatten(payload) == [
        ("name", "Ann"),
        ("address - city", "Oslo"),
        ("address - geo - lat", "59.9"),
    ]


def test_arrays_collapse_into_one_cell():
    assert flatten({"topics": ["News", "Support"]}) == [("topics", "News; Support")]
    assert flatten({"empty": []}) == [("empty", "")]


def test_scalars_render_as_text():
    assert flatten({"n": None, "yes": True, "no": False, "i": 3, "f": 2.0}) == [
        ("n", ""),
        ("yes", "true"),
        ("no", "false"),
        ("i", "3"),
        ("f", "2"),
    ]


def test_json_text_is_parsed_first():
    assert flatten('{"a": {"b": 1}}') == [("a - b", "1")]


def test_unparseable_text_becomes_raw_data():
    assert flatten("not json") == [(RAW_DATA_KEY, "not json")]
    assert flatten("[1, 2]") == [(RAW_DATA_KEY, "[1, 2]")]


def test_prefix_is_applied_to_every_column():
    assert flatten({"a": 1, "b": {"c": 2}}, prefix="data") == [
        ("data - a", "1"),
        ("data - b - c", "2"),
    ]


def test_objects_inside_arrays_are_compact_json():
    assert flatten({"rows": [{"x": 1}]}) == [("rows", '{"x":1}')]


def test_flatten_to_dict_and_helpers():
    assert flatten_to_dict({"a": {"b": "c"}}) == {"a - b": "c"}
    assert decode_payload('{"a": 1}') == {"a": 1}
    assert decode_payload("plain") == "plain"
    assert display_text(1.5) == "1.5"


def test_reference_examples():
    assert flatten({"a": {"b": 1}}) == [("a - b", "1")]
    assert flatten({"tags": ["x", "y"]}) == [("tags", "x; y")]
