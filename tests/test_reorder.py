from formdesk.reorder import reorder


def _items(*ids):
    return [{"id": item_id} for item_id in ids]


def _ids(items):
    return [item["id"] for item in items]


def test_move_forward_to_target_position():
    assert _ids(reorder(_items("a", "b", "c", "d"), "a", "c")) == ["b", "c", "a", "d"]


def test_move_backward_to_target_position():
    assert _ids(reorder(_items("a", "b", "c", "d"), "d", "b")) == ["a", "d", "b", "c"]


def test_same_source_and_target_is_noop():
    items = _items("a", "b", "c")
    assert _ids(reorder(items, "b", "b")) == ["a", "b", "c"]


def test_unknown_ids_leave_order_unchanged():
    items = _items("a", "b", "c")
    assert _ids(reorder(items, "x", "b")) == ["a", "b", "c"]
    assert _ids(reorder(items, "a", "x")) == ["a", "b", "c"]


def test_input_is_not_mutated_and_result_is_permutation():
    items = _items("a", "b", "c", "d", "e")
    result = reorder(items, "b", "e")
    assert _ids(items) == ["a", "b", "c", "d", "e"]
    assert sorted(_ids(result)) == sorted(_ids(items))
    assert result[4]["id"] == "b"
    # Relative order of the untouched items is preserved.
    assert [i for i in _ids(result) if i != "b"] == ["a", "c", "d", "e"]
