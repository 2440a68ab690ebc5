import csv
import io

import pytest

from formdesk.csv_export import BOM, escape_cell, to_csv


def test_empty_rows_give_empty_text():
    assert to_csv([]) == ""
    assert to_csv([], bom=True) == ""


def test_header_from_first_row_and_missing_cells_empty():
    rows = [{"a": 1, "b": "x"}, {"b": "y", "c": "dropped"}]
    assert to_csv(rows) == "a,b\n1,x\n,y"


def test_union_header_mode_keeps_every_key():
    rows = [{"a": 1}, {"b": 2}]
    assert to_csv(rows, header_mode="union") == "a,b\n1,\n,2"


def test_unknown_header_mode_rejected():
    with pytest.raises(ValueError):
        to_csv([{"a": 1}], header_mode="sideways")


def test_cells_quoted_only_when_needed():
    assert escape_cell("plain") == "plain"
    assert escape_cell("a,b") == '"a,b"'
    assert escape_cell('say "hi"') == '"say ""hi"""'
    assert escape_cell("two\nlines") == '"two\nlines"'
    assert escape_cell(None) == ""
    assert escape_cell(["x", "y"]) == '"x,y"'


def test_bom_prefix():
    text = to_csv([{"Title": "Survey"}], bom=True)
    assert text.startswith(BOM)
    assert text[len(BOM):] == "Title\nSurvey"


def test_header_cells_are_escaped():
    assert to_csv([{"a,b": 1}]) == '"a,b"\n1'


def test_quoted_cells_split_back_to_originals():
    text = to_csv([{"A": "1,2", "B": 'he said "hi"'}])
    assert text == 'A,B\n"1,2","he said ""hi"""'
    rows = list(csv.reader(io.StringIO(text)))
    assert rows == [["A", "B"], ["1,2", 'he said "hi"']]
