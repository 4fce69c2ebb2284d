from __future__ import annotations

from extrel.core.structured import as_str_dict, get_int, get_path, get_str, get_table


def test_as_str_dict_rejects_non_string_keys() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict(["a"]) is None


def test_get_str_strips_and_drops_empty() -> None:
    table: dict[str, object] = {"a": "  x ", "b": "   ", "c": 3}
    assert get_str(table, "a") == "x"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None
    assert get_str(table, "missing") is None


def test_get_int_rejects_bool() -> None:
    table: dict[str, object] = {"id": 12, "flag": True, "text": "12"}
    assert get_int(table, "id") == 12
    assert get_int(table, "flag") is None
    assert get_int(table, "text") is None


def test_get_table_and_path() -> None:
    payload: dict[str, object] = {"links": {"html": {"href": "https://x.test/pr/1"}}}
    assert get_table(payload, "links") == {"html": {"href": "https://x.test/pr/1"}}
    assert get_path(payload, "links", "html", "href") == "https://x.test/pr/1"
    assert get_path(payload, "links", "self", "href") is None
    assert get_path(payload, "links", "html", "href", "deeper") is None
