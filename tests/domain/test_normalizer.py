"""Tests for domain/normalizer.py."""

import copy

from studio_actions.domain.normalizer import KEY_LENGTH, ensure_keys_and_types, generate_key


def page_tree():
    return {
        "title": "Landing",
        "pageBuilder": [
            {
                "rows": [
                    {
                        "columns": [
                            {
                                "content": [
                                    {"_type": "heading", "text": "Hi"},
                                    {"text": "untyped block"},
                                ]
                            }
                        ]
                    }
                ]
            }
        ],
    }


def walk_arrays(value, found):
    if isinstance(value, list):
        found.append(value)
        for item in value:
            walk_arrays(item, found)
    elif isinstance(value, dict):
        for child in value.values():
            walk_arrays(child, found)
    return found


class TestGenerateKey:
    def test_length_and_alphabet(self):
        key = generate_key()
        assert len(key) == KEY_LENGTH
        assert key.isalnum()
        assert key == key.lower()

    def test_keys_differ(self):
        assert len({generate_key() for _ in range(200)}) == 200


class TestStructuralTree:
    def test_default_types_per_level(self):
        out = ensure_keys_and_types(page_tree())
        section = out["pageBuilder"][0]
        row = section["rows"][0]
        column = row["columns"][0]
        assert section["_type"] == "section"
        assert row["_type"] == "row"
        assert column["_type"] == "column"

    def test_content_blocks_get_keys_but_no_invented_type(self):
        out = ensure_keys_and_types(page_tree())
        blocks = out["pageBuilder"][0]["rows"][0]["columns"][0]["content"]
        assert blocks[0]["_type"] == "heading"
        assert "_type" not in blocks[1]
        assert all(block["_key"] for block in blocks)

    def test_every_array_element_has_unique_key(self):
        out = ensure_keys_and_types(page_tree())
        for array in walk_arrays(out, []):
            keys = [item["_key"] for item in array if isinstance(item, dict)]
            assert all(keys)
            assert len(keys) == len(set(keys))

    def test_existing_type_and_key_preserved(self):
        tree = {"pageBuilder": [{"_type": "hero", "_key": "keep", "rows": []}]}
        out = ensure_keys_and_types(tree)
        assert out["pageBuilder"][0]["_type"] == "hero"
        assert out["pageBuilder"][0]["_key"] == "keep"

    def test_empty_key_counts_as_missing(self):
        out = ensure_keys_and_types({"pageBuilder": [{"_key": "", "_type": ""}]})
        section = out["pageBuilder"][0]
        assert section["_key"]
        assert section["_type"] == "section"

    def test_repeated_keys_in_one_array_are_replaced(self):
        tree = {
            "pageBuilder": [{"_key": "s1", "rows": [{"_key": "r"}, {"_key": "r"}]}],
            "tags": [{"_key": "t"}, {"_key": "t"}],
        }
        out = ensure_keys_and_types(tree)
        rows = out["pageBuilder"][0]["rows"]
        tags = out["tags"]
        assert rows[0]["_key"] == "r"
        assert rows[1]["_key"] != "r"
        assert tags[0]["_key"] == "t"
        assert tags[1]["_key"] != "t"
        for array in walk_arrays(out, []):
            keys = [item["_key"] for item in array if isinstance(item, dict)]
            assert len(keys) == len(set(keys))

    def test_same_key_in_different_arrays_is_kept(self):
        out = ensure_keys_and_types({"a": [{"_key": "x"}], "b": [{"_key": "x"}]})
        assert out["a"][0]["_key"] == out["b"][0]["_key"] == "x"

    def test_non_object_items_pass_through(self):
        out = ensure_keys_and_types({"pageBuilder": ["raw", 3], "tags": ["a", "b"]})
        assert out["pageBuilder"] == ["raw", 3]
        assert out["tags"] == ["a", "b"]

    def test_rows_outside_page_builder_not_typed(self):
        out = ensure_keys_and_types({"rows": [{"label": "x"}]})
        assert "_type" not in out["rows"][0]
        assert out["rows"][0]["_key"]

    def test_nested_arrays_inside_blocks_get_keys(self):
        tree = page_tree()
        tree["pageBuilder"][0]["rows"][0]["columns"][0]["content"][0]["items"] = [{"label": "a"}]
        out = ensure_keys_and_types(tree)
        item = out["pageBuilder"][0]["rows"][0]["columns"][0]["content"][0]["items"][0]
        assert item["_key"]
        assert "_type" not in item


class TestGenericWalk:
    def test_scalars_unchanged(self):
        assert ensure_keys_and_types("text") == "text"
        assert ensure_keys_and_types(5) == 5
        assert ensure_keys_and_types(None) is None

    def test_plain_fields_pass_through(self):
        fields = {"title": "T", "seo": {"description": "D"}, "count": 2}
        assert ensure_keys_and_types(fields) == fields

    def test_top_level_array_items_get_keys(self):
        out = ensure_keys_and_types([{"a": 1}, {"b": 2}])
        assert out[0]["_key"] != out[1]["_key"]

    def test_input_not_mutated(self):
        tree = page_tree()
        before = copy.deepcopy(tree)
        ensure_keys_and_types(tree)
        assert tree == before


class TestIdempotence:
    def test_second_pass_is_noop(self):
        once = ensure_keys_and_types(page_tree())
        twice = ensure_keys_and_types(once)
        assert twice == once
