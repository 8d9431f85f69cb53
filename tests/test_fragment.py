import json

import pytest

from luamin.fragment import Fragment
from luamin.nodes import SourcePosition
from luamin.sourcemap import Mapping, SourceMapGenerator, decode_vlq, encode_vlq


def test_to_string_is_repeatable():
    fragment = Fragment(["a", Fragment("b"), Fragment(["c", Fragment("d")])])
    assert fragment.to_string() == "abcd"
    assert fragment.to_string() == "abcd"
    assert str(fragment) == "abcd"


def test_prepend_keeps_existing_children():
    fragment = Fragment("body")
    fragment.prepend(["head", "\n"])
    fragment.add("tail")
    assert fragment.to_string() == "head\nbodytail"


def test_head_and_tail_skip_empty_children():
    fragment = Fragment([Fragment(), "xy", Fragment([Fragment(), "z"]), Fragment()])
    assert fragment.head(1) == "x"
    assert fragment.tail(2) == "yz"
    assert Fragment([Fragment()]).is_empty()


def test_fragment_has_a_single_parent():
    child = Fragment("x")
    Fragment(child)
    with pytest.raises(ValueError):
        Fragment(child)


def test_rejects_foreign_children():
    with pytest.raises(TypeError):
        Fragment([42])


def test_finalize_records_origins_in_order():
    root = Fragment(
        [
            Fragment("ab", origin=SourcePosition(1, 0), source="m.lua"),
            "-",
            Fragment("cd", origin=SourcePosition(2, 4), source="m.lua", name="value"),
        ]
    )
    code, source_map = root.finalize(file="m.min.lua")
    assert code == "ab-cd"
    assert source_map.mappings == [
        Mapping(1, 0, "m.lua", 1, 0, None),
        Mapping(1, 2),
        Mapping(1, 3, "m.lua", 2, 4, "value"),
    ]
    data = source_map.to_dict()
    assert data["file"] == "m.min.lua"
    assert data["sources"] == ["m.lua"]
    assert data["names"] == ["value"]
    assert data["mappings"] == "AAAA,E,CACIA"


def test_finalize_restarts_mapping_on_new_line():
    root = Fragment(Fragment("a\nb", origin=SourcePosition(1, 0), source="s.lua"))
    code, source_map = root.finalize()
    assert code == "a\nb"
    assert source_map.to_dict()["mappings"] == "AAAA;AAAA"


def test_nested_origin_returns_to_parent():
    inner = Fragment("x", origin=SourcePosition(3, 2), source="s.lua")
    outer = Fragment(["(", inner, ")"], origin=SourcePosition(3, 0), source="s.lua")
    _, source_map = Fragment(outer).finalize()
    assert [(m.generated_column, m.original_line, m.original_column) for m in source_map.mappings] == [
        (0, 3, 0),
        (1, 3, 2),
        (2, 3, 0),
    ]


def test_sources_content_is_embedded():
    root = Fragment(Fragment("x", origin=SourcePosition(1, 0), source="a.lua"))
    _, source_map = root.finalize(sources_content={"a.lua": "x", "b.lua": "y"})
    data = json.loads(source_map.to_json())
    assert data["version"] == 3
    assert data["sources"] == ["a.lua", "b.lua"]
    assert data["sourcesContent"] == ["x", "y"]


@pytest.mark.parametrize("value,encoded", [(0, "A"), (1, "C"), (-1, "D"), (16, "gB"), (123, "2H")])
def test_encode_vlq(value, encoded):
    assert encode_vlq(value) == encoded


def test_decode_vlq_segment():
    assert decode_vlq("CACIA") == [1, 0, 1, 4, 0]


def test_mappings_must_advance():
    generator = SourceMapGenerator()
    generator.add_mapping(1, 5)
    with pytest.raises(ValueError):
        generator.add_mapping(1, 5)
