"""
Tests for the model document schema (texture variables, faces, round-trips)
"""
import pytest

from packsmith.exceptions import MalformedAssetError
from packsmith.schema import Identifier, Model, Reference, Resolved, Unparsed, parse_texture_ref


SAMPLE = {
    "textures": {"particle": "ns:block/p", "0": "ns:block/crate", "side": "#0", "odd": "Not Valid"},
    "elements": [{
        "from": [0, 0, 0],
        "to": [16, 16, 16],
        "rotation": {"angle": 0, "axis": "y", "origin": [8, 8, 8]},
        "faces": {
            "north": {"uv": [0, 0, 8, 8], "texture": "#side", "cullface": "north", "tintindex": 0},
        },
    }],
    "display": {"gui": {"rotation": [30, 225, 0]}},
}


class TestTextureRefs:

    def test_variants(self):
        assert parse_texture_ref("#side") == Reference(name="side")
        assert parse_texture_ref("block/dirt") == Resolved(identifier=Identifier("minecraft", "block/dirt"))
        assert isinstance(parse_texture_ref("Bad Value"), Unparsed)

    def test_non_particle_textures(self):
        model = Model.model_validate(SAMPLE)
        assert model.non_particle_textures() == {Identifier("ns", "block/crate")}

    def test_resolve_chain(self):
        model = Model.model_validate(SAMPLE)
        assert model.resolve_texture("#side") == Identifier("ns", "block/crate")
        assert model.resolve_texture("0") == Identifier("ns", "block/crate")
        assert model.resolve_texture("missing") is None
        assert model.resolve_texture("odd") is None

    def test_resolve_cycle(self):
        model = Model.model_validate({"textures": {"a": "#b", "b": "#a"}})
        assert model.resolve_texture("a") is None


class TestModel:

    def test_parent_parsed(self):
        model = Model.model_validate({"parent": "block/cube_all"})
        assert model.parent == Identifier("minecraft", "block/cube_all")
        assert not model.has_geometry()

    def test_has_geometry(self):
        assert Model.model_validate(SAMPLE).has_geometry()
        assert not Model.model_validate({"elements": [{"faces": {}}]}).has_geometry()

    def test_round_trip_preserves_unknown_fields(self):
        model = Model.model_validate(SAMPLE)
        out = model.to_json_dict()
        assert out["textures"] == SAMPLE["textures"]
        assert out["display"] == SAMPLE["display"]
        assert "parent" not in out
        element = out["elements"][0]
        assert element["from"] == [0, 0, 0]
        assert [type(c) for c in element["from"] + element["to"]] == [int] * 6
        assert element["rotation"] == SAMPLE["elements"][0]["rotation"]
        assert element["faces"]["north"] == SAMPLE["elements"][0]["faces"]["north"]

    def test_uv_assignment_is_serialized(self):
        model = Model.model_validate(SAMPLE)
        model.elements[0].faces["north"].uv = [8.0, 0.0, 0.0, 8.0]
        assert model.to_json_dict()["elements"][0]["faces"]["north"]["uv"] == [8.0, 0.0, 0.0, 8.0]

    @pytest.mark.parametrize("uv", [[0, 0, 8], "0 0 8 8", [0, 0, "a", 8]])
    def test_malformed_uv(self, uv):
        model = Model.model_validate({"elements": [{"faces": {"up": {"uv": uv, "texture": "#0"}}}]})
        with pytest.raises(MalformedAssetError):
            model.elements[0].faces["up"].uv_rect()
