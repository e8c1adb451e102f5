"""
Tests for candidate selection rules
"""
from packsmith.optimizer.context import RunContext
from packsmith.optimizer.selection import select_candidates
from packsmith.resourcepack import ResourcePack
from packsmith.schema import Identifier

ANIMATION = {"animation": {"frametime": 2}}


def _select(builder):
    context = RunContext()
    groups = select_candidates(ResourcePack(builder.root), context)
    return groups, context


def _ids(*texts):
    return {Identifier.parse(t) for t in texts}


class TestSelection:

    def test_groups_models_by_texture(self, builder, make_pattern, make_cube):
        builder.texture("ns:block/a", make_pattern(16, 16))
        builder.texture("ns:block/b", make_pattern(16, 16, seed=1))
        builder.model("ns:block/one", make_cube({"up": ((0, 0, 4, 4), "#0")}, textures={"0": "ns:block/a"}))
        builder.model("ns:block/two", make_cube(
            {"up": ((0, 0, 4, 4), "#0"), "down": ((0, 0, 4, 4), "#1")},
            textures={"0": "ns:block/a", "1": "ns:block/b"},
        ))

        groups, context = _select(builder)
        assert groups == {
            Identifier.parse("ns:block/a"): _ids("ns:block/one", "ns:block/two"),
            Identifier.parse("ns:block/b"): _ids("ns:block/two"),
        }
        assert set(context.models) == _ids("ns:block/one", "ns:block/two")

    def test_animated_texture_excludes_model(self, builder, make_pattern, make_cube):
        builder.texture("ns:block/lava", make_pattern(16, 64), meta=ANIMATION)
        builder.texture("ns:block/stone", make_pattern(16, 16))
        builder.model("ns:block/mixed", make_cube(
            {"up": ((0, 0, 4, 4), "#0"), "down": ((0, 0, 4, 4), "#1")},
            textures={"0": "ns:block/lava", "1": "ns:block/stone"},
        ))

        groups, context = _select(builder)
        assert groups == {}
        assert context.models == {}

    def test_child_models_are_excluded(self, builder, make_pattern, make_cube):
        builder.texture("ns:block/a", make_pattern(16, 16))
        builder.model("ns:block/base", make_cube({"up": ((0, 0, 4, 4), "#0")}, textures={"0": "ns:block/a"}))
        builder.model("ns:block/child", make_cube(
            {"up": ((0, 0, 4, 4), "#0")}, parent="ns:block/base", textures={"0": "ns:block/a"},
        ))

        groups, _ = _select(builder)
        # base is excluded too because its child defines elements
        assert groups == {}

    def test_parent_with_texture_only_children_is_kept(self, builder, make_pattern, make_cube):
        builder.texture("ns:block/a", make_pattern(16, 16))
        builder.texture("ns:block/b", make_pattern(16, 16, seed=1))
        builder.model("ns:block/base", make_cube({"up": ((0, 0, 4, 4), "#0")}, textures={"0": "ns:block/a"}))
        builder.model("ns:block/variant", {"parent": "ns:block/base", "textures": {"0": "ns:block/b"}})

        groups, _ = _select(builder)
        assert groups == {Identifier.parse("ns:block/a"): _ids("ns:block/base")}

    def test_parent_with_animated_child_is_excluded(self, builder, make_pattern, make_cube):
        builder.texture("ns:block/a", make_pattern(16, 16))
        builder.texture("ns:block/water", make_pattern(16, 32), meta=ANIMATION)
        builder.model("ns:block/base", make_cube({"up": ((0, 0, 4, 4), "#0")}, textures={"0": "ns:block/a"}))
        builder.model("ns:block/wet", {"parent": "ns:block/base", "textures": {"0": "ns:block/water"}})

        groups, _ = _select(builder)
        assert groups == {}

    def test_models_without_faces_or_textures_are_skipped(self, builder, make_pattern, make_cube):
        builder.texture("ns:block/a", make_pattern(16, 16))
        builder.model("ns:block/no_faces", {"textures": {"0": "ns:block/a"}, "elements": [{"faces": {}}]})
        builder.model("ns:block/particle_only", make_cube(
            {"up": ((0, 0, 4, 4), "#particle")}, textures={"particle": "ns:block/a"},
        ))
        builder.model("ns:block/broken", {"elements": "nope"})
        (builder.root / "assets/ns/models/block/garbage.json").write_text("{not json")

        groups, _ = _select(builder)
        assert groups == {}

    def test_missing_texture_file_is_not_grouped(self, builder, make_pattern, make_cube):
        builder.texture("ns:block/a", make_pattern(16, 16))
        builder.model("ns:block/one", make_cube(
            {"up": ((0, 0, 4, 4), "#0"), "down": ((0, 0, 4, 4), "#1")},
            textures={"0": "ns:block/a", "1": "ns:block/gone"},
        ))

        groups, _ = _select(builder)
        assert groups == {Identifier.parse("ns:block/a"): _ids("ns:block/one")}
