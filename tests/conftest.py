"""
Shared fixtures: small synthetic resource packs built on disk.
"""
import json
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from packsmith.schema.identifier import Identifier


def pattern(width, height, seed=0):
    """Deterministic opaque RGBA noise, distinct for every seed."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    return pixels


class PackBuilder:
    """Writes models/textures into ``root`` using the pack layout."""

    def __init__(self, root: Path):
        self.root = root

    def model(self, key, data):
        path = self.root / Identifier.parse(key).model_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2))
        return path

    def texture(self, key, pixels, meta=None):
        identifier = Identifier.parse(key)
        path = self.root / identifier.texture_path
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(pixels).save(path)
        if meta is not None:
            (self.root / identifier.texture_meta_path).write_text(json.dumps(meta))
        return path


def cube(faces, parent=None, textures=None, **extra):
    """Model dict with one element carrying ``faces`` (name -> (uv, texture))."""
    data = {
        "textures": textures or {},
        "elements": [{
            "from": [0, 0, 0],
            "to": [16, 16, 16],
            "faces": {name: {"uv": list(uv), "texture": tex} for name, (uv, tex) in faces.items()},
        }],
    }
    if parent is not None:
        data["parent"] = parent
    data.update(extra)
    return data


@pytest.fixture
def pack_root(tmp_path):
    root = tmp_path / "pack"
    root.mkdir()
    return root


@pytest.fixture
def builder(pack_root):
    return PackBuilder(pack_root)


@pytest.fixture
def output_root(tmp_path):
    root = tmp_path / "out"
    root.mkdir()
    return root


@pytest.fixture
def make_pattern():
    return pattern


@pytest.fixture
def make_cube():
    return cube
