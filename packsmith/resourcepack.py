"""
Resource pack asset store.

Reads models, textures and texture metadata from a pack directory and writes
rewritten models/textures into an output directory using the same layout.
The read_* methods raise AssetNotFoundError or MalformedAssetError; the load_*
methods log those and return None. Write failures raise AssetWriteError.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError

from packsmith.exceptions import AssetNotFoundError, AssetWriteError, MalformedAssetError
from packsmith.schema.identifier import Identifier, MODEL_EXTENSION, TEXTURE_EXTENSION
from packsmith.schema.model import Model

logger = logging.getLogger(__name__)


@dataclass
class Texture:
    """
    A loaded texture.

    Attributes:
        identifier: Texture identifier
        image: RGBA Pillow image
        metadata: Parsed ``.mcmeta`` sidecar, None when the texture has none
    """
    identifier: Identifier
    image: Image.Image
    metadata: Optional[Any] = None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def animated(self) -> bool:
        return self.metadata is not None


def _stage(path: Path, write: Callable[[Any], None], mode: str = 'w') -> Path:
    """Write into a temporary sibling of ``path`` and return the temporary file."""
    if path.is_dir():
        raise IsADirectoryError(f"{path} is a directory")
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, mode) as f:
            write(f)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return Path(tmp_name)


def _atomic_write(path: Path, write: Callable[[Any], None], mode: str = 'w') -> None:
    """Write through a temporary sibling file so ``path`` is replaced all-or-nothing."""
    tmp = _stage(path, write, mode)
    try:
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _write_model(model: Model) -> Callable[[Any], None]:
    return lambda f: json.dump(model.to_json_dict(), f, indent=2)


def _write_png(image: Image.Image) -> Callable[[Any], None]:
    return lambda f: image.save(f, format='PNG')


class WriteBatch:
    """
    Writes a set of models and textures together.

    Every file is first written to a temporary sibling; the targets are only
    replaced once all of them have been staged. A failure while staging
    removes the temporary files and leaves the output untouched.

    Usage:
        with WriteBatch(output_root) as batch:
            batch.add_texture(texture_id, image)
            batch.add_model(model_id, model)
    """

    def __init__(self, output_root: Union[str, Path]):
        self.output_root = Path(output_root)
        self._staged: List[Tuple[Path, Path]] = []

    def add_model(self, identifier: Identifier, model: Model) -> None:
        path = self.output_root / identifier.model_path
        try:
            self._staged.append((_stage(path, _write_model(model)), path))
        except (OSError, TypeError, ValueError) as e:
            raise AssetWriteError(f"Failed to write model {identifier} to {path}: {e}") from e

    def add_texture(self, identifier: Identifier, image: Image.Image) -> None:
        path = self.output_root / identifier.texture_path
        try:
            self._staged.append((_stage(path, _write_png(image), mode='wb'), path))
        except (OSError, ValueError) as e:
            raise AssetWriteError(f"Failed to write PNG image for {identifier} to {path}: {e}") from e

    def commit(self) -> None:
        staged, self._staged = self._staged, []
        for index, (tmp, path) in enumerate(staged):
            try:
                os.replace(tmp, path)
            except OSError as e:
                for leftover, _ in staged[index:]:
                    leftover.unlink(missing_ok=True)
                raise AssetWriteError(f"Failed to replace {path}: {e}") from e
        logger.debug(f"Committed {len(staged)} files to {self.output_root}")

    def discard(self) -> None:
        for tmp, _ in self._staged:
            tmp.unlink(missing_ok=True)
        self._staged = []

    def __len__(self) -> int:
        return len(self._staged)

    def __enter__(self) -> "WriteBatch":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.discard()


class ResourcePack:
    """Asset store rooted at a resource pack directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def _discover(self, kind: str, extension: str) -> List[Identifier]:
        assets = self.root / "assets"
        if not assets.is_dir():
            return []

        identifiers = []
        for path in sorted(assets.rglob(f"*{extension}")):
            if not path.is_file():
                continue
            identifier = Identifier.from_asset_path(path.relative_to(self.root).as_posix(), kind)
            if identifier is not None:
                identifiers.append(identifier)
        return identifiers

    def discover_model_identifiers(self) -> List[Identifier]:
        """All models under ``assets/*/models``, sorted by path."""
        return self._discover("models", MODEL_EXTENSION)

    def discover_texture_identifiers(self) -> List[Identifier]:
        """All textures under ``assets/*/textures``, sorted by path."""
        return self._discover("textures", TEXTURE_EXTENSION)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_model(self, identifier: Identifier) -> Model:
        """
        Read and validate a model document.

        Raises:
            AssetNotFoundError: if the model file does not exist
            MalformedAssetError: if the file is not a valid model document
        """
        path = self.root / identifier.model_path
        if not path.is_file():
            raise AssetNotFoundError(f"Model not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("model root must be an object")
            return Model.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            raise MalformedAssetError(f"Malformed model {identifier}: {e}") from e

    def load_model(self, identifier: Identifier) -> Optional[Model]:
        """Like ``read_model``, but a missing or malformed model is logged and gives None."""
        try:
            return self.read_model(identifier)
        except (AssetNotFoundError, MalformedAssetError) as e:
            logger.warning(str(e))
            return None

    def texture_exists(self, identifier: Identifier) -> bool:
        return (self.root / identifier.texture_path).is_file()

    def texture_has_metadata(self, identifier: Identifier) -> bool:
        return (self.root / identifier.texture_meta_path).is_file()

    def load_texture_metadata(self, identifier: Identifier) -> Optional[Any]:
        path = self.root / identifier.texture_meta_path
        if not path.is_file():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Malformed texture metadata {identifier}: {e}")
            return None

    def read_texture(self, identifier: Identifier) -> Texture:
        """
        Read a texture as RGBA together with its ``.mcmeta`` metadata.

        Raises:
            AssetNotFoundError: if the PNG does not exist
            MalformedAssetError: if the PNG cannot be decoded
        """
        path = self.root / identifier.texture_path
        if not path.is_file():
            raise AssetNotFoundError(f"Texture not found: {path}")

        try:
            with Image.open(path) as img:
                image = img.convert('RGBA')
        except (OSError, UnidentifiedImageError) as e:
            raise MalformedAssetError(f"Undecodable texture {identifier}: {e}") from e

        return Texture(identifier, image, self.load_texture_metadata(identifier))

    def load_texture(self, identifier: Identifier) -> Optional[Texture]:
        try:
            return self.read_texture(identifier)
        except (AssetNotFoundError, MalformedAssetError) as e:
            logger.warning(str(e))
            return None

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def save_model(self, identifier: Identifier, model: Model, output_root: Union[str, Path]) -> None:
        path = Path(output_root) / identifier.model_path
        try:
            _atomic_write(path, _write_model(model))
        except (OSError, TypeError, ValueError) as e:
            raise AssetWriteError(f"Failed to write model {identifier} to {path}: {e}") from e
        logger.debug(f"Saved model {identifier}")

    def save_texture(self, identifier: Identifier, image: Image.Image, output_root: Union[str, Path]) -> None:
        path = Path(output_root) / identifier.texture_path
        try:
            _atomic_write(path, _write_png(image), mode='wb')
        except (OSError, ValueError) as e:
            raise AssetWriteError(f"Failed to write PNG image for {identifier} to {path}: {e}") from e
        logger.debug(f"Saved texture {identifier} ({image.width}x{image.height})")
