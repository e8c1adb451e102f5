"""
Namespaced resource identifiers.

An identifier is a ``namespace:path`` pair that maps deterministically onto
files inside a resource pack:

    model     -> assets/<namespace>/models/<path>.json
    texture   -> assets/<namespace>/textures/<path>.png
    metadata  -> assets/<namespace>/textures/<path>.png.mcmeta

Bare paths without a namespace default to ``minecraft``.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from packsmith.exceptions import InvalidIdentifierError

DEFAULT_NAMESPACE = "minecraft"

MODEL_EXTENSION = ".json"
TEXTURE_EXTENSION = ".png"
METADATA_EXTENSION = ".mcmeta"


def _check_part(part: str, text: str) -> None:
    if not part or any(ch.isspace() for ch in part) or part != part.lower():
        raise InvalidIdentifierError(f"Invalid identifier {text!r}")


class Identifier(BaseModel):
    """Immutable (namespace, path) pair. Equality and hashing are structural."""
    model_config = ConfigDict(frozen=True)

    namespace: str
    path: str

    def __init__(self, namespace: str, path: str, **data):
        text = f"{namespace}:{path}"
        _check_part(namespace, text)
        _check_part(path, text)
        super().__init__(namespace=namespace, path=path, **data)

    @classmethod
    def parse(cls, text: str) -> "Identifier":
        """
        Parse the textual form ``namespace:path``.

        Raises:
            InvalidIdentifierError: on spaces, upper-case characters, empty
                parts or more than one ``:``.
        """
        if not isinstance(text, str) or " " in text or text != text.lower():
            raise InvalidIdentifierError(f"Invalid identifier {text!r}")
        if ":" in text:
            namespace, sep, path = text.partition(":")
            if ":" in path:
                raise InvalidIdentifierError(f"Invalid identifier {text!r}")
            return cls(namespace, path)
        return cls(DEFAULT_NAMESPACE, text)

    @classmethod
    def from_asset_path(cls, relative: Union[str, PurePosixPath], kind: str) -> Optional["Identifier"]:
        """
        Map ``assets/<ns>/<kind>/<path>.<ext>`` back to an identifier.

        Returns None for paths outside the ``kind`` directory or with names
        that are not valid identifiers.
        """
        parts = PurePosixPath(relative).parts
        if len(parts) < 4 or parts[0] != "assets" or parts[2] != kind:
            return None

        extension = MODEL_EXTENSION if kind == "models" else TEXTURE_EXTENSION
        tail = "/".join(parts[3:])
        if not tail.endswith(extension):
            return None
        try:
            return cls(parts[1], tail[: -len(extension)])
        except InvalidIdentifierError:
            return None

    @property
    def model_path(self) -> str:
        return f"assets/{self.namespace}/models/{self.path}{MODEL_EXTENSION}"

    @property
    def texture_path(self) -> str:
        return f"assets/{self.namespace}/textures/{self.path}{TEXTURE_EXTENSION}"

    @property
    def texture_meta_path(self) -> str:
        return self.texture_path + METADATA_EXTENSION

    def __str__(self) -> str:
        return f"{self.namespace}:{self.path}"

    def __repr__(self) -> str:
        return f"Identifier({str(self)!r})"
