"""Resource pack schema definitions."""
from .identifier import Identifier
from .model import (
    Model,
    Element,
    Face,
    TextureRef,
    Resolved,
    Reference,
    Unparsed,
    parse_texture_ref,
)

__all__ = [
    "Identifier",
    "Model",
    "Element",
    "Face",
    "TextureRef",
    "Resolved",
    "Reference",
    "Unparsed",
    "parse_texture_ref",
]
