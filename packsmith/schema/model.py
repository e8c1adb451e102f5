"""
Block/item model documents.

Models are the JSON files under ``assets/<ns>/models``. Only the parts the
optimizer reads or rewrites are typed; everything else (``display``,
``gui_light``, face ``cullface``/``rotation``/``tintindex``, element
``rotation`` ...) is kept as untyped extra data and written back unchanged.

TEXTURE VARIABLES:
The ``textures`` map binds variable names to either a concrete texture
identifier (``"ns:block/stone"``) or a reference to another variable
(``"#side"``). Faces always point at a variable (``"#side"``).

UV SPACE:
Face UVs are ``[u1, v1, u2, v2]`` in a fixed 0-16 space independent of the
texture resolution. ``u1 > u2`` mirrors the face horizontally, ``v1 > v2``
vertically.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from packsmith.exceptions import InvalidIdentifierError, MalformedAssetError
from packsmith.schema.identifier import Identifier

PARTICLE_VARIABLE = "particle"
REFERENCE_PREFIX = "#"

UVRect = Tuple[float, float, float, float]

#########################
# TEXTURE REFERENCES
#########################

class Resolved(BaseModel):
    """Texture variable bound to a concrete texture identifier."""
    model_config = ConfigDict(frozen=True)

    kind: Literal['resolved'] = 'resolved'
    identifier: Identifier

    def to_text(self) -> str:
        return str(self.identifier)


class Reference(BaseModel):
    """Texture variable pointing at another variable (``#name``)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal['reference'] = 'reference'
    name: str

    def to_text(self) -> str:
        return REFERENCE_PREFIX + self.name


class Unparsed(BaseModel):
    """Value that is neither a reference nor a valid identifier; passed through."""
    model_config = ConfigDict(frozen=True)

    kind: Literal['unparsed'] = 'unparsed'
    raw: Any

    def to_text(self) -> Any:
        return self.raw


TextureRef = Union[Resolved, Reference, Unparsed]


def parse_texture_ref(value: Any) -> TextureRef:
    """Turn a raw ``textures`` value into its TextureRef variant."""
    if isinstance(value, (Resolved, Reference, Unparsed)):
        return value
    if not isinstance(value, str):
        return Unparsed(raw=value)
    if value.startswith(REFERENCE_PREFIX):
        return Reference(name=value[len(REFERENCE_PREFIX):])
    try:
        return Resolved(identifier=Identifier.parse(value))
    except InvalidIdentifierError:
        return Unparsed(raw=value)

#########################
# GEOMETRY
#########################

class Face(BaseModel):
    model_config = ConfigDict(extra='allow')

    uv: Optional[Any] = Field(None, description="[u1, v1, u2, v2] in 0-16 space.")
    texture: Optional[str] = Field(None, description="Texture variable reference, e.g. '#side'.")

    def uv_rect(self) -> UVRect:
        """
        Return the UV as four floats.

        Raises:
            MalformedAssetError: if the UV is not a list of four numbers.
        """
        uv = self.uv
        if not isinstance(uv, (list, tuple)) or len(uv) != 4:
            raise MalformedAssetError(f"UV must have four components, got {uv!r}")
        if not all(isinstance(c, (int, float)) and not isinstance(c, bool) for c in uv):
            raise MalformedAssetError(f"UV components must be numbers, got {uv!r}")
        return tuple(float(c) for c in uv)


class Element(BaseModel):
    model_config = ConfigDict(extra='allow', populate_by_name=True)

    from_: Optional[List[Any]] = Field(None, alias='from')
    to: Optional[List[Any]] = None
    faces: Dict[str, Face] = Field(default_factory=dict)

#########################
# MODEL
#########################

class Model(BaseModel):
    model_config = ConfigDict(extra='allow')

    parent: Optional[Union[Identifier, str]] = None
    textures: Dict[str, TextureRef] = Field(default_factory=dict)
    elements: Optional[List[Element]] = None

    @field_validator('parent', mode='before')
    @classmethod
    def _parse_parent(cls, v):
        if isinstance(v, str):
            try:
                return Identifier.parse(v)
            except InvalidIdentifierError:
                return v
        return v

    @field_validator('textures', mode='before')
    @classmethod
    def _parse_textures(cls, v):
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("'textures' must be an object")
        return {str(name): parse_texture_ref(value) for name, value in v.items()}

    @field_serializer('parent')
    def _serialize_parent(self, parent):
        return None if parent is None else str(parent)

    @field_serializer('textures')
    def _serialize_textures(self, textures):
        return {name: ref.to_text() for name, ref in textures.items()}

    def has_geometry(self) -> bool:
        """True when at least one element defines at least one face."""
        return any(element.faces for element in self.elements or [])

    def non_particle_textures(self) -> Set[Identifier]:
        """Directly resolved texture identifiers, excluding the particle texture."""
        return {
            ref.identifier
            for name, ref in self.textures.items()
            if name != PARTICLE_VARIABLE and isinstance(ref, Resolved)
        }

    def resolve_texture(self, variable: str) -> Optional[Identifier]:
        """
        Follow ``#name`` references within this model.

        Accepts the variable with or without the leading ``#``. Returns None
        for unknown variables, unparsed values and reference cycles.
        """
        name = variable[len(REFERENCE_PREFIX):] if variable.startswith(REFERENCE_PREFIX) else variable
        seen = set()
        while name not in seen:
            seen.add(name)
            ref = self.textures.get(name)
            if isinstance(ref, Resolved):
                return ref.identifier
            if not isinstance(ref, Reference):
                return None
            name = ref.name
        return None

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize back to the on-disk JSON layout, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_unset=True)


# Rebuild models for forward references
Resolved.model_rebuild()
Reference.model_rebuild()
Unparsed.model_rebuild()
Face.model_rebuild()
Element.model_rebuild()
Model.model_rebuild()
