"""Entity model shared by every statement builder.

Builders never look at concrete entity classes. They only rely on the
``DataSchema`` capability pair: the type name with its schema, and a flat data
record for that schema. ``Vertex`` and ``Edge`` are ready-made implementations
for callers that work with schemas discovered at runtime; applications usually
subclass ``DataSchema`` with their own dataclasses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..errors import MissingValue

Schema = Dict[str, str]
Record = Dict[str, Any]

VID_FIELD = "vid"
SRC_VID_FIELD = "src_vid"
DST_VID_FIELD = "dst_vid"

INDEX_SUFFIX = "_index_0"


class DataSchema(ABC):
    """Capability pair implemented by every vertex and edge kind."""

    @abstractmethod
    def get_schema(self) -> Tuple[str, Schema]:
        """Return the tag / edge type name and its property declarations.

        The schema only covers properties; identifiers (``vid``, ``src_vid``,
        ``dst_vid``) are not part of it.
        """

    @abstractmethod
    def get_data_in_schema(self) -> Record:
        """Return the data to write, keyed by schema field.

        Vertices must include ``vid``; edges must include ``src_vid`` and
        ``dst_vid``.
        """


@dataclass
class Vertex(DataSchema):
    """Generic vertex bound to a tag schema."""

    tag: str
    schema: Schema
    vid: str = ""
    properties: Record = field(default_factory=dict)

    def get_schema(self) -> Tuple[str, Schema]:
        return self.tag, self.schema

    def get_data_in_schema(self) -> Record:
        return {VID_FIELD: self.vid, **self.properties}


@dataclass
class Edge(DataSchema):
    """Generic edge bound to an edge type schema."""

    edge_type: str
    schema: Schema
    src_vid: str = ""
    dst_vid: str = ""
    properties: Record = field(default_factory=dict)

    def get_schema(self) -> Tuple[str, Schema]:
        return self.edge_type, self.schema

    def get_data_in_schema(self) -> Record:
        return {SRC_VID_FIELD: self.src_vid, DST_VID_FIELD: self.dst_vid, **self.properties}


def index_name(type_name: str) -> str:
    """Name of the basic index created alongside a tag or edge type."""
    return type_name + INDEX_SUFFIX


def validate_name(name: Any, what: str = "vid") -> str:
    """Ensure an identifier or type name is a non-empty string."""
    if not isinstance(name, str) or name == "":
        raise MissingValue(f"invalid {what}, a non-empty string is required")
    return name


def vertex_id(data: Record) -> str:
    return validate_name(data.get(VID_FIELD), VID_FIELD)


def edge_ends(data: Record) -> Tuple[str, str]:
    src = validate_name(data.get(SRC_VID_FIELD), "src_vid for edge")
    dst = validate_name(data.get(DST_VID_FIELD), "dst_vid for edge")
    return src, dst
