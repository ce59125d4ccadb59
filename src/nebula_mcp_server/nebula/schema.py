"""Tag and edge type schema management.

Both kinds of schema share the same statement shapes and differ only in the
keyword (``TAG`` or ``EDGE``), so ``SchemaDB`` implements everything once and
``TagDB`` / ``EdgeTypeDB`` pin the keyword.

Important: this module assumes the NebulaGraph client/connection is
managed by the caller. It does NOT create or manage connections.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from ..errors import IllegalField, MissingValue, StatementError
from .client import NebulaClient
from .entity import DataSchema, Schema, index_name, validate_name
from .values import codec_declaration, storage_declaration, strip_quotes

logger = logging.getLogger(__name__)


def _clean_declaration(declaration: str) -> str:
    return " ".join(declaration.upper().split())


def is_declaration_changed(old: str, new: str) -> bool:
    """Compare two declarations, ignoring case and runs of whitespace only."""
    return _clean_declaration(old) != _clean_declaration(new)


def build_create_statement(
    kind: str,
    name: str,
    schema: Mapping[str, str],
    if_not_exists: bool = False,
) -> str:
    """Build ``CREATE TAG|EDGE [IF NOT EXISTS] name(field decl, ...);``."""
    validate_name(name, f"{kind.lower()} name")
    if not schema:
        raise MissingValue(f"invalid {kind.lower()} schema '{name}', no property defined")

    props: List[str] = []
    for field, declaration in schema.items():
        field = field.strip()
        declaration = (declaration or "").strip()
        if field == "" or declaration == "":
            raise IllegalField(f"{kind.lower()} field or field declaration cannot be empty")
        props.append(f"{field} {storage_declaration(declaration)}")

    modifier = "IF NOT EXISTS " if if_not_exists else ""
    return f"CREATE {kind} {modifier}{name}({', '.join(props)});"


def build_alter_statement(
    kind: str,
    name: str,
    old_schema: Mapping[str, str],
    new_schema: Mapping[str, str],
) -> Optional[str]:
    """Diff two schemas into one ALTER statement.

    Returns:
        ``ALTER TAG|EDGE name ADD (...), CHANGE (...), DROP (...);`` with only
        the clauses that have entries, or ``None`` when nothing changed.
    """
    validate_name(name, f"{kind.lower()} name")
    add_props: List[str] = []
    change_props: List[str] = []
    drop_props: List[str] = []

    for field, declaration in new_schema.items():
        if field not in old_schema:
            add_props.append(f"{field} {storage_declaration(declaration)}")
        elif is_declaration_changed(old_schema[field], declaration):
            change_props.append(f"{field} {storage_declaration(declaration)}")

    for field in old_schema:
        if field not in new_schema:
            drop_props.append(field)

    clauses: List[str] = []
    if add_props:
        clauses.append(f"ADD ({', '.join(add_props)})")
    if change_props:
        clauses.append(f"CHANGE ({', '.join(change_props)})")
    if drop_props:
        clauses.append(f"DROP ({', '.join(drop_props)})")
    if not clauses:
        return None
    return f"ALTER {kind} {name} {', '.join(clauses)};"


def build_drop_statement(kind: str, name: str, if_exists: bool = False) -> str:
    validate_name(name, f"{kind.lower()} name")
    modifier = "IF EXISTS " if if_exists else ""
    return f"DROP {kind} {modifier}{name};"


class SchemaDB:
    """Schema statement helpers backed by a NebulaClient."""

    kind = ""

    def __init__(self, client: NebulaClient) -> None:
        self.client = client

    @property
    def _label(self) -> str:
        return "tag" if self.kind == "TAG" else "edge type"

    def create(
        self,
        name: str,
        schema: Mapping[str, str],
        *,
        if_not_exists: bool = False,
        create_index: bool = False,
    ) -> None:
        """Create a tag / edge type, optionally with its basic index.

        Args:
            name: Tag or edge type name.
            schema: Field name -> type declaration. ``list`` / ``dict`` fields
                are created as ``string``.
            if_not_exists: Do not fail if the type already exists.
            create_index: Also create ``<name>_index_0`` over the type.
        """
        ngql = build_create_statement(self.kind, name, schema, if_not_exists)
        try:
            self.client.execute(ngql)
        except StatementError as e:
            logger.error(f"Failed to create {self._label} '{name}': {e}")
            raise
        logger.info("Created %s '%s'", self._label, name)

        if create_index:
            self.create_index(name)

    def create_from(
        self,
        entity: DataSchema,
        *,
        if_not_exists: bool = False,
        create_index: bool = False,
    ) -> None:
        name, schema = entity.get_schema()
        self.create(name, schema, if_not_exists=if_not_exists, create_index=create_index)

    def alter(
        self,
        name: str,
        old_schema: Mapping[str, str],
        new_schema: Mapping[str, str],
    ) -> bool:
        """Apply the difference between two schemas.

        Returns:
            False when the schemas are equivalent and no statement was issued.
        """
        ngql = build_alter_statement(self.kind, name, old_schema, new_schema)
        if ngql is None:
            return False
        self.client.execute(ngql)
        logger.info("Altered %s '%s'", self._label, name)
        return True

    def create_index(self, name: str) -> str:
        """Create the basic index of a type and return its name."""
        index = index_name(name)
        self.client.execute(f"CREATE {self.kind} INDEX IF NOT EXISTS {index} ON {name}();")
        return index

    def index_names(self, name: str) -> List[str]:
        """Names of all indexes built on the given type."""
        table = self.client.execute(f"SHOW {self.kind} INDEXES;")
        names: List[str] = []
        for row in table.rows:
            if strip_quotes(row[1]) == name:
                names.append(strip_quotes(row[0]))
        return names

    def drop_index(self, index: str) -> None:
        self.client.execute(f"DROP {self.kind} INDEX {index};")

    def drop(self, name: str, *, if_exists: bool = False) -> None:
        """Drop a type together with every index built on it.

        Indexes go first; the type is only dropped once none is left.
        """
        ngql = build_drop_statement(self.kind, name, if_exists)
        for index in self.index_names(name):
            self.drop_index(index)
        self.client.execute(ngql)
        logger.info("Dropped %s '%s'", self._label, name)

    def drop_from(self, entity: DataSchema, *, if_exists: bool = False) -> None:
        name, _ = entity.get_schema()
        self.drop(name, if_exists=if_exists)

    def describe(self, name: str) -> Schema:
        """Read the live schema of a type as ``{field: declaration}``.

        Declarations come back in the engine's spelling (``int64``,
        ``fixed_string(32)``); composite fields read back as ``string``.
        """
        validate_name(name, f"{self._label} name")
        table = self.client.execute(f"DESCRIBE {self.kind} {name};")
        return {strip_quotes(row[0]): strip_quotes(row[1]) for row in table.rows}

    def codec_schema(self, name: str) -> Schema:
        """Live schema with declarations the value codec can decode."""
        return {field: codec_declaration(decl) for field, decl in self.describe(name).items()}


class TagDB(SchemaDB):
    """Tag schema helpers."""

    kind = "TAG"


class EdgeTypeDB(SchemaDB):
    """Edge type schema helpers."""

    kind = "EDGE"
