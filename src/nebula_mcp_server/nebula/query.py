"""Lookup descriptors and the WHERE / YIELD / LIMIT clauses built from them.

A ``Query`` describes one paginated search request. It is usually populated
straight from request parameters, so the aliases used by browser clients
(``search_fields[]``, ``search_values[]``) are accepted as well.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..errors import IllegalField
from .entity import Record, Schema
from .table import parse_string_table
from .values import encode_value, is_number_type, is_search_eligible

if TYPE_CHECKING:
    from .client import NebulaClient

DEFAULT_PAGE_INDEX = 1
DEFAULT_PAGE_SIZE = 20

CREATED_AT_FIELD = "created_at"
ORDER_BY_CREATED_AT = f" | ORDER BY $-.{CREATED_AT_FIELD} ASC"


def page_window(page_index: int, page_size: int) -> Tuple[int, int]:
    """Return ``(offset, size)`` for a 1-based page.

    Non-positive indexes and sizes fall back to page 1 and 20 rows.
    """
    if page_index <= 0:
        page_index = DEFAULT_PAGE_INDEX
    if page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    return (page_index - 1) * page_size, page_size


class Query(BaseModel):
    """Paginated multi-value search over a tag or edge type.

    Attributes:
        page_size: Rows per page. Together with ``page_index == 0`` it means
            "no pagination".
        page_index: 1-based page number.
        search_fields: Fields to search. Empty means no search filter.
        search_values: Values to match; each one is tried on every field.
        explicitly: Use ``==`` instead of ``STARTS WITH`` on string fields.
    """

    model_config = ConfigDict(populate_by_name=True)

    page_size: int = 0
    page_index: int = 0
    search_fields: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("search_fields", "search_fields[]"),
    )
    search_values: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("search_values", "search_values[]", "search_value"),
    )
    explicitly: bool = False

    @field_validator("search_values", mode="before")
    @classmethod
    def _single_value(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    @property
    def paginated(self) -> bool:
        return not (self.page_size == 0 and self.page_index == 0)

    def limit_clause(self) -> str:
        if not self.paginated:
            return ""
        offset, size = page_window(self.page_index, self.page_size)
        return f" | LIMIT {offset}, {size}"

    def search_clause(self, type_name: str, schema: Schema) -> str:
        """Build the OR-combined search condition, or ``""`` for no search.

        Fields whose type is neither a number nor a searchable string type are
        skipped.

        Raises:
            IllegalField: A search field is not part of the schema.
        """
        if not self.search_values:
            return ""

        conditions: List[str] = []
        for search_field in self.search_fields:
            declaration = schema.get(search_field)
            if declaration is None:
                raise IllegalField(
                    f"param 'search_fields' got illegal field '{search_field}'"
                )
            if not is_search_eligible(declaration):
                continue

            if self.explicitly or is_number_type(declaration):
                operator = "=="
            else:
                operator = "STARTS WITH"
            matches = [
                f"{type_name}.{search_field} {operator} "
                f"{encode_value(declaration, value, search_field)}"
                for value in self.search_values
            ]
            if len(matches) == 1:
                conditions.append(matches[0])
            else:
                conditions.append("(" + " OR ".join(matches) + ")")
        return " OR ".join(conditions)


def filter_clause(type_name: str, schema: Schema, filters: Mapping[str, Any]) -> str:
    """Build an AND-combined equality condition from ``{field: value}``.

    Raises:
        IllegalField: A filter field is not part of the schema.
    """
    conditions: List[str] = []
    for filter_field, value in filters.items():
        declaration = schema.get(filter_field)
        if declaration is None:
            raise IllegalField(f"filter with illegal field '{filter_field}'")
        conditions.append(
            f"{type_name}.{filter_field} == {encode_value(declaration, value, filter_field)}"
        )
    return " AND ".join(conditions)


def where_clause(
    type_name: str,
    schema: Schema,
    filters: Optional[Mapping[str, Any]] = None,
    query: Optional[Query] = None,
) -> str:
    """Combine an equality filter and a search into ``" WHERE ..."``."""
    parts: List[str] = []
    if filters:
        parts.append(filter_clause(type_name, schema, filters))
    search = query.search_clause(type_name, schema) if query is not None else ""
    if search:
        parts.append(f"({search})" if parts else search)
    if not parts:
        return ""
    return " WHERE " + " AND ".join(parts)


@dataclass
class Projection:
    """Columns to yield and the field names used to parse them back."""

    items: List[str] = field(default_factory=list)
    fields: List[str] = field(default_factory=list)
    ordered: bool = False

    def yield_clause(self) -> str:
        return ", ".join(self.items)

    def order_clause(self) -> str:
        return ORDER_BY_CREATED_AT if self.ordered else ""


def project(
    schema: Schema,
    show_fields: Optional[Sequence[str]],
    id_items: Sequence[Tuple[str, str]],
    prop_source: str,
) -> Projection:
    """Work out the YIELD items for a read statement.

    Args:
        schema: Schema of the entities being read.
        show_fields: ``None``/empty for every schema field, ``["vid"]`` for
            identifiers only, otherwise the fields to show. ``created_at`` is
            added whenever the schema defines it.
        id_items: ``(expression, column)`` pairs yielded first, e.g.
            ``("id(vertex)", "VertexID")``.
        prop_source: Property container, e.g. ``"vertex"``, ``"edge"`` or ``"$$"``.

    Raises:
        IllegalField: A show field is not part of the schema.
    """
    projection = Projection()
    for expression, column in id_items:
        projection.items.append(f"{expression} AS {column}")
        projection.fields.append(column)

    if not show_fields:
        names: List[str] = list(schema)
    elif list(show_fields) == ["vid"]:
        names = []
    else:
        names = []
        for name in show_fields:
            if name == "vid":
                continue
            if name not in schema:
                raise IllegalField(f"invalid show field '{name}'")
            if name not in names:
                names.append(name)
        if CREATED_AT_FIELD in schema and CREATED_AT_FIELD not in names:
            names.append(CREATED_AT_FIELD)

    for name in names:
        projection.items.append(f"properties({prop_source}).{name} AS {name}")
        projection.fields.append(name)
    projection.ordered = CREATED_AT_FIELD in names
    return projection


def run_lookup(
    client: "NebulaClient",
    base: str,
    projection: Projection,
    schema: Schema,
    query: Optional[Query] = None,
) -> Tuple[int, List[Record]]:
    """Execute a read statement and parse it, paginating when asked to.

    A paginated read costs two statements: the unordered full match to count
    the total, then the ordered page itself.

    Args:
        client: Client used to run the statements.
        base: The statement up to and including its YIELD clause.
        projection: Projection ``base`` was built with.
        schema: Declarations used to decode the result.
        query: Pagination descriptor; ``None`` reads everything.

    Returns:
        ``(total, records)``.
    """
    if query is None or not query.paginated:
        table = client.execute(f"{base}{projection.order_clause()};")
        records = parse_string_table(table.as_string_table(), projection.fields, schema)
        return len(records), records

    total = len(client.execute(f"{base};"))
    table = client.execute(f"{base}{projection.order_clause()}{query.limit_clause()};")
    records = parse_string_table(table.as_string_table(), projection.fields, schema)
    return total, records
