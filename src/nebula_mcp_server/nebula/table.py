"""Parse result string tables into typed records."""

from typing import List, Sequence

from ..errors import DecodeError
from .entity import DST_VID_FIELD, SRC_VID_FIELD, VID_FIELD, Record, Schema
from .values import decode_value

# Columns that carry identifiers rather than declared properties.
RESERVED_COLUMNS = frozenset({"vid", "VertexID", "edgeType", "SrcVID", "DstVID"})

VERTEX_ID_COLUMN = "VertexID"
SRC_ID_COLUMN = "SrcVID"
DST_ID_COLUMN = "DstVID"


def _record_key(position: int, field: str) -> str:
    # Engine identifier columns map onto the entity model's identifier names.
    if position == 0 and field == VERTEX_ID_COLUMN:
        return VID_FIELD
    if position == 0 and field == SRC_ID_COLUMN:
        return SRC_VID_FIELD
    if position == 1 and field == DST_ID_COLUMN:
        return DST_VID_FIELD
    return field


def parse_string_table(
    table: Sequence[Sequence[str]],
    fields: Sequence[str],
    schema: Schema,
) -> List[Record]:
    """Convert a string table into one record per data row.

    Args:
        table: Row 0 is the header, the remaining rows are data.
        fields: Field names in the same order as the yielded columns. The first
            one must be ``VertexID`` (lookup / fetch), ``vid`` (go) or
            ``SrcVID`` followed by ``DstVID`` (edges).
        schema: Declarations used to decode each property column.

    Returns:
        Records in row order. A table without data rows gives an empty list.
    """
    if len(table) <= 1:
        return []

    header = table[0]
    if len(fields) > len(header):
        raise DecodeError(
            f"{len(fields)} fields requested but the result has {len(header)} columns"
        )

    records: List[Record] = []
    for row in table[1:]:
        record: Record = {}
        for i, field in enumerate(fields):
            declaration = "string" if header[i] in RESERVED_COLUMNS else schema.get(field, "")
            record[_record_key(i, field)] = decode_value(declaration, row[i], field)
        records.append(record)
    return records
