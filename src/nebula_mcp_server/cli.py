"""Simple CLI for inspecting a NebulaGraph space offline.

Usage examples (from project root):

    # Ensure src is on PYTHONPATH, then:
    PYTHONPATH=src python -m nebula_mcp_server.cli describe --tag player

    PYTHONPATH=src python -m nebula_mcp_server.cli lookup-vertices --tag player \
        --search-field name --search-value Tim --page-size 10

    PYTHONPATH=src python -m nebula_mcp_server.cli go-ends \
        --from player100 --over follow --tag player --steps 2

The CLI uses:
- .env configuration (NEBULA_HOSTS, NEBULA_USER, NEBULA_PASSWORD, NEBULA_SPACE)
- NebulaClient for connection
- the nebula package statement builders for every command
"""

import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from .config import load_config
from .nebula import (
    Edge,
    EdgeDB,
    EdgeTypeDB,
    NebulaClient,
    Query,
    TagDB,
    TraversalDB,
    Vertex,
    VertexDB,
)


def _query_from_args(args: argparse.Namespace) -> Query:
    return Query(
        page_index=args.page_index,
        page_size=args.page_size,
        search_fields=args.search_fields or [],
        search_values=args.search_values or [],
        explicitly=args.explicitly,
    )


def _cmd_describe(args: argparse.Namespace) -> None:
    """Describe a tag or an edge type."""

    client = NebulaClient(config=args.config)

    with client:
        if args.tag:
            kind, name = "tag", args.tag
            fields = TagDB(client).describe(args.tag)
        else:
            kind, name = "edge", args.edge
            fields = EdgeTypeDB(client).describe(args.edge)

    serializable: Dict[str, Any] = {
        "name": name,
        "kind": kind,
        "count": len(fields),
        "fields": fields,
    }

    print(json.dumps(serializable, indent=2, sort_keys=True))


def _cmd_fetch_vertex(args: argparse.Namespace) -> None:
    """Fetch every property of one vertex."""

    client = NebulaClient(config=args.config)

    with client:
        schema = TagDB(client).codec_schema(args.tag)
        record = VertexDB(client).fetch(Vertex(tag=args.tag, schema=schema, vid=args.vid))

    serializable: Dict[str, Any] = {
        "count": 1,
        "results": [record],
    }

    print(json.dumps(serializable, indent=2, sort_keys=True, default=str))


def _cmd_lookup_vertices(args: argparse.Namespace) -> None:
    """Look up vertices of a tag with optional search and pagination."""

    client = NebulaClient(config=args.config)

    with client:
        schema = TagDB(client).codec_schema(args.tag)
        total, records = VertexDB(client).lookup(
            Vertex(tag=args.tag, schema=schema),
            query=_query_from_args(args),
            show_fields=args.show_fields,
        )

    serializable: Dict[str, Any] = {
        "total": total,
        "count": len(records),
        "results": records,
    }

    print(json.dumps(serializable, indent=2, sort_keys=True, default=str))


def _cmd_lookup_edges(args: argparse.Namespace) -> None:
    """Look up edges of an edge type with optional search and pagination."""

    client = NebulaClient(config=args.config)

    with client:
        schema = EdgeTypeDB(client).codec_schema(args.edge)
        total, records = EdgeDB(client).lookup(
            Edge(edge_type=args.edge, schema=schema),
            query=_query_from_args(args),
            show_fields=args.show_fields,
        )

    serializable: Dict[str, Any] = {
        "total": total,
        "count": len(records),
        "results": records,
    }

    print(json.dumps(serializable, indent=2, sort_keys=True, default=str))


def _cmd_go_ends(args: argparse.Namespace) -> None:
    """Find the vertices reached by following one edge type."""

    client = NebulaClient(config=args.config)

    with client:
        schema = TagDB(client).codec_schema(args.tag)
        records = TraversalDB(client).go_get_ends(
            args.start_vid,
            args.over,
            schema,
            args.show_fields,
            steps=args.steps,
            reversely=args.reversely,
        )

    result: Dict[str, Any] = {
        "count": len(records),
        "steps": args.steps,
        "reversely": args.reversely,
        "results": records,
    }
    print(json.dumps(result, indent=2, sort_keys=True, default=str))


def _cmd_go_relations(args: argparse.Namespace) -> None:
    """List the edges around a vertex, one hop deep."""

    client = NebulaClient(config=args.config)

    with client:
        schema = TagDB(client).codec_schema(args.tag) if args.tag else {}
        records = TraversalDB(client).go_get_relations(
            args.start_vid,
            args.over or [],
            schema,
            reversely=args.reversely,
            show_fields=args.show_fields or (),
        )

    result: Dict[str, Any] = {
        "count": len(records),
        "reversely": args.reversely,
        "results": records,
    }
    print(json.dumps(result, indent=2, sort_keys=True, default=str))


def _cmd_execute(args: argparse.Namespace) -> None:
    """Run raw nGQL statements and print the result tables."""

    client = NebulaClient(config=args.config)

    with client:
        if len(args.statements) == 1:
            tables = [client.execute(args.statements[0])]
        else:
            tables = client.execute_batch(args.statements)

    result: Dict[str, Any] = {
        "count": len(tables),
        "results": [
            {"columns": table.columns, "rows": table.rows} for table in tables
        ],
    }
    print(json.dumps(result, indent=2))


def _parse_log_level(value: Optional[str]) -> Optional[str]:
    """Parse log level argument, allowing None to fall back to LOG_LEVEL."""
    if value is None:
        return None
    level = value.upper()
    if level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        raise argparse.ArgumentTypeError(f'invalid log level "{value}"')
    return level


def _add_search_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--search-field",
        action="append",
        dest="search_fields",
        help="Field to search on (repeatable)",
    )
    parser.add_argument(
        "--search-value",
        action="append",
        dest="search_values",
        help="Value to search for (repeatable)",
    )
    parser.add_argument(
        "--explicitly",
        action="store_true",
        help="Match string fields exactly instead of by prefix",
    )
    parser.add_argument(
        "--page-index",
        type=int,
        default=0,
        help="1-based page number; 0 together with --page-size 0 disables paging",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=0,
        help="Rows per page",
    )
    parser.add_argument(
        "--show-field",
        action="append",
        dest="show_fields",
        help='Field to return (repeatable); "vid" alone returns ids only',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CLI for inspecting a NebulaGraph space",
    )
    parser.add_argument(
        "--log-level",
        type=_parse_log_level,
        default=None,
        help="Log level; defaults to LOG_LEVEL from the environment",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # describe command
    p_describe = subparsers.add_parser(
        "describe",
        help="Show the fields of a tag or an edge type",
    )
    target = p_describe.add_mutually_exclusive_group(required=True)
    target.add_argument("--tag", type=str, help="Tag name")
    target.add_argument("--edge", type=str, help="Edge type name")
    p_describe.set_defaults(func=_cmd_describe)

    # fetch-vertex command
    p_fetch = subparsers.add_parser(
        "fetch-vertex",
        help="Fetch every property of one vertex",
    )
    p_fetch.add_argument("--tag", type=str, required=True, help="Tag name")
    p_fetch.add_argument("--vid", type=str, required=True, help="Vertex id")
    p_fetch.set_defaults(func=_cmd_fetch_vertex)

    # lookup-vertices command
    p_lookup_vertices = subparsers.add_parser(
        "lookup-vertices",
        help="Look up vertices of a tag (uses the tag's basic index)",
    )
    p_lookup_vertices.add_argument("--tag", type=str, required=True, help="Tag name")
    _add_search_arguments(p_lookup_vertices)
    p_lookup_vertices.set_defaults(func=_cmd_lookup_vertices)

    # lookup-edges command
    p_lookup_edges = subparsers.add_parser(
        "lookup-edges",
        help="Look up edges of an edge type (uses the edge type's basic index)",
    )
    p_lookup_edges.add_argument("--edge", type=str, required=True, help="Edge type name")
    _add_search_arguments(p_lookup_edges)
    p_lookup_edges.set_defaults(func=_cmd_lookup_edges)

    # go-ends command
    p_go_ends = subparsers.add_parser(
        "go-ends",
        help="Find the vertices reached from a vertex over one edge type",
    )
    p_go_ends.add_argument(
        "--from", type=str, required=True, help="Start vertex id", dest="start_vid"
    )
    p_go_ends.add_argument("--over", type=str, required=True, help="Edge type to follow")
    p_go_ends.add_argument(
        "--tag", type=str, required=True, help="Tag of the vertices at the far end"
    )
    p_go_ends.add_argument(
        "--steps",
        type=int,
        default=1,
        help="Number of hops",
    )
    p_go_ends.add_argument(
        "--reversely",
        action="store_true",
        help="Follow edges against their direction",
    )
    p_go_ends.add_argument(
        "--show-field",
        action="append",
        dest="show_fields",
        help='Field to return (repeatable); "vid" alone returns ids only',
    )
    p_go_ends.set_defaults(func=_cmd_go_ends)

    # go-relations command
    p_go_relations = subparsers.add_parser(
        "go-relations",
        help="List the edges around a vertex, one hop deep",
    )
    p_go_relations.add_argument(
        "--from", type=str, required=True, help="Start vertex id", dest="start_vid"
    )
    p_go_relations.add_argument(
        "--over",
        action="append",
        help="Edge type to follow (repeatable); all edge types when omitted",
    )
    p_go_relations.add_argument(
        "--tag", type=str, default=None, help="Tag of the neighbours, needed with --show-field"
    )
    p_go_relations.add_argument(
        "--reversely",
        action="store_true",
        help="List incoming edges instead of outgoing ones",
    )
    p_go_relations.add_argument(
        "--show-field",
        action="append",
        dest="show_fields",
        help="Neighbour field to include (repeatable)",
    )
    p_go_relations.set_defaults(func=_cmd_go_relations)

    # execute command
    p_execute = subparsers.add_parser(
        "execute",
        help=(
            "Run raw nGQL statements in the configured space. Several statements "
            "run one after another and stop at the first failure."
        ),
    )
    p_execute.add_argument(
        "statements",
        nargs="+",
        help="nGQL statements",
    )
    p_execute.set_defaults(func=_cmd_execute)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return

    args.config = load_config()
    logging.basicConfig(level=args.log_level or args.config.log_level)

    args.func(args)


if __name__ == "__main__":
    main()
