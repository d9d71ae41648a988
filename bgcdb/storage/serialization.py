"""
Serialization of queries for storage and transport.

Formats:
- json: UTF-8 text, the wire shape served over HTTP
- msgpack: compact binary, same structure as the JSON form
"""

from __future__ import annotations

import json
from typing import Any, Dict, Union

import msgpack

from ..core.exceptions import MalformedQueryError
from ..query.terms import MAX_NESTING_DEPTH, Query, QueryTerm, term_from_dict


FORMATS = ("json", "msgpack")


def _encode(data: Dict[str, Any], format: str) -> Union[str, bytes]:
    if format == "json":
        return json.dumps(data)
    elif format == "msgpack":
        return msgpack.packb(data, use_bin_type=True)
    else:
        raise ValueError(f"Unknown serialization format: {format}")


def _decode(data: Union[str, bytes], format: str) -> Any:
    try:
        if format == "json":
            return json.loads(data)
        elif format == "msgpack":
            return msgpack.unpackb(data, raw=False)
    except (ValueError, TypeError, msgpack.exceptions.UnpackException) as e:
        raise MalformedQueryError(f"Cannot decode {format} query: {e}") from e
    raise ValueError(f"Unknown serialization format: {format}")


def serialize_query(query: Query, format: str = "json") -> Union[str, bytes]:
    """
    Serialize a query.

    Args:
        query: Query to serialize
        format: ``json`` (returns str) or ``msgpack`` (returns bytes)

    Raises:
        InvalidOperationError: If the tree holds an unknown operator
    """
    return _encode(query.to_dict(), format)


def deserialize_query(
    data: Union[str, bytes],
    format: str = "json",
    max_depth: int = MAX_NESTING_DEPTH,
) -> Query:
    """
    Deserialize a query.

    Args:
        data: Encoded query
        format: ``json`` or ``msgpack``
        max_depth: Deepest term tree accepted

    Raises:
        MalformedQueryError: If the data does not decode to a valid query
    """
    return Query.from_dict(_decode(data, format), max_depth=max_depth)


def serialize_term(term: QueryTerm, format: str = "json") -> Union[str, bytes]:
    """Serialize a bare query term."""
    return _encode(term.to_dict(), format)


def deserialize_term(
    data: Union[str, bytes],
    format: str = "json",
    max_depth: int = MAX_NESTING_DEPTH,
) -> QueryTerm:
    """Deserialize a bare query term."""
    return term_from_dict(_decode(data, format), max_depth)
