"""Rebuild the ancestor chain of a response from its parent links."""

import logging
from typing import Optional, Protocol

from ..types.records import ResponseRecord

logger = logging.getLogger("responses-bridge")


class ResponseLookup(Protocol):
    def get(self, response_id: str) -> Optional[ResponseRecord]: ...


def reconstruct_chain(
    store: ResponseLookup,
    response_id: str,
    max_depth: Optional[int] = None,
) -> list[ResponseRecord]:
    """Walk ``previous_response_id`` links back to the conversation root.

    The walk stops at the first id with no stored record, whether that is the
    start id (an empty chain) or a dangling link left by a deleted ancestor.
    In the latter case the responses visited so far are returned. Parent links
    are fixed at insert time and must point at an existing, earlier response,
    so the walk cannot cycle.

    Args:
        store: Anything with a ``get(id)`` point lookup.
        response_id: The newest response in the chain.
        max_depth: Keep at most this many of the newest responses.

    Returns:
        Responses oldest first, ending with ``response_id``'s record.

    Raises:
        StoreError: Propagated unchanged from the store.
    """
    visited: list[ResponseRecord] = []
    current_id: Optional[str] = response_id

    while current_id:
        if max_depth is not None and len(visited) >= max_depth:
            logger.warning(
                f"Chain: Hit max depth {max_depth} while walking from {response_id}"
            )
            break

        record = store.get(current_id)
        if record is None:
            if visited:
                logger.warning(
                    f"Chain: Broken link at {current_id}, "
                    f"depth {len(visited)}"
                )
            break

        visited.append(record)
        current_id = record.previous_response_id

    visited.reverse()
    logger.debug(f"Chain: Rebuilt {len(visited)} responses ending at {response_id}")
    return visited
