"""Callback-style RPC conventions shared by peers, servers and bridges.

Event name = store verb. The last argument of every event is an
error-first callback ``callback(error, result)``.
"""

import logging
from typing import Any, Callable, Optional, Sequence

from ..errors import UnsupportedEventError

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[BaseException], Any], None]

STORE_VERBS = (
    "store",
    "fetch",
    "fetch_stream",
    "delete",
    "exists",
    "properties",
    "list_blobs",
    "signed_url",
)

READ_VERBS = (
    "fetch",
    "fetch_stream",
    "exists",
    "properties",
    "list_blobs",
)


def resolve_verb(store: Any, verb: str) -> Callable[..., Any]:
    """Look up a store verb by event name.

    Raises:
        UnsupportedEventError: If the event is not a store verb
    """
    method = getattr(store, verb, None) if verb in STORE_VERBS else None
    if not callable(method):
        raise UnsupportedEventError(verb)
    return method


def split_callback(args: Sequence[Any]):
    """Split event arguments into (call args, callback or None)."""
    if args and callable(args[-1]):
        return list(args[:-1]), args[-1]
    return list(args), None


def invoke(store: Any, verb: str, args: Sequence[Any], callback: Optional[Callback]) -> None:
    """Call a store verb and answer the callback error-first.

    Errors raised by the store are handed to the callback unchanged.
    """
    try:
        result = resolve_verb(store, verb)(*args)
    except Exception as e:
        logger.debug("RPC %s failed: %s", verb, e)
        if callback is not None:
            callback(e, None)
        return
    if callback is not None:
        callback(None, result)
