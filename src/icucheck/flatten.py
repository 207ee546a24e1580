import logging
from typing import Any

logger = logging.getLogger(__name__)


def _join(prefix: str, segment: str) -> str:
    return f"{prefix}.{segment}" if prefix else segment


def flatten(value: Any, prefix: str = "") -> dict[str, str]:
    """Flatten a parsed JSON document into ``key.path -> message`` pairs.

    Object keys and zero-based array indices are joined with dots, so
    ``{"items": [{"q": "..."}]}`` yields the key ``items.0.q``. Only string
    leaves are kept; numbers, booleans and null are dropped.
    """
    if isinstance(value, dict):
        children = [(_join(prefix, str(key)), child) for key, child in value.items()]
    elif isinstance(value, list):
        children = [(_join(prefix, str(index)), child) for index, child in enumerate(value)]
    else:
        return {}

    result: dict[str, str] = {}
    for path, child in children:
        if isinstance(child, str):
            result[path] = child
        elif isinstance(child, (dict, list)):
            result.update(flatten(child, path))
        else:
            logger.debug(f"Ignoring non-string leaf {path} ({type(child).__name__})")
    return result
