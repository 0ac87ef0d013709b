"""
Caption Response Parsing
========================

Extracts the ``generated_text`` field from caption API responses.

Hosted captioning models answer with either an object or a list of
objects, e.g. ``[{"generated_text": "a cat on a sofa"}]``. Only that one
string field is consumed; anything else in the body is ignored.
"""

import json
from typing import Any, Optional


NO_CAPTION = "No caption generated"

GENERATED_TEXT_KEY = "generated_text"


def _find_generated_text(node: Any) -> Optional[str]:
    """Depth-first search for the first string ``generated_text`` value."""
    if isinstance(node, dict):
        value = node.get(GENERATED_TEXT_KEY)
        if isinstance(value, str):
            return value
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return None

    for child in children:
        found = _find_generated_text(child)
        if found is not None:
            return found
    return None


def extract_generated_text(body: str) -> str:
    """
    Pull the caption out of a response body.

    Args:
        body: Raw response text

    Returns:
        The first ``generated_text`` string in the body, or NO_CAPTION
        if the body is not valid JSON or has no such field.
    """
    try:
        payload = json.loads(body)
    except (TypeError, ValueError):
        return NO_CAPTION

    text = _find_generated_text(payload)
    return NO_CAPTION if text is None else text
