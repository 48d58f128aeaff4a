"""JSON columns are stored as text; these helpers encode once and decode once."""
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def encode_json_field(value: Any) -> str:
    return json.dumps(value)


def decode_json_field(value: Any) -> Any:
    """
    Decode a stored JSON text column.

    Values that are already structured (jsonb columns come back decoded) are
    returned as-is, so a payload is never decoded or encoded twice. Text that
    is not valid JSON is returned unchanged and logged.
    """
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        logger.warning("Could not decode stored JSON field, returning raw text")
        return value
