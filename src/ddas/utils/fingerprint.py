import json
from typing import Any


def canonical_json(obj: Any) -> str:
    """Key-sorted, whitespace-free JSON; equal structures give equal text."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)
