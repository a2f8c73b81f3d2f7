"""
Kubernetes helper functions shared by the resource modules and handlers.
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from kubernetes.client import ApiClient


def calculate_age(creation_timestamp) -> str:
    """
    Age of a resource as a short string.

    Returns:
        "5d", "3h", "10m", "30s", or "Unknown" without a timestamp
    """
    if not isinstance(creation_timestamp, datetime):
        return "Unknown"

    created = creation_timestamp
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    delta = datetime.now(timezone.utc) - created

    if delta.days > 0:
        return f"{delta.days}d"
    elif delta.seconds // 3600 > 0:
        return f"{delta.seconds // 3600}h"
    elif delta.seconds // 60 > 0:
        return f"{delta.seconds // 60}m"
    else:
        return f"{max(delta.seconds, 0)}s"


@lru_cache(maxsize=1)
def _serializer() -> ApiClient:
    # Used only for its model -> JSON conversion, never for requests
    return ApiClient()


def to_plain(obj: Any) -> Any:
    """Convert client models into JSON-ready dicts with API (camelCase) keys."""
    return _serializer().sanitize_for_serialization(obj)


def safe_dict(value: dict | None) -> dict:
    return dict(value) if value else {}


def safe_list(value: list | None) -> list:
    return list(value) if value else []
