import json
import logging
from typing import Any

import requests
from pydantic import ValidationError

from conference_schedule.config import SESSIONS_API_TIMEOUT, SESSIONS_API_URL
from conference_schedule.errors import FetchFailure
from conference_schedule.models import Session


logger = logging.getLogger("ScheduleEngine")


def session_items(payload: Any) -> list:
    """Pull the list of raw session objects out of an API response ({"data": {"items": [...]}} or a bare list)."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        data = payload.get("data") or payload
        items = data.get("items") if isinstance(data, dict) else None
        if isinstance(items, list):
            return items
    raise FetchFailure("Not a recognized sessions payload (missing data.items).")


def parse_sessions(payload: Any) -> list[Session]:
    """
    Validate each raw session. Items that fail validation are skipped, the rest are kept.
    Args:
        payload: Decoded JSON from the sessions API
    Returns:
        A list of Session models in payload order
    """
    sessions = []
    for i, item in enumerate(session_items(payload)):
        try:
            sessions.append(Session.model_validate(item))
        except ValidationError as e:
            ident = item.get("id") if isinstance(item, dict) else None
            logger.warning(f"skipping malformed session #{i} (id={ident!r}): {e.error_count()} validation errors")
    return sessions


def fetch_sessions(url: str = SESSIONS_API_URL, timeout: float = SESSIONS_API_TIMEOUT) -> list[Session]:
    """
    Download and parse the session list.
    Raises FetchFailure on network, HTTP or decoding errors so the caller can keep its current data.
    """
    try:
        response = requests.get(url, headers={"Accept": "application/json"}, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchFailure(f"Error calling sessions API: {e}") from e
    try:
        payload = response.json()
    except (json.JSONDecodeError, ValueError) as e:
        raise FetchFailure(f"Invalid JSON from sessions API: {response.text[:500]}") from e
    sessions = parse_sessions(payload)
    logger.info(f"fetch_sessions: {len(sessions)} sessions from {url}")
    return sessions
