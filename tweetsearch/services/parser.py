"""Parse keyword search responses into tweet records."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from tweetsearch.domain.models import TweetModel
from tweetsearch.logging import logger


def parse_search_results(data: bytes) -> list[TweetModel]:
    """Return the tweets of a ``{"results": [...]}`` payload.

    Malformed payloads produce an empty list and malformed records are
    skipped, so a bad response never aborts the fetch pipeline.
    """

    try:
        payload: Any = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("search_payload_invalid", error=str(exc), size=len(data))
        return []

    records = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(records, list):
        logger.warning("search_payload_missing_results")
        return []

    tweets: list[TweetModel] = []
    for record in records:
        try:
            tweets.append(TweetModel.model_validate(record))
        except ValidationError as exc:
            logger.debug("search_record_skipped", errors=exc.error_count())
    return tweets


__all__ = ["parse_search_results"]
