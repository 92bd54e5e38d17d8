# ==============================================
# Stream rows from an HTTP endpoint
# ==============================================
#
# Polls an API and feeds each returned row into DynamicTables.
#
# A response body may be:
#   - one row as a list:    ["wikipedia.org", "cats", "en"]
#   - one row as an object: {"domain": "wikipedia.org", "keyword": "cats", ...}
#   - a list of such rows
#
# Anything else (a bare string, number, or such an item inside a
# batch) is counted in rows_rejected and never inserted.
#
# Request failures are counted; the stream stops after
# max_errors failures in a row.
#
# ==============================================

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import requests

from dynamic_tables.dynamic_tables import DynamicTables

logger = logging.getLogger(__name__)


@dataclass
class StreamStats:
    rows_received: int = 0
    rows_inserted: int = 0
    rows_rejected: int = 0
    errors: int = 0
    elapsed_seconds: float = 0.0


def _rows_from_payload(payload: Any) -> list:
    # A list holding lists/objects is a batch, anything else is one item
    if payload == [] or payload is None:
        return []
    if isinstance(payload, list) and any(_is_row(item) for item in payload):
        return payload
    return [payload]


def _is_row(item: Any) -> bool:
    return isinstance(item, (list, dict))


def stream_rows(
    tables: DynamicTables,
    api_url: str,
    max_records: Optional[int] = None,
    delay: float = 0.1,
    max_errors: int = 10,
    timeout: float = 10.0
) -> StreamStats:
    """
    Stream rows from the API into the dynamic tables.

    Args:
        tables: Configured and connected DynamicTables instance
        api_url: The API endpoint URL
        max_records: Stop after this many rows (None = until interrupted)
        delay: Delay between requests in seconds
        max_errors: Consecutive request failures before giving up
        timeout: Per-request timeout in seconds

    Returns:
        StreamStats for the run
    """
    stats = StreamStats()
    consecutive_errors = 0
    start_time = time.time()

    try:
        while max_records is None or stats.rows_received < max_records:
            try:
                response = requests.get(api_url, timeout=timeout)
                response.raise_for_status()
                payload = response.json()
            except (requests.RequestException, ValueError) as e:
                stats.errors += 1
                consecutive_errors += 1
                logger.error(f"API error: {e}")
                if consecutive_errors >= max_errors:
                    logger.error("Too many errors, stopping stream")
                    break
                time.sleep(delay)
                continue

            consecutive_errors = 0
            rows = _rows_from_payload(payload)
            if max_records is not None:
                rows = rows[:max_records - stats.rows_received]

            accepted = [row for row in rows if _is_row(row)]
            rejected = len(rows) - len(accepted)
            if rejected:
                stats.rows_rejected += rejected
                logger.warning(f"Rejected {rejected} item(s) that are neither a list nor an object")

            result = tables.input_batch(accepted)
            stats.rows_received += len(rows)
            stats.rows_inserted += result.rows_inserted

            if stats.rows_received % 10 == 0:
                logger.info(f"{stats.rows_received} rows received, {stats.rows_inserted} inserted")

            if delay:
                time.sleep(delay)
    except KeyboardInterrupt:
        logger.info("Stopping stream (Ctrl+C detected)")

    stats.elapsed_seconds = round(time.time() - start_time, 3)
    return stats
