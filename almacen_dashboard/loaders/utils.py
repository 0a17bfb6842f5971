"""
Shared utilities for document ingestion: timestamp normalisation,
numeric coercion, field renaming.
"""

import logging
from collections.abc import Mapping
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def normalise_timestamp(val: Any) -> pd.Timestamp | None:
    """Convert a stored timestamp to a UTC pd.Timestamp.

    Accepts Firestore timestamps (datetime subclasses), plain datetimes,
    ``{"seconds": ..., "nanoseconds": ...}`` mappings as exported by the
    JS client, epoch seconds and ISO strings. Naive values are taken as
    UTC. Returns None for missing or unparseable values.
    """
    if val is None:
        return None
    if isinstance(val, Mapping):
        seconds = val.get("seconds", val.get("_seconds"))
        if seconds is None:
            logger.warning("Timestamp mapping without seconds: %s", val)
            return None
        nanos = val.get("nanoseconds", val.get("_nanoseconds")) or 0
        return pd.Timestamp(int(seconds), unit="s", tz="UTC") + pd.Timedelta(nanoseconds=int(nanos))
    if isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        try:
            return pd.Timestamp(val, unit="s", tz="UTC")
        except (ValueError, OverflowError):
            logger.warning("Could not convert epoch value %s to timestamp", val)
            return None
    try:
        ts = pd.Timestamp(val)
    except (ValueError, TypeError):
        logger.warning("Could not parse timestamp value: %s", val)
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values.

    Form inputs are sometimes stored as strings ("12", "1,250.5").
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip().replace(",", "")
        if not val:
            return None
        try:
            return float(val)
        except ValueError:
            return None
    try:
        result = float(val)
    except (ValueError, TypeError):
        return None
    if pd.isna(result):
        return None
    return result


def rename_fields(doc: Mapping, field_map: Mapping[str, str]) -> dict:
    """Return ``doc`` with document field names mapped to canonical names.

    Fields absent from ``field_map`` keep their original name.
    """
    return {field_map.get(key, key): value for key, value in doc.items()}
