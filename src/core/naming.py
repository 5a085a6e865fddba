# src/core/naming.py - v1
"""Object naming: step tokens, upload filenames and timestamps.

Step labels become filename tokens by these rules, applied in order:
  1. drop parenthesised groups, e.g. "(Y-axis)"
  2. replace en and em dashes with "-"
  3. drop characters other than ASCII letters, digits, whitespace and "-"
  4. trim, then turn whitespace runs into a single "_"
  5. collapse runs of "-" into one
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

_PAREN_GROUP = re.compile(r"\(.*?\)")
_LONG_DASH = re.compile(r"[–—]")
_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASH_RUN = re.compile(r"-+")


def format_step_for_name(label: str) -> str:
    """Sanitize a step label into a filename token."""
    token = _PAREN_GROUP.sub("", label)
    token = _LONG_DASH.sub("-", token)
    token = _DISALLOWED.sub("", token)
    token = _WHITESPACE.sub("_", token.strip())
    return _DASH_RUN.sub("-", token)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat_z(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. 2026-10-17T08:30:00.000Z."""
    dt = _as_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def format_timestamp(dt: datetime) -> str:
    """Filename-safe timestamp: isoformat_z with ':' and '.' replaced by '-'."""
    return re.sub(r"[:.]", "-", isoformat_z(dt))


def generate_file_name(
    serial: str,
    context: str,
    step_token: str,
    index: int,
    now: datetime,
) -> str:
    """Build {serial}_{context}_{step}_{index}_{timestamp}.jpg."""
    return f"{serial}_{context}_{step_token}_{index}_{format_timestamp(now)}.jpg"


def to_workflow_type(context_key: str) -> str:
    """Manifest workflow type: whitespace to underscores, lower-cased."""
    if not context_key:
        return ""
    return _WHITESPACE.sub("_", context_key).lower()
