"""Identity and value normalization helpers shared by the reconcilers.

Remote gateways report timestamps as ISO-8601 strings (sometimes as epoch
milliseconds) and attach free-form JSON objects to several records. These
helpers turn those values into the shapes stored in the local cache.
"""

import json
import math
import secrets
import string
import time
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

_datetime_adapter = TypeAdapter(datetime)

_ID_ALPHABET = string.ascii_lowercase + string.digits

# SQLite INTEGER is a signed 64-bit value.
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def now_epoch() -> int:
    """Current time as integer epoch seconds."""
    return int(time.time())


def today_utc() -> str:
    """Current UTC date as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


def new_gateway_id() -> str:
    """Generate an opaque gateway id: gw_<epoch-ms>_<9 random chars>."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"gw_{int(time.time() * 1000)}_{suffix}"


def session_id(gateway_id: str, session_key: str) -> str:
    """Derive the local session id; remote keys are only unique per gateway."""
    return f"{gateway_id}_{session_key}"


def cron_job_id(gateway_id: str, remote_job_id: str) -> str:
    return f"{gateway_id}_{remote_job_id}"


def message_id(local_session_id: str, position: int) -> str:
    return f"{local_session_id}_{position}"


def to_epoch_seconds(value: Any) -> Optional[int]:
    """Normalize a remote timestamp to epoch seconds.

    Strings are parsed as ISO-8601 (a missing offset is read as UTC).
    Numbers are read as epoch milliseconds. The result is the floor of the
    millisecond value divided by 1000. Anything missing, unparseable or
    outside the 64-bit integer range yields None rather than an error.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, int):
            seconds = value // 1000
        elif math.isfinite(value):
            seconds = math.floor(value / 1000)
        else:
            return None
        return seconds if INT64_MIN <= seconds <= INT64_MAX else None

    if isinstance(value, str):
        text = value.strip()
        if _is_number(text):
            # Numeric strings are not ISO-8601, even though pydantic reads them as unix time.
            return None
        try:
            parsed = _datetime_adapter.validate_python(text)
        except ValidationError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        millis = math.floor(parsed.timestamp() * 1000)
        return math.floor(millis / 1000)

    return None


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def to_canonical_json(value: Any) -> str:
    """Serialize a JSON value to its canonical text form (sorted keys, compact)."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def to_text(value: Any) -> str:
    """Strings are kept verbatim; any other JSON value becomes canonical JSON text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return to_canonical_json(value)


def extract_kind(value: Any) -> Optional[str]:
    """Pull the ``kind`` discriminator out of a tagged sub-object."""
    if isinstance(value, dict):
        kind = value.get("kind")
        if kind is not None:
            return str(kind)
    return None


def coerce_int(value: Any) -> int:
    """Best-effort integer for counters; missing or bad values become 0.

    Values beyond the signed 64-bit range are clamped to it.
    """
    if isinstance(value, bool) or value is None:
        return 0
    try:
        result = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(INT64_MIN, min(INT64_MAX, result))


def coerce_float(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def iso_date(value: Optional[date] = None) -> str:
    """Render a date as YYYY-MM-DD, defaulting to today in UTC."""
    if value is None:
        return today_utc()
    return value.isoformat()
