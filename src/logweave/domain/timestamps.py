from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

# Indexer format: "2025-12-12 16:33:18.0 +00:00:00" (hour may be a single digit)
# Normalized:     "2025-12-12T16:33:18.0+00:00"
_RAW_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[ T]+(\d{1,2}):(\d{2}):(\d{2})(\.\d+)?\s*([+-])(\d{2}):(\d{2})(?::(\d{2}))?$"
)
_ZULU_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})[ T]+(\d{1,2}):(\d{2}):(\d{2})(\.\d+)?\s*Z$")

INVALID = ""


def _to_datetime(m: re.Match, *, zulu: bool = False) -> datetime | None:
    g = m.groups()
    frac = g[6] or ""
    micro = int((frac[1:] + "000000")[:6]) if frac else 0
    if zulu:
        tz = timezone.utc
    else:
        sign = -1 if g[7] == "-" else 1
        tz_h, tz_m = int(g[8]), int(g[9])
        if tz_h > 23 or tz_m > 59:
            return None
        tz = timezone(sign * timedelta(hours=tz_h, minutes=tz_m))
    try:
        return datetime(int(g[0]), int(g[1]), int(g[2]), int(g[3]), int(g[4]), int(g[5]), micro, tzinfo=tz)
    except ValueError:
        return None


def normalize_timestamp(raw: object) -> str:
    """
    Indexer timestamp text -> ISO-8601 accepted by `datetime.fromisoformat`.

    Single-digit hours are zero-padded, the separator becomes 'T' and the
    offset's seconds are dropped. Anything unusable yields INVALID ("").
    """
    if not isinstance(raw, str) or not raw.strip():
        return INVALID
    s = raw.strip()
    m = _RAW_RE.match(s)
    if m:
        if _to_datetime(m) is None:
            return INVALID
        y, mo, d, hh, mi, ss, frac, sign, tzh, tzm, _ = m.groups()
        return f"{y}-{mo}-{d}T{int(hh):02d}:{mi}:{ss}{frac or ''}{sign}{tzh}:{tzm}"
    m = _ZULU_RE.match(s)
    if m:
        if _to_datetime(m, zulu=True) is None:
            return INVALID
        y, mo, d, hh, mi, ss, frac = m.groups()
        return f"{y}-{mo}-{d}T{int(hh):02d}:{mi}:{ss}{frac or ''}+00:00"
    return INVALID


def parse_timestamp(raw: object) -> datetime | None:
    """Timezone-aware datetime for raw or already-normalized text; None if unusable."""
    norm = normalize_timestamp(raw)
    if not norm:
        return None
    m = _RAW_RE.match(norm)
    return _to_datetime(m) if m else None

# ---------- display helpers ---------------------------------------------------

def _month_day(dt: datetime, *, long: bool = False) -> str:
    return f"{dt.strftime('%B' if long else '%b')} {dt.day}"


def format_time_ago(raw: object, now: datetime | None = None) -> str:
    dt = parse_timestamp(raw)
    if dt is None:
        return "Unknown time"
    now = now or datetime.now(timezone.utc)
    diff_s = (now - dt).total_seconds()
    mins, hours, days = int(diff_s // 60), int(diff_s // 3600), int(diff_s // 86400)

    if mins < 1:
        return "Just now"
    if mins < 60:
        return f"{mins} minute{'' if mins == 1 else 's'} ago"
    if hours < 24:
        return f"{hours} hour{'' if hours == 1 else 's'} ago"
    if days < 7:
        return f"{days} day{'' if days == 1 else 's'} ago"
    if dt.year != now.year:
        return f"{_month_day(dt)}, {dt.year}"
    return _month_day(dt)


def format_full_date(raw: object) -> str:
    """'2025-12-12 16:33:18.0 +00:00:00' -> 'December 12, 2025 at 4:33 PM'"""
    dt = parse_timestamp(raw)
    if dt is None:
        return "Unknown date"
    hour12 = dt.hour % 12 or 12
    ampm = "AM" if dt.hour < 12 else "PM"
    return f"{_month_day(dt, long=True)}, {dt.year} at {hour12}:{dt.minute:02d} {ampm}"


def format_short_date(raw: object) -> str:
    dt = parse_timestamp(raw)
    if dt is None:
        return "Unknown date"
    return f"{_month_day(dt)}, {dt.year}"
