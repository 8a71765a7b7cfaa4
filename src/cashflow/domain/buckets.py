"""Date bucketing and cumulative balances for cash-flow reports.

Bucket keys are plain strings that sort chronologically:

- day: the ISO date, ``YYYY-MM-DD``
- week: the ISO date of the Sunday starting the week
- month: ``YYYY-MM``
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from decimal import Decimal

from cashflow.domain.entities import Bucket, DailyEvent, EventKind, Granularity
from cashflow.domain.errors import ValidationError
from cashflow.utils.date_parser import coerce_date, month_end, week_start

HEBREW_MONTHS = (
    "ינואר",
    "פברואר",
    "מרץ",
    "אפריל",
    "מאי",
    "יוני",
    "יולי",
    "אוגוסט",
    "ספטמבר",
    "אוקטובר",
    "נובמבר",
    "דצמבר",
)


def bucket_key(value: date | datetime | str, granularity: Granularity | str) -> str:
    """Return the key of the bucket containing a date.

    Raises:
        ValidationError: If the date cannot be parsed or granularity is unknown
    """
    granularity = Granularity.parse(granularity)
    day = coerce_date(value)

    if granularity == Granularity.DAY:
        return day.isoformat()
    if granularity == Granularity.WEEK:
        return week_start(day).isoformat()
    return day.strftime("%Y-%m")


def bucket_date_range(key: str, granularity: Granularity | str) -> tuple[date, date]:
    """Return the inclusive (start, end) dates a bucket key spans."""
    granularity = Granularity.parse(granularity)

    if granularity == Granularity.MONTH:
        try:
            year, month = (int(part) for part in key.split("-"))
            start = date(year, month, 1)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid month key '{key}': {e}")
        return start, month_end(start)

    start = coerce_date(key)
    if granularity == Granularity.WEEK:
        return start, start + timedelta(days=6)
    return start, start


def bucket_label(key: str, granularity: Granularity | str) -> str:
    """Return the display label for a bucket key.

    Weeks show their full seven-day span even when it crosses a month
    boundary.
    """
    granularity = Granularity.parse(granularity)
    start, end = bucket_date_range(key, granularity)

    if granularity == Granularity.MONTH:
        return f"{HEBREW_MONTHS[start.month - 1]} {start.year}"
    if granularity == Granularity.WEEK:
        return f"{start:%d/%m} - {end:%d/%m}"
    return f"{start:%d/%m}"


def _next_key(key: str, granularity: Granularity) -> str:
    _, end = bucket_date_range(key, granularity)
    return bucket_key(end + timedelta(days=1), granularity)


def _keys_between(first: str, last: str, granularity: Granularity) -> list[str]:
    keys = []
    key = first
    while key <= last:
        keys.append(key)
        key = _next_key(key, granularity)
    return keys


def aggregate(
    events: Iterable[DailyEvent],
    granularity: Granularity | str,
    *,
    opening_balance: Decimal = Decimal("0"),
    fill_gaps: bool = False,
    start: date | str | None = None,
    end: date | str | None = None,
) -> list[Bucket]:
    """Group events into buckets and compute running balances.

    Only buckets that received at least one event are returned, unless
    ``fill_gaps`` is set, in which case every bucket from ``start`` to
    ``end`` (defaulting to the first and last event) is present and events
    outside that span are left out. A zero-amount event still creates its
    bucket.

    Args:
        events: Dated inflows and outflows
        granularity: day, week or month
        opening_balance: Value the cumulative balance starts from
        fill_gaps: Emit zero buckets for periods without events
        start: First date covered when filling gaps
        end: Last date covered when filling gaps

    Returns:
        Buckets sorted by key, each with its cumulative balance

    Raises:
        ValidationError: If an event carries an unparsable date or unknown kind
        TypeError: If events is not an iterable of DailyEvent
    """
    granularity = Granularity.parse(granularity)
    if isinstance(events, (str, bytes)) or not isinstance(events, Iterable):
        raise TypeError(f"events must be an iterable of DailyEvent, got {type(events).__name__}")

    totals: dict[str, dict[str, Decimal]] = defaultdict(
        lambda: {"inflows": Decimal("0"), "outflows": Decimal("0")}
    )

    for event in events:
        if not isinstance(event, DailyEvent):
            raise TypeError(f"Expected DailyEvent, got {type(event).__name__}")
        try:
            kind = EventKind(event.kind)
        except ValueError:
            raise ValidationError(
                f"Unknown event kind '{event.kind}'. Supported: inflow, outflow"
            ) from None
        key = bucket_key(event.date, granularity)
        if kind == EventKind.INFLOW:
            totals[key]["inflows"] += event.amount
        else:
            totals[key]["outflows"] += event.amount

    keys = sorted(totals.keys())
    if fill_gaps and (keys or (start is not None and end is not None)):
        first = bucket_key(start, granularity) if start is not None else keys[0]
        last = bucket_key(end, granularity) if end is not None else keys[-1]
        keys = _keys_between(first, last, granularity)

    buckets: list[Bucket] = []
    cumulative = opening_balance
    for key in keys:
        data = totals.get(key) or {"inflows": Decimal("0"), "outflows": Decimal("0")}
        net = data["inflows"] - data["outflows"]
        cumulative += net
        start_date, end_date = bucket_date_range(key, granularity)
        buckets.append(
            Bucket(
                key=key,
                granularity=granularity,
                label=bucket_label(key, granularity),
                start_date=start_date,
                end_date=end_date,
                inflows=data["inflows"],
                outflows=data["outflows"],
                net=net,
                cumulative=cumulative,
            )
        )

    return buckets
