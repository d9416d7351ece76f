from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Sequence, Union


def _value(item: Any, key: str) -> Any:
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)


def calculate_average_rating(ratings: Sequence[float]) -> float:
    """Mean of the given ratings rounded half-up to one decimal, 0 if empty."""
    if not ratings:
        return 0
    mean = Decimal(str(sum(ratings))) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def rating_distribution(ratings: Sequence[float]) -> List[Dict[str, Any]]:
    """Count of ratings per star (5 down to 1) with its share in percent."""
    total = len(ratings)
    result = []
    for stars in range(5, 0, -1):
        count = len([r for r in ratings if int(r) == stars])
        percentage = (count / total) * 100 if total else 0
        result.append({"stars": stars, "count": count, "percentage": round(percentage, 1)})
    return result


def sort_by_key(items: Iterable[Any], key: str, order: str = "asc") -> List[Any]:
    """Return a new list sorted by ``key``; missing values always sort last."""
    items = list(items)
    present = [i for i in items if _value(i, key) is not None]
    missing = [i for i in items if _value(i, key) is None]
    present = sorted(present, key=lambda i: _value(i, key), reverse=(order == "desc"))
    return present + missing


def filter_by_search_term(items: Iterable[Any], search_term: str, keys: Sequence[str]) -> List[Any]:
    items = list(items)
    if not search_term or not search_term.strip():
        return items

    term = search_term.lower()
    return [
        item for item in items
        if any(isinstance(_value(item, k), str) and term in _value(item, k).lower() for k in keys)
    ]


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def format_date(value: Union[datetime, int, float]) -> str:
    """Readable date such as ``Jan 5, 2024``; numbers are epoch milliseconds."""
    if not isinstance(value, datetime):
        value = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return f"{value.strftime('%b')} {value.day}, {value.year}"
