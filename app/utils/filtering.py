"""List filtering used by every admin table: free-text search plus a status select."""
from decimal import Decimal


ALL = "all"


def resolve_path(row, path):
    """Follow a dotted path (``mall.en_name``) through nested dicts."""
    value = row
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
        if value is None:
            return None
    return value


def matches_search(row, term, fields):
    if not term:
        return True
    values = [resolve_path(row, field) for field in fields]
    haystack = " ".join(str(v) for v in values if v not in (None, "")).lower()
    return term.lower() in haystack


def matches_status(row, field, value):
    if value is None or value == "" or value == ALL:
        return True
    current = resolve_path(row, field)
    if current is None:
        return False
    if isinstance(current, bool):
        current = "true" if current else "false"
    return str(current) == str(value)


def filter_rows(rows, search=None, fields=(), status_field=None, status=None):
    search = (search or "").strip()
    result = []
    for row in rows:
        if not matches_search(row, search, fields):
            continue
        if status_field and not matches_status(row, status_field, status):
            continue
        result.append(row)
    return result


def count_by(rows, field, choices):
    """Count rows per choice, keeping every choice in the output."""
    counts = {choice: 0 for choice in choices}
    for row in rows:
        value = resolve_path(row, field)
        if value in counts:
            counts[value] += 1
    return counts


def sum_field(rows, field):
    """Sum a numeric field across rows; missing values count as zero."""
    total = Decimal("0")
    for row in rows:
        value = resolve_path(row, field)
        if value is not None:
            total += Decimal(str(value))
    return float(total)
