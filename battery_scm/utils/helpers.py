from datetime import date, timedelta


def today() -> date:
    return date.today()


def days_from_today(days: int) -> date:
    return today() + timedelta(days=days)


def next_sequence_id(prefix: str, existing_ids) -> str:
    """
    Next id in a PREFIX-000001 style series.
    Ids that don't follow the pattern are ignored.
    """
    highest = 0
    for eid in existing_ids:
        if not eid.startswith(prefix + "-"):
            continue
        tail = eid[len(prefix) + 1:]
        if tail.isdigit():
            highest = max(highest, int(tail))
    return f"{prefix}-{highest + 1:06d}"
