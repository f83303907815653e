from datetime import date


def format_time(seconds: int | None) -> str:
    """MM:SS for a solve time; unsolved (0 or None) shows as 00:00."""
    if not seconds:
        return "00:00"
    minutes, remaining = divmod(int(seconds), 60)
    return f"{minutes:02d}:{remaining:02d}"


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string. Raises ValueError on anything else."""
    return date.fromisoformat(value)
