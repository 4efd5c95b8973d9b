"""Calendar labels for the monthly analysis window."""

from datetime import date, datetime


def month_labels(tge_date: date | datetime, months: int) -> list[str]:
    """
    Build "YYYY-MM" labels for each month of the window.

    Month 0 is the calendar month containing the TGE date.

    Args:
        tge_date: Token generation date
        months: Window length

    Returns:
        List of month labels, one per window index
    """
    labels = []
    year, month = tge_date.year, tge_date.month
    for _ in range(max(months, 0)):
        labels.append(f"{year}-{month:02d}")
        month += 1
        if month > 12:
            month = 1
            year += 1
    return labels
