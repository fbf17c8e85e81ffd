"""
Sorting Utilities Module

Provides sorting functions for attendance data output.
"""

import unicodedata
from typing import List

from .entities import MonthlyAttendance


def get_name_sort_key(name: str) -> tuple:
    """
    Sort key approximating locale-aware collation of display names.

    Letters compare first ignoring accents and case, then accents, then
    case (lowercase before uppercase). The raw name is the final tie-breaker
    so the order is total and stable.
    """
    if not name:
        return ("", "", (), "")
    decomposed = unicodedata.normalize('NFKD', name)
    base = ''.join(c for c in decomposed if not unicodedata.combining(c))
    case_pattern = tuple(c.isupper() for c in base)
    return (base.casefold(), decomposed.casefold(), case_pattern, name)


def sort_attendance_list(
    attendance_list: List[MonthlyAttendance],
    sort_by: str = "name"
) -> List[MonthlyAttendance]:
    """
    Sort attendance list by specified criteria.

    Args:
        attendance_list: List of MonthlyAttendance objects
        sort_by: Sorting method - "name" or "attendance_rate"

    Returns:
        Sorted list (new list, does not modify original)
    """
    if sort_by == "attendance_rate":
        # Higher rate first, ties by name
        return sorted(
            attendance_list,
            key=lambda m: (-m.attendance_percentage, get_name_sort_key(m.employee_name))
        )
    return sorted(
        attendance_list,
        key=lambda m: get_name_sort_key(m.employee_name)
    )
