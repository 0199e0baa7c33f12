"""Enrolment fees, in cents unless noted"""

from typing import Optional, Sequence

JUNIOR_FEE_CENTS = 45000  # Years 7-10
SENIOR_FEE_CENTS = 75000  # Years 11-12

JUNIOR_YEAR_MARKERS = ("year 7", "year 8", "year 9", "year 10")


def get_price(year_level) -> int:
    try:
        year = int(str(year_level).strip())
    except (TypeError, ValueError):
        return JUNIOR_FEE_CENTS

    if 7 <= year <= 10:
        return JUNIOR_FEE_CENTS
    if 11 <= year <= 12:
        return SENIOR_FEE_CENTS
    return JUNIOR_FEE_CENTS


def get_granular_price(course_name: str) -> int:
    name = (course_name or "").lower()
    if any(marker in name for marker in JUNIOR_YEAR_MARKERS):
        return JUNIOR_FEE_CENTS
    return SENIOR_FEE_CENTS


def calculate_amount(
    year_level,
    course_name: str,
    subject_count: Optional[int] = None,
    selections: Optional[Sequence[dict]] = None,
) -> int:
    if selections:
        return sum(get_granular_price(s.get("courseName", "")) for s in selections)

    count = subject_count or (len(course_name.split(",")) if "," in course_name else 1)
    return get_price(year_level) * count


def bank_transfer_amount(grade_level: Optional[int]) -> int:
    """Whole dollars quoted on the bank transfer confirmation"""
    return 750 if grade_level is not None and grade_level >= 11 else 450
