"""Tests for enrolment fee calculation."""

import pytest

from academy.pricing import (
    JUNIOR_FEE_CENTS,
    SENIOR_FEE_CENTS,
    bank_transfer_amount,
    calculate_amount,
    get_granular_price,
    get_price,
)


@pytest.mark.parametrize(
    "year_level, expected",
    [
        ("7", JUNIOR_FEE_CENTS),
        (10, JUNIOR_FEE_CENTS),
        ("11", SENIOR_FEE_CENTS),
        ("12", SENIOR_FEE_CENTS),
        ("5", JUNIOR_FEE_CENTS),
        ("Year 11", JUNIOR_FEE_CENTS),
    ],
)
def test_price_by_year_level(year_level, expected):
    assert get_price(year_level) == expected


def test_granular_price_reads_year_from_course_name():
    assert get_granular_price("Year 9 Mathematics") == JUNIOR_FEE_CENTS
    assert get_granular_price("Year 12 Physics") == SENIOR_FEE_CENTS


def test_selections_are_priced_individually():
    selections = [{"courseName": "Year 8 Science"}, {"courseName": "Year 11 Chemistry"}]

    assert calculate_amount("8", "ignored", None, selections) == 45000 + 75000


def test_subject_count_multiplies_year_price():
    assert calculate_amount("11", "Physics", subject_count=2) == 150000


def test_comma_separated_courses_counted_without_subject_count():
    assert calculate_amount("7", "Maths, English, Science") == 3 * JUNIOR_FEE_CENTS


def test_single_course_defaults_to_one_subject():
    assert calculate_amount("9", "Maths") == JUNIOR_FEE_CENTS


@pytest.mark.parametrize("grade, expected", [(12, 750), (11, 750), (10, 450), (None, 450)])
def test_bank_transfer_amount(grade, expected):
    assert bank_transfer_amount(grade) == expected
