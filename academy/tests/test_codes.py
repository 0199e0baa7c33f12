"""Tests for password, student number and class code generators."""

import re
from datetime import time

import pytest

from academy.codes import (
    OTP_SYMBOLS,
    generate_class_code,
    generate_one_time_password,
    generate_student_number,
    generate_student_password,
    normalize_login_identifier,
    student_login_email,
    unique_class_code,
    unique_student_number,
)


class TestPasswords:
    def test_one_time_password_shape(self):
        password = generate_one_time_password()

        assert len(password) == 14
        assert re.fullmatch(r"[0-9a-z]{8}[0-9A-Z]{4}", password[:12])
        assert password[12] in OTP_SYMBOLS
        assert password.endswith("7")

    def test_one_time_passwords_differ(self):
        assert len({generate_one_time_password() for _ in range(20)}) == 20

    def test_student_password_shape(self):
        password = generate_student_password()

        assert re.fullmatch(r"[0-9a-z]{10}[0-9A-Z]{2}!", password)


class TestStudentNumbers:
    def test_uses_last_six_digits_of_timestamp(self):
        assert generate_student_number(1718000123456) == "STU123456"

    def test_short_timestamps_are_zero_padded(self):
        assert generate_student_number(42) == "STU000042"

    def test_unique_number_steps_past_taken_ones(self):
        taken = {"STU123456", "STU123457"}

        number = unique_student_number(lambda n: n in taken, now_ms=1718000123456)

        assert number == "STU123458"

    def test_unique_number_wraps_around(self):
        number = unique_student_number(lambda n: n == "STU999999", now_ms=999999)

        assert number == "STU000000"

    def test_exhausted_numbers_raise(self):
        with pytest.raises(RuntimeError):
            unique_student_number(lambda n: True, now_ms=1)


class TestLoginIdentifiers:
    def test_student_login_email_is_uppercased(self):
        assert student_login_email(" stu123456 ") == "STU123456@student.vigyanit.com"

    def test_student_id_maps_to_synthetic_email(self):
        assert normalize_login_identifier("stu123456") == "STU123456@student.vigyanit.com"

    def test_email_is_left_alone(self):
        assert normalize_login_identifier(" parent@example.com ") == "parent@example.com"


class TestClassCodes:
    def test_code_from_course_day_and_time(self):
        assert generate_class_code("MATH7", "Monday", time(16, 30)) == "MATH7-MON-1630"

    def test_code_accepts_time_strings_and_strips_symbols(self):
        assert generate_class_code("sci 10-a", "wednesday", "9:05") == "SCI10A-WED-0905"

    def test_free_base_is_used_as_is(self):
        assert unique_class_code("MATH7-MON-1630", lambda c: False) == "MATH7-MON-1630"

    def test_collisions_get_numeric_suffix(self):
        taken = {"MATH7-MON-1630", "MATH7-MON-1630-2"}

        assert unique_class_code("MATH7-MON-1630", taken.__contains__) == "MATH7-MON-1630-3"
