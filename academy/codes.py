"""Generators for passwords, student numbers and class codes"""

import re
import secrets
import string
import time
from datetime import time as dt_time
from typing import Callable, Optional, Union

from .config import STUDENT_EMAIL_DOMAIN

BASE36_LOWER = string.digits + string.ascii_lowercase
BASE36_UPPER = string.digits + string.ascii_uppercase
OTP_SYMBOLS = "!@#$%^&*"

STUDENT_NUMBER_PREFIX = "STU"
STUDENT_NUMBER_DIGITS = 6


def _random_chars(alphabet: str, length: int) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_one_time_password() -> str:
    """Temporary password handed out by an admin; the user must change it on next login"""
    return (
        _random_chars(BASE36_LOWER, 8)
        + _random_chars(BASE36_UPPER, 4)
        + secrets.choice(OTP_SYMBOLS)
        + "7"
    )


def generate_student_password() -> str:
    return _random_chars(BASE36_LOWER, 10) + _random_chars(BASE36_UPPER, 2) + "!"


def generate_student_number(now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{STUDENT_NUMBER_PREFIX}{str(now_ms)[-STUDENT_NUMBER_DIGITS:].zfill(STUDENT_NUMBER_DIGITS)}"


def unique_student_number(exists: Callable[[str], bool], now_ms: Optional[int] = None) -> str:
    """
    Start from the timestamp-derived number and step the numeric part
    until ``exists`` reports a free one.
    """
    first = generate_student_number(now_ms)
    start = int(first[len(STUDENT_NUMBER_PREFIX):])
    modulus = 10**STUDENT_NUMBER_DIGITS

    for offset in range(modulus):
        candidate = f"{STUDENT_NUMBER_PREFIX}{(start + offset) % modulus:0{STUDENT_NUMBER_DIGITS}d}"
        if not exists(candidate):
            return candidate

    raise RuntimeError("No student numbers left")


def student_login_email(student_number: str) -> str:
    return f"{student_number.strip().upper()}@{STUDENT_EMAIL_DOMAIN}"


def normalize_login_identifier(identifier: str) -> str:
    """Student IDs log in through their synthetic email address"""
    identifier = (identifier or "").strip()
    if identifier and "@" not in identifier:
        return student_login_email(identifier)
    return identifier


def generate_class_code(
    course_code: str, day_of_week: str, start_time: Union[str, dt_time]
) -> str:
    """MATH7 + Monday + 16:30 -> MATH7-MON-1630"""
    course_part = re.sub(r"[^A-Za-z0-9]", "", course_code or "").upper() or "CLS"
    day_part = (day_of_week or "").strip()[:3].upper()

    if isinstance(start_time, dt_time):
        time_part = start_time.strftime("%H%M")
    else:
        hours, _, minutes = str(start_time).partition(":")
        time_part = f"{int(hours):02d}{int(minutes[:2] or 0):02d}"

    return f"{course_part}-{day_part}-{time_part}"


def unique_class_code(base: str, exists: Callable[[str], bool]) -> str:
    if not exists(base):
        return base

    suffix = 2
    while exists(f"{base}-{suffix}"):
        suffix += 1
    return f"{base}-{suffix}"
