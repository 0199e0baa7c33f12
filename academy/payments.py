"""
Stripe Checkout for enrolment fees
"""

import logging
from typing import Optional

import stripe

from . import config
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def get_stripe_client():
    """Initialize Stripe client with API key"""
    if not config.STRIPE_SECRET_KEY:
        raise ConfigurationError("Stripe secret key not configured (STRIPE_SECRET_KEY)")

    stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe


def create_checkout_session(
    *,
    origin: str,
    amount_cents: int,
    student_id: str,
    student_name: str,
    year_level: str,
    course_name: str,
    parent_email: str,
    currency: Optional[str] = None,
):
    """
    Create a one-off card payment session for an enrolment.

    The student id travels in the session metadata so the payment can be
    matched back to the student row.
    """
    stripe_client = get_stripe_client()
    origin = origin.rstrip("/")

    session = stripe_client.checkout.Session.create(
        payment_method_types=["card"],
        mode="payment",
        customer_email=parent_email,
        line_items=[
            {
                "price_data": {
                    "currency": currency or config.CHECKOUT_CURRENCY,
                    "product_data": {
                        "name": f"Enrolment: {course_name}",
                        "description": f"Tutoring enrolment for {student_name} (Year {year_level})",
                    },
                    "unit_amount": amount_cents,
                },
                "quantity": 1,
            }
        ],
        metadata={
            "studentId": student_id,
            "studentName": student_name,
            "yearLevel": year_level,
            "courseName": course_name,
            "parentEmail": parent_email,
        },
        success_url=f"{origin}/enrol/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{origin}/enrol/cancel",
    )

    logger.info(f"Created Stripe checkout session {session.id} for student {student_id}")
    return session
