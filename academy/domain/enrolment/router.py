"""Enrolment router - FastAPI endpoints for sign-up and payment"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ... import config
from ...database import get_db
from ...exceptions import ApiError
from ...rate_limiter import create_rate_limiter
from ...supabase_auth import SupabaseAuthClient, get_auth_client
from ...turnstile import require_turnstile
from .schemas import CheckoutRequest, CheckoutResponse, EnrolRequest, EnrolResponse
from .service import EnrolmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Enrolment"])

rate_limit_enrol = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="enrol")


def get_enrolment_service(
    db: Session = Depends(get_db),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> EnrolmentService:
    """Dependency injection for EnrolmentService"""
    return EnrolmentService(db, auth_client)


def site_origin(request: Request) -> str:
    return config.SITE_URL or str(request.base_url).rstrip("/")


@router.post("/enrol", response_model=EnrolResponse)
async def enrol(
    data: EnrolRequest,
    request: Request,
    service: EnrolmentService = Depends(get_enrolment_service),
    _: None = Depends(rate_limit_enrol),
):
    """Create parent and student accounts from the public enrolment form"""
    await require_turnstile(data.turnstileToken, request)
    try:
        result = await service.enrol(data)
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Enrolment error: {e}")
        raise ApiError(500, str(e) or "An error occurred") from e
    return EnrolResponse(**result)


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    data: CheckoutRequest,
    request: Request,
    service: EnrolmentService = Depends(get_enrolment_service),
):
    """Start a Stripe Checkout session for an enrolled student"""
    try:
        url = service.start_checkout(data, site_origin(request))
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Checkout error: {e}")
        raise ApiError(500, str(e) or "Checkout failed") from e
    return CheckoutResponse(url=url)


@router.get("/enrol/bank-transfer-amount")
async def bank_transfer_amount(
    student_id: str = Query(..., alias="studentId", min_length=1),
    service: EnrolmentService = Depends(get_enrolment_service),
):
    """Amount (in dollars) a family paying by bank transfer should send"""
    return {"success": True, "amount": service.bank_transfer_amount(student_id)}
