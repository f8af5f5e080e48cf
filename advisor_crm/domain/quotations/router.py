"""Quotation router - CDN quotation and interest rate endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...database import get_db
from ...email_service import send_cdn_quotation_email
from ...models import ROLE_SUPER_ADMIN, User
from ...schemas import MessageResponse
from .schemas import (
    CdnQuotationCreate,
    CdnQuotationResponse,
    InterestRateCreate,
    InterestRateResponse,
    InterestRateUpdate,
)
from .service import QuotationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cdn-quotations", tags=["Quotations"])
rates_router = APIRouter(prefix="/interest-rates", tags=["Quotations"])

require_super_admin = require_roles(ROLE_SUPER_ADMIN)


def get_quotation_service(db: Session = Depends(get_db)) -> QuotationService:
    """Dependency injection for QuotationService"""
    return QuotationService(db)


# ============================================================================
# CDN QUOTATIONS
# ============================================================================


@router.get("/{client_id}", response_model=list[CdnQuotationResponse])
async def get_quotations(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: QuotationService = Depends(get_quotation_service),
):
    """Quotations for a client, newest first"""
    return service.get_quotations(client_id)


@router.post("", response_model=CdnQuotationResponse, status_code=201)
async def create_quotation(
    data: CdnQuotationCreate,
    current_user: User = Depends(get_current_user),
    service: QuotationService = Depends(get_quotation_service),
):
    return service.create_quotation(data, current_user)


@router.post("/{quotation_id}/email", response_model=MessageResponse)
async def email_quotation(
    quotation_id: int,
    current_user: User = Depends(get_current_user),
    service: QuotationService = Depends(get_quotation_service),
):
    """Email the quotation to its client and mark it sent"""
    quotation = service.get_quotation(quotation_id)
    client = service.email_recipient(quotation)

    try:
        result = await send_cdn_quotation_email(
            client_name=client.full_name,
            client_email=client.email,
            amount=quotation.investment_amount,
            rate=quotation.interest_rate,
            term=quotation.term,
            maturity=quotation.maturity_value,
        )
    except Exception as e:
        logger.error(f"❌ Failed to email quotation {quotation_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to send email") from e

    if result is None:
        raise HTTPException(status_code=503, detail="Email service not configured")

    service.mark_sent(quotation)
    logger.info(f"📧 Quotation {quotation_id} sent to {client.email}")
    return {"message": "Email sent successfully"}


# ============================================================================
# INTEREST RATES (writes restricted to super admins)
# ============================================================================


@rates_router.get("", response_model=list[InterestRateResponse])
async def get_interest_rates(
    current_user: User = Depends(get_current_user),
    service: QuotationService = Depends(get_quotation_service),
):
    return service.get_interest_rates()


@rates_router.post("", response_model=InterestRateResponse, status_code=201)
async def create_interest_rate(
    data: InterestRateCreate,
    current_user: User = Depends(require_super_admin),
    service: QuotationService = Depends(get_quotation_service),
):
    return service.create_interest_rate(data)


@rates_router.put("/{rate_id}", response_model=InterestRateResponse)
async def update_interest_rate(
    rate_id: int,
    data: InterestRateUpdate,
    current_user: User = Depends(require_super_admin),
    service: QuotationService = Depends(get_quotation_service),
):
    return service.update_interest_rate(rate_id, data)


@rates_router.delete("/{rate_id}", status_code=204)
async def delete_interest_rate(
    rate_id: int,
    current_user: User = Depends(require_super_admin),
    service: QuotationService = Depends(get_quotation_service),
):
    service.delete_interest_rate(rate_id)
    return Response(status_code=204)
