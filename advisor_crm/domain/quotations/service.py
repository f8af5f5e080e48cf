"""Quotation service - Business logic for CDN quotations and interest rates"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CdnQuotation, Client, InterestRate, User
from .calculator import calculate_maturity
from .repository import QuotationRepository
from .schemas import CdnQuotationCreate, InterestRateCreate, InterestRateUpdate

logger = logging.getLogger(__name__)


class QuotationService:
    """Service layer for quotation business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = QuotationRepository()

    def get_quotations(self, client_id: int) -> list[CdnQuotation]:
        return self.repo.get_quotations_by_client(self.db, client_id)

    def get_quotation(self, quotation_id: int) -> CdnQuotation:
        quotation = self.repo.get_quotation_by_id(self.db, quotation_id)
        if not quotation:
            raise HTTPException(status_code=404, detail="Quotation not found")
        return quotation

    def create_quotation(self, data: CdnQuotationCreate, user: User) -> CdnQuotation:
        """
        Store a quotation.

        The rate defaults to the configured rate for the term and the
        maturity value is calculated when the caller does not supply one.
        """
        if data.client_id is not None and not self.repo.get_client(self.db, data.client_id):
            raise HTTPException(status_code=400, detail="Client not found")

        fields = data.model_dump(exclude_none=True)
        rate = data.interest_rate
        if rate is None:
            configured = self.repo.get_rate_for_term(self.db, data.term)
            if not configured:
                raise HTTPException(
                    status_code=400,
                    detail=f"Interest rate is required (none configured for a {data.term} year term)",
                )
            rate = configured.rate
            fields["interest_rate"] = rate

        if data.maturity_value is None:
            fields["maturity_value"] = calculate_maturity(data.investment_amount, rate, data.term)

        quotation = self.repo.create_quotation(self.db, user.id, **fields)
        logger.info(
            f"💰 Quotation {quotation.id} created: {quotation.investment_amount} at {quotation.interest_rate}% "
            f"for {quotation.term}y -> {quotation.maturity_value}"
        )
        return quotation

    def email_recipient(self, quotation: CdnQuotation) -> Client:
        """The quotation's client, who must have an email address"""
        client = self.repo.get_client(self.db, quotation.client_id) if quotation.client_id else None
        if not client or not client.email:
            raise HTTPException(status_code=400, detail="Client or client email not found")
        return client

    def mark_sent(self, quotation: CdnQuotation) -> CdnQuotation:
        return self.repo.mark_sent(self.db, quotation)

    # ------------------------------------------------------------------
    # Interest rates
    # ------------------------------------------------------------------

    def get_interest_rates(self) -> list[InterestRate]:
        return self.repo.get_interest_rates(self.db)

    def get_interest_rate(self, rate_id: int) -> InterestRate:
        rate = self.repo.get_interest_rate(self.db, rate_id)
        if not rate:
            raise HTTPException(status_code=404, detail="Interest rate not found")
        return rate

    def create_interest_rate(self, data: InterestRateCreate) -> InterestRate:
        rate = self.repo.create_interest_rate(self.db, **data.model_dump())
        logger.info(f"📈 Interest rate for {rate.term}y set to {rate.rate}%")
        return rate

    def update_interest_rate(self, rate_id: int, data: InterestRateUpdate) -> InterestRate:
        rate = self.get_interest_rate(rate_id)
        return self.repo.update_interest_rate(
            self.db, rate, **data.model_dump(exclude_unset=True, exclude_none=True)
        )

    def delete_interest_rate(self, rate_id: int) -> None:
        rate = self.get_interest_rate(rate_id)
        self.repo.delete_interest_rate(self.db, rate)
