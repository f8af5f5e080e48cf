"""Quotation repository - Database operations for CDN quotations and interest rates"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import CdnQuotation, Client, InterestRate


class QuotationRepository:
    """Repository for quotation database operations"""

    @staticmethod
    def get_quotations_by_client(db: Session, client_id: int) -> list[CdnQuotation]:
        return (
            db.query(CdnQuotation)
            .filter(CdnQuotation.client_id == client_id)
            .order_by(CdnQuotation.created_at.desc(), CdnQuotation.id.desc())
            .all()
        )

    @staticmethod
    def get_quotation_by_id(db: Session, quotation_id: int) -> Optional[CdnQuotation]:
        return db.query(CdnQuotation).filter(CdnQuotation.id == quotation_id).first()

    @staticmethod
    def get_client(db: Session, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def create_quotation(db: Session, user_id: int, **data) -> CdnQuotation:
        quotation = CdnQuotation(user_id=user_id, **data)
        db.add(quotation)
        db.commit()
        db.refresh(quotation)
        return quotation

    @staticmethod
    def mark_sent(db: Session, quotation: CdnQuotation) -> CdnQuotation:
        quotation.status = "sent"
        db.commit()
        db.refresh(quotation)
        return quotation

    # Interest rates

    @staticmethod
    def get_interest_rates(db: Session) -> list[InterestRate]:
        return db.query(InterestRate).order_by(InterestRate.term, InterestRate.id).all()

    @staticmethod
    def get_interest_rate(db: Session, rate_id: int) -> Optional[InterestRate]:
        return db.query(InterestRate).filter(InterestRate.id == rate_id).first()

    @staticmethod
    def get_rate_for_term(db: Session, term: int) -> Optional[InterestRate]:
        """Most recently configured rate for a term"""
        return (
            db.query(InterestRate)
            .filter(InterestRate.term == term)
            .order_by(InterestRate.id.desc())
            .first()
        )

    @staticmethod
    def create_interest_rate(db: Session, **data) -> InterestRate:
        rate = InterestRate(**data)
        db.add(rate)
        db.commit()
        db.refresh(rate)
        return rate

    @staticmethod
    def update_interest_rate(db: Session, interest_rate: InterestRate, **updates) -> InterestRate:
        for key, value in updates.items():
            setattr(interest_rate, key, value)
        db.commit()
        db.refresh(interest_rate)
        return interest_rate

    @staticmethod
    def delete_interest_rate(db: Session, rate: InterestRate) -> None:
        db.delete(rate)
        db.commit()
