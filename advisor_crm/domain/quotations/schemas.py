"""Quotation domain schemas - CDN quotations and interest rates"""

from datetime import datetime
from typing import Optional, Union

from pydantic import Field, field_validator

from ...schemas import CamelModel
from .calculator import DEFAULT_YEARLY_DIV_ALLOCATION, format_rate


def _rate_text(v):
    if v is None:
        return v
    try:
        return format_rate(v)
    except ValueError as e:
        raise ValueError("Interest rate must be a non-negative number") from e


class CdnQuotationCreate(CamelModel):
    """New quotation; a missing rate falls back to the configured rate for the term"""

    client_id: Optional[int] = None
    client_number: str = ""
    client_name: str = ""
    client_address: str = ""
    client_phone: Optional[str] = None
    offered_to: Optional[str] = None
    investment_amount: int = Field(..., ge=1)
    term: int = Field(1, ge=1, description="Years")
    interest_rate: Optional[Union[str, float]] = None
    yearly_div_allocation: int = DEFAULT_YEARLY_DIV_ALLOCATION
    maturity_value: Optional[int] = None
    calculation_date: Optional[datetime] = None
    commencement_date: Optional[datetime] = None
    redemption_date: Optional[datetime] = None
    prepared_by_name: Optional[str] = None
    prepared_by_cell: Optional[str] = None
    prepared_by_office: Optional[str] = None
    prepared_by_email: Optional[str] = None

    @field_validator("interest_rate")
    @classmethod
    def validate_interest_rate(cls, v):
        return _rate_text(v)


class CdnQuotationResponse(CamelModel):
    id: int
    client_id: Optional[int] = None
    client_number: str
    client_name: str
    client_address: str
    client_phone: Optional[str] = None
    offered_to: Optional[str] = None
    investment_amount: int
    term: int
    interest_rate: str
    yearly_div_allocation: int
    maturity_value: int
    calculation_date: Optional[datetime] = None
    commencement_date: Optional[datetime] = None
    redemption_date: Optional[datetime] = None
    prepared_by_name: Optional[str] = None
    prepared_by_cell: Optional[str] = None
    prepared_by_office: Optional[str] = None
    prepared_by_email: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    user_id: Optional[int] = None


class InterestRateCreate(CamelModel):
    term: int = Field(..., ge=1)
    rate: Union[str, float]

    @field_validator("rate")
    @classmethod
    def validate_rate(cls, v):
        return _rate_text(v)


class InterestRateUpdate(CamelModel):
    term: Optional[int] = Field(None, ge=1)
    rate: Optional[Union[str, float]] = None

    @field_validator("rate")
    @classmethod
    def validate_rate(cls, v):
        return _rate_text(v)


class InterestRateResponse(CamelModel):
    id: int
    term: int
    rate: str
    updated_at: Optional[datetime] = None
