"""Client domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from ...schemas import CamelModel
from ...shared.validators import validate_email, validate_percentage, validate_phone

CLIENT_STATUS_PATTERN = "^(active|prospect|inactive)$"


class ClientFields(CamelModel):
    """Every optional client attribute, shared by create, update and response"""

    title: Optional[str] = None
    second_name: Optional[str] = None
    id_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    smoker_status: Optional[bool] = None

    cell_phone: Optional[str] = None
    home_phone: Optional[str] = None
    work_phone: Optional[str] = None
    email: Optional[str] = None
    physical_address: Optional[str] = None
    postal_address: Optional[str] = None
    physical_postal_code: Optional[str] = None
    postal_code: Optional[str] = None

    occupation: Optional[str] = None
    employer: Optional[str] = None
    education_level: Optional[str] = None
    gross_annual_income: Optional[int] = None
    duty_split_admin: Optional[int] = None
    duty_split_travel: Optional[int] = None
    duty_split_supervision: Optional[int] = None
    duty_split_manual: Optional[int] = None
    hobbies: Optional[str] = None

    marital_status: Optional[str] = None
    marriage_type: Optional[str] = None
    date_of_marriage: Optional[date] = None
    spouse_name: Optional[str] = None
    spouse_date_of_birth: Optional[date] = None
    spouse_occupation: Optional[str] = None
    spouse_gross_annual_income: Optional[int] = None

    monthly_income: Optional[int] = None
    spouse_monthly_income: Optional[int] = None
    pension_fund_current_value: Optional[int] = None
    pension_fund_projected_value: Optional[int] = None
    provident_fund_current_value: Optional[int] = None
    provident_fund_projected_value: Optional[int] = None
    group_life_cover: Optional[int] = None
    group_disability_cover: Optional[int] = None
    group_dread_disease_cover: Optional[int] = None

    medical_aid_scheme: Optional[str] = None
    medical_aid_membership_no: Optional[str] = None
    medical_aid_members: Optional[int] = None

    retirement_age: Optional[int] = None
    retirement_monthly_income: Optional[int] = None
    expected_investment_returns: Optional[int] = None
    expected_inflation: Optional[int] = None

    has_will: Optional[bool] = None
    will_location: Optional[str] = None
    will_executor: Optional[str] = None

    value: Optional[int] = None


class ClientInput(ClientFields):
    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("cell_phone", "home_phone", "work_phone")
    @classmethod
    def validate_phone_fields(cls, v):
        return validate_phone(v)

    @field_validator(
        "duty_split_admin",
        "duty_split_travel",
        "duty_split_supervision",
        "duty_split_manual",
        "expected_investment_returns",
        "expected_inflation",
    )
    @classmethod
    def validate_percentages(cls, v):
        return validate_percentage(v)


class ClientCreate(ClientInput):
    """Schema for creating a new client"""

    first_name: str = Field(..., min_length=1)
    surname: str = Field(..., min_length=1)
    status: str = Field("active", pattern=CLIENT_STATUS_PATTERN)


class ClientUpdate(ClientInput):
    """Schema for updating an existing client; omitted fields are left alone"""

    first_name: Optional[str] = Field(None, min_length=1)
    surname: Optional[str] = Field(None, min_length=1)
    status: Optional[str] = Field(None, pattern=CLIENT_STATUS_PATTERN)


class ClientResponse(ClientFields):
    id: int
    first_name: str
    surname: str
    status: str
    user_id: Optional[int] = None
    last_contact: Optional[datetime] = None
    created_at: Optional[datetime] = None
