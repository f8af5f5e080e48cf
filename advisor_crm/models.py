from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

ROLE_SUPER_ADMIN = "super_admin"
ROLE_ADMIN = "admin"
ROLE_ADVISOR = "advisor"
ROLE_USER = "user"
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN)


class User(Base):
    """Staff identity. Team members are users; assignment always points here."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # passlib hash
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    profile_image_url = Column(String(500), nullable=True)
    role = Column(String(50), default=ROLE_USER, nullable=False)  # super_admin, admin, advisor, user
    department = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_online = Column(Boolean, default=False, nullable=False)
    last_seen = Column(DateTime, server_default=func.now())
    created_at = Column(DateTime, server_default=func.now())

    clients = relationship("Client", back_populates="user")
    documents = relationship("Document", back_populates="user")
    kanban_boards = relationship("KanbanBoard", back_populates="user")

    @property
    def display_name(self) -> str:
        return self.first_name or self.username

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)

    # Personal information
    title = Column(String(20), nullable=True)  # Mr, Mrs, Dr, etc.
    first_name = Column(String(255), nullable=False)
    surname = Column(String(255), nullable=False)
    second_name = Column(String(255), nullable=True)
    id_number = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    smoker_status = Column(Boolean, default=False)

    # Contact details
    cell_phone = Column(String(50), nullable=True)
    home_phone = Column(String(50), nullable=True)
    work_phone = Column(String(50), nullable=True)
    email = Column(String(255), unique=True, nullable=True)
    physical_address = Column(Text, nullable=True)
    postal_address = Column(Text, nullable=True)
    physical_postal_code = Column(String(20), nullable=True)
    postal_code = Column(String(20), nullable=True)

    # Employment & education
    occupation = Column(String(255), nullable=True)
    employer = Column(String(255), nullable=True)
    education_level = Column(String(255), nullable=True)
    gross_annual_income = Column(Integer, nullable=True)
    duty_split_admin = Column(Integer, nullable=True)  # percentage
    duty_split_travel = Column(Integer, nullable=True)
    duty_split_supervision = Column(Integer, nullable=True)
    duty_split_manual = Column(Integer, nullable=True)
    hobbies = Column(Text, nullable=True)

    # Marital details
    marital_status = Column(String(50), nullable=True)  # Married, Single, Divorced, Widowed
    marriage_type = Column(String(50), nullable=True)  # ANC, Accrual, COP
    date_of_marriage = Column(Date, nullable=True)
    spouse_name = Column(String(255), nullable=True)
    spouse_date_of_birth = Column(Date, nullable=True)
    spouse_occupation = Column(String(255), nullable=True)
    spouse_gross_annual_income = Column(Integer, nullable=True)

    # Financial information
    monthly_income = Column(Integer, nullable=True)
    spouse_monthly_income = Column(Integer, nullable=True)
    pension_fund_current_value = Column(Integer, nullable=True)
    pension_fund_projected_value = Column(Integer, nullable=True)
    provident_fund_current_value = Column(Integer, nullable=True)
    provident_fund_projected_value = Column(Integer, nullable=True)
    group_life_cover = Column(Integer, nullable=True)
    group_disability_cover = Column(Integer, nullable=True)
    group_dread_disease_cover = Column(Integer, nullable=True)

    # Medical aid
    medical_aid_scheme = Column(String(255), nullable=True)
    medical_aid_membership_no = Column(String(100), nullable=True)
    medical_aid_members = Column(Integer, nullable=True)

    # Financial objectives
    retirement_age = Column(Integer, nullable=True)
    retirement_monthly_income = Column(Integer, nullable=True)
    expected_investment_returns = Column(Integer, nullable=True)  # percentage
    expected_inflation = Column(Integer, nullable=True)  # percentage

    # Will
    has_will = Column(Boolean, nullable=True)
    will_location = Column(String(255), nullable=True)
    will_executor = Column(String(255), nullable=True)

    # CRM fields
    status = Column(String(50), default="active", nullable=False)  # active, prospect, inactive
    value = Column(Integer, default=0)
    last_contact = Column(DateTime, server_default=func.now())
    created_at = Column(DateTime, server_default=func.now())
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    user = relationship("User", back_populates="clients")
    documents = relationship("Document", back_populates="client")
    appointments = relationship("Appointment", back_populates="client")
    quotations = relationship("CdnQuotation", back_populates="client")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}"


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)  # stored file name on disk
    original_name = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)
    type = Column(String(255), nullable=False)  # mime type
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    uploaded_at = Column(DateTime, server_default=func.now())

    client = relationship("Client", back_populates="documents")
    user = relationship("User", back_populates="documents")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # creator
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    type = Column(String(50), nullable=False)  # consultation, meeting, demo, follow-up, strategy
    location = Column(String(500), nullable=True)
    status = Column(String(50), default="scheduled", nullable=False)  # scheduled, completed, cancelled
    appointment_status = Column(String(50), default="pending", nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    client = relationship("Client", back_populates="appointments")
    user = relationship("User", foreign_keys=[user_id])
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])


class KanbanBoard(Base):
    __tablename__ = "kanban_boards"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="kanban_boards")
    columns = relationship(
        "KanbanColumn",
        back_populates="board",
        cascade="all, delete-orphan",
        order_by="KanbanColumn.position",
    )


class KanbanColumn(Base):
    __tablename__ = "kanban_columns"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    position = Column(Integer, default=0, nullable=False)
    color = Column(String(7), default="#0073EA")
    board_id = Column(
        Integer, ForeignKey("kanban_boards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    board = relationship("KanbanBoard", back_populates="columns")
    cards = relationship(
        "KanbanCard",
        back_populates="column",
        cascade="all, delete-orphan",
        order_by="KanbanCard.position",
    )


class KanbanCard(Base):
    __tablename__ = "kanban_cards"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    position = Column(Integer, default=0, nullable=False)
    priority = Column(String(20), default="medium")  # low, medium, high, urgent
    due_date = Column(Date, nullable=True)
    tags = Column(JSON, default=list, nullable=True)
    column_id = Column(
        Integer, ForeignKey("kanban_columns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    column = relationship("KanbanColumn", back_populates="cards")
    assigned_to = relationship("User")
    tasks = relationship(
        "KanbanTask",
        back_populates="card",
        cascade="all, delete-orphan",
        order_by="KanbanTask.position",
    )


class KanbanTask(Base):
    __tablename__ = "kanban_tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    completed = Column(Boolean, default=False, nullable=False)
    position = Column(Integer, default=0, nullable=False)
    card_id = Column(
        Integer, ForeignKey("kanban_cards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    card = relationship("KanbanCard", back_populates="tasks")


class CdnQuotation(Base):
    """Capital deposit note proposal for a client"""

    __tablename__ = "cdn_quotations"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    client_number = Column(String(100), default="", nullable=False)
    client_name = Column(String(255), default="", nullable=False)
    client_address = Column(Text, default="", nullable=False)
    client_phone = Column(String(50), nullable=True)
    offered_to = Column(String(255), nullable=True)
    investment_amount = Column(Integer, nullable=False)
    term = Column(Integer, default=1, nullable=False)  # years
    interest_rate = Column(String(20), nullable=False)  # percent, e.g. "9.75"
    yearly_div_allocation = Column(Integer, default=975, nullable=False)
    maturity_value = Column(Integer, nullable=False)
    calculation_date = Column(DateTime, server_default=func.now(), nullable=False)
    commencement_date = Column(DateTime, server_default=func.now(), nullable=False)
    redemption_date = Column(DateTime, server_default=func.now(), nullable=False)
    prepared_by_name = Column(String(255), nullable=True)
    prepared_by_cell = Column(String(50), nullable=True)
    prepared_by_office = Column(String(50), nullable=True)
    prepared_by_email = Column(String(255), nullable=True)
    status = Column(String(20), default="draft", nullable=False)  # draft, sent
    created_at = Column(DateTime, server_default=func.now())
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    client = relationship("Client", back_populates="quotations")


class InterestRate(Base):
    __tablename__ = "interest_rates"

    id = Column(Integer, primary_key=True, index=True)
    term = Column(Integer, nullable=False, index=True)  # years
    rate = Column(String(20), nullable=False)  # percent
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
