#!/usr/bin/env python3
"""
Seed an empty database with demo users, clients, appointments and interest rates

Usage: python seed.py
"""

from datetime import date, timedelta

from advisor_crm import models  # noqa: F401
from advisor_crm.database import Base, SessionLocal, engine
from advisor_crm.models import (
    ROLE_ADMIN,
    ROLE_ADVISOR,
    ROLE_SUPER_ADMIN,
    Appointment,
    Client,
    InterestRate,
    User,
)
from advisor_crm.security_utils import hash_password

DEMO_USERS = [
    ("demo", "demo@crmhub.com", "demo123", "Demo", "User", ROLE_ADMIN),
    ("advisor", "advisor@crmhub.com", "advisor123", "John", "Advisor", ROLE_ADVISOR),
    ("super_admin", "super@crmhub.com", "super123", "Super", "Admin", ROLE_SUPER_ADMIN),
]

DEMO_RATES = [(1, "9.75"), (3, "10.5"), (5, "11.25")]


def seed_database():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        print("🌱 Seeding database with sample data...")
        if db.query(User).count() > 0:
            print("Database already contains data, skipping seed")
            return

        users = [
            User(
                username=username,
                email=email,
                password=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                role=role,
            )
            for username, email, password, first_name, last_name, role in DEMO_USERS
        ]
        db.add_all(users)
        db.flush()
        admin, advisor = users[0], users[1]
        print(f"👤 Created {len(users)} demo users")

        clients = [
            Client(first_name="Sarah", surname="Johnson", email="sarah.johnson@techcorp.com",
                   cell_phone="+1 (555) 123-4567", status="active", value=75000, user_id=admin.id),
            Client(first_name="Michael", surname="Chen", email="m.chen@innovatelab.com",
                   cell_phone="+1 (555) 987-6543", status="prospect", value=45000, user_id=admin.id),
            Client(first_name="Emily", surname="Rodriguez", email="emily.r@digitalwave.com",
                   cell_phone="+1 (555) 456-7890", status="active", value=120000, user_id=advisor.id),
            Client(first_name="David", surname="Wilson", email="david.wilson@startup.com",
                   cell_phone="+1 (555) 111-2222", status="active", value=85000, user_id=advisor.id),
        ]
        db.add_all(clients)
        db.flush()
        print(f"📇 Inserted {len(clients)} clients")

        today = date.today()
        tomorrow = today + timedelta(days=1)
        next_week = today + timedelta(days=7)
        appointments = [
            Appointment(title="Product Demo Meeting", description="Showcase our latest features",
                        client_id=clients[0].id, user_id=admin.id, date=tomorrow,
                        start_time="10:00", end_time="11:00", type="meeting", location="Conference Room A"),
            Appointment(title="Weekly Check-in Call", description="Regular planning session",
                        client_id=clients[1].id, user_id=admin.id, date=today,
                        start_time="14:30", end_time="15:00", type="follow-up"),
            Appointment(title="Contract Review", description="Finalize the service agreement",
                        client_id=clients[2].id, user_id=advisor.id, date=next_week,
                        start_time="09:00", end_time="10:30", type="strategy", location="Client Office"),
            Appointment(title="Follow-up Meeting", description="Discuss next steps",
                        client_id=clients[3].id, user_id=advisor.id, date=tomorrow,
                        start_time="15:00", end_time="16:00", type="meeting", location="Video Call"),
        ]
        db.add_all(appointments)
        print(f"📅 Inserted {len(appointments)} appointments")

        db.add_all(InterestRate(term=term, rate=rate) for term, rate in DEMO_RATES)
        print(f"📈 Inserted {len(DEMO_RATES)} interest rates")

        db.commit()
        print("✅ Database seeded successfully!")
    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
