"""
Scheduling Domain

Appointment CRUD, slot availability and the booking workflow.

Structure:
```
domain/scheduling/
├── __init__.py
├── schemas.py              # Appointment and booking schemas
├── repository.py           # Appointment database queries
├── time_calculator.py      # Slot list, appointment types, HH:MM arithmetic
├── availability_service.py # Per-person conflict filter and booking window
├── booking_wizard.py       # Person -> date -> time -> details -> confirmed
├── service.py              # Business logic, role filtering, emails
└── router.py               # /appointments endpoints
```

Conflicts are only checked when booking through the wizard (client SDK or
POST /appointments/book). Plain POST /appointments stores what it is given.
"""
