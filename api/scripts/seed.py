"""Seed the database with demo facility data.

Run with: python -m scripts.seed
Creates courts, rental equipment, coaches, pricing rules, and test users.
"""

import asyncio
from decimal import Decimal

from sqlalchemy import select

from arena.core.auth import hash_password
from arena.core.database import async_session_factory, engine
from arena.models import Base, Coach, Court, CourtType, Equipment, EquipmentType, PricingRule, RuleType, User, UserRole

WEEKDAYS_9_TO_5 = {day: [{"start": "09:00", "end": "17:00"}] for day in ("monday", "tuesday", "wednesday", "thursday", "friday")}

COURTS = [
    {"name": "Indoor Court 1", "type": CourtType.INDOOR, "base_price": Decimal("15.00"),
     "description": "Premium indoor badminton court with AC"},
    {"name": "Indoor Court 2", "type": CourtType.INDOOR, "base_price": Decimal("15.00"),
     "description": "Premium indoor badminton court with AC"},
    {"name": "Outdoor Court 1", "type": CourtType.OUTDOOR, "base_price": Decimal("10.00"),
     "description": "Standard outdoor badminton court"},
    {"name": "Outdoor Court 2", "type": CourtType.OUTDOOR, "base_price": Decimal("10.00"),
     "description": "Standard outdoor badminton court"},
]

EQUIPMENT = [
    {"name": "Badminton Racket", "type": EquipmentType.RACKET, "total_quantity": 20,
     "price_per_unit": Decimal("3.00"), "description": "Professional badminton rackets"},
    {"name": "Sports Shoes", "type": EquipmentType.SHOES, "total_quantity": 15,
     "price_per_unit": Decimal("4.00"), "description": "Non-marking badminton shoes"},
    {"name": "Shuttlecocks (Set of 6)", "type": EquipmentType.OTHER, "total_quantity": 50,
     "price_per_unit": Decimal("2.00"), "description": "Feather shuttlecocks"},
]

COACHES = [
    {
        "name": "Coach Mike Johnson",
        "email": "mike@arena.local",
        "phone": "5551234567",
        "specialization": "Beginner Training",
        "price_per_hour": Decimal("20.00"),
        "weekly_availability": {**WEEKDAYS_9_TO_5, "saturday": [{"start": "10:00", "end": "16:00"}]},
        "bio": "Certified badminton coach with 5 years of experience",
    },
    {
        "name": "Coach Sarah Williams",
        "email": "sarah@arena.local",
        "phone": "5551234568",
        "specialization": "Advanced Training",
        "price_per_hour": Decimal("30.00"),
        "weekly_availability": {
            **{day: [{"start": "10:00", "end": "18:00"}] for day in WEEKDAYS_9_TO_5},
            "sunday": [{"start": "09:00", "end": "13:00"}],
        },
        "bio": "Professional badminton coach, former national player",
    },
    {
        "name": "Coach David Lee",
        "email": "david@arena.local",
        "phone": "5551234569",
        "specialization": "Kids Training",
        "price_per_hour": Decimal("18.00"),
        "weekly_availability": {
            "monday": [{"start": "14:00", "end": "20:00"}],
            "wednesday": [{"start": "14:00", "end": "20:00"}],
            "friday": [{"start": "14:00", "end": "20:00"}],
            "saturday": [{"start": "09:00", "end": "17:00"}],
            "sunday": [{"start": "09:00", "end": "17:00"}],
        },
        "bio": "Specialized in coaching children and teenagers",
    },
]

PRICING_RULES = [
    {"name": "Peak Hour Premium", "rule_type": RuleType.PEAK_HOUR, "multiplier": Decimal("1.5"),
     "conditions": {"startTime": "18:00", "endTime": "21:00"}, "priority": 1,
     "description": "Higher rates during peak hours (6 PM - 9 PM)"},
    {"name": "Weekend Surcharge", "rule_type": RuleType.WEEKEND, "fixed_amount": Decimal("5.00"),
     "priority": 2, "description": "Additional charge on weekends"},
    {"name": "Indoor Court Premium", "rule_type": RuleType.INDOOR_PREMIUM, "multiplier": Decimal("1.2"),
     "priority": 3, "description": "Premium pricing for indoor courts"},
    # days use 0=Sunday, so 1-5 is Monday to Friday
    {"name": "Morning Discount", "rule_type": RuleType.CUSTOM, "multiplier": Decimal("0.8"),
     "conditions": {"startTime": "06:00", "endTime": "10:00", "days": [1, 2, 3, 4, 5]}, "priority": 4,
     "description": "Discounted rates for morning slots on weekdays"},
]

USERS = [
    {"name": "Admin User", "email": "admin@arena.local", "password": "admin123", "phone": "1234567890",
     "role": UserRole.ADMIN},
    {"name": "John Doe", "email": "john@example.com", "password": "user123", "phone": "9876543210",
     "role": UserRole.MEMBER},
    {"name": "Jane Smith", "email": "jane@example.com", "password": "user123", "phone": "9876543211",
     "role": UserRole.MEMBER},
]


async def seed():
    # Create tables (in dev; production uses migrations)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        result = await db.execute(select(User).where(User.email == USERS[0]["email"]))
        if result.scalar_one_or_none():
            print("Database already seeded, skipping.")
            return

        for user_data in USERS:
            fields = dict(user_data)
            db.add(User(hashed_password=hash_password(fields.pop("password")), **fields))

        db.add_all(Court(**c) for c in COURTS)
        db.add_all(Equipment(**e) for e in EQUIPMENT)
        db.add_all(Coach(**c) for c in COACHES)
        db.add_all(PricingRule(**r) for r in PRICING_RULES)

        await db.commit()

        print("Seeded:")
        print(f"  {len(COURTS)} courts")
        print(f"  {len(EQUIPMENT)} equipment items")
        print(f"  {len(COACHES)} coaches")
        print(f"  {len(PRICING_RULES)} pricing rules")
        print(f"  {len(USERS)} users:")
        for user_data in USERS:
            print(f"    {user_data['email']} / {user_data['password']}")


if __name__ == "__main__":
    asyncio.run(seed())
