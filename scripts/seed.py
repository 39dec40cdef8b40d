"""
Seed the database with a verified test user, the default bot groups and
sample bots.

Safe to run repeatedly: existing rows (matched by email or name) are kept.

Usage (with the package installed):
    python scripts/seed.py
"""

import asyncio

from sqlalchemy import select

from zyrotech.auth.hashing import hash_password
from zyrotech.core.logging import get_logger, setup_logging
from zyrotech.db.session import engine, get_db_context, init_models
from zyrotech.models import Bot, Group, User

logger = get_logger("zyrotech.seed")

TEST_USER = {
    "email": "test@yopmail.com",
    "password": "Test@123",
    "full_name": "Test User",
}

GROUPS = ["Commodities", "Currency", "Stocks", "Crypto"]

BOT_DESCRIPTION = (
    "An advanced trading bot that analyzes market trends, predicts price "
    "movements, and executes trades."
)

# bot name -> group name
BOTS = {
    "XAU/USD": "Commodities",
    "XAG/USD": "Commodities",
    "Crude Oil": "Commodities",
    "EUR/USD": "Currency",
    "JPY/USD": "Currency",
    "AUD/USD": "Currency",
    "Apple": "Stocks",
    "Amazon": "Stocks",
    "Microsoft": "Stocks",
    "BTC/USD": "Crypto",
    "ETH/USD": "Crypto",
}


async def seed() -> None:
    await init_models()

    async with get_db_context() as db:
        user = (await db.execute(
            select(User).where(User.email == TEST_USER["email"])
        )).scalar_one_or_none()
        if user is None:
            db.add(User(
                email=TEST_USER["email"],
                full_name=TEST_USER["full_name"],
                password_hash=hash_password(TEST_USER["password"]),
                is_email_verified=True,
            ))
            logger.info("Seeded test user")

        groups = {g.name: g for g in (await db.execute(select(Group))).scalars().all()}
        for name in GROUPS:
            if name not in groups:
                groups[name] = Group(name=name)
                db.add(groups[name])
        await db.flush()
        logger.info("Seeded groups")

        existing = set((await db.execute(select(Bot.name))).scalars().all())
        for name, group_name in BOTS.items():
            if name in existing:
                continue
            db.add(Bot(
                name=name,
                description=BOT_DESCRIPTION,
                recommended_capital=100,
                performance_duration="1M",
                script="USD",
                group_id=groups[group_name].id,
            ))
        logger.info("Seeded bots")

    await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
