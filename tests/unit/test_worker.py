"""Unit tests for the monthly quota reset job."""

import asyncio
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from draftgen.db.models import User
from draftgen.worker import reset_monthly_quotas

NOW = datetime(2026, 4, 1, 0, 5, tzinfo=timezone.utc)


def test_reset_monthly_quotas(settings):
    async def run_test():
        engine = create_async_engine(settings.database_url)
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        sessions = async_sessionmaker(engine, expire_on_commit=False)
        async with sessions() as session:
            session.add(User(id="march", drafts_used_this_month=3, drafts_reset_date=datetime(2026, 3, 1, tzinfo=timezone.utc)))
            session.add(User(id="april", drafts_used_this_month=1, drafts_reset_date=datetime(2026, 4, 1, tzinfo=timezone.utc)))
            await session.commit()

        result = await reset_monthly_quotas(NOW, settings)

        async with sessions() as session:
            march = await session.get(User, "march")
            april = await session.get(User, "april")
        await engine.dispose()
        return result, march, april

    result, march, april = asyncio.run(run_test())

    assert result == {
        "status": "completed",
        "reset_count": 1,
        "period_start": "2026-04-01T00:00:00+00:00",
    }
    assert march.drafts_used_this_month == 0
    assert april.drafts_used_this_month == 1
