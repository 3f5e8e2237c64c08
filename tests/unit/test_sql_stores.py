"""Unit tests for the SQL-backed quota, draft and template stores."""

import asyncio
from datetime import datetime, timedelta, timezone

from draftgen.db.models import Template, User
from draftgen.interfaces.draft_store import DraftRecord
from draftgen.interfaces.identity import Identity
from draftgen.strategies.stores import (
    SQLDraftStore,
    SQLQuotaStore,
    SQLTemplateStore,
    SQLUnitOfWork,
)

NOW = datetime(2026, 3, 15, 10, 30, tzinfo=timezone.utc)
MARCH = datetime(2026, 3, 1, tzinfo=timezone.utc)
FEBRUARY = datetime(2026, 2, 1, tzinfo=timezone.utc)
RAMESH = Identity(uid="user-ramesh", email="ramesh@example.in", name="Ramesh Kumar")


def make_draft(draft_id: str, created_at: datetime, user_id: str = RAMESH.uid) -> DraftRecord:
    return DraftRecord(
        id=draft_id,
        user_id=user_id,
        template_id="rent-agreement",
        template_name="Rent Agreement",
        category_name="Property",
        generated_file_url=f"http://files/{draft_id}",
        storage_path=f"drafts/{user_id}/{draft_id}.docx",
        created_at=created_at,
        expires_at=created_at + timedelta(days=1),
        variables={"landlord_name": "Ramesh Kumar", "agreement_date": "2026-03-01T00:00:00+00:00"},
    )


# =============================================================================
# Quota Ledger Tests
# =============================================================================


class TestSQLQuotaStore:
    """Test suite for SQLQuotaStore."""

    def test_first_access_creates_zero_usage_record(self, sqlite_sessions):
        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    state = await SQLQuotaStore(session).get_or_create(RAMESH, NOW)
                    await session.commit()

                async with sessions() as session:
                    user = await session.get(User, RAMESH.uid)

            assert state.user_id == RAMESH.uid
            assert state.plan == "free"
            assert state.drafts_used_this_month == 0
            assert state.drafts_reset_date == MARCH
            assert user.email == "ramesh@example.in"
            assert user.display_name == "Ramesh Kumar"

        asyncio.run(run_test())

    def test_get_or_create_is_idempotent(self, sqlite_sessions):
        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    store = SQLQuotaStore(session)
                    await store.get_or_create(RAMESH, NOW)
                    await store.atomic_increment_if_below_limit(RAMESH.uid, 3)
                    again = await store.get_or_create(RAMESH, NOW)
                    await session.commit()

            assert again.drafts_used_this_month == 1

        asyncio.run(run_test())

    def test_previous_month_record_is_reset_on_read(self, sqlite_sessions):
        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    session.add(
                        User(
                            id=RAMESH.uid,
                            drafts_used_this_month=3,
                            drafts_reset_date=FEBRUARY,
                        )
                    )
                    await session.commit()

                async with sessions() as session:
                    state = await SQLQuotaStore(session).get_or_create(RAMESH, NOW)
                    await session.commit()

            assert state.drafts_used_this_month == 0
            assert state.drafts_reset_date == MARCH

        asyncio.run(run_test())

    def test_increment_stops_at_limit(self, sqlite_sessions):
        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    store = SQLQuotaStore(session)
                    await store.get_or_create(RAMESH, NOW)
                    results = [await store.atomic_increment_if_below_limit(RAMESH.uid, 2) for _ in range(3)]
                    await session.commit()
            return results

        assert asyncio.run(run_test()) == [(True, 1), (True, 2), (False, 2)]

    def test_unlimited_plan_has_no_cap(self, sqlite_sessions):
        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    store = SQLQuotaStore(session)
                    await store.get_or_create(RAMESH, NOW)
                    for _ in range(5):
                        ok, count = await store.atomic_increment_if_below_limit(RAMESH.uid, None)
                        assert ok
            return count

        assert asyncio.run(run_test()) == 5

    def test_concurrent_increments_never_pass_the_limit(self, sqlite_sessions):
        async def increment(sessions):
            async with sessions() as session:
                store = SQLQuotaStore(session)
                ok, _ = await store.atomic_increment_if_below_limit(RAMESH.uid, 3)
                await SQLUnitOfWork(session).commit()
                return ok

        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    await SQLQuotaStore(session).get_or_create(RAMESH, NOW)
                    await session.commit()

                outcomes = await asyncio.gather(*(increment(sessions) for _ in range(6)))

                async with sessions() as session:
                    user = await session.get(User, RAMESH.uid)
            return outcomes, user.drafts_used_this_month

        outcomes, used = asyncio.run(run_test())

        assert outcomes.count(True) == 3
        assert used == 3

    def test_reset_expired(self, sqlite_sessions):
        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    session.add(User(id="old", drafts_used_this_month=3, drafts_reset_date=FEBRUARY))
                    session.add(User(id="current", drafts_used_this_month=2, drafts_reset_date=MARCH))
                    await session.commit()

                async with sessions() as session:
                    reset = await SQLQuotaStore(session).reset_expired(MARCH)
                    await session.commit()

                async with sessions() as session:
                    old = await session.get(User, "old")
                    current = await session.get(User, "current")
            return reset, old.drafts_used_this_month, current.drafts_used_this_month

        assert asyncio.run(run_test()) == (1, 0, 2)


# =============================================================================
# Draft Store Tests
# =============================================================================


class TestSQLDraftStore:
    """Test suite for SQLDraftStore."""

    def test_list_is_newest_first_and_paginated(self, sqlite_sessions):
        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    store = SQLDraftStore(session)
                    for day in range(1, 6):
                        await store.create(make_draft(f"d{day}", datetime(2026, 3, day, tzinfo=timezone.utc)))
                    await store.create(make_draft("other", NOW, user_id="someone-else"))
                    await SQLUnitOfWork(session).commit()

                async with sessions() as session:
                    store = SQLDraftStore(session)
                    first = await store.list_for_user(RAMESH.uid, offset=0, limit=2)
                    last = await store.list_for_user(RAMESH.uid, offset=4, limit=2)
                    total = await store.count_for_user(RAMESH.uid)
            return first, last, total

        first, last, total = asyncio.run(run_test())

        assert [d.id for d in first] == ["d5", "d4"]
        assert [d.id for d in last] == ["d1"]
        assert total == 5
        assert first[0].created_at.tzinfo is not None
        assert first[0].variables["landlord_name"] == "Ramesh Kumar"

    def test_update_access(self, sqlite_sessions):
        new_expiry = NOW + timedelta(days=1)

        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    store = SQLDraftStore(session)
                    await store.create(make_draft("d1", NOW - timedelta(days=3)))
                    await store.update_access("d1", "http://files/fresh", new_expiry)
                    await SQLUnitOfWork(session).commit()

                async with sessions() as session:
                    return (await SQLDraftStore(session).list_for_user(RAMESH.uid, 0, 10))[0]

        draft = asyncio.run(run_test())

        assert draft.generated_file_url == "http://files/fresh"
        assert draft.expires_at == new_expiry

    def test_rollback_discards_staged_draft(self, sqlite_sessions):
        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    await SQLDraftStore(session).create(make_draft("d1", NOW))
                    await SQLUnitOfWork(session).rollback()

                async with sessions() as session:
                    return await SQLDraftStore(session).count_for_user(RAMESH.uid)

        assert asyncio.run(run_test()) == 0


# =============================================================================
# Template Store Tests
# =============================================================================


class FakeBlobStore:
    def __init__(self, blobs: dict[str, bytes]):
        self.blobs = blobs

    async def download(self, path: str) -> bytes:
        return self.blobs[path]


class TestSQLTemplateStore:
    """Test suite for SQLTemplateStore."""

    def test_loads_schema_binary_and_counts_usage(self, sqlite_sessions):
        async def run_test():
            async with sqlite_sessions() as sessions:
                async with sessions() as session:
                    session.add(
                        Template(
                            id="rent-agreement",
                            name="Rent Agreement",
                            category_name="Property",
                            variables=[
                                {"name": "landlord_name", "label": "Landlord", "type": "STRING", "required": True},
                                {"name": "rent_amount", "label": "Rent", "type": "CURRENCY", "minLength": 0},
                            ],
                        )
                    )
                    await session.commit()

                blob_store = FakeBlobStore({"templates/rent-agreement.docx": b"docx-bytes"})
                async with sessions() as session:
                    store = SQLTemplateStore(session, blob_store)
                    template = await store.get_template("rent-agreement")
                    missing = await store.get_template("nope")
                    binary = await store.get_template_binary("rent-agreement")
                    await store.increment_usage("rent-agreement")
                    await session.commit()

                async with sessions() as session:
                    usage = (await session.get(Template, "rent-agreement")).usage_count
            return template, missing, binary, usage

        template, missing, binary, usage = asyncio.run(run_test())

        assert template.name == "Rent Agreement"
        assert template.is_active
        assert [v.name for v in template.variables] == ["landlord_name", "rent_amount"]
        assert template.variables[0].required
        assert missing is None
        assert binary == b"docx-bytes"
        assert usage == 1
