"""Unit tests for draft access URL refreshing."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from draftgen.interfaces.draft_store import DraftRecord
from draftgen.services.draft_access import DraftAccessRefresher, is_expired

NOW = datetime(2026, 3, 15, 10, 30, tzinfo=timezone.utc)


class RecordingBlobStore:
    def __init__(self):
        self.signed: list[str] = []

    async def get_signed_url(self, path, ttl_minutes):
        self.signed.append(path)
        return f"https://signed/{path}?ttl={ttl_minutes}"


class RecordingDraftStore:
    def __init__(self):
        self.updates: list[tuple[str, str, datetime]] = []

    async def update_access(self, draft_id, url, expires_at):
        self.updates.append((draft_id, url, expires_at))


class RecordingUnitOfWork:
    def __init__(self):
        self.commits = 0

    async def commit(self):
        self.commits += 1


def draft(draft_id: str, expires_at) -> DraftRecord:
    return DraftRecord(
        id=draft_id,
        user_id="user-ramesh",
        template_id="rent-agreement",
        template_name="Rent Agreement",
        category_name="Property",
        generated_file_url=f"https://old/{draft_id}",
        storage_path=f"drafts/user-ramesh/{draft_id}.docx",
        created_at=NOW - timedelta(days=2),
        expires_at=expires_at,
    )


class TestIsExpired:
    """Expiry interpretation."""

    @pytest.mark.parametrize(
        "expires_at, expected",
        [
            (NOW + timedelta(seconds=1), False),
            (NOW, True),
            (NOW - timedelta(minutes=1), True),
            (None, True),
            ("", True),
            ("next tuesday", True),
            ("2026-03-16T00:00:00+00:00", False),
            ("2026-03-14T00:00:00", True),
            (datetime(2026, 3, 16), False),
            (12345, True),
        ],
    )
    def test_is_expired(self, expires_at, expected):
        assert is_expired(expires_at, NOW) is expected


class TestDraftAccessRefresher:
    """Test suite for DraftAccessRefresher."""

    @pytest.fixture
    def collaborators(self):
        return RecordingBlobStore(), RecordingDraftStore(), RecordingUnitOfWork()

    @pytest.fixture
    def refresher(self, collaborators):
        blob_store, draft_store, uow = collaborators
        return DraftAccessRefresher(blob_store, draft_store, uow, ttl_minutes=1440, clock=lambda: NOW)

    def test_only_lapsed_entries_are_refreshed(self, refresher, collaborators):
        blob_store, draft_store, uow = collaborators
        drafts = [
            draft("fresh", NOW + timedelta(hours=3)),
            draft("expired", NOW - timedelta(hours=3)),
            draft("missing", None),
            draft("garbled", "not-a-date"),
        ]

        refreshed = asyncio.run(refresher.refresh(drafts))

        new_expiry = NOW + timedelta(minutes=1440)
        assert [d.id for d in refreshed] == ["fresh", "expired", "missing", "garbled"]
        assert refreshed[0] is drafts[0]
        for entry in refreshed[1:]:
            assert entry.generated_file_url == f"https://signed/{entry.storage_path}?ttl=1440"
            assert entry.expires_at == new_expiry
        assert sorted(update[0] for update in draft_store.updates) == ["expired", "garbled", "missing"]
        assert all(update[2] == new_expiry for update in draft_store.updates)
        assert len(blob_store.signed) == 3
        assert uow.commits == 1

    def test_nothing_to_refresh(self, refresher, collaborators):
        blob_store, draft_store, uow = collaborators
        drafts = [draft("fresh", NOW + timedelta(days=1))]

        assert asyncio.run(refresher.refresh(drafts)) == drafts
        assert blob_store.signed == []
        assert uow.commits == 0

    def test_explicit_reference_time(self, refresher, collaborators):
        _, draft_store, _ = collaborators
        later = NOW + timedelta(days=2)

        asyncio.run(refresher.refresh([draft("d1", NOW + timedelta(days=1))], now=later))

        assert draft_store.updates[0][2] == later + timedelta(minutes=1440)
