"""Shared fixtures: template documents, settings and SQLite sessions."""

from contextlib import asynccontextmanager
from io import BytesIO

import pytest
from docx import Document
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from draftgen.core.config import Settings
from draftgen.db import models  # noqa: F401
from draftgen.strategies.template_engine.models import VariableDefinition

RENT_AGREEMENT_PARAGRAPHS = [
    "RENT AGREEMENT",
    "This agreement is made on {{ agreement_date }} between {{ landlord_name }} (Landlord)",
    "and {{ tenant_name }} (Tenant).",
    "Monthly rent: {{ rent_amount }}",
    "Landlord phone: {{ landlord_phone }}",
    "Amenities: {{ amenities }}",
]


def build_docx(paragraphs: list[str]) -> bytes:
    """Build a .docx with one single-run paragraph per entry."""
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def read_docx_text(content: bytes) -> str:
    """Return a document's paragraph text joined by newlines."""
    return "\n".join(paragraph.text for paragraph in Document(BytesIO(content)).paragraphs)


@pytest.fixture
def rent_agreement_docx() -> bytes:
    return build_docx(RENT_AGREEMENT_PARAGRAPHS)


@pytest.fixture
def rent_agreement_schema() -> list[VariableDefinition]:
    return [
        VariableDefinition.model_validate(raw)
        for raw in [
            {"name": "landlord_name", "label": "Landlord", "type": "STRING", "required": True},
            {"name": "tenant_name", "label": "Tenant", "type": "STRING", "required": True},
            {"name": "agreement_date", "label": "Date", "type": "DATE", "required": True},
            {"name": "rent_amount", "label": "Rent", "type": "CURRENCY", "required": True},
            {"name": "landlord_phone", "label": "Phone", "type": "PHONE"},
            {
                "name": "amenities",
                "label": "Amenities",
                "type": "MULTISELECT",
                "options": [
                    {"value": "Parking", "label": "Parking"},
                    {"value": "Lift", "label": "Lift"},
                    {"value": "Power backup", "label": "Power backup"},
                ],
            },
        ]
    ]


@pytest.fixture
def rent_agreement_values() -> dict:
    return {
        "landlord_name": "Ramesh Kumar",
        "tenant_name": "Suresh Rao",
        "agreement_date": "2026-03-01",
        "rent_amount": "25000",
        "landlord_phone": "9876543210",
        "amenities": ["Parking", "Lift"],
    }


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'drafts.db'}",
        storage_dir=tmp_path / "storage",
        public_base_url="http://testserver",
        auth_jwt_secret="test-identity-secret",
        url_signing_secret="test-url-secret",
        blob_store_type="local",
        draft_limit_free=3,
        draft_limit_pro=30,
        log_to_files=False,
    )


@pytest.fixture
def sqlite_sessions(tmp_path):
    """Return an async context manager yielding a session maker on a fresh file DB."""

    @asynccontextmanager
    async def _sessions():
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'store.db'}",
            connect_args={"timeout": 30},
        )
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        try:
            yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
        finally:
            await engine.dispose()

    return _sessions


@pytest.fixture
def make_docx():
    return build_docx


@pytest.fixture
def docx_text():
    return read_docx_text
