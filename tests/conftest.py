"""Pytest configuration and fixtures."""

import json
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.formlens.main import app
from app.formlens.services.extraction import ExtractionClient
from app.formlens.session import SessionStore, get_session_store

from .fakes import FakeOpenAI, FakePdfRenderer, make_image_bytes


SAMPLE_FIELDS = [
    {
        "field_type": "text",
        "label": "First Name",
        "value": "John",
        "box": [49, 122, 200, 143],
        "page_number": 1,
    },
    {
        "field_type": "checkbox",
        "label": "Reason for Contact: Billing (Options: Sales, Technical Support, Billing)",
        "value": "checked",
        "box": [212, 167, 220, 178],
    },
    {
        "field_type": "table",
        "label": "Order Details",
        "value": [["Item", "Quantity", "Price"], ["Pen", "2", "$3"]],
        "box": [300, 250, 500, 320],
        "page_number": 2,
    },
]


@pytest.fixture
def sample_fields_json() -> str:
    return json.dumps(SAMPLE_FIELDS)


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """
    Create a minimal valid PDF for testing.

    This is a minimal PDF structure that should be recognized as a valid PDF.
    """
    return b"""%PDF-1.4
1 0 obj
<< /Type /Catalog /Pages 2 0 R >>
endobj
2 0 obj
<< /Type /Pages /Kids [3 0 R] /Count 1 >>
endobj
3 0 obj
<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>
endobj
trailer
<< /Size 4 /Root 1 0 R >>
%%EOF"""


@pytest.fixture
def fake_openai(sample_fields_json: str) -> FakeOpenAI:
    return FakeOpenAI(content=sample_fields_json)


@pytest.fixture
def fake_renderer() -> FakePdfRenderer:
    return FakePdfRenderer()


@pytest.fixture
def store(fake_openai: FakeOpenAI, fake_renderer: FakePdfRenderer) -> SessionStore:
    extraction_client = ExtractionClient(api_key="test-key", client=fake_openai)
    return SessionStore(extraction_client=extraction_client, pdf_renderer=fake_renderer)


@pytest.fixture
def client(store: SessionStore) -> Generator[TestClient, None, None]:
    """Create a test client whose sessions use the fake services."""
    app.dependency_overrides[get_session_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
