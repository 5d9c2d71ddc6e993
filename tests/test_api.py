"""Tests for API endpoints."""

from fastapi.testclient import TestClient

from app.formlens.services.extraction import NON_ARRAY_MESSAGE

from .fakes import FakeOpenAI


def create_session(client: TestClient) -> str:
    response = client.post("/sessions")
    assert response.status_code == 201
    return response.json()["id"]


def upload(client: TestClient, session_id: str, content: bytes, name: str, mime_type: str):
    return client.post(
        f"/sessions/{session_id}/file",
        files={"file": (name, content, mime_type)},
    )


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client: TestClient):
        """Test health endpoint returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data


class TestPageEndpoint:
    """Tests for the HTML shell."""

    def test_index_serves_html(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'id="inspector"' in response.text


class TestSessionLifecycle:
    """Tests for creating, reading and deleting sessions."""

    def test_new_session_is_idle(self, client: TestClient):
        response = client.post("/sessions")
        data = response.json()
        assert data["status"] == "idle"
        assert data["can_parse"] is False
        assert data["results"] is None

    def test_get_session(self, client: TestClient):
        session_id = create_session(client)
        response = client.get(f"/sessions/{session_id}")
        assert response.status_code == 200
        assert response.json()["id"] == session_id

    def test_unknown_session_returns_404(self, client: TestClient):
        assert client.get("/sessions/missing").status_code == 404
        assert client.post("/sessions/missing/parse").status_code == 404

    def test_delete_session(self, client: TestClient):
        session_id = create_session(client)
        assert client.delete(f"/sessions/{session_id}").status_code == 204
        assert client.get(f"/sessions/{session_id}").status_code == 404
        assert client.delete(f"/sessions/{session_id}").status_code == 404


class TestUploadEndpoint:
    """Tests for file upload."""

    def test_upload_image(self, client: TestClient, png_bytes: bytes):
        session_id = create_session(client)
        response = upload(client, session_id, png_bytes, "scan.png", "image/png")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["filename"] == "scan.png"
        assert data["can_parse"] is True
        assert data["preview"]["width"] == 1000
        assert data["preview"]["height"] == 500

    def test_upload_pdf(self, client: TestClient, sample_pdf_bytes: bytes, fake_renderer):
        session_id = create_session(client)
        response = upload(client, session_id, sample_pdf_bytes, "form.pdf", "application/pdf")

        assert response.status_code == 200
        assert response.json()["preview"]["mime_type"] == "image/png"
        assert fake_renderer.calls == 1

        preview = client.get(f"/sessions/{session_id}/preview")
        assert preview.status_code == 200
        assert preview.headers["content-type"] == "image/png"
        assert preview.content[:4] == b"\x89PNG"

    def test_invalid_type_keeps_selection(self, client: TestClient, png_bytes: bytes):
        session_id = create_session(client)
        upload(client, session_id, png_bytes, "scan.png", "image/png")

        response = upload(client, session_id, b"hello", "notes.txt", "text/plain")

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Invalid file type. Please upload one of: jpeg, png, webp, gif, pdf"
        assert body["session"]["status"] == "ready"
        assert body["session"]["filename"] == "scan.png"
        assert body["session"]["error"] == body["detail"]

    def test_undecodable_image(self, client: TestClient):
        session_id = create_session(client)
        response = upload(client, session_id, b"garbage", "scan.png", "image/png")

        assert response.status_code == 422
        session = response.json()["session"]
        assert session["status"] == "error"
        assert session["filename"] is None

    def test_preview_missing_returns_404(self, client: TestClient):
        session_id = create_session(client)
        assert client.get(f"/sessions/{session_id}/preview").status_code == 404


class TestParseEndpoint:
    """Tests for parsing."""

    def test_parse_without_file(self, client: TestClient):
        session_id = create_session(client)
        response = client.post(f"/sessions/{session_id}/parse")

        assert response.status_code == 400
        assert response.json()["detail"] == "Please select a file first."
        assert response.json()["session"]["status"] == "error"

    def test_parse_returns_results(self, client: TestClient, png_bytes: bytes, fake_openai):
        session_id = create_session(client)
        upload(client, session_id, png_bytes, "scan.png", "image/png")

        response = client.post(f"/sessions/{session_id}/parse")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "done"
        assert len(data["results"]) == 3
        assert data["results"][1]["value"] == "checked"
        assert data["results"][1]["page_number"] == 1
        assert len(fake_openai.completions.calls) == 1

    def test_results_endpoint(self, client: TestClient, png_bytes: bytes):
        session_id = create_session(client)
        assert client.get(f"/sessions/{session_id}/results").status_code == 404

        upload(client, session_id, png_bytes, "scan.png", "image/png")
        client.post(f"/sessions/{session_id}/parse")
        results = client.get(f"/sessions/{session_id}/results").json()

        assert results[0] == {
            "field_type": "text",
            "label": "First Name",
            "value": "John",
            "box": [49, 122, 200, 143],
            "page_number": 1,
        }
        assert results[2]["value"] == [["Item", "Quantity", "Price"], ["Pen", "2", "$3"]]

    def test_format_error_is_502(self, client: TestClient, png_bytes: bytes, fake_openai):
        fake_openai.completions.content = "{}"
        session_id = create_session(client)
        upload(client, session_id, png_bytes, "scan.png", "image/png")

        response = client.post(f"/sessions/{session_id}/parse")

        assert response.status_code == 502
        assert response.json()["detail"] == NON_ARRAY_MESSAGE
        assert response.json()["session"]["status"] == "error"

    def test_service_error_is_503(self, client: TestClient, png_bytes: bytes, fake_openai):
        fake_openai.completions.error = ConnectionError("down")
        session_id = create_session(client)
        upload(client, session_id, png_bytes, "scan.png", "image/png")

        response = client.post(f"/sessions/{session_id}/parse")

        assert response.status_code == 503
        assert "down" in response.json()["detail"]


class TestHoverAndView:
    """Tests for hover, overlay and view endpoints."""

    def _parsed_session(self, client: TestClient, png_bytes: bytes) -> str:
        session_id = create_session(client)
        upload(client, session_id, png_bytes, "scan.png", "image/png")
        client.post(f"/sessions/{session_id}/parse")
        return session_id

    def test_hover(self, client: TestClient, png_bytes: bytes):
        session_id = self._parsed_session(client, png_bytes)

        response = client.put(f"/sessions/{session_id}/hover", json={"index": 0})
        assert response.json()["hovered_index"] == 0

        response = client.put(f"/sessions/{session_id}/hover", json={"index": None})
        assert response.json()["hovered_index"] is None

    def test_overlay(self, client: TestClient, png_bytes: bytes):
        session_id = self._parsed_session(client, png_bytes)

        response = client.get(
            f"/sessions/{session_id}/overlay",
            params={"container_width": 400, "container_height": 400},
        )

        data = response.json()
        assert data["display"] == {"offset_x": 0.0, "offset_y": 100.0, "width": 400.0, "height": 200.0}
        # the page-2 table is not drawn
        assert len(data["boxes"]) == 2

    def test_overlay_unknown_container(self, client: TestClient, png_bytes: bytes):
        session_id = self._parsed_session(client, png_bytes)
        data = client.get(f"/sessions/{session_id}/overlay").json()
        assert data["display"] is None
        assert data["boxes"] == []

    def test_view_renders_markup(self, client: TestClient, png_bytes: bytes):
        session_id = self._parsed_session(client, png_bytes)
        client.put(f"/sessions/{session_id}/hover", json={"index": 1})

        data = client.get(
            f"/sessions/{session_id}/view",
            params={"container_width": 800, "container_height": 400},
        ).json()

        assert f"/sessions/{session_id}/preview?generation=1" in data["preview_html"]
        assert "field-box highlighted" in data["preview_html"]
        assert 'class="field-block hovered" data-index="1"' in data["inspector_html"]
        assert data["session"]["hovered_index"] == 1

    def test_view_before_upload(self, client: TestClient):
        session_id = create_session(client)
        data = client.get(f"/sessions/{session_id}/view").json()
        assert "Document preview will appear here" in data["preview_html"]
        assert "Extracted data will be shown here..." in data["inspector_html"]


def test_store_override_uses_fakes(client: TestClient, store):
    """Sessions created through the API land in the overridden store."""
    create_session(client)
    assert len(store) == 1
    assert isinstance(store.extraction_client.client, FakeOpenAI)
