"""
Tests for the HTTP export endpoints
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from backend.app import main
from backend.app.pdf_export import PdfExporter


async def no_sleep(seconds):
    await asyncio.sleep(0)


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(main, "exporter", PdfExporter(initial_settle_s=0.0, settle_s=0.0, sleep=no_sleep))
    return TestClient(main.app)


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["export_running"] is False


class TestExportPdf:
    """Test POST /export/pdf"""

    def test_returns_pdf(self, client):
        resp = client.post(
            "/export/pdf",
            json={
                "title": "Report",
                "blocks": [
                    {"kind": "text", "id": "q", "heading": "Question", "body": "Top sellers?"},
                    {"kind": "table", "id": "t", "columns": ["Item", "Qty"], "rows": [["bolts", 40]]},
                    {"kind": "chart", "id": "c", "data": [{"name": "bolts", "value": 40}]},
                ],
            },
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content.startswith(b"%PDF")
        assert resp.headers["x-export-pages"] == "1"
        assert "chat-response-" in resp.headers["content-disposition"]
        assert "x-export-skipped" not in resp.headers

    def test_skipped_blocks_reported(self, client):
        resp = client.post(
            "/export/pdf",
            json={"blocks": [{"kind": "chart", "id": "ghost"}, {"kind": "table", "id": "empty"}]},
        )
        assert resp.status_code == 200
        assert resp.headers["x-export-skipped"] == "ghost,empty"

    def test_duplicate_ids_rejected(self, client):
        resp = client.post(
            "/export/pdf",
            json={"blocks": [{"kind": "text", "id": "a"}, {"kind": "text", "id": "a"}]},
        )
        assert resp.status_code == 422

    def test_unknown_kind_rejected(self, client):
        resp = client.post("/export/pdf", json={"blocks": [{"kind": "video", "id": "v"}]})
        assert resp.status_code == 422

    def test_busy_exporter_returns_409(self, client, monkeypatch):
        monkeypatch.setattr(main.exporter, "_busy", True)
        resp = client.post("/export/pdf", json={"blocks": [{"kind": "text", "id": "a", "body": "x"}]})
        assert resp.status_code == 409

    def test_export_failure_returns_500(self, monkeypatch):
        def broken_sink(*, title=None):
            raise RuntimeError("no writer")

        monkeypatch.setattr(main, "exporter", PdfExporter(sink_factory=broken_sink, sleep=no_sleep))
        resp = TestClient(main.app).post("/export/pdf", json={"blocks": [{"kind": "text", "id": "a"}]})
        assert resp.status_code == 500
        assert "no writer" in resp.json()["detail"]


class TestExportChatResponse:
    """Test POST /export/chat-response"""

    def test_question_answer_and_chart(self, client):
        resp = client.post(
            "/export/chat-response",
            json={
                "question": "Weekly sales?",
                "answer": "\u2022 **Mon**: 3\n\u2022 **Tue**: 5",
                "chart_data": [{"name": "Mon", "value": 3}, {"name": "Tue", "value": 5}],
                "chart_type": "line",
            },
        )
        assert resp.status_code == 200
        assert resp.content.startswith(b"%PDF")

    def test_question_required(self, client):
        resp = client.post("/export/chat-response", json={"question": "", "answer": "x"})
        assert resp.status_code == 422
