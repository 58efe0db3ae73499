"""
Tests for the export command line entry point
"""

import json

from backend.cli.export_pdf import load_request, main


class TestLoadRequest:
    """Test input file shapes"""

    def test_bare_list(self, tmp_path):
        path = tmp_path / "blocks.json"
        path.write_text(json.dumps([{"kind": "text", "id": "a", "body": "hi"}]), encoding="utf-8")
        req = load_request(path, "Title")
        assert req.title == "Title"
        assert [b.id for b in req.blocks] == ["a"]

    def test_object_keeps_title_unless_overridden(self, tmp_path):
        path = tmp_path / "req.json"
        path.write_text(json.dumps({"title": "Kept", "blocks": []}), encoding="utf-8")
        assert load_request(path, None).title == "Kept"
        assert load_request(path, "New").title == "New"


class TestMain:
    """Test exit codes and output"""

    def test_writes_pdf(self, tmp_path):
        src = tmp_path / "blocks.json"
        src.write_text(
            json.dumps(
                [
                    {"kind": "text", "id": "q", "heading": "Question", "body": "Stock?"},
                    {"kind": "table", "id": "t", "columns": ["Item"], "rows": [["bolts"]]},
                ]
            ),
            encoding="utf-8",
        )
        out = tmp_path / "out.pdf"
        assert main([str(src), "-o", str(out), "--no-settle"]) == 0
        assert out.read_bytes().startswith(b"%PDF")

    def test_default_output_path(self, tmp_path):
        src = tmp_path / "answer.json"
        src.write_text(json.dumps([{"kind": "text", "id": "a", "body": "x"}]), encoding="utf-8")
        assert main([str(src), "--no-settle"]) == 0
        assert (tmp_path / "answer.pdf").exists()

    def test_invalid_input(self, tmp_path):
        src = tmp_path / "bad.json"
        src.write_text(json.dumps([{"kind": "text", "id": "a"}, {"kind": "text", "id": "a"}]), encoding="utf-8")
        assert main([str(src)]) == 2

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "missing.json")]) == 2
