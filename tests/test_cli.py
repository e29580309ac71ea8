"""Tests for the command-line interface."""

import csv
import json

import pytest

from receipt_digitizer.cli import main as cli_main


@pytest.fixture
def stub_tesseract(monkeypatch, scripted_ocr):
    """Replace the Tesseract adapter used by the CLI with a scripted one."""
    ocr = scripted_ocr({150: "아메리카노 4,500\n합계 4,500"})
    created = []

    def factory(**kwargs):
        created.append(kwargs)
        return ocr

    monkeypatch.setattr(cli_main, "TesseractOCR", factory)
    monkeypatch.delenv("RECEIPT_OCR_LANG", raising=False)
    monkeypatch.delenv("TESSERACT_CMD", raising=False)
    ocr.created = created
    return ocr


@pytest.fixture
def receipt_file(tmp_path, receipt_png):
    path = tmp_path / "receipt.png"
    path.write_bytes(receipt_png)
    return path


class TestMain:
    """Tests for cli.main.main."""

    def test_json_output(self, stub_tesseract, receipt_file, tmp_path, capsys) -> None:
        code = cli_main.main([str(receipt_file), "--json",
                              "--patterns", str(tmp_path / "none.json")])
        assert code == 0
        data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert data["file"] == "receipt.png"
        assert data["totalAmount"] == 4500
        assert data["items"][0]["name"] == "아메리카노"

    def test_summary_output(self, stub_tesseract, receipt_file, tmp_path, capsys) -> None:
        code = cli_main.main([str(receipt_file), "--patterns", str(tmp_path / "none.json")])
        out = capsys.readouterr().out
        assert code == 0
        assert "[OK] receipt.png" in out
        assert "4,500원" in out

    def test_csv_export(self, stub_tesseract, receipt_file, tmp_path) -> None:
        out_csv = tmp_path / "items.csv"
        cli_main.main([str(receipt_file), "--csv", str(out_csv),
                       "--patterns", str(tmp_path / "none.json")])
        with out_csv.open(encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [(r["name"], r["price"]) for r in rows] == [("아메리카노", "4500")]

    def test_language_and_tesseract_env(self, stub_tesseract, receipt_file, tmp_path,
                                        monkeypatch) -> None:
        monkeypatch.setenv("RECEIPT_OCR_LANG", "kor")
        monkeypatch.setenv("TESSERACT_CMD", "/opt/tesseract")
        cli_main.main([str(receipt_file), "--patterns", str(tmp_path / "none.json")])
        assert stub_tesseract.hints[0] == ("kor",)
        assert stub_tesseract.created == [{"tesseract_cmd": "/opt/tesseract"}]

    def test_lang_flag_overrides_env(self, stub_tesseract, receipt_file, tmp_path,
                                     monkeypatch) -> None:
        monkeypatch.setenv("RECEIPT_OCR_LANG", "kor")
        cli_main.main([str(receipt_file), "--lang", "kor+eng",
                       "--patterns", str(tmp_path / "none.json")])
        assert stub_tesseract.hints[0] == ("kor", "eng")

    def test_scales_flag(self, stub_tesseract, receipt_file, tmp_path) -> None:
        cli_main.main([str(receipt_file), "--scales", "2.0,1.5",
                       "--patterns", str(tmp_path / "none.json")])
        assert stub_tesseract.widths == [200, 150]

    def test_bad_scales(self, stub_tesseract, receipt_file) -> None:
        with pytest.raises(SystemExit):
            cli_main.main([str(receipt_file), "--scales", "abc"])

    def test_failed_file_exit_code(self, stub_tesseract, tmp_path, capsys) -> None:
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"nope")
        code = cli_main.main([str(bad), "--patterns", str(tmp_path / "none.json")])
        assert code == 1
        assert "[ERROR] Failed bad.png" in capsys.readouterr().out

    def test_invalid_patterns_file(self, stub_tesseract, receipt_file, tmp_path) -> None:
        patterns = tmp_path / "patterns.json"
        patterns.write_text(json.dumps({"nope": 1}), encoding="utf-8")
        assert cli_main.main([str(receipt_file), "--patterns", str(patterns)]) == 2

    def test_directory_input(self, stub_tesseract, receipt_file, tmp_path) -> None:
        (tmp_path / "notes.txt").write_text("skip me", encoding="utf-8")
        assert cli_main.discover_files([str(tmp_path)]) == [receipt_file]


class TestParseScales:
    def test_valid(self) -> None:
        assert cli_main._parse_scales("1.5, 2") == (1.5, 2.0)

    def test_non_positive(self) -> None:
        import argparse
        with pytest.raises(argparse.ArgumentTypeError):
            cli_main._parse_scales("0,1.5")
