"""
Tests for file parsing and the ingestion orchestrator.
"""

import asyncio
import io
from datetime import datetime, timedelta

import pandas as pd
import pytest

from core.config import get_settings
from core.storage import SESSIONS, load_session
from server.orchestrator import build_from_bytes, ingest_bytes
from skills.ingest import IngestionError, NoDataError, file_extension, read_table


@pytest.fixture(autouse=True)
def clean_sessions():
    SESSIONS.clear()
    yield
    SESSIONS.clear()


def xlsx_bytes(df: pd.DataFrame) -> bytes:
    buf = io.BytesIO()
    df.to_excel(buf, index=False)
    return buf.getvalue()


class TestReadTable:
    """Tests for CSV / XLSX parsing into raw records."""

    def test_csv_headers_and_missing_cells(self):
        table = read_table(b"Cidade,VALOR\nSP,100\nRJ,\n", "vendas.csv")

        assert table.headers == ["Cidade", "VALOR"]
        assert table.records == [
            {"Cidade": "SP", "VALOR": "100"},
            {"Cidade": "RJ", "VALOR": None},
        ]

    def test_semicolon_delimiter(self):
        table = read_table("Cidade;VALOR\nSão Paulo;1.5\n".encode("utf-8"), "v.csv")
        assert table.records == [{"Cidade": "São Paulo", "VALOR": "1.5"}]

    def test_latin1_fallback(self):
        table = read_table("Cidade,VALOR\nSão Paulo,1\n".encode("latin-1"), "v.csv")
        assert table.records[0]["Cidade"] == "São Paulo"

    def test_utf8_bom_is_stripped(self):
        table = read_table("\ufeffPEDIDO,VALOR\n1,2\n".encode("utf-8"), "v.csv")
        assert table.headers == ["PEDIDO", "VALOR"]

    def test_xlsx_first_sheet(self):
        df = pd.DataFrame({"Cidade": ["SP", "RJ"], "VALOR": [100, 200]})
        table = read_table(xlsx_bytes(df), "vendas.xlsx")

        assert table.headers == ["Cidade", "VALOR"]
        assert table.records == [
            {"Cidade": "SP", "VALOR": 100},
            {"Cidade": "RJ", "VALOR": 200},
        ]

    def test_xlsx_empty_cells_become_none(self):
        df = pd.DataFrame({"Cidade": ["SP", None], "VALOR": [1.5, None]})
        table = read_table(xlsx_bytes(df), "v.xlsx")
        assert table.records[1] == {"Cidade": None, "VALOR": None}

    def test_empty_content(self):
        with pytest.raises(NoDataError):
            read_table(b"", "empty.csv")

    def test_unsupported_extension(self):
        with pytest.raises(IngestionError):
            read_table(b"a,b\n1,2\n", "notes.pdf")

    def test_corrupt_workbook(self):
        with pytest.raises(IngestionError):
            read_table(b"definitely not a zip archive", "broken.xlsx")

    def test_size_limit(self, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_BYTES", "8")
        get_settings.cache_clear()
        try:
            with pytest.raises(IngestionError):
                read_table(b"a,b\n1,2\n3,4\n", "big.csv")
        finally:
            monkeypatch.delenv("MAX_UPLOAD_BYTES")
            get_settings.cache_clear()

    @pytest.mark.parametrize("name,expected", [
        ("vendas.CSV", "csv"),
        ("a.b.xlsx", "xlsx"),
        ("noext", ""),
    ])
    def test_file_extension(self, name, expected):
        assert file_extension(name) == expected


class TestOrchestrator:
    """Tests for the end-to-end ingestion pipeline."""

    def test_header_only_file_has_no_data(self):
        with pytest.raises(NoDataError):
            build_from_bytes(b"Cidade,VALOR\n", "vazio.csv")

    def test_ingest_saves_snapshot(self):
        content = b"Cidade,VALOR\nSP,100\nSP,50\nRJ,200\n"
        snapshot = asyncio.run(ingest_bytes("s1", content, "vendas.csv"))

        assert snapshot.dataset.total_rows == 3
        assert [i.value for i in snapshot.indicators][0] == "3"
        assert len(snapshot.charts) == 2
        assert load_session("s1") is snapshot

    def test_snapshot_timestamp_is_utc(self):
        snapshot = asyncio.run(ingest_bytes("s1", b"Cidade,VALOR\nSP,1\n", "ok.csv"))
        saved = datetime.fromisoformat(snapshot.saved_at.replace("Z", "+00:00"))

        assert snapshot.saved_at.endswith("Z")
        assert saved.utcoffset() == timedelta(0)

    def test_failed_ingest_keeps_previous_snapshot(self):
        good = asyncio.run(ingest_bytes("s1", b"Cidade,VALOR\nSP,1\n", "ok.csv"))

        with pytest.raises(IngestionError):
            asyncio.run(ingest_bytes("s1", b"", "empty.csv"))

        assert load_session("s1") is good

    def test_sessions_are_isolated(self):
        asyncio.run(ingest_bytes("a", b"Cidade,VALOR\nSP,1\n", "a.csv"))
        assert load_session("b") is None

    def test_save_failure_still_returns_snapshot(self, monkeypatch):
        def boom(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("server.orchestrator.save_session", boom)
        snapshot = asyncio.run(ingest_bytes("s1", b"Cidade,VALOR\nSP,1\n", "ok.csv"))

        assert snapshot.dataset.total_rows == 1
        assert load_session("s1") is None


class TestDelimiterDetection:
    """Tests for CSV dialect sniffing."""

    def test_quoted_header_with_comma(self):
        table = read_table(b'"Cidade, UF";VALOR\nSP;100\n', "v.csv")

        assert table.headers == ["Cidade, UF", "VALOR"]
        assert table.records == [{"Cidade, UF": "SP", "VALOR": "100"}]

    def test_tab_separated(self):
        table = read_table(b"Cidade\tVALOR\nSP\t100\nRJ\t200\n", "v.tsv")
        assert table.headers == ["Cidade", "VALOR"]

    def test_single_column(self):
        table = read_table(b"VALOR\n1\n2\n", "v.csv")
        assert table.records == [{"VALOR": "1"}, {"VALOR": "2"}]

    def test_huge_value_ingests(self):
        snapshot = asyncio.run(ingest_bytes("big", b"VALOR\n1e70\n", "v.csv"))

        assert len(snapshot.indicators) == 4
        assert snapshot.indicators[2].value.endswith(".000,00")
