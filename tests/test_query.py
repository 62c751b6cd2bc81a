"""Tests for custom_log/query.py"""

import json

import pytest

from custom_log.config import Config
from custom_log.query import COLUMNS, LogQuery, QueryError, create_connection, format_results, to_char
from custom_log.record import LogRecord


class TestToChar:
    def test_formats_iso_timestamp(self):
        assert to_char("2008-12-19T09:03:24+09:00", "%Y-%m-%d %H:00") == "2008-12-19 09:00"

    def test_null_passes_through(self):
        assert to_char(None, "%Y") is None


class TestFormatResults:
    def test_tab_separated_rows(self):
        assert format_results([("a", 1), ("b", 2)]) == "a\t1\nb\t2"

    def test_none_is_empty(self):
        assert format_results([("a", None, 3)]) == "a\t\t3"

    def test_no_rows(self):
        assert format_results([]) == ""


class TestCreateConnection:
    def test_columns_and_json_fields(self):
        record = LogRecord(remote_host="1.2.3.4", status=200)
        record.set_request_line("GET /a?x=1&y HTTP/1.1")
        record.set_request_header("Accept", "*/*")
        conn = create_connection([record])
        cursor = conn.execute("SELECT * FROM records")
        assert tuple(d[0] for d in cursor.description) == COLUMNS
        row = dict(zip(COLUMNS, cursor.fetchone()))
        assert row["remote_host"] == "1.2.3.4"
        assert row["method"] == "GET"
        assert row["status"] == 200
        assert json.loads(row["params"]) == {"x": "1", "y": None}
        assert json.loads(row["headers"]) == {"Accept": "*/*"}
        conn.close()


class TestLogQuery:
    def test_requires_query_and_paths(self, combined_log):
        with pytest.raises(ValueError):
            LogQuery("", [combined_log])
        with pytest.raises(ValueError):
            LogQuery("SELECT 1", [])

    def test_select_where(self, combined_log):
        rows = LogQuery(
            "SELECT remote_host, status FROM records WHERE status >= 400 ORDER BY status",
            [combined_log],
            Config(),
        ).execute()
        assert rows == [("10.0.0.1", 404), ("10.0.0.3", 500)]

    def test_group_by_hour_with_to_char(self, combined_log):
        rows = LogQuery(
            "SELECT to_char(request_time, '%H:00'), count(*) FROM records GROUP BY 1 ORDER BY 1",
            [combined_log],
        ).execute()
        assert rows == [("09:00", 3), ("10:00", 1)]

    def test_dash_size_is_zero(self, combined_log):
        rows = LogQuery(
            "SELECT response_size FROM records WHERE method = 'POST'", [combined_log]
        ).execute()
        assert rows == [(0,)]

    def test_bad_sql_raises_query_error(self, combined_log):
        with pytest.raises(QueryError):
            LogQuery("SELECT nope FROM nowhere", [combined_log]).execute()

    def test_custom_format_from_config(self, tmp_path):
        path = tmp_path / "custom.log"
        path.write_text('1.2.3.4 "GET /x HTTP/1.1" "abc-123"\n')
        config = Config(log_format='%h "%r" "%{X-Request-ID}i"')
        rows = LogQuery(
            "SELECT request_path, json_extract(headers, '$.\"X-Request-ID\"') FROM records",
            [str(path)],
            config,
        ).execute()
        assert rows == [("/x", "abc-123")]
