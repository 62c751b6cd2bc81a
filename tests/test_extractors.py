"""Tests for custom_log/extractors.py"""

import pytest

from custom_log.dates import DateDecoder
from custom_log.errors import FormatSyntaxError, LineParseError
from custom_log.extractors import compile_format, split_token
from custom_log.record import LogRecord


class TestSplitToken:
    @pytest.mark.parametrize("token, expected", [
        ("%h", ("h", "")),
        ("%>s", ("s", ">")),
        ("%{Referer}i", ("i", "Referer")),
        ("%{}i", ("i", "")),
        ("%{x", ("x", "{")),
        ("%400,501{User-agent}i", ("i", "400,501{User-agent}")),
    ])
    def test_kind_and_param(self, token, expected):
        assert split_token(token) == expected

    @pytest.mark.parametrize("token", ["%", "h", "", "x%h", '"%r"'])
    def test_illegal_tokens(self, token):
        with pytest.raises(FormatSyntaxError):
            split_token(token)


class TestCompileFormat:
    def test_one_extractor_per_token(self):
        extractors = compile_format('%h %l %u %t "%r" %>s %b')
        assert [e.kind for e in extractors] == ["h", "l", "u", "t", "r", "s", "b"]
        assert [e.token for e in extractors] == ["%h", "%l", "%u", "%t", "%r", "%>s", "%b"]

    def test_result_is_immutable_tuple(self):
        extractors = compile_format("%h")
        assert isinstance(extractors, tuple)

    def test_header_parameter_is_unwrapped(self):
        (extractor,) = compile_format('"%{X-Forwarded-For}i"')
        assert extractor.param == "X-Forwarded-For"

    def test_missing_percent_fails(self):
        with pytest.raises(FormatSyntaxError):
            compile_format("%h host %b")

    def test_unbalanced_quote_fails(self):
        with pytest.raises(FormatSyntaxError):
            compile_format('%h "%r')

    def test_none_directive_fails(self):
        with pytest.raises(FormatSyntaxError):
            compile_format(None)

    def test_unsupported_kind_is_accepted(self):
        extractors = compile_format("%h %D %{cookie}n")
        record = LogRecord()
        for extractor, value in zip(extractors, ["host", "1234", "abc"]):
            extractor(record, value)
        assert record.remote_host == "host"
        assert record.to_dict() == LogRecord(remote_host="host").to_dict()

    def test_empty_directive_compiles_to_nothing(self):
        assert compile_format("") == ()

    def test_time_extractors_share_decoder(self):
        decoder = DateDecoder()
        t1, t2 = compile_format("%t %t", decoder=decoder)
        record = LogRecord()
        t1(record, "19/Dec/2008:09:03:24 +0900")
        t2(record, "19/Dec/2008:10:00:00 +0900")
        assert decoder.cache_size == 1


class TestExtractorValues:
    def _apply(self, directive, value) -> LogRecord:
        (extractor,) = compile_format(directive)
        record = LogRecord()
        extractor(record, value)
        return record

    def test_text_fields(self):
        assert self._apply("%h", "1.2.3.4").remote_host == "1.2.3.4"
        assert self._apply("%l", "ident").remote_logname == "ident"
        assert self._apply("%u", "frank").remote_user == "frank"

    def test_status_variants_share_extractor(self):
        assert self._apply("%s", "404").status == 404
        assert self._apply("%>s", "301").status == 301

    def test_non_numeric_status(self):
        with pytest.raises(LineParseError):
            self._apply("%>s", "-")

    def test_response_size(self):
        assert self._apply("%b", "2326").response_size == 2326

    def test_response_size_dash_is_zero(self):
        assert self._apply("%b", "-").response_size == 0

    def test_non_numeric_response_size(self):
        with pytest.raises(LineParseError):
            self._apply("%b", "12k")

    @pytest.mark.parametrize("directive", ["%>s", "%b"])
    @pytest.mark.parametrize("value", ["2_00", "1e3", " 200", "200 ", "0x1F", "\u0663"])
    def test_int_fields_reject_non_plain_digits(self, directive, value):
        with pytest.raises(LineParseError):
            self._apply(directive, value)

    @pytest.mark.parametrize("value, expected", [("007", 7), ("+12", 12), ("-1", -1)])
    def test_int_fields_accept_signed_digits(self, value, expected):
        assert self._apply("%b", value).response_size == expected

    def test_malformed_time(self):
        with pytest.raises(LineParseError):
            self._apply("%t", "yesterday")

    def test_request_line(self):
        record = self._apply("%r", "GET /p?q=1 HTTP/1.1")
        assert record.method == "GET"
        assert record.params == {"q": "1"}

    @pytest.mark.parametrize("name", ["Referer", "referer", "REFERER"])
    def test_referer_is_case_insensitive(self, name):
        record = self._apply(f"%{{{name}}}i", "http://example.com/")
        assert record.referer == "http://example.com/"
        assert record.headers == {}

    @pytest.mark.parametrize("name", ["User-Agent", "user-agent", "USER-AGENT"])
    def test_user_agent_is_case_insensitive(self, name):
        record = self._apply(f"%{{{name}}}i", "curl/8.0")
        assert record.user_agent == "curl/8.0"
        assert record.headers == {}

    def test_other_headers_keep_their_case(self):
        record = self._apply("%{x-Request-ID}i", "abc")
        assert record.headers == {"x-Request-ID": "abc"}
