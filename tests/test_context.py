"""
Tests for log sanitizing of client-controlled values.
"""

from ws_gateway.components.core.context import event_log_fields, sanitize_log_data


class TestSanitizeLogData:
    def test_control_characters_are_removed(self):
        assert sanitize_log_data("abc\n\x00def") == "abcdef"

    def test_quotes_and_backslashes_are_escaped(self):
        assert sanitize_log_data('a"b\\c') == 'a\\"b\\\\c'

    def test_long_values_are_truncated(self):
        assert sanitize_log_data("x" * 150, max_length=10) == "x" * 10 + "..."

    def test_non_string_values(self):
        assert sanitize_log_data(None) == ""
        assert sanitize_log_data(42) == "42"

    def test_event_log_fields(self):
        fields = event_log_fields("abc=", "r" * 200, max_route_key_length=5)

        assert fields == {"connection_id": "abc=", "route_key": "rrrrr..."}
