"""Unit tests for line protocol escaping and serialization."""

import io
import re

from zpool_influxdb.models import MetricRecord
from zpool_influxdb.services.line_protocol import LineProtocolFormatter, escape_string


def unescape(value: str) -> str:
    return re.sub(r"\\([ ,=\\])", r"\1", value)


class TestEscapeString:
    """Test suite for escape_string."""

    def test_reserved_characters_are_escaped(self):
        """Test that space, comma, equals and backslash get a backslash."""
        assert escape_string("a b") == "a\\ b"
        assert escape_string("a,b") == "a\\,b"
        assert escape_string("a=b") == "a\\=b"
        assert escape_string("a\\b") == "a\\\\b"

    def test_other_characters_pass_through(self):
        """Test that unreserved characters are unchanged."""
        assert escape_string("tank/data-01_x.y") == "tank/data-01_x.y"
        assert escape_string("") == ""

    def test_unescape_restores_original(self):
        """Test that removing one backslash per reserved character restores the input."""
        samples = ["", "tank", " ,=\\", "a b,c=d\\e", "\\\\  ,,==", "x=\\ y"]
        for sample in samples:
            assert unescape(escape_string(sample)) == sample

    def test_long_names(self):
        """Test that long names are escaped without truncation."""
        name = "a b" * 1000
        escaped = escape_string(name)
        assert len(escaped) == len(name) + 1000
        assert unescape(escaped) == name


class TestLineProtocolFormatter:
    """Test suite for LineProtocolFormatter."""

    def make_record(self, **fields):
        return MetricRecord(
            measurement="zpool_stats",
            tags=[("name", "my pool"), ("state", "ONLINE")],
            fields=list(fields.items()),
            timestamp=1234,
        )

    def test_format_record_uint64(self):
        """Test the layout of one line with unsigned integers."""
        formatter = LineProtocolFormatter(support_uint64=True)
        line = formatter.format_record(self.make_record(alloc=10, free=20))
        assert line == "zpool_stats,name=my\\ pool,state=ONLINE alloc=10u,free=20u 1234"

    def test_format_record_signed(self):
        """Test integers get the 'i' suffix when uint64 is not supported."""
        formatter = LineProtocolFormatter(support_uint64=False)
        line = formatter.format_record(self.make_record(alloc=10))
        assert line.endswith(" alloc=10i 1234")

    def test_signed_mode_masks_top_bit(self):
        """Test that the top bit is masked off in signed mode."""
        formatter = LineProtocolFormatter(support_uint64=False)
        assert formatter.format_integer((1 << 64) - 1) == f"{(1 << 63) - 1}i"
        assert formatter.format_integer(1 << 63) == "0i"

    def test_uint64_mode_keeps_full_range(self):
        """Test that unsigned mode keeps the full 64-bit range."""
        formatter = LineProtocolFormatter(support_uint64=True)
        assert formatter.format_integer((1 << 64) - 1) == "18446744073709551615u"

    def test_float_fields_have_two_decimals(self):
        """Test that percentages are printed with two decimals."""
        formatter = LineProtocolFormatter()
        assert formatter.format_value(50.0) == "50.00"
        assert formatter.format_value(100.0 / 3) == "33.33"

    def test_write_appends_newlines(self):
        """Test that write emits one newline-terminated line per record."""
        formatter = LineProtocolFormatter()
        stream = io.StringIO()
        count = formatter.write([self.make_record(a=1), self.make_record(a=2)], stream)
        assert count == 2
        assert stream.getvalue().count("\n") == 2
        assert stream.getvalue().endswith("\n")
