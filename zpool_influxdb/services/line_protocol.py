"""InfluxDB line protocol serialization.

Output format, one record per line::

    <measurement>,<tag>=<value>,... <field>=<value>,... <timestamp>

Tag values are escaped with :func:`escape_string`. Integer fields are
unsigned 64-bit counters; float fields are percentages.
"""

from typing import Iterable, TextIO

from zpool_influxdb.models import UINT64_MAX, FieldValue, MetricRecord

INT64_MAX = (1 << 63) - 1

_ESCAPED_CHARACTERS = frozenset(" ,=\\")


def escape_string(value: str) -> str:
    """Escape a tag value: space, comma, equals and backslash get a backslash prefix."""
    return "".join("\\" + c if c in _ESCAPED_CHARACTERS else c for c in value)


class LineProtocolFormatter:
    """Serializes MetricRecords according to the configured integer policy.

    With ``support_uint64`` integers are written with the ``u`` suffix and
    their full unsigned range. Without it, consumers lacking unsigned 64-bit
    support get the value masked to the signed range with the ``i`` suffix.
    """

    def __init__(self, support_uint64: bool = True):
        self.support_uint64 = support_uint64

    def format_integer(self, value: int) -> str:
        value &= UINT64_MAX
        if self.support_uint64:
            return f"{value}u"
        return f"{value & INT64_MAX}i"

    def format_value(self, value: FieldValue) -> str:
        if isinstance(value, float):
            return f"{value:.2f}"
        return self.format_integer(value)

    def format_record(self, record: MetricRecord) -> str:
        """Render one record as a line, without the trailing newline."""
        key = ",".join(
            [record.measurement] + [f"{name}={escape_string(value)}" for name, value in record.tags]
        )
        fields = ",".join(f"{name}={self.format_value(value)}" for name, value in record.fields)
        return f"{key} {fields} {record.timestamp}"

    def write(self, records: Iterable[MetricRecord], stream: TextIO) -> int:
        """Write records to ``stream``; returns the number of lines written."""
        count = 0
        for record in records:
            stream.write(self.format_record(record) + "\n")
            count += 1
        return count
