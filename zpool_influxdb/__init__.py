"""ZFS pool statistics exporter for the InfluxDB line protocol."""

__version__ = "0.1.0"
