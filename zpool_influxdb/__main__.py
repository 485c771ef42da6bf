"""Main entry point for running the exporter."""

import sys

from zpool_influxdb.cli import main

if __name__ == "__main__":
    sys.exit(main())
