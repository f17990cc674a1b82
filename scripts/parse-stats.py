#!/usr/bin/env python3
"""
HAProxy Stats CSV Parser Script
Decodes a saved 'haproxy;csv' export and prints what it contains.

Usage: parse-stats.py [stats.csv [--base64]]   (reads stdin without a file)
"""

import base64
import sys

from haproxyctl.errors import DecodeError
from haproxyctl.models.stats import EntryType
from haproxyctl.utils.haproxy_stats_parser import haproxy_stats_parser
from haproxyctl.utils.report_renderer import format_duration


def main():
    if len(sys.argv) > 1:
        csv_file = sys.argv[1]
        print(f"Reading from file: {csv_file}")

        with open(csv_file, 'rb') as f:
            csv_data = f.read()

        if len(sys.argv) > 2 and sys.argv[2] == '--base64':
            csv_data = base64.b64decode(csv_data)
    else:
        print("Reading from stdin (paste CSV and press Ctrl+D)...")
        csv_data = sys.stdin.buffer.read()

    print(f"CSV Data Size: {len(csv_data)} bytes")
    print()

    try:
        rows = haproxy_stats_parser.parse_csv_stats(csv_data)
    except DecodeError as e:
        print(f"Parse failed: {e}")
        return 1

    grouped = haproxy_stats_parser.group_by_type(rows)

    print("=" * 80)
    for entry_type, entries in grouped.items():
        print(f"{entry_type.name:<9} {len(entries)}")
    print("=" * 80)
    print()

    servers = grouped[EntryType.SERVER]
    if not servers:
        print("No servers found!")
        return 1

    by_backend = {}
    for server in servers:
        by_backend.setdefault(server.backend_name, []).append(server)

    for backend, members in by_backend.items():
        print(f"Backend: {backend}")
        for server in members:
            downtime = format_duration(server.downtime)
            print(f"  {server.service_name:<24} {server.status:<12} {downtime:<10} {server.last_check}")
        print()

    return 0


if __name__ == '__main__':
    sys.exit(main())
