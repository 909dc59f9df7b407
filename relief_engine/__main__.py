#!/usr/bin/env python3
"""
Run the engine CLI.

Usage:
    python -m relief_engine <command> [options]

Commands:
    similar        - Find reports similar to one report
    duplicates     - Duplicate verdict and proposed links for one report
    clusters       - Cluster the most recent reports
    match-request  - Rank aid offers for a resource request
    match-offer    - Rank resource requests for an aid offer

Examples:
    python -m relief_engine clusters --reports reports.json --limit 100
    python -m relief_engine match-request --requests requests.json --offers offers.json --request-id Q1
"""

import sys

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
