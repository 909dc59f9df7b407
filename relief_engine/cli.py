#!/usr/bin/env python3
"""
Command-line interface for the Incident Correlation & Resource Matching Engine.

Inputs are JSON snapshot files: a JSON array of objects using the
platform's field names (camelCase or snake_case).

Usage:
    python -m relief_engine similar --reports reports.json --report-id R1
    python -m relief_engine duplicates --reports reports.json --report-id R1
    python -m relief_engine clusters --reports reports.json --limit 200
    python -m relief_engine match-request --requests requests.json --offers offers.json --request-id Q1
    python -m relief_engine match-offer --offers offers.json --requests requests.json --offer-id O1
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .models import AidOffer, IncidentReport, ResourceRequest
from .services.duplicate_detection import apply_link_proposals, most_recent
from .services.engine import ReliefEngine, build_engine
from .services.report_clustering import summarize_clusters
from .services.settings import load_settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class SnapshotError(Exception):
    """Raised when an input file cannot be read or validated."""


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_snapshots(path: str, model: Type[ModelT]) -> List[ModelT]:
    """Read a JSON array file into validated snapshot models."""
    filepath = Path(path)
    if not filepath.exists():
        raise SnapshotError(f"File not found: {path}")

    try:
        with open(filepath, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"{filepath.name}: invalid JSON ({e})") from e

    if not isinstance(data, list):
        raise SnapshotError(f"{filepath.name}: expected a JSON array")

    try:
        items = [model.model_validate(item) for item in data]
    except ValidationError as e:
        raise SnapshotError(f"{filepath.name}: {e}") from e

    logger.debug(f"Loaded {len(items)} {model.__name__} snapshots from {filepath.name}")
    return items


def find_by_id(items, item_id: str, label: str):
    for item in items:
        if item.id == item_id:
            return item
    raise SnapshotError(f"{label} not found: {item_id}")


def emit(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_similar(args, engine: ReliefEngine):
    """List reports similar to one report."""
    reports = load_snapshots(args.reports, IncidentReport)
    target = find_by_id(reports, args.report_id, "Report")
    similar = engine.find_similar(target, reports)
    emit({
        "target_report_id": target.id,
        "similar_reports": [s.to_dict() for s in similar],
        "count": len(similar),
    })
    return 0


def cmd_duplicates(args, engine: ReliefEngine):
    """Check one report against the rest of the pool."""
    reports = load_snapshots(args.reports, IncidentReport)
    target = find_by_id(reports, args.report_id, "Report")
    pool = most_recent([r for r in reports if r.id != target.id], args.limit)

    verdict = engine.detect_duplicate(target, pool)
    links = engine.propose_links(target, pool)
    adjacency = {r.id: r.similar_report_ids for r in [target, *pool]}
    updated = apply_link_proposals(adjacency, links)
    emit({
        **verdict.to_dict(),
        "proposed_links": [link.to_dict() for link in links],
        "link_updates": {
            rid: ids for rid, ids in updated.items()
            if set(ids) != set(adjacency.get(rid, []))
        },
    })
    return 0


def cmd_clusters(args, engine: ReliefEngine):
    """Cluster the most recent reports."""
    reports = load_snapshots(args.reports, IncidentReport)
    pool = most_recent(reports, args.limit)
    clusters = engine.cluster_reports(pool)
    emit({
        **summarize_clusters(clusters),
        "reports_analyzed": len(pool),
        "clusters": [c.to_dict() for c in clusters],
    })
    return 0


def cmd_match_request(args, engine: ReliefEngine):
    """Rank aid offers for one resource request."""
    requests = load_snapshots(args.requests, ResourceRequest)
    offers = load_snapshots(args.offers, AidOffer)
    request = find_by_id(requests, args.request_id, "Request")
    matches = asyncio.run(engine.score_request_against_offers(request, offers))
    emit({
        "request_id": request.id,
        "matches": [m.to_dict() for m in matches],
    })
    return 0


def cmd_match_offer(args, engine: ReliefEngine):
    """Rank pending requests for one aid offer."""
    offers = load_snapshots(args.offers, AidOffer)
    requests = load_snapshots(args.requests, ResourceRequest)
    offer = find_by_id(offers, args.offer_id, "Offer")
    matches = engine.score_offer_against_requests(offer, requests)
    emit({
        "offer_id": offer.id,
        "matches": [m.to_dict() for m in matches],
    })
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Incident correlation and resource matching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('-v', '--verbose', action='store_true', help="Verbose output")

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    similar_parser = subparsers.add_parser('similar', help='Find reports similar to one report')
    similar_parser.add_argument('--reports', required=True, help='Report snapshot file (JSON array)')
    similar_parser.add_argument('--report-id', required=True, help='Target report id')

    dup_parser = subparsers.add_parser('duplicates', help='Run duplicate detection for one report')
    dup_parser.add_argument('--reports', required=True, help='Report snapshot file (JSON array)')
    dup_parser.add_argument('--report-id', required=True, help='Report to check')
    dup_parser.add_argument('--limit', type=int, default=None, help='Pool size (most recent N)')

    cluster_parser = subparsers.add_parser('clusters', help='Cluster recent reports')
    cluster_parser.add_argument('--reports', required=True, help='Report snapshot file (JSON array)')
    cluster_parser.add_argument('--limit', type=int, default=None, help='Pool size (most recent N)')

    mreq_parser = subparsers.add_parser('match-request', help='Rank offers for a request')
    mreq_parser.add_argument('--requests', required=True, help='Request snapshot file (JSON array)')
    mreq_parser.add_argument('--offers', required=True, help='Offer snapshot file (JSON array)')
    mreq_parser.add_argument('--request-id', required=True, help='Request to match')
    mreq_parser.add_argument('--external', action='store_true', help='Use the LLM scorer when configured')

    moff_parser = subparsers.add_parser('match-offer', help='Rank requests for an offer')
    moff_parser.add_argument('--offers', required=True, help='Offer snapshot file (JSON array)')
    moff_parser.add_argument('--requests', required=True, help='Request snapshot file (JSON array)')
    moff_parser.add_argument('--offer-id', required=True, help='Offer to match')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 1

    settings = load_settings()
    if getattr(args, 'external', False):
        settings.matching.enable_external_scoring = True
    if getattr(args, 'limit', None) is None and hasattr(args, 'limit'):
        args.limit = settings.duplicate_detection.max_pool_size
    engine = build_engine(settings)

    commands = {
        'similar': cmd_similar,
        'duplicates': cmd_duplicates,
        'clusters': cmd_clusters,
        'match-request': cmd_match_request,
        'match-offer': cmd_match_offer,
    }

    try:
        return commands[args.command](args, engine)
    except SnapshotError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
