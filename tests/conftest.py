"""
Pytest configuration and snapshot factories for engine tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from relief_engine.models import AidOffer, IncidentReport, ResourceRequest

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _make_report(
    report_id,
    title="Warehouse fire on Dock Street",
    description="Large flames and black smoke coming from the old warehouse",
    category="fire",
    severity="high",
    lat=None,
    lon=None,
    hours=0.0,
    **extra,
):
    return IncidentReport(
        id=report_id,
        title=title,
        description=description,
        category=category,
        severity=severity,
        latitude=lat,
        longitude=lon,
        created_at=BASE_TIME + timedelta(hours=hours),
        **extra,
    )


def _make_request(request_id, resource_type="water", quantity=100, lat=None, lon=None, urgency="medium", **extra):
    return ResourceRequest(
        id=request_id,
        resource_type=resource_type,
        quantity=quantity,
        urgency=urgency,
        latitude=lat,
        longitude=lon,
        **extra,
    )


def _make_offer(offer_id, resource_type="water", quantity=100, lat=None, lon=None, **extra):
    return AidOffer(
        id=offer_id,
        resource_type=resource_type,
        quantity=quantity,
        latitude=lat,
        longitude=lon,
        **extra,
    )


@pytest.fixture
def make_report():
    """Factory for incident reports created relative to BASE_TIME."""
    return _make_report


@pytest.fixture
def make_request():
    return _make_request


@pytest.fixture
def make_offer():
    return _make_offer


@pytest.fixture
def fire_incident(make_report):
    """Three near-identical accounts of one warehouse fire."""
    return [
        make_report("fire-1", lat=34.0000, lon=-118.2500, hours=0),
        make_report("fire-2", lat=34.0010, lon=-118.2505, hours=1),
        make_report("fire-3", lat=34.0005, lon=-118.2510, hours=2),
    ]


@pytest.fixture
def flood_incident(make_report):
    """Two accounts of a flood far away from the fire, a few days later."""
    flood = dict(
        title="River flooding in Riverside park",
        description="Water over the footbridge and rising into the parking lot",
        category="flood",
        severity="medium",
    )
    return [
        make_report("flood-1", lat=33.9500, lon=-117.4000, hours=72, **flood),
        make_report("flood-2", lat=33.9505, lon=-117.4002, hours=73, **flood),
    ]
