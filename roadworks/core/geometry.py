"""
Road segment polylines.

Storage order is GeoJSON order: ``[longitude, latitude]``. Map consumers want
``(latitude, longitude)``, so ``project`` always swaps the axes.
"""
from __future__ import annotations

import math
from numbers import Real
from typing import Any, List, Mapping, Sequence, Tuple

from roadworks.core.errors import InvalidGeometry

LatLng = Tuple[float, float]

EARTH_RADIUS_M = 6371e3


def _coordinates(geometry: Any) -> Sequence[Any]:
    if isinstance(geometry, Mapping):
        if geometry.get("type") != "LineString":
            raise InvalidGeometry("Geometry must be a LineString.")
        geometry = geometry.get("coordinates")
    if not isinstance(geometry, (list, tuple)):
        raise InvalidGeometry("Geometry must be a sequence of [longitude, latitude] pairs.")
    return geometry


def _vertex(raw: Any) -> Tuple[float, float]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise InvalidGeometry("Each vertex must be a [longitude, latitude] pair.")
    lng, lat = raw
    for v in (lng, lat):
        if isinstance(v, bool) or not isinstance(v, Real) or math.isnan(v):
            raise InvalidGeometry("Coordinates must be numbers.")
    if not -180.0 <= lng <= 180.0:
        raise InvalidGeometry(f"Longitude {lng} out of range [-180, 180].")
    if not -90.0 <= lat <= 90.0:
        raise InvalidGeometry(f"Latitude {lat} out of range [-90, 90].")
    return float(lng), float(lat)


def project(geometry: Any) -> List[LatLng]:
    """
    Stored polyline -> renderable ``(latitude, longitude)`` sequence.

    Accepts a sequence of ``(longitude, latitude)`` pairs or a GeoJSON
    LineString mapping. Raises InvalidGeometry on fewer than two points or
    any out-of-range coordinate. The input is never modified.
    """
    coords = _coordinates(geometry)
    if len(coords) < 2:
        raise InvalidGeometry("A polyline needs at least 2 points.")

    out: List[LatLng] = []
    for raw in coords:
        lng, lat = _vertex(raw)
        out.append((lat, lng))
    return out


def validate_polyline(geometry: Any) -> List[Tuple[float, float]]:
    """Checks done on segment creation: ``project`` rules plus 2 distinct vertices.

    Returns the coordinates in storage order.
    """
    rendered = project(geometry)
    if len(set(rendered)) < 2:
        raise InvalidGeometry("A polyline needs at least 2 distinct points.")
    return [(lng, lat) for lat, lng in rendered]


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def polyline_length_meters(geometry: Any) -> float:
    pts = project(geometry)
    return sum(haversine_m(a[0], a[1], b[0], b[1]) for a, b in zip(pts, pts[1:]))


def to_geojson(coords: Sequence[Tuple[float, float]]) -> dict:
    return {"type": "LineString", "coordinates": [[lng, lat] for lng, lat in coords]}
