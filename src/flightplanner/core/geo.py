"""
Geospatial helpers.

We keep a tiny geometry layer here so the route index and graph can do distance
and projection math without pulling in heavier GIS dependencies.

Conventions:
- Internally every coordinate is a `GeoPoint(lat, lng)` in WGS84 degrees.
- At the data boundary coordinates arrive as `[lng, lat]` pairs; convert them with
  `point_from_lnglat` immediately on ingestion.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt
from typing import Any, Sequence

EARTH_RADIUS_KM = 6371.0088

# Kilometers per degree of latitude (and of longitude at the equator).
_KM_PER_DEG = 111.32


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def as_lnglat(self) -> list[float]:
        return [self.lng, self.lat]

    def as_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class NearestPoint:
    """Projection of a point onto a polyline."""

    point: GeoPoint
    distance_km: float
    segment_index: int
    t: float  # position along the segment, 0..1


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle (haversine) distance in kilometers between two points."""
    lat1 = radians(a.lat)
    lng1 = radians(a.lng)
    lat2 = radians(b.lat)
    lng2 = radians(b.lng)

    dlat = lat2 - lat1
    dlng = lng2 - lng1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(min(1.0, sqrt(h)))


def polyline_length_km(points: Sequence[GeoPoint]) -> float:
    """Sum of great-circle distances between consecutive points."""
    return sum(distance_km(points[i], points[i + 1]) for i in range(len(points) - 1))


def coordinate_key(p: GeoPoint, precision: int = 6) -> tuple[int, int]:
    """Quantized `(lng, lat)` integer key; two points share a key when equal at `precision` decimals."""
    scale = 10**precision
    return (int(round(p.lng * scale)), int(round(p.lat * scale)))


def same_point(a: GeoPoint, b: GeoPoint, precision: int = 6) -> bool:
    return coordinate_key(a, precision) == coordinate_key(b, precision)


def point_from_lnglat(raw: Any) -> GeoPoint | None:
    """Convert a boundary `[lng, lat]` pair into a GeoPoint.

    A third (altitude) value is tolerated and ignored. Returns None for anything
    that is not a finite, in-range coordinate pair.
    """
    if not isinstance(raw, (list, tuple)) or len(raw) not in (2, 3):
        return None
    try:
        lng = float(raw[0])
        lat = float(raw[1])
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lng) and math.isfinite(lat)):
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return GeoPoint(lat=lat, lng=lng)


def _to_xy_km(p: GeoPoint, origin: GeoPoint) -> tuple[float, float]:
    # Equirectangular projection around the query point (fine at route-snapping scale).
    x = (p.lng - origin.lng) * _KM_PER_DEG * cos(radians(origin.lat))
    y = (p.lat - origin.lat) * _KM_PER_DEG
    return x, y


def _lerp(a: GeoPoint, b: GeoPoint, t: float) -> GeoPoint:
    if t <= 0.0:
        return a
    if t >= 1.0:
        return b
    return GeoPoint(lat=a.lat + (b.lat - a.lat) * t, lng=a.lng + (b.lng - a.lng) * t)


def nearest_point_on_polyline(p: GeoPoint, line: Sequence[GeoPoint]) -> NearestPoint | None:
    """Project `p` onto the closest segment of `line`.

    Each segment is projected perpendicularly (clamped to its endpoints) and the
    candidate with the smallest great-circle distance to `p` wins; the first
    segment wins ties. Returns None if `line` has fewer than 2 points.
    """
    if len(line) < 2:
        return None

    best: NearestPoint | None = None
    for i in range(len(line) - 1):
        a, b = line[i], line[i + 1]
        ax, ay = _to_xy_km(a, p)
        bx, by = _to_xy_km(b, p)
        dx, dy = bx - ax, by - ay
        seg_len2 = dx * dx + dy * dy
        t = 0.0 if seg_len2 == 0 else max(0.0, min(1.0, -(ax * dx + ay * dy) / seg_len2))
        q = _lerp(a, b, t)
        d = distance_km(p, q)
        if best is None or d < best.distance_km:
            best = NearestPoint(point=q, distance_km=d, segment_index=i, t=t)
    return best


def slice_polyline(
    line: Sequence[GeoPoint],
    start: GeoPoint,
    end: GeoPoint,
    *,
    tolerance_km: float = 0.05,
) -> list[GeoPoint]:
    """Return the part of `line` between the projections of `start` and `end`.

    The projected endpoints are included and the result is oriented so that its
    first point is the one nearest `start`. If either point projects farther than
    `tolerance_km` from the line, an empty list is returned.
    """
    a = nearest_point_on_polyline(start, line)
    b = nearest_point_on_polyline(end, line)
    if a is None or b is None:
        return []
    if a.distance_km > tolerance_km or b.distance_km > tolerance_km:
        return []

    reverse = (b.segment_index, b.t) < (a.segment_index, a.t)
    lo, hi = (b, a) if reverse else (a, b)

    out = [lo.point]
    for v in line[lo.segment_index + 1 : hi.segment_index + 1]:
        if not same_point(v, out[-1]):
            out.append(v)
    if not same_point(hi.point, out[-1]) or len(out) == 1:
        out.append(hi.point)

    if reverse:
        out.reverse()
    return out
