"""
Route network index.

Holds the labeled route polylines (loaded once at startup) and snaps raw map
clicks onto the nearest one. A linear scan is plenty: route collections are at
most a few thousand features.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from flightplanner.core.errors import DataIntegrityError, IntegrityIssue
from flightplanner.core.geo import GeoPoint, nearest_point_on_polyline, point_from_lnglat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteFeature:
    """A named polyline with at least two points."""

    points: tuple[GeoPoint, ...]
    name: str | None = None

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise DataIntegrityError(
                f"Route feature {self.name or '<unnamed>'} has {len(self.points)} usable point(s); need at least 2."
            )

    @classmethod
    def from_lnglat(cls, coordinates: Iterable[Any], *, name: str | None = None) -> "RouteFeature":
        """Build a feature from boundary `[lng, lat]` pairs, dropping invalid coordinates."""
        points = []
        for raw in coordinates:
            p = point_from_lnglat(raw)
            if p is None:
                logger.warning("Dropping invalid coordinate %r from route %s", raw, name or "<unnamed>")
                continue
            points.append(p)
        return cls(points=tuple(points), name=name)


@dataclass(frozen=True)
class RawRoute:
    """An unvalidated route as read from the route collection."""

    coordinates: list[Any]
    name: str | None = None


@dataclass(frozen=True)
class SnapResult:
    feature: RouteFeature
    projected: GeoPoint
    distance_km: float


class RouteNetworkIndex:
    """Read-only collection of route features with nearest-route snapping."""

    def __init__(self) -> None:
        self._features: list[RouteFeature] = []
        self._loaded = False

    @property
    def features(self) -> tuple[RouteFeature, ...]:
        return tuple(self._features)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._features)

    def load(self, features: Iterable[RouteFeature | RawRoute]) -> list[IntegrityIssue]:
        """Bulk-load features once; unusable raw routes are reported and skipped."""
        if self._loaded:
            raise RuntimeError("RouteNetworkIndex is read-only once loaded.")

        issues: list[IntegrityIssue] = []
        for item in features:
            if isinstance(item, RouteFeature):
                self._features.append(item)
                continue
            try:
                self._features.append(RouteFeature.from_lnglat(item.coordinates, name=item.name))
            except DataIntegrityError as e:
                logger.warning("Skipping route feature: %s", e)
                issues.append(
                    IntegrityIssue(
                        code="FEATURE_TOO_SHORT",
                        message=str(e),
                        sample=(item.name or "<unnamed>",),
                    )
                )
        self._loaded = True
        logger.info("Loaded %d route feature(s); %d rejected", len(self._features), len(issues))
        return issues

    def snap(self, p: GeoPoint, max_distance_km: float) -> SnapResult | None:
        """Return the closest feature projection strictly within `max_distance_km`.

        Features are scanned in load order and a candidate replaces the current
        best only on strict improvement, so the first feature wins ties.
        """
        best: SnapResult | None = None
        for feature in self._features:
            hit = nearest_point_on_polyline(p, feature.points)
            if hit is None or hit.distance_km >= max_distance_km:
                continue
            if best is None or hit.distance_km < best.distance_km:
                best = SnapResult(feature=feature, projected=hit.point, distance_km=hit.distance_km)
        return best
