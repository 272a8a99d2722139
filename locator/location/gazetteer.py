"""In-memory gazetteer of named places.

The gazetteer is built once and never mutated afterwards, so a single
instance can be shared by every concurrent resolution without locking.
"""

import math
from collections.abc import Iterable, Iterator, Sequence

from locator.location.constants import LIBYA_BOUNDS, LIBYAN_CITIES
from locator.location.models import Coordinate, PlaceCandidate

# Parts shorter than this are too ambiguous to match a place name
MIN_MATCH_LENGTH = 3


class Gazetteer:
    """Read-only lookup table of places with coordinates and regions."""

    def __init__(
        self,
        places: Iterable[PlaceCandidate],
        bounds: dict[str, float] | None = None,
    ) -> None:
        self._places: tuple[PlaceCandidate, ...] = tuple(places)
        self._bounds = dict(bounds) if bounds else None

    @classmethod
    def default(cls) -> "Gazetteer":
        """Build the gazetteer of Libyan cities shipped with the package."""
        return cls(
            (
                PlaceCandidate(
                    name=name,
                    region=region,
                    coordinate=Coordinate(latitude=lat, longitude=lon),
                )
                for name, region, lat, lon in LIBYAN_CITIES
            ),
            bounds=LIBYA_BOUNDS,
        )

    @property
    def places(self) -> Sequence[PlaceCandidate]:
        return self._places

    def __len__(self) -> int:
        return len(self._places)

    def __iter__(self) -> Iterator[PlaceCandidate]:
        return iter(self._places)

    @staticmethod
    def degree_distance(a: Coordinate, b: Coordinate) -> float:
        """Euclidean distance in degree space (not geodesically corrected)."""
        return math.hypot(a.latitude - b.latitude, a.longitude - b.longitude)

    def nearest(self, coordinate: Coordinate) -> tuple[PlaceCandidate, float] | None:
        """Find the closest place to a coordinate.

        Args:
            coordinate: Point to look up

        Returns:
            Tuple of (place, distance in degrees) or None for an empty gazetteer
        """
        best: PlaceCandidate | None = None
        best_distance = math.inf
        for place in self._places:
            distance = self.degree_distance(coordinate, place.coordinate)
            if distance < best_distance:
                best, best_distance = place, distance
        if best is None:
            return None
        return best, best_distance

    def nearest_within(
        self, coordinate: Coordinate, threshold: float
    ) -> PlaceCandidate | None:
        """Return the nearest place only if it lies strictly inside ``threshold``."""
        found = self.nearest(coordinate)
        if found is None:
            return None
        place, distance = found
        return place if distance < threshold else None

    def match_name(
        self, parts: Iterable[str], ignore: Iterable[str] = ()
    ) -> PlaceCandidate | None:
        """Find the first place whose name loosely matches any of ``parts``.

        A part matches when, ignoring case, it contains the place name or the
        place name contains it. Parts that are too short or contain one of
        the ``ignore`` tokens are skipped. Places are tried in gazetteer order.
        """
        ignored = [token.casefold() for token in ignore]
        candidates = [
            part.casefold()
            for part in parts
            if len(part) >= MIN_MATCH_LENGTH
            and not any(token in part.casefold() for token in ignored)
        ]
        if not candidates:
            return None
        for place in self._places:
            name = place.name.casefold()
            if any(name in part or part in name for part in candidates):
                return place
        return None

    def search(self, query: str) -> list[PlaceCandidate]:
        """Case-insensitive substring search over place names and regions."""
        needle = query.strip().casefold()
        if not needle:
            return []
        return [
            place
            for place in self._places
            if needle in place.name.casefold() or needle in place.region.casefold()
        ]

    def covers(self, coordinate: Coordinate) -> bool:
        """Check whether a coordinate falls inside the gazetteer's country bounds."""
        if not self._bounds:
            return True
        return (
            self._bounds["min_lat"] <= coordinate.latitude <= self._bounds["max_lat"]
            and self._bounds["min_lon"]
            <= coordinate.longitude
            <= self._bounds["max_lon"]
        )


_gazetteer: Gazetteer | None = None


def get_gazetteer() -> Gazetteer:
    """Get or create the process-wide gazetteer.

    Returns:
        Gazetteer instance
    """
    global _gazetteer
    if _gazetteer is None:
        _gazetteer = Gazetteer.default()
    return _gazetteer
