from dataclasses import dataclass

MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0


@dataclass(frozen=True)
class GeoPoint:
    """A point in decimal degrees. Range checks happen at the service boundary."""

    lat: float
    lng: float
