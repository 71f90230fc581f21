"""
core/geo.py – great-circle distance helpers.
Coordinates are validated by the request models before they get here.
"""
import math
from math import radians, sin, cos, atan2, sqrt
from typing import NamedTuple

from .. import config

EARTH_RADIUS_KM = 6371.0


class Coordinate(NamedTuple):
    lat: float
    lng: float


DEFAULT_LOCATION = Coordinate(config.DEFAULT_LATITUDE, config.DEFAULT_LONGITUDE)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance between two lat/lng points in kilometers (haversine)."""
    dlat = radians(lat2 - lat1)
    dlng = radians(lng2 - lng1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(a), sqrt(1 - a))


def round_distance(km: float) -> float:
    """Round to 0.1 km, halves away from zero (2.25 → 2.3)."""
    return math.copysign(math.floor(abs(km) * 10 + 0.5), km) / 10
