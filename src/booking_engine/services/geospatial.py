"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Coordinates

EARTH_RADIUS_MILES = 3959.0
METERS_PER_MILE = 1609.34
MILES_PER_METER = 0.000621371


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute great-circle distance in miles using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def distance_miles(origin: Coordinates, destination: Coordinates) -> float:
    return haversine_miles(origin.latitude, origin.longitude, destination.latitude, destination.longitude)


def meters_to_miles(meters: float) -> float:
    return meters * MILES_PER_METER


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE
