import math
from datetime import date

EARTH_RADIUS_MILES = 3963.0


def nights_between(check_in: date, check_out: date) -> int:
    """Number of nights in [check_in, check_out); dates are whole days, so ceil is exact."""
    return (check_out - check_in).days


def ranges_overlap(
    start_a: date, end_a: date, start_b: date, end_b: date
) -> bool:
    """Half-open overlap: a checkout day may be the next guest's checkin day."""
    return start_a < end_b and start_b < end_a


def distance_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(a))


def bounding_box(lat: float, lng: float, radius_miles: float) -> tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lng, max_lng) enclosing the circle; used as a SQL pre-filter."""
    angular = radius_miles / EARTH_RADIUS_MILES
    lat_delta = math.degrees(angular)
    min_lat, max_lat = lat - lat_delta, lat + lat_delta

    if max_lat >= 90 or min_lat <= -90 or angular >= math.pi / 2:
        # Circle reaches a pole; every longitude qualifies
        return max(min_lat, -90.0), min(max_lat, 90.0), -180.0, 180.0

    lng_delta = math.degrees(math.asin(math.sin(angular) / math.cos(math.radians(lat))))
    return min_lat, max_lat, lng - lng_delta, lng + lng_delta


def longitude_ranges(min_lng: float, max_lng: float) -> list[tuple[float, float]]:
    """Split a longitude span that crosses the ±180° meridian into in-range pieces."""
    if max_lng - min_lng >= 360:
        return [(-180.0, 180.0)]
    if min_lng < -180:
        return [(min_lng + 360, 180.0), (-180.0, max_lng)]
    if max_lng > 180:
        return [(min_lng, 180.0), (-180.0, max_lng - 360)]
    return [(min_lng, max_lng)]
