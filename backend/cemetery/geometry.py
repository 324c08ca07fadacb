"""
Planar helpers for cemetery maps.

Points are [lat, lng] pairs as drawn on the admin map.
"""
import math

METERS_PER_DEGREE = 111000
DEFAULT_CENTER = (14.6760, 121.0437)


def polygon_area(points):
    """Shoelace area of a simple polygon, in the units of its coordinates"""
    n = len(points)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i][0] * points[j][1]
        area -= points[j][0] * points[i][1]
    return abs(area) / 2


def cemetery_center(points):
    """Midpoint of the bounding box, or the city default for an empty boundary"""
    if not points:
        return DEFAULT_CENTER
    lats = [p[0] for p in points]
    lngs = [p[1] for p in points]
    return ((min(lats) + max(lats)) / 2, (min(lngs) + max(lngs)) / 2)


def plot_boundary(center_lat, center_lng, length=2, width=1):
    """
    Rectangle of length x width meters around a plot center.
    Corners: top-left, top-right, bottom-right, bottom-left.
    """
    lat_offset = (length / 2) / METERS_PER_DEGREE
    lng_offset = (width / 2) / (METERS_PER_DEGREE * math.cos(math.radians(center_lat)))
    return [
        [center_lat + lat_offset, center_lng - lng_offset],
        [center_lat + lat_offset, center_lng + lng_offset],
        [center_lat - lat_offset, center_lng + lng_offset],
        [center_lat - lat_offset, center_lng - lng_offset],
    ]


def polygon_area_sq_meters(points):
    """Area of a lat/lng polygon projected onto a local equirectangular plane"""
    if len(points) < 3:
        return 0.0
    ref_lat, ref_lng = cemetery_center(points)
    lng_scale = METERS_PER_DEGREE * math.cos(math.radians(ref_lat))
    projected = [((p[0] - ref_lat) * METERS_PER_DEGREE, (p[1] - ref_lng) * lng_scale) for p in points]
    return polygon_area(projected)


def is_valid_boundary(points):
    """A boundary is a list of [lat, lng] numeric pairs within range"""
    if not isinstance(points, (list, tuple)):
        return False
    for point in points:
        if not isinstance(point, (list, tuple)) or len(point) != 2:
            return False
        lat, lng = point
        if isinstance(lat, bool) or isinstance(lng, bool):
            return False
        if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
            return False
        if not -90 <= lat <= 90 or not -180 <= lng <= 180:
            return False
    return True
