# hexfence/units.py
import math

import numpy as np

from hexfence.config import param

EARTH_RADIUS_M = 6371008.8


def coord_key(lat, lng, step=None):
    """Quantize (lat, lng) to an integer pair; points closer than step/2 collide."""
    s = param("KEY_STEP", step)
    return (int(round(lat / s)), int(round(lng / s)))


def point_key(p, step=None):
    return coord_key(p[0], p[1], step)


def undirected_key(k1, k2):
    """Direction-free edge identity."""
    return (k1, k2) if k1 <= k2 else (k2, k1)


def same_point(a, b, step=None):
    return point_key(a, step) == point_key(b, step)


def haversine_m(lat1, lng1, lat2, lng2):
    """Great-circle distance in meters. Accepts scalars or numpy arrays."""
    p1 = np.radians(lat1); p2 = np.radians(lat2)
    dp = p2 - p1
    dl = np.radians(lng2) - np.radians(lng1)
    h = np.sin(dp / 2.0) ** 2 + np.cos(p1) * np.cos(p2) * np.sin(dl / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(h, 0.0, 1.0)))


def signed_area_deg2(points):
    """Shoelace area in (lng, lat) degree space; >0 means CCW."""
    k = len(points)
    if k < 3:
        return 0.0
    s = 0.0
    for i in range(k):
        y1, x1 = points[i]
        y2, x2 = points[(i + 1) % k]
        s += x1 * y2 - x2 * y1
    return 0.5 * s


def ring_length_m(points):
    total = 0.0
    for a, b in zip(points, points[1:]):
        total += float(haversine_m(a[0], a[1], b[0], b[1]))
    return total


def is_finite_pair(lat, lng):
    return math.isfinite(lat) and math.isfinite(lng)
