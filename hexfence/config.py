# hexfence/config.py
PARAMS = {
    "KEY_STEP": 1e-6,            # degrees, ~0.1 m at the equator
    "MAX_WALK_STEPS": 100_000,   # ceiling for one chain walk
    "MIN_LOOP_POINTS": 4,        # closed loop incl. the repeated first point
    "PROXIMITY_TOL_M": 5.0,      # fallback attribution, meters

    "MIN_RES": 0,
    "MAX_RES": 15,
    "MAX_RING": 10,
    "DEFAULT_RES": 9,
    "DEFAULT_RING": 0,
    "DEFAULT_LATLNG": (37.775, -122.418),
    "COORD_DIGITS": 6,

    "DXF_LAYER": "FENCE",
    "DXF_COLOR": 1,
    "DXF_LINEWEIGHT": 25,
}


def param(name, value=None):
    """Explicit value if given, otherwise the default from PARAMS."""
    return PARAMS[name] if value is None else value
