# hexfence/io.py
import json
import re


def _as_latlng(item):
    # expect [lat, lng]
    if (isinstance(item, (list, tuple)) and len(item) == 2 and
            all(isinstance(v, (int, float)) for v in item)):
        return (float(item[0]), float(item[1]))
    return None


def _is_cell_list(lst):
    return isinstance(lst, list) and all(isinstance(c, str) for c in lst)


def parse_cells_text(text):
    """Cell ids separated by commas, spaces or newlines."""
    return [t for t in re.split(r"[\s,;]+", text.strip()) if t]


def parse_cells(raw: str):
    """
    Cell list from file contents. Accepts:
      - {"cells": ["89...", ...]}
      - ["89...", ...]
      - plain text, one id per line or comma separated
    """
    raw = raw.strip()
    if not raw:
        return []
    if raw[0] in "[{":
        data = json.loads(raw)
        if isinstance(data, dict) and "cells" in data:
            data = data["cells"]
        if not _is_cell_list(data):
            raise ValueError("expected a list of cell ids")
        return [c.strip() for c in data if c.strip()]
    return parse_cells_text(raw)


def load_cells(path):
    with open(path, "r", encoding="utf-8") as f:
        return parse_cells(f.read())


def parse_polygon(data):
    """
    Polygon ring of (lat, lng) from:
      - {"polygon": [[lat, lng], ...]}
      - [[lat, lng], ...]
    """
    if isinstance(data, dict) and "polygon" in data:
        data = data["polygon"]
    if not isinstance(data, list):
        raise ValueError("expected a list of [lat, lng] pairs")
    pts = [_as_latlng(p) for p in data]
    if len(pts) < 3 or any(p is None for p in pts):
        raise ValueError("polygon needs at least 3 [lat, lng] pairs")
    return pts


def load_polygon(path):
    with open(path, "r", encoding="utf-8") as f:
        return parse_polygon(json.load(f))


def points_payload(points, params=None, layers=None):
    payload = {"points": [[p[0], p[1]] for p in points]}
    if layers is not None:
        payload["layers"] = [[[p[0], p[1]] for p in loop] for loop in layers]
    if params:
        payload["params"] = params
    return payload


def save_points(path, points, params=None, layers=None):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(points_payload(points, params, layers), f, ensure_ascii=False, indent=2)
