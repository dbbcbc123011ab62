# hexfence/cells.py
"""
H3 side of the tool: the grid collaborator used by the boundary code and the
single-cell inspection (cell, center, parent, vertices, edge length, area, ring).
"""
import logging
import re
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Tuple

import h3

from hexfence.config import PARAMS, param
from hexfence.errors import BoundaryUnavailable
from hexfence.units import is_finite_pair

logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]

_CELL_RE = re.compile(r"^[0-9a-fA-F]{8,15}$")
_LATLNG_RE = re.compile(r"^-?\d+\.?\d*,\s*-?\d+\.?\d*$")


class H3Grid:
    """
    Grid collaborator backed by h3. The boundary code only calls
    cell_to_boundary; any object with the same method can stand in.
    Cell ids may be hex strings or their 64-bit integer form.
    """

    def cell_to_boundary(self, cell) -> List[LatLng]:
        if not is_valid_cell(cell):
            raise BoundaryUnavailable(cell, "not a valid H3 cell")
        try:
            boundary = h3.cell_to_boundary(as_cell_str(cell))
        except (h3.H3BaseException, ValueError, TypeError) as e:
            raise BoundaryUnavailable(cell, str(e)) from e
        return [(float(lat), float(lng)) for lat, lng in boundary]


def as_cell_str(cell):
    """Integer ids -> h3 hex string; anything else is passed through."""
    if isinstance(cell, int) and not isinstance(cell, bool):
        return h3.int_to_str(cell)
    return cell


def is_valid_cell(cell) -> bool:
    try:
        return bool(h3.is_valid_cell(as_cell_str(cell)))
    except (h3.H3BaseException, TypeError, ValueError, OverflowError):
        return False


# ---------- input checks ----------

def validate_inputs(lat, lng, res, ring=0):
    if not is_finite_pair(lat, lng):
        raise ValueError("latitude and longitude must be finite numbers")
    if lat < -90 or lat > 90:
        raise ValueError("latitude must be within -90..90")
    if lng < -180 or lng > 180:
        raise ValueError("longitude must be within -180..180")
    if res < PARAMS["MIN_RES"] or res > PARAMS["MAX_RES"]:
        raise ValueError(f"resolution must be within {PARAMS['MIN_RES']}..{PARAMS['MAX_RES']}")
    if ring < 0 or ring > PARAMS["MAX_RING"]:
        raise ValueError(f"ring must be within 0..{PARAMS['MAX_RING']}")


def parse_latlng(text: str) -> LatLng:
    """'37.775, -122.418' -> (37.775, -122.418)."""
    text = (text or "").strip()
    if not text:
        raise ValueError("enter a coordinate as lat,lng")
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        raise ValueError("expected format: lat,lng")
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        raise ValueError(f"not a coordinate: {text!r}") from None
    validate_inputs(lat, lng, PARAMS["MIN_RES"])
    return lat, lng


def looks_like_latlng(text: str) -> bool:
    return bool(_LATLNG_RE.match((text or "").strip()))


def parse_cell_id(text: str) -> str:
    """Hex cell id (8-15 hex chars) that h3 accepts as a cell."""
    text = (text or "").strip()
    if not _CELL_RE.match(text) or not is_valid_cell(text.lower()):
        raise ValueError(f"invalid H3 index: {text!r}")
    return text.lower()


def cell_center(cell: str) -> LatLng:
    lat, lng = h3.cell_to_latlng(cell)
    return float(lat), float(lng)


# ---------- inspection ----------

@dataclass
class CellReport:
    lat: float
    lng: float
    res: int
    ring: int
    cell: str
    center: LatLng
    parent: Optional[str]
    vertices: List[LatLng]
    edge_length_m: float
    area_m2: float
    ring_cells: List[str] = field(default_factory=list)

    @property
    def ring_count(self):
        return len(self.ring_cells)

    def vertices_text(self, digits=None):
        return format_vertices(self.vertices, digits)

    def to_dict(self):
        d = asdict(self)
        d["vertices_text"] = self.vertices_text()
        if self.ring > 0:
            d["ring_count"] = self.ring_count
        else:
            d.pop("ring_cells")
        return d


def format_vertices(points, digits=None) -> str:
    """Boundary as 'lng,lat;lng,lat;...' (lng first, as map tools paste it)."""
    n = param("COORD_DIGITS", digits)
    return ";".join(f"{lng:.{n}f},{lat:.{n}f}" for lat, lng in points)


def describe_cell(lat, lng, res, ring=0) -> CellReport:
    validate_inputs(lat, lng, res, ring)
    cell = h3.latlng_to_cell(lat, lng, res)
    parent = h3.cell_to_parent(cell, res - 1) if res > 0 else None
    ring_cells = list(h3.grid_disk(cell, ring)) if ring > 0 else []
    return CellReport(
        lat=lat, lng=lng, res=res, ring=ring,
        cell=cell,
        center=cell_center(cell),
        parent=parent,
        vertices=H3Grid().cell_to_boundary(cell),
        edge_length_m=float(h3.average_hexagon_edge_length(res, unit="m")),
        area_m2=float(h3.cell_area(cell, unit="m^2")),
        ring_cells=ring_cells,
    )


# ---------- cell sets ----------

def disk_cells(lat, lng, res, ring, hole=False) -> List[str]:
    """grid_disk around the cell containing (lat, lng); hole drops the center."""
    validate_inputs(lat, lng, res, ring)
    center = h3.latlng_to_cell(lat, lng, res)
    cells = list(h3.grid_disk(center, ring))
    if hole:
        cells = [c for c in cells if c != center]
    return cells


def cover_polygon(points, res) -> List[str]:
    """Cells whose centers fall inside the (lat, lng) ring, sorted."""
    pts = [(float(p[0]), float(p[1])) for p in points]
    if len(pts) >= 2 and pts[0] == pts[-1]:
        pts = pts[:-1]
    if len(pts) < 3:
        raise ValueError("polygon needs at least 3 distinct vertices")
    for lat, lng in pts:
        validate_inputs(lat, lng, res)
    cells = h3.polygon_to_cells(h3.LatLngPoly(pts), res)
    logger.debug("polygon_to_cells: %d cells at res %d", len(cells), res)
    return sorted(cells)


def cells_resolution(cells) -> Optional[int]:
    """Common resolution of a cell set, None for empty or mixed sets."""
    found = {h3.get_resolution(as_cell_str(c)) for c in cells if is_valid_cell(c)}
    return found.pop() if len(found) == 1 else None
