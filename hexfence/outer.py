# hexfence/outer.py
import logging
from typing import Dict, List, Tuple

from hexfence.cells import H3Grid
from hexfence.config import param
from hexfence.cycles import find_closed_loops, largest_loop
from hexfence.export_dxf import save_dxf_layers
from hexfence.graph import EdgeIndex, build_index
from hexfence.io import save_points
from hexfence.units import point_key, signed_area_deg2, ring_length_m

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


# ---------- dedup ----------

def dedupe_points(points, step=None, close=True) -> List[Point]:
    """
    Collapse runs of consecutive points that share a coordinate key, order
    preserved. A vertex the ring legitimately visits twice (a pinch) stays.
    A trailing point keyed like the first is dropped; with close=True the
    first point is appended again (closed ring).
    """
    out: List[Point] = []
    last = None
    for p in points:
        k = point_key(p, step)
        if k == last:
            continue
        last = k
        out.append(p)
    if len(out) >= 2 and point_key(out[-1], step) == point_key(out[0], step):
        out.pop()
    if close and len(out) >= 2:
        out.append(out[0])
    return out


def unique_vertices(cells, grid=None, step=None) -> List[Point]:
    """Every distinct vertex of a cell set, in cell order (open list)."""
    grid = grid or H3Grid()
    index = build_index(cells, grid, step)
    seen = set()
    pts = []
    for cell in index.cells:
        for e in index.cell_edges[cell]:
            if e.a not in seen:
                seen.add(e.a)
                pts.append(e.pa)
    return pts


# ---------- outer boundary ----------

def boundary_loops(index: EdgeIndex, max_steps=None, min_points=None) -> List[List[Point]]:
    """
    Every closed loop built from edges of multiplicity 1.
    A shared edge shows up once per direction under one undirected key
    with two cells, so both directions drop out here.
    """
    edges = index.boundary_edges()
    if not edges:
        return []
    return find_closed_loops(edges, max_steps=max_steps, min_points=min_points)


def extract_outer_from_index(index: EdgeIndex, max_steps=None, min_points=None) -> List[Point]:
    loops = boundary_loops(index, max_steps, min_points)
    best = largest_loop(loops)
    if not best:
        return []
    if len(loops) > 1:
        logger.debug("%d loops, picked the one with %d points", len(loops), len(best))
    return dedupe_points(best, index.step)


def extract_outer_boundary(cells, grid=None, step=None, max_steps=None, min_points=None) -> List[Point]:
    """
    Outer boundary of the union of `cells` as a closed [(lat, lng), ...] ring.
    Empty list for empty input or when no loop closes. Never raises for
    unresolvable cells: they are skipped.

    Disjoint groups of cells are not reported separately; the ring with the
    most vertices wins.
    """
    grid = grid or H3Grid()
    index = build_index(cells, grid, step)
    if not index.cells:
        return []
    return extract_outer_from_index(index, max_steps, min_points)


# ---------- meta / save ----------

def boundary_meta(points) -> Dict:
    area = signed_area_deg2(points)
    return {
        "points": len(points),
        "signed_area_deg2": area,
        "orientation": "CCW" if area > 0 else "CW",
        "perimeter_m": ring_length_m(points),
    }


def save_outer(cells, out_json_path: str, out_dxf_path: str = None, grid=None,
               step=None, layer=None) -> Dict:
    """
    Outer boundary of `cells` to JSON (and optionally DXF). Returns the meta.
    """
    cells = list(cells)
    pts = extract_outer_boundary(cells, grid=grid, step=step)
    if not pts:
        meta = {"cells": len(cells), "points": 0, "method": "outer"}
        save_points(out_json_path, [], params={"meta": meta})
        return meta

    meta = boundary_meta(pts)
    meta.update({"cells": len(cells), "method": "outer"})
    save_points(out_json_path, pts, params={"meta": meta})
    if out_dxf_path:
        save_dxf_layers([pts], out_dxf_path, layer=param("DXF_LAYER", layer))
    return meta
