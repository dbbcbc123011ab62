# hexfence/fence.py
"""
Layered "honeycomb fence" of a cell set.

The outer ring of the remaining cells is extracted, the cells that own its
edges are peeled off, and the same is repeated on what is left. The rings,
outermost first, are concatenated into one chain. The chain is not one
continuous ring: consecutive layers are not joined by connector edges.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from hexfence.cells import H3Grid
from hexfence.config import param
from hexfence.errors import Unattributable
from hexfence.export_dxf import save_dxf_layers
from hexfence.graph import EdgeIndex, UndirKey, build_index, ordered_unique
from hexfence.io import save_points
from hexfence.outer import boundary_meta, extract_outer_from_index
from hexfence.units import haversine_m, point_key, undirected_key

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass
class FenceLayer:
    loop: List[Point]
    cells: Set[object]
    edge_keys: Set[UndirKey]
    by_proximity: bool = False


@dataclass
class FenceResult:
    layers: List[FenceLayer] = field(default_factory=list)
    remaining: List[object] = field(default_factory=list)
    skipped: List[object] = field(default_factory=list)
    stopped: Optional[str] = None    # None | "no_boundary" | "unattributable"
    chain: List[Point] = field(default_factory=list)

    @property
    def complete(self):
        return self.stopped is None

    @property
    def loops(self):
        return [layer.loop for layer in self.layers]


def loop_edge_keys(loop, step=None) -> Set[UndirKey]:
    keys = set()
    for a, b in zip(loop, loop[1:]):
        ka, kb = point_key(a, step), point_key(b, step)
        if ka != kb:
            keys.add(undirected_key(ka, kb))
    return keys


def attribute_by_proximity(index: EdgeIndex, loop, tolerance_m=None):
    """
    Match every loop edge against every indexed edge; a match needs both
    endpoints within tolerance_m, in either orientation.
    Returns (cells, matched undirected keys).
    """
    tol = param("PROXIMITY_TOL_M", tolerance_m)
    segs = index.segments()
    if not segs or len(loop) < 2:
        return set(), set()

    P = np.array([s[1] for s in segs], dtype=float)   # (n, 2)
    Q = np.array([s[2] for s in segs], dtype=float)
    A = np.array(loop[:-1], dtype=float)[:, None, :]   # (m, 1, 2)
    B = np.array(loop[1:], dtype=float)[:, None, :]

    def dist(X, Y):
        return haversine_m(X[..., 0], X[..., 1], Y[None, :, 0], Y[None, :, 1])

    same = (dist(A, P) <= tol) & (dist(B, Q) <= tol)
    flip = (dist(A, Q) <= tol) & (dist(B, P) <= tol)
    hit = np.any(same | flip, axis=0)

    ukeys = {segs[j][0] for j in np.flatnonzero(hit)}
    return index.cells_for(ukeys), ukeys


def attribute_layer(index: EdgeIndex, loop, tolerance_m=None):
    """
    Cells of `index` that own the loop's edges: exact key lookup first,
    proximity match when the keys miss. Raises Unattributable when both fail.
    """
    ukeys = loop_edge_keys(loop, index.step)
    cells = index.cells_for(ukeys)
    if cells:
        return cells, ukeys, False
    cells, near = attribute_by_proximity(index, loop, tolerance_m)
    if cells:
        logger.debug("layer attributed by proximity: %d cells", len(cells))
        return cells, near, True
    raise Unattributable(f"no cell owns any of {len(ukeys)} boundary edges")


def stitch_layers(loops, step=None) -> List[Point]:
    """Concatenate rings, skipping a point equal to the one just emitted."""
    out: List[Point] = []
    last = None
    for loop in loops:
        for p in loop:
            k = point_key(p, step)
            if k == last:
                continue
            out.append(p)
            last = k
    return out


def build_fence_layers(cells, grid=None, step=None, tolerance_m=None,
                       max_steps=None, min_points=None) -> FenceResult:
    """
    Peel boundary layers off `cells` until nothing is left or no further
    layer can be extracted or attributed. Never raises on a remainder that
    cannot be decomposed; `stopped` says why it ended early.
    """
    grid = grid or H3Grid()
    step = param("KEY_STEP", step)
    res = FenceResult(remaining=ordered_unique(cells))

    while res.remaining:
        index = build_index(res.remaining, grid, step)
        if index.skipped:
            # never resolvable, they would block `remaining` from emptying
            dead = set(index.skipped)
            res.skipped.extend(c for c in index.skipped if c not in res.skipped)
            res.remaining = [c for c in res.remaining if c not in dead]
            if not res.remaining:
                break

        loop = extract_outer_from_index(index, max_steps, min_points)
        if not loop:
            res.stopped = "no_boundary"
            logger.warning("fence: no boundary for %d remaining cells", len(res.remaining))
            break

        try:
            owners, ukeys, near = attribute_layer(index, loop, tolerance_m)
        except Unattributable as e:
            res.stopped = "unattributable"
            logger.warning("fence stopped after %d layers: %s", len(res.layers), e)
            break

        res.layers.append(FenceLayer(loop=loop, cells=owners, edge_keys=ukeys, by_proximity=near))
        res.remaining = [c for c in res.remaining if c not in owners]

    res.chain = stitch_layers(res.loops, step)
    return res


def build_fence_chain(cells, grid=None, **kw) -> List[Point]:
    """All boundary layers outer -> inner as one [(lat, lng), ...] chain."""
    return build_fence_layers(cells, grid=grid, **kw).chain


def fence_meta(res: FenceResult) -> Dict:
    return {
        "layers": len(res.layers),
        "points": len(res.chain),
        "complete": res.complete,
        "stopped": res.stopped,
        "remaining": len(res.remaining),
        "skipped": list(res.skipped),
        "layer_cells": [len(layer.cells) for layer in res.layers],
        "layer_points": [len(layer.loop) for layer in res.layers],
        "outer": boundary_meta(res.layers[0].loop) if res.layers else None,
        "method": "fence",
    }


def save_fence(cells, out_json_path: str, out_dxf_path: str = None, grid=None, **kw) -> Dict:
    """Fence chain + per-layer rings to JSON, rings to DXF (one layer each)."""
    cells = list(cells)
    res = build_fence_layers(cells, grid=grid, **kw)
    meta = fence_meta(res)
    meta["cells"] = len(cells)
    save_points(out_json_path, res.chain, params={"meta": meta}, layers=res.loops)
    if out_dxf_path and res.layers:
        save_dxf_layers(res.loops, out_dxf_path, numbered=True)
    return meta
