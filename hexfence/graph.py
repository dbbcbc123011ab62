# hexfence/graph.py
import logging
from collections import defaultdict
from typing import Dict, List, NamedTuple, Set, Tuple

from hexfence.config import param
from hexfence.errors import BoundaryUnavailable
from hexfence.units import point_key, undirected_key

logger = logging.getLogger(__name__)

Key = Tuple[int, int]
UndirKey = Tuple[Key, Key]


class Edge(NamedTuple):
    a: Key              # start key
    b: Key              # end key
    pa: Tuple[float, float]
    pb: Tuple[float, float]
    cell: object

    @property
    def ukey(self) -> UndirKey:
        return undirected_key(self.a, self.b)


def ordered_unique(items):
    """
    Drop repeats, keep first-seen order. Sets carry no order of their own
    (str hashing is salted per process), so they are sorted by str(id) to
    keep tie-breaks stable; pass a list when the order matters.
    """
    if isinstance(items, (set, frozenset)):
        items = sorted(items, key=str)
    return list(dict.fromkeys(items))


class EdgeIndex:
    """
    Edges of one cell set, built per call and thrown away afterwards.
      cell_edges[cell]     -> [Edge] in the cell's boundary order
      undir_to_cells[ukey] -> {cell}; len() is the edge multiplicity
      points[key]          -> first (lat, lng) seen for that key
    """

    def __init__(self, step=None):
        self.step = param("KEY_STEP", step)
        self.cells: List[object] = []
        self.cell_edges: Dict[object, List[Edge]] = {}
        self.undir_to_cells: Dict[UndirKey, Set[object]] = defaultdict(set)
        self.points: Dict[Key, Tuple[float, float]] = {}
        self.skipped: List[object] = []

    def __len__(self):
        return len(self.cells)

    def add_cell(self, cell, boundary):
        pts = [(float(p[0]), float(p[1])) for p in boundary]
        if len(pts) < 2:
            logger.warning("cell %s: degenerate boundary (%d vertices), skipped", cell, len(pts))
            self.skipped.append(cell)
            return False

        keys = [point_key(p, self.step) for p in pts]
        edges = []
        k = len(pts)
        for i in range(k):
            j = (i + 1) % k
            if keys[i] == keys[j]:
                continue  # zero length after quantization
            edges.append(Edge(keys[i], keys[j], pts[i], pts[j], cell))

        for key, p in zip(keys, pts):
            self.points.setdefault(key, p)
        for e in edges:
            self.undir_to_cells[e.ukey].add(cell)
        self.cell_edges[cell] = edges
        self.cells.append(cell)
        return True

    def multiplicity(self, ukey) -> int:
        cells = self.undir_to_cells.get(ukey)
        return len(cells) if cells else 0

    def edges(self):
        for cell in self.cells:
            yield from self.cell_edges[cell]

    def boundary_edges(self) -> List[Edge]:
        """Directed edges owned by exactly one cell, in indexing order."""
        return [e for e in self.edges() if self.multiplicity(e.ukey) == 1]

    def cells_for(self, ukeys) -> Set[object]:
        out = set()
        for uk in ukeys:
            out.update(self.undir_to_cells.get(uk, ()))
        return out

    def segments(self):
        """[(ukey, pa, pb)] one per undirected edge, first direction seen."""
        seen = {}
        for e in self.edges():
            if e.ukey not in seen:
                seen[e.ukey] = (e.ukey, e.pa, e.pb)
        return list(seen.values())


def build_index(cells, grid, step=None) -> EdgeIndex:
    """
    Pull every cell's boundary from the grid and index its edges.
    A cell the grid cannot resolve is logged and skipped; the batch goes on.
    """
    index = EdgeIndex(step)
    for cell in ordered_unique(cells):
        try:
            boundary = grid.cell_to_boundary(cell)
        except BoundaryUnavailable as e:
            logger.warning("skip cell: %s", e)
            index.skipped.append(cell)
            continue
        index.add_cell(cell, boundary)
    return index
