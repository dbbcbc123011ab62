import math

import pytest

from hexfence.errors import BoundaryUnavailable


class PlanarHexGrid:
    """
    Pointy-top hexagons on axial (q, r) coordinates, ids "q,r".
    Vertices are computed per cell from its own center, so neighbours share
    vertices only up to float noise, like a real grid library.
    """

    def __init__(self, size=0.01, origin=(10.0, 20.0), bad=()):
        self.size = size
        self.origin = origin
        self.bad = set(bad)
        self.calls = 0

    def center(self, q, r):
        x = self.size * math.sqrt(3) * (q + r / 2.0)
        y = self.size * 1.5 * r
        return (self.origin[0] + y, self.origin[1] + x)

    def cell_to_boundary(self, cell):
        self.calls += 1
        if cell in self.bad:
            raise BoundaryUnavailable(cell, "marked bad")
        try:
            q, r = (int(v) for v in cell.split(","))
        except (AttributeError, ValueError):
            raise BoundaryUnavailable(cell, "not an axial id") from None
        lat, lng = self.center(q, r)
        pts = []
        for i in range(6):
            a = math.radians(60 * i - 30)
            pts.append((lat + self.size * math.sin(a), lng + self.size * math.cos(a)))
        return pts


class SquareGrid:
    """Unit squares, id (row, col) -> corners (lat=row.., lng=col..), CCW."""

    def cell_to_boundary(self, cell):
        r, c = cell
        return [(float(r), float(c)), (float(r), float(c + 1)),
                (float(r + 1), float(c + 1)), (float(r + 1), float(c))]


def hex_id(q, r):
    return f"{q},{r}"


def disk(k, q0=0, r0=0):
    out = []
    for q in range(-k, k + 1):
        for r in range(-k, k + 1):
            if max(abs(q), abs(r), abs(q + r)) <= k:
                out.append(hex_id(q0 + q, r0 + r))
    return out


@pytest.fixture
def grid():
    return PlanarHexGrid()


@pytest.fixture
def sf_cell():
    import h3
    return h3.latlng_to_cell(37.775, -122.418, 9)
