# hexfence/plot.py
from io import BytesIO

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from hexfence.cells import H3Grid
from hexfence.errors import BoundaryUnavailable


def cell_rings(cells, grid=None):
    """Closed boundary per cell, unresolvable cells left out."""
    grid = grid or H3Grid()
    rings = []
    for c in cells:
        try:
            b = list(grid.cell_to_boundary(c))
        except BoundaryUnavailable:
            continue
        if len(b) >= 2:
            rings.append(b + [b[0]])
    return rings


def plot_preview(cell_boundaries, layers=(), title=None, lw_cells=0.6, lw_fence=2.0,
                 show_points=False):
    """
    PNG bytes: thin cell outlines plus the fence rings on top
    (x = lng, y = lat). Returns bytes for st.image / download.
    """
    fig, ax = plt.subplots(figsize=(7, 7))
    for ring in cell_boundaries:
        ax.plot([p[1] for p in ring], [p[0] for p in ring],
                linewidth=lw_cells, color="0.6")

    cmap = plt.get_cmap("viridis")
    n = max(1, len(layers))
    for i, loop in enumerate(layers):
        if len(loop) < 2:
            continue
        xs = [p[1] for p in loop]
        ys = [p[0] for p in loop]
        ax.plot(xs, ys, linewidth=lw_fence, color=cmap(i / n), label=f"layer {i}")
        if show_points:
            ax.scatter(xs, ys, s=6, color=cmap(i / n))

    ax.set_aspect("equal", adjustable="datalim")
    ax.grid(True, linewidth=0.2)
    ax.set_xlabel("lng")
    ax.set_ylabel("lat")
    if layers:
        ax.legend(loc="best", fontsize=7)
    if title:
        ax.set_title(title)
    ax.margins(0.05)

    buf = BytesIO()
    plt.tight_layout()
    fig.savefig(buf, format="png", dpi=150)
    plt.close(fig)
    buf.seek(0)
    return buf.getvalue()
