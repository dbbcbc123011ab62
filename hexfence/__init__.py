"""Outer boundaries and layered fences of H3 cell sets."""
from hexfence.errors import BoundaryUnavailable
from hexfence.outer import extract_outer_boundary, dedupe_points, unique_vertices
from hexfence.fence import build_fence_chain, build_fence_layers

__all__ = [
    "BoundaryUnavailable",
    "extract_outer_boundary",
    "dedupe_points",
    "unique_vertices",
    "build_fence_chain",
    "build_fence_layers",
]
