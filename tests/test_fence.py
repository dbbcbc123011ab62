import json

import pytest

import hexfence.fence as fence_mod
from hexfence.errors import Unattributable
from hexfence.fence import (build_fence_layers, build_fence_chain, attribute_layer,
                            attribute_by_proximity, stitch_layers, loop_edge_keys, save_fence)
from hexfence.graph import build_index
from hexfence.outer import extract_outer_boundary
from hexfence.units import point_key

from conftest import PlanarHexGrid, disk, hex_id


def test_connected_strip_is_one_layer(grid):
    cells = [hex_id(0, 0), hex_id(1, 0), hex_id(2, 0)]
    res = build_fence_layers(cells, grid=grid)
    assert res.complete
    assert len(res.layers) == 1
    assert res.layers[0].loop == extract_outer_boundary(cells, grid=grid)
    assert res.chain == res.layers[0].loop
    assert res.remaining == []


def test_ring_with_hole_peels_two_layers(grid):
    cells = [c for c in disk(2) if c != hex_id(0, 0)]
    res = build_fence_layers(cells, grid=grid)
    assert res.complete
    assert [len(layer.loop) for layer in res.layers] == [31, 19]
    assert [len(layer.cells) for layer in res.layers] == [12, 6]
    assert res.remaining == []

    ring1 = set(disk(1)) - {hex_id(0, 0)}
    assert res.layers[1].cells == ring1


def test_filled_disk_layers_outer_to_inner(grid):
    res = build_fence_layers(disk(2), grid=grid)
    assert [len(layer.loop) for layer in res.layers] == [31, 19, 7]
    assert res.layers[2].cells == {hex_id(0, 0)}
    assert not any(layer.by_proximity for layer in res.layers)


def test_chain_concatenates_and_skips_repeats(grid):
    res = build_fence_layers(disk(2), grid=grid)
    assert len(res.chain) == sum(len(lp) for lp in res.loops)
    keys = [point_key(p) for p in res.chain]
    assert all(a != b for a, b in zip(keys, keys[1:]))


def test_stitch_drops_repeated_join_point():
    a = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (0.0, 0.0)]
    b = [(0.0, 0.0), (0.5, 0.5), (0.2, 0.7), (0.0, 0.0)]
    out = stitch_layers([a, b])
    assert len(out) == 7
    assert out[3] == (0.0, 0.0) and out[4] == (0.5, 0.5)


def test_empty_input():
    assert build_fence_chain([], grid=PlanarHexGrid()) == []
    res = build_fence_layers([], grid=PlanarHexGrid())
    assert res.complete and res.layers == []


def test_unresolvable_cells_do_not_block_completion():
    grid = PlanarHexGrid(bad={"x"})
    res = build_fence_layers([hex_id(0, 0), "x", hex_id(1, 0)], grid=grid)
    assert res.complete
    assert res.skipped == ["x"]
    assert len(res.layers) == 1
    assert len(res.chain) == 11


def test_only_bad_cells():
    res = build_fence_layers(["x", "y"], grid=PlanarHexGrid(bad={"x", "y"}))
    assert res.complete
    assert res.layers == [] and res.chain == []


def test_no_boundary_stops_with_partial_result():
    class Segments(PlanarHexGrid):
        def cell_to_boundary(self, cell):
            if cell.startswith("seg"):
                return [(0.0, 0.0), (0.0, 0.001)]
            return super().cell_to_boundary(cell)

    res = build_fence_layers(["seg1"], grid=Segments())
    assert res.stopped == "no_boundary"
    assert res.remaining == ["seg1"]
    assert res.chain == []


def test_unattributable_layer_stops(monkeypatch, grid):
    far = [(50.0, 50.0), (50.0, 50.1), (50.1, 50.1), (50.0, 50.0)]
    monkeypatch.setattr(fence_mod, "extract_outer_from_index", lambda *a, **k: far)
    res = build_fence_layers(disk(1), grid=grid)
    assert res.stopped == "unattributable"
    assert res.layers == []
    assert len(res.remaining) == 7


def test_attribution_by_exact_keys(grid):
    cells = disk(1)
    index = build_index(cells, grid)
    loop = extract_outer_boundary(cells, grid=grid)
    owners, ukeys, near = attribute_layer(index, loop)
    assert not near
    assert owners == set(cells) - {hex_id(0, 0)}
    assert ukeys == loop_edge_keys(loop)


def test_attribution_falls_back_to_proximity(grid):
    cells = [hex_id(0, 0), hex_id(1, 0)]
    index = build_index(cells, grid)
    # ~1 m north of the real boundary: keys miss, distances match
    loop = [(lat + 1e-5, lng) for lat, lng in extract_outer_boundary(cells, grid=grid)]
    assert not index.cells_for(loop_edge_keys(loop))

    owners, _, near = attribute_layer(index, loop, tolerance_m=5.0)
    assert near
    assert owners == set(cells)

    with pytest.raises(Unattributable):
        attribute_layer(index, loop, tolerance_m=0.1)


def test_proximity_matches_reversed_edges(grid):
    index = build_index([hex_id(0, 0)], grid)
    loop = [(lat, lng + 1e-5) for lat, lng in reversed(extract_outer_boundary([hex_id(0, 0)], grid=grid))]
    owners, ukeys = attribute_by_proximity(index, loop, tolerance_m=5.0)
    assert owners == {hex_id(0, 0)}
    assert len(ukeys) == 6


def test_save_fence_writes_layers(tmp_path, grid):
    out = tmp_path / "fence.json"
    meta = save_fence(disk(1), str(out), grid=grid)
    data = json.loads(out.read_text(encoding="utf-8"))
    assert meta["layers"] == 2
    assert meta["complete"] is True
    assert len(data["layers"]) == 2
    assert len(data["points"]) == meta["points"]
    assert data["params"]["meta"]["layer_cells"] == [6, 1]
