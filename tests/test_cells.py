import h3
import pytest

from hexfence.cells import (H3Grid, describe_cell, parse_latlng, parse_cell_id, disk_cells,
                            cover_polygon, format_vertices, cells_resolution, looks_like_latlng,
                            validate_inputs)
from hexfence.errors import BoundaryUnavailable
from hexfence.fence import build_fence_layers
from hexfence.outer import extract_outer_boundary


def test_describe_cell_fields(sf_cell):
    r = describe_cell(37.775, -122.418, 9)
    assert r.cell == sf_cell
    assert r.parent == h3.cell_to_parent(sf_cell, 8)
    assert len(r.vertices) == 6
    assert r.edge_length_m > 0 and r.area_m2 > 0
    assert r.ring_cells == []
    d = r.to_dict()
    assert "ring_cells" not in d
    assert d["vertices_text"].count(";") == 5


def test_describe_cell_with_ring():
    r = describe_cell(37.775, -122.418, 9, ring=2)
    assert r.ring_count == 19
    assert r.to_dict()["ring_count"] == 19


def test_describe_cell_res0_has_no_parent():
    assert describe_cell(0.0, 0.0, 0).parent is None


@pytest.mark.parametrize("lat,lng,res,ring", [
    (91.0, 0.0, 5, 0),
    (0.0, -181.0, 5, 0),
    (0.0, 0.0, 16, 0),
    (0.0, 0.0, 5, 11),
    (float("nan"), 0.0, 5, 0),
])
def test_validate_inputs_rejects(lat, lng, res, ring):
    with pytest.raises(ValueError):
        validate_inputs(lat, lng, res, ring)


def test_parse_latlng():
    assert parse_latlng(" 37.775, -122.418 ") == (37.775, -122.418)
    for bad in ["", "37.775", "a,b", "1,2,3", "95,10"]:
        with pytest.raises(ValueError):
            parse_latlng(bad)


def test_looks_like_latlng():
    assert looks_like_latlng("37.775,-122.418")
    assert not looks_like_latlng("8928308280fffff")


def test_parse_cell_id(sf_cell):
    assert parse_cell_id(sf_cell.upper()) == sf_cell
    with pytest.raises(ValueError):
        parse_cell_id("xyz")
    with pytest.raises(ValueError):
        parse_cell_id("ffffffffffffff")


def test_format_vertices_is_lng_first():
    assert format_vertices([(1.5, 2.25)], digits=2) == "2.25,1.50"


def test_h3grid_bad_cell_raises():
    with pytest.raises(BoundaryUnavailable) as ei:
        H3Grid().cell_to_boundary("not-a-cell")
    assert ei.value.cell == "not-a-cell"


def test_h3_single_and_pair(sf_cell):
    out = extract_outer_boundary([sf_cell])
    assert len(out) == 7
    neighbor = next(c for c in h3.grid_ring(sf_cell, 1))
    assert len(extract_outer_boundary([sf_cell, neighbor])) == 11


def test_h3_disk_perimeter(sf_cell):
    assert len(extract_outer_boundary(h3.grid_disk(sf_cell, 1))) == 19


def test_h3_bad_id_among_three(sf_cell):
    neighbor = next(c for c in h3.grid_ring(sf_cell, 1))
    out = extract_outer_boundary([sf_cell, "zzzz", neighbor])
    assert len(out) == 11


def test_h3_fence_with_hole():
    cells = disk_cells(37.775, -122.418, 9, 2, hole=True)
    assert len(cells) == 18
    res = build_fence_layers(cells)
    assert res.complete
    assert [len(layer.loop) for layer in res.layers] == [31, 19]


def test_cover_polygon_resolution():
    square = [(37.77, -122.43), (37.77, -122.41), (37.78, -122.41), (37.78, -122.43)]
    cells = cover_polygon(square, 9)
    assert cells and cells == sorted(cells)
    assert cells_resolution(cells) == 9
    assert extract_outer_boundary(cells)


def test_cover_polygon_needs_three_points():
    with pytest.raises(ValueError):
        cover_polygon([(0.0, 0.0), (1.0, 1.0)], 5)


def test_cells_resolution_mixed(sf_cell):
    assert cells_resolution([sf_cell, h3.cell_to_parent(sf_cell, 8)]) is None
    assert cells_resolution([]) is None


def test_integer_cell_ids_are_accepted(sf_cell):
    ints = [h3.str_to_int(c) for c in h3.grid_disk(sf_cell, 1)]
    out = extract_outer_boundary(ints)
    assert len(out) == 19
    assert H3Grid().cell_to_boundary(ints[0]) == H3Grid().cell_to_boundary(h3.int_to_str(ints[0]))
    assert cells_resolution(ints) == 9


def test_bad_integer_cell_id():
    with pytest.raises(BoundaryUnavailable):
        H3Grid().cell_to_boundary(12345)
