# app.py - H3 cell lookup and fence preview (streamlit run app.py)

import json
import tempfile
import time
from pathlib import Path

import streamlit as st

from hexfence.cells import (describe_cell, disk_cells, cover_polygon, parse_latlng,
                            parse_cell_id, cell_center, looks_like_latlng)
from hexfence.config import PARAMS
from hexfence.export_dxf import save_dxf_layers
from hexfence.fence import build_fence_layers, fence_meta
from hexfence.io import parse_cells, parse_polygon, points_payload
from hexfence.outer import extract_outer_boundary, boundary_meta, unique_vertices
from hexfence.plot import cell_rings, plot_preview

# ---------------------- helpers ----------------------


def _search_to_latlng(query: str):
    """Search box: 'lat,lng' or an H3 index -> (lat, lng); None if neither."""
    q = (query or "").strip()
    if not q:
        return None
    if looks_like_latlng(q):
        return parse_latlng(q)
    return cell_center(parse_cell_id(q))


def _dxf_bytes(layers, numbered):
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "fence.dxf"
        save_dxf_layers(layers, str(path), numbered=numbered)
        return path.read_bytes()


def _cells_from_source(source, lat, lng, res, ring, hole, uploaded):
    if source == "disk":
        return disk_cells(lat, lng, res, ring, hole=hole)
    if uploaded is None:
        return []
    raw = uploaded.getvalue().decode("utf-8")
    if source == "polygon":
        return cover_polygon(parse_polygon(json.loads(raw)), res)
    return parse_cells(raw)


# ---------------------- UI ----------------------

st.set_page_config(page_title="H3 fence", layout="wide")
st.title("⬢ H3 index and fence")

lat0, lng0 = PARAMS["DEFAULT_LATLNG"]
if "latlng" not in st.session_state:
    st.session_state.latlng = f"{lat0},{lng0}"

with st.sidebar:
    st.header("⚙️ Cell")
    query = st.text_input("Search: lat,lng or H3 index", value="",
                          help="A coordinate like 37.775,-122.418 or an index of 8-15 hex characters.")
    if query:
        try:
            found = _search_to_latlng(query)
            if found:
                st.session_state.latlng = f"{found[0]:.6f},{found[1]:.6f}"
        except ValueError as e:
            st.warning(str(e))

    latlng_text = st.text_input("Coordinate (lat,lng)", key="latlng")
    res = st.number_input("Resolution", min_value=PARAMS["MIN_RES"], max_value=PARAMS["MAX_RES"],
                          value=PARAMS["DEFAULT_RES"], step=1)
    ring = st.number_input("Ring (grid_disk k)", min_value=0, max_value=PARAMS["MAX_RING"],
                           value=PARAMS["DEFAULT_RING"], step=1)

    st.markdown("---")
    st.subheader("🧩 Boundary")
    source = st.selectbox("Cell set", ["disk", "polygon", "cells"], index=0,
                          help="• disk: the ring around the coordinate\n"
                               "• polygon: JSON [[lat, lng], ...] covered with polygon_to_cells\n"
                               "• cells: JSON or text list of cell ids")
    hole = st.checkbox("Drop the center cell (hole)", value=False)
    mode = st.selectbox("Method", ["fence", "outer"], index=0,
                        help="• outer: the single outer ring\n• fence: all rings, outer to inner")
    tolerance = st.number_input("Proximity tolerance (m)", value=float(PARAMS["PROXIMITY_TOL_M"]),
                                min_value=0.0, step=0.5)
    show_points = st.checkbox("Show fence vertices", value=False)
    lw_fence = st.slider("Fence line width", 1.0, 4.0, 2.0, 0.1)

uploaded = None
if source != "disk":
    uploaded = st.file_uploader("Upload JSON / text", type=["json", "txt", "csv"])

# --- single cell report ---
try:
    lat, lng = parse_latlng(latlng_text)
    report = describe_cell(lat, lng, int(res), int(ring))
except ValueError as e:
    st.error(str(e))
    st.stop()

c1, c2, c3 = st.columns(3)
c1.metric("Cell", report.cell)
c2.metric("Edge length", f"{report.edge_length_m:.2f} m")
c3.metric("Area", f"{report.area_m2:.2f} m²")
st.write({
    "center": f"{report.center[1]:.6f},{report.center[0]:.6f}",
    "parent": report.parent or "none",
})
st.code(report.vertices_text(), language=None)
if report.ring > 0:
    with st.expander(f"Ring cells: {report.ring_count}"):
        st.code(",".join(report.ring_cells), language=None)

run = st.button("▶️ Build boundary")

if run:
    with st.spinner("Processing..."):
        t0 = time.time()
        try:
            cells = _cells_from_source(source, lat, lng, int(res), int(ring), hole, uploaded)
        except ValueError as e:
            st.error(str(e))
            st.stop()
        if not cells:
            st.error("No cells to process.")
            st.stop()

        if mode == "outer":
            pts = extract_outer_boundary(cells)
            layers = [pts] if pts else []
            meta = boundary_meta(pts) if pts else {"points": 0}
            meta.update({"cells": len(cells), "method": "outer"})
            payload = points_payload(pts, params={"meta": meta})
        else:
            res_f = build_fence_layers(cells, tolerance_m=tolerance)
            layers = res_f.loops
            meta = fence_meta(res_f)
            meta["cells"] = len(cells)
            payload = points_payload(res_f.chain, params={"meta": meta}, layers=layers)
            if not res_f.complete:
                st.warning(f"Partial fence: stopped ({res_f.stopped}) with "
                           f"{len(res_f.remaining)} cells left.")

    st.success(f"Done in {time.time() - t0:.2f} s")
    st.write({"meta": meta})

    png = plot_preview(cell_rings(cells), layers, title=f"{len(cells)} cells, {mode}",
                       lw_fence=lw_fence, show_points=show_points)
    st.image(png, caption="Preview", width="stretch")

    d1, d2, d3 = st.columns(3)
    with d1:
        st.download_button("⬇️ JSON", data=json.dumps(payload, ensure_ascii=False, indent=2),
                           file_name=f"{mode}.json", mime="application/json")
    with d2:
        st.download_button("⬇️ DXF", data=_dxf_bytes(layers, numbered=(mode == "fence")),
                           file_name=f"{mode}.dxf", mime="application/dxf")
    with d3:
        st.download_button("⬇️ PNG", data=png, file_name=f"{mode}.png", mime="image/png")

    with st.expander("All vertices of the cell set"):
        verts = unique_vertices(cells)
        st.write(f"{len(verts)} distinct vertices")
        st.code(";".join(f"{p[1]:.6f},{p[0]:.6f}" for p in verts), language=None)
