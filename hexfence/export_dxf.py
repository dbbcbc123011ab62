# hexfence/export_dxf.py
# Fence rings to DXF. Coordinates go out as x=lng, y=lat (degrees, unitless).
from typing import List, Tuple

import ezdxf

from hexfence.config import param

Point = Tuple[float, float]   # (lat, lng)

_INSUNITS = {
    "Unitless": 0, "Inches": 1, "Feet": 2, "Miles": 3, "Millimeters": 4,
    "Centimeters": 5, "Meters": 6, "Kilometers": 7
}


def _new_doc(insunits: str):
    u = _INSUNITS.get(insunits, 0)
    doc = ezdxf.new(setup=True)
    doc.header["$INSUNITS"] = u
    # 1 = metric, 0 = imperial
    doc.header["$MEASUREMENT"] = 1 if u in (0, 4, 5, 6, 7) else 0
    return doc


def _ensure_layer(doc, name, color, lineweight):
    if name not in doc.layers:
        doc.layers.add(name=name, color=color, lineweight=lineweight)


def save_dxf_layers(
    layers: List[List[Point]],
    path: str,
    layer: str = None,
    color: int = None,
    lineweight: int = None,
    insunits: str = "Unitless",
    numbered: bool = False,
) -> int:
    """
    One closed LWPOLYLINE per ring. With numbered=True ring i goes to
    layer '<layer>_<i>' (0 = outermost) so the layers can be toggled in CAD.
    Returns the number of polylines written.
    """
    layer = param("DXF_LAYER", layer)
    color = param("DXF_COLOR", color)
    lineweight = param("DXF_LINEWEIGHT", lineweight)

    doc = _new_doc(insunits)
    msp = doc.modelspace()
    n = 0
    for i, ring in enumerate(layers):
        pts = [(float(lng), float(lat)) for lat, lng in ring]
        if len(pts) >= 2 and pts[0] == pts[-1]:
            pts = pts[:-1]    # the closed flag does it
        if len(pts) < 2:
            continue
        name = f"{layer}_{i}" if numbered else layer
        _ensure_layer(doc, name, color, lineweight)
        msp.add_lwpolyline(pts, close=True,
                           dxfattribs={"layer": name, "color": color, "lineweight": lineweight})
        n += 1
    doc.saveas(path)
    return n


def save_dxf_chain(points: List[Point], path: str, layer: str = None) -> None:
    """Stitched fence chain as one open polyline (layers are not connected)."""
    layer = param("DXF_LAYER", layer)
    color = param("DXF_COLOR")
    lw = param("DXF_LINEWEIGHT")
    doc = _new_doc("Unitless")
    _ensure_layer(doc, layer, color, lw)
    msp = doc.modelspace()
    pts = [(float(lng), float(lat)) for lat, lng in points]
    if len(pts) >= 2:
        msp.add_lwpolyline(pts, close=False,
                           dxfattribs={"layer": layer, "color": color, "lineweight": lw})
    doc.saveas(path)
