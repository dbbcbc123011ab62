# main.py - CLI for cell inspection and outer boundary / fence export
import argparse
import json
import logging
import os
import sys
from pathlib import Path

from hexfence.cells import describe_cell, disk_cells, cover_polygon, parse_latlng, cells_resolution
from hexfence.config import PARAMS
from hexfence.export_dxf import save_dxf_layers
from hexfence.fence import build_fence_layers, fence_meta
from hexfence.io import load_cells, load_polygon, save_points
from hexfence.outer import extract_outer_boundary, boundary_meta
from hexfence.plot import cell_rings, plot_preview
from hexfence.prof import Prof

prof = Prof(enabled=False)


def _collect_cells(args):
    """
    Cell set from exactly one source:
      --cells FILE | --polygon FILE --res R | --latlng LAT,LNG --res R [--ring K] [--hole]
    Returns (cells, stem) where stem names the output files.
    """
    if args.cells:
        return load_cells(args.cells), Path(args.cells).stem
    if args.polygon:
        return cover_polygon(load_polygon(args.polygon), args.res), Path(args.polygon).stem
    lat, lng = parse_latlng(args.latlng)
    stem = f"disk_r{args.res}_k{args.ring}" + ("_hole" if args.hole else "")
    return disk_cells(lat, lng, args.res, args.ring, hole=args.hole), stem


def run_cell(args):
    lat, lng = parse_latlng(args.latlng)
    report = describe_cell(lat, lng, args.res, args.ring)
    print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    return 0


def run_fence(args):
    with prof.section("cells"):
        cells, stem = _collect_cells(args)
    if not cells:
        print("WARN: no cells to process")

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    step = args.key_step

    if args.mode == "outer":
        with prof.section("outer"):
            pts = extract_outer_boundary(cells, step=step)
        layers = [pts] if pts else []
        meta = boundary_meta(pts) if pts else {"points": 0}
        meta["method"] = "outer"
        chain = pts
    else:
        with prof.section("fence"):
            res = build_fence_layers(cells, step=step, tolerance_m=args.tolerance)
        layers = res.loops
        meta = fence_meta(res)
        chain = res.chain
    meta.update({"cells": len(cells), "res": cells_resolution(cells)})

    out_json = out / f"{stem}_{args.mode}.json"
    save_points(out_json, chain, params={"meta": meta},
                layers=layers if args.mode == "fence" else None)
    print("saved:", out_json)

    if args.dxf:
        out_dxf = out / f"{stem}_{args.mode}.dxf"
        with prof.section("dxf"):
            save_dxf_layers(layers, str(out_dxf), numbered=(args.mode == "fence"))
        print("saved:", out_dxf)

    if args.png:
        out_png = out / f"{stem}_{args.mode}.png"
        with prof.section("png"):
            png = plot_preview(cell_rings(cells), layers, title=f"{stem} ({args.mode})")
            out_png.write_bytes(png)
        print("saved:", out_png)

    print(json.dumps(meta, ensure_ascii=False, indent=2))
    return 0


def build_parser():
    p = argparse.ArgumentParser(prog="hexfence", description="H3 cell inspection and fence builder")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    lat0, lng0 = PARAMS["DEFAULT_LATLNG"]
    c = sub.add_parser("cell", help="cell, parent, vertices, edge length and area for a point")
    c.add_argument("--latlng", default=f"{lat0},{lng0}", help="lat,lng")
    c.add_argument("--res", type=int, default=PARAMS["DEFAULT_RES"])
    c.add_argument("--ring", type=int, default=PARAMS["DEFAULT_RING"])
    c.set_defaults(func=run_cell)

    f = sub.add_parser("fence", help="outer boundary or layered fence of a cell set")
    src = f.add_mutually_exclusive_group()
    src.add_argument("--cells", help="JSON/text file with cell ids")
    src.add_argument("--polygon", help="JSON file with a [lat, lng] ring")
    f.add_argument("--latlng", default=f"{lat0},{lng0}", help="disk center lat,lng")
    f.add_argument("--res", type=int, default=PARAMS["DEFAULT_RES"])
    f.add_argument("--ring", type=int, default=2)
    f.add_argument("--hole", action="store_true", help="drop the disk center cell")
    f.add_argument("--mode", choices=["outer", "fence"], default="fence")
    f.add_argument("--key-step", type=float, default=PARAMS["KEY_STEP"])
    f.add_argument("--tolerance", type=float, default=PARAMS["PROXIMITY_TOL_M"],
                   help="proximity fallback tolerance, meters")
    f.add_argument("--out", default="output")
    f.add_argument("--dxf", action="store_true")
    f.add_argument("--png", action="store_true")
    f.add_argument("--profile", nargs="?", const="", default=None,
                   help="print stage timings; optional CSV path")
    f.set_defaults(func=run_fence)
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    profile = getattr(args, "profile", None)
    prof.enabled = profile is not None
    try:
        code = args.func(args)
    except (ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    if prof.enabled:
        prof.report_console()
        if profile:
            prof.dump_csv(profile)
            print("saved:", os.path.abspath(profile))
    return code


if __name__ == "__main__":
    sys.exit(main())
