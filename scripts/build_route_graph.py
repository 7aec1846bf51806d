from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from flightplanner.catalog.loader import load_json_source, parse_route_features
from flightplanner.config.settings import get_settings
from flightplanner.core.env import resolve_project_path
from flightplanner.core.logging import configure_logging
from flightplanner.network.build import derive_graph
from flightplanner.network.routes import RouteNetworkIndex


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, separators=(",", ":")), encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Derive the route graph and edge geometry lookup from route GeoJSON.")
    parser.add_argument("--routes", default=settings.data.routes_path, help="GeoJSON path or URL.")
    parser.add_argument("--out-dir", default="data", help="Directory for the generated JSON files.")
    parser.add_argument("--precision", type=int, default=settings.network.coordinate_precision)
    args = parser.parse_args(argv)

    configure_logging()
    raw_routes, issues = parse_route_features(load_json_source(args.routes))
    index = RouteNetworkIndex()
    issues.extend(index.load(raw_routes))
    derived = derive_graph(index.features, precision=args.precision)

    out_dir = resolve_project_path(args.out_dir)
    graph_path = out_dir / "flight_route_graph.json"
    geometry_path = out_dir / "edge_geometry_lookup.json"
    _write_json(graph_path, derived.graph_payload(args.precision))
    _write_json(geometry_path, derived.edge_geometry_payload(args.precision))

    print("Routes:", args.routes)
    print("Features:", len(index))
    print("Nodes:", len(derived.nodes))
    print("Edges:", len(derived.edges))
    print("Precision:", args.precision)
    print("Graph:", graph_path)
    print("Edge geometry:", geometry_path)
    for issue in issues:
        print(f"{issue.code}: {issue.message}", ", ".join(issue.sample[:8]))

    return 2 if len(index) == 0 else 0


if __name__ == "__main__":
    raise SystemExit(main())
