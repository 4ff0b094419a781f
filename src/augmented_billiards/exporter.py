from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from .state import FramePrediction

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv", "jsonl")


class PredictionExporter:
    """Exports frame predictions in various formats (JSON, CSV, JSONL)."""

    def export(self, prediction: FramePrediction, destination: Path, fmt: str = "json") -> None:
        """Export in the named format.

        Args:
            prediction: Prediction to export.
            destination: Output file path.
            fmt: One of "json", "csv", "jsonl".
        """
        if fmt == "json":
            self.export_json(prediction, destination)
        elif fmt == "csv":
            self.export_trajectories_csv(prediction, destination)
        elif fmt == "jsonl":
            self.export_trajectories_jsonl(prediction, destination)
        else:
            raise ValueError(f"Unknown export format: {fmt}")

    def export_json(self, prediction: FramePrediction, destination: Path) -> None:
        """Export complete prediction: table state, basis and all paths.

        Args:
            prediction: Prediction to export.
            destination: Output file path for the JSON export.
        """
        basis = prediction.basis
        payload = {
            "basis": {
                "origin": basis.origin.tolist(),
                "edge_long": basis.edge_long.tolist(),
                "edge_short": basis.edge_short.tolist(),
                "length_long": basis.length_long,
                "aspect_ratio": basis.aspect_ratio,
            },
            "state": prediction.state.to_dict(),
            "target": prediction.target,
            "trajectories": self._trajectory_records(prediction),
        }
        destination.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Exported prediction to %s", destination)

    def export_trajectories_csv(self, prediction: FramePrediction, destination: Path) -> None:
        """Export every path vertex as a CSV row.

        Args:
            prediction: Prediction to export.
            destination: Output file path for the CSV export.
        """
        rows = self._vertex_rows(prediction)
        if not rows:
            destination.write_text("", encoding="utf-8")
            return
        fieldnames = list(rows[0].keys())
        with destination.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)
        logger.info("Exported %d path vertices to %s", len(rows), destination)

    def export_trajectories_jsonl(self, prediction: FramePrediction, destination: Path) -> None:
        """Export paths as JSONL (one path per line).

        Args:
            prediction: Prediction to export.
            destination: Output file path for the JSONL export.
        """
        with destination.open("w", encoding="utf-8") as handle:
            for record in self._trajectory_records(prediction):
                handle.write(json.dumps(record))
                handle.write("\n")
        logger.info("Exported %d paths to %s", len(prediction.trajectories), destination)

    def _trajectory_records(self, prediction: FramePrediction) -> List[Dict[str, Any]]:
        world = prediction.world_trajectories()
        return [
            {
                "index": index,
                "uv": [list(p) for p in path],
                "world": [p.tolist() for p in world[index]],
            }
            for index, path in enumerate(prediction.trajectories)
        ]

    def _vertex_rows(self, prediction: FramePrediction) -> List[Dict[str, Any]]:
        rows = []
        for index, (path, world) in enumerate(
            zip(prediction.trajectories, prediction.world_trajectories())
        ):
            for vertex, (uv, xyz) in enumerate(zip(path, world)):
                rows.append({
                    "trajectory": index,
                    "vertex": vertex,
                    "u": uv[0],
                    "v": uv[1],
                    "x": float(xyz[0]),
                    "y": float(xyz[1]),
                    "z": float(xyz[2]),
                })
        return rows
