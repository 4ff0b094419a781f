from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from .config import AppConfig, load_config, save_config
from .exporter import EXPORT_FORMATS, PredictionExporter
from .preview import draw_prediction, save_preview
from .state import FrameSnapshot, predict_frame

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_INPUT = 1
EXIT_SKIPPED = 2


def _configure_logging(data_dir: str, verbose: bool = False) -> None:
    log_dir = Path(data_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "app.log"
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=[
            logging.FileHandler(log_path, encoding="utf-8"),
            logging.StreamHandler(sys.stderr),
        ],
    )


def _apply_env_overrides(config: AppConfig) -> None:
    """Apply environment variable overrides to config."""
    data_dir = os.environ.get("AUGMENTED_BILLIARDS_DATA_DIR")
    if data_dir:
        config.storage.data_directory = data_dir

    ball_radius = os.environ.get("AUGMENTED_BILLIARDS_BALL_RADIUS")
    if ball_radius:
        try:
            config.physics.ball_radius = float(ball_radius)
        except ValueError:
            logger.warning("Ignoring invalid AUGMENTED_BILLIARDS_BALL_RADIUS=%r", ball_radius)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="augmented-billiards",
        description="Predict ball paths for one tracked table snapshot.",
    )
    parser.add_argument("snapshot", type=Path, help="JSON snapshot with corners, balls and aim")
    parser.add_argument("--config", type=Path, default=None, help="Config file path")
    parser.add_argument("--output", type=Path, default=None, help="Export destination")
    parser.add_argument("--format", choices=EXPORT_FORMATS, default=None, help="Export format")
    parser.add_argument("--preview", type=Path, default=None, help="Write a top-down PNG preview")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Write the loaded configuration, defaults filled in, back to the config file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    config = load_config(args.config)
    saved_path = save_config(config, args.config) if args.save_config else None
    _apply_env_overrides(config)
    _configure_logging(config.storage.data_directory, args.verbose)
    if saved_path is not None:
        logger.info("Saved configuration to %s", saved_path)

    try:
        snapshot = FrameSnapshot.load(args.snapshot)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        logger.error("Could not read snapshot %s: %s", args.snapshot, exc)
        return EXIT_BAD_INPUT

    prediction = predict_frame(snapshot, config)
    if prediction is None:
        logger.warning("Table corners are degenerate, nothing to predict")
        return EXIT_SKIPPED

    if prediction.has_target:
        logger.info(
            "Target %s, %d predicted paths", prediction.target, len(prediction.trajectories)
        )
    else:
        logger.info("Aim line misses every ball")

    fmt = args.format or config.storage.default_export_format
    exporter = PredictionExporter()
    if args.output is not None:
        exporter.export(prediction, args.output, fmt)
    else:
        records = {
            "target": prediction.target,
            "trajectories": [[list(p) for p in path] for path in prediction.trajectories],
        }
        print(json.dumps(records, indent=2))

    if args.preview is not None:
        image = draw_prediction(
            prediction.state,
            prediction.trajectories,
            width_px=config.preview.width_px,
            margin_px=config.preview.margin_px,
            line_thickness=config.preview.line_thickness,
        )
        save_preview(image, args.preview)

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
