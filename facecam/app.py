# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: CLI entrypoint configuring logging and application settings before opening the viewer window
# Acknowledgements: Qt for Python documentation for QApplication lifecycle

"""CLI entrypoint for the face camera viewer.

Usage:
    python -m facecam.app [--device N] [--cascade FILE] [--base-dir DIR] [--no-download] [--verbose]

Snapshots go to <base-dir>/snapshots; the default cascade is looked up
(and downloaded if missing) in <base-dir>.
"""
import argparse
import logging
import sys
from pathlib import Path

from .config import AppConfig

logger = logging.getLogger(__name__)


def build_config(args: argparse.Namespace) -> AppConfig:
    cfg = AppConfig.from_env()
    if args.base_dir:
        cfg.base_dir = Path(args.base_dir)
    if args.device is not None:
        cfg.capture.device_index = args.device
    if args.cascade:
        cfg.cascade_path = args.cascade
    if args.no_download:
        cfg.cascade.download_enabled = False
    if args.verbose:
        cfg.log_level = "DEBUG"
    cfg.validate()
    return cfg


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Live webcam viewer with Haar cascade face detection")
    ap.add_argument("--device", type=int, default=None,
                    help="Camera index to select at startup (default: 0)")
    ap.add_argument("--cascade", type=str, metavar="FILE",
                    help="Haar cascade XML to load at startup")
    ap.add_argument("--base-dir", type=str, metavar="DIR",
                    help="Directory for the default cascade and snapshots (default: current directory)")
    ap.add_argument("--no-download", action="store_true",
                    help="Never download the default cascade")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="Enable debug logging")
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    try:
        cfg = build_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=cfg.log_level.upper(), format=cfg.log_format)
    logger.info(f"Base directory: {cfg.base_dir.resolve()}")

    # Qt is imported late so --help works without a display
    from PySide6 import QtWidgets
    from .ui import MainWindow

    qt_app = QtWidgets.QApplication(sys.argv[:1])
    window = MainWindow(cfg)
    window.show()
    exit_code = qt_app.exec()
    logger.info(f"Exiting with code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
