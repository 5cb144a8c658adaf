#!/usr/bin/env python3
"""
lanegraph - commit graph browser
"""

import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication, QMessageBox

from lanegraph.config.settings import Settings
from lanegraph.git_backend.repository import GraphRepository
from lanegraph.ui.main_window import MainWindow


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="lanegraph",
        description="lanegraph - browse a repository's commit graph",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Repository path (defaults to the current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output (fetch timing, stale responses)",
    )
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName("lanegraph")
    app.setOrganizationName("lanegraph")

    try:
        repo = GraphRepository(args.path)
    except ValueError as e:
        QMessageBox.critical(None, "Git Repository Required", str(e))
        sys.exit(1)

    window = MainWindow(repo, Settings())
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
