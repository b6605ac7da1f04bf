#!/usr/bin/env python3
"""
DB Manager - A PySide6 application for running databases in Docker.

This application provides an easy-to-use interface for:
- Provisioning database containers from a catalog of images
- Pulling images with live progress
- Creating named volumes so data survives the container
- Starting and stopping the containers it manages
"""

import logging
import os
import sys

from PySide6.QtWidgets import QApplication, QMessageBox
from PySide6.QtCore import Qt

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure root logging; level from DB_MANAGER_LOG_LEVEL."""
    level = os.environ.get("DB_MANAGER_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def check_dependencies() -> tuple[bool, str]:
    """
    Check if required dependencies are available.

    Returns:
        Tuple of (success, error_message)
    """
    # Check for docker Python package
    try:
        import docker  # noqa: F401
    except ImportError:
        return False, (
            "Python 'docker' package is not installed.\n\n"
            "Install it with: pip install docker"
        )

    return True, ""


def main():
    """Main application entry point."""
    setup_logging()

    # Enable high DPI scaling
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("DB Manager")
    app.setOrganizationName("DBManager")

    # Check dependencies before showing main window
    deps_ok, error_msg = check_dependencies()
    if not deps_ok:
        QMessageBox.critical(None, "Missing Dependencies", error_msg)
        return 1

    # Import here to avoid issues if docker is missing
    from db_manager.core.config import ConfigManager
    from db_manager.core.errors import ContainerRuntimeError
    from db_manager.core.runtime import RuntimeClient
    from db_manager.ui.main_window import MainWindow

    # One runtime client for the whole process; closed with the window
    try:
        runtime = RuntimeClient.from_env()
    except ContainerRuntimeError as e:
        logger.error("%s", e)
        QMessageBox.critical(None, "Docker Unavailable", str(e))
        return 1

    config_manager = ConfigManager()
    config_manager.ensure_config_file()

    window = MainWindow(runtime, config_manager)
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
