"""
Print SRS - Main Entry Point

Usage:
    python -m print_srs.main [--verbose]
"""

import argparse
import sys

from PyQt6.QtWidgets import QApplication

from .config import Config
from .events.event_bus import get_event_bus
from .utils.logging_config import LoggingConfig


def setup_application(argv=None) -> QApplication:
    """
    Initialize and configure the Qt application

    Returns:
        Configured QApplication instance
    """
    app = QApplication(argv if argv is not None else sys.argv)

    app.setApplicationName(Config.APP_NAME)
    app.setApplicationVersion(Config.APP_VERSION)
    app.setOrganizationName(Config.APP_AUTHOR)

    # Initialize event bus (singleton)
    get_event_bus()

    return app


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='print-srs', description=Config.APP_NAME)
    parser.add_argument('--verbose', action='store_true', help='log gesture and scheduling details to the console')
    return parser.parse_known_args(argv)[0]


def main():
    """
    Main entry point for Print SRS

    Creates the application, sets up the main window, and runs the event loop.
    """
    args = parse_args()

    # Setup logging first
    LoggingConfig.setup_logging(Config.get_log_dir(), verbose=args.verbose)

    logger = LoggingConfig.get_logger(__name__)
    logger.info(f"Starting {Config.APP_NAME} {Config.APP_VERSION}...")
    logger.info(f"Database: {Config.get_database_path()}")

    app = setup_application()

    from .widgets.main_window import MainWindow
    window = MainWindow()
    window.show()

    logger.info("Application started successfully!")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
