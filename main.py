#!/usr/bin/env python3
"""
Carbon Footprint Calculator
Main Entry Point

Starts the desktop application. Headless exports are available through
automation_cli.py.
"""

import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


def main():
    """Main entry point for the Carbon Footprint Calculator"""
    try:
        from config import carbon_config
        from logger_config import configure_file_logging, main_logger
        from carbon_gui import main as run_gui

        if carbon_config.get('logging.file_logging', False):
            configure_file_logging(carbon_config.get('paths.log_dir', 'logs'),
                                   carbon_config.get('logging.level', 'INFO'))
        main_logger.info("Starting Carbon Footprint Calculator")
        run_gui()

    except ImportError as e:
        print(f"Failed to import required modules: {e}")
        print("Please ensure all dependencies are installed:")
        print("pip install pandas openpyxl numpy xlrd tkcalendar")
        sys.exit(1)


if __name__ == "__main__":
    main()
