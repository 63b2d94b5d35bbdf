"""
UI Components Package

Modular UI components for the Carbon Footprint Calculator application.
"""

from .styles import COLORS, FONTS, SPACING, DIMENSIONS, BUTTON_STYLES
from .navigation import NavigationComponent, MODULE_PAGES, TOOL_PAGES
from .file_input import FileInputComponent
from .date_input import DateInputComponent
from .mapping_input import MappingInputComponent

__all__ = [
    'COLORS',
    'FONTS',
    'SPACING',
    'DIMENSIONS',
    'BUTTON_STYLES',
    'NavigationComponent',
    'MODULE_PAGES',
    'TOOL_PAGES',
    'FileInputComponent',
    'DateInputComponent',
    'MappingInputComponent'
]

__version__ = "1.0.0"
