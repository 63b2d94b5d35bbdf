"""
Emission Exporters Package

Module workbooks (detailed, per-center and total sheets) for every energy type,
and the general reports that combine them.
"""
from .schemas import EnergySchema, SCHEMAS, get_schema
from .module_exporter import ModuleExporter, resolve_output_path
from .general_report import GeneralReportExporter

# Export public API
__all__ = [
    'EnergySchema',
    'SCHEMAS',
    'get_schema',
    'ModuleExporter',
    'resolve_output_path',
    'GeneralReportExporter'
]

# Version info
__version__ = "1.0.0"
