#!/usr/bin/env python3
"""
Abstract base class for emission exporters
Provides a consistent interface for all energy types and the headless entry points
"""

import os
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Any, List, Optional, Set

from logger_config import main_logger


class ExportRequest:
    """
    Everything one module export needs: source sheet, mapping, year and filters

    The front end builds a request from the user's selections and hands it to
    an exporter; nothing in the core reads GUI state.
    """

    def __init__(self, mapping, year: int, output_path: str,
                 source_path: Optional[str] = None, sheet_name: Optional[str] = None,
                 valid_invoices: Optional[Set[str]] = None,
                 date_limit: Optional[date] = None,
                 last_modified_header: Optional[str] = None):
        self.mapping = mapping
        self.year = int(year)
        self.output_path = output_path
        self.source_path = source_path
        self.sheet_name = sheet_name
        self.valid_invoices = set(valid_invoices or set())
        self.date_limit = date_limit
        self.last_modified_header = last_modified_header

    def __repr__(self):
        return (f"ExportRequest(source={self.source_path!r}, sheet={self.sheet_name!r}, "
                f"year={self.year}, output={self.output_path!r})")


class EmissionExporterInterface(ABC):
    """Abstract base class defining the interface for all module exporters"""

    def __init__(self):
        self.stats: Dict[str, Any] = {}

    @abstractmethod
    def get_energy_type(self) -> str:
        """
        Energy type handled by this exporter

        Returns:
            str: One of 'electricity', 'gas', 'fuel', 'refrigerant'
        """
        pass

    @abstractmethod
    def get_sheet_names(self) -> List[str]:
        """
        Localized names of the sheets this exporter writes

        Returns:
            List of sheet names in workbook order
        """
        pass

    @abstractmethod
    def export(self, request: ExportRequest) -> str:
        """
        Write the module workbook for a request

        Args:
            request: Source sheet, column mapping, year and filters

        Returns:
            str: Path of the written workbook

        Raises:
            ValueError: If the mapping is incomplete
            RuntimeError: If the workbook cannot be written
        """
        pass

    @abstractmethod
    def calculate_summary_stats(self) -> Dict[str, Any]:
        """
        Summary of the last export

        Returns:
            Dict containing row counts, skip reasons and totals
        """
        pass

    def get_stats(self) -> Dict[str, Any]:
        """Get the current statistics"""
        return self.stats


class ExporterFactory:
    """Factory class to create exporter instances"""

    @staticmethod
    def create_exporter(energy_type: str, **kwargs) -> EmissionExporterInterface:
        """
        Create an exporter instance based on energy type

        Args:
            energy_type: 'electricity', 'gas', 'fuel' or 'refrigerant'
            **kwargs: Optional stores and labels passed to the exporter

        Returns:
            EmissionExporterInterface: Exporter instance

        Raises:
            ValueError: If energy type is not recognized
        """
        energy_type = energy_type.lower()
        if energy_type not in ExporterFactory.get_available_exporters():
            raise ValueError(f"Unknown energy type: {energy_type}")

        from src.exporters.module_exporter import ModuleExporter
        return ModuleExporter(energy_type, **kwargs)

    @staticmethod
    def get_available_exporters():
        """Get list of available energy types"""
        return ['electricity', 'gas', 'fuel', 'refrigerant']


def export_file_headless(request: ExportRequest, energy_type: str, **kwargs) -> Dict[str, Any]:
    """
    Automation-ready function to export a module workbook without GUI

    Args:
        request: Export request
        energy_type: Energy type to export
        **kwargs: Optional stores and labels passed to the exporter

    Returns:
        Dict containing export results and statistics
    """
    try:
        exporter = ExporterFactory.create_exporter(energy_type, **kwargs)
        output_path = exporter.export(request)

        return {
            'success': True,
            'stats': exporter.get_stats(),
            'energy_type': energy_type,
            'file_path': request.source_path,
            'output_path': output_path
        }

    except Exception as e:
        main_logger.error(f"Export of {energy_type} failed", exception=e, source=request.source_path)
        return {
            'success': False,
            'error': str(e),
            'energy_type': energy_type,
            'file_path': request.source_path
        }


def export_general_report_headless(module_files: Dict[str, str], output_path: str,
                                   report: str = 'combined', **kwargs) -> Dict[str, Any]:
    """
    Automation-ready function to build a general report from module workbooks

    Args:
        module_files: Energy type -> path of its module workbook
        output_path: Path of the report to write
        report: 'combined', 'results' or 'summary'

    Returns:
        Dict containing the report path and the sheets it holds
    """
    from src.exporters.general_report import GeneralReportExporter

    try:
        exporter = GeneralReportExporter(**kwargs)
        if report == 'combined':
            written = exporter.export_combined_report(module_files, output_path)
        elif report == 'results':
            written = exporter.export_results_report(module_files, output_path)
        elif report == 'summary':
            written = exporter.export_summary_report(module_files, output_path)
        else:
            raise ValueError(f"Unknown report type: {report}")

        return {
            'success': True,
            'report': report,
            'output_path': written,
            'stats': exporter.get_stats(),
            'module_files': module_files
        }

    except Exception as e:
        main_logger.error(f"{report} report failed", exception=e)
        return {
            'success': False,
            'error': str(e),
            'report': report,
            'module_files': module_files
        }


def describe_export_result(result: Dict[str, Any], labels) -> str:
    """
    Dialog text for a headless export result

    Failures map to the fixed ``error.export_failed`` label; the exception text
    in ``result['error']`` is left to the log.
    """
    if not result.get('success'):
        return labels.get('error.export_failed')

    stats = result.get('stats', {})
    message = (f"Rows read: {stats.get('rows_read', 0)}\n"
               f"Rows exported: {stats.get('rows_accepted', 0)}\n"
               f"Centers: {len(stats.get('centers', []))}\n\n"
               f"File saved as:\n{os.path.basename(result.get('output_path') or '')}")
    missing = stats.get('missing_factors', [])
    if missing:
        message += f"\n\nNo emission factor for: {', '.join(missing[:10])}"
    return message
