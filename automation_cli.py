#!/usr/bin/env python3
"""
Carbon Footprint Calculator - Headless CLI Interface
Module exports, general reports and factor maintenance without GUI dependencies
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from config import carbon_config, YearSettings
from cups_store import CupsCenterMapping, CupsStore
from exporter_interface import (ExportRequest, ExporterFactory, export_file_headless,
                                export_general_report_headless)
from factor_store import FactorStore, FuelFactorEntry, build_factor_entry
from labels import Labels
from logger_config import main_logger
from mappings import create_mapping
from source_reader import SourceReadError, list_sheet_names, load_sheet, load_valid_invoices


def _parse_mapping_argument(value: str) -> Dict[str, Any]:
    """Mapping given inline as JSON or as the path of a JSON file"""
    text = value
    if not value.lstrip().startswith('{'):
        path = Path(value)
        if not path.is_file():
            raise ValueError(f"Mapping file not found: {value}")
        text = path.read_text(encoding='utf-8')
    try:
        mapping = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid mapping JSON: {e}")
    if not isinstance(mapping, dict):
        raise ValueError("Mapping must be a JSON object of field -> column")
    return mapping


def default_output_path(energy_type: str, source: str, year: int) -> str:
    output_dir = Path(carbon_config.get('paths.output_dir', 'output_reports'))
    return str(output_dir / f"{Path(source).stem}_{energy_type}_{year}.xlsx")


def export_module(args, year_settings: YearSettings) -> Dict[str, Any]:
    """Build an export request from the command line and run it"""
    year = args.year or year_settings.load_current_year()

    sheet = load_sheet(args.source, args.sheet)
    mapping_config = _parse_mapping_argument(args.mapping)
    if args.gas_type:
        mapping_config['gas_type'] = args.gas_type
    mapping = create_mapping(args.energy_type, mapping_config, sheet.headers)

    valid_invoices = None
    if args.erp:
        valid_invoices = load_valid_invoices(args.erp, args.erp_sheet, args.erp_invoice_header,
                                             args.erp_conformity_header, year)

    date_limit = None
    if args.date_limit:
        date_limit = datetime.strptime(args.date_limit, '%Y-%m-%d').date()

    request = ExportRequest(
        mapping=mapping,
        year=year,
        output_path=args.output or default_output_path(args.energy_type, args.source, year),
        source_path=args.source,
        sheet_name=args.sheet,
        valid_invoices=valid_invoices,
        date_limit=date_limit,
        last_modified_header=args.last_modified_header
    )
    return export_file_headless(request, args.energy_type, labels=Labels())


def general_report(args) -> Dict[str, Any]:
    module_files = {
        'electricity': args.electricity,
        'gas': args.gas,
        'fuel': args.fuel,
        'refrigerant': args.refrigerant,
    }
    module_files = {k: v for k, v in module_files.items() if v}
    output = args.output or str(Path(carbon_config.get('paths.output_dir', 'output_reports'))
                                / f"reporte_{args.report}.xlsx")
    return export_general_report_headless(module_files, output, args.report, labels=Labels())


def _factor_values(args) -> Dict[str, Any]:
    return {
        'entity': args.entity,
        'factor': args.factor,
        'location_factor': args.location_factor,
        'vehicle_type': args.vehicle,
        'gdo_type': args.gdo_type,
        'price_per_unit': args.price,
    }


def manage_factors(args, store: FactorStore) -> Dict[str, Any]:
    if args.factors_command == 'list':
        factors = store.load_factors(args.energy_type, args.year)
        result = {'success': True, 'energy_type': args.energy_type, 'year': args.year,
                  'factors': [entry.to_row() for entry in factors.values()]}
        if args.energy_type == 'electricity':
            result['general'] = store.load_general_factors(args.year).to_row()
        return result

    if args.factors_command == 'set':
        store.save_factor(build_factor_entry(args.energy_type, args.year, _factor_values(args)))
        return {'success': True, 'energy_type': args.energy_type, 'year': args.year, 'entity': args.entity}

    if args.factors_command == 'general':
        general = store.load_general_factors(args.year)
        general.mix_without_gdo = args.mix
        general.gdo_renewable = args.renewable
        general.gdo_high_efficiency_cogeneration = args.cogeneration
        general.location_based_factor = args.location
        store.save_general_factors(general)
        return {'success': True, 'year': args.year, 'general': general.to_row()}

    key = args.entity if args.energy_type != 'fuel' else FuelFactorEntry.make_key(args.entity, args.vehicle or '')
    removed = store.delete_factor(args.energy_type, args.year, key)
    return {'success': removed > 0, 'removed': removed,
            'error': None if removed else f"No factor found for {args.entity}"}


def manage_cups(args, store: CupsStore) -> Dict[str, Any]:
    if args.cups_command == 'list':
        return {'success': True, 'mappings': [m.to_row() for m in store.load_mappings()]}

    if args.cups_command == 'add':
        mapping = CupsCenterMapping(args.cups, args.center, marketer=args.marketer or '',
                                    acronym=args.acronym or '', energy_type=args.energy_type or '')
        saved = store.add_mapping(mapping)
        return {'success': True, 'mappings': len(saved)}

    deleted = store.delete_mapping(args.cups, args.center)
    return {'success': deleted, 'error': None if deleted else f"No mapping for {args.cups} / {args.center}"}


def export_results(results: Dict[str, Any], export_path: str) -> None:
    """Export command results to a JSON file"""
    try:
        with open(export_path, 'w', encoding='utf-8') as f:
            json.dump(results, f, indent=2, default=str)
        print(f"\nResults exported to: {export_path}")
    except OSError as e:
        print(f"Failed to export results: {e}")


def print_summary(result: Dict[str, Any]) -> None:
    """Print a formatted summary of an export result"""
    stats = result.get('stats', {})

    print("\n" + "="*60)
    print("EXPORT SUMMARY")
    print("="*60)

    if 'energy_type' in result:
        print(f"Energy type: {result['energy_type']}")
    if 'report' in result:
        print(f"Report: {result['report']}")
    print(f"Output: {result.get('output_path', '-')}")

    if 'rows_read' in stats:
        print(f"Rows read: {stats.get('rows_read', 0)}")
        print(f"Rows accepted: {stats.get('rows_accepted', 0)}")
        for status, count in sorted(stats.get('skipped', {}).items()):
            print(f"  {status}: {count}")
        print(f"Centers: {len(stats.get('centers', []))}")
        for name, total in stats.get('totals', {}).items():
            print(f"Total {name}: {total:.6f}")

    missing = stats.get('missing_factors', [])
    if missing:
        print(f"\nMissing factors ({len(missing)}):")
        for entity in missing:
            print(f"  - {entity}")

    failed = stats.get('failed_files', [])
    if failed:
        print("\nUnreadable files:")
        for path in failed:
            print(f"  - {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Carbon Footprint Calculator - Headless Exports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export the electricity module for the selected year
  python automation_cli.py export electricity facturas.xlsx --sheet Datos \\
      --mapping mapping_electricidad.json

  # Export gas with an inline mapping and an explicit year
  python automation_cli.py export gas gas.csv --gas-type "Gas natural" --year 2024 \\
      --mapping '{"cups": "CUPS", "invoice_number": "Factura", "start_date": 2, ...}'

  # Fuel, keeping only invoices accepted by the ERP export
  python automation_cli.py export fuel combustibles.xlsx --mapping fuel.json \\
      --erp erp.xlsx --erp-invoice-header "Nº factura" --erp-conformity-header "Fecha conformidad"

  # Combined report from module workbooks
  python automation_cli.py general --electricity elec.xlsx --gas gas.xlsx --report results

  # Factor maintenance
  python automation_cli.py factors list gas --year 2024
  python automation_cli.py factors set refrigerant --year 2024 --entity R-410A --factor 2088

  # Show or change the selected year
  python automation_cli.py year --set 2024

Available energy types: electricity, gas, fuel, refrigerant
        """
    )

    parser.add_argument('--export', '-e', help='Export results to JSON file')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress detailed output')

    subparsers = parser.add_subparsers(dest='command')
    energy_types = ExporterFactory.get_available_exporters()

    export_parser = subparsers.add_parser('export', help='Export one module workbook')
    export_parser.add_argument('energy_type', choices=energy_types)
    export_parser.add_argument('source', help='Provider spreadsheet (.xlsx, .xls or .csv)')
    export_parser.add_argument('--sheet', '-s', help='Sheet to read (default: first sheet)')
    export_parser.add_argument('--mapping', '-m', required=True,
                               help='Field -> column mapping as JSON or a JSON file path')
    export_parser.add_argument('--gas-type', help='Gas type used for factor lookup (gas only)')
    export_parser.add_argument('--year', '-y', type=int, help='Reporting year (default: selected year)')
    export_parser.add_argument('--output', '-o', help='Output workbook path')
    export_parser.add_argument('--erp', help='ERP export with the accepted invoices')
    export_parser.add_argument('--erp-sheet', help='Sheet of the ERP export')
    export_parser.add_argument('--erp-invoice-header', default='Nº factura',
                               help='Invoice number header in the ERP export')
    export_parser.add_argument('--erp-conformity-header', default='Fecha conformidad',
                               help='Conformity date header in the ERP export')
    export_parser.add_argument('--date-limit', help='Ignore rows modified after this date (YYYY-MM-DD)')
    export_parser.add_argument('--last-modified-header', help='Header of the last-modified column')

    general_parser = subparsers.add_parser('general', help='Build a report from module workbooks')
    for energy_type in energy_types:
        general_parser.add_argument(f'--{energy_type}', help=f'{energy_type} module workbook')
    general_parser.add_argument('--report', '-r', choices=['combined', 'results', 'summary'],
                                default='combined', help='Report kind (default: combined)')
    general_parser.add_argument('--output', '-o', help='Output workbook path')

    factors_parser = subparsers.add_parser('factors', help='List or edit emission factors')
    factors_sub = factors_parser.add_subparsers(dest='factors_command')
    for name in ('list', 'set', 'delete'):
        sub = factors_sub.add_parser(name)
        sub.add_argument('energy_type', choices=energy_types)
        sub.add_argument('--year', '-y', type=int, required=True)
        if name != 'list':
            sub.add_argument('--entity', required=True,
                             help='Trading company, gas, fuel or refrigerant type')
            sub.add_argument('--vehicle', help='Vehicle type (fuel only)')
        if name == 'set':
            sub.add_argument('--factor', type=float, required=True,
                             help='Emission factor (market-based for gas, PCA for refrigerants)')
            sub.add_argument('--location-factor', type=float, default=0.0, help='Location factor (gas only)')
            sub.add_argument('--gdo-type', help='GDO type (electricity only)')
            sub.add_argument('--price', type=float, help='Price per unit (fuel only)')
    general_factors = factors_sub.add_parser('general', help='Set the general electricity factors')
    general_factors.add_argument('--year', '-y', type=int, required=True)
    general_factors.add_argument('--mix', type=float, default=0.0, help='Mix without GDO')
    general_factors.add_argument('--renewable', type=float, default=0.0, help='Renewable GDO')
    general_factors.add_argument('--cogeneration', type=float, default=0.0,
                                 help='High-efficiency cogeneration GDO')
    general_factors.add_argument('--location', type=float, default=0.0, help='Location-based factor')

    cups_parser = subparsers.add_parser('cups', help='List or edit CUPS to center mappings')
    cups_sub = cups_parser.add_subparsers(dest='cups_command')
    cups_sub.add_parser('list')
    for name in ('add', 'delete'):
        sub = cups_sub.add_parser(name)
        sub.add_argument('cups')
        sub.add_argument('center')
        if name == 'add':
            sub.add_argument('--marketer', help='Trading company supplying the CUPS')
            sub.add_argument('--acronym')
            sub.add_argument('--energy-type', help='Electricidad or Gas')

    year_parser = subparsers.add_parser('year', help='Show or change the selected year')
    year_parser.add_argument('--set', type=int, dest='set_year', help='Year to select')

    sheets_parser = subparsers.add_parser('sheets', help='List sheets and headers of a spreadsheet')
    sheets_parser.add_argument('source')
    sheets_parser.add_argument('--sheet', '-s', help='Also print the header row of this sheet')

    return parser


def main(argv: Optional[list] = None):
    """Main CLI interface"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1
    if args.command == 'factors' and not args.factors_command:
        parser.parse_args(['factors', '--help'])
        return 1

    year_settings = YearSettings()

    try:
        if args.command == 'export':
            if not Path(args.source).is_file():
                print(f"Error: File not found: {args.source}")
                return 1
            result = export_module(args, year_settings)

        elif args.command == 'general':
            result = general_report(args)

        elif args.command == 'factors':
            result = manage_factors(args, FactorStore())

        elif args.command == 'cups':
            if not args.cups_command:
                parser.parse_args(['cups', '--help'])
                return 1
            result = manage_cups(args, CupsStore())

        elif args.command == 'year':
            if args.set_year is not None:
                year_settings.save_current_year(args.set_year)
            result = {'success': True, 'year': year_settings.load_current_year()}

        else:
            sheets = list_sheet_names(args.source)
            result = {'success': True, 'sheets': sheets}
            if args.sheet:
                result['headers'] = load_sheet(args.source, args.sheet).headers

    except (ValueError, SourceReadError) as e:
        main_logger.error("Command failed", exception=e, command=args.command)
        result = {'success': False, 'error': str(e)}
    except KeyboardInterrupt:
        print("\nProcessing interrupted by user")
        return 1

    if not result.get('success'):
        print(f"Error: {result.get('error')}")
    elif not args.quiet:
        if args.command in ('export', 'general'):
            print_summary(result)
        else:
            print(json.dumps({k: v for k, v in result.items() if k != 'success'},
                             indent=2, ensure_ascii=False, default=str))

    if args.export:
        export_results(result, args.export)

    return 0 if result.get('success') else 1


if __name__ == '__main__':
    sys.exit(main())
