"""
Input validation for source files, column mappings, factors and CUPS mappings
"""
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from logger_config import data_logger
from config import carbon_config
from parsers import parse_double
from source_reader import SourceReadError, list_sheet_names, load_sheet


class SourceFileValidator:
    """Checks performed before a module export is started"""

    def __init__(self, config=None):
        self.logger = data_logger
        self.config = config or carbon_config

    def validate_file_path(self, file_path: str) -> Tuple[bool, str]:
        """Validate file path and accessibility"""
        if not file_path:
            return False, "No file selected"

        path = Path(file_path)

        if not path.exists():
            return False, f"File does not exist: {file_path}"

        if not path.is_file():
            return False, f"Path is not a file: {file_path}"

        allowed_extensions = self.config.get('validation.allowed_extensions', ['.xlsx', '.xls', '.csv'])
        if path.suffix.lower() not in allowed_extensions:
            return False, f"Unsupported file format. Allowed: {allowed_extensions}"

        max_size_mb = self.config.get('validation.max_file_size_mb', 100)
        file_size_mb = path.stat().st_size / (1024 * 1024)
        if file_size_mb > max_size_mb:
            return False, f"File too large: {file_size_mb:.1f}MB (max: {max_size_mb}MB)"

        try:
            with open(path, 'rb') as test_file:
                test_file.read(1)
        except OSError:
            return False, f"File is not readable: {file_path}"

        self.logger.log_file_operation("validation", str(path), True, path.stat().st_size)
        return True, "File validation passed"

    def validate_sheet(self, file_path: str, sheet_name: Optional[str]) -> Tuple[bool, str]:
        try:
            sheets = list_sheet_names(file_path)
        except SourceReadError as e:
            return False, str(e)

        if sheet_name and sheet_name not in sheets:
            return False, f"Sheet not found: {sheet_name}. Available: {sheets}"
        return True, "Sheet validation passed"

    def validate_mapping(self, mapping, column_count: Optional[int] = None) -> Tuple[bool, str]:
        """Every required field mapped, and every mapped index inside the sheet"""
        missing = mapping.missing_fields()
        if missing:
            self.logger.log_validation_result("column_mapping", False, f"missing {missing}")
            return False, f"Missing column mapping for: {', '.join(missing)}"

        if column_count is not None:
            out_of_range = [field for field in mapping.FIELDS
                            if mapping.is_mapped(field) and mapping.get_index(field) >= column_count]
            if out_of_range:
                return False, f"Mapped columns outside the sheet: {', '.join(out_of_range)}"

        self.logger.log_validation_result("column_mapping", True)
        return True, "Mapping validation passed"

    def run_full_validation(self, file_path: str, sheet_name: Optional[str], mapping) -> Dict[str, Any]:
        """Run every check and stop at the first that fails"""
        results = {
            'file_path': file_path,
            'overall_valid': False,
            'validation_steps': {}
        }

        valid, message = self.validate_file_path(file_path)
        results['validation_steps']['file_path'] = {'valid': valid, 'message': message}
        if not valid:
            return results

        valid, message = self.validate_sheet(file_path, sheet_name)
        results['validation_steps']['sheet'] = {'valid': valid, 'message': message}
        if not valid:
            return results

        try:
            sheet = load_sheet(file_path, sheet_name)
        except SourceReadError as e:
            results['validation_steps']['structure'] = {'valid': False, 'message': str(e)}
            return results

        if sheet.header_row is None:
            results['validation_steps']['structure'] = {'valid': False, 'message': "Sheet has no header row"}
            return results
        results['validation_steps']['structure'] = {
            'valid': True,
            'message': f"Header row {sheet.header_row + 1}, {sheet.data_row_count} data rows"
        }

        valid, message = self.validate_mapping(mapping, len(sheet.headers))
        results['validation_steps']['mapping'] = {'valid': valid, 'message': message}
        results['overall_valid'] = valid

        if valid:
            self.logger.info(f"Full validation PASSED for {Path(file_path).name}")
        else:
            self.logger.warning(f"Full validation FAILED for {Path(file_path).name}")
        return results


class FactorInputValidator:
    """Validation of values typed into the factor and CUPS forms"""

    def __init__(self, config=None):
        self.logger = data_logger
        self.config = config or carbon_config

    def validate_year(self, value) -> Tuple[bool, str]:
        try:
            year = int(str(value).strip())
        except ValueError:
            return False, f"Invalid year: {value}"
        min_year = self.config.get('validation.min_year', 1900)
        max_year = self.config.get('validation.max_year', 2100)
        if not min_year <= year <= max_year:
            return False, f"Year must be between {min_year} and {max_year}"
        return True, "Year validation passed"

    def validate_factor_value(self, name: str, value) -> Tuple[bool, str]:
        number = parse_double(value)
        if number is None:
            return False, f"{name} is not a number: {value}"
        if number < 0:
            return False, f"{name} cannot be negative"
        return True, f"{name} validation passed"

    def validate_factor_fields(self, fields: Dict[str, Any], required_text: List[str],
                               numeric: List[str]) -> List[str]:
        """Error messages for a factor form; empty when the form is valid"""
        errors = []
        for name in required_text:
            if not str(fields.get(name) or '').strip():
                errors.append(f"{name} is required")
        for name in numeric:
            valid, message = self.validate_factor_value(name, fields.get(name))
            if not valid:
                errors.append(message)
        return errors

    def validate_cups_mapping(self, cups: str, center_name: str, energy_type: str = '') -> Tuple[bool, str]:
        if not (cups or '').strip():
            return False, "CUPS is required"
        if not (center_name or '').strip():
            return False, "Center name is required"
        if energy_type and energy_type.strip().lower() not in ('electricity', 'gas', 'electricidad'):
            return False, f"Unknown energy type for CUPS: {energy_type}"
        return True, "CUPS mapping validation passed"


# Global validator instances
source_validator = SourceFileValidator()
factor_validator = FactorInputValidator()
