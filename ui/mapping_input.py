"""
Mapping Input Component
One combobox per logical field, filled with the headers of the selected sheet.
"""

import tkinter as tk
import tkinter.ttk as ttk

from mappings import UNMAPPED
from parsers import normalize_label
from .styles import COLORS, SPACING, DIMENSIONS

FIELD_TITLES = {
    'cups': 'CUPS',
    'invoice_number': 'Invoice number',
    'issue_date': 'Issue date',
    'start_date': 'Supply start date',
    'end_date': 'Supply end date',
    'consumption': 'Consumption (kWh)',
    'center': 'Center',
    'emission_entity': 'Emitting company',
    'responsible': 'Responsible',
    'provider': 'Provider',
    'invoice_date': 'Invoice date',
    'fuel_type': 'Fuel type',
    'vehicle_type': 'Vehicle type',
    'amount': 'Amount (L)',
    'completion_time': 'Last modified',
    'person': 'Person',
    'refrigerant_type': 'Refrigerant type',
    'quantity': 'Quantity (kg)',
}

NOT_MAPPED = '(not mapped)'


class MappingInputComponent:
    """Field -> column selection for the active module"""

    def __init__(self, parent):
        self.parent = parent
        self.mapping_section = None
        self.fields_frame = None
        self.mapping_class = None
        self.headers = []
        self.field_vars = {}
        self.gas_type_var = tk.StringVar()
        self.gas_type_combo = None

    def create(self, row=0):
        self.mapping_section = tk.Frame(self.parent, bg=COLORS['BACKGROUND_GRAY'])
        self.mapping_section.grid(row=row, column=0, sticky=(tk.W, tk.E), pady=(0, 5), padx=3)

        ttk.Label(self.mapping_section, text="Column mapping", style='Header.TLabel').grid(
            row=0, column=0, sticky='w', pady=(SPACING['MEDIUM'], SPACING['SMALL']))

        self.fields_frame = tk.Frame(self.mapping_section, bg=COLORS['BACKGROUND_GRAY'])
        self.fields_frame.grid(row=1, column=0, sticky=(tk.W, tk.E))
        return self.mapping_section

    def set_mapping_class(self, mapping_class, gas_types=None):
        """Rebuild the comboboxes for a module's fields"""
        self.mapping_class = mapping_class
        for widget in self.fields_frame.winfo_children():
            widget.destroy()
        self.field_vars = {}
        self.gas_type_combo = None

        for i, field in enumerate(mapping_class.FIELDS):
            row, col = divmod(i, 2)
            title = FIELD_TITLES.get(field, field)
            if field in mapping_class.REQUIRED:
                title += ' *'
            ttk.Label(self.fields_frame, text=title, style='Info.TLabel').grid(
                row=row, column=col * 2, sticky='w', padx=(0, SPACING['SMALL']), pady=2)
            var = tk.StringVar(value=NOT_MAPPED)
            combo = ttk.Combobox(self.fields_frame, textvariable=var, state='readonly',
                                 width=DIMENSIONS['COMBO_WIDTH'], values=self._choices())
            combo.grid(row=row, column=col * 2 + 1, sticky='w', padx=(0, SPACING['LARGE']), pady=2)
            self.field_vars[field] = (var, combo)

        if 'gas_type' in mapping_class.EXTRA_ATTRIBUTES:
            row = (len(mapping_class.FIELDS) + 1) // 2
            ttk.Label(self.fields_frame, text='Gas type *', style='Info.TLabel').grid(
                row=row, column=0, sticky='w', pady=2)
            self.gas_type_combo = ttk.Combobox(self.fields_frame, textvariable=self.gas_type_var,
                                               width=DIMENSIONS['COMBO_WIDTH'], values=gas_types or [])
            self.gas_type_combo.grid(row=row, column=1, sticky='w', pady=2)

        self._auto_select()

    def set_gas_types(self, gas_types):
        if self.gas_type_combo is not None:
            self.gas_type_combo['values'] = gas_types

    def set_headers(self, headers):
        """Offer the sheet's headers and preselect fields whose title matches a header"""
        self.headers = list(headers)
        for var, combo in self.field_vars.values():
            combo['values'] = self._choices()
            var.set(NOT_MAPPED)
        self._auto_select()

    def _choices(self):
        return [NOT_MAPPED] + [f"{i + 1}: {header}" for i, header in enumerate(self.headers)]

    def _auto_select(self):
        normalized = [normalize_label(h) for h in self.headers]
        for field, (var, _combo) in self.field_vars.items():
            wanted = normalize_label(FIELD_TITLES.get(field, field))
            if wanted in normalized:
                index = normalized.index(wanted)
                var.set(f"{index + 1}: {self.headers[index]}")

    def _selected_index(self, value):
        if not value or value == NOT_MAPPED:
            return UNMAPPED
        return int(value.split(':', 1)[0]) - 1

    def get_mapping(self):
        """Mapping built from the current selections"""
        indices = {field: self._selected_index(var.get()) for field, (var, _combo) in self.field_vars.items()}
        if self.gas_type_combo is not None:
            return self.mapping_class(gas_type=self.gas_type_var.get(), **indices)
        return self.mapping_class(**indices)

    def show(self):
        if self.mapping_section:
            self.mapping_section.grid()

    def hide(self):
        if self.mapping_section:
            self.mapping_section.grid_remove()
