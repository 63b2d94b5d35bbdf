"""
Carbon Footprint Calculator - desktop front end

One page per emission module (source file, sheet, column mapping, year and
filters), a general report page and the factor and CUPS maintenance pages. The
pages only collect the user's selections; exports run through the same headless
functions the CLI uses.
"""
import os
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk

from config import carbon_config, YearSettings
from cups_store import CupsCenterMapping, CupsStore
from exporter_interface import (ExportRequest, describe_export_result, export_file_headless,
                                export_general_report_headless)
from factor_store import ENTRY_CLASSES, FactorStore, build_factor_entry
from labels import Labels
from logger_config import gui_logger
from mappings import MAPPING_CLASSES
from parsers import parse_double
from source_reader import SourceReadError, list_sheet_names, load_sheet, load_valid_invoices
from validators import factor_validator, source_validator

from ui import (COLORS as UI_COLORS, DIMENSIONS, MODULE_PAGES, DateInputComponent,
                FileInputComponent, MappingInputComponent, NavigationComponent)

# Form fields of the factor page per energy type: (values key, title)
FACTOR_FORM_FIELDS = {
    'electricity': [('entity', 'Trading company'), ('factor', 'Emission factor'), ('gdo_type', 'GDO type')],
    'gas': [('entity', 'Gas type'), ('factor', 'Market factor'), ('location_factor', 'Location factor')],
    'fuel': [('entity', 'Fuel type'), ('vehicle_type', 'Vehicle type'), ('factor', 'Emission factor'),
             ('price_per_unit', 'Price per unit')],
    'refrigerant': [('entity', 'Refrigerant type'), ('factor', 'PCA')],
}

GENERAL_FACTOR_FIELDS = [
    ('mix_without_gdo', 'Mix without GDO'),
    ('gdo_renewable', 'Renewable GDO'),
    ('gdo_high_efficiency_cogeneration', 'High-efficiency cogeneration GDO'),
    ('location_based_factor', 'Location-based factor'),
]


class CarbonCalculatorGUI:
    def __init__(self, root):
        self.root = root
        self.root.title("Carbon Footprint Calculator")
        self.root.geometry("1150x720")
        self.root.configure(bg=UI_COLORS['BACKGROUND_GRAY'])
        self.root.minsize(1000, 620)

        self.labels = Labels()
        self.year_settings = YearSettings()
        self.factor_store = FactorStore()
        self.cups_store = CupsStore()
        self.logger = gui_logger

        self.current_page = None
        self.is_processing = False
        self.pages = {}

        self.setup_styles()
        self.create_widgets()
        self.center_window()

    def setup_styles(self):
        """Setup styling for the application"""
        style = ttk.Style()
        style.theme_use('clam')

        style.configure('Title.TLabel', font=('Segoe UI', 22, 'bold'), foreground='#22543d',
                        background=UI_COLORS['BACKGROUND_GRAY'])
        style.configure('Header.TLabel', font=('Segoe UI', 12, 'bold'), foreground=UI_COLORS['TEXT_PRIMARY'],
                        background=UI_COLORS['BACKGROUND_GRAY'])
        style.configure('Info.TLabel', font=('Segoe UI', 10), foreground=UI_COLORS['TEXT_SECONDARY'],
                        background=UI_COLORS['BACKGROUND_GRAY'])
        style.configure('Status.TLabel', font=('Segoe UI', 10), foreground=UI_COLORS['TEXT_MUTED'],
                        background=UI_COLORS['BACKGROUND_GRAY'])

        style.configure('ProcessButton.TButton', font=('Segoe UI', 13, 'bold'), background='#2f855a',
                        foreground='white', borderwidth=0, focuscolor='none', padding=(30, 12))
        style.map('ProcessButton.TButton',
                  background=[('active', '#276749'), ('pressed', '#22543d'), ('disabled', '#6c757d')])

        style.configure('Browse.TButton', font=('Segoe UI', 10), background=UI_COLORS['ACCENT_BLUE'],
                        foreground='white', borderwidth=0, focuscolor='none', padding=(15, 6))
        style.map('Browse.TButton', background=[('active', '#2b6cb0'), ('pressed', '#2c5282')])

    def create_widgets(self):
        main_frame = tk.Frame(self.root, bg=UI_COLORS['BACKGROUND_GRAY'])
        main_frame.grid(row=0, column=0, sticky='nsew', padx=10, pady=10)
        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)
        main_frame.columnconfigure(0, weight=1)
        main_frame.rowconfigure(2, weight=1)

        ttk.Label(main_frame, text="Carbon Footprint Calculator", style='Title.TLabel').grid(
            row=0, column=0, pady=(5, 10))

        page_titles = {page: self.labels.module_label(page) for page in MODULE_PAGES}
        page_titles.update({'general': 'General report', 'factors': 'Emission factors', 'cups': 'CUPS'})
        self.navigation = NavigationComponent(main_frame, self.select_page, page_titles)
        self.navigation.create()

        self.page_container = tk.Frame(main_frame, bg=UI_COLORS['BACKGROUND_GRAY'])
        self.page_container.grid(row=2, column=0, sticky='nsew')
        self.page_container.columnconfigure(0, weight=1)
        self.page_container.rowconfigure(0, weight=1)

        self.pages['module'] = self.create_module_page()
        self.pages['general'] = self.create_general_page()
        self.pages['factors'] = self.create_factors_page()
        self.pages['cups'] = self.create_cups_page()

        self.status_var = tk.StringVar(value="Ready")
        ttk.Label(main_frame, textvariable=self.status_var, style='Status.TLabel').grid(
            row=3, column=0, sticky='w', pady=(5, 0))

        self.root.after(1, lambda: self.select_page('electricity'))

    def center_window(self):
        """Center the window on screen"""
        self.root.update_idletasks()
        width = self.root.winfo_width()
        height = self.root.winfo_height()
        x = (self.root.winfo_screenwidth() // 2) - (width // 2)
        y = (self.root.winfo_screenheight() // 2) - (height // 2)
        self.root.geometry(f'{width}x{height}+{x}+{y}')

    def select_page(self, page):
        self.current_page = page
        self.navigation.update_active_state(page)
        for frame in self.pages.values():
            frame.grid_remove()

        if page in MODULE_PAGES:
            self.pages['module'].grid()
            self.configure_module_page(page)
        else:
            self.pages[page].grid()
            if page == 'factors':
                self.refresh_factor_table()
            elif page == 'cups':
                self.refresh_cups_table()

    # Module pages

    def create_module_page(self):
        page = tk.Frame(self.page_container, bg=UI_COLORS['BACKGROUND_GRAY'])
        page.grid(row=0, column=0, sticky='nsew')
        page.columnconfigure(0, weight=1)

        self.source_input = FileInputComponent(page, "Source file", list_sheets=self._list_sheets,
                                               sheet_selected_callback=self.on_sheet_selected)
        self.source_input.create(row=0)

        self.date_input = DateInputComponent(page, self.year_settings, year_change_callback=self.on_year_change)
        self.date_input.create(row=1)

        self.erp_frame = tk.Frame(page, bg=UI_COLORS['BACKGROUND_GRAY'])
        self.erp_frame.grid(row=2, column=0, sticky='ew')
        self.erp_frame.columnconfigure(0, weight=1)
        self.erp_input = FileInputComponent(self.erp_frame, "ERP export (optional)", list_sheets=self._list_sheets)
        self.erp_input.create(row=0)
        erp_headers = tk.Frame(self.erp_frame, bg=UI_COLORS['BACKGROUND_GRAY'])
        erp_headers.grid(row=1, column=0, sticky='w', padx=3)
        self.erp_invoice_header = tk.StringVar(value='Nº factura')
        self.erp_conformity_header = tk.StringVar(value='Fecha conformidad')
        ttk.Label(erp_headers, text="Invoice header", style='Info.TLabel').pack(side='left')
        tk.Entry(erp_headers, textvariable=self.erp_invoice_header, width=20).pack(side='left', padx=(4, 15))
        ttk.Label(erp_headers, text="Conformity date header", style='Info.TLabel').pack(side='left')
        tk.Entry(erp_headers, textvariable=self.erp_conformity_header, width=20).pack(side='left', padx=4)

        self.mapping_input = MappingInputComponent(page)
        self.mapping_input.create(row=3)

        button_frame = tk.Frame(page, bg=UI_COLORS['BACKGROUND_GRAY'])
        button_frame.grid(row=4, column=0, pady=10)
        self.export_button = ttk.Button(button_frame, text="EXPORT", command=self.export_module,
                                        style='ProcessButton.TButton')
        self.export_button.grid(row=0, column=0)
        return page

    def _list_sheets(self, file_path):
        try:
            return list_sheet_names(file_path)
        except SourceReadError as e:
            self.logger.error("Cannot list sheets", exception=e, path=file_path)
            messagebox.showerror("Cannot read file", self.labels.get('error.read_failed'))
            return []

    def configure_module_page(self, energy_type):
        """Reset the shared module widgets for an energy type"""
        mapping_class = MAPPING_CLASSES[energy_type]
        self.mapping_input.set_mapping_class(mapping_class, self._gas_types())
        self.source_input.clear()
        self.erp_input.clear()
        self.mapping_input.set_headers([])

        quantity_module = energy_type in ('fuel', 'refrigerant')
        self.date_input.show_date_limit(energy_type == 'fuel')
        if quantity_module:
            self.erp_frame.grid()
        else:
            self.erp_frame.grid_remove()
        self.export_button.config(text=f"EXPORT {self.labels.module_label(energy_type).upper()}")

    def _gas_types(self):
        year = self.date_input.get_year() or self.year_settings.load_current_year()
        return [entry.gas_type for entry in self.factor_store.load_factors('gas', year).values()]

    def on_year_change(self, year):
        self.mapping_input.set_gas_types(self._gas_types())
        self.status_var.set(f"Reporting year set to {year}")

    def on_sheet_selected(self, file_path, sheet_name):
        try:
            sheet = load_sheet(file_path, sheet_name)
        except SourceReadError as e:
            self.logger.error("Cannot load sheet", exception=e, path=file_path, sheet=sheet_name)
            messagebox.showerror("Cannot read sheet", self.labels.get('error.read_failed'))
            return
        if sheet.header_row is None:
            messagebox.showwarning("No header row", f"Sheet '{sheet_name}' has no header row.")
        self.mapping_input.set_headers(sheet.headers)
        self.status_var.set(f"{sheet.data_row_count} data rows in '{sheet.name}'")

    def export_module(self):
        if self.is_processing:
            return
        energy_type = self.current_page
        source = self.source_input.file_path
        mapping = self.mapping_input.get_mapping()

        valid, message = source_validator.validate_file_path(source)
        if not valid:
            messagebox.showwarning("Source file", message)
            return
        valid, message = source_validator.validate_mapping(mapping)
        if not valid:
            messagebox.showwarning("Column mapping", message)
            return

        year = self.date_input.get_year()
        if year is None:
            messagebox.showwarning("Year", "Please enter a valid year.")
            return

        input_name = Path(source).stem
        output_file = filedialog.asksaveasfilename(
            title="Save Module Workbook As",
            defaultextension=".xlsx",
            initialfile=f"{input_name}_{energy_type}_{year}.xlsx",
            filetypes=[("Excel files", "*.xlsx"), ("All files", "*.*")]
        )
        if not output_file:
            return

        request = ExportRequest(mapping=mapping, year=year, output_path=output_file, source_path=source,
                                sheet_name=self.source_input.get_sheet(),
                                date_limit=self.date_input.get_date_limit())
        erp = (self.erp_input.file_path, self.erp_input.get_sheet(),
               self.erp_invoice_header.get().strip(), self.erp_conformity_header.get().strip())

        self.is_processing = True
        self.export_button.config(state='disabled')
        self.status_var.set(f"Exporting {energy_type}...")
        self.root.config(cursor='watch')
        self.root.update_idletasks()
        try:
            self._run_export(energy_type, request, erp)
        finally:
            self._reset_ui()

    def _run_export(self, energy_type, request, erp):
        """Run the export on the UI thread and report the outcome once"""
        erp_path, erp_sheet, invoice_header, conformity_header = erp
        if erp_path and energy_type in ('fuel', 'refrigerant'):
            try:
                request.valid_invoices = load_valid_invoices(erp_path, erp_sheet, invoice_header,
                                                             conformity_header, request.year)
            except SourceReadError as e:
                self.logger.error("ERP file could not be read", exception=e, path=erp_path)
                messagebox.showerror("Export Failed", self.labels.get('error.read_failed'))
                return

        result = export_file_headless(request, energy_type, factor_store=self.factor_store,
                                      cups_store=self.cups_store, labels=self.labels,
                                      year_settings=self.year_settings)
        message = describe_export_result(result, self.labels)
        if not result['success']:
            self.logger.error("Export failed", energy_type=energy_type, error=result['error'])
            messagebox.showerror("Export Failed", message)
            return
        messagebox.showinfo("Export Complete", message)

    def _reset_ui(self):
        self.is_processing = False
        self.export_button.config(state='normal')
        self.root.config(cursor='')
        self.status_var.set("Ready")

    # General report page

    def create_general_page(self):
        page = tk.Frame(self.page_container, bg=UI_COLORS['BACKGROUND_GRAY'])
        page.grid(row=0, column=0, sticky='nsew')
        page.columnconfigure(0, weight=1)

        self.general_inputs = {}
        excel_types = [("Excel files", "*.xlsx *.xls"), ("All files", "*.*")]
        for row, energy_type in enumerate(MODULE_PAGES):
            component = FileInputComponent(page, f"{self.labels.module_label(energy_type)} workbook",
                                           with_sheet=False, filetypes=excel_types)
            component.create(row=row)
            self.general_inputs[energy_type] = component

        options = tk.Frame(page, bg=UI_COLORS['BACKGROUND_GRAY'])
        options.grid(row=len(MODULE_PAGES), column=0, sticky='w', padx=3, pady=10)
        self.report_kind = tk.StringVar(value='combined')
        for value, text in (('combined', 'Combined report'), ('results', 'Results report'),
                            ('summary', 'Module summary')):
            ttk.Radiobutton(options, text=text, value=value, variable=self.report_kind).pack(side='left', padx=8)

        self.general_button = ttk.Button(page, text="GENERATE REPORT", command=self.export_general,
                                         style='ProcessButton.TButton')
        self.general_button.grid(row=len(MODULE_PAGES) + 1, column=0, pady=10)
        page.grid_remove()
        return page

    def export_general(self):
        module_files = {t: c.file_path for t, c in self.general_inputs.items() if c.file_path}
        if not module_files:
            messagebox.showwarning("General report", "Select at least one module workbook.")
            return

        output_file = filedialog.asksaveasfilename(
            title="Save Report As",
            defaultextension=".xlsx",
            initialfile=f"reporte_{self.report_kind.get()}.xlsx",
            filetypes=[("Excel files", "*.xlsx"), ("All files", "*.*")]
        )
        if not output_file:
            return

        result = export_general_report_headless(module_files, output_file, self.report_kind.get(),
                                                labels=self.labels)
        if result['success']:
            stats = result.get('stats', {})
            failed = stats.get('failed_files', [])
            message = f"Report saved as:\n{os.path.basename(result['output_path'])}"
            if failed:
                message += "\n\nSkipped unreadable files:\n" + "\n".join(os.path.basename(f) for f in failed)
            messagebox.showinfo("Report Generated", message)
        else:
            self.logger.error("Report failed", report=self.report_kind.get(), error=result['error'])
            messagebox.showerror("Report Failed", self.labels.get('error.report_failed'))

    # Factor page

    def create_factors_page(self):
        page = tk.Frame(self.page_container, bg=UI_COLORS['BACKGROUND_GRAY'])
        page.grid(row=0, column=0, sticky='nsew')
        page.columnconfigure(0, weight=1)
        page.rowconfigure(1, weight=1)

        selector = tk.Frame(page, bg=UI_COLORS['BACKGROUND_GRAY'])
        selector.grid(row=0, column=0, sticky='w', pady=5)
        self.factor_type = tk.StringVar(value='electricity')
        self.factor_year = tk.StringVar(value=str(self.year_settings.load_current_year()))
        ttk.Label(selector, text="Module", style='Info.TLabel').pack(side='left')
        type_combo = ttk.Combobox(selector, textvariable=self.factor_type, values=MODULE_PAGES,
                                  state='readonly', width=14)
        type_combo.pack(side='left', padx=(4, 15))
        type_combo.bind('<<ComboboxSelected>>', lambda e: self.refresh_factor_table())
        ttk.Label(selector, text="Year", style='Info.TLabel').pack(side='left')
        year_entry = tk.Entry(selector, textvariable=self.factor_year, width=8)
        year_entry.pack(side='left', padx=4)
        year_entry.bind('<Return>', lambda e: self.refresh_factor_table())
        ttk.Button(selector, text="Load", command=self.refresh_factor_table).pack(side='left', padx=4)

        self.factor_tree = ttk.Treeview(page, show='headings', height=DIMENSIONS['TREE_HEIGHT'])
        self.factor_tree.grid(row=1, column=0, sticky='nsew', padx=3)
        self.factor_tree.bind('<<TreeviewSelect>>', self.on_factor_selected)

        self.factor_form = tk.Frame(page, bg=UI_COLORS['BACKGROUND_GRAY'])
        self.factor_form.grid(row=2, column=0, sticky='w', pady=5, padx=3)
        self.factor_form_vars = {}

        buttons = tk.Frame(page, bg=UI_COLORS['BACKGROUND_GRAY'])
        buttons.grid(row=3, column=0, sticky='w', padx=3)
        ttk.Button(buttons, text="Save factor", command=self.save_factor).pack(side='left', padx=(0, 8))
        ttk.Button(buttons, text="Delete selected", command=self.delete_factor).pack(side='left')

        self.general_form = tk.Frame(page, bg=UI_COLORS['BACKGROUND_GRAY'])
        self.general_form.grid(row=4, column=0, sticky='w', pady=10, padx=3)
        self.general_vars = {}
        for col, (key, title) in enumerate(GENERAL_FACTOR_FIELDS):
            ttk.Label(self.general_form, text=title, style='Info.TLabel').grid(row=0, column=col, sticky='w', padx=4)
            var = tk.StringVar()
            tk.Entry(self.general_form, textvariable=var, width=16).grid(row=1, column=col, padx=4)
            self.general_vars[key] = var
        ttk.Button(self.general_form, text="Save general factors", command=self.save_general_factors).grid(
            row=1, column=len(GENERAL_FACTOR_FIELDS), padx=8)

        page.grid_remove()
        return page

    def _factor_year(self):
        valid, message = factor_validator.validate_year(self.factor_year.get())
        if not valid:
            messagebox.showwarning("Year", message)
            return None
        return int(self.factor_year.get())

    def refresh_factor_table(self):
        energy_type = self.factor_type.get()
        year = self._factor_year()
        if year is None:
            return

        columns = ENTRY_CLASSES[energy_type].columns
        self.factor_tree.delete(*self.factor_tree.get_children())
        self.factor_tree['columns'] = columns
        for column in columns:
            self.factor_tree.heading(column, text=column)
            self.factor_tree.column(column, width=160)
        for key, entry in self.factor_store.load_factors(energy_type, year).items():
            row = entry.to_row()
            self.factor_tree.insert('', tk.END, iid=key, values=[row[c] for c in columns])

        for widget in self.factor_form.winfo_children():
            widget.destroy()
        self.factor_form_vars = {}
        for col, (key, title) in enumerate(FACTOR_FORM_FIELDS[energy_type]):
            ttk.Label(self.factor_form, text=title, style='Info.TLabel').grid(row=0, column=col, sticky='w', padx=4)
            var = tk.StringVar()
            tk.Entry(self.factor_form, textvariable=var, width=20).grid(row=1, column=col, padx=4)
            self.factor_form_vars[key] = var

        if energy_type == 'electricity':
            general = self.factor_store.load_general_factors(year)
            for key, var in self.general_vars.items():
                var.set(str(getattr(general, key)))
            self.general_form.grid()
        else:
            self.general_form.grid_remove()

    def on_factor_selected(self, event=None):
        selection = self.factor_tree.selection()
        if not selection:
            return
        values = dict(zip(self.factor_tree['columns'], self.factor_tree.item(selection[0], 'values')))
        entry_class = ENTRY_CLASSES[self.factor_type.get()]
        # Form fields are in table column order
        for (key, _title), column in zip(FACTOR_FORM_FIELDS[self.factor_type.get()], entry_class.columns):
            self.factor_form_vars[key].set(values.get(column, ''))

    def save_factor(self):
        year = self._factor_year()
        if year is None:
            return
        energy_type = self.factor_type.get()
        values = {key: var.get() for key, var in self.factor_form_vars.items()}
        try:
            self.factor_store.save_factor(build_factor_entry(energy_type, year, values))
        except ValueError as e:
            messagebox.showwarning("Invalid factor", str(e))
            return
        self.refresh_factor_table()
        self.status_var.set(f"Saved {energy_type} factor for {values.get('entity')}")

    def delete_factor(self):
        year = self._factor_year()
        selection = self.factor_tree.selection()
        if year is None or not selection:
            return
        if not messagebox.askyesno("Delete factor", "Delete the selected factor?"):
            return
        removed = self.factor_store.delete_factor(self.factor_type.get(), year, selection[0])
        self.refresh_factor_table()
        self.status_var.set(f"Removed {removed} factor(s)")

    def save_general_factors(self):
        year = self._factor_year()
        if year is None:
            return
        general = self.factor_store.load_general_factors(year)
        for key, var in self.general_vars.items():
            valid, message = factor_validator.validate_factor_value(key, var.get())
            if not valid:
                messagebox.showwarning("Invalid factor", message)
                return
            setattr(general, key, parse_double(var.get()))
        try:
            self.factor_store.save_general_factors(general)
        except ValueError as e:
            messagebox.showwarning("Invalid factor", str(e))
            return
        self.status_var.set(f"Saved general electricity factors for {year}")

    # CUPS page

    def create_cups_page(self):
        page = tk.Frame(self.page_container, bg=UI_COLORS['BACKGROUND_GRAY'])
        page.grid(row=0, column=0, sticky='nsew')
        page.columnconfigure(0, weight=1)
        page.rowconfigure(0, weight=1)

        columns = ['id', 'cups', 'marketer', 'centerName', 'acronym', 'energyType']
        self.cups_tree = ttk.Treeview(page, columns=columns, show='headings', height=DIMENSIONS['TREE_HEIGHT'])
        for column in columns:
            self.cups_tree.heading(column, text=column)
            self.cups_tree.column(column, width=60 if column == 'id' else 170)
        self.cups_tree.grid(row=0, column=0, sticky='nsew', padx=3)

        form = tk.Frame(page, bg=UI_COLORS['BACKGROUND_GRAY'])
        form.grid(row=1, column=0, sticky='w', pady=5, padx=3)
        self.cups_vars = {}
        for col, (key, title) in enumerate([('cups', 'CUPS'), ('center_name', 'Center'),
                                            ('marketer', 'Trading company'), ('acronym', 'Acronym'),
                                            ('energy_type', 'Energy type')]):
            ttk.Label(form, text=title, style='Info.TLabel').grid(row=0, column=col, sticky='w', padx=4)
            var = tk.StringVar()
            tk.Entry(form, textvariable=var, width=22).grid(row=1, column=col, padx=4)
            self.cups_vars[key] = var

        buttons = tk.Frame(page, bg=UI_COLORS['BACKGROUND_GRAY'])
        buttons.grid(row=2, column=0, sticky='w', padx=3)
        ttk.Button(buttons, text="Save mapping", command=self.save_cups_mapping).pack(side='left', padx=(0, 8))
        ttk.Button(buttons, text="Delete selected", command=self.delete_cups_mapping).pack(side='left')

        page.grid_remove()
        return page

    def refresh_cups_table(self):
        self.cups_tree.delete(*self.cups_tree.get_children())
        for mapping in self.cups_store.load_mappings():
            row = mapping.to_row()
            self.cups_tree.insert('', tk.END, values=[row[c] for c in self.cups_tree['columns']])

    def save_cups_mapping(self):
        values = {key: var.get().strip() for key, var in self.cups_vars.items()}
        valid, message = factor_validator.validate_cups_mapping(values['cups'], values['center_name'],
                                                                values['energy_type'])
        if not valid:
            messagebox.showwarning("CUPS mapping", message)
            return
        self.cups_store.add_mapping(CupsCenterMapping(**values))
        self.refresh_cups_table()
        self.status_var.set(f"Saved CUPS {values['cups']} for {values['center_name']}")

    def delete_cups_mapping(self):
        selection = self.cups_tree.selection()
        if not selection:
            return
        row = dict(zip(self.cups_tree['columns'], self.cups_tree.item(selection[0], 'values')))
        if self.cups_store.delete_mapping(row['cups'], row['centerName']):
            self.refresh_cups_table()
            self.status_var.set(f"Deleted CUPS {row['cups']}")


def main():
    for issue in carbon_config.validate_config():
        gui_logger.warning("Configuration issue", issue=issue)
    root = tk.Tk()
    CarbonCalculatorGUI(root)
    root.mainloop()


if __name__ == "__main__":
    main()
