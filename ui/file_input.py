"""
File Input Component
Source file selection with the sheet picker used by the module pages.
"""

import os
import tkinter as tk
import tkinter.ttk as ttk
from tkinter import filedialog

from .styles import COLORS, SPACING, FONTS, DIMENSIONS

SOURCE_FILETYPES = [("Spreadsheets", "*.xlsx *.xls *.csv"), ("Excel files", "*.xlsx *.xls"),
                    ("CSV files", "*.csv"), ("All files", "*.*")]


class FileInputComponent:
    """A file chooser, the chosen path and, optionally, the sheet to read"""

    def __init__(self, parent, title, file_selected_callback=None, sheet_selected_callback=None,
                 list_sheets=None, with_sheet=True, filetypes=None):
        self.parent = parent
        self.title = title
        self.file_selected_callback = file_selected_callback
        self.sheet_selected_callback = sheet_selected_callback
        self.list_sheets = list_sheets
        self.with_sheet = with_sheet
        self.filetypes = filetypes or SOURCE_FILETYPES
        self.file_path = None
        self.file_section = None
        self.file_label = None
        self.sheet_var = tk.StringVar()
        self.sheet_combo = None

    def create(self, row=0):
        """Create the file input UI section"""
        self.file_section = tk.Frame(self.parent, bg=COLORS['BACKGROUND_GRAY'])
        self.file_section.grid(row=row, column=0, sticky=(tk.W, tk.E), pady=(0, 5), padx=3)
        self.file_section.columnconfigure(1, weight=1)

        ttk.Label(self.file_section, text=self.title, style='Header.TLabel').grid(
            row=0, column=0, columnspan=3, sticky='w', pady=(SPACING['MEDIUM'], SPACING['SMALL']))

        self.file_label = tk.Label(
            self.file_section,
            text="No file selected",
            font=FONTS['SMALL'],
            fg=COLORS['TEXT_MUTED'],
            bg=COLORS['BACKGROUND_WHITE'],
            anchor='w',
            width=DIMENSIONS['FILE_LABEL_WIDTH'],
            padx=6,
            pady=4
        )
        self.file_label.grid(row=1, column=0, columnspan=2, sticky=(tk.W, tk.E), padx=(0, SPACING['LARGE']))

        ttk.Button(self.file_section, text="Browse", command=self.browse_file,
                   style='Browse.TButton').grid(row=1, column=2)

        if self.with_sheet:
            ttk.Label(self.file_section, text="Sheet", style='Info.TLabel').grid(
                row=2, column=0, sticky='w', pady=(SPACING['SMALL'], 0))
            self.sheet_combo = ttk.Combobox(self.file_section, textvariable=self.sheet_var, state='readonly',
                                            width=DIMENSIONS['COMBO_WIDTH'])
            self.sheet_combo.grid(row=2, column=1, sticky='w', pady=(SPACING['SMALL'], 0))
            self.sheet_combo.bind('<<ComboboxSelected>>', self._on_sheet_selected)

        return self.file_section

    def browse_file(self):
        file_path = filedialog.askopenfilename(title=self.title, filetypes=self.filetypes)
        if file_path:
            self.set_file(file_path)

    def set_file(self, file_path):
        """Show the chosen file and load its sheet names"""
        self.file_path = file_path
        self.file_label.config(text=os.path.basename(file_path), fg=COLORS['TEXT_PRIMARY'])

        if self.with_sheet and self.list_sheets:
            sheets = self.list_sheets(file_path)
            self.sheet_combo['values'] = sheets
            self.sheet_var.set(sheets[0] if sheets else '')

        if self.file_selected_callback:
            self.file_selected_callback(file_path)
        if self.with_sheet and self.sheet_var.get():
            self._on_sheet_selected()

    def clear(self):
        self.file_path = None
        self.file_label.config(text="No file selected", fg=COLORS['TEXT_MUTED'])
        if self.sheet_combo is not None:
            self.sheet_combo['values'] = []
            self.sheet_var.set('')

    def get_sheet(self):
        return self.sheet_var.get() or None

    def _on_sheet_selected(self, event=None):
        if self.sheet_selected_callback and self.file_path:
            self.sheet_selected_callback(self.file_path, self.get_sheet())

    def show(self):
        if self.file_section:
            self.file_section.grid()

    def hide(self):
        if self.file_section:
            self.file_section.grid_remove()
