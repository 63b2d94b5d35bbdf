"""
Date Input Component
Reporting year selector and the optional last-modified date limit.
"""

import tkinter as tk
import tkinter.ttk as ttk
from datetime import date

from tkcalendar import DateEntry

from .styles import COLORS, SPACING, FONTS


class DateInputComponent:
    """Year spinbox plus a date limit that can be switched on for quantity modules"""

    def __init__(self, parent, year_settings, year_change_callback=None):
        self.parent = parent
        self.year_settings = year_settings
        self.year_change_callback = year_change_callback
        self.date_section = None
        self.year_var = tk.StringVar(value=str(year_settings.load_current_year()))
        self.limit_enabled = tk.BooleanVar(value=False)
        self.limit_entry = None
        self.limit_frame = None

    def create(self, row=0):
        """Create the year and date limit section"""
        self.date_section = tk.Frame(self.parent, bg=COLORS['BACKGROUND_GRAY'])
        self.date_section.grid(row=row, column=0, sticky=(tk.W, tk.E), pady=(0, 5), padx=3)

        ttk.Label(self.date_section, text="Reporting year", style='Header.TLabel').grid(
            row=0, column=0, sticky='w', pady=(SPACING['MEDIUM'], SPACING['SMALL']))

        min_year = self.year_settings.config.get('validation.min_year', 1900)
        max_year = self.year_settings.config.get('validation.max_year', 2100)
        year_spin = tk.Spinbox(
            self.date_section,
            from_=min_year,
            to=max_year,
            textvariable=self.year_var,
            width=8,
            font=FONTS['BODY'],
            command=self._on_year_change
        )
        year_spin.grid(row=1, column=0, sticky='w')
        year_spin.bind('<FocusOut>', self._on_year_change)
        year_spin.bind('<Return>', self._on_year_change)

        self.limit_frame = tk.Frame(self.date_section, bg=COLORS['BACKGROUND_GRAY'])
        self.limit_frame.grid(row=1, column=1, sticky='w', padx=(SPACING['XLARGE'], 0))
        ttk.Checkbutton(self.limit_frame, text="Ignore rows modified after",
                        variable=self.limit_enabled, command=self._toggle_limit).pack(side='left')
        self.limit_entry = DateEntry(
            self.limit_frame,
            date_pattern='dd/mm/yyyy',
            background=COLORS['PRIMARY_GREEN'],
            foreground=COLORS['BACKGROUND_WHITE'],
            selectbackground=COLORS['ACCENT_BLUE'],
            font=FONTS['SMALL'],
            state='disabled'
        )
        self.limit_entry.pack(side='left', padx=(SPACING['SMALL'], 0))

        return self.date_section

    def _toggle_limit(self):
        self.limit_entry.configure(state='normal' if self.limit_enabled.get() else 'disabled')

    def _on_year_change(self, event=None):
        year = self.get_year()
        if year is None:
            self.year_var.set(str(self.year_settings.load_current_year()))
            return
        self.year_settings.save_current_year(year)
        if self.year_change_callback:
            self.year_change_callback(year)

    def get_year(self):
        try:
            year = int(self.year_var.get().strip())
        except ValueError:
            return None
        return year if self.year_settings.is_valid_year(year) else None

    def get_date_limit(self):
        """Selected limit date, or None when the limit is switched off"""
        if not self.limit_enabled.get():
            return None
        value = self.limit_entry.get_date()
        return value if isinstance(value, date) else None

    def show_date_limit(self, visible):
        if visible:
            self.limit_frame.grid()
        else:
            self.limit_enabled.set(False)
            self._toggle_limit()
            self.limit_frame.grid_remove()

    def show(self):
        if self.date_section:
            self.date_section.grid()

    def hide(self):
        if self.date_section:
            self.date_section.grid_remove()
