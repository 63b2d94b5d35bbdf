"""
Navigation Component
One button per emission module plus the report and maintenance pages.
"""

import tkinter as tk
from .styles import COLORS, SPACING, BUTTON_STYLES

MODULE_PAGES = ['electricity', 'gas', 'fuel', 'refrigerant']
TOOL_PAGES = ['general', 'factors', 'cups']


class NavigationComponent:
    """Navigation bar component with active state management"""

    def __init__(self, parent, select_callback, page_titles):
        self.parent = parent
        self.select_callback = select_callback
        self.page_titles = page_titles
        self.nav_buttons = {}
        self.nav_bar = None

    def create(self):
        """Create the navigation bar"""
        self.nav_bar = tk.Frame(self.parent, bg=COLORS['BACKGROUND_BORDER'])
        self.nav_bar.grid(row=1, column=0, sticky=(tk.W, tk.E), padx=5, pady=(0, 5))
        self.nav_bar.columnconfigure(0, weight=1)

        nav_container = tk.Frame(self.nav_bar, bg=COLORS['BACKGROUND_BORDER'])
        nav_container.pack(pady=SPACING['MEDIUM'], padx=SPACING['LARGE'])

        self.nav_buttons = {}
        for page in MODULE_PAGES + TOOL_PAGES:
            is_module = page in MODULE_PAGES
            style = BUTTON_STYLES['nav_module_inactive' if is_module else 'nav_tool_inactive']
            button = tk.Button(
                nav_container,
                text=self.page_titles.get(page, page),
                font=style['font'],
                bg=style['bg'],
                fg=style['fg'],
                relief='flat',
                bd=0 if is_module else 1,
                cursor='hand2',
                command=lambda p=page: self.select_callback(p),
                activebackground=COLORS['BACKGROUND_LIGHT'],
                padx=SPACING['LARGE'] if is_module else 10,
                pady=6 if is_module else 4
            )
            # Gap between the module buttons and the tool buttons
            left_pad = SPACING['XLARGE'] if page == TOOL_PAGES[0] else 0
            button.pack(side='left', padx=(left_pad, 5))
            self.nav_buttons[page] = button

        return self.nav_bar

    def update_active_state(self, active_page):
        """Update navigation button visual states"""
        for page, button in self.nav_buttons.items():
            kind = 'nav_module' if page in MODULE_PAGES else 'nav_tool'
            state = 'active' if page == active_page else 'inactive'
            style = BUTTON_STYLES[f"{kind}_{state}"]
            button.configure(bg=style['bg'], fg=style['fg'], font=style['font'])

    def show(self):
        if self.nav_bar:
            self.nav_bar.grid()

    def hide(self):
        if self.nav_bar:
            self.nav_bar.grid_remove()
