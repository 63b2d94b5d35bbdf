"""
UI Styles and Constants
Shared palette and sizes for the calculator windows.
"""

COLORS = {
    'PRIMARY_GREEN': '#276749',
    'ACCENT_BLUE': '#2b6cb0',

    'BACKGROUND_WHITE': '#ffffff',
    'BACKGROUND_GRAY': '#f4f6f5',
    'BACKGROUND_LIGHT': '#edf5ef',
    'BACKGROUND_BORDER': '#d5e0d8',

    'TEXT_PRIMARY': '#1f2d24',
    'TEXT_SECONDARY': '#3f5246',
    'TEXT_MUTED': '#6b7d71',
}

FONTS = {
    'BODY': ('Segoe UI', 10),
    'SMALL': ('Segoe UI', 9),
    'NAV_MODULE': ('Segoe UI', 11, 'bold'),
    'NAV_TOOL': ('Segoe UI', 10),
    'NAV_TOOL_ACTIVE': ('Segoe UI', 10, 'bold'),
}

SPACING = {
    'SMALL': 4,
    'MEDIUM': 8,
    'LARGE': 15,
    'XLARGE': 20,
}

DIMENSIONS = {
    'FILE_LABEL_WIDTH': 60,
    'COMBO_WIDTH': 32,
    'TREE_HEIGHT': 12,
}

# Energy module tabs are green, store and report tools are blue
BUTTON_STYLES = {
    'nav_module_active': {'bg': COLORS['PRIMARY_GREEN'], 'fg': COLORS['BACKGROUND_WHITE'],
                          'font': FONTS['NAV_MODULE']},
    'nav_module_inactive': {'bg': COLORS['BACKGROUND_LIGHT'], 'fg': COLORS['TEXT_SECONDARY'],
                            'font': FONTS['NAV_MODULE']},
    'nav_tool_active': {'bg': COLORS['ACCENT_BLUE'], 'fg': COLORS['BACKGROUND_WHITE'],
                        'font': FONTS['NAV_TOOL_ACTIVE']},
    'nav_tool_inactive': {'bg': COLORS['BACKGROUND_WHITE'], 'fg': COLORS['TEXT_SECONDARY'],
                          'font': FONTS['NAV_TOOL']},
}
