# palette.py

import string


class AppColors:
    background = "#000000"
    card_background = "#1C1C1E"
    accent = "#5E5CE6"  # Primary accent (purple-blue)
    secondary_accent = "#30D158"  # Success / gain (green)
    warning_accent = "#FF453A"  # Warning / loss (red)
    text_primary = "#FFFFFF"
    text_secondary = "#8E8E93"


COLOR_NAMES = tuple(name for name in vars(AppColors) if not name.startswith("_"))


def color(name):
    """Return the hex string for a named palette color."""
    if name not in COLOR_NAMES:
        raise KeyError(f"Unknown palette color: {name!r}")
    return getattr(AppColors, name)


def hex_to_rgba(hex_string):
    """Parse a 3, 6 or 8 digit hex color into an (r, g, b, a) tuple of 0-255 ints.

    Eight digits are read as ARGB. Anything that is not hex is stripped first,
    and an unsupported length gives opaque black.
    """
    digits = "".join(ch for ch in hex_string if ch in string.ascii_letters + string.digits)
    try:
        value = int(digits, 16)
    except ValueError:
        value = 0

    if len(digits) == 3:  # RGB (12-bit)
        a, r, g, b = 255, (value >> 8) * 17, (value >> 4 & 0xF) * 17, (value & 0xF) * 17
    elif len(digits) == 6:  # RGB (24-bit)
        a, r, g, b = 255, value >> 16, value >> 8 & 0xFF, value & 0xFF
    elif len(digits) == 8:  # ARGB (32-bit)
        a, r, g, b = value >> 24, value >> 16 & 0xFF, value >> 8 & 0xFF, value & 0xFF
    else:
        a, r, g, b = 255, 0, 0, 0
    return r, g, b, a


def rgba_css(hex_string, opacity=None):
    r, g, b, a = hex_to_rgba(hex_string)
    alpha = a / 255 if opacity is None else opacity
    return f"rgba({r}, {g}, {b}, {alpha:g})"


def pnl_color(is_gain):
    # Days are colored by the explicit gain flag, not by the sign of the amount
    return AppColors.secondary_accent if is_gain else AppColors.warning_accent
