"""
Shared configuration for report generation.

Values can be overridden via environment variables.
"""

import os
from dataclasses import dataclass

# =============================================================================
# Configuration (can be overridden via environment variables)
# =============================================================================

REPORTS_DIR = os.environ.get("JMH_REPORT_DIR", "reports")
PLOT_DPI = int(os.environ.get("JMH_REPORT_DPI", "150"))


# =============================================================================
# Rendering
# =============================================================================

@dataclass
class RenderingConfiguration:
    """Font sizes and palette used by the chart and report renderers."""
    base_font_size: int = 9
    big_font_size: int = 11
    header_font_size: int = 14
    font_family: str = "sans-serif"
    dpi: int = PLOT_DPI


# Tango palette, one colour per series
SERIES_COLORS = [
    "#c4a000",
    "#ce5c00",
    "#8f5902",
    "#4e9a06",
    "#204a87",
    "#5c3566",
    "#a40000",
    "#555753",
]

PLOT_BACKGROUND = "#dcdcdc"
