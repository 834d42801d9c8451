from __future__ import annotations

import matplotlib.pyplot as plt
from cycler import cycler
from reportlab.lib import colors

PALETTE = {
    "primary": "#4338CA",
    "secondary": "#4F46E5",
    "dark": "#1E1B4B",
    "slate": "#334155",
    "muted": "#64748B",
    "highlight": "#C7D2FE",
}

# One colour per demographic segment, in Demographics field order.
SEGMENT_COLORS = [
    "#4338CA",
    "#DB2777",
    "#059669",
    "#F59E0B",
    "#64748B",
]

PDF_COLORS = {
    "primary": colors.HexColor(PALETTE["primary"]),
    "accent": colors.HexColor(PALETTE["secondary"]),
    "cover_bg": colors.HexColor(PALETTE["dark"]),
    "cover_tagline": colors.HexColor(PALETTE["highlight"]),
    "heading": colors.HexColor("#1E293B"),
    "body": colors.HexColor(PALETTE["slate"]),
    "muted": colors.HexColor(PALETTE["muted"]),
    "value": colors.HexColor("#0F172A"),
    "box_bg": colors.HexColor("#F8FAFC"),
    "box_border": colors.HexColor("#E2E8F0"),
    "table_head": colors.HexColor("#1E293B"),
    "zebra": colors.HexColor("#F1F5F9"),
}


def custom_theme() -> dict:
    return {
        "axes.facecolor": "white",
        "axes.edgecolor": "black",
        "axes.linewidth": 1.0,
        "axes.grid": False,
        # Hide top and right lines
        "axes.spines.top": False,
        "axes.spines.right": False,
        "axes.spines.left": True,
        "axes.spines.bottom": True,

        "axes.titlesize": 14,
        "axes.titleweight": "bold",
        "axes.titlecolor": PALETTE["dark"],
        "axes.titlelocation": "center",

        "axes.labelsize": 11,
        "axes.labelweight": "bold",
        "axes.labelcolor": PALETTE["slate"],

        "xtick.labelsize": 9,
        "ytick.labelsize": 9,
        "xtick.color": PALETTE["slate"],
        "ytick.color": PALETTE["slate"],
        "xtick.major.pad": 6,
        "ytick.major.pad": 6,

        "axes.prop_cycle": cycler(color=[PALETTE["primary"], PALETTE["secondary"], *SEGMENT_COLORS[1:]]),
        "text.color": PALETTE["dark"],
        "font.size": 11,
        "font.family": "DejaVu Sans",
    }


def annotate_point(ax, text: str, xy: tuple[float, float], xytext: tuple[int, int] = (8, 8), color: str = "#000000") -> None:
    ax.annotate(
        text,
        xy=xy,
        xytext=xytext,
        textcoords="offset points",
        fontsize=9,
        color=color,
        arrowprops={"arrowstyle": "->", "color": color, "lw": 1},
    )


def add_headroom(ax, factor: float = 1.2) -> None:
    ymin, ymax = ax.get_ylim()
    if ymax <= 0:
        return
    ax.set_ylim(ymin, ymax * factor)
