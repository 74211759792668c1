"""pi-backdrop: animated character-grid backdrop with draggable boxes."""

# Front-end
from pi.backdrop.app import BackdropApp

# Box registry
from pi.backdrop.boxes import DYNAMIC, STATIC, Box, BoxElement, BoxRegistry

# Engine commands
from pi.backdrop.commands import (
    Command,
    CommandQueue,
    DoubleClick,
    FocusLost,
    FontChanged,
    KeyPress,
    PointerDown,
    PointerLeave,
    PointerMove,
    PointerUp,
    Resize,
    StructureChanged,
)

# Screen composition
from pi.backdrop.compositor import compose_frame

# Settings
from pi.backdrop.config import BackdropSettings, deep_merge_settings, load_settings

# Overlay document
from pi.backdrop.document import (
    DEFAULT_LAYOUT,
    Document,
    LayoutError,
    NavStrip,
    Panel,
    layout_from_dict,
    load_layout,
)

# Interaction
from pi.backdrop.drag import DragController, clamp_position, snap_to_grid
from pi.backdrop.editing import EditController, normalize_content

# Core engine
from pi.backdrop.engine import BackdropEngine, OverlaySource
from pi.backdrop.geometry import Rect
from pi.backdrop.grid import DEFAULT_GLYPHS, Glyph, GlyphSet, Grid, grid_dimensions

# Metrics
from pi.backdrop.metrics import (
    CellDimensions,
    CharMetrics,
    MetricsError,
    MetricsProvider,
    TerminalMetrics,
)
from pi.backdrop.occlusion import TRAIL_DURATION_MS, PointerState, update_grid
from pi.backdrop.render import render, render_lines

# Terminal interface
from pi.backdrop.terminal import ProcessTerminal, Terminal

__all__ = [
    # Front-end
    "BackdropApp",
    # Boxes
    "DYNAMIC",
    "STATIC",
    "Box",
    "BoxElement",
    "BoxRegistry",
    # Commands
    "Command",
    "CommandQueue",
    "DoubleClick",
    "FocusLost",
    "FontChanged",
    "KeyPress",
    "PointerDown",
    "PointerLeave",
    "PointerMove",
    "PointerUp",
    "Resize",
    "StructureChanged",
    # Composition
    "compose_frame",
    # Settings
    "BackdropSettings",
    "deep_merge_settings",
    "load_settings",
    # Document
    "DEFAULT_LAYOUT",
    "Document",
    "LayoutError",
    "NavStrip",
    "Panel",
    "layout_from_dict",
    "load_layout",
    # Interaction
    "DragController",
    "EditController",
    "clamp_position",
    "normalize_content",
    "snap_to_grid",
    # Engine
    "BackdropEngine",
    "OverlaySource",
    "Rect",
    "DEFAULT_GLYPHS",
    "Glyph",
    "GlyphSet",
    "Grid",
    "grid_dimensions",
    "TRAIL_DURATION_MS",
    "PointerState",
    "update_grid",
    "render",
    "render_lines",
    # Metrics
    "CellDimensions",
    "CharMetrics",
    "MetricsError",
    "MetricsProvider",
    "TerminalMetrics",
    # Terminal
    "ProcessTerminal",
    "Terminal",
]
