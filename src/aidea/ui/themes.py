"""Theme definitions for the TUI.

Hides palette choices. To add a theme, define it here and register it
in the app.
"""

from textual.theme import Theme

# Dark slate with the teal/violet accents of the AI<>DEA web client
AIDEA_DARK = Theme(
    name="aidea-dark",
    primary="#5eead4",
    secondary="#a78bfa",
    accent="#fbbf24",
    foreground="#e2e8f0",
    background="#0b1120",
    success="#4ade80",
    warning="#fb923c",
    error="#f87171",
    surface="#111827",
    panel="#0f172a",
    dark=True,
    variables={
        "block-cursor-foreground": "#0b1120",
        "block-cursor-background": "#5eead4",
        "block-cursor-text-style": "bold",
        "input-cursor-background": "#e2e8f0",
        "input-cursor-foreground": "#0b1120",
        "input-selection-background": "#5eead4 30%",
        "border": "#334155",
        "border-blurred": "#1e293b",
        "scrollbar": "#1e293b",
        "scrollbar-hover": "#334155",
        "scrollbar-active": "#5eead4",
        "scrollbar-background": "#0f172a",
        "footer-key-foreground": "#fbbf24",
        "footer-background": "#0b1120",
        "text-muted": "#64748b",
    },
)
