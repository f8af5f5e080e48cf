"""
Theme catalogue
Named colour palettes served to the frontend as JSON or as CSS custom properties
"""

from typing import Optional

DEFAULT_THEME = "light"


def _palette(primary, secondary, accent, background, surface, text, text_secondary, border, glass_bg):
    return {
        "primary": primary,
        "secondary": secondary,
        "accent": accent,
        "background": background,
        "surface": surface,
        "text": text,
        "textSecondary": text_secondary,
        "border": border,
        "gradient": f"linear-gradient(135deg, {primary} 0%, {secondary} 100%)",
        "glassBg": glass_bg,
    }


THEMES = {
    "light": {
        "name": "Light",
        "description": "Clean and bright interface",
        "colors": _palette(
            "#0073EA", "#00C875", "#FF6B6B", "#FFFFFF", "#F8FAFC",
            "#1E293B", "#64748B", "#E2E8F0", "rgba(248, 250, 252, 0.9)",
        ),
    },
    "dark": {
        "name": "Dark",
        "description": "Elegant dark interface",
        "colors": _palette(
            "#3B82F6", "#10B981", "#F59E0B", "#0F172A", "#1E293B",
            "#F1F5F9", "#94A3B8", "#334155", "rgba(30, 41, 59, 0.9)",
        ),
    },
    "ocean": {
        "name": "Ocean",
        "description": "Calming ocean blue theme",
        "colors": _palette(
            "#0EA5E9", "#06B6D4", "#8B5CF6", "#F0F9FF", "#E0F2FE",
            "#0C4A6E", "#0369A1", "#BAE6FD", "rgba(240, 249, 255, 0.9)",
        ),
    },
    "forest": {
        "name": "Forest",
        "description": "Natural green theme",
        "colors": _palette(
            "#059669", "#10B981", "#F59E0B", "#F0FDF4", "#DCFCE7",
            "#14532D", "#166534", "#BBF7D0", "rgba(240, 253, 244, 0.9)",
        ),
    },
    "sunset": {
        "name": "Sunset",
        "description": "Warm sunset colors",
        "colors": _palette(
            "#EA580C", "#F59E0B", "#EF4444", "#FFF7ED", "#FED7AA",
            "#9A3412", "#C2410C", "#FDBA74", "rgba(255, 247, 237, 0.9)",
        ),
    },
    "corporate": {
        "name": "Corporate",
        "description": "Professional corporate theme",
        "colors": _palette(
            "#4F46E5", "#7C3AED", "#06B6D4", "#FAFAFA", "#F4F4F5",
            "#18181B", "#52525B", "#E4E4E7", "rgba(244, 244, 245, 0.9)",
        ),
    },
    "pink": {
        "name": "Pink",
        "description": "Playful pink theme",
        "colors": _palette(
            "#EC4899", "#F472B6", "#8B5CF6", "#FDF2F8", "#FCE7F3",
            "#831843", "#BE185D", "#F9A8D4", "rgba(253, 242, 248, 0.9)",
        ),
    },
}


def get_theme(name: Optional[str]) -> Optional[dict]:
    return THEMES.get((name or DEFAULT_THEME).lower())


def css_variables(name: str) -> Optional[str]:
    """Render a theme as a :root block of --theme-* custom properties"""
    theme = get_theme(name)
    if theme is None:
        return None

    lines = [f"  --theme-{key}: {value};" for key, value in theme["colors"].items()]
    if name.lower() == "dark":
        lines.append("  color-scheme: dark;")
    return ":root {\n" + "\n".join(lines) + "\n}\n"
