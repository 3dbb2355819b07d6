"""Fixed label tables used by fragment producers.

Preset keys are the values stored in node payloads; labels are the text
that ends up in prompts.
"""

from __future__ import annotations

SHOT_PRESET_LABELS: dict[str, str] = {
    "establishing": "Establishing Shot",
    "wide": "Wide Shot",
    "medium": "Medium Shot",
    "close-up": "Close-up",
    "extreme-close-up": "Extreme Close-up",
    "over-the-shoulder": "Over-the-Shoulder",
    "two-shot": "Two-Shot",
    "low-angle": "Low Angle",
    "high-angle": "High Angle",
    "dutch-angle": "Dutch Angle",
    "pov": "POV Shot",
    "birds-eye": "Bird's Eye",
    "tracking": "Tracking Shot",
}

CUSTOM_ERA = "custom"

ERA_PRESET_LABELS: dict[str, str] = {
    "prehistoric": "Prehistoric era",
    "ancient": "Ancient antiquity",
    "medieval": "Medieval period",
    "renaissance": "Renaissance",
    "victorian": "Victorian era",
    "1920s": "1920s",
    "1950s": "1950s",
    "1980s": "1980s",
    "contemporary": "Contemporary",
    "near-future": "Near future",
    "far-future": "Far future",
    CUSTOM_ERA: "Custom Era",
}

_PRE_INDUSTRIAL = ["electric lights", "cars", "plastic", "modern clothing", "smartphones"]
_PRE_DIGITAL = ["smartphones", "flat screen displays", "laptops", "LED lighting"]

# Terms an era should keep out of the image. Eras without an entry (custom,
# contemporary) produce no auto-negatives.
ERA_AUTO_NEGATIVES: dict[str, list[str]] = {
    "prehistoric": ["metal tools", "buildings", "woven fabric", "writing", *_PRE_INDUSTRIAL],
    "ancient": ["gunpowder weapons", "printed text", "eyeglasses", *_PRE_INDUSTRIAL],
    "medieval": ["firearms", "printed newspapers", "eyeglasses", *_PRE_INDUSTRIAL],
    "renaissance": ["steam engines", "zippers", *_PRE_INDUSTRIAL],
    "victorian": ["cars", "airplanes", "plastic", "modern clothing", "smartphones", "neon signs"],
    "1920s": ["television", "jet aircraft", "plastic furniture", *_PRE_DIGITAL],
    "1950s": ["personal computers", "color television sets", *_PRE_DIGITAL],
    "1980s": ["smartphones", "flat screen displays", "wireless earbuds", "electric scooters"],
    "near-future": ["vintage cars", "analog telephones", "period costume"],
    "far-future": ["contemporary cars", "contemporary clothing", "analog technology"],
}

LENS_TYPE_LABELS: dict[str, str] = {
    "ultra-wide": "Ultra-wide 14mm lens",
    "wide": "Wide 24mm lens",
    "standard": "Standard 50mm",
    "portrait": "Portrait 85mm lens",
    "telephoto": "Telephoto 200mm lens",
    "macro": "Macro lens",
    "fisheye": "Fisheye lens",
    "anamorphic": "Anamorphic lens",
}

DEPTH_OF_FIELD_LABELS: dict[str, str] = {
    "deep": "Deep focus",
    "shallow": "Shallow depth of field",
    "bokeh": "Heavy bokeh",
    "tilt-shift": "Tilt-shift miniature focus",
}

CAMERA_FEEL_LABELS: dict[str, str] = {
    "locked": "Locked-off camera",
    "handheld": "Handheld camera",
    "steadicam": "Steadicam glide",
    "drone": "Drone footage",
}

FILM_STOCK_LABELS: dict[str, str] = {
    "digital": "Digital",
    "35mm": "35mm film grain",
    "16mm": "16mm film grain",
    "kodachrome": "Kodachrome color",
    "black-and-white": "Black and white film",
    "polaroid": "Polaroid instant film",
}

EXPOSURE_STYLE_LABELS: dict[str, str] = {
    "balanced": "Balanced exposure",
    "high-key": "High-key lighting",
    "low-key": "Low-key lighting",
    "overexposed": "Overexposed highlights",
    "silhouette": "Silhouette exposure",
}

VIGNETTE_LABELS: dict[str, str] = {
    "none": "No vignette",
    "subtle": "Subtle vignette",
    "heavy": "Heavy vignette",
}

# (payload key, label table, default preset). Defaults contribute nothing.
CAMERA_SETTINGS: tuple[tuple[str, dict[str, str], str], ...] = (
    ("lens_type", LENS_TYPE_LABELS, "standard"),
    ("depth_of_field", DEPTH_OF_FIELD_LABELS, "deep"),
    ("camera_feel", CAMERA_FEEL_LABELS, "locked"),
    ("film_stock", FILM_STOCK_LABELS, "digital"),
    ("exposure", EXPOSURE_STYLE_LABELS, "balanced"),
    ("vignette", VIGNETTE_LABELS, "none"),
)

CAMERA_POSITION_AFTER_SHOT = "after-shot"
CAMERA_POSITION_WITH_STYLE = "with-style"

RESOLUTIONS = frozenset({"1K", "2K", "4K"})
