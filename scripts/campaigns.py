"""Campaign configuration: colours, anchors, templates and file naming.

A campaign bundles every constant that differs between certificate variants so
one compositor serves them all. Built-in campaigns live in CAMPAIGNS; a JSON
file can override any field of a built-in one:

{
    "base": "arthritis",
    "name_color": "#33589e",
    "name": {"x": 41, "y": 41.4, "font_size": 2.8},
    "photo": {"x": 40.5, "y": 73, "radius": 8},
    "signature": {"x": 53, "y": 67.5, "width": 26, "height": 15},
    "final_template": "assets/arthritis/certificate_final.jpg"
}
"""

import dataclasses
import json
from dataclasses import dataclass, field
from pathlib import Path

from anchors import BoxAnchor, CircleAnchor, TextAnchor

ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"

DEFAULT_EVENT = {
    "event": "generate_certificate",
    "event_category": "engagement",
    "event_label": "Certificate Generated",
}


@dataclass(frozen=True)
class Campaign:
    key: str
    title: str
    name: TextAnchor
    photo: CircleAnchor
    signature: BoxAnchor
    signature_fallback: BoxAnchor
    name_color: str = "#33589e"
    ink_color: str = "#1e3a8a"
    stroke_width: int = 3
    font: str = "Barlow-Bold.ttf"
    editor_template: str = ""
    final_template: str = ""
    signature_canvas: tuple = (1000, 400)
    file_prefix: str = "Pledge_Certificate"
    file_extension: str = ".jpg"
    reset_screen: str = "editor"
    hotspots: dict = field(default_factory=dict)
    analytics_event: dict = field(default_factory=lambda: dict(DEFAULT_EVENT))


# Where the user clicks on the editor template to open each dialog
_ARTHRITIS_HOTSPOTS = {
    "name": BoxAnchor(38, 37, 35, 6),
    "photo": BoxAnchor(32, 63, 17, 20),
    "signature": BoxAnchor(53, 68, 17, 10),
}

ARTHRITIS = Campaign(
    key="arthritis",
    title="World Arthritis Week Pledge",
    name=TextAnchor(x=41, y=41.4, font_size=2.8),
    photo=CircleAnchor(x=40.5, y=73, radius=8),
    signature=BoxAnchor(x=53, y=67.5, width=26, height=15),
    signature_fallback=BoxAnchor(x=57.8, y=60.5, width=22, height=10.5),
    name_color="#33589e",
    ink_color="#1e3a8a",
    editor_template=str(ASSETS_DIR / "arthritis" / "certificate.jpg"),
    final_template=str(ASSETS_DIR / "arthritis" / "certificate_final.jpg"),
    signature_canvas=(1000, 400),
    file_prefix="Arthritis_Pledge_Certificate",
    reset_screen="editor",
    hotspots=_ARTHRITIS_HOTSPOTS,
)

CFS = dataclasses.replace(
    ARTHRITIS,
    key="cfs",
    title="Chronic Fatigue Syndrome Awareness Pledge",
    editor_template=str(ASSETS_DIR / "cfs" / "certificate.jpg"),
    final_template=str(ASSETS_DIR / "cfs" / "certificate_final.jpg"),
    signature_canvas=(800, 250),
    file_prefix="CFS_Pledge_Certificate",
    reset_screen="intro",
)

CAMPAIGNS = {c.key: c for c in (ARTHRITIS, CFS)}

_ANCHOR_FIELDS = {
    "name": TextAnchor,
    "photo": CircleAnchor,
    "signature": BoxAnchor,
    "signature_fallback": BoxAnchor,
}


def get_campaign(key):
    try:
        return CAMPAIGNS[key]
    except KeyError:
        raise ValueError(f"Unknown campaign: {key}. "
                         f"Available: {', '.join(sorted(CAMPAIGNS))}") from None


def campaign_from_dict(data):
    """Build a campaign from a base campaign plus JSON-style overrides."""
    data = dict(data)
    base = get_campaign(data.pop("base", "arthritis"))
    known = {f.name for f in dataclasses.fields(Campaign)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown campaign keys: {', '.join(sorted(unknown))}")

    overrides = {}
    for key, value in data.items():
        if key in _ANCHOR_FIELDS:
            anchor_cls = _ANCHOR_FIELDS[key]
            try:
                value = anchor_cls(**value)
            except TypeError as e:
                raise ValueError(f"Bad anchor for '{key}': {e}") from None
        elif key == "hotspots":
            value = {name: BoxAnchor(**box) for name, box in value.items()}
        elif key == "signature_canvas":
            value = tuple(value)
        overrides[key] = value
    return dataclasses.replace(base, **overrides)


def load_campaign(name_or_path):
    """Return a built-in campaign by key, or load one from a JSON file."""
    if isinstance(name_or_path, Campaign):
        return name_or_path
    if name_or_path in CAMPAIGNS:
        return CAMPAIGNS[name_or_path]
    path = Path(name_or_path)
    if not path.exists():
        return get_campaign(name_or_path)
    with open(path, "r") as f:
        return campaign_from_dict(json.load(f))


def campaign_to_dict(campaign):
    return dataclasses.asdict(campaign)
