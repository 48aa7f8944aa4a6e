"""
Render stored resume preview JSON as HTML and plain text.

The preview JSON comes in two shapes: the AI output (flat, with a
``contacts`` list) and the editor shape (``{"design": ..., "content": ...}``
with a ``contact`` mapping). Both are normalized before rendering.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"

DEFAULT_COLORS = {
    "background": "#FFFFFF",
    "textPrimary": "#1F2937",
    "textSecondary": "#4B5563",
    "accent": "#0EA5E9",
}
DEFAULT_TYPOGRAPHY = {
    "headingFont": "Helvetica",
    "bodyFont": "Roboto, sans-serif",
    "headingSize": "24px",
    "bodySize": "14px",
}
DEFAULT_MARGINS = {"top": 40, "bottom": 40, "left": 40, "right": 40}
CONTACT_ORDER = ("email", "phone", "location", "linkedin", "github", "website")

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def load_preview(preview: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
    """Preview JSON may be stored as a string or an object."""
    if not preview:
        return {}
    if isinstance(preview, str):
        preview = json.loads(preview)
    if not isinstance(preview, dict):
        raise ValueError("Preview JSON must be an object")
    return dict(preview)


def _contact_mapping(content: Dict[str, Any]) -> Dict[str, str]:
    contact = dict(content.get("contact") or {})
    for item in content.get("contacts") or []:
        if isinstance(item, dict) and item.get("type") and item.get("value"):
            contact.setdefault(item["type"], item["value"])
    if content.get("location"):
        contact.setdefault("location", content["location"])
    return {
        key: value for key, value in contact.items()
        if value and str(value).strip() and value != "Not provided"
    }


def build_template_context(preview: Dict[str, Any]) -> Dict[str, Any]:
    design = preview.get("design") or {}
    content = preview.get("content") or preview
    pdf_layout = design.get("pdfLayout") or {}

    layout = design.get("layout") or "two-column"
    if isinstance(layout, dict):
        two_column = layout.get("columns", 2) >= 2
    else:
        two_column = layout == "two-column"

    # AI output uses a flat "colors" palette instead of the editor's colorScheme
    palette = design.get("colors") or {}
    ai_colors = {
        key: palette[source]
        for key, source in (("background", "background"), ("textPrimary", "text"),
                            ("textSecondary", "secondary"), ("accent", "accent"))
        if palette.get(source)
    }

    contact = _contact_mapping(content)
    return {
        "content": content,
        "colors": {**DEFAULT_COLORS, **ai_colors, **(design.get("colorScheme") or {})},
        "typography": {**DEFAULT_TYPOGRAPHY, **(design.get("typography") or {})},
        "margins": {**DEFAULT_MARGINS, **(pdf_layout.get("margins") or {})},
        "landscape": pdf_layout.get("orientation") == "landscape",
        "two_column": two_column,
        "contact_values": [contact[key] for key in CONTACT_ORDER if key in contact],
    }


def render_resume_html(preview: Union[str, Dict[str, Any]]) -> str:
    """Render preview JSON with the built-in resume template."""
    template = _env.get_template("resume.html")
    return template.render(**build_template_context(load_preview(preview)))


def render_resume_text(resume: Dict[str, Any]) -> str:
    """Plain-text version of a structured resume, used for the .txt download."""
    sections: List[str] = [
        (resume.get("name") or "").upper(),
        resume.get("title") or "",
    ]

    contact = _contact_mapping(resume)
    contact_line = [contact[key] for key in ("email", "website", "linkedin", "github") if key in contact]
    if contact_line:
        sections.append(" | ".join(contact_line))

    education = resume.get("education") or []
    if education:
        sections.append("\nEDUCATION")
        for item in education:
            sections.append(f"{item.get('degree', '')}, {item.get('institution', '')} ({item.get('dates', '')})")
            for detail in item.get("details") or []:
                sections.append(f"• {detail}")

    experience = resume.get("experience") or []
    if experience:
        sections.append("\nEXPERIENCE")
        for item in experience:
            sections.append(f"{item.get('position', '')}, {item.get('company', '')} ({item.get('dates', '')})")
            if item.get("highlights"):
                sections.append(f"Highlights: {', '.join(item['highlights'])}")
            if item.get("tags"):
                sections.append(f"Tags: {', '.join(item['tags'])}")

    skills = resume.get("skills") or []
    if skills:
        sections.append("\nSKILLS")
        sections.append(", ".join(skills))

    return "\n".join(sections)
