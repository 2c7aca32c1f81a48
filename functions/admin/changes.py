"""
Human-readable summaries of what a save is about to change.
"""

from __future__ import annotations

from shared.content import Galleries, SiteConfig, Slide
from shared.json_utils import snake_to_camel

# Slide fields reported individually, in display order.
TRACKED_SLIDE_FIELDS = (
    "title",
    "description",
    "src",
    "video",
    "modal_image",
    "modal_gallery",
    "canvas",
    "canvas_video",
)


def _slide_label(slide: Slide, index: int) -> str:
    return f"#{index + 1} {slide.title!r}" if slide.title else f"#{index + 1}"


def summarize_slides(key: str, before: list[Slide], after: list[Slide]) -> list[str]:
    lines = []
    for i in range(max(len(before), len(after))):
        if i >= len(before):
            lines.append(f"{key}: added slide {_slide_label(after[i], i)} ({after[i].kind})")
        elif i >= len(after):
            lines.append(f"{key}: removed slide {_slide_label(before[i], i)}")
        else:
            old, new = before[i], after[i]
            changed = [
                snake_to_camel(name)
                for name in TRACKED_SLIDE_FIELDS
                if getattr(old, name) != getattr(new, name)
            ]
            if old.extra != new.extra:
                changed.append("other fields")
            if changed:
                lines.append(f"{key}: slide {_slide_label(new, i)} changed {', '.join(changed)}")
    return lines


def summarize_galleries(before: Galleries, after: Galleries) -> list[str]:
    lines = []
    for key in after:
        if key not in before:
            lines.append(f"{key}: new gallery with {len(after[key])} slide(s)")
        else:
            lines.extend(summarize_slides(key, before[key], after[key]))
    for key in before:
        if key not in after:
            lines.append(f"{key}: gallery no longer in draft")
    return lines


def summarize_site(before: SiteConfig, after: SiteConfig) -> list[str]:
    old, new = before.to_dict(), after.to_dict()
    return [
        f"site: {name} changed"
        for name in list(new) + [k for k in old if k not in new]
        if old.get(name) != new.get(name)
    ]
