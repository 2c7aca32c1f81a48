"""
Portfolio content model shared by the admin client and the gateway.

Documents travel as camelCase JSON. Each model parses the keys it knows into
snake_case fields and keeps every other key in `extra`, so fields written by
other tools survive a load/save cycle untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import Any, Optional

from dacite import Config, from_dict

from shared.json_utils import camel_to_snake, snake_to_camel

logger = logging.getLogger(__name__)

_DACITE_CONFIG = Config(check_types=False)


def _split_fields(data_class, data: dict) -> tuple[dict, dict]:
    """Partition wire keys into known snake_case fields and untouched extras."""
    names = {f.name for f in fields(data_class) if f.name != "extra"}
    known: dict = {}
    extra: dict = {}
    for key, value in data.items():
        snake = camel_to_snake(key)
        if snake in names:
            known[snake] = value
        else:
            extra[key] = value
    return known, extra


def _require_object(data, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _require_list(data, what: str) -> list:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"{what} must be a list, got {type(data).__name__}")
    return data


def _text(known: dict, name: str, what: str) -> str:
    """Returns a string field, treating a missing or null value as empty."""
    value = known.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what} {name} must be a string, got {type(value).__name__}")
    return value


def _scalar_fields_to_wire(obj, skip: tuple[str, ...] = ()) -> dict:
    out: dict = {}
    for f in fields(obj):
        if f.name == "extra" or f.name in skip:
            continue
        value = getattr(obj, f.name)
        if value is None:
            continue
        out[snake_to_camel(f.name)] = list(value) if isinstance(value, list) else value
    return out


class SlideKind(StrEnum):
    GALLERY_CANVAS_VIDEO = "gallery-canvas-video"
    CANVAS_VIDEO = "canvas-video"
    VIDEO = "video"
    GALLERY = "gallery"
    IMAGE = "image"
    CANVAS = "canvas"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, slide: "Slide") -> "SlideKind":
        """
        Resolves the display kind of a slide from its fields.

        Precedence, first match wins: canvas video together with a modal
        gallery, canvas video, video, modal gallery, modal image, canvas flag.
        A slide carrying none of these markers is UNKNOWN.
        """
        if slide.canvas_video and slide.modal_gallery is not None:
            return cls.GALLERY_CANVAS_VIDEO
        if slide.canvas_video:
            return cls.CANVAS_VIDEO
        if slide.video:
            return cls.VIDEO
        if slide.modal_gallery is not None:
            return cls.GALLERY
        if slide.modal_image:
            return cls.IMAGE
        if slide.canvas:
            return cls.CANVAS
        return cls.UNKNOWN


@dataclass
class Slide:
    """One media unit of a gallery. Its kind is always derived, never stored."""

    title: Optional[str] = None
    description: Optional[str] = None
    src: Optional[str] = None
    video: Optional[str] = None
    modal_image: Optional[str] = None
    modal_gallery: Optional[list[str]] = None
    canvas: Optional[bool] = None
    canvas_video: Optional[bool] = None
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def kind(self) -> SlideKind:
        return SlideKind.of(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Slide":
        if not isinstance(data, dict):
            raise ValueError(f"Slide must be an object, got {type(data).__name__}")
        known, extra = _split_fields(cls, data)
        slide = from_dict(data_class=cls, data=known, config=_DACITE_CONFIG)
        slide.extra = extra
        return slide

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out.update(_scalar_fields_to_wire(self))
        return out


class SectionStatus(StrEnum):
    SHOW = "show"
    SOON = "soon"
    HIDE = "hide"

    @classmethod
    def resolve(cls, status: Optional[str], visible: Optional[bool] = None) -> "SectionStatus":
        """
        An explicit status wins. Without one, the older `visible` flag maps
        `False` to HIDE; anything else defaults to SHOW.
        """
        if status:
            try:
                return cls(status)
            except ValueError:
                logger.warning(f"Ignoring unknown section status {status!r}")
        if visible is False:
            return cls.HIDE
        return cls.SHOW


@dataclass
class Contact:
    label: str = ""
    value: str = ""
    visible: Optional[bool] = None
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.label.strip() and self.value.strip())

    @classmethod
    def from_dict(cls, data: dict) -> "Contact":
        known, extra = _split_fields(cls, _require_object(data, "Contact"))
        contact = from_dict(data_class=cls, data=known, config=_DACITE_CONFIG)
        contact.label = _text(known, "label", "Contact")
        contact.value = _text(known, "value", "Contact")
        contact.extra = extra
        return contact

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out.update(_scalar_fields_to_wire(self))
        return out


@dataclass
class Section:
    key: str
    label: str = ""
    status: SectionStatus = SectionStatus.SHOW
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Section":
        _require_object(data, "Section")
        # `visible` is the pre-status flag; it only feeds the status default.
        legacy_visible = data.get("visible")
        data = {k: v for k, v in data.items() if k != "visible"}
        known, extra = _split_fields(cls, data)
        return cls(
            key=_text(known, "key", "Section").strip(),
            label=_text(known, "label", "Section"),
            status=SectionStatus.resolve(known.get("status"), legacy_visible),
            extra=extra,
        )

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out.update({"key": self.key, "label": self.label, "status": self.status.value})
        return out


@dataclass
class SiteConfig:
    bio: Optional[str] = None
    api_base: Optional[str] = None
    shader_url: Optional[str] = None
    site_name: Optional[str] = None
    hero_text: Optional[str] = None
    show_logo: Optional[bool] = None
    version: Optional[str] = None
    contacts: list[Contact] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SiteConfig":
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"Site config must be an object, got {type(data).__name__}")
        known, extra = _split_fields(cls, data)
        contacts = [Contact.from_dict(c) for c in _require_list(known.pop("contacts", None), "contacts")]

        sections: list[Section] = []
        seen: set[str] = set()
        for raw in _require_list(known.pop("sections", None), "sections"):
            section = Section.from_dict(raw)
            if section.key in seen:
                logger.warning(f"Dropping duplicate section key {section.key!r}")
                continue
            seen.add(section.key)
            sections.append(section)

        config = from_dict(data_class=cls, data=known, config=_DACITE_CONFIG)
        config.contacts = contacts
        config.sections = sections
        config.extra = extra
        return config

    def to_dict(self) -> dict:
        """
        Serializes the config for persistence. Contacts missing a label or a
        value and sections without a key are not written.
        """
        out = dict(self.extra)
        out.update(_scalar_fields_to_wire(self, skip=("contacts", "sections")))
        out["contacts"] = [c.to_dict() for c in self.contacts if c.is_complete]
        out["sections"] = [s.to_dict() for s in self.sections if s.key]
        return out


Galleries = dict[str, list[Slide]]


def galleries_from_dict(data: Optional[dict]) -> Galleries:
    if not data:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Galleries must be an object, got {type(data).__name__}")
    galleries: Galleries = {}
    for key, items in data.items():
        if not isinstance(items, list):
            raise ValueError(f"Gallery {key!r} must be a list of slides")
        galleries[str(key)] = [Slide.from_dict(item) for item in items]
    return galleries


def galleries_to_dict(galleries: Galleries) -> dict[str, list[dict]]:
    return {key: [slide.to_dict() for slide in slides] for key, slides in galleries.items()}
