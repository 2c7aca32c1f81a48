"""
Draft state of one admin session.

The model loads galleries and the site config once, applies edits in memory
and persists them only through explicit whole-document saves. Saves take a
credential provider; when it supplies nothing the save is abandoned without
touching the backend.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional

from admin.backends import Backend
from admin.changes import summarize_galleries, summarize_site
from admin.credentials import CredentialProvider, static_credential
from admin.errors import BackendWriteError, PartialSaveError
from admin.uploads import UploadResult
from shared.content import Contact, Galleries, Section, SiteConfig, Slide
from shared.json_utils import camel_to_snake

logger = logging.getLogger(__name__)

EDITABLE_SITE_FIELDS = frozenset(
    {"bio", "api_base", "shader_url", "site_name", "hero_text", "show_logo", "version"}
)
SINGLE_MEDIA_FIELDS = frozenset({"src", "video", "modal_image"})


class SaveStatus(StrEnum):
    SAVED = "saved"
    ABANDONED = "abandoned"
    FAILED = "failed"


@dataclass
class SaveResult:
    status: SaveStatus
    error: Optional[BackendWriteError] = None
    changes: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == SaveStatus.SAVED


def _check_index(items: list, index: int) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"Position {index} out of range for {len(items)} item(s)")


def _move(items: list, from_index: int, to_index: int) -> None:
    _check_index(items, from_index)
    _check_index(items, to_index)
    items.insert(to_index, items.pop(from_index))


class AdminEditModel:
    def __init__(self, backend: Backend):
        self.backend = backend
        self.galleries: Galleries = {}
        self.site = SiteConfig()
        # Last loaded or saved state; dirtiness is the difference to it.
        self._saved_galleries: Galleries = {}
        self._saved_site = SiteConfig()

    async def load(self) -> None:
        galleries, site = await asyncio.gather(
            self.backend.list_galleries(), self.backend.get_site()
        )
        self.galleries = galleries
        self.site = site
        self._saved_galleries = copy.deepcopy(galleries)
        self._saved_site = copy.deepcopy(site)
        logger.info(f"Loaded {len(galleries)} galleries and {len(site.sections)} sections")

    @property
    def dirty_galleries(self) -> set[str]:
        keys = set(self.galleries) | set(self._saved_galleries)
        return {k for k in keys if self.galleries.get(k) != self._saved_galleries.get(k)}

    @property
    def site_dirty(self) -> bool:
        return self.site != self._saved_site

    @property
    def has_unsaved_changes(self) -> bool:
        return self.site_dirty or bool(self.dirty_galleries)

    # Galleries and slides

    def slides(self, key: str) -> list[Slide]:
        try:
            return self.galleries[key]
        except KeyError:
            raise KeyError(f"No gallery {key!r}") from None

    def add_gallery(self, key: str) -> None:
        key = key.strip()
        if not key:
            raise ValueError("Gallery key must not be empty")
        if key in self.galleries:
            raise ValueError(f"Gallery {key!r} already exists")
        self.galleries[key] = []

    def add_slide(self, key: str, slide: Slide) -> int:
        slides = self.slides(key)
        slides.append(slide)
        return len(slides) - 1

    def replace_slide(self, key: str, index: int, slide: Slide) -> None:
        slides = self.slides(key)
        _check_index(slides, index)
        slides[index] = slide

    def remove_slide(self, key: str, index: int) -> Slide:
        slides = self.slides(key)
        _check_index(slides, index)
        return slides.pop(index)

    def move_slide(self, key: str, from_index: int, to_index: int) -> None:
        _move(self.slides(key), from_index, to_index)

    def apply_upload(self, key: str, index: int, result: UploadResult) -> None:
        """Writes uploaded references into the slide field named by `result.target`."""
        slides = self.slides(key)
        _check_index(slides, index)
        name = camel_to_snake(result.target)
        slide = slides[index]
        if name == "modal_gallery":
            slide.modal_gallery = list(slide.modal_gallery or []) + result.references
        elif name in SINGLE_MEDIA_FIELDS:
            if len(result.references) != 1:
                raise ValueError(f"{result.target} takes exactly one file")
            setattr(slide, name, result.references[0])
        else:
            raise ValueError(f"Slides have no media field {result.target!r}")

    # Site config

    def update_site(self, **changes) -> None:
        unknown = set(changes) - EDITABLE_SITE_FIELDS
        if unknown:
            raise ValueError(f"Not editable site fields: {sorted(unknown)}")
        for name, value in changes.items():
            setattr(self.site, name, value)

    def add_contact(self, contact: Contact) -> int:
        self.site.contacts.append(contact)
        return len(self.site.contacts) - 1

    def replace_contact(self, index: int, contact: Contact) -> None:
        _check_index(self.site.contacts, index)
        self.site.contacts[index] = contact

    def remove_contact(self, index: int) -> Contact:
        _check_index(self.site.contacts, index)
        return self.site.contacts.pop(index)

    def move_contact(self, from_index: int, to_index: int) -> None:
        _move(self.site.contacts, from_index, to_index)

    def _check_section_key(self, key: str, ignore_index: Optional[int] = None) -> None:
        if not key:
            return
        for i, section in enumerate(self.site.sections):
            if i != ignore_index and section.key == key:
                raise ValueError(f"Section key {key!r} is already used")

    def add_section(self, section: Section) -> int:
        section.key = section.key.strip()
        self._check_section_key(section.key)
        self.site.sections.append(section)
        return len(self.site.sections) - 1

    def replace_section(self, index: int, section: Section) -> None:
        _check_index(self.site.sections, index)
        section.key = section.key.strip()
        self._check_section_key(section.key, ignore_index=index)
        self.site.sections[index] = section

    def remove_section(self, index: int) -> Section:
        _check_index(self.site.sections, index)
        return self.site.sections.pop(index)

    def move_section(self, from_index: int, to_index: int) -> None:
        _move(self.site.sections, from_index, to_index)

    # Saving

    async def save_galleries(self, credentials: CredentialProvider) -> SaveResult:
        credential = credentials()
        if not credential:
            logger.info("Gallery save abandoned: no credential")
            return SaveResult(SaveStatus.ABANDONED)

        draft = copy.deepcopy(self.galleries)
        changes = summarize_galleries(self._saved_galleries, draft)
        try:
            await self.backend.save_galleries(draft, credential)
        except PartialSaveError as e:
            for key in e.saved_keys:
                self._saved_galleries[key] = draft[key]
            logger.error(f"Gallery save incomplete: {e}")
            return SaveResult(SaveStatus.FAILED, error=e, changes=changes)
        except BackendWriteError as e:
            logger.error(f"Gallery save failed: {e}")
            return SaveResult(SaveStatus.FAILED, error=e, changes=changes)

        self._saved_galleries = draft
        logger.info(f"Saved {len(draft)} galleries: {'; '.join(changes) or 'no changes'}")
        return SaveResult(SaveStatus.SAVED, changes=changes)

    async def save_site(self, credentials: CredentialProvider) -> SaveResult:
        credential = credentials()
        if not credential:
            logger.info("Site config save abandoned: no credential")
            return SaveResult(SaveStatus.ABANDONED)

        draft = copy.deepcopy(self.site)
        changes = summarize_site(self._saved_site, draft)
        try:
            await self.backend.save_site(draft, credential)
        except BackendWriteError as e:
            logger.error(f"Site config save failed: {e}")
            return SaveResult(SaveStatus.FAILED, error=e, changes=changes)

        self._saved_site = draft
        logger.info(f"Saved site config: {'; '.join(changes) or 'no changes'}")
        return SaveResult(SaveStatus.SAVED, changes=changes)

    async def save_all(self, credentials: CredentialProvider) -> tuple[SaveResult, SaveResult]:
        """
        Saves galleries and the site config as two independent writes.

        The credential is asked for once and used for both; one write
        failing does not stop or undo the other.
        """
        credential = credentials()
        if not credential:
            logger.info("Save abandoned: no credential")
            return SaveResult(SaveStatus.ABANDONED), SaveResult(SaveStatus.ABANDONED)
        provide = static_credential(credential)
        galleries_result, site_result = await asyncio.gather(
            self.save_galleries(provide), self.save_site(provide)
        )
        return galleries_result, site_result

    async def save_shader(self, text: str, credentials: CredentialProvider) -> SaveResult:
        credential = credentials()
        if not credential:
            return SaveResult(SaveStatus.ABANDONED)
        try:
            await self.backend.save_shader(text, credential)
        except BackendWriteError as e:
            logger.error(f"Shader save failed: {e}")
            return SaveResult(SaveStatus.FAILED, error=e)
        return SaveResult(SaveStatus.SAVED, changes=["shader replaced"])
