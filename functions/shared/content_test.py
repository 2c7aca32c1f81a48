import unittest

from shared.content import (
    Contact,
    Section,
    SectionStatus,
    SiteConfig,
    Slide,
    SlideKind,
    galleries_from_dict,
    galleries_to_dict,
)
from shared.json_utils import camel_to_snake, snake_to_camel


class SlideKindTest(unittest.TestCase):
    def test_video_wins_over_modal_image(self):
        slide = Slide.from_dict({"video": "v.mp4", "modalImage": "i.jpg"})
        self.assertEqual(slide.kind, SlideKind.VIDEO)

    def test_canvas_only(self):
        self.assertEqual(Slide.from_dict({"canvas": True}).kind, SlideKind.CANVAS)

    def test_no_markers_is_unknown(self):
        slide = Slide.from_dict({"title": "Plain", "src": "images/a.jpg"})
        self.assertEqual(slide.kind, SlideKind.UNKNOWN)

    def test_gallery_beats_image_and_canvas(self):
        slide = Slide.from_dict(
            {"modalGallery": ["a.jpg"], "modalImage": "b.jpg", "canvas": True}
        )
        self.assertEqual(slide.kind, SlideKind.GALLERY)

    def test_empty_video_is_not_a_marker(self):
        slide = Slide.from_dict({"video": "", "modalImage": "b.jpg"})
        self.assertEqual(slide.kind, SlideKind.IMAGE)

    def test_canvas_video_kinds(self):
        self.assertEqual(
            Slide.from_dict({"canvasVideo": True, "video": "v.mp4"}).kind,
            SlideKind.CANVAS_VIDEO,
        )
        self.assertEqual(
            Slide.from_dict(
                {"canvasVideo": True, "video": "v.mp4", "modalGallery": []}
            ).kind,
            SlideKind.GALLERY_CANVAS_VIDEO,
        )

    def test_kind_follows_field_changes(self):
        slide = Slide(modal_image="a.jpg")
        self.assertEqual(slide.kind, SlideKind.IMAGE)
        slide.video = "v.mp4"
        self.assertEqual(slide.kind, SlideKind.VIDEO)
        self.assertNotIn("kind", slide.to_dict())


class SlideSerializationTest(unittest.TestCase):
    def test_wire_shape_is_preserved(self):
        raw = {"title": "A", "video": "v.mp4"}
        self.assertEqual(Slide.from_dict(raw).to_dict(), raw)

    def test_unknown_fields_survive(self):
        raw = {"title": "A", "type": "image", "modalGallery": ["x.jpg", "y.jpg"]}
        slide = Slide.from_dict(raw)
        self.assertEqual(slide.modal_gallery, ["x.jpg", "y.jpg"])
        self.assertEqual(slide.to_dict(), raw)

    def test_galleries_keep_slide_order(self):
        raw = {
            "intro": [{"title": "1"}, {"title": "2"}, {"title": "3"}],
            "work": [],
        }
        galleries = galleries_from_dict(raw)
        self.assertEqual([s.title for s in galleries["intro"]], ["1", "2", "3"])
        self.assertEqual(galleries_to_dict(galleries), raw)

    def test_rejects_non_list_gallery(self):
        with self.assertRaises(ValueError):
            galleries_from_dict({"intro": {"title": "A"}})


class SectionStatusTest(unittest.TestCase):
    def test_defaults_to_show(self):
        self.assertEqual(Section.from_dict({"key": "work"}).status, SectionStatus.SHOW)

    def test_visible_false_hides(self):
        section = Section.from_dict({"key": "work", "visible": False})
        self.assertEqual(section.status, SectionStatus.HIDE)

    def test_explicit_status_wins_over_visible(self):
        section = Section.from_dict({"key": "work", "visible": False, "status": "soon"})
        self.assertEqual(section.status, SectionStatus.SOON)

    def test_legacy_flag_is_not_written_back(self):
        section = Section.from_dict({"key": "work", "label": "Work", "visible": False})
        self.assertEqual(
            section.to_dict(), {"key": "work", "label": "Work", "status": "hide"}
        )


class SiteConfigTest(unittest.TestCase):
    def test_round_trip_keeps_extras(self):
        raw = {
            "bio": "Hello",
            "apiBase": "https://api.example.test",
            "shaderUrl": "shaders/mobile.glsl",
            "heroText": "Hi",
            "mobileShader": "void main(){}",
            "contacts": [{"label": "Email", "value": "me@example.test"}],
            "sections": [{"key": "work", "label": "Work", "status": "show"}],
        }
        config = SiteConfig.from_dict(raw)
        self.assertEqual(config.api_base, "https://api.example.test")
        self.assertEqual(config.hero_text, "Hi")
        self.assertEqual(config.extra, {"mobileShader": "void main(){}"})
        self.assertEqual(config.to_dict(), raw)

    def test_incomplete_contacts_are_dropped(self):
        config = SiteConfig(
            contacts=[
                Contact(label="Email", value="me@example.test"),
                Contact(label="Phone", value=""),
                Contact(label=" ", value="x"),
            ]
        )
        self.assertEqual(
            config.to_dict()["contacts"], [{"label": "Email", "value": "me@example.test"}]
        )

    def test_duplicate_section_keys_keep_first(self):
        config = SiteConfig.from_dict(
            {"sections": [{"key": "a", "label": "1"}, {"key": "a", "label": "2"}]}
        )
        self.assertEqual([s.label for s in config.sections], ["1"])

    def test_empty_document_gives_defaults(self):
        config = SiteConfig.from_dict({})
        self.assertEqual(config.contacts, [])
        self.assertEqual(config.to_dict(), {"contacts": [], "sections": []})

    def test_null_text_fields_become_empty(self):
        config = SiteConfig.from_dict(
            {"contacts": [{"label": None, "value": "x"}], "sections": [{"key": "a", "label": None}]}
        )
        self.assertEqual(config.contacts[0].label, "")
        self.assertFalse(config.contacts[0].is_complete)
        self.assertEqual(config.sections[0].label, "")

    def test_malformed_entries_are_rejected(self):
        for raw in (
            {"contacts": ["mail"]},
            {"contacts": {"label": "Email"}},
            {"contacts": [{"label": 5, "value": "x"}]},
            {"sections": [{"key": 5}]},
            {"sections": ["work"]},
            {"sections": [{"key": "work", "label": ["Work"]}]},
        ):
            with self.subTest(raw=raw):
                with self.assertRaises(ValueError):
                    SiteConfig.from_dict(raw)


class KeyStyleTest(unittest.TestCase):
    def test_camel_and_snake(self):
        self.assertEqual(camel_to_snake("modalGallery"), "modal_gallery")
        self.assertEqual(camel_to_snake("apiBase"), "api_base")
        self.assertEqual(snake_to_camel("canvas_video"), "canvasVideo")
        self.assertEqual(snake_to_camel("bio"), "bio")


if __name__ == "__main__":
    unittest.main()
