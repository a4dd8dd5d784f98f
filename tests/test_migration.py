"""Tests for moving sections between patterns."""

import re

from contracts import IssueCode, PatternCategory, SectionComposition
from patterns import (
    PROP_ALIASES,
    duplicate_section,
    generate_section_id,
    is_valid_for_export,
    is_valid_for_preview,
    migrate_section,
    validate_section,
)
from patterns.migration import aliases_for


def _section(pattern_id, props, variant="dark", intent=None):
    return SectionComposition(
        id=f"{pattern_id}-0001",
        pattern_id=pattern_id,
        variant_id=variant,
        props=props,
        intent=intent,
    )


class TestMigrateSection:
    """Prop carry-over between patterns."""

    def test_features_array_survives_bento_to_alternating(self, registry):
        items = [
            {"title": "A", "description": "First", "image": ""},
            {"title": "B", "description": "Second", "image": ""},
        ]
        section = _section("features-bento", {"title": "Why Forge", "features": items})

        migrated = migrate_section(section, "features-alternating", registry)

        assert migrated.pattern_id == "features-alternating"
        assert migrated.variant_id is None
        assert migrated.id == section.id
        assert [f["title"] for f in migrated.props["features"]] == ["A", "B"]
        assert migrated.props["title"] == "Why Forge"

    def test_round_trip_keeps_shared_names(self, registry):
        original = _section("hero-split-image", {
            "headline": "Deploy on push",
            "subheadline": "Zero config pipelines.",
            "primaryCta": "Start free",
            "secondaryCta": "Read docs",
            "image": "https://cdn.example.com/shot.png",
        })

        there = migrate_section(original, "hero-gradient", registry)
        back = migrate_section(there, "hero-split-image", registry)

        for name in ("headline", "subheadline", "primaryCta"):
            assert back.props[name] == original.props[name]

    def test_alias_table_maps_title_to_headline(self, registry):
        section = _section("features-grid", {"title": "Ship it", "subtitle": "Today."})
        migrated = migrate_section(section, "hero-centered", registry)
        assert migrated.props["headline"] == "Ship it"

    def test_hero_image_carried_to_poster(self, registry):
        section = _section("hero-split-image", {
            "headline": "Go", "primaryCta": "Go", "image": "https://cdn.example.com/a.png",
        })
        migrated = migrate_section(section, "hero-video-bg", registry)
        assert migrated.props["posterImage"] == "https://cdn.example.com/a.png"

    def test_features_column_count_preserved(self, registry):
        section = _section("features-grid", {"title": "T", "features": [{"title": "x"}], "columns": 2})
        migrated = migrate_section(section, "features-icon-grid", registry)
        assert migrated.props["columns"] == 2

    def test_over_length_text_is_carried_whole(self, registry):
        headline = "Ship reliable backend services to production every day without tears or toil"
        section = _section("hero-split-image", {"headline": headline, "primaryCta": "Go"})

        migrated = migrate_section(section, "hero-video-bg", registry)

        assert migrated.props["headline"] == headline
        result = validate_section(migrated, registry)
        assert is_valid_for_preview(result)
        assert not is_valid_for_export(result)
        assert [issue.path for issue in result.warnings if issue.code == IssueCode.MAX_LENGTH_EXCEEDED] == [
            "props.headline"
        ]

    def test_round_trip_through_smaller_limit(self, registry):
        headline = "Ship reliable backend services to production every day without tears or toil"
        original = _section("hero-split-image", {"headline": headline, "primaryCta": "Start free"})

        back = migrate_section(migrate_section(original, "hero-video-bg", registry), "hero-split-image", registry)

        assert back.props["headline"] == headline
        assert back.props["primaryCta"] == "Start free"

    def test_missing_values_take_target_defaults(self, registry):
        section = _section("cta-simple", {"headline": "Try it"})
        migrated = migrate_section(section, "hero-split-image", registry)
        target = registry.get("hero-split-image")
        assert migrated.props["primaryCta"] == target.get_slot("primaryCta").default

    def test_unknown_target_swaps_id_only(self, registry, caplog):
        section = _section("hero-centered", {"headline": "Hi"}, intent=PatternCategory.HERO)
        migrated = migrate_section(section, "hero-from-the-future", registry)
        assert migrated.pattern_id == "hero-from-the-future"
        assert migrated.props == section.props
        assert migrated.variant_id is None
        assert "Unknown pattern" in caplog.text

    def test_source_is_not_mutated(self, registry):
        items = [{"title": "A", "description": "x", "image": ""}]
        section = _section("features-bento", {"title": "T", "features": items})
        migrated = migrate_section(section, "features-grid", registry)
        migrated.props["features"][0]["title"] = "changed"
        assert section.props["features"][0]["title"] == "A"

    def test_custom_flags_cleared(self, registry):
        section = SectionComposition(
            id="c1", pattern_id="custom-12345678", props={"title": "Integrations"},
            is_custom_generated=True,
        )
        migrated = migrate_section(section, "features-grid", registry)
        assert migrated.is_custom_generated is False
        assert migrated.custom_slots is None
        assert migrated.props["title"] == "Integrations"


class TestAliases:

    def test_aliases_exclude_self(self):
        assert "headline" not in aliases_for("headline")
        assert aliases_for("headline") == ["title", "heading"]

    def test_items_belongs_to_two_groups(self):
        assert "features" in aliases_for("items")
        assert "products" in aliases_for("items")

    def test_groups_are_disjoint_within_themselves(self):
        for group in PROP_ALIASES:
            assert len(group) == len(set(group))


class TestSectionIds:

    def test_deterministic_with_parts(self):
        first = generate_section_id("hero-centered", 7, "/", 0)
        assert first == generate_section_id("hero-centered", 7, "/", 0)
        assert first != generate_section_id("hero-centered", 7, "/", 1)
        assert re.fullmatch(r"hero-centered-[0-9a-f]{8}", first)

    def test_random_without_parts(self):
        assert generate_section_id("cta-simple") != generate_section_id("cta-simple")

    def test_duplicate_section_gets_new_id(self):
        section = _section("cta-simple", {"headline": "Go", "items": [1]})
        copy = duplicate_section(section)
        assert copy.id != section.id
        assert copy.pattern_id == section.pattern_id
        copy.props["items"].append(2)
        assert section.props["items"] == [1]
