"""Tests for the pattern registry and catalog loading."""

import json

import pytest

from contracts import PatternCategory, SlotKind
from patterns import RegistryError, load_registry, parse_catalog
from patterns.registry import PatternRegistry


def _pattern(pattern_id, category="hero", tags=None, slots=None, **extra):
    entry = {
        "id": pattern_id,
        "name": pattern_id.replace("-", " ").title(),
        "category": category,
        "tags": tags or [category],
        "variants": ["light", "dark"],
        "slots": slots if slots is not None else [
            {"name": "headline", "kind": "text", "required": True, "max_length": 40, "default": "Hello"},
        ],
    }
    entry.update(extra)
    return entry


class TestBundledCatalog:
    """The shipped catalog loads and is internally consistent."""

    def test_loads(self, registry):
        assert len(registry) >= 20
        assert registry.version == "1.0.0"

    def test_slot_names_unique(self, registry):
        for pattern in registry.all():
            names = pattern.slot_names
            assert len(names) == len(set(names)), pattern.id

    def test_required_slots_have_defaults_within_length(self, registry):
        for pattern in registry.all():
            for slot in pattern.required_slots:
                assert slot.default not in (None, "", []), f"{pattern.id}.{slot.name}"
                if slot.is_text and slot.max_length:
                    assert len(slot.default) <= slot.max_length

    def test_every_page_type_category_has_patterns(self, registry):
        from config import PAGE_TYPE_CATEGORIES

        for categories in PAGE_TYPE_CATEGORIES.values():
            for category in categories:
                assert registry.by_category(category), category

    def test_default_variant_is_supported(self, registry):
        for pattern in registry.all():
            assert pattern.preferred_variant in pattern.variants


class TestLookups:
    """Lookup and query helpers."""

    def test_get_returns_requested_pattern(self, registry):
        pattern = registry.get("hero-split-image")
        assert pattern is not None
        assert pattern.id == "hero-split-image"
        assert pattern.category == PatternCategory.HERO

    def test_get_unknown_returns_none(self, registry):
        assert registry.get("hero-does-not-exist") is None
        assert not registry.exists("hero-does-not-exist")
        assert "hero-does-not-exist" not in registry

    def test_by_category_sorted_by_id(self, registry):
        heroes = registry.by_category(PatternCategory.HERO)
        ids = [p.id for p in heroes]
        assert ids == sorted(ids)
        assert all(p.category == PatternCategory.HERO for p in heroes)
        assert registry.by_category("hero") == heroes

    def test_by_tags_any_and_all(self, registry):
        any_match = registry.by_tags(["bento", "cinematic"])
        assert {p.id for p in any_match} >= {"features-bento", "hero-video-bg"}
        all_match = registry.by_tags(["hero", "technical"], match_all=True)
        assert "hero-split-image" in {p.id for p in all_match}
        assert registry.by_tags([]) == []

    def test_search_is_case_insensitive(self, registry):
        results = registry.search("BENTO")
        assert "features-bento" in [p.id for p in results]
        assert registry.search("   ") == []

    def test_by_inspiration_matches_substring(self, registry):
        linear = {p.id for p in registry.by_inspiration("Linear")}
        assert {"hero-centered", "hero-gradient", "features-bento"} <= linear
        assert "pricing-simple" not in linear
        assert registry.by_inspiration("") == []
        assert registry.by_inspiration("example.org") == []

    def test_similar_stays_in_category(self, registry):
        similar = registry.similar("features-grid", limit=2)
        assert len(similar) <= 2
        assert all(p.category == PatternCategory.FEATURES for p in similar)
        assert "features-grid" not in [p.id for p in similar]
        assert registry.similar("nope") == []

    def test_recommended_excludes_zero_overlap(self, registry):
        recommended = registry.recommended(["developer", "technical"], limit=3)
        assert recommended
        for pattern in recommended:
            assert {"developer", "technical"} & {t.lower() for t in pattern.tags}

    def test_patterns_mapping_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry.patterns["x"] = registry.get("hero-centered")

    def test_image_slots(self, registry):
        pattern = registry.get("features-icon-grid")
        features = pattern.get_slot("features")
        assert features.kind == SlotKind.ARRAY
        assert features.image_fields() == ["image"]
        assert pattern.image_slots == [features]

    def test_defaults_are_fresh_copies(self, registry):
        pattern = registry.get("features-grid")
        first = pattern.defaults()
        first["features"].append({"title": "Extra"})
        assert len(pattern.defaults()["features"]) == 3
        assert pattern.defaults()["columns"] == 3

    def test_info(self, registry):
        info = registry.info()
        assert info["total"] == len(registry)
        assert info["categories"]["hero"] == len(registry.by_category("hero"))


class TestCatalogErrors:
    """Malformed catalogs fail at load time with RegistryError."""

    def test_duplicate_ids(self):
        with pytest.raises(RegistryError, match="Duplicate pattern id"):
            parse_catalog({"patterns": [_pattern("hero-a"), _pattern("hero-a")]})

    def test_duplicate_slot_names(self):
        slots = [
            {"name": "headline", "kind": "text", "required": True, "default": "A"},
            {"name": "headline", "kind": "text"},
        ]
        with pytest.raises(RegistryError, match="hero-a"):
            parse_catalog({"patterns": [_pattern("hero-a", slots=slots)]})

    def test_unknown_category(self):
        with pytest.raises(RegistryError):
            parse_catalog({"patterns": [_pattern("widget-a", category="widget")]})

    def test_required_slot_without_default(self):
        slots = [{"name": "headline", "kind": "text", "required": True}]
        with pytest.raises(RegistryError, match="no default"):
            parse_catalog({"patterns": [_pattern("hero-a", slots=slots)]})

    def test_default_longer_than_max_length(self):
        slots = [{"name": "headline", "kind": "text", "required": True, "max_length": 3, "default": "Too long"}]
        with pytest.raises(RegistryError, match="max length"):
            parse_catalog({"patterns": [_pattern("hero-a", slots=slots)]})

    def test_missing_patterns_list(self):
        with pytest.raises(RegistryError):
            parse_catalog({"version": "1"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(RegistryError, match="not found"):
            load_registry(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json")
        with pytest.raises(RegistryError, match="not valid JSON"):
            load_registry(path)

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"version": "2.0.0", "patterns": [_pattern("hero-a")]}))
        loaded = load_registry(path)
        assert isinstance(loaded, PatternRegistry)
        assert loaded.version == "2.0.0"
        assert loaded.get("hero-a").slot_names == ["headline"]
