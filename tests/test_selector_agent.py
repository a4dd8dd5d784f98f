"""Tests for pattern selection and its deterministic fallback."""

import asyncio

import pytest

from agents import SelectorAgent, choose_variant, fallback_select, recommend_layout
from contracts import (
    ComposerMode,
    DecisionSource,
    LayoutType,
    PageRequest,
    PageType,
    PatternCategory,
    ReferenceSiteAnalysis,
    SectionRequirement,
)
from patterns.registry import PatternRegistry

from conftest import FakeLLMProvider, payload


HERO = SectionRequirement(category=PatternCategory.HERO)


@pytest.fixture
def hero_registry(registry):
    return PatternRegistry([registry.get("hero-split-image"), registry.get("hero-video-bg")])


def _choice(pattern_id, **extra):
    choice = {"requirement_index": 0, "pattern_id": pattern_id, "reason": "fits", "confidence_score": 88}
    choice.update(extra)
    return {"choices": [choice]}


def _select(agent, request, requirements=(HERO,), page=None):
    return asyncio.run(agent.select(page or PageRequest(), list(requirements), request))


class TestSelectorFallback:
    """The heuristic takes over whenever the service cannot be trusted."""

    def test_service_unavailable_picks_best_tag_overlap(self, hero_registry, request_factory):
        llm = FakeLLMProvider(RuntimeError("service unavailable"))
        agent = SelectorAgent(registry=hero_registry, llm_provider=llm)

        result = _select(agent, request_factory())

        assert result.used_fallback
        assert "service unavailable" in result.error
        selection = result.value.selections[0]
        assert selection.pattern_id == "hero-split-image"
        assert selection.variant_id == "dark"
        assert selection.source == DecisionSource.FALLBACK
        assert selection.alternatives == ["hero-video-bg"]

    def test_hallucinated_id_is_rejected(self, hero_registry, request_factory):
        agent = SelectorAgent(registry=hero_registry, llm_provider=FakeLLMProvider(_choice("hero-imaginary")))
        result = _select(agent, request_factory())
        assert result.used_fallback
        assert result.value.selections[0].pattern_id == "hero-split-image"
        assert result.value.selections[0].source == DecisionSource.FALLBACK

    def test_wrong_category_is_rejected(self, registry, request_factory):
        agent = SelectorAgent(registry=registry, llm_provider=FakeLLMProvider(_choice("features-grid")))
        result = _select(agent, request_factory())
        selection = result.value.selections[0]
        assert result.used_fallback
        assert registry.get(selection.pattern_id).category == PatternCategory.HERO

    def test_malformed_json_after_retries(self, hero_registry, request_factory):
        llm = FakeLLMProvider("definitely not json")
        agent = SelectorAgent(registry=hero_registry, llm_provider=llm)
        result = _select(agent, request_factory())
        assert result.used_fallback
        assert len(llm.calls) >= 2
        assert "# PREVIOUS ERROR" in llm.calls[-1]["user"]

    def test_missing_choice_for_requirement(self, registry, request_factory):
        answer = _choice("hero-video-bg")
        agent = SelectorAgent(registry=registry, llm_provider=FakeLLMProvider(answer))
        cta = SectionRequirement(category=PatternCategory.CTA)
        result = _select(agent, request_factory(), requirements=(HERO, cta))
        assert result.used_fallback
        assert result.value.selections[0].source == DecisionSource.AI
        assert result.value.selections[1].source == DecisionSource.FALLBACK
        assert registry.get(result.value.selections[1].pattern_id).category == PatternCategory.CTA

    def test_empty_category_reports_no_fit(self, hero_registry, request_factory):
        llm = FakeLLMProvider(RuntimeError("down"))
        agent = SelectorAgent(registry=hero_registry, llm_provider=llm)
        features = SectionRequirement(category=PatternCategory.FEATURES)
        result = _select(agent, request_factory(), requirements=(features,))
        selection = result.value.selections[0]
        assert selection.no_fit
        assert selection.confidence_score == 0


class TestSelectorChoices:
    """Valid answers are honored."""

    def test_valid_choice_is_used(self, hero_registry, request_factory):
        answer = _choice(
            "hero-video-bg", variant_id="overlay",
            alternatives=["hero-split-image", "hero-unknown"],
        )
        answer["layout"] = "layout-bento"
        agent = SelectorAgent(registry=hero_registry, llm_provider=FakeLLMProvider(answer))

        result = _select(agent, request_factory())

        assert not result.used_fallback
        selection = result.value.selections[0]
        assert selection.pattern_id == "hero-video-bg"
        assert selection.variant_id == "overlay"
        assert selection.confidence_score == 88
        assert selection.alternatives == ["hero-split-image"]
        assert selection.source == DecisionSource.AI
        assert result.value.layout == "layout-bento"

    def test_unsupported_variant_is_replaced(self, hero_registry, request_factory):
        answer = _choice("hero-video-bg", variant_id="neon")
        agent = SelectorAgent(registry=hero_registry, llm_provider=FakeLLMProvider(answer))
        result = _select(agent, request_factory())
        assert result.value.selections[0].variant_id == "dark"

    def test_unknown_layout_is_ignored(self, hero_registry, request_factory):
        answer = _choice("hero-video-bg")
        answer["layout"] = "layout-spiral"
        agent = SelectorAgent(registry=hero_registry, llm_provider=FakeLLMProvider(answer))
        result = _select(agent, request_factory())
        assert result.value.layout == LayoutType.MARKETING.value

    def test_candidates_are_bounded_to_the_category(self, registry, request_factory):
        llm = FakeLLMProvider(_choice("hero-centered"))
        agent = SelectorAgent(registry=registry, llm_provider=llm)
        _select(agent, request_factory())
        sent = payload(llm.calls[0]["user"])
        ids = [c["id"] for c in sent["requirements"][0]["candidates"]]
        assert ids
        assert all(registry.get(i).category == PatternCategory.HERO for i in ids)
        assert ids[0] == "hero-split-image"


class TestNoFitHandling:
    """A null pattern id means different things per mode."""

    def test_registry_mode_overrides_no_fit(self, hero_registry, request_factory):
        agent = SelectorAgent(registry=hero_registry, llm_provider=FakeLLMProvider(_choice(None)))
        result = _select(agent, request_factory(mode=ComposerMode.REGISTRY))
        assert result.value.selections[0].pattern_id == "hero-split-image"
        assert result.used_fallback

    def test_hybrid_mode_honors_no_fit(self, hero_registry, request_factory):
        agent = SelectorAgent(registry=hero_registry, llm_provider=FakeLLMProvider(_choice(None)))
        result = _select(agent, request_factory(mode=ComposerMode.HYBRID))
        assert not result.used_fallback
        assert result.value.selections[0].no_fit
        assert result.value.selections[0].source == DecisionSource.AI

    def test_no_fit_ignored_without_gap_filling(self, hero_registry, request_factory):
        agent = SelectorAgent(registry=hero_registry, llm_provider=FakeLLMProvider(_choice(None)))
        result = _select(agent, request_factory(mode=ComposerMode.AUTO, enable_gap_filling=False))
        assert result.value.selections[0].pattern_id == "hero-split-image"

    def test_mode_instructions_sent(self, hero_registry, request_factory):
        llm = FakeLLMProvider(_choice("hero-video-bg"))
        agent = SelectorAgent(registry=hero_registry, llm_provider=llm)
        _select(agent, request_factory(mode=ComposerMode.REGISTRY))
        assert "Never answer null" in payload(llm.calls[0]["user"])["mode_instructions"]


class TestReferenceRecommendations:

    def test_reference_pattern_skips_the_service(self, registry, request_factory):
        request = request_factory()
        request.references.append(ReferenceSiteAnalysis(
            url="https://ref.example.com",
            recommended_patterns=["features-bento", "hero-video-bg"],
        ))
        llm = FakeLLMProvider(RuntimeError("should not be called"))
        agent = SelectorAgent(registry=registry, llm_provider=llm)

        result = _select(agent, request)

        assert llm.calls == []
        assert not result.used_fallback
        selection = result.value.selections[0]
        assert selection.pattern_id == "hero-video-bg"
        assert selection.source == DecisionSource.REFERENCE


class TestHeuristics:

    def test_fallback_select_ties_broken_by_id(self, registry):
        selection = fallback_select(HERO, 0, registry, set())
        heroes = sorted(p.id for p in registry.by_category("hero"))
        assert selection.pattern_id == heroes[0]

    def test_choose_variant(self, registry):
        video = registry.get("hero-video-bg")
        centered = registry.get("hero-centered")
        assert choose_variant(centered, ["playful"]) == "gradient"
        assert choose_variant(centered, ["minimal"]) == "light"
        assert choose_variant(video, ["minimal"]) == "dark"
        assert choose_variant(centered, []) == "light"

    def test_recommend_layout(self, request_factory):
        request = request_factory()
        assert recommend_layout(PageRequest(), request) == LayoutType.MARKETING.value
        assert recommend_layout(PageRequest(page_type=PageType.DASHBOARD), request) == LayoutType.DASHBOARD.value
        assert recommend_layout(PageRequest(page_type=PageType.BLOG_POST), request) == LayoutType.BLOG.value
        request.references.append(ReferenceSiteAnalysis(url="https://x.example.com", layout_type="Bento grid"))
        assert recommend_layout(PageRequest(), request) == LayoutType.BENTO.value
