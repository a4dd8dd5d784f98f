"""Tests for bespoke section synthesis."""

import asyncio

import pytest

from agents import GapFillerAgent, brand_context, can_fulfill_with_pattern, custom_pattern_id, fallback_section
from agents.gap_filler_agent import MAX_CUSTOM_SLOTS, MAX_TEXT_LENGTH, detect_category, sanitize_slots
from contracts import (
    CustomSlotSpec,
    PageRequest,
    PatternCategory,
    SectionRequirement,
    SlotKind,
    is_custom_pattern_id,
)
from patterns import validate_section

from conftest import FakeLLMProvider, payload


REQUIREMENT = SectionRequirement(
    category=PatternCategory.FEATURES,
    description="Show how a deploy moves from git push to production in three steps",
)


@pytest.fixture
def context(request_factory):
    return brand_context(request_factory(), PageRequest())


def _fill(agent, context, requirement=REQUIREMENT, surrounding=()):
    pattern_id = custom_pattern_id(0, "/", 1)
    return asyncio.run(agent.fill(requirement, context, "custom-section-1", pattern_id, surrounding))


class TestFill:
    """Designed sections carry their own schema."""

    def test_designed_section(self, registry, context):
        llm = FakeLLMProvider({
            "name": "Deploy timeline",
            "reason": "A stepper tells the story",
            "slots": [
                {"name": "title", "kind": "text", "required": True, "max_length": 60},
                {"name": "steps", "kind": "array", "required": True},
                {"name": "bad name", "kind": "text"},
                {"name": "title", "kind": "richText"},
            ],
            "props": {
                "title": "From push to prod",
                "steps": [{"label": "Push"}, {"label": "Build"}, {"label": "Ship"}],
                "extra": "dropped",
            },
        })
        agent = GapFillerAgent(llm_provider=llm)

        result = _fill(agent, context, surrounding=["hero-split-image", "cta-simple"])

        assert not result.used_fallback
        section = result.value
        assert section.is_custom_generated
        assert is_custom_pattern_id(section.pattern_id)
        assert [slot.name for slot in section.custom_slots] == ["title", "steps"]
        assert section.props == {
            "title": "From push to prod",
            "steps": [{"label": "Push"}, {"label": "Build"}, {"label": "Ship"}],
        }
        assert section.intent == PatternCategory.FEATURES
        assert validate_section(section, registry).valid

        sent = payload(llm.calls[0]["user"])
        assert sent["surrounding_sections"] == ["hero-split-image", "cta-simple"]
        assert sent["requirement"] == REQUIREMENT.description

    def test_required_slot_missing_from_props(self, context):
        llm = FakeLLMProvider({
            "name": "Callout",
            "slots": [{"name": "title", "kind": "text", "required": True, "max_length": 40}],
            "props": {},
        })
        section = _fill(GapFillerAgent(llm_provider=llm), context).value
        assert section.props["title"] == "Forge"

    def test_service_failure_yields_minimal_section(self, registry, context):
        agent = GapFillerAgent(llm_provider=FakeLLMProvider(ConnectionError("refused")))

        result = _fill(agent, context)

        assert result.used_fallback
        section = result.value
        assert section.props["title"] == "Forge Features"
        assert section.props["description"] == REQUIREMENT.description
        assert [slot.name for slot in section.custom_slots] == ["title", "description"]
        assert validate_section(section, registry).valid

    def test_unusable_schema_falls_back(self, context):
        llm = FakeLLMProvider({"name": "Broken", "slots": [{"name": "9lives"}], "props": {}})
        result = _fill(GapFillerAgent(llm_provider=llm), context)
        assert result.used_fallback
        assert result.error == "generated schema had no usable slots"

    def test_blank_requirement_description(self, context):
        agent = GapFillerAgent(llm_provider=FakeLLMProvider(RuntimeError("down")))
        requirement = SectionRequirement(category=PatternCategory.STATS)
        section = _fill(agent, context, requirement=requirement).value
        assert section.props["description"] == "A stats section"


class TestSlotSanitizing:

    def test_slot_count_is_capped(self):
        specs = [CustomSlotSpec(name=f"field{i}") for i in range(12)]
        assert len(sanitize_slots(specs)) == MAX_CUSTOM_SLOTS

    def test_text_lengths_are_clamped(self):
        slots = sanitize_slots([
            CustomSlotSpec(name="long", kind=SlotKind.TEXT, max_length=50000),
            CustomSlotSpec(name="open", kind=SlotKind.RICH_TEXT),
            CustomSlotSpec(name="negative", kind=SlotKind.TEXT, max_length=-5),
            CustomSlotSpec(name="photo", kind=SlotKind.IMAGE, max_length=10),
        ])
        assert [slot.max_length for slot in slots] == [MAX_TEXT_LENGTH, MAX_TEXT_LENGTH, MAX_TEXT_LENGTH, None]


class TestHelpers:

    def test_custom_ids(self, registry):
        first = custom_pattern_id(42, "/", 3)
        assert first == custom_pattern_id(42, "/", 3)
        assert first != custom_pattern_id(42, "/", 4)
        assert first.startswith("custom-")
        assert not registry.exists(first)

    def test_fallback_section_helper(self, context):
        section = fallback_section("s1", "custom-00000000", REQUIREMENT, context)
        assert section.id == "s1"
        assert section.custom_slots[1].kind == SlotKind.RICH_TEXT

    def test_detect_category(self):
        assert detect_category("Show our pricing plans") == PatternCategory.PRICING
        assert detect_category("Meet the founders and the team") == PatternCategory.TEAM
        assert detect_category("zzz") is None

    def test_can_fulfill_with_pattern(self, registry):
        assert can_fulfill_with_pattern("A waitlist signup form", registry) == "cta-banner"
        assert can_fulfill_with_pattern("something unrelated entirely", registry) is None
