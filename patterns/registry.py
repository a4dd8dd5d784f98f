"""Pattern registry: the read-only catalog of section patterns.

The catalog is loaded once from a static JSON file. Any malformed entry is a
configuration error raised at load time, never at query time.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from contracts import Pattern, PatternCategory
from config import settings
from .slots import is_empty

logger = logging.getLogger(__name__)

_registry: Optional["PatternRegistry"] = None


class RegistryError(Exception):
    """The pattern catalog is malformed."""


class PatternRegistry:
    """Immutable lookup structure over a set of patterns."""

    def __init__(self, patterns: Iterable[Pattern], version: str = "1.0.0"):
        by_id: Dict[str, Pattern] = {}
        for pattern in patterns:
            if pattern.id in by_id:
                raise RegistryError(f"Duplicate pattern id: {pattern.id}")
            _check_required_defaults(pattern)
            by_id[pattern.id] = pattern
        self._patterns: Mapping[str, Pattern] = MappingProxyType(by_id)
        self.version = version

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, pattern_id: object) -> bool:
        return pattern_id in self._patterns

    @property
    def patterns(self) -> Mapping[str, Pattern]:
        return self._patterns

    def all(self) -> List[Pattern]:
        return [self._patterns[pid] for pid in sorted(self._patterns)]

    def get(self, pattern_id: str) -> Optional[Pattern]:
        return self._patterns.get(pattern_id)

    def exists(self, pattern_id: str) -> bool:
        return pattern_id in self._patterns

    def by_category(self, category: Union[PatternCategory, str]) -> List[Pattern]:
        category = PatternCategory(category)
        return [p for p in self.all() if p.category == category]

    def by_tag(self, tag: str) -> List[Pattern]:
        tag = tag.lower()
        return [p for p in self.all() if tag in _lower(p.tags)]

    def by_tags(self, tags: Iterable[str], match_all: bool = False) -> List[Pattern]:
        """Patterns carrying any (or, with match_all, every) of the tags."""
        wanted = {t.lower() for t in tags}
        if not wanted:
            return []
        matches = []
        for pattern in self.all():
            have = set(_lower(pattern.tags))
            if (wanted <= have) if match_all else (wanted & have):
                matches.append(pattern)
        return matches

    def by_inspiration(self, source: str) -> List[Pattern]:
        """Patterns whose inspiration sources contain ``source`` (case-insensitive)."""
        needle = source.strip().lower()
        if not needle:
            return []
        return [p for p in self.all() if any(needle in s for s in _lower(p.inspiration_sources))]

    def search(self, query: str) -> List[Pattern]:
        """Case-insensitive substring search over name, description, guidance, and tags."""
        needle = query.strip().lower()
        if not needle:
            return []
        results = []
        for pattern in self.all():
            haystack = [pattern.name, pattern.description, pattern.ai_guidance, *pattern.tags]
            if any(needle in field.lower() for field in haystack):
                results.append(pattern)
        return results

    def similar(self, pattern_id: str, limit: int = 5) -> List[Pattern]:
        """Same-category patterns ranked by shared tags, ties broken by id."""
        pattern = self.get(pattern_id)
        if pattern is None:
            return []
        tags = set(_lower(pattern.tags))
        others = [p for p in self.by_category(pattern.category) if p.id != pattern_id]
        others.sort(key=lambda p: (-len(tags & set(_lower(p.tags))), p.id))
        return others[:limit]

    def recommended(self, tags: Iterable[str], limit: int = 10) -> List[Pattern]:
        """Patterns across all categories ranked by tag overlap; zero-overlap entries excluded."""
        wanted = {t.lower() for t in tags}
        scored = []
        for pattern in self.all():
            score = len(wanted & set(_lower(pattern.tags)))
            if score > 0:
                scored.append((score, pattern))
        scored.sort(key=lambda item: (-item[0], item[1].id))
        return [pattern for _, pattern in scored[:limit]]

    def categories(self) -> List[PatternCategory]:
        """Categories that have at least one pattern, in enum order."""
        present = {p.category for p in self._patterns.values()}
        return [c for c in PatternCategory if c in present]

    def info(self) -> Dict[str, Any]:
        counts = {c.value: len(self.by_category(c)) for c in self.categories()}
        return {
            "version": self.version,
            "total": len(self),
            "categories": counts,
        }


def _lower(values: Iterable[str]) -> List[str]:
    return [v.lower() for v in values]


def _check_required_defaults(pattern: Pattern) -> None:
    for slot in pattern.required_slots:
        if is_empty(slot.default):
            raise RegistryError(
                f"Required slot '{slot.name}' of pattern '{pattern.id}' has no default value"
            )
        if slot.is_text and slot.max_length is not None and isinstance(slot.default, str):
            if len(slot.default) > slot.max_length:
                raise RegistryError(
                    f"Default of slot '{slot.name}' in pattern '{pattern.id}' "
                    f"exceeds max length {slot.max_length}"
                )


def parse_catalog(data: Dict[str, Any]) -> PatternRegistry:
    """Build a registry from decoded catalog JSON."""
    entries = data.get("patterns")
    if not isinstance(entries, list):
        raise RegistryError("Catalog must contain a 'patterns' list")
    patterns = []
    for index, entry in enumerate(entries):
        try:
            patterns.append(Pattern.model_validate(entry))
        except ValidationError as e:
            ident = entry.get("id", f"#{index}") if isinstance(entry, dict) else f"#{index}"
            raise RegistryError(f"Invalid pattern {ident}: {e}") from e
    return PatternRegistry(patterns, version=str(data.get("version", "1.0.0")))


def load_registry(path: Optional[Union[str, Path]] = None) -> PatternRegistry:
    """Load a catalog file into a registry.

    Raises:
        RegistryError: If the file is missing, not JSON, or holds a malformed entry
    """
    catalog_path = Path(path) if path else settings.get_registry_path()
    try:
        data = json.loads(catalog_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise RegistryError(f"Pattern catalog not found: {catalog_path}") from e
    except json.JSONDecodeError as e:
        raise RegistryError(f"Pattern catalog is not valid JSON: {e}") from e
    registry = parse_catalog(data)
    logger.debug("[Registry] Loaded %d patterns from %s", len(registry), catalog_path)
    return registry


def get_registry() -> PatternRegistry:
    """Return the process-wide registry, loading it on first use."""
    global _registry
    if _registry is None:
        _registry = load_registry()
    return _registry
