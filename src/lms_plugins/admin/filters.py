"""Text filters that plugins may run over user-visible text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

_TEX_PATTERN = re.compile(r"(\$\$.+?\$\$|\\\(.+?\\\)|\\\[.+?\\\])", re.DOTALL)
_MLANG_SPAN = re.compile(
    r'<span\s+lang="(?P<lang>[a-zA-Z_-]+)"\s+class="multilang">(?P<text>.*?)</span>',
    re.DOTALL,
)


@dataclass(frozen=True)
class TextFilter:
    """A named text transformation."""

    name: str
    apply: Callable[[str, str], str]


def _mathjaxloader(text: str, lang: str) -> str:
    if "$$" not in text and "\\(" not in text and "\\[" not in text:
        return text
    return _TEX_PATTERN.sub(
        lambda m: f'<span class="filter_mathjaxloader_equation">{m.group(1)}</span>',
        text,
    )


def _multilang(text: str, lang: str) -> str:
    matches = list(_MLANG_SPAN.finditer(text))
    if not matches:
        return text
    langs = {m.group("lang") for m in matches}
    chosen = lang if lang in langs else matches[0].group("lang")

    def keep(m: re.Match) -> str:
        return m.group("text") if m.group("lang") == chosen else ""

    return _MLANG_SPAN.sub(keep, text)


class FilterRegistry:
    """Installed filters, keyed by name."""

    def __init__(self, filters: Iterable[TextFilter] = ()) -> None:
        self._filters: dict[str, TextFilter] = {f.name: f for f in filters}

    @classmethod
    def with_defaults(cls) -> "FilterRegistry":
        return cls([
            TextFilter("mathjaxloader", _mathjaxloader),
            TextFilter("multilang", _multilang),
        ])

    def register(self, textfilter: TextFilter) -> None:
        self._filters[textfilter.name] = textfilter

    def available(self) -> list[str]:
        return sorted(self._filters)

    def apply(self, text: str, names: Iterable[str], *, lang: str = "en") -> str:
        """Run the named filters over *text* in registry order."""
        wanted = set(names)
        for name in self.available():
            if name in wanted:
                text = self._filters[name].apply(text, lang)
        unknown = wanted.difference(self._filters)
        if unknown:
            logger.warning("Ignoring unknown text filters: %s", ", ".join(sorted(unknown)))
        return text
