"""
Text Normalizer
================

Canonicalizes text for matching while keeping a map from every cleaned
character back to the raw character it came from.

Passes (applied in this order, each consuming the previous output):
    1. Drop zero-width characters and soft hyphens
    2. Drop bracketed numeric reference markers ("[12]", "[3, 4]", "[5-7]")
       together with the whitespace right before them
    3. Rejoin words hyphenated across a line break ("hyper-\\nparameter")
    4. Straighten curly quotes
    5. Collapse whitespace runs to one space and trim
    6. Lower-case

Every pass works on a sequence of (char, raw_index) glyphs, so dropped
characters simply disappear from the sequence and surviving characters
keep the index they had in the raw input. The final glyph sequence *is*
the position map.

Data Flow:
    raw text → TextNormalizer → NormalizedText(cleaned, position_map)
                                 → SpanLocator / PageLocator
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Sequence

Glyph = tuple[str, int]
NormalizationPass = Callable[[list[Glyph]], list[Glyph]]


# ── Character classes ──────────────────────────────────────────────

ZERO_WIDTH_CHARS = frozenset({
    "\u00ad",  # soft hyphen
    "\u200b",  # zero width space
    "\u200c",  # zero width non-joiner
    "\u200d",  # zero width joiner
    "\u2060",  # word joiner
    "\ufeff",  # zero width no-break space / BOM
})

QUOTE_MAP = {
    "\u201c": '"', "\u201d": '"', "\u201e": '"', "\u201f": '"',
    "\u2018": "'", "\u2019": "'", "\u201a": "'", "\u201b": "'",
}

LINE_BREAKS = frozenset("\n\r\x0b\x0c\u2028\u2029")

# "[12]", "[ 3, 4 ]", "[5-7]", "[1;2]" with any whitespace before it.
# At least one digit is required so "[]" and "[ - ]" stay text.
BRACKET_REF_REGEX = re.compile(r"\s*\[[\s,;\-\u2013]*\d[\d\s,;\-\u2013]*\]")

HYPHEN_BREAK_REGEX = re.compile(r"-(\s+)")


# ── Position-mapped result ─────────────────────────────────────────

@dataclass(frozen=True)
class NormalizedText:
    """
    Cleaned text plus its map back to the raw input.

    Invariant:
        len(position_map) == len(cleaned)
        position_map is non-decreasing
        raw[position_map[i]] is the character cleaned[i] came from
    """
    raw: str
    cleaned: str
    position_map: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.cleaned)

    def to_raw(self, cleaned_index: int) -> int:
        """Raw offset of the character at `cleaned_index`."""
        return self.position_map[cleaned_index]

    def to_raw_span(self, start: int, end: int) -> tuple[int, int]:
        """
        Map a cleaned half-open range [start, end) to a raw half-open range.

        The raw range runs from the first matched character to just past
        the last matched character, so characters dropped in between
        (reference markers, line-break hyphens) are included.
        """
        if not 0 <= start < end <= len(self.cleaned):
            raise IndexError(f"Invalid cleaned range [{start}, {end}) for length {len(self.cleaned)}")
        return self.position_map[start], self.position_map[end - 1] + 1

    def pairs(self) -> list[tuple[int, int]]:
        """The position map as ordered (cleaned_index, raw_index) pairs."""
        return list(enumerate(self.position_map))


# ── Passes ─────────────────────────────────────────────────────────

def _text_of(glyphs: Sequence[Glyph]) -> str:
    return "".join(ch for ch, _ in glyphs)


def drop_zero_width(glyphs: list[Glyph]) -> list[Glyph]:
    """Pass 1: remove zero-width characters and soft hyphens."""
    return [g for g in glyphs if g[0] not in ZERO_WIDTH_CHARS]


def drop_reference_markers(glyphs: list[Glyph]) -> list[Glyph]:
    """Pass 2: remove inline numeric reference markers such as "[12]"."""
    text = _text_of(glyphs)
    dropped: set[int] = set()
    for match in BRACKET_REF_REGEX.finditer(text):
        dropped.update(range(match.start(), match.end()))
    if not dropped:
        return glyphs
    return [g for i, g in enumerate(glyphs) if i not in dropped]


def rejoin_hyphenated(glyphs: list[Glyph]) -> list[Glyph]:
    """
    Pass 3: remove a hyphen and the whitespace run after it.

    When the run contains a line break, whitespace after the last break
    is kept: "from-\\n larger" becomes "from larger", while
    "hyper-\\nparameter" and "hyper- parameter" become "hyperparameter".

    Kept whitespace can follow another hyphen ("a--\\n b" → "a- b"), so the
    pass repeats until no hyphen is followed by whitespace.
    """
    while True:
        text = _text_of(glyphs)
        dropped: set[int] = set()
        for match in HYPHEN_BREAK_REGEX.finditer(text):
            ws_start, ws_end = match.span(1)
            cut = ws_end
            for i in range(ws_end - 1, ws_start - 1, -1):
                if text[i] in LINE_BREAKS:
                    cut = i + 1
                    break
            dropped.update(range(match.start(), cut))
        if not dropped:
            return glyphs
        glyphs = [g for i, g in enumerate(glyphs) if i not in dropped]


def straighten_quotes(glyphs: list[Glyph]) -> list[Glyph]:
    """Pass 4: map typographic quotes to their ASCII equivalents."""
    return [(QUOTE_MAP.get(ch, ch), idx) for ch, idx in glyphs]


def collapse_whitespace(glyphs: list[Glyph]) -> list[Glyph]:
    """
    Pass 5: collapse whitespace runs to a single space and trim.

    The space that replaces a run maps to the first character of the run.
    """
    out: list[Glyph] = []
    run_start: int | None = None
    for ch, idx in glyphs:
        if ch.isspace():
            if run_start is None:
                run_start = idx
            continue
        if run_start is not None and out:
            out.append((" ", run_start))
        run_start = None
        out.append((ch, idx))
    return out


def lowercase(glyphs: list[Glyph]) -> list[Glyph]:
    """
    Pass 6: lower-case every glyph.

    A character whose lower-case form is longer than one character
    ("İ" → "i̇") yields several glyphs sharing the same raw index.
    """
    return [(low, idx) for ch, idx in glyphs for low in ch.lower()]


DEFAULT_PASSES: tuple[NormalizationPass, ...] = (
    drop_zero_width,
    drop_reference_markers,
    rejoin_hyphenated,
    straighten_quotes,
    collapse_whitespace,
    lowercase,
)


# ── Normalizer ─────────────────────────────────────────────────────

class TextNormalizer:
    """
    Offset-preserving text normalizer.

    Usage:
        normalizer = TextNormalizer()
        result = normalizer.normalize("Models   benefit from-\\n larger datasets [12].")
        result.cleaned          # "models benefit from larger datasets."
        result.to_raw(0)        # 0

    Args:
        passes: Ordered normalization passes. Defaults to the six passes
            listed in the module docstring.
    """

    def __init__(self, passes: Sequence[NormalizationPass] = DEFAULT_PASSES):
        self.passes = tuple(passes)

    def normalize(self, text: str) -> NormalizedText:
        """Run every pass over `text` and return the cleaned text with its position map."""
        glyphs: list[Glyph] = [(ch, i) for i, ch in enumerate(text or "")]
        for normalization_pass in self.passes:
            glyphs = normalization_pass(glyphs)
        return NormalizedText(
            raw=text or "",
            cleaned=_text_of(glyphs),
            position_map=tuple(idx for _, idx in glyphs),
        )

    def clean(self, text: str) -> str:
        """Cleaned text only, for callers that need no back-mapping."""
        return self.normalize(text).cleaned

    @staticmethod
    def light_clean(text: str) -> str:
        """
        Straighten quotes, drop zero-width characters and trim.

        Used on individual render fragments, where a reference marker or a
        hyphenated word may be split across fragment boundaries and can only
        be recognized once the fragments are joined.
        """
        chars = (QUOTE_MAP.get(ch, ch) for ch in text if ch not in ZERO_WIDTH_CHARS)
        return "".join(chars).strip()


def normalize_text(text: str) -> NormalizedText:
    """Normalize `text` with the default passes."""
    return TextNormalizer().normalize(text)
