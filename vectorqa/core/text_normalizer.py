"""
Text normalization for embedding inputs.

Queries and chunks must be normalized identically before embedding so
that trivially different spellings land on the same vector.

Dependencies: re, unicodedata
System role: Pre-embedding canonicalization shared by ingestion and retrieval
"""

import re
import unicodedata

# British -> American spelling variants folded before embedding.
SPELLING_VARIANTS: dict[str, str] = {
    "analyse": "analyze",
    "analysed": "analyzed",
    "analysing": "analyzing",
    "behaviour": "behavior",
    "behaviours": "behaviors",
    "catalogue": "catalog",
    "centre": "center",
    "centres": "centers",
    "colour": "color",
    "colours": "colors",
    "defence": "defense",
    "favour": "favor",
    "favourite": "favorite",
    "honour": "honor",
    "labour": "labor",
    "licence": "license",
    "metre": "meter",
    "metres": "meters",
    "neighbour": "neighbor",
    "neighbours": "neighbors",
    "optimisation": "optimization",
    "optimise": "optimize",
    "optimised": "optimized",
    "organisation": "organization",
    "organisations": "organizations",
    "organise": "organize",
    "organised": "organized",
    "programme": "program",
    "programmes": "programs",
    "realise": "realize",
    "realised": "realized",
    "recognise": "recognize",
    "recognised": "recognized",
    "theatre": "theater",
    "travelled": "traveled",
    "travelling": "traveling",
}

_PUNCTUATION_MAP = str.maketrans({
    "\u2018": "'",
    "\u2019": "'",
    "\u201a": "'",
    "\u201c": "\"",
    "\u201d": "\"",
    "\u201e": "\"",
    "\u2013": "-",
    "\u2014": "-",
    "\u2212": "-",
    "\u00a0": " ",
    "\u200b": "",
})

_WHITESPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"[a-z]+")


def _fold_spelling(match: re.Match) -> str:
    word = match.group(0)
    return SPELLING_VARIANTS.get(word, word)


def normalize_for_embedding(text: str) -> str:
    """
    Canonicalize text before it is sent to the embedding backend.

    Applies Unicode NFKC, straightens typographic quotes and dashes,
    lower-cases, folds British spellings and collapses whitespace.

    Args:
        text: Raw query or chunk text

    Returns:
        str: Normalized text (empty string for whitespace-only input)
    """
    normalized = unicodedata.normalize("NFKC", text).translate(_PUNCTUATION_MAP)
    normalized = normalized.lower()
    normalized = _WORD_RE.sub(_fold_spelling, normalized)
    return _WHITESPACE_RE.sub(" ", normalized).strip()


def normalize_batch(texts: list[str]) -> list[str]:
    """Normalize a batch of texts, preserving order."""
    return [normalize_for_embedding(text) for text in texts]
