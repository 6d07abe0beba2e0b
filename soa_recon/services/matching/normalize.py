"""Document number normalization."""

import re

# Whitespace, hyphens, underscores, periods and commas
_DOC_NOISE = re.compile(r"[\s\-_.,]")


def normalize_doc_number(raw: str | None) -> str:
    """Canonicalize a document number for fuzzy comparison.

    "INV-001", "inv 001" and "INV_0.01" all normalize to "INV001".
    """
    if raw is None:
        return ""
    return _DOC_NOISE.sub("", str(raw)).upper()


def exact_doc_key(raw: str | None) -> str:
    """Comparison key for exact document matching (case and padding only)."""
    if raw is None:
        return ""
    return str(raw).strip().upper()
