"""
Tutor Chat v1.0: Speech Text Cleaner
Turns a rendered answer into something a speech engine can read aloud:
drops markdown, emoji and the playback control label, and spells out symbols.

This is a PURE FUNCTION. No side effects, no imports beyond stdlib.
"""

import re

LISTEN_LABEL = "🔊 Listen"

# Emoji and pictographs, dingbats, flags, variation selectors, ZWJ
_EMOJI_PATTERN = re.compile(
    "["
    "\U0001F000-\U0001FAFF"
    "\U00002600-\U000027BF"
    "\U0001F1E6-\U0001F1FF"
    "\uFE0E\uFE0F\u200D"
    "]+",
)
_MARKDOWN_LINK = re.compile(r'\[([^\]]+)\]\([^)]+\)')
_MARKDOWN_IMAGE = re.compile(r'!\[[^\]]*\]\([^)]+\)')
_CODE_FENCE = re.compile(r'```[a-zA-Z0-9_-]*')
_HTML_TAG = re.compile(r'<[^>]+>')


def clean_for_speech(text: str) -> str:
    """
    Clean answer text for playback.

    Examples:
        "**Profit** = Revenue - Cost 🔊 Listen" → "Profit equals Revenue - Cost"
        "## Step 1\\n- Find 50% of 80" → "Step 1. Find 50 percent of 80"
        "e.g. 3/4 of the market" → "for example 3 over 4 of the market"
    """
    if not text:
        return ""

    result = text.replace(LISTEN_LABEL, "")

    # ─── Markup ───────────────────────────────────────────────────────────
    result = _HTML_TAG.sub(" ", result)
    result = _MARKDOWN_IMAGE.sub("", result)
    result = _MARKDOWN_LINK.sub(r'\1', result)
    result = _CODE_FENCE.sub("", result)
    result = result.replace("`", "")
    result = re.sub(r'(\*\*|__|\*|~~)', "", result)
    result = re.sub(r'^\s{0,3}#{1,6}\s*', "", result, flags=re.MULTILINE)
    result = re.sub(r'^\s*(?:[-+•]|\d+[.)])\s+', "", result, flags=re.MULTILINE)

    # ─── Emoji ────────────────────────────────────────────────────────────
    result = _EMOJI_PATTERN.sub("", result)

    # ─── Symbols ──────────────────────────────────────────────────────────
    result = re.sub(r'(\d+)\s*/\s*(\d+)', r'\1 over \2', result)
    result = re.sub(r'\s*=\s*', ' equals ', result)
    result = result.replace('×', ' times ')
    result = result.replace('÷', ' divided by ')
    result = re.sub(r'(\d+)%', r'\1 percent', result)
    result = re.sub(r'(\d+)°', r'\1 degrees', result)
    result = result.replace('&', ' and ')

    # ─── Common abbreviations ─────────────────────────────────────────────
    result = re.sub(r'\be\.g\.', 'for example', result)
    result = re.sub(r'\bi\.e\.', 'that is', result)
    result = re.sub(r'\betc\.', 'et cetera', result)

    # ─── Line breaks become sentence pauses ───────────────────────────────
    lines = [line.strip() for line in result.splitlines() if line.strip()]
    for i, line in enumerate(lines[:-1]):
        if line[-1] not in ".?!:;,":
            lines[i] = f"{line}."
    result = " ".join(lines)

    return re.sub(r'\s+', ' ', result).strip()
