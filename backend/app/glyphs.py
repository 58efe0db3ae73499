from __future__ import annotations

import re

# PDF core fonts have no emoji glyphs, so common ones become readable text.
EMOJI_REPLACEMENTS = {
    "\U0001f4bc": "[Briefcase] ",
    "\U0001f3af": "[Target] ",
    "\U0001f4ca": "[Chart] ",
    "\U0001f4c8": "[Trending Up] ",
    "\U0001f4c9": "[Trending Down] ",
    "\u2705": "[Check] ",
    "\u274c": "[X] ",
    "\u26a0\ufe0f": "[Warning] ",
    "\u26a0": "[Warning] ",
    "\U0001f4a1": "[Idea] ",
    "\U0001f50d": "[Search] ",
    "\U0001f4dd": "[Note] ",
    "\U0001f680": "[Rocket] ",
    "\u2b50": "[Star] ",
    "\U0001f44d": "[Thumbs Up] ",
    "\U0001f44e": "[Thumbs Down] ",
    "\U0001f525": "[Fire] ",
    "\U0001f4b0": "[Money] ",
    "\U0001f4f1": "[Phone] ",
    "\U0001f4bb": "[Computer] ",
    "\U0001f31f": "[Star] ",
    "\U0001f4c5": "[Calendar] ",
    "\U0001f389": "[Party] ",
    "\u23f0": "[Clock] ",
    "\U0001f4e7": "[Email] ",
    "\U0001f514": "[Bell] ",
    "\U0001f4cc": "[Pin] ",
    "\U0001f4d1": "[Document] ",
    "\U0001f967": "[Pie] ",
    "\U0001f4d0": "[Ruler] ",
    "\U0001f3c6": "[Trophy] ",
    "\u270d\ufe0f": "[Writing] ",
    "\u270d": "[Writing] ",
    "\U0001f4cb": "[Clipboard] ",
    "\U0001f5fa\ufe0f": "[Map] ",
    "\U0001f5fa": "[Map] ",
}
_REPLACEMENT_KEYS = sorted(EMOJI_REPLACEMENTS.keys(), key=len, reverse=True)

_UNDRAWABLE_RE = re.compile(
    "["
    "\U0001f000-\U0001faff"  # pictographs, emoticons, transport, supplemental symbols
    "\u2600-\u27bf"  # misc symbols, dingbats
    "\u2b00-\u2bff"
    "\u231a-\u231b"
    "\u23e9-\u23fa"
    "\ue000-\uf8ff"  # private use
    "\U000f0000-\U0010ffff"
    "\ufe00-\ufe0f"  # variation selectors
    "\u200d"
    "]"
)

_CORE_FONT_REPLACEMENTS = {
    "\u00a0": " ",
    "\u2007": " ",
    "\u2009": " ",
    "\u200b": "",
    "\u2010": "-",
    "\u2011": "-",
    "\u2012": "-",
    "\u2013": "-",
    "\u2014": "--",
    "\u2015": "--",
    "\u2212": "-",
    "\u2026": "...",
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2022": "\u00b7",
    "\u2190": "<-",
    "\u2192": "->",
    "\u2194": "<->",
    "\u21d2": "=>",
}


def normalize_glyphs(text: str | None) -> str:
    if not text:
        return ""
    out = str(text)
    for key in _REPLACEMENT_KEYS:
        if key in out:
            out = out.replace(key, EMOJI_REPLACEMENTS[key])
    return _UNDRAWABLE_RE.sub("", out)


def needs_unicode_font(text: str) -> bool:
    return any(ord(ch) > 0x00FF for ch in text or "")


def sanitize_for_core_font(text: str) -> str:
    out = text or ""
    for key, val in _CORE_FONT_REPLACEMENTS.items():
        out = out.replace(key, val)
    return out.encode("latin-1", "replace").decode("latin-1")
