"""Prompt construction for lullaby generation.

Each lullaby style maps to a music style descriptor (sent to the music
provider as-is) and a short localized lyric prompt. French and English have
their own phrasing; any other locale tag falls back to English and passes the
tag through so the provider can still pick the language.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from dodo.domain.models import LullabyStyle

STYLE_DESCRIPTORS: Mapping[LullabyStyle, str] = {
    LullabyStyle.SOFT: "gentle lullaby, soft piano, slow tempo, warm intimate vocals",
    LullabyStyle.JOYFUL: "cheerful nursery rhyme, light acoustic guitar, reassuring vocals",
    LullabyStyle.SPOKEN: "spoken word lullaby, whispered narration, ambient pads",
    LullabyStyle.MELODIC: "melodic lullaby, music box, strings, flowing vocal melody",
}

_STYLE_LABELS: Mapping[str, Mapping[LullabyStyle, str]] = {
    "fr": {
        LullabyStyle.SOFT: "douce et lente",
        LullabyStyle.JOYFUL: "joyeuse et rassurante",
        LullabyStyle.SPOKEN: "plus parlée que chantée",
        LullabyStyle.MELODIC: "plus mélodique",
    },
    "en": {
        LullabyStyle.SOFT: "soft and slow",
        LullabyStyle.JOYFUL: "joyful and reassuring",
        LullabyStyle.SPOKEN: "more spoken than sung",
        LullabyStyle.MELODIC: "more melodic",
    },
}

_TEMPLATES: Mapping[str, str] = {
    "fr": "Une comptine {label} pour endormir {listener}, en français",
    "en": "A {label} lullaby to help {listener} fall asleep, in English",
}

_LISTENERS: Mapping[str, str] = {
    "fr": "un enfant",
    "en": "a little one",
}


@dataclass(frozen=True)
class LullabyPrompt:
    """Everything a generation strategy needs to submit one job."""

    lyrics: str
    style: str
    duration_minutes: float
    language_code: str


def base_language(language_code: str) -> str:
    """Return the primary subtag: ``fr-FR`` -> ``fr``."""

    return language_code.replace("_", "-").split("-", 1)[0].strip().lower()


def clamp_duration(duration_minutes: float, max_minutes: float) -> float:
    return min(duration_minutes, max_minutes)


def build_lullaby_prompt(
    style: LullabyStyle,
    language_code: str,
    duration_minutes: float,
    *,
    max_duration_minutes: float,
    child_name: Optional[str] = None,
) -> LullabyPrompt:
    language = base_language(language_code)
    known = language in _TEMPLATES
    key = language if known else "en"

    listener = child_name.strip() if child_name and child_name.strip() else _LISTENERS[key]
    lyrics = _TEMPLATES[key].format(label=_STYLE_LABELS[key][style], listener=listener)
    if not known:
        lyrics = lyrics.replace("in English", f"in the language '{language_code}'")

    return LullabyPrompt(
        lyrics=lyrics,
        style=STYLE_DESCRIPTORS[style],
        duration_minutes=clamp_duration(duration_minutes, max_duration_minutes),
        language_code=language_code,
    )


__all__ = [
    "LullabyPrompt",
    "STYLE_DESCRIPTORS",
    "base_language",
    "build_lullaby_prompt",
    "clamp_duration",
]
