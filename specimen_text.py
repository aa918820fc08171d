"""
Specimen text presets.

Character-set samples per script, and the rule that picks which text a size
preset shows: the 1055 strip shows one line, the 700 sample shows a multi-line
block, a custom size shows the chosen language (or the user's own text).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from specimen_render import SizePreset

DEFAULT_SINGLE_LINE_TEXT = "The quick brown fox jumps over the lazy dog"
DEFAULT_LANGUAGE = "en"
CUSTOM_LANGUAGE = "custom"
RTL_LANGUAGES = {"ar"}


@dataclass(frozen=True)
class LanguagePreset:
    id: str
    name: str
    content: str


_PRESETS = [
    LanguagePreset(
        id="en",
        name="English",
        content="\n".join([
            "1234567890.,;:!?",
            "abcdefghijklmnopqrstuvwxyz",
            "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
            "\"#$%&'()*+-/@[\\]^_`{|}~<=>",
        ]),
    ),
    LanguagePreset(
        id="latin-tr",
        name="Latin/Turkish",
        content="\n".join([
            "1234567890.,;:!?",
            "àbçđêfğhịjklmñøpqrşțüvwxýž",
            "ÀBÇĐÊFĞHỊJKLMÑØPQRŞȚÜVWXÝŽ",
            "€℃∂∆∏∑√∞∫≈≠≤≥◊ﬀﬁﬂﬃﬄ",
        ]),
    ),
    LanguagePreset(
        id="vi",
        name="Vietnamese",
        content="\n".join([
            "1234567890.,;:!?",
            "ẳbçđêfğhỉjklmñợpqrşțüvwxýž",
            "ẲBÇĐÊFĞHỈJKLMÑỢPQRŞȚÜVWXÝŽ",
            "₫€℃∂∆∏∑√∞∫≈≠≤≥◊ﬀﬁﬂﬃﬄ",
        ]),
    ),
    LanguagePreset(
        id="th",
        name="Thai",
        content="\n".join([
            "1234567890.,;:!?",
            "๑๒๓๔๕๖๗๘๙๐",
            "กขฃคฅฆงจฉชซฌญฎฏฐฑฒณดตถทธนบปผฝพฟ",
            "ภมยรฤลฦวศษสหฬอฮฯๅๆโใไ",
        ]),
    ),
    LanguagePreset(
        id="ru",
        name="Russian",
        content="\n".join([
            "1234567890.,;:!?",
            "åвçdëfghijktmñôþqrṣṭúvwxyž",
            "гдйклмнопрстчшыэюяѓељњќўџА",
            "°C°F€0fiflß∞бЖжф[]≥=-_√#≥",
        ]),
    ),
    LanguagePreset(
        id="ar",
        name="Arabic",
        content="\n".join([
            "0123456789",
            "نصٌّ حكيمٌ لهُ سِرٌّ قاطِعٌ وَذُو شَأنٍ",
            "عَظيمٍ مكتوبٌ على ثوبٍ أخضرَ ومُغلفٌ بجلدٍ",
            "ابجد هوز حطي كلمن سعفص قرشت ثخذ",
        ]),
    ),
    LanguagePreset(id=CUSTOM_LANGUAGE, name="Custom", content=""),
]

LANGUAGE_PRESETS: Dict[str, LanguagePreset] = {p.id: p for p in _PRESETS}


def get_language(lang_id: str) -> LanguagePreset:
    try:
        return LANGUAGE_PRESETS[lang_id]
    except KeyError:
        raise ValueError(f"Unknown language preset '{lang_id}'. Available: {', '.join(LANGUAGE_PRESETS)}") from None


def is_rtl_language(lang_id: str) -> bool:
    return lang_id in RTL_LANGUAGES


def default_multi_line_text(lang_id: str) -> str:
    if lang_id == CUSTOM_LANGUAGE:
        return LANGUAGE_PRESETS[DEFAULT_LANGUAGE].content
    return get_language(lang_id).content


def select_specimen_text(preset: SizePreset, lang_id: str = DEFAULT_LANGUAGE, custom_text: Optional[str] = None, single_line_text: Optional[str] = None, multi_line_text: Optional[str] = None) -> str:
    if not preset.is_custom and preset.width == 700:
        return multi_line_text if multi_line_text is not None else default_multi_line_text(lang_id)
    if preset.single_line:
        return single_line_text if single_line_text is not None else DEFAULT_SINGLE_LINE_TEXT
    if lang_id == CUSTOM_LANGUAGE:
        return custom_text or ""
    return get_language(lang_id).content
