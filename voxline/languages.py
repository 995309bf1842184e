"""
voxline.languages - Whisper language table.

One static table of (name, code) pairs drives the LanguageTag enum and both
directions of lookup, so names and codes cannot drift apart.
"""

from __future__ import annotations

from enum import Enum

LANGUAGE_TABLE: tuple[tuple[str, str], ...] = (
    ("AUTO", "auto"),
    ("ENGLISH", "en"),
    ("CHINESE", "zh"),
    ("GERMAN", "de"),
    ("SPANISH", "es"),
    ("RUSSIAN", "ru"),
    ("KOREAN", "ko"),
    ("FRENCH", "fr"),
    ("JAPANESE", "ja"),
    ("PORTUGUESE", "pt"),
    ("TURKISH", "tr"),
    ("POLISH", "pl"),
    ("CATALAN", "ca"),
    ("DUTCH", "nl"),
    ("ARABIC", "ar"),
    ("SWEDISH", "sv"),
    ("ITALIAN", "it"),
    ("INDONESIAN", "id"),
    ("HINDI", "hi"),
    ("FINNISH", "fi"),
    ("VIETNAMESE", "vi"),
    ("HEBREW", "he"),
    ("UKRAINIAN", "uk"),
    ("GREEK", "el"),
    ("MALAY", "ms"),
    ("CZECH", "cs"),
    ("ROMANIAN", "ro"),
    ("DANISH", "da"),
    ("HUNGARIAN", "hu"),
    ("TAMIL", "ta"),
    ("NORWEGIAN", "no"),
    ("THAI", "th"),
    ("URDU", "ur"),
    ("CROATIAN", "hr"),
    ("BULGARIAN", "bg"),
    ("LITHUANIAN", "lt"),
    ("LATIN", "la"),
    ("MAORI", "mi"),
    ("MALAYALAM", "ml"),
    ("WELSH", "cy"),
    ("SLOVAK", "sk"),
    ("TELUGU", "te"),
    ("PERSIAN", "fa"),
    ("LATVIAN", "lv"),
    ("BENGALI", "bn"),
    ("SERBIAN", "sr"),
    ("AZERBAIJANI", "az"),
    ("SLOVENIAN", "sl"),
    ("KANNADA", "kn"),
    ("ESTONIAN", "et"),
    ("MACEDONIAN", "mk"),
    ("BRETON", "br"),
    ("BASQUE", "eu"),
    ("ICELANDIC", "is"),
    ("ARMENIAN", "hy"),
    ("NEPALI", "ne"),
    ("MONGOLIAN", "mn"),
    ("BOSNIAN", "bs"),
    ("KAZAKH", "kk"),
    ("ALBANIAN", "sq"),
    ("SWAHILI", "sw"),
    ("GALICIAN", "gl"),
    ("MARATHI", "mr"),
    ("PUNJABI", "pa"),
    ("SINHALA", "si"),
    ("KHMER", "km"),
    ("SHONA", "sn"),
    ("YORUBA", "yo"),
    ("SOMALI", "so"),
    ("AFRIKAANS", "af"),
    ("OCCITAN", "oc"),
    ("GEORGIAN", "ka"),
    ("BELARUSIAN", "be"),
    ("TAJIK", "tg"),
    ("SINDHI", "sd"),
    ("GUJARATI", "gu"),
    ("AMHARIC", "am"),
    ("YIDDISH", "yi"),
    ("LAO", "lo"),
    ("UZBEK", "uz"),
    ("FAROESE", "fo"),
    ("HAITIAN_CREOLE", "ht"),
    ("PASHTO", "ps"),
    ("TURKMEN", "tk"),
    ("NYNORSK", "nn"),
    ("MALTESE", "mt"),
    ("SANSKRIT", "sa"),
    ("LUXEMBOURGISH", "lb"),
    ("MYANMAR", "my"),
    ("TIBETAN", "bo"),
    ("TAGALOG", "tl"),
    ("MALAGASY", "mg"),
    ("ASSAMESE", "as"),
    ("TATAR", "tt"),
    ("HAWAIIAN", "haw"),
    ("LINGALA", "ln"),
    ("HAUSA", "ha"),
    ("BASHKIR", "ba"),
    ("JAVANESE", "jw"),
    ("SUNDANESE", "su"),
)

LanguageTag = Enum("LanguageTag", {name: code for name, code in LANGUAGE_TABLE}, type=str)
LanguageTag.__doc__ = "Whisper language identifiers; each value is the language's short code."

_BY_NAME: dict[str, LanguageTag] = {tag.name.lower(): tag for tag in LanguageTag}


def from_code(value: str) -> LanguageTag:
    """Look up a language by code ("de") or name ("german", "Haitian Creole").

    Raises:
        ValueError: If the value matches no known language
    """
    key = value.strip().lower()
    try:
        return LanguageTag(key)
    except ValueError:
        pass
    tag = _BY_NAME.get(key.replace(" ", "_").replace("-", "_"))
    if tag is None:
        raise ValueError(f"Unknown language: {value}")
    return tag


def engine_code(tag: LanguageTag | None) -> str | None:
    """Return the code to hand to the engine, or None for auto-detection."""
    if tag is None or tag is LanguageTag.AUTO:
        return None
    return tag.value


def display_name(tag: LanguageTag) -> str:
    """Human-readable name, e.g. "Haitian Creole"."""
    return tag.name.replace("_", " ").title()
