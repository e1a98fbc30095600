"""Target languages offered for the translated subtitle line.

Codes follow the translation provider's `tl` parameter (note the regional
Chinese variants). Labels are the native language names shown to users.
"""

from __future__ import annotations

# fmt: off
TARGET_LANGUAGES: dict[str, str] = {
    "ko": "한국어",         "en": "English",      "ja": "日本語",
    "zh-CN": "中文(简体)",  "zh-TW": "中文(繁體)",  "es": "Español",
    "fr": "Français",       "de": "Deutsch",      "it": "Italiano",
    "pt": "Português",      "ru": "Русский",      "vi": "Tiếng Việt",
    "id": "Bahasa Indonesia", "th": "ไทย",
}
# fmt: on

DEFAULT_TARGET_LANGUAGE = "ko"


def is_valid_language(code: str) -> bool:
    """Check if a language code is offered as a translation target."""
    return code in TARGET_LANGUAGES


def language_label(code: str) -> str:
    """Get the display label for a code, or the code itself if unknown."""
    return TARGET_LANGUAGES.get(code, code)


def validate_language(code: str) -> str:
    """Validate a language code and return it, raising ValueError if invalid."""
    if code not in TARGET_LANGUAGES:
        raise ValueError(
            f"Unsupported language: '{code}'. "
            f"Run 'udt languages' to see all {len(TARGET_LANGUAGES)} supported languages."
        )
    return code
