"""
Translations for Time Ledger (English and Simplified Chinese).

tr() looks a key up in the active language, falls back to English and
finally to the key itself. The active language also sets Qt's default
QLocale so Qt-side number and date formatting agrees with the labels.
"""

import locale
from typing import Callable, List, Tuple

from PySide6.QtCore import QLocale

from timeledger.i18n.translations import TRANSLATIONS

SUPPORTED_LANGUAGES = ("en", "zh")
LANGUAGE_NAMES = {"en": "English", "zh": "简体中文"}
QT_LOCALES = {
    "en": (QLocale.Language.English, QLocale.Country.UnitedStates),
    "zh": (QLocale.Language.Chinese, QLocale.Country.China),
}

Listener = Callable[[str], None]


class _LanguageState:
    current = "en"
    listeners: List[Listener] = []


def detect_system_language() -> str:
    """'zh' for a Chinese system locale, 'en' for anything else"""
    name = locale.getlocale()[0] or ""
    return "zh" if name.lower().startswith("zh") else "en"


def get_language() -> str:
    return _LanguageState.current


def set_language(lang: str) -> str:
    """
    Switch the active language.

    Args:
        lang: 'en', 'zh' or 'auto'; anything unsupported means English

    Returns:
        The language actually activated
    """
    if lang == "auto":
        lang = detect_system_language()
    if lang not in SUPPORTED_LANGUAGES:
        lang = "en"
    _LanguageState.current = lang
    QLocale.setDefault(QLocale(*QT_LOCALES[lang]))

    for listener in list(_LanguageState.listeners):
        listener(lang)
    return lang


def tr(key: str, **kwargs) -> str:
    """
    Translated text for key, formatted with kwargs.

    A template whose placeholders do not match kwargs is returned unformatted.
    """
    text = TRANSLATIONS[_LanguageState.current].get(key) or TRANSLATIONS["en"].get(key, key)
    if not kwargs:
        return text
    try:
        return text.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return text


def on_language_changed(listener: Listener) -> None:
    if listener not in _LanguageState.listeners:
        _LanguageState.listeners.append(listener)


def remove_language_callback(listener: Listener) -> None:
    if listener in _LanguageState.listeners:
        _LanguageState.listeners.remove(listener)


def get_available_languages() -> List[Tuple[str, str]]:
    """(code, native name) pairs for a language picker"""
    return [(code, LANGUAGE_NAMES[code]) for code in SUPPORTED_LANGUAGES]
