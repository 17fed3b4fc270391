from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Union

from ..core.constants import DEFAULT_LANGUAGE

_FALLBACK_FORMATS: Dict[str, str] = {
    "date": "%Y-%m-%d",
    "time": "%H:%M",
    "duration": "{hours}:{minutes:02d} h",
    "money": "{amount:,.2f} {currency}",
}


class LanguageFormattings:
    """Per-language format strings, keyed by language code.

    Unknown languages use the default language's settings; missing keys use
    built-in formats.
    """

    def __init__(self, languages: Mapping[str, Mapping[str, str]], *, default_language: str = DEFAULT_LANGUAGE):
        self._languages = {code: dict(values) for code, values in languages.items()}
        self._default_language = default_language

    def get_default_language(self) -> str:
        return self._default_language

    def get_languages(self) -> List[str]:
        return list(self._languages.keys())

    def _get_config(self, language: Optional[str], key: str) -> str:
        config = self._languages.get(language or "")
        if config is None:
            config = self._languages.get(self._default_language, {})
        return config.get(key, _FALLBACK_FORMATS[key])

    def get_date_format(self, language: Optional[str]) -> str:
        return self._get_config(language, "date")

    def get_time_format(self, language: Optional[str]) -> str:
        return self._get_config(language, "time")

    def get_duration_format(self, language: Optional[str]) -> str:
        return self._get_config(language, "duration")

    def get_money_format(self, language: Optional[str]) -> str:
        return self._get_config(language, "money")


class InvoiceFormatter:
    def __init__(self, formattings: LanguageFormattings, language: str):
        self._formattings = formattings
        self._language = language

    @property
    def language(self) -> str:
        return self._language

    def format_date(self, value: Optional[Union[date, datetime]]) -> str:
        if value is None:
            return ""
        return value.strftime(self._formattings.get_date_format(self._language))

    def format_time(self, value: Optional[datetime]) -> str:
        if value is None:
            return ""
        return value.strftime(self._formattings.get_time_format(self._language))

    def format_duration(self, seconds: Optional[int]) -> str:
        seconds = int(seconds or 0)
        hours, rest = divmod(seconds, 3600)
        return self._formattings.get_duration_format(self._language).format(
            hours=hours, minutes=rest // 60, seconds=rest % 60
        )

    def format_money(self, amount: Optional[Decimal], currency: str) -> str:
        return self._formattings.get_money_format(self._language).format(
            amount=amount if amount is not None else Decimal("0"), currency=currency
        )

    def format_amount(self, amount: Decimal) -> str:
        return f"{amount:.2f}"
