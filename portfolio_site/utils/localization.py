"""
Locale helpers for the bilingual (ru/en) content columns.
"""
from typing import Any, Optional

from portfolio_site.config import settings


def normalize_locale(locale: Optional[str]) -> str:
    """
    Map a requested locale onto a supported one.

    Args:
        locale: Locale code from the request (e.g. "en", "EN", "en-US")

    Returns:
        str: Supported locale code, DEFAULT_LOCALE when unknown or missing
    """
    if not locale:
        return settings.DEFAULT_LOCALE
    code = locale.strip().lower().split("-")[0].split("_")[0]
    if code in settings.SUPPORTED_LOCALES:
        return code
    return settings.DEFAULT_LOCALE


def localized(record: Any, field: str, locale: str) -> Optional[str]:
    """
    Read the `<field>_<locale>` attribute of a record.

    Works for ORM rows, pydantic models and plain dicts.
    """
    attr = f"{field}_{normalize_locale(locale)}"
    if isinstance(record, dict):
        return record.get(attr)
    return getattr(record, attr, None)
