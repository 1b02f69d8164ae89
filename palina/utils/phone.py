import re


def normalize_phone(raw: str | None, default_country_code: str = "+961") -> str:
    """
    Bring a phone number to +<country><number> form.

    Keeps digits and a leading '+'. Numbers without a country code get
    `default_country_code`, with one leading trunk '0' dropped.
    """
    if not raw:
        return ""
    cleaned = re.sub(r"[^0-9+]", "", raw)
    digits = cleaned.replace("+", "")
    if cleaned.startswith("+"):
        return "+" + digits
    if not digits:
        return ""
    if digits.startswith("0"):
        digits = digits[1:]
    return default_country_code + digits


def digits_only(raw: str | None) -> str:
    """International number without '+', as the Cloud API expects it"""
    return re.sub(r"[^0-9]", "", raw or "")
