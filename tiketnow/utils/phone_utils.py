"""
Phone Utilities - Normalize buyer phone numbers for wa.me links
"""

import re

NON_DIGITS = re.compile(r'\D')


def normalize_phone(phone: str, country_code: str = '54', mobile_prefix: str = '9') -> str:
    """
    Reduce a free-text phone to international digits.

    '011 1234-5678' -> '5491112345678'. Leading zeros (trunk or '00'
    international prefix) are dropped, numbers already carrying the country
    code keep it, and the mobile prefix is inserted when missing.
    """
    digits = NON_DIGITS.sub('', phone or '').lstrip('0')
    if not digits:
        return ''

    full_prefix = country_code + mobile_prefix
    if digits.startswith(full_prefix):
        return digits
    if digits.startswith(country_code):
        return full_prefix + digits[len(country_code):]
    if digits.startswith(mobile_prefix):
        return country_code + digits
    return full_prefix + digits
