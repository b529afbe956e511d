"""
Masking helpers for customer details that end up in log lines.
"""
import re
from typing import Optional


class PIIProtection:
    """Utilities for keeping customer contact details out of logs."""

    @staticmethod
    def mask_email(email: Optional[str]) -> str:
        """
        Mask email address for safe display.
        Example: john.doe@example.com -> jo******@example.com
        """
        if not email or '@' not in email:
            return email or ''

        local, domain = email.split('@', 1)
        if len(local) <= 2:
            masked_local = local[:1] + '*'
        else:
            masked_local = local[:2] + '*' * (len(local) - 2)
        return f"{masked_local}@{domain}"

    @staticmethod
    def mask_phone(phone: Optional[str]) -> str:
        """
        Keep only the last four digits.
        Example: 07700 900123 -> ***0123
        """
        if not phone:
            return phone or ''

        digits = re.sub(r'\D', '', phone)
        if len(digits) < 4:
            return '*' * len(phone)
        return f"***{digits[-4:]}"

    @staticmethod
    def mask_postcode(postcode: Optional[str]) -> str:
        """
        Keep the outward code of a UK postcode, which identifies a district
        but not a street.
        Example: YO10 3BP -> YO10 ***
        """
        if not postcode:
            return postcode or ''

        compact = re.sub(r'\s+', '', postcode).upper()
        if len(compact) <= 3:
            return '*' * len(compact)
        return f"{compact[:-3]} ***"
