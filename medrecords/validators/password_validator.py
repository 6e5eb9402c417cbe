"""
Credential validation utilities
Usernames and passwords end up in a pipe-delimited file, so the delimiter is never allowed.
"""

import re
from typing import Tuple

from medrecords.validators.business_rules import get_business_rules

USERNAME_PATTERN = re.compile(r'^[A-Za-z0-9_.]+$')
PHONE_PATTERN = re.compile(r'^0\d{9}$')


class CredentialValidator:
    """Validates usernames and passwords"""

    @staticmethod
    def validate_username(username: str) -> Tuple[bool, str]:
        """
        Validate username format

        Returns:
            (is_valid, error_message)
        """
        rules = get_business_rules()
        if not username:
            return False, "Username is required"

        if len(username) < rules.MIN_USERNAME_LENGTH:
            return False, f"Username must be at least {rules.MIN_USERNAME_LENGTH} characters long"

        if len(username) > rules.MAX_USERNAME_LENGTH:
            return False, f"Username must not exceed {rules.MAX_USERNAME_LENGTH} characters"

        if not USERNAME_PATTERN.match(username):
            return False, "Username may only contain letters, digits, '_' and '.'"

        return True, ""

    @staticmethod
    def validate_password(password: str) -> Tuple[bool, str]:
        """
        Validate password against length and delimiter requirements

        Returns:
            (is_valid, error_message)
        """
        rules = get_business_rules()
        if not password:
            return False, "Password is required"

        if len(password) < rules.MIN_PASSWORD_LENGTH:
            return False, f"Password must be at least {rules.MIN_PASSWORD_LENGTH} characters long"

        if len(password) > rules.MAX_PASSWORD_LENGTH:
            return False, f"Password must not exceed {rules.MAX_PASSWORD_LENGTH} characters"

        if '|' in password:
            return False, "Password must not contain '|'"

        return True, ""


def is_valid_phone(phone: str) -> bool:
    """Ten digits starting with 0"""
    return bool(phone) and PHONE_PATTERN.match(phone) is not None
