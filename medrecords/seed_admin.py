#!/usr/bin/env python3
"""
Seed the admin account from ADMIN_USERNAME / ADMIN_PASSWORD
"""

import logging

from medrecords.config import get_settings
from medrecords.database import DataStore, get_store
from medrecords.models import Role
from medrecords.passwords import BcryptHasher
from medrecords.services import AccountError, AccountService

logger = logging.getLogger(__name__)


def ensure_admin_account(store: DataStore, username: str, password: str, rounds: int = 12) -> bool:
    """Create the admin account unless it exists; True if one was created"""
    if store.accounts.exists(username):
        return False
    try:
        AccountService(store, BcryptHasher(rounds)).register_account(username, password, Role.ADMIN)
    except AccountError as e:
        logger.error(f"Could not create admin account {username}: {e}")
        return False
    logger.info(f"Admin account {username} created")
    return True


def seed_admin():
    settings = get_settings()
    if not settings.admin_username or not settings.admin_password:
        logger.warning("ADMIN_USERNAME and ADMIN_PASSWORD must both be set")
        return
    if not ensure_admin_account(get_store(), settings.admin_username, settings.admin_password,
                                settings.bcrypt_rounds):
        logger.info("Admin account already exists")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed_admin()
