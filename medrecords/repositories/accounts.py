from typing import Callable, List, Optional

from medrecords.codec import ACCOUNT_CODEC
from medrecords.models import Account, Role
from medrecords.repositories.base import FileRepository, StoreError, synchronized


class AccountRepository(FileRepository[Account]):
    """Accounts keyed by username"""

    codec = ACCOUNT_CODEC

    def get_by_username(self, username: str) -> Optional[Account]:
        return self.get_by_id(username)

    def get_by_role(self, role: Role) -> List[Account]:
        return self.find(lambda account: account.role == role)

    def get_active_accounts(self) -> List[Account]:
        return self.find(lambda account: account.is_active)

    @synchronized
    def validate_credentials(self, username: str, verify: Callable[[str], bool]) -> bool:
        """
        Check a login attempt; verify receives the stored hash and decides whether the
        supplied password matches it. Inactive accounts never validate.
        """
        index = self._index_of(username)
        if index < 0:
            self.last_error = StoreError.NOT_FOUND
            return False
        account = self._items[index]
        return account.is_active and verify(account.password_hash)
