"""Credential hashing (bcrypt)"""
import bcrypt

DEFAULT_ROUNDS = 12


def get_password_hash(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Generate password hash using bcrypt directly"""
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt(rounds=rounds)
    ).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using bcrypt directly"""
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Not a bcrypt hash
        return False


class BcryptHasher:
    """Credential hash used by the account service: hash(plain) / verify(plain, hashed)"""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        return get_password_hash(plain, self.rounds)

    def verify(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)
