from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a presented password against a stored hash.

    Rows holding a value that is not a recognised hash never verify.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False
