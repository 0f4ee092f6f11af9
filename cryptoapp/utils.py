from passlib.context import CryptContext

# bcrypt, salted, cost 12 (passlib default)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only looks at the first 72 bytes of the secret
BCRYPT_MAX_BYTES = 72


def _clip(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash(password: str) -> str:
    return pwd_context.hash(_clip(password))


def verify(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_clip(plain_password), hashed_password)
