"""
Шифрование refresh token'ов Google (Fernet).
"""
from cryptography.fernet import Fernet, InvalidToken

from config import settings


def _get_fernet() -> Fernet:
    if not settings.token_encryption_key:
        raise RuntimeError("TOKEN_ENCRYPTION_KEY не настроен")
    return Fernet(settings.token_encryption_key.encode())


def encrypt_token(token: str) -> str:
    return _get_fernet().encrypt(token.encode()).decode()


def decrypt_token(encrypted: str) -> str:
    """Расшифровать токен. ValueError если ключ не подходит или данные повреждены."""
    try:
        return _get_fernet().decrypt(encrypted.encode()).decode()
    except InvalidToken as e:
        raise ValueError("Не удалось расшифровать токен") from e
