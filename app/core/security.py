from typing import Dict, Any

from jose import jwt, ExpiredSignatureError, JWTError

from app.core.config import settings


class TokenManager:
    """Verifies bearer tokens issued by the identity provider"""

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry of an access token.
        :param token: Encoded JWT.
        :return: Token claims.
        :raises ValueError: If the token is expired or malformed.
        """
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except ExpiredSignatureError:
            raise ValueError("Token has expired")
        except JWTError as e:
            raise ValueError(f"Invalid token: {e}")
