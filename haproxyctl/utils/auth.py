import base64
import binascii
from typing import Tuple

from ..errors import AuthDecodeError


def decode_auth_string(auth_string: str) -> Tuple[str, str]:
    """
    Split a Basic auth string into (username, password)

    ``auth_string`` is the Base64 part of an ``Authorization: Basic`` header,
    i.e. without the ``Basic `` prefix. The decoded text must contain exactly
    one colon.
    """
    try:
        decoded = base64.b64decode(auth_string.strip(), validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise AuthDecodeError(f"auth string is not valid base64: {e}") from e

    parts = decoded.split(':')
    if len(parts) != 2:
        raise AuthDecodeError("auth string is not a username/password combination")

    return parts[0], parts[1]


def encode_auth_string(username: str, password: str) -> str:
    """Inverse of decode_auth_string, handy for config files and tests"""
    return base64.b64encode(f"{username}:{password}".encode('utf-8')).decode('ascii')
