from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from typing import Optional


def sha256_str(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def digests_match(expected: str, actual: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), actual.encode("utf-8"))


def new_client_secret() -> str:
    return secrets.token_hex(24)


def b64encode_str(s: str) -> str:
    return base64.b64encode(s.encode("utf-8")).decode("ascii")


def b64decode_str(s: str) -> Optional[str]:
    try:
        raw = base64.b64decode(s.strip(), validate=True)
        return raw.decode("utf-8")
    except ValueError:
        # binascii.Error and UnicodeDecodeError are both ValueError
        return None
