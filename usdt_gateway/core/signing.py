"""Request / callback signatures shared with merchants."""

from __future__ import annotations

import hashlib
import hmac
from decimal import Decimal
from typing import Any, Mapping

SIGNATURE_FIELD = "signature"


def _format_value(value: Any) -> str:
    # Numbers are rendered the way they appear in the JSON body (100, 14.2857).
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return str(value)


def generate_signature(params: Mapping[str, Any], secret: str) -> str:
    """
    按商户约定生成 MD5 签名（小写）。
    1. 去掉 signature 字段以及值为空的参数。
    2. 按参数名 ASCII 升序排序，拼接成 a=b&c=d 形式（值不做URL编码）。
    3. 末尾直接拼接密钥后做 MD5。
    """
    filtered = {
        key: value
        for key, value in params.items()
        if key != SIGNATURE_FIELD and value not in (None, "")
    }
    sign_str = "&".join(f"{key}={_format_value(filtered[key])}" for key in sorted(filtered))
    return hashlib.md5(f"{sign_str}{secret}".encode("utf-8")).hexdigest().lower()


def verify_signature(params: Mapping[str, Any], signature: str | None, secret: str) -> bool:
    if not signature:
        return False
    expected = generate_signature(params, secret)
    return hmac.compare_digest(expected, signature.lower())


__all__ = ["SIGNATURE_FIELD", "generate_signature", "verify_signature"]
