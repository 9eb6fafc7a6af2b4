"""
密钥认证模块
提供 MAC, HMAC, HOTP, TOTP 等算法的实现
"""

from .errors import (
    ComputationError,
    InvalidArgumentError,
    KeyedAuthError,
    UnsupportedAlgorithmError,
)
from .hash import HashFunction, available_hash_functions, get_hash_function
from .hmac_auth import HMAC
from .mac import MAC
from .otp import HOTP, TOTP

__all__ = [
    'HashFunction', 'get_hash_function', 'available_hash_functions',
    'MAC', 'HMAC', 'HOTP', 'TOTP',
    'KeyedAuthError', 'InvalidArgumentError', 'UnsupportedAlgorithmError', 'ComputationError',
]
