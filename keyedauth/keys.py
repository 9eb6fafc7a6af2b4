"""
对称密钥生成模块
按算法名称生成随机原始密钥字节
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from Crypto.Random import get_random_bytes

from .errors import InvalidArgumentError, UnsupportedAlgorithmError, require_not_none

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeySpec:
    """密钥算法规格（位数）"""
    name: str
    default_bits: int
    allowed_bits: Optional[Tuple[int, ...]] = None  # None 表示任意 8 的正整数倍
    min_bits: int = 8
    max_bits: Optional[int] = None

    def check(self, bits: int) -> None:
        if isinstance(bits, bool) or not isinstance(bits, int):
            raise InvalidArgumentError(f"密钥长度必须为整数，实际为 {type(bits).__name__}")
        if self.allowed_bits is not None:
            if bits not in self.allowed_bits:
                raise InvalidArgumentError(
                    f"{self.name} 密钥长度必须为 {self.allowed_bits} 之一，实际为 {bits}"
                )
            return
        if bits <= 0 or bits % 8 != 0:
            raise InvalidArgumentError(f"{self.name} 密钥长度必须为 8 的正整数倍，实际为 {bits}")
        if bits < self.min_bits or (self.max_bits is not None and bits > self.max_bits):
            raise InvalidArgumentError(
                f"{self.name} 密钥长度必须在 {self.min_bits}..{self.max_bits} 位之间，实际为 {bits}"
            )


_SPECS = [
    KeySpec("AES", 256, (128, 192, 256)),
    KeySpec("DES", 64, (64,)),
    KeySpec("DESede", 192, (128, 192)),
    KeySpec("Blowfish", 128, min_bits=32, max_bits=448),
    KeySpec("ARC4", 128, min_bits=40, max_bits=2048),
    KeySpec("HmacMD5", 512),
    KeySpec("HmacSHA1", 512),
    KeySpec("HmacSHA224", 224),
    KeySpec("HmacSHA256", 256),
    KeySpec("HmacSHA384", 384),
    KeySpec("HmacSHA512", 512),
]

_ALIASES = {
    "tripledes": "desede",
    "3des": "desede",
    "rc4": "arc4",
    "arcfour": "arc4",
}

_REGISTRY: Dict[str, KeySpec] = {spec.name.lower(): spec for spec in _SPECS}


def get_key_spec(algorithm: str) -> KeySpec:
    """
    按名称查找密钥规格（不区分大小写）

    Raises:
        UnsupportedAlgorithmError: 如果算法不存在
    """
    require_not_none(algorithm, "algorithm")
    if not isinstance(algorithm, str):
        raise InvalidArgumentError(f"算法名称必须为字符串，实际为 {type(algorithm).__name__}")
    normalized = algorithm.strip().lower()
    normalized = _ALIASES.get(normalized, normalized)
    spec = _REGISTRY.get(normalized)
    if spec is None:
        raise UnsupportedAlgorithmError(f"不支持的密钥算法: {algorithm}")
    return spec


def generate(algorithm: str, key_size: Optional[int] = None,
             randfunc: Optional[Callable[[int], bytes]] = None) -> bytes:
    """
    生成随机密钥

    Args:
        algorithm: 算法名称，例如 "AES"、"HmacSHA256"
        key_size: 密钥位数，None 时使用算法默认值
        randfunc: 随机源 randfunc(n) -> bytes，默认 Crypto.Random.get_random_bytes

    Returns:
        原始密钥字节

    Raises:
        UnsupportedAlgorithmError: 如果算法不存在
        InvalidArgumentError: 如果密钥长度不被该算法接受
    """
    spec = get_key_spec(algorithm)
    bits = spec.default_bits if key_size is None else key_size
    spec.check(bits)

    if randfunc is None:
        randfunc = get_random_bytes

    key = randfunc(bits // 8)
    if len(key) != bits // 8:
        raise InvalidArgumentError(f"随机源返回长度错误: {len(key)} != {bits // 8}")

    logger.debug(f"生成 {spec.name} 密钥: {bits} 位")
    return bytes(key)


def supported_key_algorithms() -> List[str]:
    """返回支持的密钥算法名称"""
    return [spec.name for spec in _SPECS]
