"""
哈希函数模块
封装 PyCryptodome 的摘要算法，提供统一的 HashFunction 接口和全局注册表
"""

import logging
from typing import Dict, List

from Crypto.Hash import MD2 as _MD2
from Crypto.Hash import MD5 as _MD5
from Crypto.Hash import SHA1 as _SHA1
from Crypto.Hash import SHA224 as _SHA224
from Crypto.Hash import SHA256 as _SHA256
from Crypto.Hash import SHA384 as _SHA384
from Crypto.Hash import SHA512 as _SHA512

from .errors import (
    ComputationError,
    InvalidArgumentError,
    UnsupportedAlgorithmError,
    require_not_none,
)

logger = logging.getLogger(__name__)


class HashFunction:
    """
    哈希函数接口

    实现必须是不可变的：block_size 与 output_size 永不改变，
    compute 是输入的纯函数且不修改输入。
    """

    ALGORITHM = ""
    BLOCK_SIZE = 0   # 每轮压缩处理的字节数
    OUTPUT_SIZE = 0  # 摘要长度（字节）

    @property
    def name(self) -> str:
        return self.ALGORITHM

    @property
    def block_size(self) -> int:
        return self.BLOCK_SIZE

    @property
    def output_size(self) -> int:
        return self.OUTPUT_SIZE

    def compute(self, data: bytes) -> bytes:
        """
        计算摘要

        Args:
            data: 输入数据

        Returns:
            output_size 字节的摘要

        Raises:
            InvalidArgumentError: 如果输入为空或不是字节串
            ComputationError: 如果底层实现计算失败
        """
        raise NotImplementedError

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, HashFunction):
            return NotImplemented
        return type(self) is type(other) and self.ALGORITHM == other.ALGORITHM

    def __hash__(self):
        return hash((type(self).__name__, self.ALGORITHM))

    def __repr__(self):
        return (f"{type(self).__name__}(name={self.name!r}, "
                f"block_size={self.block_size}, output_size={self.output_size})")


class _PyCryptodomeHash(HashFunction):
    """由 Crypto.Hash 模块提供实现的哈希函数"""

    _provider = None

    def compute(self, data: bytes) -> bytes:
        require_not_none(data, "data")
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidArgumentError(f"输入必须是字节串，实际为 {type(data).__name__}")

        try:
            digest = self._provider.new(bytes(data)).digest()
        except Exception as e:
            raise ComputationError(f"{self.ALGORITHM} 计算失败: {e}") from e

        if len(digest) != self.OUTPUT_SIZE:
            raise ComputationError(
                f"{self.ALGORITHM} 输出长度异常: {len(digest)} != {self.OUTPUT_SIZE}"
            )
        return digest


class MD2Hash(_PyCryptodomeHash):
    ALGORITHM = "MD2"
    BLOCK_SIZE = 16
    OUTPUT_SIZE = 16
    _provider = _MD2


class MD5Hash(_PyCryptodomeHash):
    ALGORITHM = "MD5"
    BLOCK_SIZE = 512 // 8
    OUTPUT_SIZE = 128 // 8
    _provider = _MD5


class SHA1Hash(_PyCryptodomeHash):
    ALGORITHM = "SHA-1"
    BLOCK_SIZE = 512 // 8
    OUTPUT_SIZE = 160 // 8
    _provider = _SHA1


class SHA224Hash(_PyCryptodomeHash):
    ALGORITHM = "SHA-224"
    BLOCK_SIZE = 512 // 8
    OUTPUT_SIZE = 224 // 8
    _provider = _SHA224


class SHA256Hash(_PyCryptodomeHash):
    ALGORITHM = "SHA-256"
    BLOCK_SIZE = 512 // 8
    OUTPUT_SIZE = 256 // 8
    _provider = _SHA256


class SHA384Hash(_PyCryptodomeHash):
    ALGORITHM = "SHA-384"
    BLOCK_SIZE = 1024 // 8
    OUTPUT_SIZE = 384 // 8
    _provider = _SHA384


class SHA512Hash(_PyCryptodomeHash):
    ALGORITHM = "SHA-512"
    BLOCK_SIZE = 1024 // 8
    OUTPUT_SIZE = 512 // 8
    _provider = _SHA512


# 全局共享实例（无状态，可跨线程使用）
MD2 = MD2Hash()
MD5 = MD5Hash()
SHA1 = SHA1Hash()
SHA224 = SHA224Hash()
SHA256 = SHA256Hash()
SHA384 = SHA384Hash()
SHA512 = SHA512Hash()


def _normalize(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch not in "-_ ")


_REGISTRY: Dict[str, HashFunction] = {
    _normalize(h.name): h for h in (MD2, MD5, SHA1, SHA224, SHA256, SHA384, SHA512)
}


def get_hash_function(name: str) -> HashFunction:
    """
    按名称获取哈希函数

    名称不区分大小写，忽略 '-'、'_' 与空格，例如 "SHA-1"、"sha1"、"Sha_1"。

    Raises:
        UnsupportedAlgorithmError: 如果算法不存在
    """
    require_not_none(name, "name")
    if not isinstance(name, str):
        raise InvalidArgumentError(f"算法名称必须为字符串，实际为 {type(name).__name__}")
    try:
        return _REGISTRY[_normalize(name)]
    except KeyError:
        logger.debug(f"未知哈希算法: {name}")
        raise UnsupportedAlgorithmError(f"不支持的哈希算法: {name}") from None


def available_hash_functions() -> List[str]:
    """返回所有已注册哈希算法的规范名称"""
    return [h.name for h in _REGISTRY.values()]
