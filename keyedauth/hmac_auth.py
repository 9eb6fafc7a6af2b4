"""
HMAC 消息认证模块 (RFC 2104)
基于任意 HashFunction 的嵌套填充构造
"""

import hmac
import logging
from typing import Optional

from . import keys
from .bytes_util import concatenate, right_pad, xor
from .errors import require_not_none
from .hash import HashFunction

logger = logging.getLogger(__name__)


class HMAC:
    """HMAC 认证器"""

    OUTER_PADDING_BYTE = 0x5C
    INNER_PADDING_BYTE = 0x36

    def __init__(self, key: bytes, hash_function: HashFunction):
        """
        初始化 HMAC 认证器

        Args:
            key: HMAC 密钥，任意长度（包括 0）
            hash_function: 哈希函数

        Raises:
            InvalidArgumentError: 如果密钥或哈希函数为空
            ComputationError: 如果长密钥哈希失败
        """
        require_not_none(key, "key")
        require_not_none(hash_function, "hash_function")

        self._key = bytes(key)
        self._hash_function = hash_function

        block_size = hash_function.block_size
        block_sized_key = self.compute_block_sized_key(self._key, hash_function)
        self._outer_padded_key = xor(block_sized_key, bytes([self.OUTER_PADDING_BYTE]) * block_size)
        self._inner_padded_key = xor(block_sized_key, bytes([self.INNER_PADDING_BYTE]) * block_size)

        logger.debug(
            f"HMAC 初始化: 算法={hash_function.name}, 块大小={block_size}, "
            f"密钥长度={len(self._key)}, 已缩短={len(self._key) > block_size}"
        )

    @staticmethod
    def compute_block_sized_key(key: bytes, hash_function: HashFunction) -> bytes:
        """
        将密钥规整为块大小

        - 长于块大小：先哈希，再右侧补零
        - 短于块大小：右侧补零
        - 等于块大小：原样使用
        """
        block_size = hash_function.block_size
        if len(key) > block_size:
            # 哈希后的密钥短于块大小，补零必须在异或之前完成
            key = hash_function.compute(key)
        return right_pad(key, block_size)

    @property
    def key(self) -> bytes:
        """密钥的独立副本"""
        return bytes(bytearray(self._key))

    @property
    def hash_function(self) -> HashFunction:
        return self._hash_function

    @property
    def outer_padded_key(self) -> bytes:
        return self._outer_padded_key

    @property
    def inner_padded_key(self) -> bytes:
        return self._inner_padded_key

    @property
    def digest_size(self) -> int:
        return self._hash_function.output_size

    def sign(self, message: bytes) -> bytes:
        """
        生成消息的 HMAC

        Args:
            message: 待认证消息

        Returns:
            digest_size 字节 HMAC 值
        """
        require_not_none(message, "message")
        inner = self._hash_function.compute(concatenate(self._inner_padded_key, message))
        return self._hash_function.compute(concatenate(self._outer_padded_key, inner))

    def verify(self, message: bytes, tag: bytes) -> bool:
        """
        验证消息的 HMAC

        Args:
            message: 原始消息
            tag: 待验证的 HMAC 值

        Returns:
            验证是否通过

        Raises:
            ComputationError: 如果重新计算失败（不会返回 False）
        """
        require_not_none(tag, "tag")
        expected = self.sign(message)
        matched = hmac.compare_digest(expected, bytes(tag))
        if not matched:
            logger.debug(f"HMAC 验证失败 ({self._hash_function.name})")
        return matched

    @staticmethod
    def generate_key(algorithm: str, key_size: Optional[int] = None) -> bytes:
        """生成随机密钥"""
        require_not_none(algorithm, "algorithm")
        return keys.generate(algorithm, key_size)

    @staticmethod
    def quick_sign(message: bytes, key: bytes, hash_function: HashFunction) -> bytes:
        """
        快速生成 HMAC（静态方法）

        Args:
            message: 待认证消息
            key: HMAC 密钥
            hash_function: 哈希函数

        Returns:
            HMAC 值
        """
        return HMAC(key, hash_function).sign(message)

    @staticmethod
    def quick_verify(message: bytes, tag: bytes, key: bytes, hash_function: HashFunction) -> bool:
        """快速验证 HMAC（静态方法）"""
        return HMAC(key, hash_function).verify(message, tag)

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, HMAC):
            return NotImplemented
        return (hmac.compare_digest(self._key, other._key)
                and self._hash_function == other._hash_function)

    def __hash__(self):
        return hash((self._key, self._hash_function))

    def __repr__(self):
        return f"HMAC(hash_function={self._hash_function.name!r}, key_length={len(self._key)})"
