"""
基础消息认证码模块
tag = H(key || message)

注意：对 Merkle-Damgård 结构的哈希存在长度扩展攻击，
仅为接口对称保留，新代码请使用 HMAC。
"""

import hmac
import logging
from typing import Optional

from . import keys
from .bytes_util import concatenate
from .errors import require_not_none
from .hash import HashFunction

logger = logging.getLogger(__name__)


class MAC:
    """基础 MAC（无密钥填充）"""

    @staticmethod
    def generate_key(algorithm: str, key_size: Optional[int] = None) -> bytes:
        """生成随机密钥"""
        require_not_none(algorithm, "algorithm")
        return keys.generate(algorithm, key_size)

    @staticmethod
    def sign(message: bytes, key: bytes, hash_function: HashFunction) -> bytes:
        """
        生成消息的 MAC

        Args:
            message: 待认证消息
            key: 密钥
            hash_function: 哈希函数

        Returns:
            hash_function.output_size 字节的标签
        """
        require_not_none(message, "message")
        require_not_none(key, "key")
        require_not_none(hash_function, "hash_function")
        logger.debug(f"使用基础 MAC 签名 ({hash_function.name})，不建议用于新场景")
        return hash_function.compute(concatenate(key, message))

    @staticmethod
    def verify(message: bytes, tag: bytes, key: bytes, hash_function: HashFunction) -> bool:
        """
        验证消息的 MAC

        Returns:
            验证是否通过

        Raises:
            ComputationError: 如果重新计算失败（不会返回 False）
        """
        require_not_none(tag, "tag")
        expected = MAC.sign(message, key, hash_function)
        return hmac.compare_digest(expected, bytes(tag))
