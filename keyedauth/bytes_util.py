"""
字节工具函数
拼接、异或、填充与十六进制编码
"""

from Crypto.Util.strxor import strxor

from .errors import InvalidArgumentError, require_not_none


def concatenate(first: bytes, *others: bytes) -> bytes:
    """按顺序拼接多个字节串，总是返回新对象"""
    require_not_none(first, "first")
    parts = [bytes(first)]
    for index, part in enumerate(others):
        require_not_none(part, f"others[{index}]")
        parts.append(bytes(part))
    return b"".join(parts)


def xor(a: bytes, b: bytes) -> bytes:
    """
    等长字节串按位异或

    Args:
        a: 第一个字节串
        b: 第二个字节串

    Returns:
        异或结果

    Raises:
        InvalidArgumentError: 如果长度不一致
    """
    require_not_none(a, "a")
    require_not_none(b, "b")
    if len(a) != len(b):
        raise InvalidArgumentError(f"长度不一致: {len(a)} != {len(b)}")
    if not a:
        return b""
    return strxor(bytes(a), bytes(b))


def right_pad(data: bytes, size: int) -> bytes:
    """右侧补零到 size 字节，已达到长度时原样返回副本"""
    require_not_none(data, "data")
    if len(data) > size:
        raise InvalidArgumentError(f"数据长度 {len(data)} 超过目标长度 {size}")
    return bytes(data) + bytes(size - len(data))


def to_hex(data: bytes) -> str:
    """小写十六进制编码"""
    require_not_none(data, "data")
    return bytes(data).hex()
