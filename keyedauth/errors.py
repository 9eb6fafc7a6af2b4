"""
异常定义
所有模块统一抛出以下异常类型
"""


class KeyedAuthError(Exception):
    """本库异常基类"""


class InvalidArgumentError(KeyedAuthError, ValueError):
    """参数非法：缺失、越界、长度不符等"""


class UnsupportedAlgorithmError(KeyedAuthError, ValueError):
    """请求的哈希或密钥算法不可用"""


class ComputationError(KeyedAuthError):
    """底层哈希计算失败"""


def require_not_none(value, name: str):
    """
    校验必需参数

    Args:
        value: 参数值
        name: 参数名（用于错误信息）

    Returns:
        原参数值

    Raises:
        InvalidArgumentError: 如果参数为 None
    """
    if value is None:
        raise InvalidArgumentError(f"参数 {name} 不能为空")
    return value
