"""
一次性密码模块
HOTP (RFC 4226) 与 TOTP (RFC 6238)
"""

import hmac
import logging
import math
import struct
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from .errors import InvalidArgumentError, require_not_none
from .hash import HashFunction
from .hmac_auth import HMAC

logger = logging.getLogger(__name__)

TimeLike = Union[datetime, int, float]
StepLike = Union[timedelta, int, float]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MAX_DIGITS = 8
MAX_COUNTER = 2 ** 64 - 1
MIN_DIGEST_SIZE = 20  # RFC 4226 要求至少 160 位

#               digits = 0, 1,  2,   3,     4,      5,       6,         7,          8
_DIGIT_POWERS = (1, 10, 100, 1_000, 10_000, 100_000, 1_000_000, 10_000_000, 100_000_000)


def dynamic_truncate(digest: bytes) -> int:
    """
    RFC 4226 动态截断

    offset = 最后一字节低 4 位，从 offset 取 4 字节并清除最高位，
    得到 31 位无符号整数。

    Raises:
        InvalidArgumentError: 如果摘要不足以容纳截断窗口
    """
    require_not_none(digest, "digest")
    if not digest:
        raise InvalidArgumentError("摘要不能为空")
    offset = digest[-1] & 0x0F
    if offset + 4 > len(digest):
        raise InvalidArgumentError(f"摘要长度 {len(digest)} 不足以截断 (offset={offset})")
    return (
        (digest[offset] & 0x7F) << 24
        | (digest[offset + 1] & 0xFF) << 16
        | (digest[offset + 2] & 0xFF) << 8
        | (digest[offset + 3] & 0xFF)
    )


def _require_int(value, name: str) -> int:
    require_not_none(value, name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"参数 {name} 必须为整数，实际为 {type(value).__name__}")
    return value


class HOTP:
    """基于计数器的一次性密码"""

    def __init__(self, key: bytes, hash_function: HashFunction, digits: int = 6):
        """
        初始化 HOTP

        Args:
            key: 共享密钥
            hash_function: HMAC 使用的哈希函数
            digits: 密码位数，0..8

        Raises:
            InvalidArgumentError: 如果参数缺失、位数越界或哈希摘要过短
        """
        _require_int(digits, "digits")
        if not 0 <= digits <= MAX_DIGITS:
            raise InvalidArgumentError(f"位数必须在 0..{MAX_DIGITS} 之间，实际为 {digits}")
        require_not_none(key, "key")
        require_not_none(hash_function, "hash_function")
        if hash_function.output_size < MIN_DIGEST_SIZE:
            raise InvalidArgumentError(
                f"{hash_function.name} 摘要长度 {hash_function.output_size} 字节，"
                f"HOTP 要求至少 {MIN_DIGEST_SIZE} 字节"
            )

        self._digits = digits
        self._mod_divisor = _DIGIT_POWERS[digits]
        self._hmac = HMAC(key, hash_function)

    @property
    def digits(self) -> int:
        return self._digits

    @property
    def mod_divisor(self) -> int:
        return self._mod_divisor

    @property
    def key(self) -> bytes:
        """密钥的独立副本"""
        return self._hmac.key

    @property
    def hash_function(self) -> HashFunction:
        return self._hmac.hash_function

    def compute(self, counter: int) -> int:
        """
        计算指定计数器的密码

        Args:
            counter: 计数器，0 <= counter < 2**64

        Returns:
            0 <= code < 10**digits 的整数（未补零）
        """
        _require_int(counter, "counter")
        if counter < 0:
            raise InvalidArgumentError(f"计数器不能为负数: {counter}")
        if counter > MAX_COUNTER:
            raise InvalidArgumentError(f"计数器超过 64 位范围: {counter}")

        digest = self._hmac.sign(struct.pack(">Q", counter))
        return dynamic_truncate(digest) % self._mod_divisor

    def format_code(self, code: int) -> str:
        """按位数左侧补零"""
        _require_int(code, "code")
        return str(code).zfill(self._digits)

    def verify(self, code: Union[int, str], counter: int) -> bool:
        """
        验证指定计数器的密码（仅该计数器，不做窗口前瞻）

        Args:
            code: 整数或十进制字符串
            counter: 计数器
        """
        expected = self.format_code(self.compute(counter))
        return hmac.compare_digest(expected, _normalize_code(code, self._digits))

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, HOTP):
            return NotImplemented
        return self._digits == other._digits and self._hmac == other._hmac

    def __hash__(self):
        return hash((self._digits, self._hmac))

    def __repr__(self):
        return f"HOTP(digits={self._digits}, hash_function={self.hash_function.name!r})"


def _normalize_code(code, digits: int) -> str:
    require_not_none(code, "code")
    if isinstance(code, str):
        code = code.strip()
        if not (code.isascii() and code.isdigit()):
            raise InvalidArgumentError("密码必须为 ASCII 十进制数字")
        return code
    _require_int(code, "code")
    return str(code).zfill(digits)


def to_millis(value: TimeLike, name: str = "time") -> int:
    """
    将时间点转换为 Unix 毫秒

    datetime 无时区信息时按 UTC 处理；数字按 Unix 秒处理。
    """
    require_not_none(value, name)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - EPOCH) // timedelta(milliseconds=1)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentError(f"参数 {name} 必须为 datetime 或 Unix 秒，实际为 {type(value).__name__}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidArgumentError(f"参数 {name} 必须为有限值")
        return math.floor(round(value * 1000, 6))
    return value * 1000


def step_to_millis(value: StepLike, name: str = "time_step") -> int:
    """将时间步长转换为整毫秒，数字按秒处理"""
    require_not_none(value, name)
    if isinstance(value, timedelta):
        return value // timedelta(milliseconds=1)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentError(f"参数 {name} 必须为 timedelta 或秒数，实际为 {type(value).__name__}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidArgumentError(f"参数 {name} 必须为有限值")
        return round(value * 1000)
    return value * 1000


class TOTP:
    """基于时间的一次性密码，组合一个 HOTP 实例"""

    DEFAULT_TIME_STEP = timedelta(seconds=30)

    def __init__(self, key: bytes, hash_function: HashFunction, digits: int = 6,
                 time_step: StepLike = DEFAULT_TIME_STEP,
                 start_time: Optional[TimeLike] = None):
        """
        初始化 TOTP

        Args:
            key: 共享密钥
            hash_function: 哈希函数
            digits: 密码位数，0..8
            time_step: 时间步长，必须大于 0（按整毫秒计）
            start_time: 起始时间 T0，None 时取构造时刻并固定

        Raises:
            InvalidArgumentError: 如果参数非法
        """
        step_ms = step_to_millis(time_step)
        if step_ms <= 0:
            raise InvalidArgumentError(f"时间步长必须大于 0 毫秒: {time_step}")

        if start_time is None:
            start_time = datetime.now(timezone.utc)

        self._hotp = HOTP(key, hash_function, digits)
        self._time_step_ms = step_ms
        self._start_time_ms = to_millis(start_time, "start_time")

        logger.debug(
            f"TOTP 初始化: 算法={hash_function.name}, 位数={digits}, "
            f"步长={step_ms}ms, 起始={self._start_time_ms}ms"
        )

    @property
    def hotp(self) -> HOTP:
        return self._hotp

    @property
    def digits(self) -> int:
        return self._hotp.digits

    @property
    def time_step(self) -> timedelta:
        return timedelta(milliseconds=self._time_step_ms)

    @property
    def start_time(self) -> datetime:
        return EPOCH + timedelta(milliseconds=self._start_time_ms)

    def _elapsed_millis(self, time: TimeLike) -> int:
        time_ms = to_millis(time)
        if time_ms < self._start_time_ms:
            raise InvalidArgumentError("查询时间早于起始时间")
        return time_ms - self._start_time_ms

    def counter_at(self, time: TimeLike) -> int:
        """计算时间点对应的计数器: (time - T0) // step"""
        return self._elapsed_millis(time) // self._time_step_ms

    def compute(self, time: TimeLike) -> int:
        """计算时间点对应的密码"""
        return self._hotp.compute(self.counter_at(time))

    def now(self) -> int:
        """计算当前时刻的密码"""
        return self.compute(datetime.now(timezone.utc))

    def remaining(self, time: TimeLike) -> timedelta:
        """距离下一个步长边界的剩余时间"""
        elapsed = self._elapsed_millis(time)
        return timedelta(milliseconds=self._time_step_ms - elapsed % self._time_step_ms)

    def format_code(self, code: int) -> str:
        return self._hotp.format_code(code)

    def verify(self, code: Union[int, str], time: TimeLike) -> bool:
        """验证时间点所在步长的密码（不做前后窗口容错）"""
        return self._hotp.verify(code, self.counter_at(time))

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, TOTP):
            return NotImplemented
        return (self._hotp == other._hotp
                and self._time_step_ms == other._time_step_ms
                and self._start_time_ms == other._start_time_ms)

    def __hash__(self):
        return hash((self._hotp, self._time_step_ms, self._start_time_ms))

    def __repr__(self):
        return (f"TOTP(hotp={self._hotp!r}, time_step={self.time_step!r}, "
                f"start_time={self.start_time.isoformat()!r})")
