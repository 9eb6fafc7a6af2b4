"""
配置模块
从 keyedauth.ini 与环境变量加载默认算法参数
"""

import configparser
import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union

from . import keys
from .errors import InvalidArgumentError
from .hash import HashFunction, get_hash_function
from .hmac_auth import HMAC
from .otp import HOTP, TOTP

CONFIG_FILE = "keyedauth.ini"

# 日志配置
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def _parse_int(raw: str, name: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"配置项 {name} 必须为整数: {raw!r}") from None


def _parse_float(raw: str, name: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"配置项 {name} 必须为数字: {raw!r}") from None


def _optional(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


@dataclass
class AuthConfig:
    """认证参数配置"""

    # OTP 配置
    hash_algorithm: str = "SHA-1"
    digits: int = 6
    time_step: float = 30  # 秒
    start_time: Optional[float] = None  # Unix 秒，None 表示构造时刻

    # 密钥配置
    key_algorithm: str = "AES"
    key_size: Optional[int] = None  # 位，None 表示算法默认值

    # 日志配置
    log_level: str = "INFO"

    def load(self, path: Union[str, Path] = CONFIG_FILE) -> "AuthConfig":
        """从 ini 文件加载配置，随后应用环境变量（优先级最高）"""
        config = configparser.ConfigParser()
        if os.path.exists(path):
            config.read(path, encoding="utf-8")
            logger.debug(f"已读取配置文件: {path}")

        if "OTP" in config:
            section = config["OTP"]
            self.hash_algorithm = section.get("hash_algorithm", self.hash_algorithm)
            if "digits" in section:
                self.digits = _parse_int(section["digits"], "digits")
            if "time_step" in section:
                self.time_step = _parse_float(section["time_step"], "time_step")
            start = _optional(section.get("start_time"))
            if start is not None:
                self.start_time = _parse_float(start, "start_time")

        if "Keys" in config:
            section = config["Keys"]
            self.key_algorithm = section.get("key_algorithm", self.key_algorithm)
            size = _optional(section.get("key_size"))
            if size is not None:
                self.key_size = _parse_int(size, "key_size")

        if "Logging" in config:
            self.log_level = config["Logging"].get("level", self.log_level)

        self.apply_env()
        return self

    def apply_env(self):
        """环境变量覆盖，方便容器化部署"""
        env = os.environ
        self.hash_algorithm = env.get("KEYEDAUTH_HASH", self.hash_algorithm)
        if "KEYEDAUTH_DIGITS" in env:
            self.digits = _parse_int(env["KEYEDAUTH_DIGITS"], "KEYEDAUTH_DIGITS")
        if "KEYEDAUTH_TIME_STEP" in env:
            self.time_step = _parse_float(env["KEYEDAUTH_TIME_STEP"], "KEYEDAUTH_TIME_STEP")
        if _optional(env.get("KEYEDAUTH_START_TIME")) is not None:
            self.start_time = _parse_float(env["KEYEDAUTH_START_TIME"], "KEYEDAUTH_START_TIME")
        self.key_algorithm = env.get("KEYEDAUTH_KEY_ALGORITHM", self.key_algorithm)
        if _optional(env.get("KEYEDAUTH_KEY_SIZE")) is not None:
            self.key_size = _parse_int(env["KEYEDAUTH_KEY_SIZE"], "KEYEDAUTH_KEY_SIZE")
        self.log_level = env.get("KEYEDAUTH_LOG_LEVEL", self.log_level)

    def save(self, path: Union[str, Path] = CONFIG_FILE):
        """将当前配置保存到 ini 文件"""
        config = configparser.ConfigParser()
        config["OTP"] = {
            "hash_algorithm": self.hash_algorithm,
            "digits": str(self.digits),
            "time_step": str(self.time_step),
            "start_time": "" if self.start_time is None else str(self.start_time),
        }
        config["Keys"] = {
            "key_algorithm": self.key_algorithm,
            "key_size": "" if self.key_size is None else str(self.key_size),
        }
        config["Logging"] = {
            "level": self.log_level,
        }

        with open(path, "w", encoding="utf-8") as configfile:
            config.write(configfile)

    def hash_function(self) -> HashFunction:
        return get_hash_function(self.hash_algorithm)

    def generate_key(self) -> bytes:
        return keys.generate(self.key_algorithm, self.key_size)

    def create_hmac(self, key: bytes) -> HMAC:
        return HMAC(key, self.hash_function())

    def create_hotp(self, key: bytes) -> HOTP:
        return HOTP(key, self.hash_function(), self.digits)

    def create_totp(self, key: bytes) -> TOTP:
        return TOTP(
            key,
            self.hash_function(),
            self.digits,
            time_step=timedelta(seconds=self.time_step),
            start_time=self.start_time,
        )


def setup_logging(level: Union[str, int] = "INFO"):
    """配置根日志器"""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise InvalidArgumentError(f"未知日志级别: {level}")
        level = resolved
    logging.basicConfig(level=level, format=LOG_FORMAT)
