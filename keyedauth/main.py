"""
命令行入口
"""

import argparse
import binascii
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from . import keys
from .bytes_util import to_hex
from .config import CONFIG_FILE, AuthConfig, setup_logging
from .errors import InvalidArgumentError, KeyedAuthError
from .hash import available_hash_functions, get_hash_function
from .hmac_auth import HMAC
from .otp import HOTP, TOTP

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def _add_key_arguments(parser: argparse.ArgumentParser):
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--key", help="文本密钥 (UTF-8)")
    group.add_argument("--key-hex", help="十六进制密钥")


def _read_key(args) -> bytes:
    if args.key is not None:
        return args.key.encode("utf-8")
    try:
        return binascii.unhexlify(args.key_hex)
    except (binascii.Error, ValueError):
        raise InvalidArgumentError(f"无效的十六进制密钥: {args.key_hex}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keyedauth", description="MAC / HMAC / HOTP / TOTP 工具")
    parser.add_argument("--config", default=CONFIG_FILE, help=f"配置文件路径 (默认 {CONFIG_FILE})")
    parser.add_argument("--log-level", default=None, help="日志级别，覆盖配置文件")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("algorithms", help="列出支持的哈希与密钥算法")

    keygen = sub.add_parser("keygen", help="生成随机密钥（十六进制输出）")
    keygen.add_argument("--algorithm", default=None, help="密钥算法，例如 AES、HmacSHA256")
    keygen.add_argument("--size", type=int, default=None, help="密钥位数")

    digest = sub.add_parser("hash", help="计算消息摘要")
    digest.add_argument("message")
    digest.add_argument("--hash", default=None, help="哈希算法")

    mac = sub.add_parser("hmac", help="生成或验证 HMAC")
    mac.add_argument("message")
    _add_key_arguments(mac)
    mac.add_argument("--hash", default=None, help="哈希算法")
    mac.add_argument("--tag", default=None, help="待验证的十六进制标签")

    hotp = sub.add_parser("hotp", help="计算 HOTP")
    _add_key_arguments(hotp)
    hotp.add_argument("--counter", type=int, required=True)
    hotp.add_argument("--digits", type=int, default=None)
    hotp.add_argument("--hash", default=None, help="哈希算法")

    totp = sub.add_parser("totp", help="计算 TOTP")
    _add_key_arguments(totp)
    totp.add_argument("--time", type=float, default=None, help="Unix 秒，默认当前时间")
    totp.add_argument("--start-time", type=float, default=None, help="T0 (Unix 秒)，默认 0")
    totp.add_argument("--step", type=float, default=None, help="时间步长（秒）")
    totp.add_argument("--digits", type=int, default=None)
    totp.add_argument("--hash", default=None, help="哈希算法")

    return parser


def _cmd_algorithms(args, config: AuthConfig) -> int:
    print("[哈希算法]")
    for name in available_hash_functions():
        h = get_hash_function(name)
        print(f"  {name:<8} 块大小={h.block_size:<4} 输出={h.output_size}")
    print("[密钥算法]")
    for name in keys.supported_key_algorithms():
        spec = keys.get_key_spec(name)
        print(f"  {name:<11} 默认={spec.default_bits} 位")
    return EXIT_OK


def _cmd_keygen(args, config: AuthConfig) -> int:
    algorithm = args.algorithm or config.key_algorithm
    size = args.size if args.size is not None else (None if args.algorithm else config.key_size)
    print(to_hex(keys.generate(algorithm, size)))
    return EXIT_OK


def _cmd_hash(args, config: AuthConfig) -> int:
    hash_function = get_hash_function(args.hash or config.hash_algorithm)
    print(to_hex(hash_function.compute(args.message.encode("utf-8"))))
    return EXIT_OK


def _cmd_hmac(args, config: AuthConfig) -> int:
    auth = HMAC(_read_key(args), get_hash_function(args.hash or config.hash_algorithm))
    message = args.message.encode("utf-8")
    if args.tag is None:
        print(to_hex(auth.sign(message)))
        return EXIT_OK

    try:
        tag = binascii.unhexlify(args.tag)
    except (binascii.Error, ValueError):
        raise InvalidArgumentError(f"无效的十六进制标签: {args.tag}") from None
    if auth.verify(message, tag):
        print("OK")
        return EXIT_OK
    print("MISMATCH")
    return EXIT_MISMATCH


def _cmd_hotp(args, config: AuthConfig) -> int:
    digits = args.digits if args.digits is not None else config.digits
    hotp = HOTP(_read_key(args), get_hash_function(args.hash or config.hash_algorithm), digits)
    print(hotp.format_code(hotp.compute(args.counter)))
    return EXIT_OK


def _cmd_totp(args, config: AuthConfig) -> int:
    digits = args.digits if args.digits is not None else config.digits
    step = args.step if args.step is not None else config.time_step
    start = args.start_time
    if start is None:
        start = config.start_time if config.start_time is not None else 0
    totp = TOTP(
        _read_key(args),
        get_hash_function(args.hash or config.hash_algorithm),
        digits,
        time_step=timedelta(seconds=step),
        start_time=start,
    )
    when = datetime.now(timezone.utc) if args.time is None else args.time
    code = totp.compute(when)
    print(f"{totp.format_code(code)} (剩余 {totp.remaining(when).total_seconds():g} 秒)")
    return EXIT_OK


_COMMANDS = {
    "algorithms": _cmd_algorithms,
    "keygen": _cmd_keygen,
    "hash": _cmd_hash,
    "hmac": _cmd_hmac,
    "hotp": _cmd_hotp,
    "totp": _cmd_totp,
}


def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    args = build_parser().parse_args(argv)

    try:
        config = AuthConfig().load(args.config)
        setup_logging(args.log_level or config.log_level)
        return _COMMANDS[args.command](args, config)
    except KeyedAuthError as e:
        print(f"错误: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
