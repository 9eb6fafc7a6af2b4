"""
哈希、MAC 与 HMAC 测试
"""

import unittest

from keyedauth import bytes_util, keys
from keyedauth.errors import (
    ComputationError,
    InvalidArgumentError,
    UnsupportedAlgorithmError,
)
from keyedauth.hash import (
    MD2, MD5, SHA1, SHA224, SHA256, SHA384, SHA512,
    HashFunction,
    available_hash_functions,
    get_hash_function,
)
from keyedauth.hmac_auth import HMAC
from keyedauth.mac import MAC

MESSAGE = b"Hello, World!"
KEY = b"key"


class BrokenHash(HashFunction):
    """计算总是失败的哈希函数"""

    ALGORITHM = "BROKEN"
    BLOCK_SIZE = 64
    OUTPUT_SIZE = 20

    def compute(self, data: bytes) -> bytes:
        raise ComputationError("provider unavailable")


class TestHashFunction(unittest.TestCase):
    """哈希函数测试"""

    EXPECTED = {
        MD2: "1c8f1e6a94aaa7145210bf90bb52871a",
        MD5: "65a8e27d8879283831b664bd8b7f0ad4",
        SHA1: "0a0a9f2a6772942557ab5355d76af442f8f65e01",
        SHA224: "72a23dfa411ba6fde01dbfabf3b00a709c93ebf273dc29e2d8b261ff",
        SHA256: "dffd6021bb2bd5b0af676290809ec3a53191dd81c7f70a4b28688a362182986f",
        SHA384: "5485cc9b3365b4305dfb4e8337e0a598a574f8242bf17289e0dd6c20a3cd44a0"
                "89de16ab4ab308f63e44b1170eb5f515",
        SHA512: "374d794a95cdcfd8b35993185fef9ba368f160d8daf432d08ba9f1ed1e5abe6c"
                "c69291e0fa2fe0006a52570ef18c19def4e617c33ce52ef0a6e5fbe318cb0387",
    }

    def test_known_digests(self):
        """测试已知摘要"""
        for hash_function, expected in self.EXPECTED.items():
            with self.subTest(hash_function=hash_function.name):
                digest = hash_function.compute(MESSAGE)
                self.assertEqual(bytes_util.to_hex(digest), expected)
                self.assertEqual(len(digest), hash_function.output_size)

    def test_sizes(self):
        """测试块大小与输出长度"""
        self.assertEqual((SHA1.block_size, SHA1.output_size), (64, 20))
        self.assertEqual((MD5.block_size, MD5.output_size), (64, 16))
        self.assertEqual((SHA512.block_size, SHA512.output_size), (128, 64))

    def test_input_not_modified(self):
        """测试不修改输入"""
        data = bytearray(b"mutable input")
        SHA256.compute(data)
        self.assertEqual(data, bytearray(b"mutable input"))

    def test_rejects_none_and_text(self):
        """测试非法输入"""
        with self.assertRaises(InvalidArgumentError):
            SHA1.compute(None)
        with self.assertRaises(InvalidArgumentError):
            SHA1.compute("text")

    def test_registry(self):
        """测试注册表查找"""
        self.assertIs(get_hash_function("SHA-1"), SHA1)
        self.assertIs(get_hash_function("sha1"), SHA1)
        self.assertIs(get_hash_function("Sha_256"), SHA256)
        self.assertEqual(len(available_hash_functions()), 7)
        with self.assertRaises(UnsupportedAlgorithmError):
            get_hash_function("SHA-3")

    def test_registry_rejects_non_string(self):
        """测试非字符串算法名称"""
        for name in (1, b"sha1", ["SHA-1"]):
            with self.subTest(name=name):
                with self.assertRaises(InvalidArgumentError):
                    get_hash_function(name)

    def test_equality(self):
        """测试相等性"""
        self.assertEqual(get_hash_function("md5"), MD5)
        self.assertNotEqual(MD5, SHA1)


class TestBytes(unittest.TestCase):
    """字节工具测试"""

    def test_xor(self):
        self.assertEqual(bytes_util.xor(b"\x0f\xf0", b"\xff\xff"), b"\xf0\x0f")
        self.assertEqual(bytes_util.xor(b"", b""), b"")

    def test_xor_length_mismatch(self):
        with self.assertRaises(InvalidArgumentError):
            bytes_util.xor(b"\x00", b"\x00\x00")

    def test_concatenate(self):
        self.assertEqual(bytes_util.concatenate(b"ab", b"", b"cd"), b"abcd")
        self.assertEqual(bytes_util.concatenate(b"ab"), b"ab")

    def test_right_pad(self):
        self.assertEqual(bytes_util.right_pad(b"\x01", 3), b"\x01\x00\x00")
        with self.assertRaises(InvalidArgumentError):
            bytes_util.right_pad(b"\x01\x02", 1)


class TestMAC(unittest.TestCase):
    """基础 MAC 测试"""

    def test_sign_is_hash_of_key_and_message(self):
        """测试 tag = H(key || message)"""
        tag = MAC.sign(MESSAGE, KEY, SHA256)
        self.assertEqual(tag, SHA256.compute(KEY + MESSAGE))

    def test_sign_verify(self):
        """测试签名验证"""
        key = MAC.generate_key("AES")
        tag = MAC.sign(MESSAGE, key, SHA1)

        self.assertTrue(MAC.verify(MESSAGE, tag, key, SHA1))
        self.assertFalse(MAC.verify(b"Wrong", tag, key, SHA1))

    def test_required_arguments(self):
        with self.assertRaises(InvalidArgumentError):
            MAC.sign(None, KEY, SHA1)
        with self.assertRaises(InvalidArgumentError):
            MAC.sign(MESSAGE, None, SHA1)
        with self.assertRaises(InvalidArgumentError):
            MAC.verify(MESSAGE, None, KEY, SHA1)

    def test_verify_propagates_failure(self):
        """测试计算失败不被当作验证失败"""
        with self.assertRaises(ComputationError):
            MAC.verify(MESSAGE, b"\x00" * 20, KEY, BrokenHash())


class TestHMAC(unittest.TestCase):
    """HMAC 测试"""

    EXPECTED = {
        MD5: "cfad9d610c1e548a03562f8eac399033",
        SHA1: "b688f6f2602474b86713f193726755f0095edc8b",
        SHA224: "a58896726f469bc972de59f0304e3afcccd2fe2dd8c557f26280cb12",
        SHA256: "7f424e2d0ff6bd5dec626e0102755bafec91c3510f19739a4eaec8f3bc3a01a4",
        SHA384: "9fe103f87ef7dba0cda630259f21c261ced8b42b9dcdf5a17be91ee7c2435620"
                "459d891a720a84e2965365ea7cf36ef1",
        SHA512: "7b735ac190ebd1432d56f95ae2aea5a04a23128f4c228e299b7a49fb7561de8c"
                "c8f4fdf4486dc743dfd07827d617273aab42b3bf819d243ded322fac167419f1",
    }

    def test_known_tags(self):
        """测试已知 HMAC 值"""
        for hash_function, expected in self.EXPECTED.items():
            with self.subTest(hash_function=hash_function.name):
                tag = HMAC(KEY, hash_function).sign(MESSAGE)
                self.assertEqual(bytes_util.to_hex(tag), expected)

    def test_rfc2202_sha1(self):
        """测试 RFC 2202 向量（含长于块大小的密钥）"""
        auth = HMAC(b"\x0b" * 20, SHA1)
        self.assertEqual(bytes_util.to_hex(auth.sign(b"Hi There")),
                         "b617318655057264e28bc0b6fb378c8ef146be00")

        auth = HMAC(b"\xaa" * 80, SHA1)
        tag = auth.sign(b"Test Using Larger Than Block-Size Key - Hash Key First")
        self.assertEqual(bytes_util.to_hex(tag), "aa4ae5e15272d00e95705637ce8a3b55ed402112")

    def test_generate_sign_verify(self):
        """测试随机密钥的签名验证"""
        for hash_function in (MD2, MD5, SHA1, SHA224, SHA256, SHA384, SHA512):
            with self.subTest(hash_function=hash_function.name):
                auth = HMAC(HMAC.generate_key("AES"), hash_function)
                tag = auth.sign(MESSAGE)

                self.assertTrue(auth.verify(MESSAGE, tag))
                self.assertFalse(auth.verify(b"Wrong", tag))

    def test_deterministic(self):
        auth = HMAC(KEY, SHA256)
        self.assertEqual(auth.sign(MESSAGE), auth.sign(MESSAGE))

    def test_tamper_detection(self):
        """测试任意一位翻转都导致验证失败"""
        auth = HMAC(KEY, SHA1)
        tag = auth.sign(MESSAGE)
        for i in range(len(MESSAGE) * 8):
            tampered = bytearray(MESSAGE)
            tampered[i // 8] ^= 1 << (i % 8)
            self.assertFalse(auth.verify(bytes(tampered), tag))
        for i in range(len(tag) * 8):
            tampered = bytearray(tag)
            tampered[i // 8] ^= 1 << (i % 8)
            self.assertFalse(auth.verify(MESSAGE, bytes(tampered)))

    def test_key_lengths(self):
        """测试 0 到远超块大小的各种密钥长度"""
        for length in (0, 1, 63, 64, 65, 128, 129, 1000):
            with self.subTest(length=length):
                auth = HMAC(b"k" * length, SHA1)
                self.assertEqual(len(auth.inner_padded_key), SHA1.block_size)
                self.assertEqual(len(auth.outer_padded_key), SHA1.block_size)
                tag = auth.sign(MESSAGE)
                self.assertEqual(len(tag), SHA1.output_size)
                self.assertTrue(auth.verify(MESSAGE, tag))

    def test_padded_keys(self):
        """测试内外填充密钥的构造"""
        auth = HMAC(b"\x01", SHA1)
        self.assertEqual(auth.inner_padded_key, b"\x37" + b"\x36" * 63)
        self.assertEqual(auth.outer_padded_key, b"\x5d" + b"\x5c" * 63)

        long_key = b"x" * 100
        auth = HMAC(long_key, SHA1)
        block_key = SHA1.compute(long_key) + bytes(44)
        self.assertEqual(auth.inner_padded_key, bytes_util.xor(block_key, b"\x36" * 64))

    def test_key_is_copied(self):
        """测试密钥防御性复制"""
        key = bytearray(b"secret")
        auth = HMAC(key, SHA1)
        tag = auth.sign(MESSAGE)
        key[0] ^= 0xFF

        self.assertEqual(auth.key, b"secret")
        self.assertTrue(auth.verify(MESSAGE, tag))
        self.assertEqual(HMAC(b"secret", SHA1), auth)

    def test_quick_sign_verify(self):
        tag = HMAC.quick_sign(MESSAGE, KEY, SHA1)
        self.assertEqual(bytes_util.to_hex(tag), self.EXPECTED[SHA1])
        self.assertTrue(HMAC.quick_verify(MESSAGE, tag, KEY, SHA1))

    def test_required_arguments(self):
        with self.assertRaises(InvalidArgumentError):
            HMAC(None, SHA1)
        with self.assertRaises(InvalidArgumentError):
            HMAC(KEY, None)
        with self.assertRaises(InvalidArgumentError):
            HMAC(KEY, SHA1).sign(None)

    def test_verify_propagates_failure(self):
        """测试计算失败不被当作验证失败"""
        auth = HMAC(KEY, BrokenHash())
        with self.assertRaises(ComputationError):
            auth.verify(MESSAGE, b"\x00" * 20)

    def test_repr_hides_key(self):
        self.assertNotIn("secret", repr(HMAC(b"secret", SHA1)))


class TestKeys(unittest.TestCase):
    """密钥生成测试"""

    def test_default_sizes(self):
        self.assertEqual(len(keys.generate("AES")), 32)
        self.assertEqual(len(keys.generate("HmacSHA256")), 32)
        self.assertEqual(len(keys.generate("des")), 8)

    def test_explicit_size(self):
        self.assertEqual(len(keys.generate("AES", 128)), 16)
        self.assertEqual(len(keys.generate("HmacSHA1", 160)), 20)

    def test_random(self):
        self.assertNotEqual(keys.generate("AES"), keys.generate("AES"))

    def test_randfunc(self):
        key = keys.generate("AES", 128, randfunc=lambda n: b"\x01" * n)
        self.assertEqual(key, b"\x01" * 16)

    def test_invalid(self):
        with self.assertRaises(UnsupportedAlgorithmError):
            keys.generate("Serpent")
        with self.assertRaises(InvalidArgumentError):
            keys.generate("AES", 100)
        with self.assertRaises(InvalidArgumentError):
            keys.generate("HmacSHA256", 12)
        with self.assertRaises(InvalidArgumentError):
            keys.generate(None)
        with self.assertRaises(InvalidArgumentError):
            keys.generate(128)
        with self.assertRaises(InvalidArgumentError):
            keys.get_key_spec(b"AES")


if __name__ == '__main__':
    unittest.main()
