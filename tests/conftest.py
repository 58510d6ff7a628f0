# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from routeros_core.config import DeviceTarget
from routeros_core.protocols.codec import encode_sentence
from routeros_core.protocols.sentence import SentenceReader


def sentence(*words: str) -> bytes:
    """辅助函数：编码一个完整句子"""
    return encode_sentence(words)


class FakeConnection:
    """
    [Fake] 脚本化的连接对象。

    receive() 依次返回预置的字节块，耗尽后返回 b"" (模拟对端关闭)。
    send() 记录所有发出的字节，可用 sent_sentences() 解码回句子。
    """

    def __init__(self, chunks: list[bytes] | None = None, connect_error: Exception | None = None):
        self.chunks = list(chunks or [])
        self.connect_error = connect_error
        self.sent = bytearray()
        self.connected = False
        self.close_calls = 0

    async def connect(self) -> None:
        if self.connect_error:
            raise self.connect_error
        self.connected = True

    async def send(self, data: bytes) -> None:
        self.sent.extend(data)

    async def receive(self) -> bytes:
        if self.chunks:
            item = self.chunks.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return b""

    async def close(self) -> None:
        self.connected = False
        self.close_calls += 1

    @property
    def closed(self) -> bool:
        return self.close_calls > 0 and not self.connected

    def sent_sentences(self) -> list[list[str]]:
        reader = SentenceReader()
        reader.feed(bytes(self.sent))
        result = []
        while (s := reader.next_sentence()) is not None:
            result.append(s)
        return result


@pytest.fixture
def valid_target():
    """
    [Fixture] 返回一个标准的 DeviceTarget 对象。
    """
    return DeviceTarget(
        host="192.0.2.1",
        username="admin",
        password="secret",
        port=8728,
        name="edge-01",
        timeout=1.0,
    )


@pytest.fixture
def login_ok() -> bytes:
    """登录成功的应答"""
    return sentence("!done")
