# src/routeros_core/protocols/sentence.py
"""
句子读取器 (Sentence Reader)

维护一个滚动的字节缓冲区，把传输层送来的字节流切分为有序的句子。
未读完的句子中已解码的单词会被保留，直到终止符到达。
"""

import logging
from collections.abc import Awaitable, Callable

from ..exceptions import IncompleteDataError, NetworkError, ProtocolError
from . import codec

logger = logging.getLogger(__name__)

# 异步读取函数：返回新到达的字节，返回 b"" 表示对端已关闭
ReceiveFunc = Callable[[], Awaitable[bytes]]


class SentenceReader:
    """把字节流组装为句子。

    缓冲区为读取器独占，生命周期与所属会话一致。

    Attributes:
        buffer: 尚未解码的原始字节。
    """

    def __init__(
        self, receive: ReceiveFunc | None = None, max_word_size: int | None = None
    ) -> None:
        """
        Args:
            receive: 可选的异步读取函数。仅使用 feed()/next_sentence()
                的同步场景下可以省略。
            max_word_size: 可选的单词长度上限 (字节)。对端声明更长的单词时
                抛出 ProtocolError，缓冲区不会为其无限增长。
        """
        self.buffer = bytearray()
        self.max_word_size = max_word_size
        self._receive = receive
        self._words: list[str] = []

    @property
    def has_pending(self) -> bool:
        """是否存在尚未组装完成的数据。"""
        return bool(self.buffer) or bool(self._words)

    def feed(self, data: bytes) -> None:
        """追加传输层送来的字节。"""
        self.buffer.extend(data)

    def next_sentence(self) -> list[str] | None:
        """尝试从缓冲区中取出一个完整句子。

        Returns:
            list[str] | None: 句子的单词列表 (不含终止符)；
            数据不足时返回 None。立即遇到终止符时返回空列表。

        Raises:
            ProtocolError: 长度前缀非法或单词超出长度上限。
        """
        while True:
            try:
                word = codec.decode_word(self.buffer, self.max_word_size)
            except IncompleteDataError:
                return None

            if not word:
                sentence, self._words = self._words, []
                return sentence
            self._words.append(word)

    async def read_sentence(self) -> list[str]:
        """读取下一个完整句子，必要时挂起等待更多字节。

        Raises:
            NetworkError: 缓冲区为空时对端关闭了连接。
            ProtocolError: 对端在句子中途关闭连接，或长度前缀非法。
        """
        while True:
            sentence = self.next_sentence()
            if sentence is not None:
                logger.debug(f"<<< {sentence}")
                return sentence

            if self._receive is None:
                raise ProtocolError("数据不足且没有可用的读取源")

            data = await self._receive()
            if not data:
                if self.has_pending:
                    raise ProtocolError(
                        f"数据流被截断 (剩余 {len(self.buffer)} 字节未解码)"
                    )
                raise NetworkError("连接已被对端关闭")
            self.feed(data)
