# File: src/routeros_core/protocols/codec.py
"""
RouterOS API 协议编解码器 (Length / Word Codec)

负责长度前缀与单词 (Word) 的二进制编解码。
本模块是无状态的 (Stateless)：解码函数直接操作调用方持有的 bytearray 缓冲区，
成功时从缓冲区头部消耗已解码的字节，字节不足时不消耗任何内容。

长度前缀格式:
    0x00000000 - 0x0000007F : 1 字节, 原值
    0x00000080 - 0x00003FFF : 2 字节, 首字节 | 0x80
    0x00004000 - 0x001FFFFF : 3 字节, 首字节 | 0xC0
    0x00200000 - 0x0FFFFFFF : 4 字节, 首字节 | 0xE0
    0x10000000 - 0xFFFFFFFF : 5 字节, 0xF0 + 4 字节原值
"""

import logging
import struct
from collections.abc import Iterable

from ..exceptions import IncompleteDataError, ProtocolError
from .constants import CONTROL_BYTE_MIN, MAX_LENGTH

logger = logging.getLogger(__name__)

SENTENCE_TERMINATOR = b"\x00"

# 首字节上限 -> (总宽度, 掩码)
_TIERS = (
    (0x80, 1, 0x7F),
    (0xC0, 2, 0x3FFF),
    (0xE0, 3, 0x1FFFFF),
    (0xF0, 4, 0x0FFFFFFF),
)


# =========================================================================
# Length
# =========================================================================


def encode_length(length: int) -> bytes:
    """将长度编码为变长前缀。

    Args:
        length: 非负整数，最大 2^32-1。

    Returns:
        bytes: 1-5 字节的长度前缀。

    Raises:
        ValueError: 长度为负或超出 32 位范围。
    """
    if length < 0 or length > MAX_LENGTH:
        raise ValueError(f"长度超出范围: {length}")

    if length < 0x80:
        return struct.pack("B", length)
    if length < 0x4000:
        return struct.pack(">H", length | 0x8000)
    if length < 0x200000:
        # 3 字节: 打包为 4 字节后去掉最高位字节
        return struct.pack(">I", length | 0xC00000)[1:]
    if length < 0x10000000:
        return struct.pack(">I", length | 0xE0000000)
    return b"\xf0" + struct.pack(">I", length)


def _peek_length(buffer: bytearray) -> tuple[int, int]:
    """读取缓冲区头部的长度前缀但不消耗。

    Returns:
        tuple[int, int]: (长度值, 前缀宽度)。

    Raises:
        IncompleteDataError: 缓冲区字节不足。
        ProtocolError: 首字节为保留控制字节或非法前缀。
    """
    if not buffer:
        raise IncompleteDataError("缓冲区为空，无法读取长度前缀")

    first = buffer[0]
    if first >= CONTROL_BYTE_MIN:
        raise ProtocolError(f"收到保留的控制字节: {hex(first)}")

    for upper, width, mask in _TIERS:
        if first < upper:
            break
    else:
        if first != 0xF0:
            raise ProtocolError(f"非法的长度前缀: {hex(first)}")
        width, mask = 5, MAX_LENGTH

    if len(buffer) < width:
        raise IncompleteDataError(f"长度前缀需要 {width} 字节，当前仅 {len(buffer)} 字节")

    if width == 5:
        return struct.unpack(">I", buffer[1:5])[0], width
    return int.from_bytes(buffer[:width], byteorder="big") & mask, width


def decode_length(buffer: bytearray) -> int:
    """从缓冲区头部解码并消耗一个长度前缀。

    Args:
        buffer: 调用方持有的读取缓冲区 (会被原地修改)。

    Returns:
        int: 解码得到的长度。

    Raises:
        IncompleteDataError: 缓冲区字节不足 (此时缓冲区保持不变)。
        ProtocolError: 前缀非法。
    """
    length, width = _peek_length(buffer)
    del buffer[:width]
    return length


# =========================================================================
# Word
# =========================================================================


def encode_word(word: str) -> bytes:
    """编码一个单词：长度前缀 + UTF-8 字节。

    空字符串编码为单个 0x00，即句子终止符。
    """
    data = word.encode("utf-8")
    return encode_length(len(data)) + data


def decode_word(buffer: bytearray, max_length: int | None = None) -> str:
    """从缓冲区头部解码并消耗一个完整单词。

    长度前缀与内容作为一个整体消耗：内容不完整时缓冲区保持不变。

    Args:
        buffer: 调用方持有的读取缓冲区 (会被原地修改)。
        max_length: 可选的单词长度上限，声明长度超出时立即报错，
            不等待内容到达。

    Returns:
        str: 单词内容。返回空字符串表示句子终止符。

    Raises:
        IncompleteDataError: 缓冲区字节不足。
        ProtocolError: 长度前缀非法或超出上限。
    """
    length, width = _peek_length(buffer)
    if max_length is not None and length > max_length:
        raise ProtocolError(f"单词声明长度 {length} 超出上限 {max_length}")
    end = width + length
    if len(buffer) < end:
        raise IncompleteDataError(f"单词声明长度 {length}，当前仅 {len(buffer) - width} 字节")

    data = bytes(buffer[width:end])
    del buffer[:end]
    # 对端不可信：非法 UTF-8 序列替换处理，不中断批次
    return data.decode("utf-8", errors="replace")


def encode_sentence(words: Iterable[str]) -> bytes:
    """编码一个句子：所有单词依次编码，末尾追加终止符。"""
    return b"".join(encode_word(w) for w in words) + SENTENCE_TERMINATOR
