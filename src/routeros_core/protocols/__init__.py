# src/routeros_core/protocols/__init__.py
"""
RouterOS API 协议层 (Protocol Layer)

本包负责协议单词与句子的纯粹编码 (Encode) 与解析 (Parse)。

- 不包含任何 socket 操作或网络 I/O (读取器只依赖注入的异步读取函数)。
- 不包含任何会话状态 (State)。
- 不依赖于 session 或 network 层。
"""

from . import constants
from .codec import (
    decode_length,
    decode_word,
    encode_length,
    encode_sentence,
    encode_word,
)
from .login import build_login_command, check_login_response
from .reply import CommandResult, map_attributes, parse_attribute_word, parse_tag
from .sentence import SentenceReader

# 公共 API
__all__ = [
    "constants",
    "encode_length",
    "decode_length",
    "encode_word",
    "decode_word",
    "encode_sentence",
    "SentenceReader",
    "parse_attribute_word",
    "map_attributes",
    "parse_tag",
    "CommandResult",
    "build_login_command",
    "check_login_response",
]
