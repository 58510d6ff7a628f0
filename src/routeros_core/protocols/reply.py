# src/routeros_core/protocols/reply.py
"""
应答映射器 (Reply Mapper)

把句子的属性单词 (=key=value) 转换为键值记录，并汇总单条命令的全部应答。
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..exceptions import CommandError, DecodingError
from .constants import ATTRIBUTE_PREFIX, RET_KEY, TAG_PREFIX

logger = logging.getLogger(__name__)

Record = dict[str, str]


def parse_attribute_word(word: str, strict: bool = False) -> tuple[str, str] | None:
    """解析一个 =key=value 属性单词。

    只有前两个 '=' 是结构性的，值本身可以包含 '='。

    Args:
        word: 原始单词。
        strict: 为 True 时，非属性单词抛出 DecodingError 而不是返回 None。

    Returns:
        tuple[str, str] | None: (key, value)；不是属性单词时返回 None。
    """
    if word.startswith(ATTRIBUTE_PREFIX):
        sep = word.find("=", 1)
        if sep > 1:
            return word[1:sep], word[sep + 1 :]

    if strict:
        raise DecodingError(f"不是合法的属性单词: {word!r}")
    return None


def map_attributes(words: Iterable[str]) -> Record:
    """把属性单词序列映射为记录。

    不符合 =key=value 形式的单词 (裸单词、?查询单词) 被忽略。
    重复的键以最后一次出现为准。
    """
    record: Record = {}
    for word in words:
        pair = parse_attribute_word(word)
        if pair is None:
            logger.debug(f"忽略非属性单词: {word!r}")
            continue
        key, value = pair
        record[key] = value
    return record


def parse_tag(words: Iterable[str]) -> str | None:
    """提取句子中的 .tag= 值，没有则返回 None。"""
    for word in words:
        if word.startswith(TAG_PREFIX):
            return word[len(TAG_PREFIX) :]
    return None


@dataclass
class CommandResult:
    """单条命令的应答汇总。

    Attributes:
        command: 命令的单词列表。
        records: 每个 !re 句子映射出的记录，按到达顺序排列。
        done: !done 句子携带的属性 (count-only 查询的 ret 在这里)。
        trap: !trap 句子的属性；命令正常结束时为 None。
        error: 命令以 !trap 结束时对应的 CommandError。
    """

    command: list[str]
    records: list[Record] = field(default_factory=list)
    done: Record = field(default_factory=dict)
    trap: Record | None = None
    error: CommandError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def ret(self) -> str | None:
        """标量结果。优先取 !done 中的 ret，其次取首条记录中的 ret。"""
        if RET_KEY in self.done:
            return self.done[RET_KEY]
        if self.records:
            return self.records[0].get(RET_KEY)
        return None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __getitem__(self, index):
        return self.records[index]
