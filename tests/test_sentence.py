# tests/test_sentence.py
import pytest

from conftest import sentence
from routeros_core.exceptions import NetworkError, ProtocolError
from routeros_core.protocols.codec import encode_word
from routeros_core.protocols.sentence import SentenceReader


def _source(chunks):
    """辅助函数：把字节块列表包装为异步读取函数"""
    chunks = list(chunks)

    async def receive() -> bytes:
        return chunks.pop(0) if chunks else b""

    return receive


def test_two_sentences_in_order():
    reader = SentenceReader()
    reader.feed(encode_word("=chain=forward") + b"\x00" + encode_word("!done") + b"\x00")

    assert reader.next_sentence() == ["=chain=forward"]
    assert reader.next_sentence() == ["!done"]
    assert reader.next_sentence() is None


def test_immediately_empty_sentence():
    reader = SentenceReader()
    reader.feed(b"\x00" + sentence("!done"))
    assert reader.next_sentence() == []
    assert reader.next_sentence() == ["!done"]


def test_partial_feed_keeps_decoded_words():
    """句子被拆成多段到达：已解码的单词保留到终止符出现"""
    data = sentence("!re", "=.id=*1", "=chain=input")
    reader = SentenceReader()

    reader.feed(data[:5])
    assert reader.next_sentence() is None
    reader.feed(data[5:12])
    assert reader.next_sentence() is None
    reader.feed(data[12:])
    assert reader.next_sentence() == ["!re", "=.id=*1", "=chain=input"]
    assert not reader.has_pending


@pytest.mark.asyncio
async def test_read_sentence_byte_by_byte():
    data = sentence("!re", "=dst-port=80") + sentence("!done")
    reader = SentenceReader(_source([bytes([b]) for b in data]))

    assert await reader.read_sentence() == ["!re", "=dst-port=80"]
    assert await reader.read_sentence() == ["!done"]


@pytest.mark.asyncio
async def test_read_sentence_closed_connection():
    reader = SentenceReader(_source([]))
    with pytest.raises(NetworkError, match="关闭"):
        await reader.read_sentence()


@pytest.mark.asyncio
async def test_read_sentence_truncated_stream():
    data = sentence("!re", "=comment=hello")
    reader = SentenceReader(_source([data[:-4]]))
    with pytest.raises(ProtocolError, match="截断"):
        await reader.read_sentence()


@pytest.mark.asyncio
async def test_read_sentence_truncated_between_words():
    """单词完整但缺少终止符，也视为截断"""
    reader = SentenceReader(_source([encode_word("!done")]))
    with pytest.raises(ProtocolError):
        await reader.read_sentence()


@pytest.mark.asyncio
async def test_read_sentence_control_byte():
    reader = SentenceReader(_source([b"\xff\x00"]))
    with pytest.raises(ProtocolError, match="控制字节"):
        await reader.read_sentence()


@pytest.mark.asyncio
async def test_read_sentence_without_source():
    reader = SentenceReader()
    with pytest.raises(ProtocolError):
        await reader.read_sentence()


def test_word_over_limit_rejected_before_payload_arrives():
    """仅凭长度前缀即可拒绝超长单词，缓冲区不会等待内容"""
    reader = SentenceReader(max_word_size=1024)
    reader.feed(b"\xe0\x10\x00\x00")  # 声明 1 MiB

    with pytest.raises(ProtocolError, match="超出上限"):
        reader.next_sentence()
    assert len(reader.buffer) == 4


def test_word_at_limit_accepted():
    reader = SentenceReader(max_word_size=5)
    reader.feed(sentence("!done"))
    assert reader.next_sentence() == ["!done"]
