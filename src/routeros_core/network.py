# src/routeros_core/network.py
"""
RouterOS API 核心库 - 网络模块 (Network) [Asyncio Edition]

封装 TCP 连接的建立、发送、接收与释放。
该模块屏蔽了底层 StreamReader/StreamWriter 的细节，向会话层提供纯粹的 bytes 收发接口。
超时一律视为连接关闭，转换为 NetworkError。
"""

import asyncio
import logging

from .exceptions import NetworkError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


class ApiConnection:
    """
    封装 asyncio TCP 流的客户端连接。
    """

    def __init__(self, host: str, port: int, timeout: float | None = None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None

    @property
    def is_connected(self) -> bool:
        return self.writer is not None and not self.writer.is_closing()

    async def connect(self) -> None:
        """
        建立 TCP 连接。
        """
        addr = (self.host, self.port)
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), timeout=self.timeout
            )
            logger.debug(f"TCP 连接已建立: {addr}")
        except asyncio.TimeoutError:
            await self.close()
            raise NetworkError(f"连接超时 {addr} ({self.timeout}s)") from None
        except OSError as e:
            await self.close()
            raise NetworkError(f"连接失败 {addr}: {e}") from e

    async def send(self, data: bytes) -> None:
        """
        发送字节并等待写缓冲区排空。
        """
        if not self.is_connected:
            raise NetworkError("连接未建立或已关闭")

        # [Change] 显式断言：is_connected 已保证 writer 存在
        assert self.writer is not None

        try:
            self.writer.write(data)
            await asyncio.wait_for(self.writer.drain(), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise NetworkError(f"发送超时 ({self.timeout}s)") from None
        except OSError as e:
            raise NetworkError(f"发送失败: {e}") from e

    async def receive(self) -> bytes:
        """
        接收下一批字节 (Async)。

        使用 asyncio.wait_for 实现超时控制。返回 b"" 表示对端已关闭连接。
        """
        if self.reader is None:
            raise NetworkError("连接未建立")

        try:
            return await asyncio.wait_for(
                self.reader.read(READ_CHUNK_SIZE), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise NetworkError(f"接收超时 ({self.timeout}s)") from None
        except OSError as e:
            raise NetworkError(f"接收错误: {e}") from e

    async def close(self) -> None:
        """关闭连接。可重复调用。"""
        writer, self.writer, self.reader = self.writer, None, None
        if writer is None:
            return

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            # 连接可能已被对端重置，释放本地资源即可
            logger.debug(f"关闭连接时对端已断开: {e}")
        logger.debug("TCP 连接已关闭")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
