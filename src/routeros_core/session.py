# File: src/routeros_core/session.py
"""
RouterOS API 会话 (Session)

职责：
1. 资源组装：Target + Connection + SentenceReader + State。
2. 认证：明文 /login。
3. 执行：逐条同步执行命令队列，按应答标签分类结果。
4. 生命周期：New -> Connecting -> Authenticating -> Ready -> Executing -> Closed。
   任意退出路径 (包括 Failed) 都会释放连接。
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from typing import Any

from .config import DeviceTarget
from .exceptions import (
    AuthError,
    CommandError,
    NetworkError,
    ProtocolError,
    RouterOSError,
    StateError,
)
from .network import ApiConnection
from .protocols import codec, login
from .protocols.constants import CMD_QUIT, DEFAULT_MAX_WORD_SIZE, TAG_PREFIX, Reply
from .protocols.reply import CommandResult, map_attributes, parse_tag
from .protocols.sentence import SentenceReader
from .state import SessionState, SessionStatus

logger = logging.getLogger(__name__)

# 状态回调函数类型别名
StatusCallback = Callable[[SessionStatus, str], Any]


class ApiSession:
    """单台设备的一次性 API 会话。

    一个会话只服务一次设备访问：execute() 只能调用一次，
    也可以通过 `async with` 手动打开并多次调用 run_command()。
    """

    def __init__(
        self,
        target: DeviceTarget,
        connection: ApiConnection | None = None,
        status_callback: StatusCallback | None = None,
        use_tags: bool = True,
        max_word_size: int | None = DEFAULT_MAX_WORD_SIZE,
    ) -> None:
        """初始化会话。

        Args:
            target: 设备连接参数。
            connection: 可选的连接对象，默认按 target 创建 ApiConnection。
            status_callback: 状态变更回调，签名 (status, message)。
            use_tags: 是否为每条命令附加 .tag=，用于丢弃过期应答。
            max_word_size: 接受的单词长度上限，None 表示不限制。
        """
        self.target = target
        self.connection = connection or ApiConnection(
            target.host, target.port, target.timeout
        )
        self.reader = SentenceReader(self.connection.receive, max_word_size)
        self.use_tags = use_tags

        self._state = SessionState()
        self._listeners: list[StatusCallback] = []
        if status_callback:
            self.add_listener(status_callback)

    @property
    def state(self) -> SessionState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    def add_listener(self, callback: StatusCallback) -> None:
        """注册状态变更监听器。"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: StatusCallback) -> None:
        """移除状态变更监听器。"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    # =========================================================================
    # 公共 API
    # =========================================================================

    async def execute(self, commands: Iterable[Sequence[str]]) -> list[CommandResult]:
        """连接、认证并按顺序执行全部命令，最后发送 /quit 并释放连接。

        Args:
            commands: 有序命令列表，每条命令为单词序列 (首个单词为资源路径)。

        Returns:
            list[CommandResult]: 与输入顺序一一对应的结果。
            以 !trap 结束的命令不会抛出异常，其结果带有 error。

        Raises:
            AuthError: 认证被拒绝，未发送任何命令。
            NetworkError: 连接失败、超时或连接被关闭。
            ProtocolError: 数据流损坏。
            StateError: 会话已被使用过。
        """
        if self._state.status != SessionStatus.NEW:
            raise StateError(f"会话不可复用 (当前状态: {self._state.status.name})")

        results: list[CommandResult] = []
        try:
            await self.open()
            for command in commands:
                results.append(await self.run_command(command))
            await self._send_quit()
        finally:
            await self.close()
        return results

    async def open(self) -> None:
        """建立连接并完成认证，进入 READY。

        Raises:
            AuthError / NetworkError / ProtocolError: 失败时会话进入 FAILED
            并释放连接。
        """
        if self._state.status != SessionStatus.NEW:
            raise StateError(f"会话不可复用 (当前状态: {self._state.status.name})")

        self._update_status(SessionStatus.CONNECTING, "正在连接...")
        try:
            await self.connection.connect()
            await self.login()
        except RouterOSError as e:
            await self._fail(e)
            raise

    async def login(self) -> None:
        """发送明文登录命令并校验应答。"""
        self._update_status(SessionStatus.AUTHENTICATING, "正在认证...")
        command = login.build_login_command(self.target.username, self.target.password)
        await self.connection.send(codec.encode_sentence(command))
        logger.debug(f">>> {command[0]} =name={self.target.username} =password=******")

        words = await self._read_non_empty()
        login.check_login_response(words)
        self._update_status(SessionStatus.READY, "认证成功")

    async def run_command(self, command: Sequence[str]) -> CommandResult:
        """发送一条命令并读取到 !done 或 !trap 为止。

        !trap 只结束本条命令的结果收集 (非致命)；!fatal 与传输错误是致命的。
        """
        if not self._state.is_ready:
            raise StateError(f"会话未就绪 (当前状态: {self._state.status.name})")

        words = list(command)
        tag = None
        if self.use_tags:
            tag = str(self._state.next_tag)
            self._state.next_tag += 1
            words.append(f"{TAG_PREFIX}{tag}")

        result = CommandResult(command=list(command))
        self._update_status(SessionStatus.EXECUTING, f"执行 {words[0]}", quiet=True)
        try:
            await self.connection.send(codec.encode_sentence(words))
            self._state.commands_sent += 1
            logger.debug(f">>> {words}")
            await self._collect(result, tag)
        except RouterOSError as e:
            await self._fail(e)
            raise

        self._update_status(SessionStatus.READY, f"{words[0]} 完成", quiet=True)
        return result

    async def close(self) -> None:
        """释放连接。非失败状态下进入 CLOSED。"""
        await self.connection.close()
        if self._state.status != SessionStatus.FAILED:
            self._update_status(SessionStatus.CLOSED, "连接已释放")

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None and self._state.is_ready:
            await self._send_quit()
        await self.close()

    # =========================================================================
    # 内部实现
    # =========================================================================

    async def _collect(self, result: CommandResult, tag: str | None) -> None:
        """读取应答句子直到本命令结束。"""
        while True:
            words = await self._read_non_empty()

            reply_tag = parse_tag(words)
            if tag is not None and reply_tag is not None and reply_tag != tag:
                # 例如上一条命令 !trap 之后对端补发的 !done
                logger.debug(f"丢弃过期应答 (tag={reply_tag}, 当前 tag={tag}): {words[0]}")
                continue

            reply_type = words[0]
            attrs = map_attributes(words[1:])

            if reply_type == Reply.RE:
                result.records.append(attrs)
            elif reply_type == Reply.DONE:
                result.done = attrs
                return
            elif reply_type == Reply.TRAP:
                result.trap = attrs
                result.error = CommandError(result.command[0], attrs)
                logger.warning(f"[{self.target.label}] {result.error}")
                return
            elif reply_type == Reply.FATAL:
                raise NetworkError(f"对端发送 !fatal: {' '.join(words[1:])}")
            else:
                logger.debug(f"忽略未知应答类型: {reply_type}")

    async def _read_non_empty(self) -> list[str]:
        """读取下一个非空句子，跳过对端的空句子。"""
        while True:
            words = await self.reader.read_sentence()
            if words:
                return words

    async def _send_quit(self) -> None:
        """发送 /quit，不等待应答。"""
        try:
            await self.connection.send(codec.encode_sentence([CMD_QUIT]))
        except NetworkError as e:
            # 命令结果已全部收齐，对端先行断开不影响结果
            logger.debug(f"发送 /quit 失败: {e}")

    async def _fail(self, error: RouterOSError) -> None:
        """进入 FAILED 并释放连接。"""
        self._state.last_error = str(error)
        if isinstance(error, AuthError):
            msg = f"认证被拒绝: {error}"
        elif isinstance(error, ProtocolError):
            msg = f"数据流损坏: {error}"
        else:
            msg = f"会话异常: {error}"
        self._update_status(SessionStatus.FAILED, msg)
        await self.connection.close()

    def _update_status(self, status: SessionStatus, msg: str, quiet: bool = False) -> None:
        """更新内部状态并同步触发所有回调。

        quiet=True 用于逐条命令的 EXECUTING/READY 切换，只记 DEBUG 日志。
        """
        self._state.status = status
        if status == SessionStatus.FAILED:
            log = logger.error
        else:
            log = logger.debug if quiet else logger.info
        log(f"[{self.target.label}] [{status.name}] {msg}")

        for callback in self._listeners:
            try:
                callback(status, msg)
            except Exception as e:
                logger.error(f"回调执行异常: {e}")
