# File: src/routeros_core/state.py
"""
RouterOS API 核心库 - 状态模块

定义会话的生命周期状态与易变数据。
本模块不包含业务逻辑，仅作为数据容器供 Session 读写。
"""

from dataclasses import dataclass
from enum import Enum, auto


class SessionStatus(Enum):
    """会话的生命周期状态枚举。

    状态流转示意:
    NEW -> CONNECTING -> AUTHENTICATING -> READY <-> EXECUTING -> CLOSED
              |               |              |           |
              v               v              v           v
            FAILED          FAILED         FAILED      FAILED
    """

    NEW = auto()
    """会话已实例化，socket 尚未打开。"""

    CONNECTING = auto()
    """正在建立 TCP 连接。"""

    AUTHENTICATING = auto()
    """已发送 /login，等待应答。"""

    READY = auto()
    """认证成功，可以执行下一条命令。"""

    EXECUTING = auto()
    """命令已发送，正在读取应答句子。"""

    CLOSED = auto()
    """所有命令执行完毕，连接已释放。"""

    FAILED = auto()
    """发生致命错误 (网络/协议/认证)，连接已释放。"""

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.CLOSED, SessionStatus.FAILED)


@dataclass
class SessionState:
    """存储单个会话的易变状态数据。

    会话不可复用：每次设备访问都应创建新的会话与状态对象。

    Attributes:
        status: 当前生命周期状态。
        last_error: 最近一次致命错误的描述，用于结果汇总。
        next_tag: 下一条命令使用的请求标签。
        commands_sent: 已发送的命令数 (不含 /login 与 /quit)。
    """

    status: SessionStatus = SessionStatus.NEW
    last_error: str = ""
    next_tag: int = 1
    commands_sent: int = 0

    @property
    def is_ready(self) -> bool:
        return self.status == SessionStatus.READY
