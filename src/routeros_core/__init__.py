# src/routeros_core/__init__.py
"""
RouterOS-Core v1.0.0
基于 asyncio 的 RouterOS API 协议客户端与防火墙数据采集核心库。
"""

# 暴露设备配置
from .config import (
    DeviceTarget,
    create_target_from_dict,
    load_target_from_env,
    load_target_from_toml,
    load_targets_from_toml,
)

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    AuthError,
    CommandError,
    ConfigError,
    DecodingError,
    NetworkError,
    ProtocolError,
    RouterOSError,
    StateError,
    UnsupportedAuthError,
)
from .network import ApiConnection
from .protocols.reply import CommandResult
from .records import (
    ConnectionCounters,
    DeviceReport,
    FilterRule,
    LogRecord,
    NatRule,
)
from .scanner import DeviceScanner

# 暴露会话与状态
from .session import ApiSession
from .state import SessionState, SessionStatus

__version__ = "1.0.0"

__all__ = [
    "ApiSession",
    "ApiConnection",
    "SessionState",
    "SessionStatus",
    "CommandResult",
    "DeviceScanner",
    "DeviceReport",
    "FilterRule",
    "NatRule",
    "ConnectionCounters",
    "LogRecord",
    "DeviceTarget",
    "create_target_from_dict",
    "load_target_from_env",
    "load_target_from_toml",
    "load_targets_from_toml",
    "RouterOSError",
    "ConfigError",
    "NetworkError",
    "ProtocolError",
    "AuthError",
    "UnsupportedAuthError",
    "CommandError",
    "DecodingError",
    "StateError",
]
