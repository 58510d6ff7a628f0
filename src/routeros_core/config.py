"""
RouterOS API 核心库 - 配置模块

负责设备目标 (Device Target) 的加载、解析与强类型转换。
支持从 TOML 文件、环境变量 (可配合 .env 文件) 或字典中加载。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigError
from .protocols.constants import DEFAULT_PORT

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class DeviceTarget:
    """一次设备访问所需的连接参数。

    所有字段均为只读 (frozen=True)。核心库只在单个会话的生命周期内使用它，
    从不持久化。

    Attributes:
        host: 设备地址 (IP 或主机名)。
        username: API 用户名。
        password: API 密码 (明文登录)。
        port: API 端口，默认 8728。
        name: 设备标识，用于日志与结果汇总。
        timeout: 连接与每次读取的超时秒数。
    """

    host: str
    username: str
    password: str
    port: int = DEFAULT_PORT
    name: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    @property
    def label(self) -> str:
        """日志中使用的设备名称。"""
        return self.name or f"{self.host}:{self.port}"

    def __repr__(self) -> str:
        """隐藏密码字段，防止日志泄露敏感信息。"""
        return (
            f"<{self.__class__.__name__} "
            f"name={self.name!r}, "
            f"address={self.host}:{self.port}, "
            f"username='{self.username}', "
            f"password='******', "
            f"timeout={self.timeout}>"
        )


def create_target_from_dict(raw_data: dict[str, Any]) -> DeviceTarget:
    """通用工厂：将字典转换为强类型设备目标。

    Args:
        raw_data: 原始配置字典 (来自 TOML、Env 或库存系统)。
            地址字段可以是 host 或 ip_address。

    Returns:
        DeviceTarget: 验证并转换后的目标对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """

    def _req(key: str, *aliases: str) -> Any:
        """获取必要字段，缺失则报错"""
        for k in (key, *aliases):
            val = raw_data.get(k)
            if val is not None and val != "":
                return val
        raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")

    try:
        port = int(raw_data.get("port", DEFAULT_PORT))
    except (TypeError, ValueError):
        raise ConfigError(f"端口格式无效: {raw_data.get('port')!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"端口超出范围: {port}")

    try:
        timeout = float(raw_data.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError):
        raise ConfigError(f"超时格式无效: {raw_data.get('timeout')!r}") from None
    if timeout <= 0:
        raise ConfigError(f"超时必须为正数: {timeout}")

    name = raw_data.get("name")

    return DeviceTarget(
        host=str(_req("host", "ip_address")),
        username=str(_req("username")),
        password=str(_req("password")),
        port=port,
        name=str(name) if name else None,
        timeout=timeout,
    )


def load_targets_from_toml(file_path: Path) -> list[DeviceTarget]:
    """从 TOML 文件加载全部设备目标。

    支持多层级查找策略:
    1. [device.<name>]: 每个子表一台设备，表名作为默认设备名。
    2. [router]: 单台设备。
    3. Root: 根目录直接配置单台设备。

    Raises:
        ConfigError: 文件读取失败或内容无效。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    if "device" in data:
        devices = data["device"]
        if not isinstance(devices, dict) or not devices:
            raise ConfigError("[device] 节为空或格式错误")
        targets = []
        for name, raw in devices.items():
            if not isinstance(raw, dict):
                raise ConfigError(f"[device.{name}] 必须是表")
            targets.append(create_target_from_dict({"name": name, **raw}))
        return targets

    if "router" in data:
        return [create_target_from_dict(data["router"])]

    return [create_target_from_dict(data)]


def load_target_from_toml(file_path: Path, name: str) -> DeviceTarget:
    """从 TOML 文件中按名称选取一台设备。"""
    for target in load_targets_from_toml(file_path):
        if target.name == name:
            return target
    raise ConfigError(f"未找到设备: [device.{name}]")


def load_target_from_env(dotenv_path: Path | None = None) -> DeviceTarget:
    """从环境变量加载设备目标 (Docker/Cloud Friendly)。

    自动读取所有以 `ROUTEROS_` 开头的环境变量。
    例如: `ROUTEROS_HOST` -> `host`。

    Args:
        dotenv_path: 可选的 .env 文件，存在时先加载 (不覆盖已有变量)。

    Raises:
        ConfigError: 未检测到任何相关环境变量。
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise ConfigError(f".env 文件未找到: {dotenv_path}")
        load_dotenv(dotenv_path=dotenv_path, override=False)
        logger.debug(f"已加载 .env 文件: {dotenv_path}")

    env_map = {
        "host": "HOST",
        "port": "PORT",
        "username": "USERNAME",
        "password": "PASSWORD",
        "name": "NAME",
        "timeout": "TIMEOUT",
    }

    raw_data = {}
    for cfg_key, env_suffix in env_map.items():
        val = os.environ.get(f"ROUTEROS_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 ROUTEROS_ 前缀的环境变量")

    return create_target_from_dict(raw_data)
