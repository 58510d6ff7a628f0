# src/routeros_core/logs.py
"""
防火墙日志解析 (Best-effort)

每个字段是一个独立的可选提取：某个字段的模式不匹配只会让该字段为 None，
不会影响其他字段，也不会中断整行的处理。

典型日志行:
    forward: in:ether1 out:bridge, connection-state:new src-mac 00:11:22:33:44:55,
    proto TCP (SYN), 203.0.113.7:51515->192.168.88.10:443, len 60
"""

import re
from dataclasses import dataclass

# 字段 -> 按顺序尝试的模式，取第一个匹配的第 1 个分组
FIELD_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "chain": (re.compile(r"^([^\s:,]+)"),),
    "action": (re.compile(r"\baction[=: ]([^ ,]+)", re.I),),
    "src_address": (
        re.compile(r"src-mac [^ ]+ src ([^ ,]+)", re.I),
        re.compile(r"\bsrc[= ]([0-9.]+)", re.I),
        re.compile(r"(\d{1,3}(?:\.\d{1,3}){3})(?::\d+)?->", re.I),
    ),
    "dst_address": (
        re.compile(r"\bdst[= ]([0-9.]+)", re.I),
        re.compile(r"->(\d{1,3}(?:\.\d{1,3}){3})", re.I),
    ),
    "protocol": (re.compile(r"\bproto[= ]([^ ,]+)", re.I),),
    "dst_port": (
        re.compile(r"\bdst-port[= ]([0-9]+)", re.I),
        re.compile(r"->\d{1,3}(?:\.\d{1,3}){3}:([0-9]+)", re.I),
    ),
    "in_interface": (re.compile(r"\bin[:= ]([^ ,]+)", re.I),),
    "out_interface": (re.compile(r"\bout[:= ]([^ ,]+)", re.I),),
}


@dataclass
class LogFields:
    """从一条日志消息中提取出的子字段，均为可选。"""

    chain: str | None = None
    action: str | None = None
    src_address: str | None = None
    dst_address: str | None = None
    protocol: str | None = None
    dst_port: str | None = None
    in_interface: str | None = None
    out_interface: str | None = None


def extract_field(message: str, patterns: tuple[re.Pattern[str], ...]) -> str | None:
    """依次尝试模式，返回第一个匹配的分组；都不匹配时返回 None。"""
    for pattern in patterns:
        m = pattern.search(message)
        if m:
            return m.group(1)
    return None


def parse_log_message(message: str) -> LogFields:
    """对一条日志消息执行全部字段提取。"""
    return LogFields(
        **{name: extract_field(message, patterns) for name, patterns in FIELD_PATTERNS.items()}
    )
