# src/routeros_core/records.py
"""
面向调用方的结果记录 (Result Records)

把应答映射器产出的原始键值记录转换为强类型结构。
本模块不做任何 I/O，也不关心结果如何持久化。
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from .logs import parse_log_message
from .protocols.reply import Record


def _opt(record: Record, key: str) -> str | None:
    """空字符串视为缺失"""
    return record.get(key) or None


def _int(value: str | None) -> int:
    try:
        return int(value or 0)
    except ValueError:
        return 0


@dataclass
class FilterRule:
    """一条防火墙过滤规则。order 为按应答顺序分配的零基序号。"""

    order: int
    chain: str = "unknown"
    action: str = "unknown"
    src_address: str | None = None
    dst_address: str | None = None
    protocol: str | None = None
    dst_port: str | None = None
    src_port: str | None = None
    in_interface: str | None = None
    out_interface: str | None = None
    comment: str | None = None
    disabled: bool = False
    bytes: int = 0
    packets: int = 0
    router_id: str | None = None

    @classmethod
    def _common(cls, record: Record, order: int) -> dict[str, Any]:
        return dict(
            order=order,
            chain=record.get("chain") or "unknown",
            action=record.get("action") or "unknown",
            src_address=_opt(record, "src-address"),
            dst_address=_opt(record, "dst-address"),
            protocol=_opt(record, "protocol"),
            dst_port=_opt(record, "dst-port"),
            src_port=_opt(record, "src-port"),
            in_interface=_opt(record, "in-interface"),
            out_interface=_opt(record, "out-interface"),
            comment=_opt(record, "comment"),
            disabled=record.get("disabled") == "true",
            bytes=_int(record.get("bytes")),
            packets=_int(record.get("packets")),
            router_id=_opt(record, ".id"),
        )

    @classmethod
    def from_record(cls, record: Record, order: int) -> "FilterRule":
        return cls(**cls._common(record, order))


@dataclass
class NatRule(FilterRule):
    """一条 NAT 规则，在过滤规则字段之外带有转换目标。"""

    to_addresses: str | None = None
    to_ports: str | None = None

    @classmethod
    def from_record(cls, record: Record, order: int) -> "NatRule":
        return cls(
            **cls._common(record, order),
            to_addresses=_opt(record, "to-addresses"),
            to_ports=_opt(record, "to-ports"),
        )


@dataclass
class ConnectionCounters:
    """连接跟踪计数。"""

    total: int = 0
    tcp: int = 0
    udp: int = 0
    icmp: int = 0


@dataclass
class LogRecord:
    """一条防火墙日志及其解析出的子字段。"""

    message: str
    time: str | None = None
    chain: str | None = None
    action: str | None = None
    src_address: str | None = None
    dst_address: str | None = None
    protocol: str | None = None
    dst_port: str | None = None
    in_interface: str | None = None
    out_interface: str | None = None

    @classmethod
    def from_record(cls, record: Record) -> "LogRecord":
        message = record.get("message", "")
        fields = parse_log_message(message)
        return cls(message=message, time=_opt(record, "time"), **asdict(fields))


@dataclass
class DeviceReport:
    """一次设备访问的完整结果。

    Attributes:
        device: 设备名称。
        success: 规则批次是否成功。
        error: 失败时的简短错误信息。
        warnings: 可容忍的分组失败 (计数或日志) 的描述。
    """

    device: str
    success: bool = False
    error: str | None = None
    filter_rules: list[FilterRule] = field(default_factory=list)
    nat_rules: list[NatRule] = field(default_factory=list)
    counters: ConnectionCounters = field(default_factory=ConnectionCounters)
    logs: list[LogRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        """面向界面的简要汇总。"""
        if not self.success:
            return {"device": self.device, "success": False, "error": self.error}
        return {
            "device": self.device,
            "success": True,
            "filter_rules": len(self.filter_rules),
            "nat_rules": len(self.nat_rules),
            "connections": self.counters.total,
        }

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
