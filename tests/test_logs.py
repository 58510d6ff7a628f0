# tests/test_logs.py
"""
测试日志子字段的独立提取：任何一个字段不匹配都不影响其他字段。
"""

from routeros_core.logs import parse_log_message
from routeros_core.records import LogRecord

ROUTER_LINE = (
    "forward: in:ether1 out:bridge, connection-state:new src-mac 00:11:22:33:44:55, "
    "proto TCP (SYN), 203.0.113.7:51515->192.168.88.10:443, len 60"
)


def test_router_style_line():
    fields = parse_log_message(ROUTER_LINE)
    assert fields.chain == "forward"
    assert fields.in_interface == "ether1"
    assert fields.out_interface == "bridge"
    assert fields.protocol == "TCP"
    assert fields.src_address == "203.0.113.7"
    assert fields.dst_address == "192.168.88.10"
    assert fields.dst_port == "443"
    assert fields.action is None


def test_key_value_style_line():
    fields = parse_log_message("input action=drop src=10.0.0.5 dst=10.0.0.1 proto=udp dst-port=53")
    assert fields.chain == "input"
    assert fields.action == "drop"
    assert fields.src_address == "10.0.0.5"
    assert fields.dst_address == "10.0.0.1"
    assert fields.protocol == "udp"
    assert fields.dst_port == "53"


def test_src_after_src_mac():
    fields = parse_log_message("input src-mac aa:bb:cc:dd:ee:ff src 172.16.0.9 proto icmp")
    assert fields.src_address == "172.16.0.9"
    assert fields.protocol == "icmp"


def test_unparseable_line_leaves_fields_unset():
    fields = parse_log_message("")
    assert fields.chain is None
    assert fields.src_address is None
    assert fields.dst_port is None


def test_partial_match_is_independent():
    fields = parse_log_message("dropped proto=gre")
    assert fields.protocol == "gre"
    assert fields.src_address is None
    assert fields.dst_address is None


def test_log_record_from_reply():
    record = LogRecord.from_record({"time": "jan/02 10:00:00", "message": ROUTER_LINE})
    assert record.time == "jan/02 10:00:00"
    assert record.message == ROUTER_LINE
    assert record.dst_port == "443"


def test_log_record_without_message():
    record = LogRecord.from_record({"time": "10:00:00"})
    assert record.message == ""
    assert record.chain is None
