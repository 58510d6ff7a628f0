# src/routeros_core/protocols/constants.py
"""
RouterOS API 协议常量表 (Constants)

仅定义协议的结构性常量（应答标签、命令路径、投影字段）。
"""


# =========================================================================
# 应答标签 (Reply Tags)
# =========================================================================
class Reply:
    """响应句子的首个单词"""

    RE = "!re"  # 一行结果
    DONE = "!done"  # 命令结束，可能携带标量属性 (如 =ret=)
    TRAP = "!trap"  # 命令级错误
    FATAL = "!fatal"  # 连接级错误，对端随后断开


# =========================================================================
# 端口 (Ports)
# =========================================================================
DEFAULT_PORT = 8728  # 明文 API 端口 (8729 为加密端口，不支持)

# =========================================================================
# 长度前缀 (Length Prefix)
# =========================================================================
MAX_LENGTH = 0xFFFFFFFF
CONTROL_BYTE_MIN = 0xF8  # 0xF8-0xFF 为保留控制字节
# 会话默认接受的单词长度上限 (16 MiB)
DEFAULT_MAX_WORD_SIZE = 16 * 1024 * 1024

# =========================================================================
# 单词前缀 (Word Prefixes)
# =========================================================================
ATTRIBUTE_PREFIX = "="
QUERY_PREFIX = "?"
TAG_PREFIX = ".tag="
RET_KEY = "ret"

# =========================================================================
# 命令路径 (Command Paths)
# =========================================================================
CMD_LOGIN = "/login"
CMD_QUIT = "/quit"
CMD_FILTER_PRINT = "/ip/firewall/filter/print"
CMD_NAT_PRINT = "/ip/firewall/nat/print"
CMD_CONNECTION_PRINT = "/ip/firewall/connection/print"
CMD_LOG_PRINT = "/log/print"

# =========================================================================
# 投影字段 (=.proplist=)
# =========================================================================
FILTER_PROPLIST = (
    ".id",
    "chain",
    "action",
    "src-address",
    "dst-address",
    "protocol",
    "dst-port",
    "src-port",
    "in-interface",
    "out-interface",
    "comment",
    "disabled",
    "bytes",
    "packets",
)

NAT_PROPLIST = (
    ".id",
    "chain",
    "action",
    "src-address",
    "dst-address",
    "protocol",
    "dst-port",
    "src-port",
    "to-addresses",
    "to-ports",
    "in-interface",
    "out-interface",
    "comment",
    "disabled",
    "bytes",
    "packets",
)

LOG_PROPLIST = ("time", "message")

COUNTED_PROTOCOLS = ("tcp", "udp", "icmp")
DEFAULT_LOG_TOPIC = "firewall"
DEFAULT_LOG_LIMIT = 100
