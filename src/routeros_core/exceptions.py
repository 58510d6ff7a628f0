# File: src/routeros_core/exceptions.py
"""
RouterOS API 核心库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层调度器能按设备记录失败并继续处理其他设备。
"""


class RouterOSError(Exception):
    """routeros-core 的所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 routeros-core 抛出的已知错误。
    """

    pass


class ConfigError(RouterOSError):
    """设备配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 host/username/password)。
    2. 字段格式错误 (如端口不是整数、超时为负数)。
    3. 找不到配置文件、TOML 解析失败或环境变量缺失。
    """

    pass


class NetworkError(RouterOSError):
    """传输层错误 (I/O 级别)。

    触发场景:
    1. TCP 连接无法建立 (拒绝、DNS 解析失败、连接超时)。
    2. 读取过程中对端关闭连接。
    3. 读写超时。
    4. 对端发送 !fatal (连接级错误，对端随后会断开)。

    注意: 对当前批次是致命的。本库不会自动重试，重试属于上层调度策略。
    """

    pass


class ProtocolError(RouterOSError):
    """协议帧错误 (逻辑级别)。

    触发场景:
    1. 长度前缀使用了保留的控制字节。
    2. 数据流在声明的长度之内被截断。

    这意味着对端数据流已损坏，无法就地恢复。
    """

    pass


class IncompleteDataError(ProtocolError):
    """缓冲区中的字节尚不足以解码一个完整的长度或单词。

    仅在读取器内部使用：读取器会继续从连接读取并重试。
    解码函数抛出此异常时不会消耗缓冲区中的任何字节。
    """

    pass


class AuthError(RouterOSError):
    """认证被拒绝。

    当 /login 的响应句子以 !trap 开头时抛出。
    会话随即失败，不会再发送任何命令，但连接仍会被关闭。
    """

    def __init__(self, message: str, trap: dict[str, str] | None = None) -> None:
        """初始化认证错误。

        Args:
            message: 错误描述信息。
            trap: !trap 句子的属性 (通常包含 message 字段)。
        """
        self.trap = trap or {}
        detail = self.trap.get("message")
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnsupportedAuthError(AuthError):
    """对端要求旧版 MD5 挑战-应答登录 (/login 的 !done 携带 =ret=)。

    本库只实现明文登录，此类对端会被明确拒绝。
    """

    pass


class CommandError(RouterOSError):
    """单条命令以 !trap 结束。

    不会从 execute() 中抛出：它被记录在对应命令的 CommandResult.error 上，
    该命令已收集到的 !re 记录保留，批次继续执行下一条命令。
    """

    def __init__(self, command: str, trap: dict[str, str] | None = None) -> None:
        self.command = command
        self.trap = trap or {}
        self.category = self.trap.get("category")
        message = self.trap.get("message", "未知错误")
        super().__init__(f"命令 {command} 执行失败: {message}")


class DecodingError(RouterOSError):
    """属性单词不符合 =key=value 的形式。

    映射器遇到此类单词时直接忽略，只有严格模式的解析会抛出。
    """

    pass


class StateError(RouterOSError):
    """会话状态机错误 (FSM Violation)。

    触发场景:
    1. 对同一个会话重复调用 execute()。
    2. 在未认证的会话上执行命令。
    """

    pass
