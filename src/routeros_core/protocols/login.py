# src/routeros_core/protocols/login.py
"""
登录协议 (Login)

构建明文 /login 命令并校验对端应答。
RouterOS 6.43 之前的挑战-应答登录不受支持，收到时显式拒绝。
"""

import logging

from ..exceptions import AuthError, NetworkError, UnsupportedAuthError
from .constants import CMD_LOGIN, RET_KEY, Reply
from .reply import map_attributes

logger = logging.getLogger(__name__)


def build_login_command(username: str, password: str) -> list[str]:
    """构建明文登录命令。"""
    return [CMD_LOGIN, f"=name={username}", f"=password={password}"]


def check_login_response(words: list[str]) -> None:
    """校验 /login 的应答句子。

    Args:
        words: 登录后读到的第一个非空句子。

    Raises:
        AuthError: 应答为 !trap (用户名或密码错误等)。
        UnsupportedAuthError: !done 携带 =ret=，对端要求旧版挑战登录。
        NetworkError: 应答为 !fatal。
    """
    reply_type = words[0]
    attrs = map_attributes(words[1:])

    if reply_type == Reply.TRAP:
        raise AuthError("登录被拒绝", attrs)

    if reply_type == Reply.FATAL:
        raise NetworkError(f"登录阶段收到 !fatal: {' '.join(words[1:])}")

    if reply_type == Reply.DONE and RET_KEY in attrs:
        raise UnsupportedAuthError("对端要求旧版挑战-应答登录，不受支持")

    if reply_type != Reply.DONE:
        logger.debug(f"登录应答类型非 !done ({reply_type})，按成功处理")
