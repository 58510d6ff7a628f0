# example.py
"""
这是一个 routeros-core API 的最小示例。

它演示了如何将 routeros-core 作为一个库导入到你自己的项目中：
1. 用底层会话执行任意命令；
2. 用扫描器采集一台设备的防火墙规则、连接计数与日志。

运行此示例：
1. 在根目录创建 .env 文件，写入 ROUTEROS_HOST / ROUTEROS_USERNAME / ROUTEROS_PASSWORD。
2. 安装： pip install -e .
3. 从项目根目录运行： python example.py
"""

import asyncio
import logging
import sys
from pathlib import Path

from routeros_core import (
    ApiSession,
    ConfigError,
    DeviceScanner,
    RouterOSError,
    load_target_from_env,
)

# 日志配置
logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("RouterOSExample")


async def run() -> int:
    env_path = Path(__file__).resolve().parent / ".env"
    try:
        target = load_target_from_env(env_path if env_path.exists() else None)
    except ConfigError as ce:
        logger.error(f"配置错误: {ce}")
        return 2

    # 1. 底层会话：一次连接执行一批命令
    try:
        async with ApiSession(target) as session:
            result = await session.run_command(["/system/resource/print"])
            for record in result:
                logger.info(f"版本: {record.get('version')} 运行时间: {record.get('uptime')}")
    except RouterOSError as e:
        logger.error(f"会话失败: {e}")
        return 1

    # 2. 扫描器：规则 + 计数 + 日志
    report = await DeviceScanner().scan(target)
    logger.info(f"扫描结果: {report.summary()}")
    for rule in report.filter_rules:
        logger.info(f"#{rule.order} {rule.chain} {rule.action} {rule.comment or ''}")
    return 0 if report.success else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(run()))
