#!/usr/bin/env python
# src/routeros_core/main.py
# 功能：按配置访问一台或全部设备，输出 JSON 结果

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .config import (
    DeviceTarget,
    load_target_from_env,
    load_target_from_toml,
    load_targets_from_toml,
)
from .exceptions import ConfigError
from .protocols.constants import DEFAULT_LOG_LIMIT, DEFAULT_LOG_TOPIC
from .scanner import DeviceScanner

logger = logging.getLogger("routeros_core.cli")

EXIT_OK = 0
EXIT_DEVICE_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="routeros-scan",
        description="通过 RouterOS API 采集防火墙规则、连接计数与日志",
    )
    parser.add_argument("-c", "--config", type=Path, help="TOML 设备配置文件")
    parser.add_argument("-d", "--device", help="只访问指定名称的设备 (默认全部)")
    parser.add_argument("--env-file", type=Path, help="未指定 --config 时加载的 .env 文件")
    parser.add_argument("--reuse-session", action="store_true", help="每台设备只使用一个会话")
    parser.add_argument("--log-topic", default=DEFAULT_LOG_TOPIC, help="日志主题过滤")
    parser.add_argument("--log-limit", type=int, default=DEFAULT_LOG_LIMIT, help="每台设备保留的日志条数")
    parser.add_argument("--concurrency", type=int, default=4, help="同时访问的设备数")
    parser.add_argument("--summary", action="store_true", help="只输出每台设备的成功/失败汇总")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_targets(args: argparse.Namespace) -> list[DeviceTarget]:
    """根据命令行参数选择设备目标。"""
    if args.config:
        if args.device:
            return [load_target_from_toml(args.config, args.device)]
        return load_targets_from_toml(args.config)

    target = load_target_from_env(args.env_file)
    if args.device and target.name != args.device:
        raise ConfigError(f"环境变量中的设备不是 {args.device}")
    return [target]


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        targets = load_targets(args)
    except ConfigError as ce:
        logger.error(f"配置错误: {ce}")
        return EXIT_CONFIG_ERROR

    scanner = DeviceScanner(
        log_topic=args.log_topic,
        log_limit=args.log_limit,
        reuse_session=args.reuse_session,
    )
    reports = asyncio.run(scanner.scan_all(targets, concurrency=args.concurrency))

    if args.summary:
        payload = [r.summary() for r in reports]
    else:
        payload = [r.to_dict() for r in reports]
    print(json.dumps({"success": True, "results": payload}, ensure_ascii=False, indent=2))

    failed = [r.device for r in reports if not r.success]
    if failed:
        logger.warning(f"{len(failed)}/{len(reports)} 台设备访问失败: {', '.join(failed)}")
        return EXIT_DEVICE_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
