# File: src/routeros_core/scanner.py
"""
设备扫描调度 (Query Orchestrator)

职责：
1. 命令编排：规则批次 (filter + NAT)、连接计数批次、日志批次。
2. 会话分配：默认每个批次使用独立会话 (由 session_factory 创建)，
   reuse_session=True 时整个设备访问只使用一个会话。
3. 结果映射：把原始记录转换为 FilterRule / NatRule / ConnectionCounters / LogRecord。
4. 故障隔离：一台设备的失败不会中断其他设备。

本模块除了自己持有的会话之外不做任何 I/O，也不关心结果如何持久化。
"""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence

from .config import DeviceTarget
from .exceptions import RouterOSError
from .protocols import constants
from .protocols.reply import CommandResult
from .records import ConnectionCounters, DeviceReport, FilterRule, LogRecord, NatRule
from .session import ApiSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[DeviceTarget], ApiSession]

Command = list[str]


def _proplist(fields: Sequence[str]) -> str:
    return f"=.proplist={','.join(fields)}"


def build_rule_commands() -> list[Command]:
    """过滤规则与 NAT 规则列表 (带投影)。"""
    return [
        [constants.CMD_FILTER_PRINT, _proplist(constants.FILTER_PROPLIST)],
        [constants.CMD_NAT_PRINT, _proplist(constants.NAT_PROPLIST)],
    ]


def build_counter_commands() -> list[Command]:
    """连接总数以及按协议过滤的 count-only 查询，每个查询是一条独立命令。"""
    base = [constants.CMD_CONNECTION_PRINT, "=count-only="]
    return [base] + [base + [f"?protocol={p}"] for p in constants.COUNTED_PROTOCOLS]


def build_log_commands(topic: str = constants.DEFAULT_LOG_TOPIC) -> list[Command]:
    """按主题过滤的日志列表。"""
    return [[constants.CMD_LOG_PRINT, f"?topics~{topic}", _proplist(constants.LOG_PROPLIST)]]


def parse_count(result: CommandResult) -> int:
    """读取 count-only 查询的标量结果，缺失或非法时为 0。"""
    try:
        return int(result.ret or 0)
    except ValueError:
        logger.warning(f"计数结果无法解析: {result.ret!r}")
        return 0


class DeviceScanner:
    """按固定命令集访问设备并返回结构化结果。"""

    def __init__(
        self,
        session_factory: SessionFactory = ApiSession,
        log_topic: str = constants.DEFAULT_LOG_TOPIC,
        log_limit: int = constants.DEFAULT_LOG_LIMIT,
        reuse_session: bool = False,
    ) -> None:
        """
        Args:
            session_factory: 根据设备目标创建新会话的工厂。
            log_topic: 日志查询的主题过滤。
            log_limit: 每台设备最多保留的日志条数。
            reuse_session: 为 True 时三个批次共用一个会话。
        """
        self.session_factory = session_factory
        self.log_topic = log_topic
        self.log_limit = log_limit
        self.reuse_session = reuse_session

    # =========================================================================
    # 分组查询 (每次调用使用一个新会话)
    # =========================================================================

    async def fetch_rules(self, target: DeviceTarget) -> tuple[list[FilterRule], list[NatRule]]:
        results = await self.session_factory(target).execute(build_rule_commands())
        return self._map_rules(results)

    async def fetch_connection_counters(self, target: DeviceTarget) -> ConnectionCounters:
        results = await self.session_factory(target).execute(build_counter_commands())
        return self._map_counters(results)

    async def fetch_logs(self, target: DeviceTarget) -> list[LogRecord]:
        results = await self.session_factory(target).execute(build_log_commands(self.log_topic))
        return self._map_logs(results)

    # =========================================================================
    # 设备访问
    # =========================================================================

    async def scan(self, target: DeviceTarget) -> DeviceReport:
        """访问一台设备。

        规则批次失败 -> 设备失败 (记录简短错误信息)。
        计数或日志批次失败 -> 记录警告，对应字段保持默认值。
        本方法不会抛出 RouterOSError。
        """
        if self.reuse_session:
            return await self._scan_single_session(target)

        report = DeviceReport(device=target.label)
        try:
            report.filter_rules, report.nat_rules = await self.fetch_rules(target)
        except RouterOSError as e:
            return self._failed(report, e)
        report.success = True

        try:
            report.counters = await self.fetch_connection_counters(target)
        except RouterOSError as e:
            self._tolerate(report, "连接计数", e)

        try:
            report.logs = await self.fetch_logs(target)
        except RouterOSError as e:
            self._tolerate(report, "日志", e)

        logger.info(
            f"[{report.device}] 扫描完成: 过滤规则 {len(report.filter_rules)} 条, "
            f"NAT 规则 {len(report.nat_rules)} 条, 连接 {report.counters.total}"
        )
        return report

    async def scan_all(
        self, targets: Iterable[DeviceTarget], concurrency: int = 4
    ) -> list[DeviceReport]:
        """并发访问多台设备，结果顺序与输入一致。"""
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def _visit(target: DeviceTarget) -> DeviceReport:
            async with semaphore:
                return await self.scan(target)

        return list(await asyncio.gather(*(_visit(t) for t in targets)))

    # =========================================================================
    # 内部实现
    # =========================================================================

    async def _scan_single_session(self, target: DeviceTarget) -> DeviceReport:
        """单会话模式：三个批次在同一会话中依次执行，故障策略与分组模式一致。

        会话在某个批次中失效后，后续批次不再发送，直接记为警告。
        """
        report = DeviceReport(device=target.label)
        try:
            async with self.session_factory(target) as session:
                rules = await self._run_group(session, build_rule_commands())
                report.filter_rules, report.nat_rules = self._map_rules(rules)
                report.success = True

                try:
                    counters = await self._run_group(session, build_counter_commands())
                    report.counters = self._map_counters(counters)
                except RouterOSError as e:
                    self._tolerate(report, "连接计数", e)

                try:
                    logs = await self._run_group(session, build_log_commands(self.log_topic))
                    report.logs = self._map_logs(logs)
                except RouterOSError as e:
                    self._tolerate(report, "日志", e)
        except RouterOSError as e:
            # 认证或规则批次失败
            return self._failed(report, e)

        logger.info(f"[{report.device}] 单会话扫描完成: 警告 {len(report.warnings)} 条")
        return report

    @staticmethod
    async def _run_group(session: ApiSession, commands: list[Command]) -> list[CommandResult]:
        # 会话已失效时 run_command 抛出 StateError，不会发送任何内容
        return [await session.run_command(c) for c in commands]

    @staticmethod
    def _map_rules(results: list[CommandResult]) -> tuple[list[FilterRule], list[NatRule]]:
        filter_result, nat_result = results
        filters = [FilterRule.from_record(r, i) for i, r in enumerate(filter_result.records)]
        nats = [NatRule.from_record(r, i) for i, r in enumerate(nat_result.records)]
        return filters, nats

    @staticmethod
    def _map_counters(results: list[CommandResult]) -> ConnectionCounters:
        total, tcp, udp, icmp = (parse_count(r) for r in results)
        return ConnectionCounters(total=total, tcp=tcp, udp=udp, icmp=icmp)

    def _map_logs(self, results: list[CommandResult]) -> list[LogRecord]:
        (log_result,) = results
        return [LogRecord.from_record(r) for r in log_result.records[: self.log_limit]]

    @staticmethod
    def _failed(report: DeviceReport, error: RouterOSError) -> DeviceReport:
        report.success = False
        report.error = str(error)
        logger.error(f"[{report.device}] 设备访问失败: {error}")
        return report

    @staticmethod
    def _tolerate(report: DeviceReport, group: str, error: RouterOSError) -> None:
        message = f"{group}查询失败: {error}"
        report.warnings.append(message)
        logger.warning(f"[{report.device}] {message}")
