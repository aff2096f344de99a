# -*- coding: utf-8 -*-
"""
定时刷新实现模块

功能：
- 定时调用刷新函数更新指标
- 不直接操作 Prometheus metrics
- 不关心 CloudWatch 查询或 Glance zone 细节
- 只负责"什么时候刷新"
"""

import threading
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    定时刷新调度器

    职责：
    1. 每 interval 秒调用一次刷新函数
    2. 刷新异常只记录日志，线程不退出
    """

    def __init__(self, refresh_func: Callable, interval: int = 300):
        """
        初始化调度器

        Args:
            refresh_func: 刷新函数
            interval: 刷新间隔（秒），默认 300
        """
        if interval <= 0:
            raise ValueError(f"interval 必须是正整数: {interval}")
        self.refresh_func = refresh_func
        self.interval = interval

        # 控制标志
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.refresh_count = 0
        self.last_error: Optional[str] = None

        logger.info(f"RefreshScheduler 初始化完成: interval={interval}s")

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    def start(self):
        """
        启动定时刷新

        在后台 daemon 线程中运行 _refresh_loop
        """
        if self.running:
            logger.warning("定时任务已在运行")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._refresh_loop,
            name="RefreshThread",
            daemon=True
        )
        self._thread.start()
        logger.info("定时刷新线程已启动")

    def stop(self, timeout: float = 5):
        """
        停止定时刷新

        Args:
            timeout: 等待线程结束的最长时间（秒）
        """
        if self._thread is None:
            return

        logger.info("停止定时刷新调度器...")
        self._stop_event.set()
        if self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("定时刷新调度器已停止")

    def _refresh_loop(self):
        """
        刷新循环

        每 interval 秒执行一次 refresh_func
        """
        logger.info(f"[Scheduler] 刷新循环启动，间隔: {self.interval} 秒")

        # wait 返回 True 表示收到停止信号
        while not self._stop_event.wait(self.interval):
            self.run_once()

        logger.info("[Scheduler] 刷新循环已退出")

    def run_once(self):
        """执行一次刷新（异常只记录日志）"""
        try:
            logger.info("[Scheduler] refresh triggered")
            self.refresh_func()
            self.refresh_count += 1
            self.last_error = None
            logger.info("[Scheduler] refresh completed")
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"[Scheduler] 刷新异常: {e}", exc_info=True)

    def get_status(self) -> dict:
        """
        获取定时任务状态

        Returns:
            状态信息字典
        """
        return {
            'running': self.running,
            'interval': self.interval,
            'thread_alive': self._thread.is_alive() if self._thread else False,
            'refresh_count': self.refresh_count,
            'last_error': self.last_error
        }
