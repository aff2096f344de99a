# -*- coding: utf-8 -*-
"""
Prometheus Collector 实现模块

功能：
- 把采集结果写入 Prometheus 指标
- 统计成功 / 跳过 / 失败数量
- 提供指标数据供 /metrics 端点使用
"""

import time
import logging
import threading
from typing import Dict, List, Optional
from prometheus_client import CollectorRegistry, Gauge, Counter, Histogram, REGISTRY, generate_latest

from collector.result import CollectResult

logger = logging.getLogger(__name__)


class MetricsCollector:
    """
    指标收集器

    功能：
    - 管理一轮刷新的采集结果
    - 更新 Prometheus 指标
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        初始化指标收集器

        Args:
            registry: Prometheus registry（默认全局 REGISTRY，测试时可传入独立 registry）
        """
        self.registry = registry if registry is not None else REGISTRY

        # 1. CloudWatch 指标最新统计值
        self.metric_statistic = Gauge(
            'cloudwatch_metric_statistic',
            'Latest CloudWatch datapoint value per statistic',
            ['namespace', 'metric_name', 'statistic', 'dimensions'],
            registry=self.registry
        )

        # 2. Glance 镜像数量（按状态）
        self.glance_images = Gauge(
            'glance_images',
            'Number of Glance images by status',
            ['zone', 'status'],
            registry=self.registry
        )

        # Exporter 自身指标
        self.scrape_errors_total = Counter(
            'exporter_scrape_errors_total',
            'Total number of collection errors',
            ['source', 'error_type'],
            registry=self.registry
        )

        self.refresh_duration_seconds = Histogram(
            'exporter_refresh_duration_seconds',
            'Duration of a full refresh in seconds',
            buckets=[0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0],
            registry=self.registry
        )

        self.scrape_skipped_total = Counter(
            'exporter_scrape_skipped_total',
            'Total number of skipped collections',
            ['source', 'reason'],
            registry=self.registry
        )

        # 最近一轮的采集结果
        self.results: List[CollectResult] = []
        self._lock = threading.Lock()

    def add_result(self, result: CollectResult):
        """
        添加采集结果

        Args:
            result: 采集结果
        """
        with self._lock:
            self.results.append(result)

        if result.is_success():
            if result.source == 'cloudwatch':
                for statistic, value in result.values.items():
                    self.metric_statistic.labels(statistic=statistic, **result.labels).set(value)
            elif result.source == 'glance':
                for status, count in result.values.items():
                    self.glance_images.labels(status=status, **result.labels).set(count)
            else:
                logger.warning(f"未知的数据来源: {result.source}")

        elif result.is_skipped():
            self.scrape_skipped_total.labels(
                source=result.source,
                reason=result.reason or 'unknown'
            ).inc()

        elif result.is_failed():
            self.scrape_errors_total.labels(
                source=result.source,
                error_type=result.error_type or 'api_error'
            ).inc()

    def collect_all(self, results: List[CollectResult]):
        """
        替换为新一轮的采集结果

        Args:
            results: 采集结果列表
        """
        start_time = time.time()

        with self._lock:
            self.results = []
        # 镜像状态集合可能变化，先清空旧的 label 组合
        self.glance_images.clear()

        for result in results:
            self.add_result(result)

        duration = time.time() - start_time
        self.refresh_duration_seconds.observe(duration)

    def get_metrics(self) -> str:
        """
        获取 Prometheus 格式的指标数据

        Returns:
            Prometheus text format 字符串
        """
        return generate_latest(self.registry).decode('utf-8')

    def get_summary(self) -> Dict:
        """
        获取采集汇总信息

        Returns:
            汇总信息字典
        """
        with self._lock:
            results = list(self.results)

        by_source = {}
        for result in results:
            stats = by_source.setdefault(result.source, {'success': 0, 'skipped': 0, 'failed': 0})
            stats[result.status.value] += 1

        skip_reasons = {}
        for result in results:
            if result.is_skipped() and result.reason:
                skip_reasons[result.reason] = skip_reasons.get(result.reason, 0) + 1

        return {
            'total': len(results),
            'success': sum(1 for r in results if r.is_success()),
            'skipped': sum(1 for r in results if r.is_skipped()),
            'failed': sum(1 for r in results if r.is_failed()),
            'by_source': by_source,
            'skip_reasons': skip_reasons
        }
