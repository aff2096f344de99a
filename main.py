#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Cloud Metrics Exporter 主程序入口

功能：
- 启动 Flask HTTP 服务器
- 暴露 /metrics 端点供 Prometheus 抓取（CloudWatch 统计值、Glance 镜像数量）
- 暴露 /health 健康检查端点
- 暴露 /images/<zone> 镜像列表端点（跨页惰性迭代）
"""

from flask import Flask, jsonify, request
from prometheus_client import CONTENT_TYPE_LATEST
import logging
import os
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from concurrent.futures import ThreadPoolExecutor, as_completed

import requests
from botocore.exceptions import ClientError, BotoCoreError

from config.loader import load_config, print_config, ExporterConfig
from cloudwatch import CloudWatchClient, GetMetricStatistics
from glance import GlanceApi, ImageStatus, ListImageOptions
from pagination import MalformedPaginationError
from collector import MetricsCollector, CollectResult, CollectStatus
from scheduler import RefreshScheduler

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# 设置特定模块的日志级别
logging.getLogger('werkzeug').setLevel(logging.WARNING)  # 减少 Flask 日志

# 创建 Flask 应用
app = Flask(__name__)

# 全局变量（在 main 函数中初始化）
metrics_collector: Optional[MetricsCollector] = None
scheduler: Optional[RefreshScheduler] = None
_config: Optional[ExporterConfig] = None
_cloudwatch_client: Optional[CloudWatchClient] = None
_glance_api: Optional[GlanceApi] = None

# /images 端点单次返回的最大镜像数
MAX_LISTED_IMAGES = 1000


@app.route('/metrics')
def metrics():
    """
    Prometheus metrics 端点

    格式：Prometheus text format
    """
    if metrics_collector is None:
        return "# Exporter not initialized\n", 200, {'Content-Type': CONTENT_TYPE_LATEST}

    return metrics_collector.get_metrics(), 200, {'Content-Type': CONTENT_TYPE_LATEST}


@app.route('/health')
def health():
    """
    健康检查端点
    """
    status = {'status': 'healthy'}

    if scheduler:
        status['scheduler'] = scheduler.get_status()
    if metrics_collector:
        status['summary'] = metrics_collector.get_summary()

    return status, 200


@app.route('/trigger/refresh', methods=['POST'])
def trigger_refresh():
    """
    手动触发一次完整刷新
    """
    if metrics_collector is None:
        return jsonify({
            'success': False,
            'error': 'Exporter 未初始化，无法执行采集'
        }), 503

    try:
        logger.info("[手动触发] 开始刷新...")
        collect_all()
        return jsonify({
            'success': True,
            'message': '刷新完成',
            'summary': metrics_collector.get_summary()
        }), 200
    except Exception as e:
        logger.error(f"[手动触发] 刷新失败: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


def _list_options_from_args(args) -> ListImageOptions:
    """
    把请求参数转换为 ListImageOptions

    Raises:
        ValueError: 参数无效
    """
    def optional_int(key):
        value = args.get(key)
        return int(value) if value not in (None, '') else None

    status = args.get('status')
    image_status = ImageStatus.from_value(status) if status else None
    if image_status is ImageStatus.UNRECOGNIZED:
        raise ValueError(f"未知的镜像状态: {status}")
    limit = optional_int('limit')
    if limit is None and _config is not None:
        limit = _config.glance.page_size
    return ListImageOptions(
        name=args.get('name'),
        status=image_status,
        container_format=args.get('container_format'),
        disk_format=args.get('disk_format'),
        size_min=optional_int('size_min'),
        size_max=optional_int('size_max'),
        sort_key=args.get('sort_key'),
        sort_dir=args.get('sort_dir'),
        limit=limit,
    )


@app.route('/images/<zone>')
def list_images(zone: str):
    """
    列出指定 zone 的镜像详情

    查询参数作为过滤条件，在所有页之间保持不变。
    """
    if _glance_api is None:
        return jsonify({'error': 'Glance 未配置'}), 503

    if zone not in _glance_api.get_configured_zones():
        return jsonify({'error': f'未配置的 zone: {zone}'}), 404

    try:
        options = _list_options_from_args(request.args)
    except ValueError as e:
        return jsonify({'error': f'参数无效: {e}'}), 400

    images = []
    pages = _glance_api.list_in_detail_all(zone, options)
    try:
        for image in pages:
            images.append({
                'id': image.id,
                'name': image.name,
                'status': image.status.value,
                'size': image.size,
                'disk_format': image.disk_format,
                'container_format': image.container_format,
                'updated_at': image.updated_at.isoformat() if image.updated_at else None,
            })
            if len(images) >= MAX_LISTED_IMAGES:
                logger.warning(f"[镜像列表] zone={zone} 镜像数超过 {MAX_LISTED_IMAGES}，结果已截断")
                break
    except (requests.RequestException, ValueError) as e:
        logger.error(f"[镜像列表] zone={zone} 获取失败: {e}")
        return jsonify({'error': str(e)}), 502

    return jsonify({
        'zone': zone,
        'count': len(images),
        'pages': pages.fetch_count,
        'images': images
    }), 200


def _dimensions_label(query: GetMetricStatistics) -> str:
    return ','.join(f"{d.name}={d.value}" for d in sorted(query.dimensions, key=lambda d: (d.name, d.value)))


def collect_cloudwatch_metrics(
    client: CloudWatchClient,
    queries: List[GetMetricStatistics],
    lookback_seconds: int = 900
) -> List[CollectResult]:
    """
    执行所有 CloudWatch 指标查询

    Args:
        client: CloudWatch 客户端
        queries: 指标查询列表（不含时间窗口）
        lookback_seconds: 查询时间窗口（秒）

    Returns:
        采集结果列表（单个查询失败不影响其他查询）
    """
    results: List[CollectResult] = []
    end_time = datetime.now(timezone.utc)
    start_time = end_time - timedelta(seconds=lookback_seconds)

    for query in queries:
        name = f"{query.namespace}/{query.metric_name}"
        labels = {
            'namespace': query.namespace,
            'metric_name': query.metric_name,
            'dimensions': _dimensions_label(query)
        }
        try:
            response = client.get_metric_statistics(query.with_time_range(start_time, end_time))
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_type = 'permission_denied' if error_code == 'AccessDenied' else 'api_error'
            results.append(CollectResult(source='cloudwatch', name=name, status=CollectStatus.FAILED,
                                         labels=labels, error=str(e), error_type=error_type))
            continue
        except BotoCoreError as e:
            results.append(CollectResult(source='cloudwatch', name=name, status=CollectStatus.FAILED,
                                         labels=labels, error=str(e), error_type='sdk_error'))
            continue

        latest = response.latest()
        if latest is None:
            # CloudWatch 无数据：正常行为
            results.append(CollectResult(source='cloudwatch', name=name, status=CollectStatus.SKIPPED,
                                         labels=labels, reason='no_datapoints'))
            continue

        values = {}
        for statistic in query.statistics:
            value = latest.value(statistic)
            if value is not None:
                values[statistic.value] = value
        results.append(CollectResult(source='cloudwatch', name=name, status=CollectStatus.SUCCESS,
                                     labels=labels, values=values))

    return results


def _count_zone_images(glance_api: GlanceApi, zone: str, page_size: Optional[int]) -> CollectResult:
    """统计单个 zone 的镜像数量（按状态）"""
    options = ListImageOptions(limit=page_size)
    try:
        pages = glance_api.list_in_detail_all(zone, options)
        counts = Counter(image.status.value for image in pages)
    except MalformedPaginationError as e:
        return CollectResult(source='glance', name=zone, status=CollectStatus.FAILED,
                             labels={'zone': zone}, error=str(e), error_type='malformed_pagination')
    except (requests.RequestException, ValueError) as e:
        return CollectResult(source='glance', name=zone, status=CollectStatus.FAILED,
                             labels={'zone': zone}, error=str(e), error_type='api_error')

    logger.info(f"[采集] Glance zone={zone}: 共 {sum(counts.values())} 个镜像, {pages.fetch_count} 页")
    return CollectResult(source='glance', name=zone, status=CollectStatus.SUCCESS,
                         labels={'zone': zone}, values={k: float(v) for k, v in counts.items()})


def collect_glance_images(glance_api: GlanceApi, page_size: Optional[int] = None, max_workers: int = 3) -> List[CollectResult]:
    """
    并发统计各 zone 的镜像数量

    每个 zone 是独立的分页序列，互不共享状态。

    Args:
        glance_api: Glance API
        page_size: 每页数量（可选）
        max_workers: 并发线程数

    Returns:
        采集结果列表（按 zone 排序）
    """
    zones = glance_api.get_configured_zones()
    results: List[CollectResult] = []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(_count_zone_images, glance_api, zone, page_size): zone
            for zone in zones
        }
        for future in as_completed(futures):
            results.append(future.result())

    results.sort(key=lambda r: r.name)
    return results


def collect_all():
    """
    执行一次完整刷新（CloudWatch + Glance）

    供 Scheduler 和手动触发调用
    """
    if metrics_collector is None or _config is None:
        logger.error("[采集] 采集组件未初始化，无法执行刷新")
        return

    results: List[CollectResult] = []
    if _cloudwatch_client is not None and _config.aws.metric_queries:
        results.extend(collect_cloudwatch_metrics(
            _cloudwatch_client,
            _config.aws.metric_queries,
            _config.server.lookback_seconds
        ))
    if _glance_api is not None:
        max_workers = int(os.getenv('COLLECTION_MAX_WORKERS', '3'))
        results.extend(collect_glance_images(_glance_api, _config.glance.page_size, max_workers))

    metrics_collector.collect_all(results)

    for result in results:
        if result.is_failed():
            logger.warning(f"[采集] {result.source} {result.name} 失败: {result.error}")

    summary = metrics_collector.get_summary()
    logger.info(f"刷新完成: 总计={summary['total']}, 成功={summary['success']}, "
                f"跳过={summary['skipped']}, 失败={summary['failed']}")


def main():
    """
    主函数：加载配置、初始化客户端、执行初始采集、启动定时任务和 HTTP 服务
    """
    global metrics_collector, scheduler, _config, _cloudwatch_client, _glance_api

    config_path = os.getenv('CONFIG_PATH', 'config/exporter.yaml')
    logger.info(f"加载配置文件: {config_path}")
    _config = load_config(config_path)
    logging.getLogger().setLevel(_config.server.log_level)
    print_config(_config)

    # 初始化客户端
    if _config.aws.metric_queries:
        _cloudwatch_client = CloudWatchClient(
            region=_config.aws.region,
            access_key=_config.aws.access_key,
            secret_key=_config.aws.secret_key
        )
    else:
        logger.info("未配置 CloudWatch 指标查询，跳过 CloudWatch 采集")

    if _config.glance.endpoints:
        _glance_api = GlanceApi(
            endpoints=_config.glance.endpoints,
            auth_token=_config.glance.auth_token,
            timeout=_config.glance.timeout
        )
    else:
        logger.info("未配置 Glance endpoint，跳过镜像采集")

    metrics_collector = MetricsCollector()

    # 初始采集失败不退出，继续启动服务器
    try:
        collect_all()
    except Exception as e:
        logger.error(f"初始采集失败: {e}", exc_info=True)

    scheduler = RefreshScheduler(refresh_func=collect_all, interval=_config.server.refresh_interval)
    scheduler.start()

    port = _config.server.port
    logger.info(f"Starting HTTP server on port {port}")
    app.run(host='0.0.0.0', port=port, debug=False)


if __name__ == '__main__':
    main()
