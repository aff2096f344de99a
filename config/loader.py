# -*- coding: utf-8 -*-
"""
Exporter 配置加载模块

功能：
- 从 YAML 文件加载 AWS / Glance / 服务配置
- 定义清晰的数据结构（ExporterConfig / AwsConfig / GlanceConfig / ServerConfig）
- 支持环境变量覆盖
- 读取失败时给出明确错误
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cloudwatch.domain import GetMetricStatistics
from cloudwatch.loader import load_metric_queries


VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


@dataclass
class AwsConfig:
    """AWS 配置"""
    region: str = 'us-east-1'
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    metric_queries: List[GetMetricStatistics] = field(default_factory=list)


@dataclass
class GlanceConfig:
    """Glance 配置"""
    endpoints: Dict[str, str] = field(default_factory=dict)  # zone -> endpoint
    auth_token: Optional[str] = None
    timeout: int = 30
    page_size: Optional[int] = None


@dataclass
class ServerConfig:
    """HTTP 服务与刷新配置"""
    port: int = 8000
    log_level: str = 'INFO'
    refresh_interval: int = 300      # 刷新间隔（秒）
    lookback_seconds: int = 900      # CloudWatch 查询时间窗口（秒）


@dataclass
class ExporterConfig:
    """配置的根数据结构"""
    aws: AwsConfig
    glance: GlanceConfig
    server: ServerConfig


def load_config(config_path: str) -> ExporterConfig:
    """
    从 YAML 文件加载配置

    Args:
        config_path: 配置文件路径（如 'config/exporter.yaml'）

    Returns:
        ExporterConfig 对象（已应用环境变量覆盖）

    Raises:
        FileNotFoundError: 文件不存在
        yaml.YAMLError: YAML 解析错误
        ValueError: 配置格式错误
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"配置文件不存在: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except IOError as e:
        raise IOError(f"无法读取配置文件 {config_path}: {e}")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"YAML 解析失败: {e}")

    if data is None:
        raise ValueError("配置文件为空")
    if not isinstance(data, dict):
        raise ValueError("配置格式错误: 根节点必须是字典类型")

    config = ExporterConfig(
        aws=_parse_aws_config(_section(data, 'aws')),
        glance=_parse_glance_config(_section(data, 'glance')),
        server=_parse_server_config(_section(data, 'server')),
    )
    _apply_env_overrides(config)
    return config


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ValueError(f"配置格式错误: '{key}' 必须是字典类型")
    return section


def _positive_int(section: Dict[str, Any], key: str, default: int, prefix: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"配置格式错误: '{prefix}.{key}' 必须是正整数")
    return value


def _parse_aws_config(section: Dict[str, Any]) -> AwsConfig:
    region = section.get('region', 'us-east-1')
    if not isinstance(region, str) or not region.strip():
        raise ValueError("配置格式错误: 'aws.region' 必须是非空字符串")

    return AwsConfig(
        region=region.strip(),
        access_key=section.get('access_key'),
        secret_key=section.get('secret_key'),
        metric_queries=load_metric_queries(section.get('metric_queries')),
    )


def _parse_glance_config(section: Dict[str, Any]) -> GlanceConfig:
    endpoints = section.get('endpoints') or {}
    if not isinstance(endpoints, dict):
        raise ValueError("配置格式错误: 'glance.endpoints' 必须是字典类型（zone -> endpoint）")
    for zone, endpoint in endpoints.items():
        if not isinstance(endpoint, str) or not endpoint.strip():
            raise ValueError(f"配置格式错误: 'glance.endpoints.{zone}' 必须是非空字符串")

    page_size = section.get('page_size')
    if page_size is not None:
        page_size = _positive_int(section, 'page_size', 0, 'glance')

    return GlanceConfig(
        endpoints={str(zone): endpoint.strip() for zone, endpoint in endpoints.items()},
        auth_token=section.get('auth_token'),
        timeout=_positive_int(section, 'timeout', 30, 'glance'),
        page_size=page_size,
    )


def _parse_server_config(section: Dict[str, Any]) -> ServerConfig:
    log_level = str(section.get('log_level', 'INFO')).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ValueError(f"配置格式错误: 'server.log_level' 必须是以下值之一: {', '.join(VALID_LOG_LEVELS)}")

    port = _positive_int(section, 'port', 8000, 'server')
    if port > 65535:
        raise ValueError("配置格式错误: 'server.port' 必须在 1-65535 之间")

    return ServerConfig(
        port=port,
        log_level=log_level,
        refresh_interval=_positive_int(section, 'refresh_interval', 300, 'server'),
        lookback_seconds=_positive_int(section, 'lookback_seconds', 900, 'server'),
    )


def _apply_env_overrides(config: ExporterConfig):
    """用环境变量覆盖配置（凭证类配置优先从环境变量读取）"""
    config.aws.region = os.getenv('AWS_REGION', config.aws.region)
    config.aws.access_key = os.getenv('AWS_ACCESS_KEY_ID', config.aws.access_key)
    config.aws.secret_key = os.getenv('AWS_SECRET_ACCESS_KEY', config.aws.secret_key)
    config.glance.auth_token = os.getenv('GLANCE_AUTH_TOKEN', config.glance.auth_token)

    port = os.getenv('EXPORTER_PORT')
    if port:
        try:
            config.server.port = int(port)
        except ValueError:
            raise ValueError(f"环境变量 EXPORTER_PORT 必须是整数: {port}")

    log_level = os.getenv('LOG_LEVEL')
    if log_level:
        if log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"环境变量 LOG_LEVEL 必须是以下值之一: {', '.join(VALID_LOG_LEVELS)}")
        config.server.log_level = log_level.upper()


def print_config(config: ExporterConfig):
    """
    打印配置结构（用于调试和验证，不打印凭证）

    Args:
        config: ExporterConfig 对象
    """
    print("=" * 60)
    print("Exporter 配置")
    print("=" * 60)

    print(f"\n【AWS】区域: {config.aws.region}")
    print(f"  凭证: {'指定凭证' if config.aws.access_key else '默认凭证链'}")
    print(f"  指标查询数量: {len(config.aws.metric_queries)}")
    for query in config.aws.metric_queries[:3]:  # 只显示前 3 个
        stats = ', '.join(sorted(s.value for s in query.statistics))
        print(f"    - {query.namespace}/{query.metric_name} ({stats}, period={query.period})")
    if len(config.aws.metric_queries) > 3:
        print(f"    ... 还有 {len(config.aws.metric_queries) - 3} 个查询")

    if config.glance.endpoints:
        print(f"\n【Glance】共 {len(config.glance.endpoints)} 个 zone")
        for zone, endpoint in sorted(config.glance.endpoints.items()):
            print(f"    - {zone}: {endpoint}")
    else:
        print("\n【Glance】无")

    print(f"\n【Server】端口: {config.server.port}, 日志级别: {config.server.log_level}, "
          f"刷新间隔: {config.server.refresh_interval}s")
    print("\n" + "=" * 60)
