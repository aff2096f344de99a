# -*- coding: utf-8 -*-
"""
AWS CloudWatch 指标统计客户端模块

功能：
- 把 GetMetricStatistics 查询选项转换为 API 请求
- 调用 CloudWatch GetMetricStatistics API
- 把响应映射为 GetMetricStatisticsResponse
"""

import boto3
import logging
from botocore.exceptions import ClientError, BotoCoreError

from cloudwatch.domain import GetMetricStatistics, GetMetricStatisticsResponse

logger = logging.getLogger(__name__)


class CloudWatchClient:
    """
    CloudWatch 指标统计客户端

    功能：
    - 执行 GetMetricStatistics 查询
    - 不做重试，API 异常原样抛出给调用方
    """

    def __init__(self, region: str = 'us-east-1', access_key: str = None, secret_key: str = None):
        """
        初始化 CloudWatch 客户端

        Args:
            region: AWS 区域
            access_key: AWS Access Key（可选，如果提供则使用指定凭证）
            secret_key: AWS Secret Key（可选，如果提供则使用指定凭证）
        """
        self.region = region
        try:
            if access_key and secret_key:
                session = boto3.Session(
                    aws_access_key_id=access_key,
                    aws_secret_access_key=secret_key
                )
                self.client = session.client('cloudwatch', region_name=region)
                logger.debug(f"CloudWatch 客户端初始化成功（使用指定凭证），区域: {region}")
            else:
                self.client = boto3.client('cloudwatch', region_name=region)
                logger.debug(f"CloudWatch 客户端初始化成功（使用默认凭证链），区域: {region}")
        except Exception as e:
            logger.error(f"初始化 CloudWatch 客户端失败: {e}")
            raise

    def get_metric_statistics(self, options: GetMetricStatistics) -> GetMetricStatisticsResponse:
        """
        获取 CloudWatch 指标统计数据

        Args:
            options: 已构建的 GetMetricStatistics 查询选项

        Returns:
            GetMetricStatisticsResponse，无数据时 datapoints 为空

        Raises:
            ClientError: CloudWatch API 错误
            BotoCoreError: AWS SDK 错误（包括参数校验失败）
        """
        metric = f"{options.namespace}/{options.metric_name}"
        try:
            response = self.client.get_metric_statistics(**options.to_request_params())
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"CloudWatch API 调用异常 {metric}: {error_code} - {error_message}")
            raise
        except BotoCoreError as e:
            logger.error(f"CloudWatch SDK 异常 {metric}: {e}")
            raise

        result = GetMetricStatisticsResponse.from_json(response)
        if not result.datapoints:
            # 无数据是正常行为
            logger.debug(f"CloudWatch 指标无数据: {metric} (region: {self.region})")
        else:
            logger.debug(f"CloudWatch 指标获取成功: {metric}, 数据点: {len(result)}")
        return result
