"""Tests for CloudWatchClient with a mocked boto3 client."""

from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from cloudwatch import CloudWatchClient, Dimension, GetMetricStatistics, Statistics


@pytest.fixture
def options():
    return (GetMetricStatistics.builder()
            .namespace("AWS/EC2")
            .metric_name("CPUUtilization")
            .dimension(Dimension("InstanceId", "i-1"))
            .statistic(Statistics.AVERAGE)
            .start_time(datetime(2024, 1, 1, tzinfo=timezone.utc))
            .end_time(datetime(2024, 1, 1, 1, tzinfo=timezone.utc))
            .build())


@pytest.fixture
def boto_client():
    with patch("cloudwatch.client.boto3") as boto3:
        client = Mock()
        boto3.client.return_value = client
        boto3.Session.return_value.client.return_value = client
        yield boto3, client


class TestClientInit:

    def test_default_credential_chain(self, boto_client):
        boto3, _ = boto_client

        CloudWatchClient(region="eu-west-1")

        boto3.client.assert_called_once_with("cloudwatch", region_name="eu-west-1")
        boto3.Session.assert_not_called()

    def test_explicit_credentials_use_session(self, boto_client):
        boto3, _ = boto_client

        CloudWatchClient(region="eu-west-1", access_key="AK", secret_key="SK")

        boto3.Session.assert_called_once_with(aws_access_key_id="AK", aws_secret_access_key="SK")
        boto3.Session.return_value.client.assert_called_once_with("cloudwatch", region_name="eu-west-1")


class TestGetMetricStatistics:

    def test_passes_serialized_options(self, boto_client, options):
        _, client = boto_client
        client.get_metric_statistics.return_value = {"Label": "CPUUtilization", "Datapoints": []}

        CloudWatchClient().get_metric_statistics(options)

        client.get_metric_statistics.assert_called_once_with(**options.to_request_params())

    def test_maps_datapoints(self, boto_client, options):
        _, client = boto_client
        ts = datetime(2024, 1, 1, 0, 30, tzinfo=timezone.utc)
        client.get_metric_statistics.return_value = {
            "Label": "CPUUtilization",
            "Datapoints": [{"Timestamp": ts, "Average": 42.5, "Unit": "Percent"}],
        }

        response = CloudWatchClient().get_metric_statistics(options)

        assert response.latest().timestamp == ts
        assert response.latest().average == 42.5

    def test_no_datapoints_is_not_an_error(self, boto_client, options):
        _, client = boto_client
        client.get_metric_statistics.return_value = {"Label": "CPUUtilization", "Datapoints": []}

        response = CloudWatchClient().get_metric_statistics(options)

        assert response.latest() is None

    def test_client_error_propagates_unchanged(self, boto_client, options):
        _, client = boto_client
        error = ClientError(
            {"Error": {"Code": "InvalidParameterCombination", "Message": "bad"}},
            "GetMetricStatistics",
        )
        client.get_metric_statistics.side_effect = error

        with pytest.raises(ClientError) as exc_info:
            CloudWatchClient().get_metric_statistics(options)

        assert exc_info.value is error

    def test_botocore_error_propagates(self, boto_client, options):
        _, client = boto_client
        client.get_metric_statistics.side_effect = EndpointConnectionError(endpoint_url="https://monitoring")

        with pytest.raises(EndpointConnectionError):
            CloudWatchClient().get_metric_statistics(options)

        assert client.get_metric_statistics.call_count == 1
