"""
Module: metrics.py
Description: CloudWatch custom metrics publishing.

Publishes pipeline metrics to CloudWatch: accepted submissions,
delivery outcomes and the number of sink attempts per submission.

Key Components:
- MetricsClient: CloudWatch metrics client
- put_metric(): Publish individual metrics
- Graceful error handling for metrics failures

Dependencies: boto3, typing, logger
Author: FormRelay Team
"""

from typing import Optional

import boto3

from formrelay.utils.logger import get_logger

logger = get_logger(__name__)


class MetricsClient:
    """CloudWatch metrics client."""

    def __init__(self, namespace: str = "FormRelay", enabled: bool = True):
        """
        Initialize metrics client.

        Args:
            namespace: CloudWatch metrics namespace
            enabled: When False, metrics are only logged at debug level
        """
        self.namespace = namespace
        self.enabled = enabled
        self.cloudwatch = boto3.client('cloudwatch') if enabled else None

        logger.info(
            "Metrics client initialized",
            namespace=namespace,
            enabled=enabled
        )

    def put_metric(
        self,
        metric_name: str,
        value: float,
        unit: str = 'Count',
        dimensions: Optional[dict] = None
    ) -> None:
        """
        Publish a metric to CloudWatch.

        Args:
            metric_name: Name of the metric
            value: Metric value
            unit: Metric unit (Count, Seconds, etc.)
            dimensions: Optional metric dimensions
        """
        if not self.enabled:
            logger.debug("Metric skipped", metric_name=metric_name, value=value)
            return

        try:
            metric_data = {
                'MetricName': metric_name,
                'Value': value,
                'Unit': unit
            }

            if dimensions:
                metric_data['Dimensions'] = [
                    {'Name': k, 'Value': v}
                    for k, v in dimensions.items()
                ]

            self.cloudwatch.put_metric_data(
                Namespace=self.namespace,
                MetricData=[metric_data]
            )

            logger.debug(
                "Metric published to CloudWatch",
                metric_name=metric_name,
                value=value,
                unit=unit,
                dimensions=dimensions,
                namespace=self.namespace
            )

        except Exception as e:
            # Metrics never fail the pipeline
            logger.warning(
                "Failed to publish metric",
                metric_name=metric_name,
                value=value,
                error=str(e),
                namespace=self.namespace
            )
