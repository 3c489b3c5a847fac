from __future__ import annotations

from collections.abc import Iterable

from aws_cdk import Duration, Stack
from aws_cdk import aws_appsync as appsync
from aws_cdk import aws_cloudwatch as cw
from aws_cdk import aws_dynamodb as dynamodb
from constructs import Construct


def _api_metric(api: appsync.IGraphqlApi, metric_name: str, statistic: str = "Sum") -> cw.Metric:
    return cw.Metric(
        namespace="AWS/AppSync",
        metric_name=metric_name,
        dimensions_map={"GraphQLAPIId": api.api_id},
        statistic=statistic,
        period=Duration.minutes(5),
    )


class MonitoringStack(Stack):
    """CloudWatch dashboard and a server-error alarm for the catalog API."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        api: appsync.IGraphqlApi,
        tables: Iterable[dynamodb.ITable],
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        dashboard = cw.Dashboard(self, "CatalogDashboard")

        server_errors = _api_metric(api, "5XXError")

        # AppSync widgets
        dashboard.add_widgets(
            cw.GraphWidget(
                title="GraphQL API – Requests/Errors",
                left=[_api_metric(api, "Requests")],
                right=[_api_metric(api, "4XXError"), server_errors],
            ),
            cw.GraphWidget(
                title="GraphQL API – Latency p95",
                left=[_api_metric(api, "Latency", statistic="p95")],
            ),
        )

        # DynamoDB widgets
        for table in tables:
            dashboard.add_widgets(
                cw.GraphWidget(
                    title=f"{table.node.id} – Throttles/Errors",
                    left=[
                        table.metric("ReadThrottleEvents"),
                        table.metric("WriteThrottleEvents"),
                    ],
                    right=[
                        table.metric_user_errors(),
                    ],
                ),
            )

        self.server_error_alarm = cw.Alarm(
            self,
            "ApiServerErrorAlarm",
            metric=server_errors,
            threshold=1,
            evaluation_periods=1,
            comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cw.TreatMissingData.NOT_BREACHING,
            alarm_description="GraphQL API returned server errors",
        )
