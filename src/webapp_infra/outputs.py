"""
Stack output helpers.

Export names are consumed by other automation and must stay stable.
"""

import pulumi
import pulumi_aws as aws

from .types import Database, GcpStorage, LoadBalancer, Network, Serverless, StackOutputs


def collect_outputs(
    network: Network,
    database: Database,
    load_balancer: LoadBalancer,
    topic: aws.sns.Topic,
    table: aws.dynamodb.Table,
    storage: GcpStorage,
    serverless: Serverless,
) -> StackOutputs:
    return {
        "vpc": network.vpc.id,
        "internetGateway": network.internet_gateway.id,
        "publicSubnets": [subnet.id for subnet in network.public_subnets],
        "privateSubnets": [subnet.id for subnet in network.private_subnets],
        "dbEndpoint": database.instance.endpoint,
        "dynamoDBTableArn": table.arn,
        "serviceAccountKey": storage.private_key,
        "loadBalancerDns": load_balancer.alb.dns_name,
        "snsTopicArn": topic.arn,
        "lambdaArn": serverless.function.arn,
        "bucketName": storage.bucket.name,
    }


def export_outputs(outputs: StackOutputs) -> None:
    for name, value in outputs.items():
        pulumi.export(name, value)
