"""
Lambda Module.

Declares the notification Lambda subscribed to the web application's SNS
topic. The function code is packaged outside this repository and referenced by
path.
"""

import pulumi
import pulumi_aws as aws

from ..config import StackConfig
from ..utils import resource_name
from .iam import create_lambda_role
from .types import GcpStorage, Serverless

LAMBDA_HANDLER = "index.handler"


def create_serverless(
    config: StackConfig,
    topic: aws.sns.Topic,
    table: aws.dynamodb.Table,
    storage: GcpStorage,
) -> Serverless:
    """Declare the Lambda, its role, the SNS invoke permission and the subscription."""
    role = create_lambda_role(config, topic, table)

    function = aws.lambda_.Function(
        "upload-submission-lambda",
        name=resource_name(config.project, config.stack, "lambda"),
        runtime=aws.lambda_.Runtime.NODE_JS18D_X,
        handler=LAMBDA_HANDLER,
        role=role.arn,
        code=pulumi.FileArchive(config.lambda_code_path),
        environment=aws.lambda_.FunctionEnvironmentArgs(
            variables={
                "GCSBucketName": storage.bucket.name,
                "GCSAccessKeys": config.access_keys,
                "serviceAccountPvtKey": storage.private_key,
                "project": config.gcp_project,
                "accountEmail": storage.service_account.email,
                "DYNAMODB_TABLE_NAME": table.name,
                "EMAIL_API_KEY": config.email_api_key,
                "EMAIL_DOMAIN": config.email_domain or config.hosted_zone,
            }
        ),
    )

    aws.lambda_.Permission(
        "lambdaSnsPermission",
        action="lambda:InvokeFunction",
        function=function.name,
        principal="sns.amazonaws.com",
        source_arn=topic.arn,
    )

    subscription = aws.sns.TopicSubscription(
        resource_name(config.project, config.stack, "lambda-subscription"),
        topic=topic.arn,
        protocol="lambda",
        endpoint=function.arn,
    )

    return Serverless(role=role, function=function, subscription=subscription)
