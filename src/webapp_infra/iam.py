"""
IAM Module.

This module contains the roles, inline policies and instance profile used by
the web servers and the notification Lambda. Policy documents are plain dicts
serialised with json.dumps once the ARNs they reference are known.
"""

from typing import Dict, List

import pulumi_aws as aws

from ..config import StackConfig
from ..utils import assume_role_policy, policy_document
from .types import Ec2Identity

CLOUDWATCH_AGENT_POLICY_ARN = "arn:aws:iam::aws:policy/CloudWatchAgentServerPolicy"
LAMBDA_BASIC_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
)


def sns_publish_statements(topic_arn: str) -> List[Dict]:
    return [{"Effect": "Allow", "Action": "sns:Publish", "Resource": topic_arn}]


def sns_consume_statements(topic_arn: str) -> List[Dict]:
    return [
        {"Effect": "Allow", "Action": "sns:Subscribe", "Resource": topic_arn},
        {
            "Effect": "Allow",
            "Action": ["sns:ConfirmSubscription", "sns:Receive"],
            "Resource": topic_arn,
        },
    ]


def dynamodb_put_statements(table_arn: str) -> List[Dict]:
    return [{"Effect": "Allow", "Action": ["dynamodb:PutItem"], "Resource": table_arn}]


def create_ec2_identity(config: StackConfig, topic: aws.sns.Topic) -> Ec2Identity:
    """
    Declare the role assumed by the web servers.

    The role may ship metrics/logs through the CloudWatch agent and publish to
    the SNS topic.
    """
    role = aws.iam.Role(
        "WebappEC2Role",
        name=f"{config.prefix}-WebappEC2Role",
        assume_role_policy=assume_role_policy("ec2.amazonaws.com"),
    )

    aws.iam.RolePolicyAttachment(
        "CloudWatchAgentPolicyAttachment",
        role=role.name,
        policy_arn=CLOUDWATCH_AGENT_POLICY_ARN,
    )

    aws.iam.RolePolicy(
        "EC2SNSTopicPolicy",
        role=role.id,
        policy=topic.arn.apply(lambda arn: policy_document(sns_publish_statements(arn))),
    )

    instance_profile = aws.iam.InstanceProfile(
        "WebappInstanceProfile",
        name=f"{config.prefix}-WebappInstanceProfile",
        role=role.name,
    )

    return Ec2Identity(role=role, instance_profile=instance_profile)


def create_lambda_role(
    config: StackConfig, topic: aws.sns.Topic, table: aws.dynamodb.Table
) -> aws.iam.Role:
    """Declare the role the notification Lambda executes as."""
    role = aws.iam.Role(
        "LambdaSNSRole",
        name=f"{config.prefix}-LambdaSNSRole",
        assume_role_policy=assume_role_policy("lambda.amazonaws.com"),
    )

    aws.iam.RolePolicy(
        "LambdaSNSTopicPolicy",
        role=role.id,
        policy=topic.arn.apply(lambda arn: policy_document(sns_consume_statements(arn))),
    )

    aws.iam.RolePolicyAttachment(
        "lambdaRolePolicyAttachment",
        role=role.name,
        policy_arn=LAMBDA_BASIC_EXECUTION_POLICY_ARN,
    )

    aws.iam.RolePolicy(
        "dynamoDBTablePolicy",
        role=role.name,
        policy=table.arn.apply(lambda arn: policy_document(dynamodb_put_statements(arn))),
    )

    return role
