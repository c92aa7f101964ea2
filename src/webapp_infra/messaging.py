"""
SNS Module.

The web servers publish to this topic; the notification Lambda consumes it.
"""

import pulumi_aws as aws

from ..config import StackConfig
from ..utils import resource_name


def create_topic(config: StackConfig) -> aws.sns.Topic:
    name = resource_name(config.project, config.stack, "sns")
    return aws.sns.Topic(name, name=name)
