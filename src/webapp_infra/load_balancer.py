"""
Load Balancer Module.

Declares the internet-facing application load balancer, the target group the
auto scaling group registers into, and the HTTP listener between them.
"""

import pulumi_aws as aws

from ..config import StackConfig
from ..utils import generate_tags, resource_name
from .types import LoadBalancer, Network, SecurityGroups

HEALTH_CHECK_PATH = "/test"


def create_load_balancer(
    config: StackConfig, network: Network, security_groups: SecurityGroups
) -> LoadBalancer:
    alb = aws.lb.LoadBalancer(
        resource_name(config.project, config.stack, "alb"),
        load_balancer_type="application",
        security_groups=[security_groups.elb.id],
        subnets=[subnet.id for subnet in network.public_subnets],
        enable_deletion_protection=False,
        tags=generate_tags(config.project, config.stack, "alb"),
    )

    target_group = aws.lb.TargetGroup(
        "tg",
        port=config.server_port,
        protocol="HTTP",
        vpc_id=network.vpc.id,
        target_type="instance",
        health_check=aws.lb.TargetGroupHealthCheckArgs(
            enabled=True,
            interval=30,
            path=HEALTH_CHECK_PATH,
            protocol="HTTP",
            port=str(config.server_port),
            matcher="200",
            timeout=10,
            unhealthy_threshold=3,
        ),
    )

    listener = aws.lb.Listener(
        "listener",
        load_balancer_arn=alb.arn,
        port=80,
        default_actions=[
            aws.lb.ListenerDefaultActionArgs(
                type="forward",
                target_group_arn=target_group.arn,
            )
        ],
    )

    return LoadBalancer(alb=alb, target_group=target_group, listener=listener)
