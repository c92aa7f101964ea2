"""
Route 53 Module.

Points the apex of the hosted zone at the application load balancer.
"""

import pulumi_aws as aws

from ..config import StackConfig
from .types import LoadBalancer


def create_dns_record(config: StackConfig, load_balancer: LoadBalancer) -> aws.route53.Record:
    """
    Declare an A alias record for ``config.hosted_zone``.

    The zone itself is looked up, not managed, by this stack; a missing zone
    fails the deployment.
    """
    hosted_zone = aws.route53.get_zone_output(name=config.hosted_zone)

    return aws.route53.Record(
        "dns-alias",
        zone_id=hosted_zone.apply(lambda zone: zone.zone_id),
        name=config.hosted_zone,
        type="A",
        aliases=[
            aws.route53.RecordAliasArgs(
                evaluate_target_health=True,
                name=load_balancer.alb.dns_name,
                zone_id=load_balancer.alb.zone_id,
            )
        ],
    )
