"""
Security Group Module.

Traffic flows internet -> load balancer -> web servers -> database. Each tier
only admits traffic from the tier in front of it; SSH to the web servers is
limited to the operator's address.
"""

import pulumi
import pulumi_aws as aws

from ..config import StackConfig
from ..utils import resource_name
from .types import SecurityGroups

ANYWHERE = "0.0.0.0/0"
POSTGRES_PORT = 5432
HTTPS_PORT = 443
STATSD_PORT = 8125


def create_security_groups(config: StackConfig, vpc: aws.ec2.Vpc) -> SecurityGroups:
    """Declare the load balancer, web server and database security groups."""
    elb_name = resource_name(config.project, config.stack, "elb-sg")
    elb_sg = aws.ec2.SecurityGroup(
        elb_name,
        name=elb_name,
        description="Allow incoming HTTP and HTTPS",
        vpc_id=vpc.id,
        ingress=[
            aws.ec2.SecurityGroupIngressArgs(
                protocol="tcp", from_port=80, to_port=80, cidr_blocks=[ANYWHERE]
            ),
            aws.ec2.SecurityGroupIngressArgs(
                protocol="tcp", from_port=HTTPS_PORT, to_port=HTTPS_PORT, cidr_blocks=[ANYWHERE]
            ),
        ],
    )

    ec2_name = resource_name(config.project, config.stack, "ec2-sg")
    ec2_sg = aws.ec2.SecurityGroup(
        ec2_name,
        name=ec2_name,
        description="Allow incoming SSH and TCP",
        vpc_id=vpc.id,
        ingress=[
            aws.ec2.SecurityGroupIngressArgs(
                protocol="tcp", from_port=22, to_port=22, cidr_blocks=[config.my_ip]
            ),
            aws.ec2.SecurityGroupIngressArgs(
                protocol="tcp",
                from_port=config.server_port,
                to_port=config.server_port,
                security_groups=[elb_sg.id],
            ),
        ],
    )

    db_name = resource_name(config.project, config.stack, "db-sg")
    db_sg = aws.ec2.SecurityGroup(
        db_name,
        name=db_name,
        description="Allow access to the PostgreSQL database from the Web Server",
        vpc_id=vpc.id,
        ingress=[
            aws.ec2.SecurityGroupIngressArgs(
                protocol="tcp",
                from_port=POSTGRES_PORT,
                to_port=POSTGRES_PORT,
                security_groups=[ec2_sg.id],
            )
        ],
        opts=pulumi.ResourceOptions(depends_on=[ec2_sg]),
    )

    rules = [
        aws.ec2.SecurityGroupRule(
            "AllowOutboundToEC2",
            type="egress",
            from_port=config.server_port,
            to_port=config.server_port,
            protocol="tcp",
            source_security_group_id=ec2_sg.id,
            security_group_id=elb_sg.id,
        ),
        aws.ec2.SecurityGroupRule(
            "AllowOutboundToDB",
            type="egress",
            from_port=POSTGRES_PORT,
            to_port=POSTGRES_PORT,
            protocol="tcp",
            source_security_group_id=db_sg.id,
            security_group_id=ec2_sg.id,
        ),
        # CloudWatch agent
        aws.ec2.SecurityGroupRule(
            "AllowOutboundToCloudwatch",
            type="egress",
            from_port=HTTPS_PORT,
            to_port=HTTPS_PORT,
            protocol="tcp",
            cidr_blocks=[ANYWHERE],
            security_group_id=ec2_sg.id,
        ),
        aws.ec2.SecurityGroupRule(
            "AllowOutboundToStatsd",
            type="egress",
            from_port=STATSD_PORT,
            to_port=STATSD_PORT,
            protocol="udp",
            cidr_blocks=[ANYWHERE],
            security_group_id=ec2_sg.id,
        ),
    ]

    return SecurityGroups(elb=elb_sg, ec2=ec2_sg, db=db_sg, rules=rules)
