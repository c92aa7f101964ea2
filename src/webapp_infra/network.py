"""
Network Module.

Declares the VPC, its internet gateway, one public and one private subnet per
availability zone, and the public/private route tables the subnets use.
"""

import ipaddress
from itertools import islice
from typing import List, Tuple

import pulumi_aws as aws

from ..config import StackConfig, SubnetSpec
from ..utils import generate_tags, get_logger, resource_name
from .types import Network

logger = get_logger()

SUBNET_PREFIX_LENGTH = 24


def derive_subnet_specs(
    vpc_cidr_block: str, availability_zones: List[str]
) -> Tuple[List[SubnetSpec], List[SubnetSpec]]:
    """
    Carve one public and one private /24 per zone out of the VPC block.

    Public subnet i takes the i-th /24 of the VPC; private subnet i takes the
    (i + n)-th, where n is the number of zones.

    Raises:
        ValueError: If the VPC block cannot hold 2 * n /24 subnets
    """
    count = len(availability_zones)
    network = ipaddress.ip_network(vpc_cidr_block)
    if network.prefixlen > SUBNET_PREFIX_LENGTH:
        raise ValueError(
            f"vpcCidrBlock {vpc_cidr_block} is smaller than a /{SUBNET_PREFIX_LENGTH} subnet"
        )

    blocks = [str(block) for block in islice(network.subnets(new_prefix=SUBNET_PREFIX_LENGTH), 2 * count)]
    if len(blocks) < 2 * count:
        raise ValueError(
            f"vpcCidrBlock {vpc_cidr_block} cannot hold {2 * count} /{SUBNET_PREFIX_LENGTH} subnets"
        )

    public = [SubnetSpec(str(i), az, blocks[i]) for i, az in enumerate(availability_zones)]
    private = [SubnetSpec(str(i), az, blocks[i + count]) for i, az in enumerate(availability_zones)]
    return public, private


def _create_subnets(
    config: StackConfig, vpc: aws.ec2.Vpc, specs: List[SubnetSpec], kind: str
) -> List[aws.ec2.Subnet]:
    subnets = []
    for spec in specs:
        short_name = f"{kind}-sn-{spec.name}"
        subnets.append(
            aws.ec2.Subnet(
                resource_name(config.project, config.stack, short_name),
                vpc_id=vpc.id,
                availability_zone=spec.az,
                cidr_block=spec.cidr,
                tags=generate_tags(config.project, config.stack, short_name),
            )
        )
    return subnets


def create_network(config: StackConfig, availability_zones: List[str]) -> Network:
    """
    Declare the VPC and everything routing-related inside it.

    Explicit subnet layouts from configuration take precedence over layouts
    derived from ``availability_zones``.

    Raises:
        ValueError: If fewer than two public or two private subnets would be created
    """
    if config.public_subnets or config.private_subnets:
        public_specs, private_specs = config.public_subnets, config.private_subnets
        logger.info("Using explicit subnet layout from configuration")
    else:
        public_specs, private_specs = derive_subnet_specs(config.vpc_cidr_block, availability_zones)

    if len(public_specs) < 2 or len(private_specs) < 2:
        raise ValueError(
            "At least two public and two private subnets are required, got "
            f"{len(public_specs)} public and {len(private_specs)} private"
        )

    vpc = aws.ec2.Vpc(
        resource_name(config.project, config.stack, "vpc"),
        cidr_block=config.vpc_cidr_block,
        tags=generate_tags(config.project, config.stack, "vpc"),
    )

    internet_gateway = aws.ec2.InternetGateway(
        resource_name(config.project, config.stack, "ig"),
        vpc_id=vpc.id,
        tags=generate_tags(config.project, config.stack, "ig"),
    )

    public_subnets = _create_subnets(config, vpc, public_specs, "pub")
    private_subnets = _create_subnets(config, vpc, private_specs, "pvt")

    public_route_table = aws.ec2.RouteTable(
        resource_name(config.project, config.stack, "pub-rtable"),
        vpc_id=vpc.id,
        routes=[
            aws.ec2.RouteTableRouteArgs(
                cidr_block="0.0.0.0/0",
                gateway_id=internet_gateway.id,
            )
        ],
        tags=generate_tags(config.project, config.stack, "pub-rtable"),
    )

    for index, subnet in enumerate(public_subnets):
        aws.ec2.RouteTableAssociation(
            f"pubRouteTableAssoc-{index}",
            subnet_id=subnet.id,
            route_table_id=public_route_table.id,
        )

    # Private subnets only get the implicit local route
    private_route_table = aws.ec2.RouteTable(
        resource_name(config.project, config.stack, "pvt-rtable"),
        vpc_id=vpc.id,
        tags=generate_tags(config.project, config.stack, "pvt-rtable"),
    )

    for index, subnet in enumerate(private_subnets):
        aws.ec2.RouteTableAssociation(
            f"pvtRouteTableAssoc-{index}",
            subnet_id=subnet.id,
            route_table_id=private_route_table.id,
        )

    return Network(
        vpc=vpc,
        internet_gateway=internet_gateway,
        public_subnets=public_subnets,
        private_subnets=private_subnets,
        public_route_table=public_route_table,
        private_route_table=private_route_table,
        availability_zones=list(dict.fromkeys(spec.az for spec in private_specs + public_specs)),
    )
