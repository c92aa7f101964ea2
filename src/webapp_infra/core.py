"""
Core stack orchestration logic.

This module contains the main entry point for declaring the stack and wires
each service module's resources into the next.
"""

from typing import Optional

from ..config import StackConfig
from ..utils import setup_logging
from .compute import create_compute
from .database import create_database
from .dns import create_dns_record
from .iam import create_ec2_identity
from .load_balancer import create_load_balancer
from .lookups import create_ec2_client, get_ami, load_availability_zones
from .messaging import create_topic
from .network import create_network
from .outputs import collect_outputs
from .security import create_security_groups
from .serverless import create_serverless
from .storage import create_dynamodb_table, create_gcp_storage
from .types import EC2Client, StackOutputs


def build_stack(config: StackConfig, ec2_client: Optional[EC2Client] = None) -> StackOutputs:
    """
    Declares every resource of the stack.

    This function:
    - Looks up the region's availability zones and the latest web application AMI
    - Declares networking, security groups and the database
    - Declares the SNS topic, IAM roles, load balancer and auto scaling group
    - Declares the DNS alias, GCP storage, DynamoDB table and notification Lambda

    Args:
        config: Validated stack configuration
        ec2_client: Boto3 EC2 client for the lookups (created for config.region if omitted)

    Returns:
        Dictionary of stack outputs keyed by export name

    Raises:
        ValueError: If the lookups return nothing usable
    """
    logger = setup_logging(config.log_level)
    logger.info(f"Declaring stack {config.prefix} in {config.region}")

    ec2_client = ec2_client or create_ec2_client(config.region)

    # Step 1: Read-only lookups; failures are logged and yield empty results
    availability_zones = load_availability_zones(ec2_client, config.max_allowed_azs)
    ami = get_ami(ec2_client, [config.ami_owner], config.ami_name_pattern)
    if ami is None:
        raise ValueError(
            f"No AMI found for owner {config.ami_owner} matching '{config.ami_name_pattern}'"
        )
    if not availability_zones and not config.public_subnets:
        raise ValueError(f"No availability zones available in {config.region}")

    # Step 2: Network, security and data tier
    network = create_network(config, availability_zones)
    security_groups = create_security_groups(config, network.vpc)
    database = create_database(config, network, security_groups)

    # Step 3: Web tier
    topic = create_topic(config)
    identity = create_ec2_identity(config, topic)
    load_balancer = create_load_balancer(config, network, security_groups)
    create_compute(
        config,
        ami,
        identity,
        network,
        security_groups,
        load_balancer,
        database,
        topic,
    )
    create_dns_record(config, load_balancer)

    # Step 4: Notification pipeline
    storage = create_gcp_storage(config)
    table = create_dynamodb_table(config)
    serverless = create_serverless(config, topic, table, storage)

    outputs = collect_outputs(network, database, load_balancer, topic, table, storage, serverless)
    logger.info(f"Declared stack {config.prefix} with {len(outputs)} outputs")
    return outputs
