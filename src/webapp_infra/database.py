"""
RDS Module.

This module declares the PostgreSQL instance backing the web application and
the subnet/parameter groups it needs.
"""

import pulumi_aws as aws

from ..config import StackConfig
from ..utils import generate_tags, resource_name
from .types import Database, Network, SecurityGroups

DB_ENGINE = "postgres"
DB_PARAMETER_FAMILY = "postgres15"
DB_INSTANCE_CLASS = "db.t3.micro"
DB_ALLOCATED_STORAGE = 20


def create_database(
    config: StackConfig, network: Network, security_groups: SecurityGroups
) -> Database:
    """
    Declare the RDS instance in the first two private subnets.

    The instance is single-AZ, placed in the zone of the first private subnet,
    and is destroyed without a final snapshot.
    """
    subnet_group_name = resource_name(config.project, config.stack, "db-pvt-sng")
    subnet_group = aws.rds.SubnetGroup(
        subnet_group_name,
        name=subnet_group_name,
        description="Subnet group for the RDS instance",
        subnet_ids=[subnet.id for subnet in network.private_subnets[:2]],
    )

    parameter_group_name = resource_name(config.project, config.stack, "db-pg")
    parameter_group = aws.rds.ParameterGroup(
        parameter_group_name,
        name=parameter_group_name,
        family=DB_PARAMETER_FAMILY,
    )

    identifier = resource_name(config.project, config.stack, "db")
    instance = aws.rds.Instance(
        identifier,
        identifier=identifier,
        db_name=config.rds_db,
        allocated_storage=DB_ALLOCATED_STORAGE,
        instance_class=DB_INSTANCE_CLASS,
        parameter_group_name=parameter_group.name,
        engine=DB_ENGINE,
        username=config.rds_user,
        password=config.rds_password,
        db_subnet_group_name=subnet_group.name,
        publicly_accessible=False,
        multi_az=False,
        availability_zone=network.availability_zones[0],
        vpc_security_group_ids=[security_groups.db.id],
        skip_final_snapshot=True,
        delete_automated_backups=True,
        deletion_protection=False,
        tags=generate_tags(config.project, config.stack, "db"),
    )

    return Database(subnet_group=subnet_group, parameter_group=parameter_group, instance=instance)
