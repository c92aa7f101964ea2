"""
Configuration loader for the webapp infrastructure stack.
"""

import ipaddress
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

import pulumi

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class SubnetSpec(NamedTuple):
    """A subnet to declare: logical name, availability zone and CIDR block."""

    name: str
    az: str
    cidr: str


@dataclass
class StackConfig:
    """Configuration class for the webapp stack."""

    project: str
    stack: str
    region: str
    vpc_cidr_block: str
    my_ip: str
    server_port: int
    ec2_key_pair: str
    ec2_instance_type: str
    ebs_volume_size: int
    ebs_volume_type: str
    rds_db: str
    rds_user: str
    rds_password: pulumi.Input[str]
    app_user: str
    app_password: pulumi.Input[str]
    app_group: str
    hosted_zone: str
    access_keys: pulumi.Input[str]
    dynamodb_table_name: str
    email_api_key: pulumi.Input[str]
    gcp_project: str
    bucket_location: str
    max_allowed_azs: int = 3
    ami_owner: str = "253323498692"
    ami_name_pattern: str = "webapp-ami-*"
    asg_min_size: int = 1
    asg_max_size: int = 3
    asg_desired_capacity: int = 1
    lambda_code_path: str = "../serverless"
    email_domain: Optional[str] = None
    log_level: str = "INFO"
    public_subnets: List[SubnetSpec] = field(default_factory=list)
    private_subnets: List[SubnetSpec] = field(default_factory=list)

    @property
    def prefix(self) -> str:
        """Prefix shared by every resource name in the stack."""
        return f"{self.project}-{self.stack}"


def _get_int(config: pulumi.Config, key: str, default: int) -> int:
    value = config.get_int(key)
    return default if value is None else value


def parse_subnet_specs(raw: Optional[list], key: str) -> List[SubnetSpec]:
    """
    Parses an explicit subnet layout of the form ``[{"<name>": {"az": ..., "cidr": ...}}]``.

    Raises:
        ValueError: If an entry is not a single-key mapping with 'az' and 'cidr'
    """
    specs: List[SubnetSpec] = []
    for entry in raw or []:
        if not isinstance(entry, dict) or len(entry) != 1:
            raise ValueError(f"{key} entries must be single-key objects, got {entry!r}")
        name, body = next(iter(entry.items()))
        if not isinstance(body, dict) or "az" not in body or "cidr" not in body:
            raise ValueError(f"{key} entry '{name}' must define 'az' and 'cidr'")
        specs.append(SubnetSpec(name=str(name), az=body["az"], cidr=body["cidr"]))
    return specs


def validate_config(config: StackConfig) -> None:
    """
    Validates cross-field constraints of a loaded configuration.

    Raises:
        ValueError: If any setting is out of range or inconsistent
    """
    try:
        vpc_network = ipaddress.ip_network(config.vpc_cidr_block)
    except ValueError as e:
        raise ValueError(f"vpcCidrBlock is not a valid CIDR block: {e}")

    # Security group rules need an explicit prefix length, e.g. 203.0.113.10/32
    if "/" not in config.my_ip:
        raise ValueError(f"myIp must be a CIDR block such as {config.my_ip}/32, got {config.my_ip!r}")
    try:
        ipaddress.ip_network(config.my_ip)
    except ValueError as e:
        raise ValueError(f"myIp is not a valid CIDR block: {e}")

    for spec in config.public_subnets + config.private_subnets:
        try:
            subnet = ipaddress.ip_network(spec.cidr)
        except ValueError as e:
            raise ValueError(f"Subnet '{spec.name}' has an invalid CIDR block: {e}")
        if not subnet.subnet_of(vpc_network):
            raise ValueError(
                f"Subnet '{spec.name}' ({spec.cidr}) is outside vpcCidrBlock {config.vpc_cidr_block}"
            )

    if not 1 <= config.server_port <= 65535:
        raise ValueError(f"serverPort must be between 1 and 65535, got {config.server_port}")

    explicit_layout = bool(config.public_subnets or config.private_subnets)
    if not explicit_layout and config.max_allowed_azs < 2:
        raise ValueError("maxAllowedAzs must be at least 2 (RDS and the ASG span two zones)")

    if not (config.asg_min_size <= config.asg_desired_capacity <= config.asg_max_size):
        raise ValueError(
            "Auto scaling sizes must satisfy asgMinSize <= asgDesiredCapacity <= asgMaxSize"
        )

    if config.log_level.upper() not in LOG_LEVELS:
        raise ValueError(f"logLevel must be one of {', '.join(LOG_LEVELS)}")


def load_config() -> StackConfig:
    """
    Loads and validates configuration for the stack from Pulumi config.

    Returns:
        StackConfig object with validated settings

    Raises:
        ValueError: If required configuration is invalid
        pulumi.ConfigMissingError: If a required key is not set
    """
    config = pulumi.Config()
    aws_config = pulumi.Config("aws")
    gcp_config = pulumi.Config("gcp")

    hosted_zone = config.require("hostedZone")
    bucket_location = (
        config.get("bucketLocation") or gcp_config.get("region") or gcp_config.require("zone")
    )

    stack_config = StackConfig(
        project=config.require("project"),
        stack=pulumi.get_stack(),
        region=aws_config.require("region"),
        vpc_cidr_block=config.require("vpcCidrBlock"),
        my_ip=config.require("myIp"),
        server_port=config.require_int("serverPort"),
        ec2_key_pair=config.require("ec2Keypair"),
        ec2_instance_type=config.require("ec2InstanceType"),
        ebs_volume_size=config.require_int("ebsVolumeSize"),
        ebs_volume_type=config.require("ebsVolumeType"),
        rds_db=config.require("rdsDB"),
        rds_user=config.require("rdsUser"),
        rds_password=config.require_secret("rdsPassword"),
        app_user=config.require("appUser"),
        app_password=config.require_secret("appPassword"),
        app_group=config.require("appGroup"),
        hosted_zone=hosted_zone,
        access_keys=config.require_secret("accessKeys"),
        dynamodb_table_name=config.require("dynamodbTableName"),
        email_api_key=config.require_secret("emailApiKey"),
        gcp_project=gcp_config.require("project"),
        bucket_location=bucket_location,
        max_allowed_azs=_get_int(config, "maxAllowedAzs", 3),
        ami_owner=config.get("amiOwner") or "253323498692",
        ami_name_pattern=config.get("amiNamePattern") or "webapp-ami-*",
        asg_min_size=_get_int(config, "asgMinSize", 1),
        asg_max_size=_get_int(config, "asgMaxSize", 3),
        asg_desired_capacity=_get_int(config, "asgDesiredCapacity", 1),
        lambda_code_path=config.get("lambdaCodePath") or "../serverless",
        email_domain=config.get("emailDomain") or hosted_zone,
        log_level=config.get("logLevel") or "INFO",
        public_subnets=parse_subnet_specs(
            config.get_object("publicSubnetCidrBlocks"), "publicSubnetCidrBlocks"
        ),
        private_subnets=parse_subnet_specs(
            config.get_object("privateSubnetCidrBlocks"), "privateSubnetCidrBlocks"
        ),
    )

    validate_config(stack_config)
    return stack_config
