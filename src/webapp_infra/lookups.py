"""
AWS Lookup Module.

This module contains the read-only lookups the stack performs before declaring
any resources: the availability zones of the target region and the most recent
web application AMI. Failures are logged and turned into empty results; the
caller decides whether the stack can still be declared.
"""

from typing import List, Optional

import boto3

from ..utils import get_logger, lookup_error_handler
from .types import AmiData, EC2Client

logger = get_logger()


def create_ec2_client(region_name: str) -> EC2Client:
    """Creates the boto3 EC2 client used by the lookups."""
    return boto3.client("ec2", region_name=region_name)


@lookup_error_handler(default=[])
def load_availability_zones(ec2_client: EC2Client, max_allowed_azs: int) -> List[str]:
    """
    Fetch the available zones of the client's region.

    Args:
        ec2_client: Boto3 EC2 client
        max_allowed_azs: Upper bound on the number of zones returned

    Returns:
        Zone names in the order AWS reports them, at most ``max_allowed_azs`` long
    """
    response = ec2_client.describe_availability_zones(
        Filters=[{"Name": "state", "Values": ["available"]}]
    )
    names = [zone["ZoneName"] for zone in response.get("AvailabilityZones", [])]
    azs = names[: min(len(names), max_allowed_azs)]
    logger.info(f"Using availability zones: {azs}")
    return azs


@lookup_error_handler(default=None)
def get_ami(
    ec2_client: EC2Client, owners: List[str], name_pattern: str
) -> Optional[AmiData]:
    """
    Find the most recent available AMI owned by ``owners`` whose name matches
    ``name_pattern``. Returns None when no image matches.
    """
    response = ec2_client.describe_images(
        Owners=owners,
        Filters=[
            {"Name": "name", "Values": [name_pattern]},
            {"Name": "state", "Values": ["available"]},
        ],
    )
    images = response.get("Images", [])
    if not images:
        logger.warning(f"No available AMI matches '{name_pattern}' for owners {owners}")
        return None

    ami = max(images, key=lambda image: image.get("CreationDate", ""))
    logger.info(f"Using AMI {ami['ImageId']} ({ami.get('Name', '')})")
    return ami
