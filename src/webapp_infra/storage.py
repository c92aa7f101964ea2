"""
Storage Module.

This module contains the stores the notification Lambda writes to:

- a GCS bucket (plus the GCP service account and key used to reach it)
- a DynamoDB table recording each delivery
"""

import pulumi
import pulumi_aws as aws
import pulumi_gcp as gcp

from ..config import StackConfig
from ..utils import decode_base64, resource_name
from .types import GcpStorage

SERVICE_ACCOUNT_ID = "csye6225-webapp"
BUCKET_ROLE = "roles/storage.objectAdmin"


def create_gcp_storage(config: StackConfig) -> GcpStorage:
    """
    Declare the service account, its key, the bucket and the bucket binding.

    The key's private key is exposed decoded (the JSON credentials file) and
    marked secret.
    """
    service_account = gcp.serviceaccount.Account(
        "gcpcli",
        account_id=SERVICE_ACCOUNT_ID,
        display_name=resource_name(config.project, config.stack, "gcp-sa"),
        project=config.gcp_project,
    )

    service_account_key = gcp.serviceaccount.Key(
        "account-key",
        service_account_id=service_account.name,
        key_algorithm="KEY_ALG_RSA_2048",
        public_key_type="TYPE_X509_PEM_FILE",
        private_key_type="TYPE_GOOGLE_CREDENTIALS_FILE",
    )

    bucket_name = resource_name(config.project, config.stack, "bucket")
    bucket = gcp.storage.Bucket(
        bucket_name,
        name=bucket_name,
        location=config.bucket_location,
        uniform_bucket_level_access=True,
        force_destroy=True,
        project=config.gcp_project,
        public_access_prevention="enforced",
        versioning=gcp.storage.BucketVersioningArgs(enabled=True),
        storage_class="STANDARD",
    )

    gcp.storage.BucketIAMBinding(
        "objectAdminPermission",
        bucket=bucket.name,
        members=[pulumi.Output.concat("serviceAccount:", service_account.email)],
        role=BUCKET_ROLE,
    )

    private_key = pulumi.Output.secret(service_account_key.private_key.apply(decode_base64))

    return GcpStorage(
        service_account=service_account,
        service_account_key=service_account_key,
        bucket=bucket,
        private_key=private_key,
    )


def create_dynamodb_table(config: StackConfig) -> aws.dynamodb.Table:
    return aws.dynamodb.Table(
        resource_name(config.project, config.stack, "dynamodb"),
        name=config.dynamodb_table_name,
        attributes=[
            aws.dynamodb.TableAttributeArgs(name="id", type="S"),
            aws.dynamodb.TableAttributeArgs(name="timestamp", type="N"),
        ],
        billing_mode="PAY_PER_REQUEST",
        hash_key="id",
        range_key="timestamp",
    )
