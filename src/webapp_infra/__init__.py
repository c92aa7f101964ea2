"""
Web Application Infrastructure Package.

This package declares the cloud resources for the web application as a Pulumi
resource graph. It covers AWS networking (VPC, subnets, route tables, security
groups), an RDS PostgreSQL database, an auto-scaled EC2 fleet behind an
application load balancer with a Route 53 alias, and a notification pipeline
(SNS, Lambda, DynamoDB) that stores submissions in a GCS bucket.

The declaration process:
1. Looks up availability zones and the latest web application AMI
2. Declares each service's resources, passing attributes between them
3. Returns the stack outputs for export
"""

from .core import build_stack

__all__ = ['build_stack']
