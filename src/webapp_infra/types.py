"""
Type definitions for the webapp infrastructure program.

Resource groupings returned by each builder module, so the orchestration in
``core`` can pass declared resources from one service to the next.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

import pulumi
import pulumi_aws as aws
import pulumi_gcp as gcp

# boto3 clients are generated at runtime and ship no static types
EC2Client = Any

AmiData = Dict[str, Any]
StackOutputs = Dict[str, pulumi.Input[Any]]


@dataclass
class Network:
    vpc: aws.ec2.Vpc
    internet_gateway: aws.ec2.InternetGateway
    public_subnets: List[aws.ec2.Subnet]
    private_subnets: List[aws.ec2.Subnet]
    public_route_table: aws.ec2.RouteTable
    private_route_table: aws.ec2.RouteTable
    availability_zones: List[str]


@dataclass
class SecurityGroups:
    elb: aws.ec2.SecurityGroup
    ec2: aws.ec2.SecurityGroup
    db: aws.ec2.SecurityGroup
    rules: List[aws.ec2.SecurityGroupRule]


@dataclass
class Database:
    subnet_group: aws.rds.SubnetGroup
    parameter_group: aws.rds.ParameterGroup
    instance: aws.rds.Instance


@dataclass
class Ec2Identity:
    role: aws.iam.Role
    instance_profile: aws.iam.InstanceProfile


@dataclass
class LoadBalancer:
    alb: aws.lb.LoadBalancer
    target_group: aws.lb.TargetGroup
    listener: aws.lb.Listener


@dataclass
class Compute:
    launch_template: aws.ec2.LaunchTemplate
    auto_scaling_group: aws.autoscaling.Group
    scale_up_policy: aws.autoscaling.Policy
    scale_down_policy: aws.autoscaling.Policy
    scale_up_alarm: aws.cloudwatch.MetricAlarm
    scale_down_alarm: aws.cloudwatch.MetricAlarm


@dataclass
class GcpStorage:
    service_account: gcp.serviceaccount.Account
    service_account_key: gcp.serviceaccount.Key
    bucket: gcp.storage.Bucket
    private_key: pulumi.Output[str]


@dataclass
class Serverless:
    role: aws.iam.Role
    function: aws.lambda_.Function
    subscription: aws.sns.TopicSubscription
