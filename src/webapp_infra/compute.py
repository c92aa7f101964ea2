"""
Compute Module.

This module declares the launch template the web servers boot from, the auto
scaling group that runs them behind the load balancer, and the CPU-driven
scaling policies and alarms.

The instances are configured entirely through user data: the script writes the
application's environment file, starts the CloudWatch agent and restarts the
application service baked into the AMI.
"""

import pulumi
import pulumi_aws as aws

from ..config import StackConfig
from ..utils import encode_base64, resource_name
from .types import (
    AmiData,
    Compute,
    Database,
    Ec2Identity,
    LoadBalancer,
    Network,
    SecurityGroups,
)

APP_SERVICE = "webapp.service"
APP_DIR = "/var/www/webapp"
ENV_FILE = "/opt/.env.prod"
CLOUDWATCH_AGENT_CONFIG = "/opt/aws/amazon-cloudwatch-agent/bin/config.json"
DEFAULT_ROOT_DEVICE = "/dev/xvda"

SCALING_COOLDOWN = 60
SCALE_UP_CPU_THRESHOLD = 5
SCALE_DOWN_CPU_THRESHOLD = 3


def render_user_data(
    config: StackConfig,
    db_endpoint: str,
    sns_topic_arn: str,
    rds_password: str,
    app_password: str,
) -> str:
    """
    Render the boot script for a web server.

    Args:
        config: Stack configuration
        db_endpoint: RDS endpoint in ``host:port`` form
        sns_topic_arn: ARN of the topic the application publishes to
        rds_password: Database password (secret)
        app_password: Application user password (secret)

    Returns:
        The bash script, unencoded
    """
    return f"""#!/bin/bash
# Set your app-specific values
RDS_ENDPOINT={db_endpoint}
RDS_DB={config.rds_db}
RDS_USER={config.rds_user}
RDS_PASSWORD={rds_password}
SERVER_PORT={config.server_port}
APP_USER={config.app_user}
APP_USER_PASSWORD={app_password}
APP_GROUP={config.app_group}
APP_DIR="{APP_DIR}"
ENV_DIR="{ENV_FILE}"
AWS_REGION={config.region}
SNS_TOPIC_ARN={sns_topic_arn}

# Change ENV owner and permissions
sudo touch $ENV_DIR
sudo chown $APP_USER:$APP_GROUP $ENV_DIR
sudo chmod 660 $ENV_DIR

# Add ENV variables
sudo echo SERVER_PORT=$SERVER_PORT >> $ENV_DIR
sudo echo POSTGRES_DB=$RDS_DB >> $ENV_DIR
sudo echo POSTGRES_USER=$RDS_USER >> $ENV_DIR
sudo echo POSTGRES_PASSWORD=$RDS_PASSWORD >> $ENV_DIR
sudo echo POSTGRES_URI=$(echo $RDS_ENDPOINT | cut -d':' -f 1) >> $ENV_DIR
sudo echo FILEPATH=$APP_DIR/deployment/user.csv >> $ENV_DIR
sudo echo SNS_REGION=$AWS_REGION >> $ENV_DIR
sudo echo SNS_TOPIC_ARN=$SNS_TOPIC_ARN >> $ENV_DIR

# Start cloudwatch service
sudo /opt/aws/amazon-cloudwatch-agent/bin/amazon-cloudwatch-agent-ctl -a fetch-config -m ec2 -c file:{CLOUDWATCH_AGENT_CONFIG} -s

# Restart systemd service
sudo systemctl restart {APP_SERVICE}
"""


def user_data_output(
    config: StackConfig, database: Database, topic: aws.sns.Topic
) -> pulumi.Output[str]:
    """User data script, base64-encoded, once the endpoint and topic ARN are known."""
    return pulumi.Output.all(
        database.instance.endpoint,
        topic.arn,
        config.rds_password,
        config.app_password,
    ).apply(lambda args: encode_base64(render_user_data(config, *args)))


def create_launch_template(
    config: StackConfig,
    ami: AmiData,
    identity: Ec2Identity,
    security_groups: SecurityGroups,
    user_data: pulumi.Input[str],
) -> aws.ec2.LaunchTemplate:
    return aws.ec2.LaunchTemplate(
        "launch-template",
        name=resource_name(config.project, config.stack, "lt"),
        instance_type=config.ec2_instance_type,
        image_id=ami["ImageId"],
        iam_instance_profile=aws.ec2.LaunchTemplateIamInstanceProfileArgs(
            name=identity.instance_profile.name,
        ),
        key_name=config.ec2_key_pair,
        disable_api_termination=False,
        network_interfaces=[
            aws.ec2.LaunchTemplateNetworkInterfaceArgs(
                associate_public_ip_address="true",
                security_groups=[security_groups.ec2.id],
            )
        ],
        user_data=user_data,
        block_device_mappings=[
            aws.ec2.LaunchTemplateBlockDeviceMappingArgs(
                device_name=ami.get("RootDeviceName") or DEFAULT_ROOT_DEVICE,
                ebs=aws.ec2.LaunchTemplateBlockDeviceMappingEbsArgs(
                    volume_size=config.ebs_volume_size,
                    volume_type=config.ebs_volume_type,
                    delete_on_termination="true",
                ),
            )
        ],
    )


def _scaling_alarm(
    name: str,
    alarm_name: str,
    description: str,
    comparison_operator: str,
    threshold: int,
    policy: aws.autoscaling.Policy,
    group: aws.autoscaling.Group,
) -> aws.cloudwatch.MetricAlarm:
    return aws.cloudwatch.MetricAlarm(
        name,
        name=alarm_name,
        alarm_description=description,
        comparison_operator=comparison_operator,
        evaluation_periods=1,
        metric_name="CPUUtilization",
        namespace="AWS/EC2",
        period=60,
        statistic="Average",
        threshold=threshold,
        alarm_actions=[policy.arn],
        dimensions={"AutoScalingGroupName": group.name},
    )


def create_compute(
    config: StackConfig,
    ami: AmiData,
    identity: Ec2Identity,
    network: Network,
    security_groups: SecurityGroups,
    load_balancer: LoadBalancer,
    database: Database,
    topic: aws.sns.Topic,
) -> Compute:
    """Declare the launch template, auto scaling group and its scaling rules."""
    launch_template = create_launch_template(
        config,
        ami,
        identity,
        security_groups,
        user_data_output(config, database, topic),
    )

    group = aws.autoscaling.Group(
        "asg",
        max_size=config.asg_max_size,
        min_size=config.asg_min_size,
        desired_capacity=config.asg_desired_capacity,
        vpc_zone_identifiers=[subnet.id for subnet in network.public_subnets[:2]],
        launch_template=aws.autoscaling.GroupLaunchTemplateArgs(
            id=launch_template.id,
            version="$Latest",
        ),
        default_cooldown=SCALING_COOLDOWN,
        tags=[
            aws.autoscaling.GroupTagArgs(
                key="Name",
                value=resource_name(config.project, config.stack, "ec2"),
                propagate_at_launch=True,
            )
        ],
    )

    # Registration lives here only; do not also set target_group_arns on the group
    aws.autoscaling.Attachment(
        "asg-attachment",
        lb_target_group_arn=load_balancer.target_group.arn,
        autoscaling_group_name=group.name,
    )

    scale_down_policy = aws.autoscaling.Policy(
        "scaledown-policy",
        adjustment_type="ChangeInCapacity",
        cooldown=SCALING_COOLDOWN,
        autoscaling_group_name=group.name,
        scaling_adjustment=-1,
    )

    scale_up_policy = aws.autoscaling.Policy(
        "scaleup-policy",
        adjustment_type="ChangeInCapacity",
        cooldown=SCALING_COOLDOWN,
        autoscaling_group_name=group.name,
        scaling_adjustment=1,
    )

    scale_down_alarm = _scaling_alarm(
        "scaledown-alarm",
        resource_name(config.project, config.stack, "ScaleDownAlarm"),
        f"Scale down when CPU utilization is at or below {SCALE_DOWN_CPU_THRESHOLD}%",
        "LessThanOrEqualToThreshold",
        SCALE_DOWN_CPU_THRESHOLD,
        scale_down_policy,
        group,
    )

    scale_up_alarm = _scaling_alarm(
        "scaleup-alarm",
        resource_name(config.project, config.stack, "ScaleUpAlarm"),
        f"Scale up when CPU utilization is at or above {SCALE_UP_CPU_THRESHOLD}%",
        "GreaterThanOrEqualToThreshold",
        SCALE_UP_CPU_THRESHOLD,
        scale_up_policy,
        group,
    )

    return Compute(
        launch_template=launch_template,
        auto_scaling_group=group,
        scale_up_policy=scale_up_policy,
        scale_down_policy=scale_down_policy,
        scale_up_alarm=scale_up_alarm,
        scale_down_alarm=scale_down_alarm,
    )
