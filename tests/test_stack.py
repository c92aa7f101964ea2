"""
Unit tests for stack orchestration and the program entry point.
"""

import unittest
from unittest.mock import MagicMock, patch

from infra_mocks import AMI, MOCKS, declare, make_config

from src.main import run
from src.webapp_infra.core import build_stack
from src.webapp_infra.outputs import export_outputs

EXPECTED_OUTPUTS = [
    "bucketName",
    "dbEndpoint",
    "dynamoDBTableArn",
    "internetGateway",
    "lambdaArn",
    "loadBalancerDns",
    "privateSubnets",
    "publicSubnets",
    "serviceAccountKey",
    "snsTopicArn",
    "vpc",
]


def _ec2_client(zones=("us-east-1a", "us-east-1b", "us-east-1c"), images=(AMI,)):
    ec2_client = MagicMock()
    ec2_client.describe_availability_zones.return_value = {
        "AvailabilityZones": [{"ZoneName": zone, "State": "available"} for zone in zones]
    }
    ec2_client.describe_images.return_value = {"Images": list(images)}
    return ec2_client


class TestBuildStack(unittest.TestCase):
    """Test the full stack declaration."""

    def setUp(self) -> None:
        MOCKS.reset()

    def test_declares_every_resource(self) -> None:
        outputs = declare(lambda: build_stack(make_config(), _ec2_client()))

        self.assertEqual(sorted(outputs), EXPECTED_OUTPUTS)
        self.assertEqual(len(outputs["publicSubnets"]), 3)
        self.assertEqual(len(outputs["privateSubnets"]), 3)

        declared = {name for _, name, _ in MOCKS.resources}
        for name in (
            "webapp-dev-vpc",
            "webapp-dev-db",
            "launch-template",
            "asg",
            "asg-attachment",
            "dns-alias",
            "webapp-dev-bucket",
            "upload-submission-lambda",
        ):
            self.assertIn(name, declared)

    def test_uses_configured_lookups(self) -> None:
        ec2_client = _ec2_client(zones=("us-east-1a", "us-east-1b", "us-east-1c", "us-east-1d"))
        config = make_config(max_allowed_azs=2, ami_owner="self", ami_name_pattern="custom-*")

        declare(lambda: build_stack(config, ec2_client))

        ec2_client.describe_images.assert_called_once()
        self.assertEqual(ec2_client.describe_images.call_args.kwargs["Owners"], ["self"])
        self.assertEqual(MOCKS.find("webapp-dev-pvt-sn-1")["cidrBlock"], "10.0.3.0/24")
        with self.assertRaises(KeyError):
            MOCKS.find("webapp-dev-pub-sn-2")

    @patch("src.webapp_infra.core.create_ec2_client")
    def test_creates_client_for_region(self, mock_create_client: MagicMock) -> None:
        mock_create_client.return_value = _ec2_client()
        declare(lambda: build_stack(make_config(region="us-east-1")))
        mock_create_client.assert_called_once_with("us-east-1")

    def test_missing_ami(self) -> None:
        with self.assertLogs("webapp_infra", level="WARNING"):
            with self.assertRaises(ValueError) as context:
                build_stack(make_config(), _ec2_client(images=()))
        self.assertIn("webapp-ami-*", str(context.exception))
        self.assertEqual(MOCKS.resources, [])

    def test_no_availability_zones(self) -> None:
        with self.assertRaises(ValueError) as context:
            build_stack(make_config(), _ec2_client(zones=()))
        self.assertIn("us-east-1", str(context.exception))


class TestExportOutputs(unittest.TestCase):
    @patch("src.webapp_infra.outputs.pulumi.export")
    def test_exports_each_output(self, mock_export: MagicMock) -> None:
        export_outputs({"vpc": "vpc-123", "bucketName": "webapp-dev-bucket"})
        mock_export.assert_any_call("vpc", "vpc-123")
        mock_export.assert_any_call("bucketName", "webapp-dev-bucket")
        self.assertEqual(mock_export.call_count, 2)


class TestRun(unittest.TestCase):
    """Test the program entry point."""

    @patch("src.main.export_outputs")
    @patch("src.main.build_stack")
    @patch("src.main.load_config")
    def test_run_success(
        self, mock_load_config: MagicMock, mock_build_stack: MagicMock, mock_export: MagicMock
    ) -> None:
        config = make_config()
        mock_load_config.return_value = config
        mock_build_stack.return_value = {"vpc": "vpc-123"}

        run()

        mock_build_stack.assert_called_once_with(config)
        mock_export.assert_called_once_with({"vpc": "vpc-123"})

    @patch("src.main.build_stack")
    @patch("src.main.load_config")
    def test_run_configuration_error(self, mock_load_config: MagicMock, mock_build_stack: MagicMock) -> None:
        mock_load_config.side_effect = ValueError("serverPort must be between 1 and 65535")

        with self.assertLogs("webapp_infra", level="ERROR") as logs:
            with self.assertRaises(ValueError):
                run()

        self.assertIn("Configuration error", logs.output[0])
        mock_build_stack.assert_not_called()


if __name__ == "__main__":
    unittest.main()
