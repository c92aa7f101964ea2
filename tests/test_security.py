"""
Unit tests for the security group and database declarations.
"""

import unittest

from infra_mocks import AVAILABILITY_ZONES, MOCKS, declare, make_config

from src.webapp_infra.database import create_database
from src.webapp_infra.network import create_network
from src.webapp_infra.security import create_security_groups

SECURITY_GROUP_RULE = "aws:ec2/securityGroupRule:SecurityGroupRule"


def _declare_network_and_groups(config):
    network = create_network(config, AVAILABILITY_ZONES)
    security_groups = create_security_groups(config, network.vpc)
    return network, security_groups


class TestSecurityGroups(unittest.TestCase):
    """Test the tiered security group layout."""

    def setUp(self) -> None:
        MOCKS.reset()
        declare(lambda: _declare_network_and_groups(make_config()))

    def test_load_balancer_group_open_to_web(self) -> None:
        elb_sg = MOCKS.find("webapp-dev-elb-sg")
        self.assertEqual(elb_sg["name"], "webapp-dev-elb-sg")
        self.assertEqual(elb_sg["vpcId"], "webapp-dev-vpc_id")
        ports = sorted(rule["fromPort"] for rule in elb_sg["ingress"])
        self.assertEqual(ports, [80, 443])
        for rule in elb_sg["ingress"]:
            self.assertEqual(rule["cidrBlocks"], ["0.0.0.0/0"])

    def test_web_server_group(self) -> None:
        ingress = MOCKS.find("webapp-dev-ec2-sg")["ingress"]
        ssh = next(rule for rule in ingress if rule["fromPort"] == 22)
        self.assertEqual(ssh["cidrBlocks"], ["203.0.113.10/32"])

        app = next(rule for rule in ingress if rule["fromPort"] == 8080)
        self.assertEqual(app["toPort"], 8080)
        self.assertEqual(app["securityGroups"], ["webapp-dev-elb-sg_id"])
        self.assertFalse(app.get("cidrBlocks"))

    def test_database_group_only_admits_web_servers(self) -> None:
        ingress = MOCKS.find("webapp-dev-db-sg")["ingress"]
        self.assertEqual(len(ingress), 1)
        self.assertEqual(ingress[0]["fromPort"], 5432)
        self.assertEqual(ingress[0]["securityGroups"], ["webapp-dev-ec2-sg_id"])

    def test_egress_rules(self) -> None:
        rules = dict(MOCKS.of_type(SECURITY_GROUP_RULE))
        self.assertEqual(
            sorted(rules),
            ["AllowOutboundToCloudwatch", "AllowOutboundToDB", "AllowOutboundToEC2", "AllowOutboundToStatsd"],
        )
        for rule in rules.values():
            self.assertEqual(rule["type"], "egress")

        to_ec2 = rules["AllowOutboundToEC2"]
        self.assertEqual(to_ec2["securityGroupId"], "webapp-dev-elb-sg_id")
        self.assertEqual(to_ec2["sourceSecurityGroupId"], "webapp-dev-ec2-sg_id")
        self.assertEqual(to_ec2["fromPort"], 8080)

        to_db = rules["AllowOutboundToDB"]
        self.assertEqual(to_db["securityGroupId"], "webapp-dev-ec2-sg_id")
        self.assertEqual(to_db["sourceSecurityGroupId"], "webapp-dev-db-sg_id")

        statsd = rules["AllowOutboundToStatsd"]
        self.assertEqual(statsd["protocol"], "udp")
        self.assertEqual(statsd["fromPort"], 8125)
        self.assertEqual(rules["AllowOutboundToCloudwatch"]["cidrBlocks"], ["0.0.0.0/0"])


class TestDatabase(unittest.TestCase):
    """Test the RDS declarations."""

    def setUp(self) -> None:
        MOCKS.reset()

        def program():
            network, security_groups = _declare_network_and_groups(make_config())
            return create_database(make_config(), network, security_groups)

        self.database = declare(program)

    def test_subnet_group_uses_first_two_private_subnets(self) -> None:
        subnet_group = MOCKS.find("webapp-dev-db-pvt-sng")
        self.assertEqual(subnet_group["subnetIds"], ["webapp-dev-pvt-sn-0_id", "webapp-dev-pvt-sn-1_id"])

    def test_parameter_group(self) -> None:
        self.assertEqual(MOCKS.find("webapp-dev-db-pg")["family"], "postgres15")

    def test_instance(self) -> None:
        instance = MOCKS.find("webapp-dev-db", "aws:rds/instance:Instance")
        self.assertEqual(instance["identifier"], "webapp-dev-db")
        self.assertEqual(instance["engine"], "postgres")
        self.assertEqual(instance["instanceClass"], "db.t3.micro")
        self.assertEqual(instance["allocatedStorage"], 20)
        self.assertEqual(instance["dbName"], "webappdb")
        self.assertEqual(instance["username"], "dbuser")
        self.assertEqual(instance["dbSubnetGroupName"], "webapp-dev-db-pvt-sng")
        self.assertEqual(instance["parameterGroupName"], "webapp-dev-db-pg")
        self.assertEqual(instance["availabilityZone"], "us-east-1a")
        self.assertEqual(instance["vpcSecurityGroupIds"], ["webapp-dev-db-sg_id"])
        self.assertFalse(instance["publiclyAccessible"])
        self.assertFalse(instance["multiAz"])
        self.assertTrue(instance["skipFinalSnapshot"])


if __name__ == "__main__":
    unittest.main()
