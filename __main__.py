"""
Pulumi entry point for the webapp infrastructure stack.

Run with the Pulumi CLI from this directory:
    pulumi preview --stack dev
    pulumi up --stack dev
"""

from src.main import run

run()
