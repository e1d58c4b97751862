"""
Client contract setup step for the validator node installer.

Stages the client contract sources, points the migration at the operator
contract and job, runs the deployment toolchain and records the deployed
address for later installer steps.
"""

__version__ = "0.1.0"
