#!/usr/bin/env python3
import logging

import aws_cdk as cdk
from stacks.env_values import load_env_values
from stacks.infra_stack import InfraStack

logging.basicConfig(level=logging.INFO)

# Fails before any construct exists if FILE_ASSETS_BUCKET_NAME is missing
env_values = load_env_values()

app = cdk.App()

InfraStack(
    app,
    "InfraStack",
    description="Node.js app infrastructure: S3, VPC, EC2, CodeCommit/CodeBuild/CodeDeploy pipeline",
    synthesizer=cdk.DefaultStackSynthesizer(
        file_assets_bucket_name=env_values.file_assets_bucket_name,
    ),
    env=cdk.Environment(
        account=app.node.try_get_context("account"),
        region=app.node.try_get_context("region"),
    ),
)

app.synth()
