"""Shared fixtures: a synthesized InfraStack and a clean environment."""

import aws_cdk as cdk
import pytest
from aws_cdk.assertions import Template

from stacks.env_values import FILE_ASSETS_BUCKET_ENV
from stacks.infra_stack import InfraStack

TEST_CONTEXT = {"instanceType": "t3.micro", "region": "ap-northeast-1"}
TEST_ASSETS_BUCKET = "test-file-assets-bucket"


@pytest.fixture(scope="module")
def stack():
    app = cdk.App(context=TEST_CONTEXT)
    return InfraStack(
        app,
        "InfraStack",
        synthesizer=cdk.DefaultStackSynthesizer(file_assets_bucket_name=TEST_ASSETS_BUCKET),
        env=cdk.Environment(region=TEST_CONTEXT["region"]),
    )


@pytest.fixture(scope="module")
def template(stack):
    return Template.from_stack(stack)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No bucket variable in the environment and no .env in the working directory."""
    # setenv first so the variable is removed again on teardown
    monkeypatch.setenv(FILE_ASSETS_BUCKET_ENV, "placeholder")
    monkeypatch.delenv(FILE_ASSETS_BUCKET_ENV)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def aws_credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
