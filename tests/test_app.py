"""Tests for the CDK entry point (cdk/app.py)."""

import functools
import json
import runpy
from pathlib import Path
from unittest.mock import MagicMock

import aws_cdk
import pytest
from aws_cdk.assertions import Template
from pydantic import ValidationError

from stacks.env_values import FILE_ASSETS_BUCKET_ENV

from conftest import TEST_CONTEXT

APP_PATH = Path(__file__).parent.parent / "cdk" / "app.py"


def test_missing_bucket_name_aborts_before_app_is_created(clean_env, monkeypatch) -> None:
    app_cls = MagicMock()
    monkeypatch.setattr(aws_cdk, "App", app_cls)

    with pytest.raises(ValidationError):
        runpy.run_path(str(APP_PATH))

    app_cls.assert_not_called()


def test_synthesizes_stack_with_file_assets_bucket(clean_env, monkeypatch) -> None:
    monkeypatch.setenv(FILE_ASSETS_BUCKET_ENV, "app-assets-bucket")
    # the jsii kernel is already running, so context and outdir go in as App arguments
    outdir = clean_env / "cdk.out"
    monkeypatch.setattr(
        aws_cdk, "App", functools.partial(aws_cdk.App, context=TEST_CONTEXT, outdir=str(outdir))
    )

    app_globals = runpy.run_path(str(APP_PATH))

    stack = app_globals["app"].node.find_child("InfraStack")
    assert stack.region == TEST_CONTEXT["region"]

    template = Template.from_stack(stack)
    template.resource_count_is("AWS::EC2::Instance", 2)
    # asset-backed resources point at the configured bucket
    assert "app-assets-bucket" in json.dumps(template.to_json())
    assert (outdir / "InfraStack.template.json").exists()
