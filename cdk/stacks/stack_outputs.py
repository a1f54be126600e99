"""
Stack outputs reader — infra-outputs

Prints the CloudFormation outputs of the deployed stack (bucket name,
VPC id, security group id, instance ids) as JSON, for operators or for
copying into another pipeline.

Error handling:
  - CloudFormation errors (stack missing, no credentials) are logged and re-raised
  - A stack without outputs yields an empty object
"""

import argparse
import json
import logging

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

DEFAULT_STACK_NAME = "InfraStack"


def fetch_stack_outputs(stack_name: str, client=None) -> dict[str, str]:
    """Return {OutputKey: OutputValue} for a deployed stack."""
    client = client or boto3.client("cloudformation")

    try:
        response = client.describe_stacks(StackName=stack_name)
    except ClientError as e:
        logger.critical(f"Failed to describe stack {stack_name}: {e}")
        raise

    stacks = response.get("Stacks", [])
    if not stacks:
        return {}

    outputs = {o["OutputKey"]: o["OutputValue"] for o in stacks[0].get("Outputs", [])}
    logger.info(f"{stack_name}: {len(outputs)} outputs")
    return outputs


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Print the outputs of the deployed infrastructure stack")
    parser.add_argument("--stack-name", default=DEFAULT_STACK_NAME)
    parser.add_argument("--region", default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    client = boto3.client("cloudformation", region_name=args.region)
    outputs = fetch_stack_outputs(args.stack_name, client=client)
    print(json.dumps(outputs, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
