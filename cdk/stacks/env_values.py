"""
Environment values required before any resource is defined.

FILE_ASSETS_BUCKET_NAME is read from the process environment or a .env
file, and must be a non-empty string. The .env lookup starts in the
working directory and walks up its parents, so the root .env is found
when the toolkit runs from cdk/ (where cdk.json lives). A missing
or invalid value raises pydantic.ValidationError so synthesis stops
before the CDK app is created.
"""

import os
import logging
from typing import Mapping

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, StrictStr

logger = logging.getLogger(__name__)

FILE_ASSETS_BUCKET_ENV = "FILE_ASSETS_BUCKET_NAME"


class EnvValues(BaseModel):
    file_assets_bucket_name: StrictStr = Field(min_length=1)


def load_env_values(environ: Mapping[str, str] | None = None) -> EnvValues:
    """Validate the required environment values; raises ValidationError."""
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    values = EnvValues.model_validate(
        {"file_assets_bucket_name": environ.get(FILE_ASSETS_BUCKET_ENV)}
    )
    logger.info(f"Using file assets bucket: {values.file_assets_bucket_name}")
    return values
