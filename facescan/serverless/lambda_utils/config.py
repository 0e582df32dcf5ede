"""
Configuration and secrets management utilities for Lambda.
"""

import json
import logging
import os
from typing import Dict
from urllib.parse import quote_plus

import boto3

logger = logging.getLogger(__name__)

REQUIRED_VARS = ("POSTGRES_URL", "DRIVE_API_KEY", "AWS_REGION")


def validate_environment() -> Dict[str, str]:
    """
    Validate required environment variables.

    Returns:
        Dict with required env vars

    Raises:
        ValueError: Missing required environment variable
    """
    env_config = {}
    missing = []

    for var in REQUIRED_VARS:
        value = os.getenv(var)
        if not value:
            missing.append(var)
        else:
            env_config[var] = value

    if missing:
        raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("validate_environment - Environment validated")
    return env_config


def configure_secrets() -> None:
    """
    Fetch secrets from Secrets Manager and update environment.

    1. Replaces 'placeholder' in POSTGRES_URL with the password in DB_SECRET_ARN.
    2. Sets DRIVE_API_KEY from DRIVE_SECRET_ARN.
    """
    db_secret_arn = os.getenv("DB_SECRET_ARN")
    drive_secret_arn = os.getenv("DRIVE_SECRET_ARN")
    if not db_secret_arn and not drive_secret_arn:
        return

    client = boto3.session.Session().client("secretsmanager")

    db_url = os.getenv("POSTGRES_URL", "")
    if "placeholder" in db_url and db_secret_arn:
        try:
            secret = _read_secret(client, db_secret_arn)
            password = secret.get("password")
            if password:
                os.environ["POSTGRES_URL"] = db_url.replace("placeholder", quote_plus(password))
                logger.info("configure_secrets - Updated POSTGRES_URL with secret")
        except Exception as e:  # pylint: disable=broad-except
            logger.error("configure_secrets - Failed to fetch DB secret: %s", e)

    if drive_secret_arn:
        try:
            api_key = _read_secret(client, drive_secret_arn).get("api_key")
            if api_key:
                os.environ["DRIVE_API_KEY"] = api_key
                logger.info("configure_secrets - Set DRIVE_API_KEY from secret")
            else:
                logger.warning("configure_secrets - Drive API key is missing from secret")
        except Exception as e:  # pylint: disable=broad-except
            logger.error("configure_secrets - Failed to fetch Drive API key: %s", e)


def _read_secret(client, secret_arn: str) -> Dict[str, str]:
    response = client.get_secret_value(SecretId=secret_arn)
    return json.loads(response.get("SecretString") or "{}")
