import boto3
from django.conf import settings

import logging

logger = logging.getLogger("edulearn")


def get_aws_client(service_name):
    """
    Build a boto3 client for ``service_name`` ("s3", "ses").

    Outside development the default credential chain is tried first (instance
    role, environment). Development, or a failed default chain, falls back to
    the explicit keys from settings. Returns ``None`` when no client can be
    built so callers decide how to fail.
    """
    region = settings.AWS_REGION

    if settings.DJANGO_ENV != "DEVELOPMENT":

        try:
            client = boto3.client(service_name, region_name=region)
        except Exception as e:
            logger.error(f"Failed to connect to {service_name} with the default credential chain")
            logger.error(e)

        else:
            return client

    try:
        client = boto3.client(
            service_name,
            aws_access_key_id=settings.AWS_ACCESS_KEY,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=region
        )

    except Exception as e:
        logger.error(f"Failed to connect to {service_name} with explicit credentials")
        logger.error(e)
        return None

    else:
        return client
