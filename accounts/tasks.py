from botocore.exceptions import ClientError
from django.conf import settings
from celery import shared_task

from accounts.utils import get_ses_client

import logging

logger = logging.getLogger("edulearn")


def build_ses_message(subject, body_text, body_html=None):
    message = {
        "Subject": {"Data": subject, "Charset": "UTF-8"},
        "Body": {
            "Text": {"Data": body_text, "Charset": "UTF-8"},
        }
    }

    if body_html:
        message["Body"]["Html"] = {"Data": body_html, "Charset": "UTF-8"}

    return message


# SES throttling and transient faults surface as ClientError, so those are retried
@shared_task(bind=True, autoretry_for=(ClientError,), retry_backoff=True, max_retries=3)
def send_ses_email(self, to_email: list, subject, body_text, body_html=None, from_email=None):
    ses_client = get_ses_client()

    if ses_client is None:
        logger.error("Unable to connect to SES service")
        raise Exception("No ses client found")

    response = ses_client.send_email(
        Source=from_email or settings.DEFAULT_FROM_EMAIL,
        Destination={"ToAddresses": to_email},
        Message=build_ses_message(subject, body_text, body_html)
    )

    logger.info(f"Sent '{subject}' to {len(to_email)} recipient(s), message id {response.get('MessageId')}")
    return response
