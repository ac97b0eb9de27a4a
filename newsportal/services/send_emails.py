import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def send_email_task(self, subject, html_template_name, context=None, recipient_list=None):
    """
    Render one of the `templates/emails` pages and mail it to the recipients.

    Every template receives `site_name` and `site_url` next to its own context,
    and the subject is prefixed with the site name.
    """
    if not recipient_list:
        logger.warning(f"Email '{subject}' has no recipients, skipping")
        return 0

    context = {
        "site_name": settings.SITE_NAME,
        "site_url": settings.SITE_URL,
        **(context or {}),
    }
    try:
        html_content = render_to_string(html_template_name, context)
        return send_mail(
            f"[{settings.SITE_NAME}] {subject}",
            strip_tags(html_content),
            settings.DEFAULT_FROM_EMAIL,
            recipient_list,
            html_message=html_content,
        )
    except Exception as exc:
        logger.warning(f"Sending '{subject}' to {recipient_list} failed: {exc}")
        raise self.retry(exc=exc, countdown=60)
