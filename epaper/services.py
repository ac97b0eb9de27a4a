import logging
from datetime import date
from typing import Optional

from django.core.files.base import ContentFile
from django.db import transaction

from articles.utils import format_bengali_date
from epaper.generator import generate_epaper
from epaper.models import EPaper

logger = logging.getLogger(__name__)


def default_title(edition_date: date) -> str:
    return f"ই-পেপার - {format_bengali_date(edition_date)}"


def publish_epaper(
    target_date: Optional[date] = None, title: Optional[str] = None
) -> EPaper:
    """
    Generate the e-paper, store the PDF in the media bucket and record it as
    the latest edition.
    """
    generated = generate_epaper(target_date)
    edition_date = generated.edition_date

    try:
        with transaction.atomic():
            epaper = EPaper(
                title=title or default_title(edition_date),
                publish_date=edition_date,
                is_generated=True,
                article_count=generated.article_count,
            )
            epaper.pdf_file.save(
                f"epaper-{edition_date.isoformat()}.pdf",
                ContentFile(generated.pdf),
                save=False,
            )
            epaper.save()
            epaper.mark_latest()
    except Exception as e:
        logger.error(f"Error storing e-paper for {edition_date}: {e}")
        raise

    logger.info(f"Published e-paper {epaper.id} for {edition_date}")
    return epaper
