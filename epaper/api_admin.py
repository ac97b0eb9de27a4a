import logging
from datetime import date
from typing import Optional

from django.db import transaction
from ninja import File, Form, Router, UploadedFile
from ninja.responses import codes_4xx, codes_5xx

from epaper.models import EPaper
from epaper.schemas import EPaperGenerateIn, EPaperOut
from epaper.services import default_title, publish_epaper
from newsportal.schemas import Message
from users.auth import AdminAuth

router = Router(tags=["Admin E-paper"], auth=AdminAuth())

logger = logging.getLogger(__name__)


@router.post(
    "/epapers", response={201: EPaperOut, codes_4xx: Message, codes_5xx: Message}
)
def admin_upload_epaper(
    request,
    publish_date: date = Form(...),
    title: Optional[str] = Form(None),
    make_latest: bool = Form(True),
    pdf: UploadedFile = File(...),
    thumbnail: Optional[UploadedFile] = File(None),
):
    if not pdf.name.lower().endswith(".pdf"):
        return 400, {"message": "Only PDF files can be uploaded."}
    if thumbnail and not (thumbnail.content_type or "").startswith("image/"):
        return 400, {"message": "Thumbnail must be an image."}

    try:
        with transaction.atomic():
            epaper = EPaper(
                title=title or default_title(publish_date),
                publish_date=publish_date,
            )
            epaper.pdf_file.save(pdf.name, pdf, save=False)
            if thumbnail:
                epaper.thumbnail.save(thumbnail.name, thumbnail, save=False)
            epaper.save()
            if make_latest:
                epaper.mark_latest()
    except Exception as e:
        logger.error(f"Error uploading e-paper for {publish_date}: {e}")
        return 500, {"message": "Error uploading e-paper. Please try again."}

    return 201, EPaperOut.from_model(epaper)


@router.post(
    "/epapers/generate",
    response={201: EPaperOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_generate_epaper(request, payload: EPaperGenerateIn):
    try:
        epaper = publish_epaper(payload.publish_date, payload.title)
    except Exception:
        return 500, {"message": "Error generating e-paper. Please try again."}
    return 201, EPaperOut.from_model(epaper)


@router.post(
    "/epapers/{epaper_id}/latest",
    response={200: EPaperOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_mark_latest(request, epaper_id: int):
    try:
        epaper = EPaper.objects.get(pk=epaper_id)
    except EPaper.DoesNotExist:
        return 404, {"message": "E-paper not found."}

    epaper.mark_latest()
    return 200, EPaperOut.from_model(epaper)


@router.delete(
    "/epapers/{epaper_id}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def admin_delete_epaper(request, epaper_id: int):
    try:
        epaper = EPaper.objects.get(pk=epaper_id)
    except EPaper.DoesNotExist:
        return 404, {"message": "E-paper not found."}

    if epaper.pdf_file:
        epaper.pdf_file.delete(save=False)
    if epaper.thumbnail:
        epaper.thumbnail.delete(save=False)
    epaper.delete()
    return 200, {"message": "E-paper deleted successfully."}
