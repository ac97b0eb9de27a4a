import logging

from django.db.models import F
from ninja import Router
from ninja.responses import codes_4xx, codes_5xx

from epaper.models import EPaper
from epaper.schemas import DownloadOut, EPaperOut, PaginatedEPapersOut
from newsportal.constants import clamp_limit
from newsportal.schemas import Message

router = Router(tags=["E-paper"])

logger = logging.getLogger(__name__)


@router.get(
    "/", response={200: PaginatedEPapersOut, codes_4xx: Message, codes_5xx: Message}
)
def list_epapers(request, limit: int = 10, offset: int = 0):
    limit = clamp_limit(limit)
    offset = max(offset, 0)
    epapers = EPaper.objects.order_by("-publish_date", "-created_at")
    return 200, {
        "items": [
            EPaperOut.from_model(epaper) for epaper in epapers[offset : offset + limit]
        ],
        "total": epapers.count(),
        "limit": limit,
        "offset": offset,
    }


@router.get(
    "/latest", response={200: EPaperOut, codes_4xx: Message, codes_5xx: Message}
)
def latest_epaper(request):
    epaper = (
        EPaper.objects.filter(is_latest=True).first()
        or EPaper.objects.order_by("-publish_date", "-created_at").first()
    )
    if epaper is None:
        return 404, {"message": "No e-paper found."}
    return 200, EPaperOut.from_model(epaper)


@router.get(
    "/{epaper_id}", response={200: EPaperOut, codes_4xx: Message, codes_5xx: Message}
)
def get_epaper(request, epaper_id: int):
    try:
        epaper = EPaper.objects.get(pk=epaper_id)
    except EPaper.DoesNotExist:
        return 404, {"message": "E-paper not found."}
    return 200, EPaperOut.from_model(epaper)


@router.post(
    "/{epaper_id}/download",
    response={200: DownloadOut, codes_4xx: Message, codes_5xx: Message},
)
def download_epaper(request, epaper_id: int):
    updated = EPaper.objects.filter(pk=epaper_id).update(
        download_count=F("download_count") + 1
    )
    if not updated:
        return 404, {"message": "E-paper not found."}

    epaper = EPaper.objects.get(pk=epaper_id)
    return 200, {"pdfUrl": epaper.get_pdf_url(), "downloadCount": epaper.download_count}
