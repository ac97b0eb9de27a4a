from datetime import date, datetime
from typing import List, Optional

from ninja import Schema

from epaper.models import EPaper


class EPaperOut(Schema):
    id: int
    title: str
    publishDate: date
    pdfUrl: Optional[str] = None
    thumbnailUrl: Optional[str] = None
    isLatest: bool
    isGenerated: bool
    articleCount: int
    downloadCount: int
    createdAt: datetime

    @classmethod
    def from_model(cls, epaper: EPaper):
        return cls(
            id=epaper.id,
            title=epaper.title,
            publishDate=epaper.publish_date,
            pdfUrl=epaper.get_pdf_url(),
            thumbnailUrl=epaper.get_thumbnail_url(),
            isLatest=epaper.is_latest,
            isGenerated=epaper.is_generated,
            articleCount=epaper.article_count,
            downloadCount=epaper.download_count,
            createdAt=epaper.created_at,
        )


class PaginatedEPapersOut(Schema):
    items: List[EPaperOut]
    total: int
    limit: int
    offset: int


class DownloadOut(Schema):
    pdfUrl: Optional[str] = None
    downloadCount: int


class EPaperGenerateIn(Schema):
    publish_date: Optional[date] = None
    title: Optional[str] = None
