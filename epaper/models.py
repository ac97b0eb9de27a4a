import time
import uuid

from django.conf import settings
from django.db import models, transaction


class EPaper(models.Model):
    def get_pdf_upload_path(instance, filename):
        ext = filename.split(".")[-1]
        unique_filename = (
            f"{instance.publish_date}_{uuid.uuid4().hex[:8]}_{int(time.time())}.{ext}"
        )
        return f"epapers/{settings.ENVIRONMENT}/{unique_filename}"

    def get_thumbnail_upload_path(instance, filename):
        ext = filename.split(".")[-1]
        unique_filename = f"{instance.publish_date}_{uuid.uuid4().hex[:8]}.{ext}"
        return f"epaper_thumbnails/{settings.ENVIRONMENT}/{unique_filename}"

    title = models.CharField(max_length=255)
    publish_date = models.DateField(db_index=True)
    pdf_file = models.FileField(upload_to=get_pdf_upload_path, null=True, blank=True)
    external_url = models.URLField(max_length=500, null=True, blank=True)
    thumbnail = models.ImageField(
        upload_to=get_thumbnail_upload_path, null=True, blank=True
    )
    is_latest = models.BooleanField(default=False)
    is_generated = models.BooleanField(default=False)
    article_count = models.PositiveIntegerField(default=0)
    download_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-publish_date", "-created_at"]
        verbose_name = "e-paper"

    def __str__(self):
        return f"{self.title} ({self.publish_date})"

    def get_pdf_url(self):
        """Return either the stored file URL or the external URL"""
        if self.pdf_file:
            return self.pdf_file.url
        return self.external_url

    def get_thumbnail_url(self):
        if self.thumbnail:
            return self.thumbnail.url
        return None

    def mark_latest(self):
        """Make this the only e-paper flagged as latest."""
        with transaction.atomic():
            EPaper.objects.filter(is_latest=True).exclude(pk=self.pk).update(
                is_latest=False
            )
            self.is_latest = True
            self.save(update_fields=["is_latest", "updated_at"])
