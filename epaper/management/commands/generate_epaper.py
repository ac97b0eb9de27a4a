"""
Django management command to generate the daily front page e-paper

Usage:
    python manage.py generate_epaper
    python manage.py generate_epaper --date 2024-01-15
    python manage.py generate_epaper --dry-run --output /tmp/epaper.pdf
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from epaper.generator import generate_epaper
from epaper.services import publish_epaper


class Command(BaseCommand):
    help = "Generate the front page e-paper PDF and publish it as the latest edition"

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            help="Edition date as YYYY-MM-DD (defaults to today)",
        )
        parser.add_argument("--title", help="E-paper title")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Generate the PDF without storing or publishing it",
        )
        parser.add_argument(
            "--output",
            help="With --dry-run, write the PDF to this path",
        )

    def handle(self, *args, **options):
        target_date = None
        if options.get("date"):
            try:
                target_date = date.fromisoformat(options["date"])
            except ValueError:
                raise CommandError(f"Invalid date '{options['date']}', use YYYY-MM-DD")

        if options["dry_run"]:
            generated = generate_epaper(target_date)
            if options.get("output"):
                with open(options["output"], "wb") as output:
                    output.write(generated.pdf)
            self.stdout.write(
                self.style.SUCCESS(
                    f"[DRY RUN] Generated e-paper for {generated.edition_date} with "
                    f"{generated.article_count} articles ({len(generated.pdf)} bytes)"
                )
            )
            return

        epaper = publish_epaper(target_date, options.get("title"))
        self.stdout.write(
            self.style.SUCCESS(
                f"Published e-paper {epaper.id} for {epaper.publish_date} with "
                f"{epaper.article_count} articles: {epaper.get_pdf_url()}"
            )
        )
