"""
Django management command to fill a development database with demo content

Usage:
    python manage.py seed_demo_content
    python manage.py seed_demo_content --articles 50
"""

import random

from django.core.management.base import BaseCommand
from django.db import transaction
from faker import Faker

from articles.models import Article, ArticleTag, BreakingNews, Category, Tag

CATEGORIES = [
    ("জাতীয়", "national"),
    ("আন্তর্জাতিক", "international"),
    ("রাজনীতি", "politics"),
    ("অর্থনীতি", "economy"),
    ("খেলা", "sports"),
    ("বিনোদন", "entertainment"),
    ("প্রযুক্তি", "technology"),
]

TAGS = ["ঢাকা", "নির্বাচন", "ক্রিকেট", "বাজেট", "আবহাওয়া", "শিক্ষা"]


class Command(BaseCommand):
    help = "Create demo categories, tags, articles and breaking news"

    def add_arguments(self, parser):
        parser.add_argument(
            "--articles",
            type=int,
            default=30,
            help="Number of articles to create",
        )

    def handle(self, *args, **options):
        fake = Faker("bn_BD")
        count = options["articles"]

        with transaction.atomic():
            categories = [
                Category.objects.get_or_create(
                    slug=slug, defaults={"name": name, "sort_order": index}
                )[0]
                for index, (name, slug) in enumerate(CATEGORIES)
            ]
            tags = [Tag.objects.get_or_create(name=name)[0] for name in TAGS]

            for _ in range(count):
                article = Article.objects.create(
                    title=fake.sentence(nb_words=8),
                    content="\n\n".join(fake.paragraphs(nb=6)),
                    author=fake.name(),
                    category=random.choice(categories),
                    status=Article.PUBLISHED,
                    is_featured=random.random() < 0.2,
                    view_count=random.randint(0, 5000),
                )
                for tag in random.sample(tags, k=2):
                    ArticleTag.objects.create(article=article, tag=tag)

            for tag in tags:
                tag.usage_count = tag.articletag_set.count()
                tag.save(update_fields=["usage_count"])

            BreakingNews.objects.create(content=fake.sentence(nb_words=12), priority=1)

        self.stdout.write(
            self.style.SUCCESS(
                f"Created {count} articles in {len(categories)} categories"
            )
        )
