"""
RSS feed and XML sitemap of published content, served outside /api
"""

from urllib.parse import urlparse

from django.conf import settings
from django.contrib.sitemaps import Sitemap
from django.contrib.syndication.views import Feed

from articles.models import Article, Category
from articles.utils import make_excerpt

RSS_ITEM_LIMIT = 50
SITEMAP_ARTICLE_LIMIT = 1000


class LatestArticlesFeed(Feed):
    language = "bn-BD"

    def title(self):
        return settings.SITE_NAME

    def link(self):
        return settings.SITE_URL

    def description(self):
        return f"{settings.SITE_NAME} - সর্বশেষ সংবাদ"

    def items(self):
        return Article.published.order_by("-published_at")[:RSS_ITEM_LIMIT]

    def item_title(self, item):
        return item.title

    def item_description(self, item):
        return make_excerpt(item.excerpt or item.content)

    def item_link(self, item):
        return f"{settings.SITE_URL.rstrip('/')}/article/{item.slug}"

    def item_guid(self, item):
        return self.item_link(item)

    item_guid_is_permalink = True

    def item_pubdate(self, item):
        return item.published_at

    def item_updateddate(self, item):
        return item.updated_at

    def item_author_name(self, item):
        return item.author or None

    def item_categories(self, item):
        if item.category_id:
            return [item.category.name]
        return []


class SiteSitemap(Sitemap):
    """Sitemap whose URLs point at the public site (SITE_URL), not the API host."""

    def get_protocol(self, protocol=None):
        return urlparse(settings.SITE_URL).scheme or "https"

    def get_domain(self, site=None):
        site_url = urlparse(settings.SITE_URL)
        return f"{site_url.netloc}{site_url.path.rstrip('/')}"


class StaticPagesSitemap(SiteSitemap):
    pages = {
        "/": ("hourly", 1.0),
        "/epaper": ("daily", 0.8),
    }

    def items(self):
        return list(self.pages)

    def location(self, item):
        return item

    def changefreq(self, item):
        return self.pages[item][0]

    def priority(self, item):
        return self.pages[item][1]


class ArticleSitemap(SiteSitemap):
    changefreq = "weekly"
    priority = 0.8

    def items(self):
        return Article.published.order_by("-published_at")[:SITEMAP_ARTICLE_LIMIT]

    def location(self, item):
        return f"/article/{item.slug}"

    def lastmod(self, item):
        return item.updated_at


class CategorySitemap(SiteSitemap):
    changefreq = "daily"
    priority = 0.9

    def items(self):
        return Category.objects.filter(is_active=True).order_by("sort_order")

    def location(self, item):
        return f"/category/{item.slug}"

    def lastmod(self, item):
        return item.updated_at


sitemaps = {
    "static": StaticPagesSitemap,
    "articles": ArticleSitemap,
    "categories": CategorySitemap,
}
