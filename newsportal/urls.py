from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.contrib.sitemaps.views import sitemap
from django.urls import path
from django.views.decorators.cache import cache_control

from articles.feeds import LatestArticlesFeed, sitemaps
from newsportal.api import api
from newsportal.constants import SIXTY_MINUTES, THIRTY_MINUTES

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", api.urls),
    path(
        "rss.xml",
        cache_control(public=True, max_age=THIRTY_MINUTES, s_maxage=THIRTY_MINUTES)(
            LatestArticlesFeed()
        ),
        name="rss-feed",
    ),
    path(
        "sitemap.xml",
        cache_control(public=True, max_age=SIXTY_MINUTES, s_maxage=SIXTY_MINUTES)(
            sitemap
        ),
        {"sitemaps": sitemaps},
        name="django.contrib.sitemaps.views.sitemap",
    ),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
