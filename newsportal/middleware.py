import logging
import time

from django.conf import settings
from django.db import connection

logger = logging.getLogger(__name__)


class RequestTimingMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Timing is only collected while DEBUG records queries
        if not settings.DEBUG:
            return self.get_response(request)
        start_time = time.time()
        initial_queries = len(connection.queries)

        response = self.get_response(request)

        total_time = time.time() - start_time
        query_count = len(connection.queries) - initial_queries
        db_time = sum(float(q["time"]) for q in connection.queries[initial_queries:])

        logger.info(
            f"Request: {request.method} {request.path} "
            f"Total Time: {total_time:.2f}s "
            f"Database Time: {db_time:.2f}s "
            f"Database Queries: {query_count} "
            f"Application Time: {total_time - db_time:.2f}s"
        )

        return response


class CacheControlMiddleware:
    """
    Adds a public Cache-Control header to successful GET responses of the
    read-only API, with the max-age configured per path prefix in
    settings.API_CACHE_CONTROL. Views that already set the header win.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        rules = getattr(settings, "API_CACHE_CONTROL", {})
        self.rules = sorted(rules.items(), key=lambda item: len(item[0]), reverse=True)

    def __call__(self, request):
        response = self.get_response(request)

        if request.method != "GET" or response.status_code != 200:
            return response
        if response.has_header("Cache-Control"):
            return response
        # Personalised responses are never shared
        if request.headers.get("Authorization"):
            return response

        max_age = self.get_max_age(request.path)
        if max_age is None:
            return response

        if max_age == 0:
            response["Cache-Control"] = "no-cache"
        else:
            response["Cache-Control"] = f"public, max-age={max_age}, s-maxage={max_age}"
        return response

    def get_max_age(self, path):
        for prefix, max_age in self.rules:
            if path.startswith(prefix):
                return max_age
        return None
