from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.utils import timezone
from ninja import NinjaAPI, Router
from ninja.errors import AuthenticationError, HttpError, HttpRequest, ValidationError

from articles.api import router as articles_router
from articles.api_admin import router as articles_admin_router
from articles.breaking_news_api import router as breaking_news_router
from articles.category_api import router as categories_router
from articles.comment_api import router as comments_router
from articles.engagement_api import router as engagement_router
from articles.tag_api import router as tags_router
from epaper.api import router as epaper_router
from epaper.api_admin import router as epaper_admin_router
from newsportal.admin_api import router as site_admin_router
from newsportal.schemas import HealthOut
from polls.api import router as polls_router
from polls.api_admin import router as polls_admin_router
from users.api import router as users_general_router
from users.api_auth import router as users_auth_router

api = NinjaAPI(docs_url="docs/", title="Bengali News API", urls_namespace="api_v1")

"""
Global Exception Handlers (Error Handlers)
"""


@api.exception_handler(AuthenticationError)
def custom_authentication_error_handler(request, exc):
    return api.create_response(
        request,
        {"message": "You need to be authenticated to perform this action."},
        status=401,
    )


@api.exception_handler(HttpError)
def custom_http_error_handler(request, exc):
    return api.create_response(
        request, {"message": exc.message}, status=exc.status_code
    )


@api.exception_handler(ValidationError)
def validation_error_handler(request: HttpRequest, exc: ValidationError):
    return api.create_response(request, {"message": exc.errors}, status=422)


@api.exception_handler(ObjectDoesNotExist)
def object_not_found_handler(request, exc):
    message = exc.args[0] if exc.args else "Not found."
    return api.create_response(request, {"message": message}, status=404)


@api.exception_handler(Exception)
def generic_error_handler(request: HttpRequest, exc: Exception):
    if settings.DEBUG:
        error_message = str(exc)
    else:
        error_message = "Internal Server Error"

    return api.create_response(request, {"message": error_message}, status=500)


@api.get("/health", response=HealthOut, tags=["Health"])
def health(request):
    return {"status": "ok", "timestamp": timezone.now()}


"""
Registering the routers
"""


# Create a parent router to aggregate all user-related endpoints
users_parent_router = Router()
users_parent_router.add_router("", users_auth_router)
users_parent_router.add_router("", users_general_router)

# Create a parent router to aggregate all article-related endpoints
articles_parent_router = Router()
articles_parent_router.add_router("", comments_router)
articles_parent_router.add_router("", engagement_router)
# Holds the catch-all "/{slug}" route, so it goes last
articles_parent_router.add_router("", articles_router)

# Create a parent router to aggregate the content management endpoints
admin_parent_router = Router()
admin_parent_router.add_router("", site_admin_router)
admin_parent_router.add_router("", articles_admin_router)
admin_parent_router.add_router("", polls_admin_router)
admin_parent_router.add_router("", epaper_admin_router)

api.add_router("/users", users_parent_router)
api.add_router("/articles", articles_parent_router)
api.add_router("/categories", categories_router)
api.add_router("/tags", tags_router)
api.add_router("/breaking-news", breaking_news_router)
api.add_router("/polls", polls_router)
api.add_router("/epapers", epaper_router)
api.add_router("/admin", admin_parent_router)
