# CACHE
ONE_MINUTE = 60
FIVE_MINUTES = 300
TEN_MINUTES = 600
FIFTEEN_MINUTES = 900
THIRTY_MINUTES = 1800
SIXTY_MINUTES = 3600

# PAGINATION
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

ARTICLE_STATUSES = ["draft", "published", "archived"]

# Placeholder category shown when an article has none
DEFAULT_CATEGORY_NAME = "সাধারণ"

# Monthly targets shown on the reader dashboard
MONTHLY_READING_TARGET = 50
MONTHLY_SAVED_TARGET = 20


def clamp_limit(limit: int, default: int = DEFAULT_PAGE_LIMIT) -> int:
    if limit is None or limit < 1:
        return default
    return min(limit, MAX_PAGE_LIMIT)
