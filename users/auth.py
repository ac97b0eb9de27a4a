from typing import Optional

from django.http import HttpRequest
from ninja.errors import HttpError
from ninja.security import HttpBearer
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from users.models import User


def _user_from_token(token: str) -> User:
    jwt_authentication = JWTAuthentication()
    try:
        validated_token = jwt_authentication.get_validated_token(token)
        user = jwt_authentication.get_user(validated_token)
    except InvalidToken:
        raise HttpError(401, "Your session has expired. Please log in again.")
    except TokenError as e:
        raise HttpError(401, f"Token error: {str(e)}")
    except AuthenticationFailed:
        # Deleted or deactivated account behind a still valid token
        raise HttpError(401, "User account not found or inactive.")
    if user is None:
        raise HttpError(403, "Authentication failed: Unable to identify user.")
    return user


class JWTAuth(HttpBearer):
    def authenticate(self, request: HttpRequest, token):
        return _user_from_token(token)


class AdminAuth(HttpBearer):
    """Bearer JWT of a staff account; the admin content API sits behind it."""

    def authenticate(self, request: HttpRequest, token):
        user = _user_from_token(token)
        if not user.is_staff:
            raise HttpError(403, "Admin access required.")
        return user


# Function-based auth for partially protected endpoints
def OptionalJWTAuth(request: HttpRequest):
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        # Anonymous access, the view sees request.auth = True
        return True

    token = auth_header.split("Bearer ")[1]
    user = _user_from_token(token)
    request.auth = user
    return user


def get_current_user(request: HttpRequest) -> Optional[User]:
    """The authenticated user behind request.auth, or None for anonymous callers."""
    user = getattr(request, "auth", None)
    if isinstance(user, User):
        return user
    return None
