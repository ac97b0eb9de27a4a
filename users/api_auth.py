"""
This file contains the API endpoints related to account management.
"""

import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.core.signing import BadSignature, SignatureExpired, TimestampSigner
from django.db import IntegrityError, transaction
from django.http import JsonResponse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from ninja import Router
from ninja.errors import HttpRequest
from ninja.responses import codes_4xx, codes_5xx
from rest_framework_simplejwt.tokens import RefreshToken

from newsportal.schemas import Message
from newsportal.services.send_emails import send_email_task
from users.models import User, UserProfile
from users.schemas import LogInSchemaIn, ResetPasswordSchema, UserCreateSchema

router = Router(tags=["Users Auth"])
activation_signer = TimestampSigner(salt="users.activation")
reset_signer = TimestampSigner(salt="users.password-reset")

# Module-level logger
logger = logging.getLogger(__name__)

ACTIVATION_MAX_AGE = 1800
RESET_MAX_AGE = 3600


@router.post("/signup", response={201: Message, codes_4xx: Message, codes_5xx: Message})
def signup(request: HttpRequest, payload: UserCreateSchema):
    if payload.password != payload.confirm_password:
        return 400, {"message": "Passwords do not match."}

    existing = User.objects.filter(email__iexact=payload.email).first()
    if existing:
        if not existing.is_active:
            return 400, {
                "message": "Email already registered but not activated. Please"
                " check your email for the activation link."
            }
        return 400, {"message": "Email is already in use."}

    if User.objects.filter(username=payload.username).exists():
        return 400, {"message": "Username is already taken."}

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=payload.username,
                email=payload.email,
                password=payload.password,
                first_name=payload.first_name,
                last_name=payload.last_name,
                is_active=False,
            )
            UserProfile.objects.create(user=user, full_name=user.get_full_name())
    except IntegrityError:
        return 400, {"message": "User could not be created. Please try again."}
    except Exception as e:
        logger.error(f"Error creating user account: {e}")
        return 500, {"message": "Error creating user account. Please try again."}

    try:
        token = activation_signer.sign(user.pk)
        link = f"{settings.FRONTEND_URL}/auth/activate/{token}"

        send_email_task.delay(
            subject="Activate your account",
            html_template_name="emails/activation_email.html",
            context={"name": user.first_name or user.username, "activation_link": link},
            recipient_list=[user.email],
        )
    except Exception as e:
        # The account exists, the user can ask for a new link
        logger.error(f"Error sending activation email: {e}")

    return 201, {
        "message": (
            "Account created successfully. Please check your "
            "email to activate your account."
        )
    }


@router.post(
    "/activate/{token}", response={200: Message, codes_4xx: Message, codes_5xx: Message}
)
def activate(request: HttpRequest, token: str):
    try:
        user_id = activation_signer.unsign(token, max_age=ACTIVATION_MAX_AGE)
    except SignatureExpired:
        return 400, {"message": "Activation link expired. Please request a new one."}
    except BadSignature:
        return 400, {"message": "Invalid activation link. Please request a new one."}

    try:
        user = User.objects.get(pk=user_id)
    except User.DoesNotExist:
        return 404, {"message": "User not found. Please sign up again."}

    if user.is_active:
        return 400, {"message": "Account already activated. You can now log in."}

    user.is_active = True
    user.save(update_fields=["is_active"])
    UserProfile.objects.get_or_create(user=user)

    return 200, {"message": "Account activated successfully. You can now log in."}


@router.post("/login", response={200: Message, codes_4xx: Message, codes_5xx: Message})
def login_user(request, payload: LogInSchemaIn):
    user = (
        User.objects.filter(username=payload.login).first()
        or User.objects.filter(email__iexact=payload.login).first()
    )
    if not user:
        return 404, {"message": "No account found with the provided username/email."}

    if not user.is_active:
        return 403, {
            "message": "This account is inactive. Please activate your account first."
        }

    user = authenticate(username=user.username, password=payload.password)
    if user is None:
        return 401, {"message": "Invalid password. Please try again."}

    try:
        refresh = RefreshToken.for_user(user)
        access_token = str(refresh.access_token)
        refresh_token = str(refresh)
    except Exception as e:
        logger.error(f"Error generating authentication tokens: {e}")
        return 500, {
            "message": "Error generating authentication tokens. Please try again."
        }

    return JsonResponse(
        {
            "status": "success",
            "message": "Login successful.",
            "token": access_token,
            "refreshToken": refresh_token,
            "user": {
                "id": user.id,
                "username": user.username,
                "email": user.email,
                "firstName": user.first_name,
                "lastName": user.last_name,
                "isStaff": user.is_staff,
            },
        }
    )


@router.post(
    "/forgot-password/{email}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def request_reset(request: HttpRequest, email: str):
    try:
        user = User.objects.get(email__iexact=email)
    except User.DoesNotExist:
        return 404, {"message": "No user found with this email address."}

    uid = urlsafe_base64_encode(force_bytes(user.pk))
    reset_link = f"{settings.FRONTEND_URL}/auth/resetpassword/{reset_signer.sign(uid)}"

    try:
        send_email_task.delay(
            subject="Password Reset Request",
            html_template_name="emails/password_reset_email.html",
            context={"name": user.first_name or user.username, "reset_link": reset_link},
            recipient_list=[user.email],
        )
    except Exception as e:
        logger.error(f"Error sending reset email: {e}")
        return 500, {"message": "Error sending reset email. Please try again."}

    return 200, {"message": "Password reset link has been sent to your email."}


@router.post(
    "/reset-password/{token}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def reset_password(request: HttpRequest, token: str, payload: ResetPasswordSchema):
    try:
        original_uid = reset_signer.unsign(token, max_age=RESET_MAX_AGE)
    except SignatureExpired:
        return 400, {
            "message": "Password reset link expired. Please request a new one."
        }
    except BadSignature:
        return 400, {"message": "Invalid password reset link. Please request a new one."}

    try:
        uid = urlsafe_base64_decode(original_uid).decode()
        user = User.objects.get(pk=uid)
    except (ValueError, UnicodeDecodeError):
        return 400, {
            "message": "Invalid token format. Please request a new password reset link."
        }
    except User.DoesNotExist:
        return 404, {
            "message": "User not found. Please request a new password reset link."
        }

    if payload.password != payload.confirm_password:
        return 400, {"message": "Passwords do not match."}

    user.set_password(payload.password)
    user.save(update_fields=["password"])

    return 200, {"message": "Password reset successfully. You can now log in."}
