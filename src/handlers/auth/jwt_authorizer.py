"""API Gateway request authorizer for the admin routes.

Booking-link routes are public and never reach this authorizer; the access
token in their path is the only credential they need.
"""

import logging
import os
import jwt

from common.models.users import UserRole

logger = logging.getLogger(__name__)

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")

if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET environment variable is not set")


def _policy(principal_id, effect, method_arn, context=None):
    auth_response = {
        "principalId": principal_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "execute-api:Invoke",
                    "Effect": effect,
                    "Resource": _stage_arn(method_arn),
                }
            ],
        },
    }

    if context:
        auth_response["context"] = {k: str(v) for k, v in context.items()}

    return auth_response


def _stage_arn(method_arn: str) -> str:
    # arn:...:api-id/stage/METHOD/path -> arn:...:api-id/stage/*/*
    parts = method_arn.split("/")
    return "/".join(parts[:2]) + "/*/*"


def _bearer_token(event):
    headers = event.get("headers") or {}
    token = (
        event.get("authorizationToken")
        or headers.get("Authorization")
        or headers.get("authorization")
    )
    if token and token.startswith("Bearer "):
        token = token[len("Bearer "):]
    return token


def _role_from_claims(claims) -> UserRole:
    raw = claims.get("role") or UserRole.GUEST.value
    try:
        return UserRole(str(raw).upper())
    except ValueError:
        raise PermissionError(f"Unknown role {raw!r} in token")


def lambda_handler(event, context):
    try:
        token = _bearer_token(event)
        if not token:
            raise PermissionError("Missing Authorization header")

        claims = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp"]},
        )

        user_id = claims.get("user_id")
        if not user_id:
            raise PermissionError("Missing user_id in token")

        role = _role_from_claims(claims)

        return _policy(
            principal_id=user_id,
            effect="Allow",
            method_arn=event["methodArn"],
            context={
                "user_id": user_id,
                "email": claims.get("email", ""),
                "role": role.value,
            },
        )

    except jwt.ExpiredSignatureError:
        logger.warning("Authorization failed: token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Authorization failed: invalid token {e}")
    except Exception as e:
        logger.warning(f"Authorization failed: {e}")

    return _policy("unauthorized", "Deny", event["methodArn"])
