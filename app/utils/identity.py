# app/utils/identity.py
"""
Caller identity. Authentication happens upstream (the session/auth gateway);
requests reach this service with the authenticated user in X-User-Id.
"""

from fastapi import Header


def get_user_id(x_user_id: str = Header(..., description="Authenticated user id set by the auth gateway")) -> str:
    return x_user_id
