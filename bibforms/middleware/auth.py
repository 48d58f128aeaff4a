"""Authentication middleware and dependencies"""
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional, Dict
from bibforms.config import get_settings
from bibforms.dependencies import get_profile_store
from bibforms.services.form_store import ProfileStore
import httpx
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ADMIN_ROLE = "admin"
DEFAULT_ROLE = "client"


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    profiles: ProfileStore = Depends(get_profile_store)
) -> Optional[Dict]:
    """
    Verify Supabase JWT token via Supabase Auth API

    The application role comes from the profiles table, falling back to the
    role in user metadata and then to "client".
    """
    if not credentials:
        return None

    settings = get_settings()
    token = credentials.credentials

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(
                f"{settings.supabase_url}/auth/v1/user",
                headers={
                    "Authorization": f"Bearer {token}",
                    "apikey": settings.supabase_anon_key
                }
            )

        if response.status_code != 200:
            logger.warning(f"Supabase auth failed: {response.status_code} - {response.text}")
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user_data = response.json()
        user_id = user_data.get("id")
        metadata = user_data.get("user_metadata", {}) or {}

        role = await profiles.get_role(user_id)
        role = role or metadata.get("role") or DEFAULT_ROLE

        logger.info(f"Auth successful for user: {user_id} (role {role})")

        return {
            "user_id": user_id,
            "email": user_data.get("email"),
            "role": role,
            "raw_token": token
        }
    except httpx.RequestError:
        raise HTTPException(status_code=401, detail="Authentication service unavailable")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Token verification error: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")


async def get_current_user(
    auth_data: Optional[Dict] = Depends(verify_token)
) -> Dict:
    """
    Get current authenticated user (admin or client)

    Raises:
        HTTPException: If not authenticated
    """
    if not auth_data:
        raise HTTPException(status_code=401, detail="Missing authentication token")

    return auth_data


async def require_admin(
    auth_data: Dict = Depends(get_current_user)
) -> Dict:
    """
    Get current user, rejecting anyone without the admin role

    Raises:
        HTTPException: If the user is not an administrator
    """
    if not is_admin(auth_data):
        raise HTTPException(
            status_code=403,
            detail="Access denied: administrator rights required"
        )

    return auth_data


def is_admin(auth_data: Optional[Dict]) -> bool:
    return bool(auth_data) and auth_data.get("role") == ADMIN_ROLE
