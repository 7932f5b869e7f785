"""Profile service: load, save and delete organization profiles by email."""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .errors import InvalidUserInput
from .models.profile import OrganizationProfile, OrganizationType, normalize_email

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Email, organization name, and type are required"


class ProfileService:
    """CRUD over organization profiles.

    Without a store every call is answered in preview mode: `get` finds
    nothing, `save` validates and echoes the profile, `delete` is a no-op.
    """

    def __init__(self, store: Optional[Any] = None):
        self.store = store

    def get(self, email: str) -> Optional[OrganizationProfile]:
        email = normalize_email(email)
        if not email:
            raise InvalidUserInput("Email required")
        if self.store is None:
            return None
        return self.store.get_profile_by_email(email)

    def save(self, data: Dict[str, Any]) -> OrganizationProfile:
        """Validate `data` and create or update the profile keyed by its email.

        Raises:
            InvalidUserInput: when email, organization name or a known
                organization type is missing, or a field fails validation.
        """
        email = normalize_email(data.get("email") or "")
        name = (data.get("organization_name") or "").strip()
        org_type = data.get("organization_type")
        if not email or not name or not org_type:
            raise InvalidUserInput(REQUIRED_FIELDS_MESSAGE)
        if org_type not in {t.value for t in OrganizationType}:
            raise InvalidUserInput(f"Unknown organization type: {org_type}")

        try:
            profile = OrganizationProfile(**{**data, "email": email, "organization_name": name})
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
            raise InvalidUserInput(f"Invalid profile field(s): {fields}") from exc

        if self.store is None:
            logger.info("profile_save email=%s mode=preview", email)
            return profile
        saved = self.store.upsert_profile(profile)
        logger.info("profile_save email=%s id=%s", email, saved.id)
        return saved

    def delete(self, email: str) -> bool:
        email = normalize_email(email)
        if not email:
            raise InvalidUserInput("Email required")
        if self.store is None:
            return True
        return self.store.delete_profile(email)
