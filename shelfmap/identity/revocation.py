"""Identity provider admin client: removes the auth identity of a deleted account.

Runs after the account's data has been committed. When no admin URL or
service key is configured, revocation is deferred and only logged.
"""

from uuid import UUID

import httpx
import structlog

from shelfmap.config.settings import Settings

logger = structlog.get_logger(__name__)


class IdentityRevoker:
    """Deletes users through ``DELETE {base_url}/admin/users/{user_id}``."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._service_key = service_key
        self._timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityRevoker":
        return cls(
            base_url=settings.IDENTITY_ADMIN_URL,
            service_key=settings.IDENTITY_SERVICE_KEY,
            timeout_s=settings.IDENTITY_TIMEOUT_S,
        )

    @property
    def enabled(self) -> bool:
        return bool(self._base_url and self._service_key)

    async def revoke(self, user_id: UUID) -> bool:
        """Delete the identity. Returns False when revocation is deferred.

        A 404 from the provider counts as already revoked.

        Raises:
            httpx.HTTPError: on transport failures and non-2xx responses.
        """
        if not self.enabled:
            logger.info("identity_revocation_deferred", user_id=str(user_id))
            return False

        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
        }
        async with httpx.AsyncClient(
            timeout=self._timeout_s, transport=self._transport,
        ) as client:
            resp = await client.delete(
                f"{self._base_url}/admin/users/{user_id}", headers=headers,
            )
            if resp.status_code != 404:
                resp.raise_for_status()

        logger.info("identity_revoked", user_id=str(user_id))
        return True
