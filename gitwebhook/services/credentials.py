import logging
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Tuple, Union

from gitwebhook.core.config import Settings, settings as default_settings
from gitwebhook.core.exceptions import CredentialError
from gitwebhook.models.webhook import GitWebhook

logger = logging.getLogger(__name__)

SecretData = Mapping[str, Union[str, bytes]]


class SecretStore(ABC):
    @abstractmethod
    async def get(self, name: str, namespace: str) -> SecretData:
        """
        Fetch the key/value data of a secret.
        :param name: The secret name
        :param namespace: The namespace of the GitWebhook referencing it
        :return: The secret data
        :raises LookupError: If the secret does not exist
        """
        pass


class InMemorySecretStore(SecretStore):
    """Secret store backed by a dict, keyed by (namespace, name)."""

    def __init__(self, secrets: Optional[Dict[Tuple[str, str], SecretData]] = None):
        self._secrets: Dict[Tuple[str, str], SecretData] = dict(secrets or {})

    def put(self, name: str, namespace: str, data: SecretData) -> None:
        self._secrets[(namespace, name)] = dict(data)

    async def get(self, name: str, namespace: str) -> SecretData:
        try:
            return self._secrets[(namespace, name)]
        except KeyError:
            raise LookupError(f"secret {namespace}/{name} not found") from None


class CredentialResolver:
    """
    Resolves the webhook shared secret and the git server token of a GitWebhook.

    An empty secret reference resolves to "" (no secret / anonymous access).
    """

    def __init__(self, store: SecretStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or default_settings

    async def webhook_secret(self, webhook: GitWebhook) -> str:
        return await self._read(
            webhook.spec.webhook_secret.name, webhook.namespace, self.settings.WEBHOOK_SECRET_KEY
        )

    async def git_token(self, webhook: GitWebhook) -> str:
        return await self._read(
            webhook.spec.server.credentials.name, webhook.namespace, self.settings.GIT_TOKEN_KEY
        )

    async def _read(self, secret_name: str, namespace: str, key: str) -> str:
        if not secret_name:
            return ""
        try:
            data = await self.store.get(secret_name, namespace)
        except LookupError as e:
            logger.error(f"Unable to find secret {namespace}/{secret_name}: {e}")
            raise CredentialError(f"unable to find secret: {secret_name}") from e

        if key not in data:
            raise CredentialError(f'"{key}" key not found in secret {secret_name}')

        value = data[key]
        if isinstance(value, bytes):
            try:
                value = value.decode("utf-8")
            except UnicodeDecodeError as e:
                raise CredentialError(f'"{key}" in secret {secret_name} is not valid UTF-8') from e
        return value
