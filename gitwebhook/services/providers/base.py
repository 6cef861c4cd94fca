import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

import httpx
from pydantic import BaseModel

from gitwebhook.core.config import Settings
from gitwebhook.core.constants import MAX_PAGE_SIZE
from gitwebhook.core.http_utils import InstrumentedAsyncClient
from gitwebhook.models.webhook import WebhookSpec
from gitwebhook.services.equivalence import FieldDifference, diff_hooks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetRef:
    """Resolved repository (GitHub) or project (GitLab)."""

    id: int
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class HookProvider(ABC):
    """
    One git hosting provider, bound to a single authenticated client.

    Implementations translate a WebhookSpec into the provider's native hook
    shape and perform the REST calls. The reconciler only talks to this
    interface.
    """

    name: str
    service_name: str
    compared_fields: Tuple[str, ...]
    volatile_fields: FrozenSet[str]

    def __init__(self, client: InstrumentedAsyncClient, page_size: int = MAX_PAGE_SIZE):
        self.client = client
        self.page_size = min(page_size, MAX_PAGE_SIZE)

    @classmethod
    @abstractmethod
    def build_client(
        cls,
        token: str,
        api_url: Optional[str] = None,
        timeout: float = 30.0,
        settings: Optional[Settings] = None,
        **kwargs,
    ) -> InstrumentedAsyncClient:
        """
        Build an authenticated, not yet started client.
        Without api_url the provider default from ``settings`` is used.
        :raises ClientConstructionError: If api_url is not an absolute http(s) URL
        """
        pass

    @abstractmethod
    async def resolve_target(self, owner: str, name: str) -> TargetRef:
        """
        Find the repository, organization/group scope first, user scope second.
        :raises TargetNotFound: If neither scope contains it
        """
        pass

    @abstractmethod
    async def locate_hook(self, target: TargetRef, callback_url: str) -> Optional[BaseModel]:
        """Return the hook registered for callback_url, or None."""
        pass

    @abstractmethod
    def build_desired_view(self, spec: WebhookSpec, secret: str) -> BaseModel:
        """
        Translate a WebhookSpec into the provider's create/update request body.
        :raises UnknownEventType: If an event name is not supported by the provider
        """
        pass

    @abstractmethod
    def comparable_desired(self, view: BaseModel) -> Dict[str, Any]:
        pass

    @abstractmethod
    def comparable_actual(self, hook: BaseModel) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def create_hook(self, target: TargetRef, view: BaseModel) -> BaseModel:
        pass

    @abstractmethod
    async def update_hook(self, target: TargetRef, hook: BaseModel, view: BaseModel) -> BaseModel:
        pass

    @abstractmethod
    async def delete_hook(self, target: TargetRef, hook: BaseModel) -> None:
        pass

    def diff(self, view: BaseModel, hook: BaseModel) -> List[FieldDifference]:
        return diff_hooks(self.comparable_desired(view), self.comparable_actual(hook), self.compared_fields)

    @abstractmethod
    def _next_page(self, response: httpx.Response, page: int) -> Optional[int]:
        """Number of the page following ``page``, or None on the last page."""
        pass

    async def _find_in_pages(
        self,
        path: str,
        operation: str,
        predicate: Callable[[Dict[str, Any]], bool],
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Walk a paginated listing until ``predicate`` matches an item.

        A 404 on the listing is treated as an empty collection.
        """
        page = 1
        while True:
            request_params = {**(params or {}), "page": page, "per_page": self.page_size}
            response = await self.client.get(path, params=request_params)

            if response.status_code == 404:
                logger.debug(f"{self.service_name} {operation}: 404 on page {page}, treating as empty")
                return None
            self.client.ensure_success(response, operation)

            items = response.json()
            if not items:
                return None

            for item in items:
                if predicate(item):
                    return item

            next_page = self._next_page(response, page)
            if not next_page or next_page <= page:
                return None
            page = next_page
