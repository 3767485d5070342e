"""
Label Group Service.

Fetches, creates and updates label groups and expands them into the labels
they cover. The most recent collection fetch is kept as an immutable
LabelGroupTable on `service.table`.
"""

from pydantic import TypeAdapter

from pceclient.api.client import PCEClient
from pceclient.api.response import APIResponse
from pceclient.policy.expand import expand_label_group
from pceclient.policy.lookup import LabelGroupTable
from pceclient.policy.schemas import LabelGroup
from pceclient.services.base import BaseService

_label_group_list = TypeAdapter(list[LabelGroup])


class LabelGroupService(BaseService):
    """
    Service for label groups.

    The table is empty until get_label_groups() succeeds and is then
    replaced wholesale on every fetch. Concurrent fetches are not
    serialized; callers running them in parallel tasks should guard the
    service with their own asyncio.Lock.
    """

    def __init__(self, client: PCEClient) -> None:
        super().__init__(client)
        self.label_groups: list[LabelGroup] = []
        self.table = LabelGroupTable()

    async def get_label_groups(
        self,
        status: str,
        query: dict[str, str] | None = None,
        async_: bool = False,
    ) -> APIResponse:
        """
        Fetch every label group of a policy version and rebuild the table.

        The first call is synchronous unless async_ is set. The PCE caps
        synchronous collections at 500 items, so a synchronous result that
        reaches the threshold is discarded and fetched again through the
        async job protocol.

        Args:
            status: "draft" or "active" (case-insensitive)
            query: Query parameters for filtering, e.g. {"name": "web"}
            async_: Fetch through the async job protocol from the start

        Returns:
            APIResponse of the call that produced the table

        Raises:
            ValidationError: Invalid status (no request is made)
            APIStatusError: Non-2xx response
        """
        status = self._validate_policy_status(status)
        endpoint = f"/sec_policy/{status}/label_groups"
        threshold = self.client.config.collections.async_threshold

        api, items = await self.client.get_collection(endpoint, async_=async_, query=query)
        if not async_ and not self.client.executor.force_async and len(items) >= threshold:
            self._log_debug("Collection reached sync limit, re-fetching async", count=len(items))
            api, items = await self.client.get_collection(endpoint, async_=True, query=query)

        label_groups = _label_group_list.validate_python(items)
        self.label_groups = label_groups
        self.table = LabelGroupTable(label_groups)

        self._log_operation("Fetched label groups", status=status, count=len(label_groups))
        return api

    async def create_label_group(self, label_group: LabelGroup) -> tuple[LabelGroup, APIResponse]:
        """
        Create a label group in the draft policy.

        Returns:
            Tuple of (created label group, APIResponse)
        """
        self._log_operation("Creating label group", name=label_group.name)
        api, created = await self.client.post("sec_policy/draft/label_groups", label_group.to_json())
        return LabelGroup.model_validate(created), api

    async def update_label_group(self, label_group: LabelGroup) -> APIResponse:
        """
        Update an existing label group.

        The group must carry its href. Usage and key are computed or
        immutable on the PCE and are stripped before the PUT.

        Raises:
            ValidationError: If the href is missing
        """
        self._validate_required({"href": label_group.href}, ["href"])
        payload = label_group.model_copy(update={"usage": None, "key": None})

        self._log_operation("Updating label group", href=label_group.href)
        return await self.client.put(label_group.href, payload.to_json())

    def expand_label_group(self, href: str) -> set[str]:
        """Label hrefs covered by a group and all of its nested subgroups."""
        return expand_label_group(self.table, href)
