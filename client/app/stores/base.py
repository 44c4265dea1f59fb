"""
Entity store base classes.

An entity store owns one ordered collection of records of a single kind and
mediates every remote read/write for that kind.

Operation contract (every public async operation):
1. Resolve the acting user from the SessionContext -> NotAuthenticated
   before any gateway call
2. Issue exactly one gateway call
3. On success apply the result locally (identity-match-or-append)
4. On failure leave the collection untouched, record `error`, re-raise;
   nothing is retried

`loading` is True while at least one operation of the store is in flight.
Operations are neither queued nor coalesced: two concurrent updates of the
same id race and the last response to resolve wins.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Callable, Generic, Iterator, List, Optional, Type, TypeVar

from pydantic import ValidationError

from client.app.errors import RemoteCallFailed
from client.app.logging_config import get_logger
from client.app.schemas.common import BackendRecord, DeleteItem, RequestItem
from client.app.services.gateway import CommandGateway, command_name
from client.app.services.session import SessionContext

logger = get_logger(__name__)

T = TypeVar("T", bound=BackendRecord)


class EntityStore(Generic[T]):
    """
    Ordered collection of records keyed by `id`, plus operation bookkeeping.

    Subclasses set `store_name` (used in logs) and `record_type` (the pydantic
    model responses are parsed into).
    """

    store_name: str = "entity"
    record_type: Type[T]

    def __init__(self, gateway: CommandGateway):
        self.gateway = gateway
        self._items: List[T] = []
        self._inflight = 0
        self.error: Optional[Exception] = None

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def items(self) -> List[T]:
        """Shallow copy of the collection, in store order."""
        return list(self._items)

    @property
    def loading(self) -> bool:
        return self._inflight > 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def get(self, entity_id) -> Optional[T]:
        index = self._index_of(entity_id)
        return self._items[index] if index != -1 else None

    def clear_error(self) -> None:
        self.error = None

    def reset(self) -> None:
        """Drop every record and the last error."""
        self._items = []
        self.error = None

    # =========================================================================
    # OPERATION PLUMBING
    # =========================================================================

    @asynccontextmanager
    async def _operation(self, op: str, **log_ctx):
        """Toggle loading around an operation and record its failure."""
        self._inflight += 1
        self.error = None
        try:
            yield
        except Exception as e:
            self.error = e
            logger.error("Store operation failed", store=self.store_name, op=op, error=str(e), **log_ctx)
            raise
        finally:
            self._inflight -= 1

    async def _call(self, command, payload: Optional[dict] = None) -> Any:
        return await self.gateway.invoke(command, payload)

    def _parse(self, command, data: Any) -> T:
        return self._parse_as(self.record_type, command, data)

    @staticmethod
    def _parse_as(model: Type[BackendRecord], command, data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise RemoteCallFailed(command_name(command), f"malformed {model.__name__} record: {e}") from e

    def _parse_many(self, command, data: Any) -> List[T]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise RemoteCallFailed(command_name(command), f"expected a list of {self.store_name} records")
        return [self._parse(command, item) for item in data]

    # =========================================================================
    # LOCAL MUTATION (synchronous, never interleaved)
    # =========================================================================

    def _index_of(self, entity_id) -> int:
        for index, item in enumerate(self._items):
            if item.id == entity_id:
                return index
        return -1

    def _upsert(self, record: T, prepend: bool = False) -> None:
        """Replace the record with the same id, or add it (append by default)."""
        index = self._index_of(record.id)
        if index != -1:
            self._items[index] = record
        elif prepend:
            self._items.insert(0, record)
        else:
            self._items.append(record)

    def _remove(self, entity_id) -> Optional[T]:
        index = self._index_of(entity_id)
        if index == -1:
            return None
        return self._items.pop(index)

    def _merge_replace(self, fresh: List[T], in_scope: Callable[[T], bool]) -> List[T]:
        """
        Replace the records matching `in_scope` with `fresh`.

        Records outside the scope keep their place; fresh records replace
        same-id records or are appended.

        Returns:
            The local records that were in scope before the refresh
        """
        removed = [item for item in self._items if in_scope(item)]
        self._items = [item for item in self._items if not in_scope(item)]
        for record in fresh:
            self._upsert(record)
        return removed


class CrudStore(EntityStore[T]):
    """
    Entity store backed by list/create/update/delete commands.

    Subclasses set the four command names and may override:
    - _list_payload(user_id, filter)   request shape of the list command
    - _in_scope(filter)                 which local records a filtered list replaces
    - _after_upsert / _after_delete / _after_list   cross-store side effects
    """

    list_command: str
    create_command: str
    update_command: str
    delete_command: str

    def __init__(self, gateway: CommandGateway):
        super().__init__(gateway)
        self._updates_in_flight: dict[Any, int] = {}

    # --- hooks -------------------------------------------------------------

    def _list_payload(self, user_id: int, flt: Optional[RequestItem]) -> dict:
        raise NotImplementedError

    def _in_scope(self, flt: Optional[RequestItem]) -> Callable[[T], bool]:
        if flt is None:
            return lambda item: True
        return flt.matches

    def _after_upsert(self, record: T) -> None:
        pass

    def _after_delete(self, entity_id, record: Optional[T]) -> None:
        pass

    def _after_list(self, fresh: List[T], removed: List[T]) -> None:
        pass

    # --- operations ------------------------------------------------------------

    async def list(self, ctx: SessionContext, flt: Optional[RequestItem] = None) -> List[T]:
        """
        Fetch records and merge-replace them into the local collection.

        With a filter only the local records matching it are replaced; records
        outside the filter are left untouched.
        """
        async with self._operation("list"):
            user_id = ctx.require_user_id()
            data = await self._call(self.list_command, self._list_payload(user_id, flt))
            fresh = self._parse_many(self.list_command, data)
            removed = self._merge_replace(fresh, self._in_scope(flt))
            self._after_list(fresh, removed)
            logger.info("Store refreshed", store=self.store_name, fetched=len(fresh), replaced=len(removed))
            return fresh

    async def create(self, ctx: SessionContext, item: RequestItem) -> T:
        async with self._operation("create"):
            user_id = ctx.require_user_id()
            payload = {"request": {"user_id": user_id, **item.model_dump(mode="json")}}
            data = await self._call(self.create_command, payload)
            record = self._parse(self.create_command, data)
            self._upsert(record)
            self._after_upsert(record)
            logger.info("Entity created", store=self.store_name, entity_id=record.id)
            return record

    async def update(self, ctx: SessionContext, entity_id, item: RequestItem) -> T:
        async with self._operation("update", entity_id=entity_id):
            user_id = ctx.require_user_id()
            if self._updates_in_flight.get(entity_id):
                logger.info("Concurrent update in flight, last response wins", store=self.store_name, entity_id=entity_id)
            self._updates_in_flight[entity_id] = self._updates_in_flight.get(entity_id, 0) + 1
            try:
                payload = {"request": {"id": entity_id, "user_id": user_id, **item.model_dump(mode="json")}}
                data = await self._call(self.update_command, payload)
            finally:
                self._release_update(entity_id)
            record = self._parse(self.update_command, data)
            self._upsert(record)
            self._after_upsert(record)
            logger.info("Entity updated", store=self.store_name, entity_id=record.id)
            return record

    async def delete(self, ctx: SessionContext, entity_id) -> Any:
        async with self._operation("delete", entity_id=entity_id):
            user_id = ctx.require_user_id()
            item = DeleteItem(id=entity_id, user_id=user_id)
            response = await self._call(self.delete_command, {"request": item.model_dump()})
            record = self._remove(entity_id)
            self._after_delete(entity_id, record)
            logger.info("Entity deleted", store=self.store_name, entity_id=entity_id, was_local=record is not None)
            return response

    def _release_update(self, entity_id) -> None:
        remaining = self._updates_in_flight.get(entity_id, 1) - 1
        if remaining:
            self._updates_in_flight[entity_id] = remaining
        else:
            self._updates_in_flight.pop(entity_id, None)

    def reset(self) -> None:
        super().reset()
        self._updates_in_flight.clear()
