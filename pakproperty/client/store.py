"""Client-side property store.

One :class:`PropertyStore` per browsing session owns the search filters,
the query cache and every read and write against the listings API. UI
code receives the store and goes through its named operations.
"""
import json
import mimetypes
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from structlog import get_logger

from pakproperty.client import cache as queries
from pakproperty.client.api import ApiClient
from pakproperty.client.cache import QueryCache
from pakproperty.client.notify import LogNotifier, Notifier
from pakproperty.errors import ApiError, PropertyError

logger = get_logger()

DELETE_CONFIRMATION = "Are you sure you want to delete this property?"

Number = Union[int, float, str]

class SearchFilters(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)

    city: str = ""
    area: str = ""
    property_type: str = ""
    category: str = ""
    min_price: Number = ""
    max_price: Number = ""
    bedrooms: Number = ""
    bathrooms: Number = ""
    furnishing: str = ""
    sort: str = "date-desc"
    page: int = 1
    limit: int = 12
    search: str = ""

    def to_params(self) -> dict:
        """Query parameters with empty values left out."""
        params = self.model_dump(by_alias=True)
        return {k: v for k, v in params.items() if v not in ("", None)}

    def cache_key(self) -> tuple:
        return tuple(sorted((k, str(v)) for k, v in self.to_params().items()))

_FIELD_NAMES = {
    **{name: name for name in SearchFilters.model_fields},
    **{field.alias: name for name, field in SearchFilters.model_fields.items() if field.alias},
}

@dataclass
class ImageUpload:
    """Binary image content to be attached to a create or update call."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    def as_file(self):
        content_type = self.content_type or mimetypes.guess_type(self.filename)[0] or "application/octet-stream"
        return (self.filename, self.content, content_type)

def encode_property_form(data: dict) -> tuple[dict, list]:
    """Split listing fields into multipart form values and file parts.

    Image uploads become ``images`` file parts captioned with their
    filename; images that already have a stored reference are not sent
    again. Nested structures travel as JSON.
    """
    fields, files = {}, []
    for key, value in data.items():
        if key == "images":
            for image in value or []:
                if isinstance(image, ImageUpload):
                    fields[f"imageCaption{len(files)}"] = image.filename
                    files.append(("images", image.as_file()))
            continue
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            fields[key] = json.dumps(value)
        elif isinstance(value, bool):
            fields[key] = "true" if value else "false"
        else:
            fields[key] = str(value)
    return fields, files

class PropertyStore:
    def __init__(self, api: ApiClient, notifier: Notifier | None = None, cache: QueryCache | None = None):
        self.api = api
        self.notifier = notifier or LogNotifier()
        self.cache = cache or QueryCache()
        self.filters = SearchFilters()
        self.errors: dict[str, PropertyError] = {}

    # Filters

    def update_filters(self, partial: dict | None = None, **fields) -> SearchFilters:
        """Merge filter fields into the current set and go back to page 1.

        Unknown names are ignored and a value that does not fit its field
        falls back to that field's default.
        """
        merged = self.filters.model_dump()
        for key, value in {**(partial or {}), **fields}.items():
            name = _FIELD_NAMES.get(key)
            if name is None:
                logger.warning("Ignoring unknown filter", filter=key)
                continue
            default = SearchFilters.model_fields[name].default
            if value is None:
                merged[name] = default
                continue
            try:
                merged[name] = getattr(SearchFilters(**{name: value}), name)
            except PydanticValidationError:
                logger.warning("Ignoring invalid filter value", filter=key, value=repr(value))
                merged[name] = default
        merged["page"] = 1
        self.filters = SearchFilters(**merged)
        return self.filters

    def reset_filters(self) -> SearchFilters:
        self.filters = SearchFilters()
        return self.filters

    def go_to_page(self, page: int) -> SearchFilters:
        self.filters = self.filters.model_copy(update={"page": max(1, int(page))})
        return self.filters

    # Reads

    async def _query(self, name: str, params_key, fetch: Callable):
        key = (name, params_key)
        fresh = self.cache.get_fresh(key)
        if fresh is not None:
            return fresh
        seq = self.cache.next_seq()
        issued_at = self.cache.now()
        try:
            data = await fetch()
        except PropertyError as e:
            self.errors[name] = e
            entry = self.cache.get_any(key)
            if entry is None:
                raise
            logger.warning("Serving cached result after failed fetch", query=name, error=e.message)
            return entry.data
        self.errors.pop(name, None)
        if not self.cache.store(key, data, seq, issued_at):
            logger.info("Discarded out-of-order response", query=name, seq=seq)
            return self.cache.get_any(key).data
        return data

    async def list_properties(self, filters: SearchFilters | None = None) -> dict:
        filters = filters or self.filters
        params = filters.to_params()
        return await self._query(queries.PROPERTIES, filters.cache_key(), lambda: self.api.get("/properties", params=params))

    async def featured_properties(self) -> dict:
        return await self._query(queries.FEATURED, None, lambda: self.api.get("/properties/featured"))

    async def my_properties(self) -> dict:
        return await self._query(queries.MY_PROPERTIES, None, lambda: self.api.get("/properties/my-properties"))

    async def load_saved_properties(self) -> dict:
        return await self._query(queries.SAVED, None, lambda: self.api.get("/users/saved-properties"))

    async def refetch_properties(self) -> dict:
        self.cache.invalidate(queries.PROPERTIES)
        return await self.list_properties()

    async def refetch_saved(self) -> dict:
        self.cache.invalidate(queries.SAVED)
        return await self.load_saved_properties()

    def _cached_data(self, name: str, params_key=None) -> Any:
        entry = self.cache.get_any((name, params_key))
        return entry.data if entry is not None else None

    @property
    def properties(self) -> list:
        page = self._cached_data(queries.PROPERTIES, self.filters.cache_key())
        return (page or {}).get("data", [])

    @property
    def total_properties(self) -> int:
        page = self._cached_data(queries.PROPERTIES, self.filters.cache_key())
        return (page or {}).get("total", 0)

    @property
    def pagination(self) -> dict:
        page = self._cached_data(queries.PROPERTIES, self.filters.cache_key())
        return (page or {}).get("pagination", {})

    @property
    def saved_properties(self) -> list:
        return (self._cached_data(queries.SAVED) or {}).get("data", [])

    def is_property_saved(self, property_id) -> bool:
        saved = self._cached_data(queries.SAVED)
        if saved is None:
            return False
        return any(p.get("id") == str(property_id) for p in saved.get("data", []))

    # Writes

    async def _mutate(self, call: Callable, success: str, failure: str, invalidates: tuple):
        try:
            result = await call()
        except PropertyError as e:
            message = e.server_message if isinstance(e, ApiError) and e.server_message else failure
            self.notifier.error(message)
            return None
        for name in invalidates:
            self.cache.invalidate(name)
        self.notifier.success(success)
        return result

    async def save_property(self, property_id):
        return await self._mutate(
            lambda: self.api.post(f"/users/saved-properties/{property_id}"),
            "Property saved successfully", "Failed to save property", (queries.SAVED,),
        )

    async def remove_saved_property(self, property_id):
        return await self._mutate(
            lambda: self.api.delete(f"/users/saved-properties/{property_id}"),
            "Property removed from saved list", "Failed to remove property", (queries.SAVED,),
        )

    async def create_property(self, data: dict):
        fields, files = encode_property_form(data)
        return await self._mutate(
            lambda: self.api.post("/properties", data=fields, files=files or None),
            "Property created successfully", "Failed to create property",
            (queries.PROPERTIES, queries.MY_PROPERTIES),
        )

    async def update_property(self, property_id, data: dict):
        fields, files = encode_property_form(data)
        return await self._mutate(
            lambda: self.api.put(f"/properties/{property_id}", data=fields, files=files or None),
            "Property updated successfully", "Failed to update property",
            (queries.PROPERTIES, queries.MY_PROPERTIES),
        )

    async def update_property_status(self, property_id, status: str):
        return await self._mutate(
            lambda: self.api.patch(f"/properties/{property_id}/status", json={"status": status}),
            "Property status updated successfully", "Failed to update property status",
            (queries.PROPERTIES, queries.MY_PROPERTIES),
        )

    async def delete_property(self, property_id, confirm: Callable[[str], bool]):
        """Delete a listing once ``confirm`` agrees; otherwise nothing is sent."""
        if not confirm(DELETE_CONFIRMATION):
            logger.info("Delete cancelled", property_id=str(property_id))
            return None
        return await self._mutate(
            lambda: self.api.delete(f"/properties/{property_id}"),
            "Property deleted successfully", "Failed to delete property",
            (queries.PROPERTIES, queries.MY_PROPERTIES),
        )
