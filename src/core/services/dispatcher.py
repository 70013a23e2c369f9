"""Anymailfinder action dispatcher.

Maps each (resource, operation) pair to a fixed (method, path, body builder)
route, validates the per-item parameters, performs one authenticated request
per item and tags every output record with the index of the item that
produced it.

Error policy:
- By default the first failing item aborts the batch (its `NodeError` is
  raised).
- With `continue_on_fail=True` a failing item becomes one `{"error": msg}`
  record and the batch carries on with the next item.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from pydantic import ValidationError

from core.domain.errors import (
    ApiRequestError,
    NodeError,
    NodeInternalError,
    NodeRequestError,
    NodeValidationError,
)
from core.domain.models import (
    DEFAULT_LIMIT,
    ApiRequest,
    NodeItem,
    NodeParameters,
    Operation,
    OutputRecord,
    Resource,
)
from core.interfaces.requester import AuthenticatedRequester

logger = logging.getLogger(__name__)

MISSING_IDENTIFIER = "Either domain or company name must be provided"

BodyBuilder = Callable[[NodeParameters], "dict[str, Any] | None"]


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    build_body: BodyBuilder


class _MissingField(ValueError):
    """Raised by body builders; turned into a `NodeValidationError`."""


def _require(value: str, message: str) -> str:
    if not value:
        raise _MissingField(message)
    return value


def _company_lookup(params: NodeParameters) -> dict[str, Any]:
    if not params.domain and not params.company_name:
        raise _MissingField(MISSING_IDENTIFIER)
    body: dict[str, Any] = {}
    if params.domain:
        body["domain"] = params.domain
    if params.company_name:
        body["company_name"] = params.company_name
    return body


def _person_body(params: NodeParameters) -> dict[str, Any]:
    extra = params.additional_fields
    lookup = _company_lookup(params)

    body: dict[str, Any] = {}
    if extra.first_name and extra.last_name:
        body["first_name"] = extra.first_name
        body["last_name"] = extra.last_name
    else:
        body["full_name"] = _require(
            params.full_name,
            "Either full name or first and last name must be provided",
        )
    body.update(lookup)
    if extra.position:
        body["position"] = extra.position
    if extra.department:
        body["department"] = extra.department
    return body


def _company_body(params: NodeParameters) -> dict[str, Any]:
    extra = params.additional_fields
    body = _company_lookup(params)
    if extra.department:
        body["department"] = extra.department
    if extra.limit != DEFAULT_LIMIT:
        body["limit"] = extra.limit
    return body


def _decision_maker_body(params: NodeParameters) -> dict[str, Any]:
    body = _company_lookup(params)
    if params.additional_fields.department:
        body["department"] = params.additional_fields.department
    return body


def _linkedin_body(params: NodeParameters) -> dict[str, Any]:
    return {"linkedin_url": _require(params.linkedin_url, "LinkedIn URL must be provided")}


def _verify_body(params: NodeParameters) -> dict[str, Any]:
    return {"email": _require(params.email, "Email must be provided")}


def _no_body(params: NodeParameters) -> None:
    return None


ROUTES: dict[tuple[Resource, Operation], Route] = {
    (Resource.PERSON_EMAIL, Operation.FIND_EMAIL): Route(
        "POST", "/v5.1/find-email/person", _person_body
    ),
    (Resource.COMPANY_EMAILS, Operation.FIND_EMAILS): Route(
        "POST", "/v5.1/find-email/company", _company_body
    ),
    (Resource.DECISION_MAKER, Operation.FIND_EMAIL): Route(
        "POST", "/v5.1/find-email/decision-maker", _decision_maker_body
    ),
    (Resource.LINKEDIN_EMAIL, Operation.FIND_EMAIL): Route(
        "POST", "/v5.1/find-email/linkedin-url", _linkedin_body
    ),
    (Resource.EMAIL_VERIFICATION, Operation.VERIFY_EMAIL): Route(
        "POST", "/v5.1/verify-email", _verify_body
    ),
    (Resource.ACCOUNT_INFO, Operation.GET_INFO): Route(
        "GET", "/v5.0/meta/account.json", _no_body
    ),
}


def route_for(resource: Resource, operation: Operation, *, item_index: int = 0) -> Route:
    route = ROUTES.get((resource, operation))
    if route is None:
        raise NodeInternalError(
            f"The operation '{operation.value}' is not supported for resource '{resource.value}'",
            item_index=item_index,
        )
    return route


def build_request(params: NodeParameters, *, item_index: int = 0) -> ApiRequest:
    """Validate `params` and build the request for its route.

    Raises `NodeValidationError` (missing identifiers) or `NodeInternalError`
    (unrouted pair) before any I/O happens.
    """

    route = route_for(params.resource, params.effective_operation, item_index=item_index)
    try:
        body = route.build_body(params)
    except _MissingField as exc:
        raise NodeValidationError(str(exc), item_index=item_index) from exc
    return ApiRequest(method=route.method, path=route.path, body=body)


def resolve_parameters(
    base: Mapping[str, Any] | None,
    item_json: Mapping[str, Any] | None = None,
    *,
    item_index: int = 0,
) -> NodeParameters:
    """Merge node-level parameters with the keys an item provides.

    Item keys win. `additionalFields` is merged key by key so an item can set a
    single extra field without dropping the node-level ones.
    """

    merged: dict[str, Any] = dict(base or {})
    for key, value in (item_json or {}).items():
        if key == "additionalFields" and (value is None or isinstance(value, Mapping)):
            merged[key] = {**dict(merged.get(key) or {}), **dict(value or {})}
        else:
            merged[key] = value

    try:
        return NodeParameters.model_validate(merged)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise NodeValidationError(f"Invalid parameters: {problems}", item_index=item_index) from exc


def _to_records(payload: Any, item_index: int) -> list[OutputRecord]:
    values = payload if isinstance(payload, list) else [payload]
    return [OutputRecord(json=value, paired_item=item_index) for value in values]


async def execute_item(
    item_index: int,
    params: NodeParameters,
    requester: AuthenticatedRequester,
) -> list[OutputRecord]:
    """Run one item: validate, build, call, emit."""

    request = build_request(params, item_index=item_index)
    logger.debug(
        "%s %s",
        request.method,
        request.path,
        extra={"resource": params.resource.value, "item": item_index},
    )
    try:
        payload = await requester.request_json(request.method, request.path, request.body)
    except ApiRequestError as exc:
        raise NodeRequestError.from_api_error(exc, item_index=item_index) from exc
    return _to_records(payload, item_index)


def _error_records(exc: NodeError, resource: str) -> list[OutputRecord]:
    logger.warning(
        "item failed: %s",
        exc.message,
        extra={"resource": resource, "item": exc.item_index},
    )
    return [OutputRecord(json={"error": exc.message}, paired_item=exc.item_index)]


async def execute(
    items: Sequence[NodeItem | Mapping[str, Any]],
    requester: AuthenticatedRequester,
    *,
    base_parameters: Mapping[str, Any] | None = None,
    continue_on_fail: bool = False,
    max_concurrency: int = 1,
) -> list[OutputRecord]:
    """Process `items` in order and return their output records.

    `max_concurrency > 1` lets several items be in flight at once; output
    order is still input order and, without `continue_on_fail`, the error of
    the lowest failing index is the one raised and items after it are
    cancelled before they send their request.
    """

    normalized = [item if isinstance(item, NodeItem) else NodeItem(json=dict(item)) for item in items]

    async def run_one(index: int, item: NodeItem) -> list[OutputRecord]:
        resource = str(item.json_.get("resource") or (base_parameters or {}).get("resource") or "-")
        try:
            params = resolve_parameters(base_parameters, item.json_, item_index=index)
            return await execute_item(index, params, requester)
        except NodeError as exc:
            if continue_on_fail:
                return _error_records(exc, resource)
            raise

    if max_concurrency <= 1:
        records: list[OutputRecord] = []
        for index, item in enumerate(normalized):
            records.extend(await run_one(index, item))
        return records

    semaphore = asyncio.Semaphore(max_concurrency)
    tasks: list[asyncio.Task[list[OutputRecord]]] = []

    async def guarded(index: int, item: NodeItem) -> list[OutputRecord]:
        async with semaphore:
            try:
                return await run_one(index, item)
            except NodeError:
                # Abort mode: later items must not spend requests.
                for later in tasks[index + 1 :]:
                    later.cancel()
                raise

    tasks.extend(asyncio.create_task(guarded(index, item)) for index, item in enumerate(normalized))
    results = await asyncio.gather(*tasks, return_exceptions=True)
    records = []
    for result in results:
        if isinstance(result, BaseException):
            raise result
        records.extend(result)
    return records
