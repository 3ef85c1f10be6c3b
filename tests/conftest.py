"""Shared pytest fixtures for jsonder test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel
from pydantic import Field

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jsonder import EndpointContext  # noqa: E402
from jsonder import EndpointDefinition  # noqa: E402
from jsonder import EndpointError  # noqa: E402
from jsonder import GenerateUrls  # noqa: E402
from jsonder import JsonderSettings  # noqa: E402
from jsonder import Resource  # noqa: E402
from jsonder import Validation  # noqa: E402
from jsonder import failure  # noqa: E402
from jsonder import jsonder  # noqa: E402
from jsonder import success  # noqa: E402

SERVER_URL = "https://api.x"


class ItemCreate(BaseModel):
    name: str = Field(min_length=1)
    quantity: int = Field(ge=0)


class ItemQuery(BaseModel):
    limit: int = 10


class ItemParams(BaseModel):
    item_id: str = Field(pattern=r"^[a-z0-9-]+$")


class NoteCreate(BaseModel):
    text: str = ""
    pinned: bool = False


class Item(Resource):
    name: str
    quantity: int


def _seed_items() -> dict[str, Item]:
    return {
        "apple": Item(id="apple", name="Apple", quantity=3),
        "pear": Item(id="pear", name="Pear", quantity=5),
    }


def build_app(settings: JsonderSettings) -> FastAPI:
    """Build a small items API wired through the adapter."""
    adapter = jsonder(settings)
    app = FastAPI(middleware=adapter.middleware())
    items = _seed_items()
    app.state.handler_calls = 0

    def list_items(context: EndpointContext):
        context.request.app.state.handler_calls += 1
        limit = context.validated["query"].limit
        return success(list(items.values())[:limit])

    async def get_item(context: EndpointContext):
        context.request.app.state.handler_calls += 1
        item = items.get(context.params["item_id"])
        if item is None:
            return failure(EndpointError(status=404, code="not_found", detail="Item not found"))
        return success(item)

    def create_item(context: EndpointContext):
        context.request.app.state.handler_calls += 1
        payload: ItemCreate = context.validated["body"]
        if payload.name.lower() in items:
            return failure(EndpointError(status=409, code="conflict", detail="Item already exists"))
        item = Item(id=payload.name.lower(), name=payload.name, quantity=payload.quantity)
        items[item.id] = item
        return success(item)

    def unchecked(context: EndpointContext):
        context.request.app.state.handler_calls += 1
        return success({"id": "echo", "body": context.body, "query": context.query})

    def degraded(context: EndpointContext):
        context.request.app.state.handler_calls += 1
        return failure(
            EndpointError(status=400, code="bad_filter", detail="Unknown filter"),
            EndpointError(status=503, code="upstream_unavailable", detail="Inventory offline"),
        )

    def create_note(context: EndpointContext):
        context.request.app.state.handler_calls += 1
        note: NoteCreate = context.validated["body"]
        return success({"id": "note-1", **note.model_dump()})

    def teapot(context: EndpointContext):
        return failure(EndpointError(status=418, code="teapot", detail="I'm a teapot"))

    def broken(context: EndpointContext):
        return {"id": "not-an-outcome"}

    app.add_api_route(
        "/items",
        adapter.endpoint(
            EndpointDefinition(
                resource_type="item",
                validation=Validation(query_schema=ItemQuery),
                handler=list_items,
            )
        ),
        methods=["GET"],
    )
    app.add_api_route(
        "/items",
        adapter.endpoint(
            EndpointDefinition(
                resource_type="item",
                validation=Validation(body_schema=ItemCreate, query_schema=ItemQuery),
                handler=create_item,
            )
        ),
        methods=["POST"],
    )
    app.add_api_route(
        "/items/{item_id}",
        adapter.endpoint(
            EndpointDefinition(
                resource_type="item",
                validation=Validation(params_schema=ItemParams),
                handler=get_item,
            )
        ),
        methods=["GET"],
    )
    app.add_api_route(
        "/echo",
        adapter.endpoint(EndpointDefinition(resource_type="echo", handler=unchecked)),
        methods=["GET", "POST"],
    )
    app.add_api_route(
        "/notes",
        adapter.endpoint(
            EndpointDefinition(
                resource_type="note",
                validation=Validation(body_schema=NoteCreate),
                handler=create_note,
            )
        ),
        methods=["POST"],
    )
    app.add_api_route(
        "/degraded",
        adapter.endpoint(EndpointDefinition(resource_type="report", handler=degraded)),
        methods=["GET"],
    )
    app.add_api_route(
        "/teapot",
        adapter.endpoint(EndpointDefinition(resource_type="teapot", handler=teapot)),
        methods=["GET"],
    )
    app.add_api_route(
        "/broken",
        adapter.endpoint(EndpointDefinition(resource_type="broken", handler=broken)),
        methods=["GET"],
    )
    return app


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide an API test client with URL generation enabled."""
    app = build_app(JsonderSettings(generate_urls=GenerateUrls(server_url=SERVER_URL)))

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def plain_client() -> Generator[TestClient, None, None]:
    """Provide an API test client with URL generation disabled."""
    app = build_app(JsonderSettings())

    with TestClient(app) as test_client:
        yield test_client
