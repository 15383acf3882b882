"""
Integration tests for the HTTP collaborators and the coordinator.

A local aiohttp server plays the redirect chain, the destination pages and
the remote JSON document, so the real client code paths run end to end.
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from aiohttp import test_utils, web

from contentrouter.core.constants import (
    CLASSIC_PATH_ID_KEY,
    CONTENT_IDENTIFIER_KEY,
    PRIVACY_PATH_ID_KEY,
)
from contentrouter.core.modes import ContentVariant, DisplayMode, ModeKind
from contentrouter.services.coordinator import ContentCoordinator
from contentrouter.utils.endpoint_validator import validate_endpoint
from contentrouter.utils.redirect_resolver import RedirectTrace, resolve_redirects
from contentrouter.utils.remote_document import fetch_remote_document_url


async def _start(request: web.Request) -> web.Response:
    raise web.HTTPFound("/hop?pathid=XYZ")


async def _hop(request: web.Request) -> web.Response:
    raise web.HTTPFound("/dest")


async def _dest(request: web.Request) -> web.Response:
    return web.Response(text="destination")


async def _gone(request: web.Request) -> web.Response:
    raise web.HTTPNotFound()


async def _document(request: web.Request) -> web.Response:
    return web.json_response({"url": "https://dest.com/app"})


async def _broken_document(request: web.Request) -> web.Response:
    return web.Response(text="<html>maintenance</html>")


def _build_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/start", _start)
    app.router.add_get("/hop", _hop)
    app.router.add_get("/dest", _dest)
    app.router.add_get("/gone", _gone)
    app.router.add_get("/doc.json", _document)
    app.router.add_get("/broken.json", _broken_document)
    return app


@asynccontextmanager
async def running_server():
    server = test_utils.TestServer(_build_app())
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.mark.integration
class TestCollaborators:
    """Real requests against the local server."""

    @pytest.mark.asyncio
    async def test_redirect_chain_captures_intermediate_path_id(self):
        async with running_server() as server:
            trace = RedirectTrace()
            result = await resolve_redirects(
                str(server.make_url("/start")), timeout=5, trace=trace
            )
            final = str(server.make_url("/dest"))

        assert result is not None
        assert result.final_url == final
        assert result.path_id == "XYZ"
        assert len(trace.hops) == 2

    @pytest.mark.asyncio
    async def test_validate_endpoint_statuses(self):
        async with running_server() as server:
            ok = await validate_endpoint(str(server.make_url("/start")), timeout=5)
            gone = await validate_endpoint(str(server.make_url("/gone")), timeout=5)

        assert ok == 200
        assert gone == 404

    @pytest.mark.asyncio
    async def test_validate_endpoint_connection_refused(self):
        async with running_server() as server:
            url = str(server.make_url("/dest"))

        assert await validate_endpoint(url, timeout=2) == 0

    @pytest.mark.asyncio
    async def test_fetch_remote_document(self):
        async with running_server() as server:
            url = await fetch_remote_document_url(str(server.make_url("/doc.json")))
            broken = await fetch_remote_document_url(
                str(server.make_url("/broken.json"))
            )
            missing = await fetch_remote_document_url(str(server.make_url("/gone")))

        assert url == "https://dest.com/app"
        assert broken is None
        assert missing is None


def _coordinator(source_url, store, variant):
    return ContentCoordinator(
        source_url,
        store,
        variant,
        reachability=AsyncMock(return_value=True),
        sleep=AsyncMock(),
        rating_prompt=lambda: None,
    )


@pytest.mark.integration
class TestCoordinatorFlow:
    """Coordinator launches with the real HTTP collaborators."""

    @pytest.mark.asyncio
    async def test_redirect_chain_first_launch(self, store):
        async with running_server() as server:
            coordinator = _coordinator(
                str(server.make_url("/start")), store, ContentVariant.source_b()
            )
            mode = await coordinator.resolve()
            final = str(server.make_url("/dest"))

        assert mode == DisplayMode.enhanced(final)
        assert store.get_string(CLASSIC_PATH_ID_KEY) == "XYZ"
        # Destination shares the source host, so the cache is left alone
        assert not store.contains(CONTENT_IDENTIFIER_KEY)

    @pytest.mark.asyncio
    async def test_privacy_first_launch_persists(self, store):
        async with running_server() as server:
            coordinator = _coordinator(
                str(server.make_url("/start")),
                store,
                ContentVariant.source_c("not-in-url"),
            )
            mode = await coordinator.resolve()
            final = str(server.make_url("/dest"))

        assert mode == DisplayMode.enhanced(final)
        assert store.get_string(PRIVACY_PATH_ID_KEY) == "XYZ"
        assert store.get_string(CONTENT_IDENTIFIER_KEY) == final

    @pytest.mark.asyncio
    async def test_remote_document_failure_is_sticky(self, store):
        async with running_server() as server:
            broken = str(server.make_url("/broken.json"))
            working = str(server.make_url("/doc.json"))
            variant = ContentVariant.source_a()
            first = await _coordinator(broken, store, variant).resolve()
            second = await _coordinator(working, store, variant).resolve()

        assert first.kind == ModeKind.BASIC
        assert second.kind == ModeKind.BASIC
