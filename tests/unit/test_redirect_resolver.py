"""Unit tests for redirect resolution with pathid capture."""

import asyncio

import aiohttp
import pytest

from contentrouter.utils.redirect_resolver import (
    RedirectResult,
    RedirectTrace,
    resolve_redirects,
)

START = "https://start.example.com/rk6YvX"


@pytest.mark.unit
class TestResolveRedirects:
    """Tests for resolve_redirects()."""

    @pytest.mark.asyncio
    async def test_single_redirect_with_path_id(self, mock_session, mock_response):
        response = mock_response(
            url="https://dest.com/page?pathid=XYZ", history=[START]
        )
        session = mock_session("get", response)

        result = await resolve_redirects(START, session=session)

        assert result == RedirectResult("https://dest.com/page?pathid=XYZ", "XYZ")
        args, kwargs = session.get.call_args
        assert args == (START,)
        assert kwargs["allow_redirects"] is True
        assert isinstance(kwargs["timeout"], aiohttp.ClientTimeout)

    @pytest.mark.asyncio
    async def test_intermediate_path_id_captured(self, mock_session, mock_response):
        response = mock_response(
            url="https://dest.com/final",
            history=[START, "https://track.net/r?pathid=MID"],
        )

        result = await resolve_redirects(START, session=mock_session("get", response))

        assert result.final_url == "https://dest.com/final"
        assert result.path_id == "MID"

    @pytest.mark.asyncio
    async def test_last_path_id_wins(self, mock_session, mock_response):
        response = mock_response(
            url="https://dest.com/final?PathId=LAST",
            history=[START, "https://a.net/?pathid=FIRST", "https://b.net/"],
        )

        result = await resolve_redirects(START, session=mock_session("get", response))

        assert result.path_id == "LAST"

    @pytest.mark.asyncio
    async def test_start_url_is_not_a_redirect_target(
        self, mock_session, mock_response
    ):
        start = f"{START}?pathid=OLD"
        response = mock_response(url="https://dest.com/final", history=[start])

        result = await resolve_redirects(start, session=mock_session("get", response))

        assert result == RedirectResult("https://dest.com/final", None)

    @pytest.mark.asyncio
    async def test_unfollowed_redirect_location(self, mock_session, mock_response):
        response = mock_response(
            status=302,
            url="https://hop.net/r",
            history=[START],
            headers={"Location": "https://dest.com/?pathid=LOC"},
        )

        result = await resolve_redirects(START, session=mock_session("get", response))

        assert result.final_url == "https://hop.net/r"
        assert result.path_id == "LOC"

    @pytest.mark.asyncio
    async def test_trace_records_hops(self, mock_session, mock_response):
        response = mock_response(
            url="https://dest.com/final", history=[START, "https://a.net/?pathid=1"]
        )
        trace = RedirectTrace()

        await resolve_redirects(
            START, session=mock_session("get", response), trace=trace
        )

        assert trace.hops == ["https://a.net/?pathid=1", "https://dest.com/final"]
        assert trace.last_url_with_path_id == "https://a.net/?pathid=1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            asyncio.TimeoutError(),
            aiohttp.ClientConnectionError("refused"),
            aiohttp.ServerDisconnectedError(),
        ],
    )
    async def test_transport_error_returns_none(self, mock_session, error):
        session = mock_session("get", side_effect=error)

        assert await resolve_redirects(START, session=session) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", "ftp://files.example.com/x", "not a url"])
    async def test_invalid_url(self, mock_session, url):
        session = mock_session("get")

        assert await resolve_redirects(url, session=session) is None
        session.get.assert_not_called()
