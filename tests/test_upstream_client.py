"""Tests for MindbodyClient against a mocked upstream transport."""

import json

import httpx
import pytest

from booking_proxy.errors import (
    ConfigurationError,
    UpstreamAuthError,
    UpstreamRequestError,
)
from booking_proxy.upstream import MindbodyClient, TokenProvider
from booking_proxy.upstream.mindbody import upstream_error_message

from conftest import BASE_URL, SITE_TOKEN


class TestTokenProviderABC:
    def test_cannot_instantiate(self):
        """TokenProvider is abstract and can't be instantiated directly."""
        with pytest.raises(TypeError):
            TokenProvider()


class TestRequestHeaders:
    async def test_site_token_and_site_headers(self, upstream, stub):
        stub.on("GET", "/site/locations", {"Locations": []})

        await upstream.get("/site/locations")

        request = stub.calls_to("/site/locations")[0]
        assert request.headers["Api-Key"] == "test-key"
        assert request.headers["SiteId"] == "-99"
        assert request.headers["Authorization"] == SITE_TOKEN
        assert request.headers["Content-Type"] == "application/json"

    async def test_user_token_takes_precedence(self, upstream, stub):
        stub.on("GET", "/site/locations", {"Locations": []})

        await upstream.get("/site/locations", user_token="user-abc")

        assert stub.calls_to("/site/locations")[0].headers["Authorization"] == "user-abc"
        assert stub.calls_to("/usertoken/issue") == []

    async def test_site_token_reused_across_calls(self, upstream, stub):
        stub.on("GET", "/site/locations", {"Locations": []})

        await upstream.get("/site/locations")
        await upstream.get("/site/locations")

        assert len(stub.calls_to("/usertoken/issue")) == 1

    async def test_query_params_forwarded(self, upstream, stub):
        stub.on("GET", "/staff/staff", {"StaffMembers": []})

        await upstream.get("/staff/staff", params={"LocationId": "1"})

        assert stub.calls_to("/staff/staff")[0].url.params["LocationId"] == "1"

    async def test_post_sends_json_body(self, upstream, stub):
        stub.on("POST", "/client/addclient", {"Client": {"Id": "7"}})

        data = await upstream.post("/client/addclient", {"FirstName": "Ana"})

        assert data == {"Client": {"Id": "7"}}
        sent = json.loads(stub.calls_to("/client/addclient")[0].content)
        assert sent == {"FirstName": "Ana"}

    async def test_no_credentials_configured(self, stub):
        http = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        client = MindbodyClient(http, api_key="k", site_id="1", base_url=BASE_URL)
        with pytest.raises(ConfigurationError):
            await client.get("/site/locations")


class TestErrors:
    async def test_non_2xx_raises_with_upstream_message(self, upstream, stub):
        stub.on(
            "GET", "/site/locations",
            {"Error": {"Message": "Invalid site", "Code": "InvalidSite"}},
            status=400,
        )

        with pytest.raises(UpstreamRequestError) as exc_info:
            await upstream.get("/site/locations")

        assert exc_info.value.message == "Invalid site"
        assert exc_info.value.upstream_status == 400
        assert exc_info.value.payload["Error"]["Code"] == "InvalidSite"

    async def test_transport_failure(self, upstream, stub):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        stub.on("GET", "/site/locations", handler=boom)

        with pytest.raises(UpstreamRequestError) as exc_info:
            await upstream.get("/site/locations")
        assert exc_info.value.upstream_status is None

    async def test_non_json_success_body(self, upstream, stub):
        stub.on(
            "GET", "/site/locations",
            handler=lambda request: httpx.Response(200, text="<html>oops</html>"),
        )
        with pytest.raises(UpstreamRequestError):
            await upstream.get("/site/locations")

    async def test_site_login_rejected(self, upstream, stub):
        stub.on("POST", "/usertoken/issue", {"Error": {"Message": "Bad password"}}, status=401)

        with pytest.raises(UpstreamAuthError):
            await upstream.get("/site/locations")


class TestIssueToken:
    async def test_sends_credentials(self, upstream, stub):
        data = await upstream.issue_token("ana@example.com", "pw")

        assert data["AccessToken"] == SITE_TOKEN
        request = stub.calls_to("/usertoken/issue")[0]
        assert json.loads(request.content) == {"Username": "ana@example.com", "Password": "pw"}
        assert "Authorization" not in request.headers

    async def test_missing_access_token(self, upstream, stub):
        stub.on("POST", "/usertoken/issue", {"User": {}})
        with pytest.raises(UpstreamAuthError):
            await upstream.issue_token("a", "b")


class TestErrorMessage:
    def test_nested_error(self):
        assert upstream_error_message({"Error": {"Message": "Nope"}}, "x") == "Nope"

    def test_flat_message(self):
        assert upstream_error_message({"Message": "Flat"}, "x") == "Flat"

    def test_default(self):
        assert upstream_error_message({}, "fallback") == "fallback"
        assert upstream_error_message(None, "fallback") == "fallback"
