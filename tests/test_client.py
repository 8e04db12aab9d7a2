import asyncio
import json

import pytest

from apimanager.client import CallContext, build_client
from apimanager.config import ClientConfig
from apimanager.exceptions import ConfigurationError, MalformedTemplate, TransportFailure
from apimanager.http import HttpResponse
from apimanager.registry import ConfigRegistry


def test_get_builds_url_from_params_and_query(transport):
    client = build_client(ClientConfig(base_url="https://api"), {"uri": "/offers/:id/extra/test/:mId"}, transport=transport)

    asyncio.run(client.get(params={"id": 5, "mId": 9}, query={"lang": "en gb"}))

    sent = transport.requests[0]
    assert sent.method == "GET"
    assert sent.url == "https://api/offers/5/extra/test9?lang=en%20gb"
    assert sent.body is None


def test_no_params_means_no_path_segment(transport):
    client = build_client(ClientConfig(base_url="https://api"), {"uri": "/offers/:id"}, transport=transport)

    asyncio.run(client.get())
    asyncio.run(client.get(params={}))
    asyncio.run(client.get(query={}))

    assert [r.url for r in transport.requests] == [
        "https://api/offers",
        "https://api/offers",
        "https://api/offers?",
    ]


def test_post_and_put_send_json_body(transport):
    client = build_client(ClientConfig(base_url="https://api"), {"uri": "/items"}, transport=transport)

    asyncio.run(client.post(body={"name": "n"}))
    asyncio.run(client.put(body=[1, 2]))
    asyncio.run(client.post())

    assert [r.method for r in transport.requests] == ["POST", "PUT", "POST"]
    assert json.loads(transport.requests[0].body) == {"name": "n"}
    assert json.loads(transport.requests[1].body) == [1, 2]
    assert transport.requests[2].body is None


def test_delete_sends_headers_without_body(transport):
    client = build_client(ClientConfig(base_url="https://api", headers={"X-Key": "k"}), {}, transport=transport)

    asyncio.run(client.delete(params={"id": 3}))

    sent = transport.requests[0]
    assert sent.method == "DELETE"
    assert sent.headers == {"X-Key": "k"}
    assert sent.body is None


def test_response_chain_runs_interceptor_then_verb_handler(transport_factory):
    transport = transport_factory(HttpResponse(status_code=200, text='{"value": 2}'))
    seen = []

    def interceptor(result, context):
        seen.append(("interceptor", context))
        return {**result, "intercepted": True}

    def handle_get(result, context):
        seen.append(("handler", context))
        return result["value"] * 10, result["intercepted"]

    config = ClientConfig.from_options(
        base_url="https://api",
        response_interceptor=interceptor,
        response_handler_get=handle_get,
    )
    client = build_client(config, {"uri": "/items/:id"}, transport=transport)

    result = asyncio.run(client.get(params={"id": 1}, query={"q": "x"}))

    assert result == (20, True)
    assert [name for name, _ in seen] == ["interceptor", "handler"]
    context = seen[0][1]
    assert context == CallContext(
        url="https://api/items",
        headers=config.headers,
        params={"id": 1},
        query={"q": "x"},
    )


def test_async_hooks_are_awaited(transport):
    async def handler(result, context):
        await asyncio.sleep(0)
        return "async-handled"

    client = build_client(ClientConfig(base_url="https://api"), {}, transport=transport)

    assert asyncio.run(client.post(response_handler=handler)) == "async-handled"


def test_per_call_overrides_win(transport):
    client = build_client(
        ClientConfig(base_url="https://api", headers={"X-Key": "client"}),
        {"uri": "/a/:id"},
        transport=transport,
    )

    result = asyncio.run(
        client.get(
            url="https://other/b",
            headers={"X-Key": "call"},
            params={"id": 4},
            response_handler=lambda result, context: context.url,
        )
    )

    sent = transport.requests[0]
    assert sent.url == "https://other/b/4"
    assert sent.headers == {"X-Key": "call"}
    assert result == "https://other/b"


def test_request_interceptor_can_rewrite_outgoing_request(transport):
    def add_trace(request):
        request.headers["X-Trace"] = "t1"
        return request

    client = build_client(
        ClientConfig(base_url="https://api", request_interceptor=add_trace), {}, transport=transport
    )

    asyncio.run(client.get())

    assert transport.requests[0].headers["X-Trace"] == "t1"
    assert "X-Trace" not in client.headers


def test_status_failure_skips_interceptor_and_handler(transport_factory):
    response = HttpResponse(status_code=404, text='{"msg": "bad"}')
    transport = transport_factory(response)
    called = []
    client = build_client(
        ClientConfig.from_options(
            base_url="https://api",
            response_interceptor=lambda result, context: called.append("interceptor"),
            response_handler_get=lambda result, context: called.append("handler"),
        ),
        {},
        transport=transport,
    )

    with pytest.raises(TransportFailure) as excinfo:
        asyncio.run(client.get())

    assert excinfo.value.error == {"msg": "bad"}
    assert excinfo.value.resp is response
    assert called == []


def test_empty_ok_body_resolves_to_empty_dict(transport_factory):
    client = build_client(
        ClientConfig(base_url="https://api"), {}, transport=transport_factory(HttpResponse(status_code=200))
    )

    assert asyncio.run(client.get()) == {}


def test_calls_read_config_at_dispatch_time(transport):
    client = build_client(ClientConfig(base_url="https://one"), {"uri": "/x"}, transport=transport)

    first = client.get()
    client.update_config(base_url="https://two")
    asyncio.run(first)

    assert transport.requests[0].url == "https://two/x"


def test_client_level_header_updates(transport):
    client = build_client(ClientConfig(base_url="https://api"), {}, transport=transport)
    before = client.headers

    client.extend_header({"auth": "abc"})
    assert client.headers == {**before, "auth": "abc"}

    client.remove_header_property("auth")
    client.remove_header_property("auth")
    assert client.headers == before


def test_invalid_construction_fails_fast(transport):
    with pytest.raises(ConfigurationError):
        build_client(ClientConfig(base_url="B"), {"url": "U", "uri": "/x"}, transport=transport)
    with pytest.raises(ConfigurationError):
        build_client(ClientConfig(), {}, transport=transport)
    with pytest.raises(MalformedTemplate):
        build_client(ClientConfig(base_url=""), {}, transport=transport)


def test_failed_patch_leaves_client_untouched(transport):
    client = build_client(ClientConfig(base_url="https://api"), {"uri": "/x"}, transport=transport)

    with pytest.raises(ConfigurationError):
        client.update_config(url="https://u", uri="/y")

    assert client.url == "https://api/x"


def test_request_is_logged(caplog, transport):
    registry = ConfigRegistry(ClientConfig(base_url="https://api"), transport=transport)
    client = registry.create(uri="/items")

    with caplog.at_level("INFO", logger="apimanager.client"):
        asyncio.run(client.get(query={"page": 2}))

    assert "API request GET https://api/items?page=2" in caplog.text
