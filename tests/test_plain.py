import json
import math
import random

from aiohttp.test_utils import make_mocked_request

from echo_server.handlers import RequestHandlers
from echo_server.identity import IdentityProvider
from tests.conftest import FixedBits


def make_handlers(settings, observer, rng) -> RequestHandlers:
    return RequestHandlers(
        settings,
        IdentityProvider(settings, hostname=lambda: "test-host"),
        rng,
        observer,
    )


async def test_forbidden_outcome_is_a_normal_response(settings, observer):
    handlers = make_handlers(settings, observer, FixedBits(1))
    request = make_mocked_request("GET", "/orders?page=2", headers={"Host": "example.test"})

    response = await handlers.handle(request)

    assert response.status == 403
    assert response.content_type == "application/json"
    assert observer.statuses == [403]
    assert observer.errors == []


async def test_success_outcome(settings, observer):
    handlers = make_handlers(settings, observer, FixedBits(0))
    request = make_mocked_request("DELETE", "/orders/1", headers={"Host": "example.test"})

    response = await handlers.handle(request)

    assert response.status == 200
    assert observer.statuses == [200]


async def test_body_echoes_request_metadata(settings, observer):
    handlers = make_handlers(settings, observer, FixedBits(0))
    request = make_mocked_request(
        "POST",
        "/orders?page=2",
        headers=[("Host", "example.test"), ("X-Multi", "a"), ("X-Multi", "b")],
    )

    response = await handlers.handle(request)
    body = json.loads(response.text)

    assert body["access_token"] == "fake-token"
    assert body["gtins"] == ["999"]
    assert body["changesUntil"] == "2020-12-12T00:00:11.111Z"
    assert body["method"] == "POST"
    assert body["path"] == "/orders"
    assert body["query"] == "page=2"
    assert body["version"] == "HTTP/1.1"
    assert body["host"] == "example.test"
    assert ["X-Multi", "a"] in body["headers"]
    assert ["X-Multi", "b"] in body["headers"]
    assert body["headers"].index(["X-Multi", "a"]) < body["headers"].index(["X-Multi", "b"])


async def test_status_split_is_even(settings, observer):
    trials = 2000
    handlers = make_handlers(settings, observer, random.Random(20261019))

    for _ in range(trials):
        await handlers.handle(make_mocked_request("GET", "/", headers={"Host": "example.test"}))

    forbidden = observer.statuses.count(403)
    sigma = math.sqrt(trials * 0.25)

    assert observer.statuses.count(200) + forbidden == trials
    assert abs(forbidden - trials / 2) <= 3 * sigma
