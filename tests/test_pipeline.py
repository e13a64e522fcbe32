import asyncio
import logging

import pytest

from tool_helper.tracking.matcher import UrlMatcher
from tool_helper.tracking.pipeline import Action, InterceptionPipeline, Phase
from tool_helper.tracking.records import RequestRecord, ResponseRecord


def _request(url="https://x/api/a", method="GET"):
    return RequestRecord(url=url, method=method)


@pytest.mark.asyncio
async def test_first_short_circuit_stops_the_pipeline():
    pipeline = InterceptionPipeline()
    calls = []

    def h1(record, actions):
        calls.append("h1")
        actions.continue_(method="POST")

    def h2(record, actions):
        calls.append("h2")
        actions.abort("blockedbyclient")

    def h3(record, actions):
        calls.append("h3")
        actions.continue_(method="PUT")

    for handler in (h1, h2, h3):
        pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), handler)

    disposition = await pipeline.run_request(_request())
    assert disposition.action is Action.ABORT
    assert disposition.error_code == "blockedbyclient"
    assert calls == ["h1", "h2"]


@pytest.mark.asyncio
async def test_overrides_merge_with_later_keys_winning():
    pipeline = InterceptionPipeline()
    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), lambda r, a: a.continue_(method="POST", headers={"x": "1"}))
    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), lambda r, a: a.continue_(headers={"x": "2"}))
    pipeline.add(Phase.REQUEST, UrlMatcher.build("/other"), lambda r, a: a.continue_(method="PUT"))

    disposition = await pipeline.run_request(_request())
    assert disposition.action is Action.CONTINUE
    assert disposition.overrides == {"method": "POST", "headers": {"x": "2"}}


@pytest.mark.asyncio
async def test_returned_disposition_is_honoured():
    pipeline = InterceptionPipeline()
    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), lambda r, a: a.respond(204, body={"stub": True}))

    disposition = await pipeline.run_request(_request())
    assert disposition.action is Action.RESPOND
    assert disposition.response.status == 204
    assert disposition.response.body == {"stub": True}


@pytest.mark.asyncio
async def test_raising_handler_abstains():
    pipeline = InterceptionPipeline()

    def broken(record, actions):
        actions.continue_(method="DELETE")
        raise RuntimeError("handler bug")

    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), broken)
    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), lambda r, a: a.continue_(post_data="x"))

    disposition = await pipeline.run_request(_request())
    assert disposition.overrides == {"post_data": "x"}


@pytest.mark.asyncio
async def test_async_handler_is_awaited_and_bounded():
    pipeline = InterceptionPipeline(handler_timeout_ms=50)
    order = []

    async def slow(record, actions):
        await asyncio.sleep(1)
        actions.abort()

    async def quick(record, actions):
        await asyncio.sleep(0)
        order.append("quick")
        actions.continue_(method="PATCH")

    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), slow)
    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), quick)

    disposition = await pipeline.run_request(_request())
    assert disposition.action is Action.CONTINUE
    assert disposition.overrides == {"method": "PATCH"}
    assert order == ["quick"]


@pytest.mark.asyncio
async def test_handler_raising_its_own_timeout_is_a_handler_error(caplog):
    pipeline = InterceptionPipeline(handler_timeout_ms=1000)

    async def waits_on_something_else(record, actions):
        await asyncio.wait_for(asyncio.Event().wait(), 0.01)

    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), waits_on_something_else)
    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), lambda r, a: a.continue_(method="PATCH"))

    with caplog.at_level(logging.WARNING, logger="tool_helper.tracking.pipeline"):
        disposition = await pipeline.run_request(_request())

    assert disposition.overrides == {"method": "PATCH"}
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Error in request handler 1") for message in messages)
    assert not any("timed out" in message for message in messages)


@pytest.mark.asyncio
async def test_unknown_continue_override_makes_the_handler_abstain(caplog):
    pipeline = InterceptionPipeline()
    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), lambda r, a: a.continue_(postData="x=1"))
    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), lambda r, a: a.continue_(headers={"x": "1"}))

    with caplog.at_level(logging.ERROR, logger="tool_helper.tracking.pipeline"):
        disposition = await pipeline.run_request(_request())

    assert disposition.action is Action.CONTINUE
    assert disposition.overrides == {"headers": {"x": "1"}}
    assert "Unsupported continue override(s): postData" in caplog.text


@pytest.mark.asyncio
async def test_disposed_handler_is_not_invoked():
    pipeline = InterceptionPipeline()
    calls = []
    dispose = pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), lambda r, a: calls.append("h"))
    dispose()
    dispose()

    await pipeline.run_request(_request())
    assert calls == []
    assert len(pipeline) == 0


@pytest.mark.asyncio
async def test_disposal_during_run_skips_later_handler():
    pipeline = InterceptionPipeline()
    calls = []
    disposers = {}

    def first(record, actions):
        calls.append("first")
        disposers["second"]()

    pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), first)
    disposers["second"] = pipeline.add(Phase.REQUEST, UrlMatcher.build("/api"), lambda r, a: calls.append("second"))

    await pipeline.run_request(_request())
    assert calls == ["first"]


@pytest.mark.asyncio
async def test_response_handlers_replace_body_in_order():
    pipeline = InterceptionPipeline()
    record = ResponseRecord(url="https://x/api/a", status=200, body={"n": 1})

    pipeline.add(Phase.RESPONSE, UrlMatcher.build("/api"), lambda r, a: a.modify_body({"n": r.body["n"] + 1}))

    async def double(r, a):
        a.modify_body({"n": r.body["n"] * 2})

    pipeline.add(Phase.RESPONSE, UrlMatcher.build("/api"), double)
    pipeline.add(Phase.RESPONSE, UrlMatcher.build("/api"), lambda r, a: None)

    await pipeline.run_response(record)
    assert record.body == {"n": 4}
    assert record.status == 200
