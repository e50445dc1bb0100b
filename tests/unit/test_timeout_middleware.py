"""Tests for the read/write timeout middleware."""

import asyncio

from users_service.shared.api.middleware import TimeoutMiddleware

SCOPE = {"type": "http", "method": "POST", "path": "/api/users/", "headers": []}


async def _call(app, receive):
    sent = []

    async def send(message):
        sent.append(message)

    await app(dict(SCOPE), receive, send)
    return sent


async def reading_app(scope, receive, send):
    while True:
        message = await receive()
        if not message.get("more_body", False):
            break
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"ok"})


async def test_passes_through_fast_requests():
    app = TimeoutMiddleware(reading_app, read_timeout=1, write_timeout=1)

    async def receive():
        return {"type": "http.request", "body": b"{}", "more_body": False}

    sent = await _call(app, receive)

    assert sent[0]["status"] == 200


async def test_slow_body_gets_408():
    app = TimeoutMiddleware(reading_app, read_timeout=0.01, write_timeout=1)

    async def receive():
        await asyncio.sleep(10)

    sent = await _call(app, receive)

    assert sent[0]["type"] == "http.response.start"
    assert sent[0]["status"] == 408


async def test_slow_handler_gets_503():
    async def slow_app(scope, receive, send):
        await asyncio.sleep(10)

    app = TimeoutMiddleware(slow_app, read_timeout=1, write_timeout=0.01)

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    sent = await _call(app, receive)

    assert sent[0]["status"] == 503


async def test_receive_after_body_is_not_bounded():
    received = []

    async def app_waiting_for_disconnect(scope, receive, send):
        received.append(await receive())
        received.append(await receive())
        await send({"type": "http.response.start", "status": 204, "headers": []})
        await send({"type": "http.response.body", "body": b""})

    messages = [
        {"type": "http.request", "body": b"", "more_body": False},
        {"type": "http.disconnect"},
    ]

    async def receive():
        message = messages.pop(0)
        if message["type"] == "http.disconnect":
            await asyncio.sleep(0.05)
        return message

    app = TimeoutMiddleware(app_waiting_for_disconnect, read_timeout=0.01, write_timeout=1)

    sent = await _call(app, receive)

    assert received[1]["type"] == "http.disconnect"
    assert sent[0]["status"] == 204
