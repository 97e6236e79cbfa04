import asyncio
import json
import os
import threading
import time
import typing
from http.cookies import SimpleCookie
from urllib.parse import parse_qsl

import httpx
import pytest
from uvicorn.config import Config
from uvicorn.server import Server

ENVIRONMENT_VARIABLES = {
    "HTTPOPTS_USER_AGENT",
    "HTTPOPTS_REDIRECT_LIMIT",
    "HTTPOPTS_TIMEOUT",
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "ALL_PROXY",
    "NO_PROXY",
}


@pytest.fixture(scope="function", autouse=True)
def clean_environ():
    """Keeps os.environ clean for every test without having to mock os.environ"""
    original_environ = os.environ.copy()
    os.environ.clear()
    os.environ.update(
        {
            k: v
            for k, v in original_environ.items()
            if k not in ENVIRONMENT_VARIABLES and k.upper() not in ENVIRONMENT_VARIABLES
        }
    )
    yield
    os.environ.clear()
    os.environ.update(original_environ)


Message = typing.Dict[str, typing.Any]
Receive = typing.Callable[[], typing.Awaitable[Message]]
Send = typing.Callable[
    [typing.Dict[str, typing.Any]], typing.Coroutine[None, None, None]
]
Scope = typing.Dict[str, typing.Any]


async def app(scope: Scope, receive: Receive, send: Send) -> None:
    assert scope["type"] == "http"
    path = scope["path"]
    if path.startswith("/slow_response"):
        await slow_response(scope, receive, send)
    elif path.startswith("/echo_body"):
        await echo_body(scope, receive, send)
    elif path.startswith("/echo_headers"):
        await echo_headers(scope, receive, send)
    elif path.startswith("/echo_query"):
        await echo_query(scope, receive, send)
    elif path.startswith("/cookies/set/"):
        await set_cookie(scope, receive, send)
    elif path.startswith("/cookies"):
        await read_cookies(scope, receive, send)
    elif path.startswith("/redirect/"):
        await redirect(scope, receive, send)
    elif path.startswith("/json"):
        await hello_world_json(scope, receive, send)
    else:
        await hello_world(scope, receive, send)


async def _send_json(send: Send, body: typing.Any, status: int = 200) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [[b"content-type", b"application/json"]],
        }
    )
    await send({"type": "http.response.body", "body": json.dumps(body).encode()})


async def _read_body(receive: Receive) -> bytes:
    body = b""
    more_body = True
    while more_body:
        message = await receive()
        body += message.get("body", b"")
        more_body = message.get("more_body", False)
    return body


def _header(scope: Scope, name: bytes) -> str:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value.decode("latin-1")
    return ""


async def hello_world(scope: Scope, receive: Receive, send: Send) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [[b"content-type", b"text/plain"]],
        }
    )
    await send({"type": "http.response.body", "body": b"Hello, world!"})


async def hello_world_json(scope: Scope, receive: Receive, send: Send) -> None:
    await _send_json(send, {"Hello": "world!"})


async def slow_response(scope: Scope, receive: Receive, send: Send) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [[b"content-type", b"text/plain"]],
        }
    )
    await asyncio.sleep(1.0)  # Allow triggering a read timeout.
    await send({"type": "http.response.body", "body": b"Hello, world!"})


async def echo_body(scope: Scope, receive: Receive, send: Send) -> None:
    body = await _read_body(receive)
    content_type = _header(scope, b"content-type") or "application/octet-stream"
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [[b"content-type", content_type.encode("latin-1")]],
        }
    )
    await send({"type": "http.response.body", "body": body})


async def echo_headers(scope: Scope, receive: Receive, send: Send) -> None:
    await _send_json(
        send,
        {
            name.decode().lower(): value.decode()
            for name, value in scope.get("headers", [])
        },
    )


async def echo_query(scope: Scope, receive: Receive, send: Send) -> None:
    query = scope.get("query_string", b"").decode("ascii")
    await _send_json(send, {"method": scope["method"], "query": parse_qsl(query)})


async def set_cookie(scope: Scope, receive: Receive, send: Send) -> None:
    name, _, value = scope["path"][len("/cookies/set/"):].partition("/")
    await send(
        {
            "type": "http.response.start",
            "status": 302,
            "headers": [
                [b"location", b"/cookies"],
                [b"set-cookie", f"{name}={value}; Path=/".encode()],
            ],
        }
    )
    await send({"type": "http.response.body"})


async def read_cookies(scope: Scope, receive: Receive, send: Send) -> None:
    cookie = SimpleCookie()
    cookie.load(_header(scope, b"cookie"))
    await _send_json(send, {"cookies": {key: m.value for key, m in cookie.items()}})


async def redirect(scope: Scope, receive: Receive, send: Send) -> None:
    remaining = int(scope["path"][len("/redirect/"):])
    location = b"/" if remaining <= 1 else f"/redirect/{remaining - 1}".encode()
    await send(
        {"type": "http.response.start", "status": 302, "headers": [[b"location", location]]}
    )
    await send({"type": "http.response.body"})


class TestServer(Server):
    def install_signal_handlers(self) -> None:
        # Disable the default installation of handlers for signals such as SIGTERM,
        # because it can only be done in the main thread.
        pass

    @property
    def url(self) -> httpx.URL:
        protocol = "https" if self.config.is_ssl else "http"
        port = self.servers[0].sockets[0].getsockname()[1]
        return httpx.URL(f"{protocol}://{self.config.host}:{port}/")


def serve_in_thread(server: TestServer) -> typing.Iterator[TestServer]:
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    try:
        deadline = time.monotonic() + 10
        while not server.started:
            if time.monotonic() > deadline:
                raise RuntimeError("Server failed to start within 10 seconds")
            time.sleep(1e-3)
        yield server
    finally:
        server.should_exit = True
        thread.join(timeout=5)


@pytest.fixture(scope="session")
def server() -> typing.Iterator[TestServer]:
    config = Config(app=app, lifespan="off", loop="asyncio", host="127.0.0.1", port=0)
    server = TestServer(config=config)
    yield from serve_in_thread(server)
