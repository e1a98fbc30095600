"""udt serve command — local HTTP endpoint for the messaging boundary.

POST /message with a JSON body such as
{"type": "TRANSLATE_TEXT", "text": "...", "targetLanguage": "ko"}
returns {"ok": true, "translatedText": "..."} or {"ok": false, "error": "..."}.

POST /caption {"slot": "main", "text": "..."} returns the line to render under
a caption slot ("" when disabled or on failure), and POST /caption/prefetch
{"url": "...", "currentTime": 12.5} primes the caption display cache.

The settings file is watched and reloaded on change; POST /settings/reload
forces a reload. Either clears the translation cache if preserve terms changed.

The engine runs on one asyncio loop in a background thread; request
handler threads only submit coroutines to it.
"""

from __future__ import annotations

import asyncio
import functools
import http.server
import json
import threading
import urllib.parse
from typing import Annotated, Optional

import typer
from pydantic import BaseModel, ValidationError

from udt.core.config import load_config
from udt.core.messages import CaptionPrefetchRequest, CaptionRequest
from udt.core.settings import SettingsFile
from udt.service.engine import Engine, build_engine
from udt.utils.console import console

_MAX_BODY = 1 << 20  # 1 MB
_REJECTED = object()


def serve(
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Port to serve on."),
    ] = None,
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="Host to bind to."),
    ] = None,
) -> None:
    """Serve translation and prefetch requests over local HTTP."""
    config = load_config(**{"server.host": host, "server.port": port})
    host, port = config.server.host, config.server.port

    loop = asyncio.new_event_loop()
    loop_thread = threading.Thread(target=loop.run_forever, name="udt-engine", daemon=True)
    loop_thread.start()

    engine, store = build_engine(config)
    server = create_server(engine, store, loop, host, port)
    watcher = asyncio.run_coroutine_threadsafe(
        store.watch(engine.settings, config.server.settings_poll_interval), loop
    )

    console.print(f"[bold green]Serving:[/bold green] http://{host}:{port}/message")
    console.print(f"[bold]Settings:[/bold] {store.path} (watched)")
    console.print(f"[bold]Target language:[/bold] {engine.settings.current.target_language}")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        console.print("\n[bold]Stopped.[/bold]")
    finally:
        server.server_close()
        watcher.cancel()
        asyncio.run_coroutine_threadsafe(engine.aclose(), loop).result()
        loop.call_soon_threadsafe(loop.stop)
        loop_thread.join()
        loop.close()


def create_server(
    engine: Engine,
    store: SettingsFile,
    loop: asyncio.AbstractEventLoop,
    host: str,
    port: int,
) -> http.server.ThreadingHTTPServer:
    """Bind an HTTP server whose handlers run engine calls on `loop`."""
    handler_class = functools.partial(_MessageHandler, engine=engine, store=store, loop=loop)
    return http.server.ThreadingHTTPServer((host, port), handler_class)


class _MessageHandler(http.server.BaseHTTPRequestHandler):
    """Bridge JSON HTTP requests onto the engine's event loop."""

    def __init__(
        self,
        *args,
        engine: Engine,
        store: SettingsFile,
        loop: asyncio.AbstractEventLoop,
        **kwargs,
    ):
        self.engine = engine
        self.store = store
        self.loop = loop
        super().__init__(*args, **kwargs)

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self._send_cors_headers()
        self.end_headers()

    def do_GET(self) -> None:
        path = urllib.parse.urlparse(self.path).path
        if path == "/health":
            self._send_json(200, {"ok": True})
        else:
            self.send_error(404)

    def do_POST(self) -> None:
        routes = {
            "/message": self._handle_message,
            "/caption": self._handle_caption,
            "/caption/prefetch": self._handle_caption_prefetch,
            "/settings/reload": self._reload_settings,
        }
        route = routes.get(urllib.parse.urlparse(self.path).path)
        if route is None:
            self.send_error(404)
            return
        route()

    def _handle_message(self) -> None:
        message = self._read_json()
        if message is _REJECTED:
            return
        self._respond(self.engine.handle(message))

    def _handle_caption(self) -> None:
        request = self._read_model(CaptionRequest)
        if request is None:
            return

        async def render() -> dict:
            translated = await self.engine.overlay.render(request.slot, request.text)
            return {"ok": True, "translatedText": translated}

        self._respond(render())

    def _handle_caption_prefetch(self) -> None:
        request = self._read_model(CaptionPrefetchRequest)
        if request is None:
            return

        async def prefetch() -> dict:
            primed = await self.engine.overlay.prefetch(request.url, request.current_time)
            return {"ok": True, "primed": primed}

        self._respond(prefetch())

    def _reload_settings(self) -> None:
        # Listeners mutate caches, so the reload runs on the engine loop
        async def sync() -> dict:
            return {"ok": True, "settings": self.store.sync(self.engine.settings).to_dict()}

        self._respond(sync())

    def _read_json(self) -> object:
        """Parsed request body, or _REJECTED after an error response was sent."""
        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            length = -1
        if length < 0 or length > _MAX_BODY:
            self._send_json(413, {"ok": False, "error": "Request body too large"})
            return _REJECTED

        try:
            return json.loads(self.rfile.read(length) or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            self._send_json(400, {"ok": False, "error": "Request body is not valid JSON"})
            return _REJECTED

    def _read_model(self, model: type[BaseModel]):
        body = self._read_json()
        if body is _REJECTED:
            return None
        try:
            return model.model_validate(body)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "body"
            self._send_json(400, {"ok": False, "error": f"{field}: {first['msg']}"})
            return None

    def _respond(self, coro) -> None:
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        try:
            result = future.result()
        except Exception as e:
            console.print(f"[red]Request handling failed:[/red] {e}")
            self._send_json(500, {"ok": False, "error": str(e)})
            return
        self._send_json(200, result)

    def _send_json(self, status: int, payload: dict) -> None:
        content = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self._send_cors_headers()
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(content)))
        self.end_headers()
        self.wfile.write(content)

    def _send_cors_headers(self) -> None:
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")

    def log_message(self, format, *args):
        """Suppress default access logs."""
        pass
