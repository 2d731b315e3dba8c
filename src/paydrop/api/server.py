"""HTTP surface: drop info, per-stake status, intents and static files."""

from __future__ import annotations

import logging
from pathlib import Path

from aiohttp import web

from paydrop.api.status import StatusQuery

log = logging.getLogger(__name__)

STATUS_QUERY = web.AppKey("status_query", StatusQuery)
DROP_INFO = web.AppKey("drop_info", dict)


async def handle_info(request: web.Request) -> web.Response:
    return web.json_response(request.app[DROP_INFO])


async def handle_status(request: web.Request) -> web.Response:
    stake = request.match_info["stake"]
    status = await request.app[STATUS_QUERY].lookup(stake)
    return web.json_response(status.to_dict())


async def handle_intent(request: web.Request) -> web.Response:
    # Signed intents are acknowledged only; nothing is stored.
    return web.json_response({"ok": True})


def create_app(
    status_query: StatusQuery,
    network: str,
    price_lovelace: int,
    mint_address: str,
    policy_id: str,
    static_dir: str | None = None,
) -> web.Application:
    app = web.Application()
    app[STATUS_QUERY] = status_query
    app[DROP_INFO] = {
        "network": network,
        "price_lovelace": str(price_lovelace),
        "mint_address": mint_address,
        "policy_id": policy_id,
    }
    app.router.add_get("/api/info", handle_info)
    app.router.add_get("/api/status/{stake}", handle_status)
    app.router.add_post("/api/intent", handle_intent)

    if static_dir and Path(static_dir).is_dir():
        app.router.add_get("/", _index_handler(Path(static_dir)))
        app.router.add_static("/", static_dir)
    return app


def _index_handler(static_dir: Path):
    index = static_dir / "index.html"

    async def handle_index(request: web.Request) -> web.StreamResponse:
        if index.exists():
            return web.FileResponse(index)
        raise web.HTTPNotFound()

    return handle_index


class HttpServer:
    """Owns the aiohttp runner for the daemon's lifetime."""

    def __init__(self, app: web.Application, host: str, port: int) -> None:
        self._app = app
        self._host = host
        self._port = port
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._host, self._port)
        await site.start()
        log.info("Mint server on :%d", self._port)

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
