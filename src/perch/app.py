"""Perch application class.

Mutable during setup (namespace mounts, error handlers).
Frozen on first use: the dispatch table is compiled exactly once.
"""

import threading
from collections.abc import Callable
from types import ModuleType
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.types import ErrorHandler
from perch.config import AppConfig
from perch.dispatcher import Dispatcher
from perch.errors import NotFound
from perch.http.request import RequestContext
from perch.routing.table import DispatchTable, MiddlewareSpec, NamespaceSpec, compile_dispatch_table
from perch.server.handler import handle_request


def _not_found(request: RequestContext) -> Any:
    raise NotFound(f"No route matches {request.method} {request.path!r}")


class App:
    """The perch application: an ASGI app serving mounted namespaces.

    Usage::

        app = App(AppConfig(context_path="api"))
        app.mount("myapp.items", context="items")
        app.mount("myapp.users", context="users", middleware=audit)

    Thread safety:
        Setup is single-threaded (module import time). The freeze
        transition uses a Lock + double-check so exactly one thread
        compiles the dispatch table, even if several workers receive
        their first request at once.
    """

    __slots__ = (
        "_dispatcher",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_namespaces",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *namespaces: NamespaceSpec | ModuleType | str | tuple[Any, ...],
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._namespaces: list[NamespaceSpec] = [NamespaceSpec.coerce(ns) for ns in namespaces]
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state — set during _freeze()
        self._dispatcher: Dispatcher | None = None

    # -- Registration --

    def mount(
        self,
        module: ModuleType | str,
        *,
        context: str | tuple[str, ...] = (),
        middleware: MiddlewareSpec = None,
    ) -> None:
        """Expose *module*'s endpoint functions under *context*."""
        self._check_not_frozen()
        self._namespaces.append(NamespaceSpec(module, context=context, middleware=middleware))

    def error(self, code_or_exception: int | type[Exception]) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler for a status code or exception type.

        Usage::

            @app.error(404)
            def not_found(request):
                return {"error": "no such resource"}, 404
        """
        self._check_not_frozen()

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Compiled state --

    @property
    def table(self) -> DispatchTable:
        """The compiled dispatch table (compiles on first access)."""
        return self.dispatcher.table

    @property
    def dispatcher(self) -> Dispatcher:
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher

    def check(self) -> DispatchTable:
        """Compile the dispatch table now, raising any configuration error."""
        return self.table

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            dispatcher=self.dispatcher,
            config=self.config,
            error_handlers=self._error_handlers,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Compiles the dispatch table at startup so configuration errors
        fail the server start instead of the first request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        table = compile_dispatch_table(self._namespaces, self.config)
        self._dispatcher = Dispatcher(table, fallback=_not_found)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify the app after its dispatch table has been compiled."
            raise RuntimeError(msg)
