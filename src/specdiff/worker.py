# -*- coding: utf-8 -*-
"""
Cliente asíncrono de petición/respuesta para los motores de diff.

A diff engine runs on its own thread and is reached only by messages:
each request is posted with a correlation id, and the engine posts back
exactly one response carrying the same id.  Payloads cross the boundary as
JSON text, so the two sides never share objects.
"""
import asyncio
import json
import logging
import queue
import threading

from .config import DiffConfig
from .errors import DiffEngineError

log = logging.getLogger(__name__)

_STOP = object()


class DiffWorker(object):
    """
    Runs `handler(payload)` on a dedicated thread and exposes it as an
    awaitable `run(payload)`.

    The worker owns its id counter and the map of pending futures; both are
    only touched from the event loop thread.  Responses may arrive in any
    order.  There is no timeout: a request the engine never answers leaves
    its caller waiting.
    """

    def __init__(self, handler, name='diff-worker', config=None):
        self.handler = handler
        self.name = name
        self.config = config or DiffConfig()
        self.next_id = 0
        self.pending = {}
        self._inbox = queue.Queue()
        self._thread = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()

    def start(self):
        if self._thread is None:
            self._thread = threading.Thread(target=self._serve, name=self.name)
            self._thread.daemon = True
            self._thread.start()

    def close(self):
        if self._thread is not None:
            self._inbox.put(_STOP)
            self._thread.join()
            self._thread = None

    def _take_id(self):
        request_id = self.next_id
        self.next_id += 1
        if self.next_id > getattr(self.config, 'max_request_id', 1000000):
            self.next_id = 0
        return request_id

    async def run(self, data):
        """Post `data` to the engine and wait for its response."""
        loop = asyncio.get_running_loop()
        request_id = self._take_id()
        future = loop.create_future()
        self.pending[request_id] = future
        self.start()
        log.debug('%s: request %d posted', self.name, request_id)
        self._inbox.put((request_id, json.dumps(data), loop))
        return await future

    def on_message(self, request_id, data, error=None):
        """Resolve the pending request `request_id` (runs on the loop thread)."""
        future = self.pending.pop(request_id, None)
        if future is None:
            log.warning('%s: response for unknown request %r', self.name, request_id)
            return
        if future.done():
            return
        if error is not None:
            future.set_exception(DiffEngineError(request_id, error))
        else:
            future.set_result(json.loads(data))

    def _serve(self):
        while True:
            message = self._inbox.get()
            if message is _STOP:
                break
            request_id, data, loop = message
            try:
                result = json.dumps(self.handler(json.loads(data)))
            except Exception as exc:
                log.exception('%s: request %d failed', self.name, request_id)
                reply = (request_id, None, '%s: %s' % (type(exc).__name__, exc))
            else:
                reply = (request_id, result, None)
            try:
                loop.call_soon_threadsafe(self.on_message, *reply)
            except RuntimeError:
                # The caller's loop is gone; nobody is left to receive this.
                log.warning('%s: dropped response %d, event loop closed',
                            self.name, request_id)
