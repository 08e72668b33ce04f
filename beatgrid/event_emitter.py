"""Transport event fan-out.

The scheduler publishes three events:

- ``"start"`` - playback began (no arguments)
- ``"step"`` - the audible step, once per frame (``step: int``)
- ``"stop"`` - playback ended (no arguments)

Observers (the status WebSocket, example scripts) subscribe with ``on`` and
leave with ``off``. A listener that raises is logged and skipped so one
broken observer cannot stall the transport.
"""

import asyncio
import inspect
import logging
import typing


logger = logging.getLogger(__name__)

Listener = typing.Callable[..., typing.Any]

TRANSPORT_EVENTS = ("start", "step", "stop")


class EventEmitter:

	def __init__ (self, event_names: typing.Iterable[str] = TRANSPORT_EVENTS) -> None:

		self._listeners: typing.Dict[str, typing.List[Listener]] = {name: [] for name in event_names}


	def _listeners_for (self, event_name: str) -> typing.List[Listener]:

		if event_name not in self._listeners:
			raise ValueError(f"Unknown event {event_name!r}; expected one of {sorted(self._listeners)}")

		return self._listeners[event_name]

	def on (self, event_name: str, callback: Listener) -> None:

		"""
		Subscribe a plain or coroutine function. Unknown event names raise
		``ValueError`` rather than silently never firing.
		"""

		self._listeners_for(event_name).append(callback)

	def off (self, event_name: str, callback: Listener) -> None:

		"""
		Unsubscribe a callback. Raises ``ValueError`` if it was never subscribed.
		"""

		listeners = self._listeners_for(event_name)

		if callback not in listeners:
			raise ValueError(f"Callback not registered for event {event_name!r}")

		listeners.remove(callback)


	async def emit (self, event_name: str, *args: typing.Any) -> None:

		"""
		Call plain listeners in order, then await coroutine listeners together.
		"""

		pending: typing.List[typing.Awaitable[typing.Any]] = []

		for callback in list(self._listeners_for(event_name)):

			if inspect.iscoroutinefunction(callback):
				pending.append(callback(*args))
				continue

			try:
				callback(*args)
			except Exception:
				logger.exception(f"Listener {callback!r} failed on {event_name!r}")

		results = await asyncio.gather(*pending, return_exceptions=True)

		for result in results:
			if isinstance(result, Exception):
				logger.error(f"Async listener failed on {event_name!r}", exc_info=result)
