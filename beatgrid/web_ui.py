import asyncio
import json
import logging
import typing

import websockets
import websockets.asyncio.server
import websockets.exceptions

import beatgrid.constants
import beatgrid.scheduler
import beatgrid.song


logger = logging.getLogger(__name__)

BROADCAST_INTERVAL = 0.1
HEARTBEAT_INTERVAL = 1.0


class WebUI:

	"""
	Transport status over WebSockets.

	Connected clients receive a JSON snapshot of the transport (tempo, swing,
	play state, the audible step and where it falls in the arrangement)
	whenever the scheduler reports a new step or starts or stops, at most ten
	times a second. A heartbeat snapshot goes out every second otherwise, so
	tempo and swing edits made while stopped still reach clients. Incoming
	messages are ignored.
	"""

	def __init__ (
		self,
		state: beatgrid.song.SongState,
		scheduler: typing.Optional[beatgrid.scheduler.TransportScheduler] = None,
		ws_port: int = 8765,
		host: str = "0.0.0.0"
	) -> None:

		self.state = state
		self.scheduler = scheduler
		self.ws_port = ws_port
		self.host = host
		self._ws_server: typing.Optional[websockets.asyncio.server.Server] = None
		self._broadcast_task: typing.Optional[asyncio.Task] = None
		self._clients: typing.Set[websockets.asyncio.server.ServerConnection] = set()
		self._changed = asyncio.Event()
		self._last_step: typing.Optional[int] = None

	async def start (self) -> None:

		"""Open the WebSocket server, follow the scheduler and begin broadcasting."""

		if self._ws_server is not None:
			return

		self._ws_server = await websockets.asyncio.server.serve(self._handle_client, self.host, self.ws_port)

		if self.scheduler is not None:
			self.scheduler.events.on("step", self._on_step)
			self.scheduler.events.on("start", self._on_transport)
			self.scheduler.events.on("stop", self._on_transport)

		self._broadcast_task = asyncio.create_task(self._broadcast_loop())

		logger.info(f"Status WebSocket listening on ws://{self.host}:{self.ws_port}")

	async def stop (self) -> None:

		"""Stop broadcasting, leave the scheduler and close every connection."""

		if self._ws_server is not None and self.scheduler is not None:
			self.scheduler.events.off("step", self._on_step)
			self.scheduler.events.off("start", self._on_transport)
			self.scheduler.events.off("stop", self._on_transport)

		if self._broadcast_task is not None:
			self._broadcast_task.cancel()
			try:
				await self._broadcast_task
			except asyncio.CancelledError:
				pass
			self._broadcast_task = None

		if self._ws_server is not None:
			self._ws_server.close()
			await self._ws_server.wait_closed()
			self._ws_server = None

	def _on_step (self, step: int) -> None:

		if step != self._last_step:
			self._changed.set()

	def _on_transport (self) -> None:

		self._changed.set()

	async def _handle_client (self, websocket: websockets.asyncio.server.ServerConnection) -> None:

		self._clients.add(websocket)

		# Drain until the client leaves; the channel is one-way.
		try:
			async for _message in websocket:
				pass
		except websockets.exceptions.ConnectionClosed:
			pass
		finally:
			self._clients.discard(websocket)

	async def _broadcast_loop (self) -> None:

		while True:

			try:
				await asyncio.wait_for(self._changed.wait(), HEARTBEAT_INTERVAL)
			except asyncio.TimeoutError:
				pass

			self._changed.clear()
			self.publish()

			await asyncio.sleep(BROADCAST_INTERVAL)

	def publish (self) -> None:

		"""Send the current snapshot to every connected client."""

		if not self._clients:
			return

		state = self.get_state()
		self._last_step = state["step"]

		try:
			websockets.broadcast(self._clients, json.dumps(state))
		except Exception:
			logger.exception("Error broadcasting transport state")

	def get_state (self) -> typing.Dict[str, typing.Any]:

		"""Return the transport snapshot that is sent to clients."""

		playing = self.scheduler is not None and self.scheduler.running
		step = self.state.current_step
		location = self.state.resolve_step(step)

		state: typing.Dict[str, typing.Any] = {
			"tempo": self.state.tempo,
			"swing": self.state.swing,
			"playing": playing,
			"step": step,
			"total_steps": self.state.total_steps(),
			"section": None,
			"section_step": None,
			"bar": None,
		}

		if location is not None:
			state["section"] = location.section.name
			state["section_step"] = location.step
			state["bar"] = location.bar + 1

		return state
