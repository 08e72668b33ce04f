import logging
import typing

import mido


logger = logging.getLogger(__name__)


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""
	Open a MIDI output port for live playback.

	With a ``device_name`` only that port is accepted. Without one, the only
	available port is used; when several exist the first is taken and the
	choice is logged so it can be pinned in the config file.

	Returns:
		``(device_name, port)``, or ``(None, None)`` if nothing could be opened.
	"""

	try:
		outputs = mido.get_output_names()
	except Exception as e:
		logger.error(f"Could not list MIDI outputs: {e}")
		return None, None

	logger.info(f"Available MIDI outputs: {outputs}")

	if not outputs:
		logger.error("No MIDI output devices found.")
		return None, None

	if device_name is not None and device_name not in outputs:
		logger.error(f"MIDI output device '{device_name}' not found. Available devices: {outputs}")
		return None, None

	selected = device_name if device_name is not None else outputs[0]

	if device_name is None and len(outputs) > 1:
		logger.warning(f"Several MIDI outputs found - using '{selected}'. Set midi.device_name to choose another.")

	try:
		port = mido.open_output(selected)
	except Exception as e:
		logger.error(f"Failed to open MIDI output '{selected}': {e}")
		return None, None

	logger.info(f"Opened MIDI output: {selected}")

	return selected, port
