"""Central logging setup for the toolkit."""
from __future__ import annotations
import logging
import sys

def setup_logging(level: int | str = logging.INFO) -> None:
	"""
	Configure root logger with a single stdout handler.

	Args:
		level: Logging level, as an int or a name such as "DEBUG".
	"""
	if isinstance(level, str):
		level = logging.getLevelName(level.upper())
		if not isinstance(level, int):
			level = logging.INFO
	handler = logging.StreamHandler(sys.stdout)
	fmt = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
	handler.setFormatter(logging.Formatter(fmt))
	root = logging.getLogger()
	root.handlers.clear()
	root.addHandler(handler)
	root.setLevel(level)
