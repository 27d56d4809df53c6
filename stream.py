"""
Status events written by tools while a chat turn runs.
"""

import logging
from typing import List

from schemas import DataStreamEvent

logger = logging.getLogger(__name__)


class DataStream:
    """Collects tool status events in the order they were written."""

    def __init__(self):
        self.events: List[DataStreamEvent] = []

    def write_data(self, type: str, content: str = "") -> DataStreamEvent:
        event = DataStreamEvent(type=type, content=content)
        self.events.append(event)
        logger.debug(f"[STREAM] {type}: {content}")
        return event
