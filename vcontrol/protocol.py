"""Selection of the Optolink protocol."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from . import vs1, vs2
from .errors import VControlError

log = logging.getLogger(__name__)


class Protocol(Enum):
    """The protocol spoken on an Optolink connection."""

    VS1 = "VS1"
    VS2 = "VS2"

    @property
    def _module(self) -> Any:
        return vs1 if self is Protocol.VS1 else vs2

    @classmethod
    def detect(cls, optolink: Any) -> Optional[Protocol]:
        """Try detecting the protocol automatically."""
        for protocol in (cls.VS2, cls.VS1):
            try:
                protocol.negotiate(optolink)
            except (OSError, EOFError, VControlError) as err:
                log.debug("Negotiating %s failed: %s", protocol, err)
                continue
            return protocol
        return None

    def negotiate(self, optolink: Any) -> None:
        self._module.negotiate(optolink)

    def get(self, optolink: Any, addr: int, size: int) -> bytes:
        """Read ``size`` bytes at ``addr``."""
        return self._module.get(optolink, addr, size)

    def set(self, optolink: Any, addr: int, value: bytes) -> None:
        """Write ``value`` at ``addr``."""
        self._module.set(optolink, addr, value)

    def __str__(self) -> str:
        return self.value