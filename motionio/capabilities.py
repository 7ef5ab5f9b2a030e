"""
Capability discovery and register address map
=============================================

The board reports how many units of each peripheral family it carries
in a single capability word. Register blocks are laid out back to back
in a flat register space:

    +---------+------------------+-----------------+-----------------+
    | SYS (1) | PWM (4 per unit) | QE (7 per unit) | RC (4 per unit) |
    +---------+------------------+-----------------+-----------------+

Capability word layout (4-bit unit counts):

    bits  8-11 : PWM units
    bits 12-15 : quadrature encoder units
    bits 16-19 : RC units

Example:
    >>> caps = CapabilityMap(session)
    >>> status, amap = caps.discover()
    >>> status, reg = caps.qe_register(unit=0, offset=2)
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import (
    PWM_UNITS_SHIFT,
    QE_UNITS_SHIFT,
    RC_UNITS_SHIFT,
    REGISTERS_PER_PWM,
    REGISTERS_PER_QE,
    REGISTERS_PER_RC,
    SYS_BASE,
    SYS_REGISTERS,
    UNIT_COUNT_MASK,
)
from .diagnostics import DiagnosticCommand
from .errors import ErrorCode
from .formatter import Command
from .session import CommandSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddressMap:
    """
    Register base offsets and unit counts derived from the capability word.

    Attributes
    ----------
    pwm_units, qe_units, rc_units : int
        Number of units in each peripheral family
    sys_base, pwm_base, qe_base, rc_base : int
        Start of each family's register block
    capability_word : int
        Raw word the map was derived from
    """
    pwm_units: int
    qe_units: int
    rc_units: int
    sys_base: int
    pwm_base: int
    qe_base: int
    rc_base: int
    capability_word: int = 0

    @classmethod
    def from_capability_word(cls, word: int) -> 'AddressMap':
        pwm_units = (word >> PWM_UNITS_SHIFT) & UNIT_COUNT_MASK
        qe_units = (word >> QE_UNITS_SHIFT) & UNIT_COUNT_MASK
        rc_units = (word >> RC_UNITS_SHIFT) & UNIT_COUNT_MASK
        return cls.from_unit_counts(pwm_units, qe_units, rc_units, capability_word=word)

    @classmethod
    def from_unit_counts(cls, pwm_units: int, qe_units: int, rc_units: int,
                         capability_word: int = 0) -> 'AddressMap':
        pwm_base = SYS_BASE + SYS_REGISTERS
        qe_base = pwm_base + pwm_units * REGISTERS_PER_PWM
        rc_base = qe_base + qe_units * REGISTERS_PER_QE
        return cls(
            pwm_units=pwm_units,
            qe_units=qe_units,
            rc_units=rc_units,
            sys_base=SYS_BASE,
            pwm_base=pwm_base,
            qe_base=qe_base,
            rc_base=rc_base,
            capability_word=capability_word,
        )

    @property
    def register_count(self) -> int:
        """Total size of the register space."""
        return self.rc_base + self.rc_units * REGISTERS_PER_RC


class CapabilityMap:
    """
    Owner of the address map.

    The map is replaced as a whole after each successful discovery, so
    readers see either the previous map or the new one.
    """

    def __init__(self, session: CommandSession):
        self.session = session
        self._map: Optional[AddressMap] = None
        self._lock = threading.Lock()

    @property
    def is_known(self) -> bool:
        return self._map is not None

    def discover(self) -> Tuple[ErrorCode, Optional[AddressMap]]:
        """
        Query the capability register and rebuild the address map.

        Returns:
            (NO_ERROR, AddressMap) on success. On failure the session's
            error code and None; the previous map is kept.
        """
        command = Command.from_literal(DiagnosticCommand.CAPABILITIES)
        result = self.session.query(command)
        if not result.ok:
            return result.status, None

        if result.result < 0:
            logger.warning(f"Negative capability word {result.result}")
            return ErrorCode.MALFORMED_REPLY, None

        new_map = AddressMap.from_capability_word(result.result)
        with self._lock:
            self._map = new_map
        logger.info(
            f"Capabilities 0x{new_map.capability_word:X}: "
            f"{new_map.pwm_units} PWM, {new_map.qe_units} QE, {new_map.rc_units} RC"
        )
        return ErrorCode.NO_ERROR, new_map

    def reset(self) -> None:
        """Forget the current map until the next successful discovery."""
        with self._lock:
            self._map = None

    def get_address_map(self) -> Tuple[ErrorCode, Optional[AddressMap]]:
        with self._lock:
            amap = self._map
        if amap is None:
            return ErrorCode.CAPABILITIES_UNKNOWN, None
        return ErrorCode.NO_ERROR, amap

    def _register(self, family: str, unit: int, offset: int) -> Tuple[ErrorCode, Optional[int]]:
        status, amap = self.get_address_map()
        if amap is None:
            logger.warning(f"{family} register requested before capability discovery")
            return status, None

        base, units, size = {
            'SYS': (amap.sys_base, 1, SYS_REGISTERS),
            'PWM': (amap.pwm_base, amap.pwm_units, REGISTERS_PER_PWM),
            'QE': (amap.qe_base, amap.qe_units, REGISTERS_PER_QE),
            'RC': (amap.rc_base, amap.rc_units, REGISTERS_PER_RC),
        }[family]

        if not (0 <= unit < units and 0 <= offset < size):
            logger.warning(f"{family} unit {unit} offset {offset} out of range "
                           f"({units} units, {size} registers each)")
            return ErrorCode.REGISTER_OUT_OF_RANGE, None
        return ErrorCode.NO_ERROR, base + unit * size + offset

    def sys_register(self, offset: int = 0) -> Tuple[ErrorCode, Optional[int]]:
        return self._register('SYS', 0, offset)

    def pwm_register(self, unit: int, offset: int) -> Tuple[ErrorCode, Optional[int]]:
        return self._register('PWM', unit, offset)

    def qe_register(self, unit: int, offset: int) -> Tuple[ErrorCode, Optional[int]]:
        return self._register('QE', unit, offset)

    def rc_register(self, unit: int, offset: int) -> Tuple[ErrorCode, Optional[int]]:
        return self._register('RC', unit, offset)
