"""Command dispatch for smart_hub covers.

The controller owns the per-cover records (device client, state machine),
the position store and the movement predictor. Every command updates state
synchronously and only then schedules the device request, so callers observe
the outcome immediately whatever the network does.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback

from .api import ShellyCoverApi
from .const import POSITION_CLOSED, POSITION_OPEN
from .exceptions import DeviceUnreachable, InvalidCover, SystemLocked
from .helpers import clamp_position
from .movement_predictor import MovementPredictor
from .position_store import PositionStore
from .state_machine import Affordances, CoverStateMachine, MovementState

if TYPE_CHECKING:
    from .reconciler import HardwareReconciler

_LOGGER = logging.getLogger(__name__)


class CoverAction(Enum):
    """Enum class for logical cover actions."""

    OPEN = "open"
    CLOSE = "close"
    STOP = "stop"
    GO_TO = "go_to"


@dataclass(frozen=True)
class CoverCommand:
    """A logical action for one cover."""

    action: CoverAction
    position: int | None = None

    @classmethod
    def open(cls) -> CoverCommand:
        return cls(CoverAction.OPEN)

    @classmethod
    def close(cls) -> CoverCommand:
        return cls(CoverAction.CLOSE)

    @classmethod
    def stop(cls) -> CoverCommand:
        return cls(CoverAction.STOP)

    @classmethod
    def go_to(cls, position) -> CoverCommand:
        return cls(CoverAction.GO_TO, clamp_position(position))

    @classmethod
    def parse(cls, value) -> CoverCommand:
        """Build a command from an action word or a percentage.

        Accepts "open", "close", "stop" in any case, or a number (also as
        a string) meaning go to that percentage. Raises ValueError otherwise.
        """
        if isinstance(value, CoverCommand):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid cover action: {value!r}")
        number = value
        if not isinstance(value, (int, float)):
            number = str(value).strip().lower()
            if number == CoverAction.OPEN.value:
                return cls.open()
            if number == CoverAction.CLOSE.value:
                return cls.close()
            if number == CoverAction.STOP.value:
                return cls.stop()
        try:
            number = float(number)
            if not math.isfinite(number):
                raise ValueError(number)
            return cls.go_to(number)
        except (ValueError, OverflowError):
            raise ValueError(f"Invalid cover action: {value!r}") from None

    @property
    def target(self) -> int | None:
        """Absolute target position, None for stop."""
        if self.action == CoverAction.OPEN:
            return POSITION_OPEN
        if self.action == CoverAction.CLOSE:
            return POSITION_CLOSED
        if self.action == CoverAction.GO_TO:
            return self.position
        return None


class SafetyLock:
    """System-wide gate that must be released before covers accept commands."""

    def __init__(self, locked: bool = True) -> None:
        self._locked = locked

    @property
    def locked(self) -> bool:
        return self._locked

    def engage(self) -> None:
        _LOGGER.info("Safety lock engaged")
        self._locked = True

    def release(self) -> None:
        _LOGGER.info("Safety lock released")
        self._locked = False


@dataclass
class CoverRecord:
    """Static configuration and runtime state of one cover."""

    cover_id: str
    name: str
    api: ShellyCoverApi
    machine: CoverStateMachine = field(init=False)
    communication_error: bool = False

    def __post_init__(self) -> None:
        self.machine = CoverStateMachine(self.cover_id)


class CoverController:
    """Issue cover commands and keep position and movement state consistent."""

    def __init__(
        self,
        hass: HomeAssistant,
        covers: list[CoverRecord],
        store: PositionStore,
        predictor: MovementPredictor,
        lock: SafetyLock,
    ) -> None:
        self.hass = hass
        self._covers = {record.cover_id: record for record in covers}
        self.store = store
        self.predictor = predictor
        self.lock = lock
        self._listeners: list[Callable[[str | None], None]] = []

    def _log(self, cover_id, msg, *args):
        """Log a debug message prefixed with the cover id."""
        _LOGGER.debug("(%s) " + msg, cover_id, *args)

    # -----------------------------------------------------------------------
    # State access
    # -----------------------------------------------------------------------

    @property
    def cover_ids(self) -> list[str]:
        return list(self._covers)

    @property
    def locked(self) -> bool:
        return self.lock.locked

    def record(self, cover_id: str) -> CoverRecord:
        try:
            return self._covers[cover_id]
        except KeyError:
            raise InvalidCover(cover_id) from None

    def position(self, cover_id: str) -> int:
        return self.store.get(cover_id)

    def state(self, cover_id: str) -> MovementState:
        return self.record(cover_id).machine.state

    def affordances(self, cover_id: str) -> Affordances:
        return self.record(cover_id).machine.affordances(self.position(cover_id))

    # -----------------------------------------------------------------------
    # Listeners
    # -----------------------------------------------------------------------

    @callback
    def async_add_listener(
        self, update_callback: Callable[[str | None], None]
    ) -> CALLBACK_TYPE:
        """Register a callback invoked with the id of a changed cover."""
        self._listeners.append(update_callback)

        @callback
        def remove_listener() -> None:
            if update_callback in self._listeners:
                self._listeners.remove(update_callback)

        return remove_listener

    @callback
    def async_update_listeners(self, cover_id: str | None = None) -> None:
        """Notify listeners; None means every cover changed."""
        for update_callback in list(self._listeners):
            update_callback(cover_id)

    # -----------------------------------------------------------------------
    # Command dispatch
    # -----------------------------------------------------------------------

    @callback
    def issue(self, cover_id: str, command: CoverCommand) -> int | None:
        """Apply a command to a cover and send it to the device.

        Returns the target position, or None for stop. Raises SystemLocked
        while the safety lock is engaged and InvalidCover for unknown ids.
        """
        if self.lock.locked:
            _LOGGER.warning(
                "System locked: %s for %s ignored", command.action.value, cover_id
            )
            raise SystemLocked
        record = self.record(cover_id)

        target = command.target
        if target is None:
            self._stop(record)
            return None
        return self._move(record, target)

    def _move(self, record: CoverRecord, target: int) -> int:
        cover_id = record.cover_id
        current = self.store.get(cover_id)
        direction = record.machine.begin(current, target)
        self.store.set(cover_id, target)
        duration = self.predictor.arm(cover_id, current, target, self._handle_arrival)
        self._log(
            cover_id,
            "move %d -> %d (%s), arrival in %fs",
            current,
            target,
            direction.value,
            duration,
        )
        self.async_update_listeners(cover_id)
        self.hass.async_create_task(self._async_send_position(record, target))
        return target

    def _stop(self, record: CoverRecord) -> None:
        cover_id = record.cover_id
        self.predictor.cancel(cover_id)
        record.machine.finish()
        self._log(cover_id, "stop at last recorded %d", self.store.get(cover_id))
        self.async_update_listeners(cover_id)
        self.hass.async_create_task(self._async_send_stop(record))

    @callback
    def _handle_arrival(self, cover_id: str, target: int) -> None:
        record = self.record(cover_id)
        record.machine.finish()
        self.store.set(cover_id, target)
        self._log(cover_id, "movement complete at %d", target)
        self.async_update_listeners(cover_id)

    async def _async_send_position(self, record: CoverRecord, target: int) -> None:
        try:
            await record.api.go_to_position(target)
        except DeviceUnreachable as err:
            _LOGGER.warning("Hardware error for %s: %s", record.cover_id, err)
            self._set_communication_error(record, True)
        else:
            self._set_communication_error(record, False)

    async def _async_send_stop(self, record: CoverRecord) -> None:
        try:
            await record.api.stop()
        except DeviceUnreachable as err:
            _LOGGER.warning("Hardware error for %s: %s", record.cover_id, err)
            self._set_communication_error(record, True)
        else:
            self._set_communication_error(record, False)

    # -----------------------------------------------------------------------
    # Reconciliation and lifecycle
    # -----------------------------------------------------------------------

    @callback
    def apply_reported_position(self, cover_id: str, position: int) -> bool:
        """Take a position reported by the device.

        Ignored while a predicted movement is in flight. Returns True when
        the report was applied.
        """
        record = self.record(cover_id)
        changed = record.communication_error
        record.communication_error = False
        if record.machine.is_moving():
            self._log(
                cover_id,
                "discarding reported %d while %s",
                position,
                record.machine.state.value,
            )
        else:
            previous = self.store.get(cover_id)
            stored = self.store.set(cover_id, position)
            if stored != previous:
                self._log(cover_id, "reconciled %d -> %d", previous, stored)
                changed = True
        if changed:
            self.async_update_listeners(cover_id)
        return not record.machine.is_moving()

    @callback
    def mark_unreachable(self, cover_id: str) -> None:
        self._set_communication_error(self.record(cover_id), True)

    def _set_communication_error(self, record: CoverRecord, value: bool) -> None:
        if record.communication_error == value:
            return
        record.communication_error = value
        self.async_update_listeners(record.cover_id)

    @callback
    def reset(self) -> None:
        """Drop every predicted movement and return all covers to idle."""
        self.predictor.cancel_all()
        for record in self._covers.values():
            record.machine.finish()
        _LOGGER.debug("All covers reset to idle")
        self.async_update_listeners(None)

    @callback
    def unlock(self) -> None:
        self.lock.release()
        self.reset()

    @callback
    def lock_system(self) -> None:
        self.lock.engage()
        self.async_update_listeners(None)

    @callback
    def async_shutdown(self) -> None:
        self.predictor.cancel_all()
        self._listeners.clear()


@dataclass
class SmartHubData:
    """Runtime objects of one loaded config entry."""

    controller: CoverController
    reconciler: HardwareReconciler
