"""Session object for one Daly BMS connection.

:class:`DalyBMS` owns the transport, the request dispatcher and the cached
status. Cell voltages, temperatures and balancing bits are sized by the cell
and sensor counts from the last status query, so those calls fail with
:class:`PrerequisiteMissingError` until :meth:`DalyBMS.get_status` has
succeeded once on this connection.

Usage::

    with DalyBMS(BMSSettings(port="/dev/ttyUSB0")) as bms:
        print(bms.get_soc())
        print(bms.get_cell_voltages())
"""

from __future__ import annotations

import logging

from .config import BMSSettings
from .errors import DalyBMSError, PrerequisiteMissingError
from .models.measurements import (
    AllData,
    CellVoltageRange,
    MosfetStatus,
    SOCData,
    StatusData,
    TemperatureRange,
)
from .protocol.commands import Command, build_mosfet_payload, build_soc_payload
from .protocol.dispatcher import RequestDispatcher
from .protocol.pages import CELL_VOLTAGES, TEMPERATURES, SeriesLayout, plan_page_count, reassemble
from .protocol.parser import (
    cell_voltages_from_raw,
    parse_balancing_status,
    parse_cell_voltage_range,
    parse_errors,
    parse_mosfet_status,
    parse_soc,
    parse_status,
    parse_temperature_range,
    temperatures_from_raw,
)
from .transport.base import Transport
from .transport.serial_connection import SerialConnection

logger = logging.getLogger(__name__)


class DalyBMS:
    """Polling client for a Daly BMS.

    Args:
        settings: Port, address variant and retry count. Defaults to
            :class:`BMSSettings` defaults.
        transport: Transport to use instead of a :class:`SerialConnection`
            built from ``settings``.
    """

    def __init__(
        self,
        settings: BMSSettings | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._settings = settings or BMSSettings()
        self._transport = transport or SerialConnection(
            port=self._settings.port,
            baudrate=self._settings.baudrate,
            timeout=self._settings.timeout,
        )
        self._dispatcher = RequestDispatcher(
            self._transport,
            address=self._settings.address,
            retries=self._settings.retries,
        )
        self._status: StatusData | None = None

    def __enter__(self) -> DalyBMS:
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect()

    @property
    def settings(self) -> BMSSettings:
        return self._settings

    @property
    def connected(self) -> bool:
        return self._transport.connected

    @property
    def status(self) -> StatusData | None:
        """Status from the last successful status query, or None."""
        return self._status

    # ─── CONNECTION ──────────────────────────────────────────────────

    def connect(self) -> None:
        """Open the transport and try one status query.

        A failed initial status query is logged, not raised; paginated
        queries will keep failing until a later status query succeeds.
        """
        self._transport.open()
        self._status = None
        try:
            self.get_status()
        except DalyBMSError as e:
            logger.warning("Initial status query failed: %s", e)

    def disconnect(self) -> None:
        """Close the transport and forget the cached status."""
        self._status = None
        self._transport.close()

    # ─── QUERIES ─────────────────────────────────────────────────────

    def _query(self, command: Command) -> bytes:
        return self._dispatcher.send(command)[0]

    def get_status(self) -> StatusData:
        """Read cell/sensor counts and I/O states, and cache them."""
        status = parse_status(self._query(Command.STATUS))
        self._status = status
        return status

    def get_soc(self) -> SOCData:
        return parse_soc(self._query(Command.SOC))

    def get_cell_voltage_range(self) -> CellVoltageRange:
        return parse_cell_voltage_range(self._query(Command.CELL_VOLTAGE_RANGE))

    def get_temperature_range(self) -> TemperatureRange:
        return parse_temperature_range(self._query(Command.TEMPERATURE_RANGE))

    def get_mosfet_status(self) -> MosfetStatus:
        return parse_mosfet_status(self._query(Command.MOSFET_STATUS))

    def _require_status(self, what: str) -> StatusData:
        if self._status is None:
            raise PrerequisiteMissingError(
                f"get_status must succeed before reading {what}"
            )
        return self._status

    def _read_series(
        self, command: Command, layout: SeriesLayout, item_total: int
    ) -> dict[int, int]:
        pages = plan_page_count(
            item_total,
            layout.items_per_page,
            self._dispatcher.address,
            layout.bridge_pages,
        )
        if pages <= 0:
            return {}
        payloads = self._dispatcher.send(command, expected_frames=pages)
        series = reassemble(payloads, layout.item_width, item_total)
        if len(series) < item_total:
            logger.warning(
                "Got %d of %d %s", len(series), item_total, layout.name
            )
        return series

    def get_cell_voltages(self) -> dict[int, float]:
        """Read every cell voltage in volts, keyed by 1-based cell number.

        The result may hold fewer cells than the pack has if reply pages
        were lost.
        """
        status = self._require_status(CELL_VOLTAGES.name)
        raw = self._read_series(Command.CELL_VOLTAGES, CELL_VOLTAGES, status.cell_count)
        return cell_voltages_from_raw(raw)

    def get_temperatures(self) -> dict[int, float]:
        """Read every temperature sensor in °C, keyed by 1-based sensor number."""
        status = self._require_status(TEMPERATURES.name)
        raw = self._read_series(Command.TEMPERATURES, TEMPERATURES, status.sensor_count)
        return temperatures_from_raw(raw)

    def get_balancing_status(self) -> dict[int, bool]:
        """Read which cells are currently balancing."""
        status = self._require_status("balancing status")
        return parse_balancing_status(
            self._query(Command.BALANCING_STATUS), status.cell_count
        )

    def get_errors(self) -> list[str]:
        """Read active fault names. An empty list means no faults."""
        return parse_errors(self._query(Command.ERRORS))

    def get_all_data(self) -> AllData:
        """Run every query once. Status is refreshed before the paged reads."""
        soc = self.get_soc()
        cell_voltage_range = self.get_cell_voltage_range()
        temperature_range = self.get_temperature_range()
        mosfet_status = self.get_mosfet_status()
        status = self.get_status()
        return AllData(
            soc=soc,
            cell_voltage_range=cell_voltage_range,
            temperature_range=temperature_range,
            mosfet_status=mosfet_status,
            status=status,
            cell_voltages=self.get_cell_voltages(),
            temperatures=self.get_temperatures(),
            balancing_status=self.get_balancing_status(),
            errors=self.get_errors(),
        )

    # ─── WRITE COMMANDS ──────────────────────────────────────────────

    def _command(self, command: Command, extra: bytes, retries: int | None = None) -> bytes:
        payload = self._dispatcher.send(command, extra, retries=retries)[0]
        logger.info("Command %s acknowledged: %s", command.name, payload.hex(" "))
        return payload

    def set_charge_mosfet(self, on: bool) -> bytes:
        """Switch the charge MOSFET on or off. Returns the raw reply payload."""
        return self._command(Command.SET_CHARGE_MOSFET, build_mosfet_payload(on))

    def set_discharge_mosfet(self, on: bool) -> bytes:
        """Switch the discharge MOSFET on or off. Returns the raw reply payload."""
        return self._command(Command.SET_DISCHARGE_MOSFET, build_mosfet_payload(on))

    def set_soc(self, percent: float) -> bytes:
        """Set the state of charge, clamped to 0-100 %."""
        return self._command(Command.SET_SOC, build_soc_payload(percent))

    def restart(self) -> bytes:
        """Restart the BMS. Sent once, without retries."""
        return self._command(Command.RESTART, b"", retries=1)
