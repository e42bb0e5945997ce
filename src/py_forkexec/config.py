"""Machine configuration — the tables the simulator reads but never changes.

Three tables describe the simulated machine:

- **Vector table** — one handler address per device, e.g.::

      0X01E3
      0X029C

- **Device table** — one ISR duration (ticks) per device, same order::

      110
      297

- **External files** — the programs EXEC can load and their sizes::

      program1, 10
      program2, 15

They can also be supplied together as one JSON document::

    {"vectors": ["0X01E3", ...], "delays": [110, ...],
     "programs": {"program1": 10}, "partitions": [40, 25, 15, 10, 8, 2]}

Every loader raises ``ConfigError`` on an unreadable or malformed file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from py_forkexec.errors import ConfigError, OutOfRangeVectorError, UnknownProgramError
from py_forkexec.interrupts import VectorTable
from py_forkexec.memory.partitions import DEFAULT_PARTITION_SIZES

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class MachineConfig:
    """Everything the simulator needs to know about the machine.

    Attributes:
        vectors: Interrupt vector table.
        delays: ISR duration per device.
        programs: External files registry (program name → size in Mb).
        partitions: Capacities of the memory partitions.

    """

    vectors: VectorTable
    delays: tuple[int, ...]
    programs: dict[str, int] = field(default_factory=lambda: {})  # noqa: PIE807
    partitions: tuple[int, ...] = DEFAULT_PARTITION_SIZES

    def delay(self, device: int) -> int:
        """Return the ISR duration for a device.

        Raises:
            OutOfRangeVectorError: If the device has no entry.

        """
        if not 0 <= device < len(self.delays):
            msg = f"Device {device} is outside the ISR delay table (size {len(self.delays)})"
            raise OutOfRangeVectorError(msg)
        return self.delays[device]

    def program_size(self, name: str) -> int:
        """Return the image size of an external program.

        Raises:
            UnknownProgramError: If the program is not registered.

        """
        size = self.programs.get(name)
        if size is None:
            msg = f"Program {name!r} is not in the external files list"
            raise UnknownProgramError(msg)
        return size

    def describe_programs(self) -> str:
        """Render the external files registry, one program per line."""
        return "".join(f"{name}: {size} Mb\n" for name, size in self.programs.items())


def _read_lines(path: Path) -> list[str]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read {path}: {e}"
        raise ConfigError(msg) from e
    return [line.strip() for line in text.splitlines() if line.strip()]


def _to_int(text: str, where: str) -> int:
    try:
        value = int(text)
    except ValueError as e:
        msg = f"Expected an integer in {where}, got {text!r}"
        raise ConfigError(msg) from e
    if value < 0:
        msg = f"Expected a non-negative integer in {where}, got {value}"
        raise ConfigError(msg)
    return value


def load_vector_table(path: Path) -> VectorTable:
    """Load the vector table, one address per line."""
    return VectorTable(tuple(_read_lines(path)))


def load_delay_table(path: Path) -> tuple[int, ...]:
    """Load the ISR delays, one integer per line."""
    return tuple(_to_int(line, str(path)) for line in _read_lines(path))


def load_external_files(path: Path) -> dict[str, int]:
    """Load the external files registry from ``name, size`` lines."""
    programs: dict[str, int] = {}
    for line in _read_lines(path):
        name, sep, size = (part.strip() for part in line.partition(","))
        if not sep or not name:
            msg = f"Expected 'name, size' in {path}, got {line!r}"
            raise ConfigError(msg)
        programs[name] = _to_int(size, str(path))
    return programs


def load_machine_config(
    *,
    vector_table: Path,
    device_table: Path,
    external_files: Path,
) -> MachineConfig:
    """Load the three table files into a machine configuration."""
    return MachineConfig(
        vectors=load_vector_table(vector_table),
        delays=load_delay_table(device_table),
        programs=load_external_files(external_files),
    )


def config_from_dict(data: dict[str, Any]) -> MachineConfig:
    """Build a machine configuration from decoded JSON.

    Raises:
        ConfigError: If a required key is missing or has the wrong type.

    """
    try:
        vectors = [str(v) for v in data["vectors"]]
        delays = [_to_int(str(d), "delays") for d in data["delays"]]
        programs = {str(k): _to_int(str(v), "programs") for k, v in data.get("programs", {}).items()}
        partitions = [
            _to_int(str(p), "partitions") for p in data.get("partitions", DEFAULT_PARTITION_SIZES)
        ]
    except (KeyError, TypeError, AttributeError) as e:
        msg = f"Malformed machine configuration: {e!r}"
        raise ConfigError(msg) from e
    return MachineConfig(
        vectors=VectorTable(tuple(vectors)),
        delays=tuple(delays),
        programs=programs,
        partitions=tuple(partitions),
    )


def load_machine_config_json(path: Path) -> MachineConfig:
    """Load a machine configuration from a single JSON file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load machine configuration: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = f"Machine configuration in {path} must be a JSON object"
        raise ConfigError(msg)
    return config_from_dict(data)
