# src/hybrid/config.py
import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from stft.fft_kernel import is_power_of_two
from stft.stft_transform import hop_size
from .operations import Operation, PhaseMode

WINDOW_SIZES = (512, 1024, 2048, 4096, 8192)

# Accepted spellings for each field in config files
_KEYS = {
    "window_size": ("window_size", "windowSize", "fft_size"),
    "overlap_percent": ("overlap_percent", "overlap", "overlapPercent"),
    "operation": ("operation",),
    "phase_mode": ("phase_mode", "phaseMode"),
    "time_align": ("time_align", "timeAlign", "timeMatch"),
    "max_workers": ("max_workers", "workers"),
}


@dataclass
class ProcessingConfig:
    """Settings for one hybridization run. Invalid values raise ValueError on construction."""

    window_size: int = 2048
    overlap_percent: int = 75
    operation: Operation = Operation.AVERAGE
    phase_mode: PhaseMode = PhaseMode.A
    time_align: bool = True
    max_workers: int = 1

    def __post_init__(self):
        self.operation = Operation.parse(self.operation)
        self.phase_mode = PhaseMode.parse(self.phase_mode)
        self.validate()

    def validate(self) -> None:
        if isinstance(self.window_size, bool) or not is_power_of_two(self.window_size):
            raise ValueError(f"Window size must be a power of two, got {self.window_size!r}")
        if self.window_size not in WINDOW_SIZES:
            raise ValueError(
                f"Window size {self.window_size} not supported; choose one of {WINDOW_SIZES}"
            )
        if isinstance(self.overlap_percent, bool) or not isinstance(self.overlap_percent, int):
            raise ValueError(f"Overlap must be an integer percentage, got {self.overlap_percent!r}")
        hop_size(self.window_size, self.overlap_percent)
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

    @property
    def hop_size(self) -> int:
        return hop_size(self.window_size, self.overlap_percent)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "ProcessingConfig":
        """Build a config from a mapping such as a parsed JSON file; missing keys keep defaults."""
        kwargs: Dict[str, Any] = {}
        for field_name, spellings in _KEYS.items():
            for key in spellings:
                if key in values:
                    kwargs[field_name] = values[key]
                    break
        unknown = set(values) - {k for spellings in _KEYS.values() for k in spellings}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        for int_field in ("window_size", "overlap_percent", "max_workers"):
            if isinstance(kwargs.get(int_field), str):
                kwargs[int_field] = int(kwargs[int_field])
        if "time_align" in kwargs:
            kwargs["time_align"] = bool(kwargs["time_align"])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "window_size": self.window_size,
            "overlap_percent": self.overlap_percent,
            "operation": self.operation.value,
            "phase_mode": self.phase_mode.value,
            "time_align": self.time_align,
            "max_workers": self.max_workers,
        }


def load_config(path: str) -> ProcessingConfig:
    """
    Read a ProcessingConfig from a JSON file.
    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the JSON is malformed or holds invalid settings.
    """
    with open(path, "r") as f:
        values = json.load(f)
    if not isinstance(values, dict):
        raise ValueError(f"Config file {path} must hold a JSON object")
    return ProcessingConfig.from_dict(values)
