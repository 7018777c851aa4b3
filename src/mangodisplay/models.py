"""Data models: Transform, OutputMode, Output, Arrangement."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, asdict
from enum import Enum

from .errors import ModeInvariantError
from .geometry import logical_size

# Scales at or below this are rejected
MIN_SCALE = 0.1


# ── Enums ────────────────────────────────────────────────────────────────

class Transform(Enum):
    NORMAL = "normal"
    ROTATE_90 = "90"
    ROTATE_180 = "180"
    ROTATE_270 = "270"
    FLIPPED = "flipped"
    FLIPPED_90 = "flipped-90"
    FLIPPED_180 = "flipped-180"
    FLIPPED_270 = "flipped-270"

    @property
    def label(self) -> str:
        labels = {
            "normal": "Normal",
            "90": "90°",
            "180": "180°",
            "270": "270°",
            "flipped": "Flipped",
            "flipped-90": "Flipped 90°",
            "flipped-180": "Flipped 180°",
            "flipped-270": "Flipped 270°",
        }
        return labels[self.value]

    @property
    def is_rotated(self) -> bool:
        """True if width/height are swapped (90° or 270° variants)."""
        return self in (
            Transform.ROTATE_90, Transform.ROTATE_270,
            Transform.FLIPPED_90, Transform.FLIPPED_270,
        )


# ── OutputMode ───────────────────────────────────────────────────────────

@dataclass
class OutputMode:
    width: int = 1920
    height: int = 1080
    refresh_rate: float = 60.0
    current: bool = False
    preferred: bool = False

    @property
    def resolution(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def label(self) -> str:
        return f"{self.width}x{self.height}@{self.refresh_rate:.3f}Hz"

    @classmethod
    def from_wlr_randr(cls, data: dict) -> OutputMode:
        return cls(
            width=data.get("width", 0),
            height=data.get("height", 0),
            refresh_rate=round(data.get("refresh", 0.0), 3),
            current=data.get("current", False),
            preferred=data.get("preferred", False),
        )


# ── Output ───────────────────────────────────────────────────────────────

@dataclass
class Output:
    # Identity (from wlr-randr --json)
    name: str = ""              # e.g. "DP-1", "HDMI-A-1"
    description: str = ""       # e.g. "LG Electronics LG ULTRAWIDE 0x00038C43"
    make: str = ""
    model: str = ""
    serial: str = ""
    physical_size: str = ""     # e.g. "600x340 mm", empty if unknown

    # Position in logical pixels
    x: int = 0
    y: int = 0

    scale: float = 1.0
    transform: Transform = Transform.NORMAL
    enabled: bool = True

    modes: list[OutputMode] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.modes:
            raise ValueError(f"output {self.name!r} has no modes")
        # Backends occasionally report zero or several current modes
        # (disabled outputs, mirrored setups); keep exactly one.
        flagged = [m for m in self.modes if m.current]
        if not flagged:
            keep = next((m for m in self.modes if m.preferred), self.modes[0])
        else:
            keep = flagged[0]
        for m in self.modes:
            m.current = m is keep

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y

    @position.setter
    def position(self, value: tuple[int, int]) -> None:
        self.x, self.y = value

    @property
    def current_mode(self) -> OutputMode:
        """The single mode flagged current.

        Raises ModeInvariantError if the modes list was mutated behind the
        model's back and no longer has exactly one current mode.
        """
        current = [m for m in self.modes if m.current]
        if len(current) != 1:
            raise ModeInvariantError(
                f"output {self.name!r} has {len(current)} current modes"
            )
        return current[0]

    @property
    def current_mode_index(self) -> int:
        return self.modes.index(self.current_mode)

    @property
    def logical_size(self) -> tuple[int, int]:
        """Size in logical pixels (accounting for scale and rotation)."""
        return logical_size(self)

    @property
    def logical_width(self) -> int:
        return self.logical_size[0]

    @property
    def logical_height(self) -> int:
        return self.logical_size[1]

    def select_mode(self, index: int) -> bool:
        """Make modes[index] the current mode. Returns False if out of range."""
        if not 0 <= index < len(self.modes):
            return False
        for i, m in enumerate(self.modes):
            m.current = i == index
        return True

    def refresh_variants(self) -> list[int]:
        """Indices of the modes that share the current resolution."""
        res = self.current_mode.resolution
        return [i for i, m in enumerate(self.modes) if m.resolution == res]

    def to_dict(self) -> dict:
        """Serialize to a JSON-friendly dict."""
        d = asdict(self)
        d["transform"] = self.transform.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Output:
        """Deserialize from a dict."""
        d = dict(d)  # copy
        d["transform"] = Transform(d.get("transform", "normal"))
        d["modes"] = [
            OutputMode(**{k: v for k, v in m.items() if k in OutputMode.__dataclass_fields__})
            for m in d.get("modes", [])
        ]
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_wlr_randr(cls, data: dict) -> Output:
        """Create from one entry of ``wlr-randr --json`` output."""
        phys = data.get("physical_size") or {}
        pw = phys.get("width", 0)
        ph = phys.get("height", 0)
        physical_size = f"{pw}x{ph} mm" if pw and ph else ""

        position = data.get("position") or {}
        make = data.get("make") or ""
        model = data.get("model") or ""
        serial = data.get("serial") or ""
        description = data.get("description") or " ".join(
            p for p in (make, model, serial) if p
        )

        transform_str = data.get("transform", "normal")
        try:
            transform = Transform(transform_str)
        except ValueError:
            transform = Transform.NORMAL

        # Disabled outputs report scale 0 on some compositors
        scale = float(data.get("scale") or 1.0)
        if scale <= MIN_SCALE:
            scale = 1.0

        return cls(
            name=data.get("name", ""),
            description=description,
            make=make,
            model=model,
            serial=serial,
            physical_size=physical_size,
            x=position.get("x", 0),
            y=position.get("y", 0),
            scale=scale,
            transform=transform,
            enabled=data.get("enabled", True),
            modes=[OutputMode.from_wlr_randr(m) for m in data.get("modes", [])],
        )


# ── Arrangement ──────────────────────────────────────────────────────────

@dataclass
class Arrangement:
    outputs: list[Output] = field(default_factory=list)
    selected: int | None = None

    def __post_init__(self) -> None:
        if self.selected is not None and not self._valid(self.selected):
            self.selected = None

    def _valid(self, index: int | None) -> bool:
        return index is not None and 0 <= index < len(self.outputs)

    @property
    def selected_index(self) -> int | None:
        """The selection, or None if it no longer points at an output."""
        return self.selected if self._valid(self.selected) else None

    @property
    def selected_output(self) -> Output | None:
        idx = self.selected_index
        return self.outputs[idx] if idx is not None else None

    def get(self, index: int | None) -> Output | None:
        return self.outputs[index] if self._valid(index) else None

    def normalize(self) -> bool:
        return normalize_positions(self.outputs)

    def copy(self) -> Arrangement:
        return copy.deepcopy(self)


# ── Normalization ────────────────────────────────────────────────────────

def normalize_positions(outputs: list[Output]) -> bool:
    """Shift all outputs so no coordinate is negative.

    Display-server configs do not accept negative coordinates, so this runs
    before every apply and save. An axis whose minimum is already >= 0 is
    left alone. Returns True if any output moved.
    """
    if not outputs:
        return False
    min_x = min(o.x for o in outputs)
    min_y = min(o.y for o in outputs)
    dx = -min_x if min_x < 0 else 0
    dy = -min_y if min_y < 0 else 0
    if dx == 0 and dy == 0:
        return False
    for o in outputs:
        o.x += dx
        o.y += dy
    return True
