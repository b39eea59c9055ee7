import logging
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Tuple, Type, TypeVar

from .buffer import Mask

LOGGER = logging.getLogger(__name__)


class SettingsError(ValueError):
    """Raised when a setting cannot be coerced to its declared type."""


class Shape(str, Enum):
    LINE = "line"
    ROUND = "round"
    DIAMOND = "diamond"
    ELLIPSE = "ellipse"
    SQUARE = "square"
    CROSS = "cross"


class Method(str, Enum):
    HALFTONE = "halftone"
    THRESHOLD = "threshold"
    PATTERN = "pattern"
    DIFFUSION = "diffusion"


class SamplePosition(str, Enum):
    CORNERS = "corners"
    TOPLEFT = "topleft"
    TOPRIGHT = "topright"
    BOTTOMLEFT = "bottomleft"
    BOTTOMRIGHT = "bottomright"


class View(str, Enum):
    HALFTONE = "halftone"
    GREYSCALE = "greyscale"
    ORIGINAL = "original"


E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: Type[E], value: Any, default: E, name: str = "") -> E:
    """Return ``value`` as a member of ``enum_cls``, or ``default`` if unrecognised."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        LOGGER.warning("Unsupported %s %r, falling back to %r", name or enum_cls.__name__, value, default.value)
        return default


NUMERIC_BOUNDS: Dict[str, Tuple[float, float]] = {
    "frequency": (1, 50),
    "angle": (0, 180),
    "thickness": (0.3, 2.0),
    "contrast": (0.5, 2.0),
    "brightness": (-50, 50),
    "bg_tolerance": (1, 100),
    "bg_softness": (0, 5),
}

_ENUM_FIELDS: Dict[str, Tuple[Type[Enum], Enum]] = {
    "shape": (Shape, Shape.LINE),
    "method": (Method, Method.HALFTONE),
    "bg_sample_position": (SamplePosition, SamplePosition.CORNERS),
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise SettingsError(f"Expected boolean, got {value!r}")


@dataclass(frozen=True)
class HalftoneSettings:
    frequency: float = 20
    angle: float = 90
    thickness: float = 1.0
    shape: Shape = Shape.LINE
    contrast: float = 1.0
    brightness: float = 0
    invert_output: bool = False
    transparent_bg: bool = False
    method: Method = Method.HALFTONE
    remove_bg: bool = False
    bg_sample_position: SamplePosition = SamplePosition.CORNERS
    bg_tolerance: float = 30
    bg_softness: float = 1

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "HalftoneSettings":
        """Build clamped settings from form, query or JSON data.

        Keys that are not settings are ignored. A value that cannot be coerced
        raises :class:`SettingsError`; out-of-range numbers and unknown enum
        values are corrected by :meth:`clamped`.
        """

        values: Dict[str, Any] = {}
        errors: Dict[str, str] = {}
        for field in fields(cls):
            if field.name not in payload:
                continue
            raw_value = payload[field.name]
            try:
                if field.name in NUMERIC_BOUNDS:
                    values[field.name] = float(raw_value)
                elif field.name in _ENUM_FIELDS:
                    values[field.name] = raw_value
                else:
                    values[field.name] = parse_bool(raw_value)
            except (TypeError, ValueError):
                errors[field.name] = f"Expected {'number' if field.name in NUMERIC_BOUNDS else 'boolean'}"
        if errors:
            raise SettingsError(", ".join(f"{name}: {message}" for name, message in sorted(errors.items())))
        return cls(**values).clamped()

    def clamped(self) -> "HalftoneSettings":
        updates: Dict[str, Any] = {}
        for name, (low, high) in NUMERIC_BOUNDS.items():
            value = getattr(self, name)
            if value != value:  # NaN
                default = next(f.default for f in fields(self) if f.name == name)
                LOGGER.warning("Setting %s is NaN, using default %s", name, default)
                updates[name] = default
                continue
            bounded = min(high, max(low, value))
            if bounded != value:
                LOGGER.warning("Setting %s=%s outside [%s, %s], clamped to %s", name, value, low, high, bounded)
                updates[name] = bounded
        for name, (enum_cls, default) in _ENUM_FIELDS.items():
            value = getattr(self, name)
            coerced = coerce_enum(enum_cls, value, default, name)
            if coerced is not value:
                updates[name] = coerced
        return replace(self, **updates) if updates else self

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for name in _ENUM_FIELDS:
            data[name] = getattr(self, name).value
        return data


def describe_settings() -> Dict[str, Any]:
    return {
        "defaults": HalftoneSettings().to_dict(),
        "bounds": {name: list(bounds) for name, bounds in NUMERIC_BOUNDS.items()},
        "choices": {
            "shape": [member.value for member in Shape],
            "method": [member.value for member in Method],
            "bg_sample_position": [member.value for member in SamplePosition],
            "view": [member.value for member in View],
        },
    }


@dataclass(frozen=True)
class BinarizeOptions:
    invert: bool = False
    transparent: bool = False
    mask: Mask = None


@dataclass(frozen=True)
class HalftoneOptions(BinarizeOptions):
    frequency: float = 20
    angle: float = 90
    thickness: float = 1.0
    shape: Shape = Shape.LINE


def options_from_settings(
    settings: HalftoneSettings, mask: Mask = None, frequency_scale: int = 1
) -> HalftoneOptions:
    return HalftoneOptions(
        invert=settings.invert_output,
        transparent=settings.transparent_bg,
        mask=mask,
        frequency=settings.frequency / frequency_scale,
        angle=settings.angle,
        thickness=settings.thickness,
        shape=settings.shape,
    )
