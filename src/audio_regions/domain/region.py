import random
from dataclasses import dataclass, field
from typing import NamedTuple, Optional


DEFAULT_SILENCE_THRESHOLD = 0.002
DEFAULT_TIME_THRESHOLD = 0.05
DEFAULT_SEG_LEN_THRESHOLD = 0.5


def round_to_five_decimals(value: float) -> float:
    return round(float(value), 5)


def random_color(alpha: float = 0.1) -> str:
    r, g, b = (random.randint(0, 254) for _ in range(3))
    return f"rgba({r},{g},{b},{alpha})"


class RegionId(NamedTuple):
    """Arena handle: slot index plus the generation that slot had when issued."""
    index: int
    generation: int


@dataclass
class Region:
    """
    A labeled time interval over the loaded buffer.
    prev/next are arena handles, never object references.
    """
    id: RegionId
    start: float
    end: float
    label: str = ""
    color: str = field(default_factory=random_color)
    loop: bool = False
    prev: Optional[RegionId] = None
    next: Optional[RegionId] = None

    @property
    def length(self) -> float:
        return self.end - self.start

    def contains(self, position: float) -> bool:
        return self.start <= position <= self.end

    def to_span(self) -> "RegionSpan":
        return RegionSpan(self.start, self.end, self.label)


@dataclass
class RegionSpan:
    """Plain interval: serialized regions, verse intervals, segmenter output."""
    start: float
    end: float
    label: str = ""


@dataclass(frozen=True)
class Marker:
    """Zero-length point annotation."""
    time: float
    label: str = ""
    color: str = "blue"


@dataclass
class RegionParams:
    silence_threshold: float = DEFAULT_SILENCE_THRESHOLD
    time_threshold: float = DEFAULT_TIME_THRESHOLD
    seg_len_threshold: float = DEFAULT_SEG_LEN_THRESHOLD

    def __post_init__(self) -> None:
        # zero or missing values mean "use the default"
        self.silence_threshold = self.silence_threshold or DEFAULT_SILENCE_THRESHOLD
        self.time_threshold = self.time_threshold or DEFAULT_TIME_THRESHOLD
        self.seg_len_threshold = self.seg_len_threshold or DEFAULT_SEG_LEN_THRESHOLD


@dataclass(frozen=True)
class RegionChange:
    start: float
    end: float
    new_start: float
    new_end: float


@dataclass(frozen=True)
class RegionEvent:
    """Emitted after every store mutation. automated=False means a user edit."""
    count: int
    automated: bool
