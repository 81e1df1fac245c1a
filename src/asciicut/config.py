from dataclasses import dataclass, replace

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from asciicut.charsets import DEFAULT_CHARS, FULL_CHARS
from asciicut.errors import InvalidArgument

ENV_PREFIX = "ASCIICUT_"

COLOUR_MODES = ("colour", "mono")
GLYPH_MODES = ("text", "shape")
BACKGROUNDS = ("black", "transparent")


class ConverterConfig(BaseSettings):
    """Resource limits and tuning constants shared by every conversion.

    Every field can be overridden from the environment, for example
    ``ASCIICUT_CHUNK_HEIGHT=250`` processes bands of 250 rows.
    """

    max_art_dimension: int = Field(10_000, gt=0)
    max_canvas_dimension: int = Field(5_000, gt=0)
    chunk_height: int = Field(1000, gt=0)
    preview_width: int = Field(500, gt=0)
    # Geometric growth of the sampling grid per detail scale step
    text_growth: float = Field(1.3, gt=0)
    shape_growth: float = Field(1.2, gt=0)

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_ignore_empty=True, frozen=True)

    @classmethod
    def from_env(cls) -> "ConverterConfig":
        """Build a config from the defaults and any ASCIICUT_* environment variables."""
        try:
            return cls()
        except ValidationError as e:
            problems = "; ".join(
                f"{ENV_PREFIX}{'.'.join(str(part) for part in err['loc']).upper()}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidArgument(f"Invalid configuration: {problems}") from e


@dataclass(frozen=True)
class RenderOptions:
    """Settings for a single image-to-art conversion."""

    colour_mode: str = "colour"
    glyph_mode: str = "text"
    chars: str = DEFAULT_CHARS
    use_full_chars: bool = False
    max_colours: int = 64
    art_width: int = 120
    art_height: int = 60
    # Bounds of the host's display surface, clamped here and passed through
    # untouched; the grid itself is sized by the art box
    canvas_width: int = 800
    canvas_height: int = 600
    brightness_threshold: float = 5.0
    force_sequence: bool = False
    scale: float = 1.0
    background: str = "black"

    def __post_init__(self):
        if self.colour_mode not in COLOUR_MODES:
            raise InvalidArgument(f"colour_mode must be one of {COLOUR_MODES}, got {self.colour_mode!r}")
        if self.glyph_mode not in GLYPH_MODES:
            raise InvalidArgument(f"glyph_mode must be one of {GLYPH_MODES}, got {self.glyph_mode!r}")
        if self.background not in BACKGROUNDS:
            raise InvalidArgument(f"background must be one of {BACKGROUNDS}, got {self.background!r}")
        if not 8 <= self.max_colours <= 256:
            raise InvalidArgument(f"max_colours must be between 8 and 256, got {self.max_colours}")
        for name in ("art_width", "art_height", "canvas_width", "canvas_height"):
            if getattr(self, name) < 1:
                raise InvalidArgument(f"{name} must be at least 1, got {getattr(self, name)}")
        if not 0 <= self.brightness_threshold <= 100:
            raise InvalidArgument(f"brightness_threshold must be in 0-100, got {self.brightness_threshold}")
        if self.scale <= 0:
            raise InvalidArgument(f"scale must be positive, got {self.scale}")

    @property
    def ramp(self) -> str:
        if self.use_full_chars:
            return FULL_CHARS
        return self.chars or DEFAULT_CHARS

    @property
    def sequential(self) -> bool:
        """Whether glyphs cycle through the ramp instead of following brightness."""
        return self.force_sequence and not self.use_full_chars and self.glyph_mode == "text"

    def clamped(self, config: ConverterConfig) -> "RenderOptions":
        return replace(
            self,
            art_width=min(self.art_width, config.max_art_dimension),
            art_height=min(self.art_height, config.max_art_dimension),
            canvas_width=min(self.canvas_width, config.max_canvas_dimension),
            canvas_height=min(self.canvas_height, config.max_canvas_dimension),
        )
