"""Render configuration.

RenderConfig gathers every tunable of a render in one place: output
resolution, samples per pixel, gamma, shading model, shadow bounding and the
random seed used for sub-pixel jitter.

Two reference configurations are provided:

    RenderConfig.basic()    one pixel-center ray, BASIC shading, no gamma
    RenderConfig.sampled()  64 jittered rays, SHADOWED shading, gamma 2.2

Example:
    >>> from phongtrace.config import RenderConfig
    >>> config = RenderConfig.sampled(samples_per_pixel=16, seed=7)
    >>> config.validate()
"""

from dataclasses import asdict, dataclass, replace
from typing import Any

from phongtrace.scene.shading import DEFAULT_GAMMA, ShadingModel

DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 512
DEFAULT_SAMPLES_PER_PIXEL = 64


@dataclass
class RenderConfig:
    """Configuration for a Renderer.

    Attributes:
        width: Output width in pixels.
        height: Output height in pixels.
        samples_per_pixel: Render passes per frame. Each pass traces one ray
            per pixel.
        gamma: Display gamma applied by the SHADOWED model.
        shading_model: BASIC or SHADOWED.
        jitter: When False every pass samples the pixel center instead of a
            random sub-pixel position.
        bound_shadows_to_light: Ignore occluders farther away than the light.
        seed: Seed for the jitter generator. None draws fresh OS entropy.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    gamma: float = DEFAULT_GAMMA
    shading_model: ShadingModel = ShadingModel.SHADOWED
    jitter: bool = True
    bound_shadows_to_light: bool = False
    seed: int | None = None

    @classmethod
    def basic(cls, **overrides: Any) -> "RenderConfig":
        """One ray through each pixel center, unshadowed, no gamma."""
        config = cls(
            samples_per_pixel=1,
            gamma=1.0,
            shading_model=ShadingModel.BASIC,
            jitter=False,
        )
        return replace(config, **overrides)

    @classmethod
    def sampled(cls, **overrides: Any) -> "RenderConfig":
        """Jittered supersampling with shadows and gamma correction."""
        return replace(cls(), **overrides)

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ValueError: If a dimension or the sample count is below 1, or the
                gamma is not positive.
        """
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Resolution must be at least 1x1, got {self.width}x{self.height}")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}")
        if self.gamma <= 0.0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")

    def with_resolution(self, width: int, height: int) -> "RenderConfig":
        return replace(self, width=width, height=height)

    def to_dict(self) -> dict[str, Any]:
        """Export to a plain dictionary (for JSON serialization)."""
        data = asdict(self)
        data["shading_model"] = self.shading_model.name.lower()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Build a configuration from a dictionary.

        Missing keys take their default values. ``shading_model`` may be given
        by name ("basic", "shadowed") or by value.

        Raises:
            ValueError: If the shading model is unknown.
        """
        model = data.get("shading_model", ShadingModel.SHADOWED)
        if isinstance(model, str):
            try:
                model = ShadingModel[model.upper()]
            except KeyError:
                raise ValueError(f"Unknown shading model: {model}") from None
        else:
            model = ShadingModel(int(model))

        seed = data.get("seed")
        return cls(
            width=int(data.get("width", DEFAULT_WIDTH)),
            height=int(data.get("height", DEFAULT_HEIGHT)),
            samples_per_pixel=int(data.get("samples_per_pixel", DEFAULT_SAMPLES_PER_PIXEL)),
            gamma=float(data.get("gamma", DEFAULT_GAMMA)),
            shading_model=model,
            jitter=bool(data.get("jitter", True)),
            bound_shadows_to_light=bool(data.get("bound_shadows_to_light", False)),
            seed=None if seed is None else int(seed),
        )
