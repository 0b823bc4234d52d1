from pydantic import BaseModel, Field, field_validator
from typing import Literal

DEFAULT_HANDLER_ORDER = ["raster", "rename", "html", "svg", "pdf", "ffmpeg"]


class EngineConfig(BaseModel):
    max_hops: int = Field(default=3, ge=1)
    step_timeout_seconds: float | None = Field(default=None, gt=0)


class RasterConfig(BaseModel):
    jpeg_quality: int = Field(default=92, ge=1, le=100)
    text_font_size: int = Field(default=48, gt=0)


class HtmlConfig(BaseModel):
    width: int = Field(default=800, gt=0)
    height: int = Field(default=600, gt=0)


class SvgConfig(BaseModel):
    dpi: int = Field(default=72, gt=0)
    jpeg_quality: int = Field(default=92, ge=1, le=100)


class PdfConfig(BaseModel):
    dpi: int = Field(default=144, gt=0)
    jpeg_quality: int = Field(default=92, ge=1, le=100)
    max_pages: int | None = Field(default=None, gt=0)


class FFmpegConfig(BaseModel):
    binary: str = "ffmpeg"
    gif_filter: str = "fps=10,scale=480:-1:flags=lanczos"


class HandlersConfig(BaseModel):
    enabled: list[str] = Field(default_factory=lambda: list(DEFAULT_HANDLER_ORDER))
    raster: RasterConfig = Field(default_factory=RasterConfig)
    html: HtmlConfig = Field(default_factory=HtmlConfig)
    svg: SvgConfig = Field(default_factory=SvgConfig)
    pdf: PdfConfig = Field(default_factory=PdfConfig)
    ffmpeg: FFmpegConfig = Field(default_factory=FFmpegConfig)

    @field_validator("enabled")
    @classmethod
    def validate_enabled(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError("enabled handlers must not repeat")
        return v


class MimeBridgeConfig(BaseModel):
    engine: EngineConfig = Field(default_factory=EngineConfig)
    handlers: HandlersConfig = Field(default_factory=HandlersConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
