"""Macro parameters and the normalised render request."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from umlmacro.formats import ImageFormat

__all__ = ["DiagramRequest", "MacroParameters"]


class MacroParameters(BaseModel):
    """Parameters a page author can set on the macro."""

    model_config = ConfigDict(populate_by_name=True)

    server: str | None = Field(default=None, description="the PlantUML Server URL")
    format: ImageFormat | None = Field(default=None, description="the PlantUML Image Format")
    image_tag: bool = Field(
        default=False,
        alias="imageTag",
        description="Use <img/> For SVG Image",
    )
    scale_fit: bool = Field(
        default=False,
        alias="scaleFit",
        description="Fit SVG Image to Page Width Limit",
    )

    @field_validator("server")
    @classmethod
    def _blank_server_is_unset(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("format", mode="before")
    @classmethod
    def _lowercase_format(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value

    @model_validator(mode="after")
    def _scale_fit_excludes_image_tag(self) -> MacroParameters:
        # Scale-fit rewrites raw SVG markup, which an <img> reference never exposes
        if self.scale_fit and self.image_tag:
            logger.warning("imageTag and scaleFit are exclusive, using scaleFit")
            self.image_tag = False
        return self


@dataclass(frozen=True)
class DiagramRequest:
    """A fully resolved render request.

    ``svg_inline`` never appears here: it is folded into ``svg`` with
    ``image_tag`` off.
    """

    source_text: str
    format: ImageFormat
    server_url: str | None = None
    image_tag: bool = False
    scale_fit: bool = False

    @classmethod
    def create(
        cls,
        source_text: str,
        fmt: ImageFormat,
        server_url: str | None = None,
        *,
        image_tag: bool = False,
        scale_fit: bool = False,
    ) -> DiagramRequest:
        if fmt is ImageFormat.svg_inline:
            fmt = ImageFormat.svg
            image_tag = False
        if scale_fit:
            image_tag = False
        return cls(
            source_text=source_text,
            format=fmt,
            server_url=server_url,
            image_tag=image_tag,
            scale_fit=scale_fit,
        )
