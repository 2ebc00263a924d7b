"""Pydantic schemas for formats, catalogs, and routing cost configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from format_router.types import Catalog


def _normalize_categories(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("category must be a string or a list of strings.")
    categories = tuple(str(item).strip() for item in value)
    return tuple(item for item in categories if item)


class FileFormat(BaseModel):
    """Immutable description of one format a handler can read and/or write.

    ``mime`` is the graph key: formats from different handlers sharing a MIME
    type land on the same graph node.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    mime: str = Field(min_length=1)
    name: str = ""
    format: str = ""
    extension: str = ""
    category: tuple[str, ...] = ()
    lossless: bool = False
    from_: bool = Field(default=False, alias="from")
    to: bool = False
    internal: str = ""

    @field_validator("mime")
    @classmethod
    def _validate_mime(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("mime cannot be blank.")
        return normalized

    @field_validator("category", mode="before")
    @classmethod
    def _validate_category(cls, value: object) -> tuple[str, ...]:
        return _normalize_categories(value)

    @property
    def categories(self) -> tuple[str, ...]:
        """Return declared categories, falling back to the MIME top-level type."""
        if self.category:
            return self.category
        top_level = self.mime.split("/", 1)[0]
        return (top_level,) if top_level else ()

    @property
    def label(self) -> str:
        """Short human-readable label used in log and CLI output."""
        return self.format or self.extension or self.mime


class CategoryChangeCost(BaseModel):
    """Explicit cost for converting between two semantic categories."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    from_: str = Field(alias="from", min_length=1)
    to: str = Field(min_length=1)
    cost: float = Field(ge=0.0)


DEFAULT_CATEGORY_CHANGE_COSTS: tuple[CategoryChangeCost, ...] = (
    CategoryChangeCost(from_="image", to="video", cost=0.2),
    CategoryChangeCost(from_="video", to="image", cost=0.4),
    CategoryChangeCost(from_="image", to="audio", cost=2.0),
    CategoryChangeCost(from_="audio", to="image", cost=1.4),
    CategoryChangeCost(from_="video", to="audio", cost=1.0),
    CategoryChangeCost(from_="audio", to="video", cost=1.0),
    CategoryChangeCost(from_="text", to="image", cost=0.5),
    CategoryChangeCost(from_="image", to="text", cost=0.5),
)


class RoutingCostConfig(BaseModel):
    """Validated parameters for the route cost model.

    Notes
    -----
    ``degenerate_chains`` lists category sequences that are never acceptable
    inside a route, regardless of cost. The default rejects
    image -> video -> audio, which drops all meaningful content.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    depth_cost: float = Field(default=1.0, ge=0.0)
    default_category_change_cost: float = Field(default=0.6, ge=0.0)
    lossy_multiplier: float = Field(default=1.4, ge=1.0)
    priority_cost: float = Field(default=0.05, ge=0.0)
    category_hard_search: bool = False
    category_change_costs: tuple[CategoryChangeCost, ...] = DEFAULT_CATEGORY_CHANGE_COSTS
    degenerate_chains: tuple[tuple[str, ...], ...] = (("image", "video", "audio"),)

    @field_validator("degenerate_chains")
    @classmethod
    def _validate_chains(
        cls, value: tuple[tuple[str, ...], ...]
    ) -> tuple[tuple[str, ...], ...]:
        if any(len(chain) < 2 for chain in value):
            raise ValueError("degenerate chains need at least two categories.")
        return value


class HandlerCapabilities(BaseModel):
    """Formats declared by a single handler in a catalog document."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    formats: list[FileFormat] = Field(default_factory=list)


class CatalogDocument(BaseModel):
    """Serialized capability catalog; list order defines handler rank."""

    model_config = ConfigDict(extra="forbid")

    handlers: list[HandlerCapabilities] = Field(default_factory=list)

    @field_validator("handlers")
    @classmethod
    def _validate_unique_names(
        cls, value: list[HandlerCapabilities]
    ) -> list[HandlerCapabilities]:
        names = [entry.name for entry in value]
        if len(names) != len(set(names)):
            raise ValueError("handler names must be unique.")
        return value

    def to_catalog(self) -> Catalog:
        """Return an ordered handler-name to formats mapping."""
        return {entry.name: tuple(entry.formats) for entry in self.handlers}
