"""Application Model.

The canonical, backend-independent description of one generated application.
Every type is frozen: emitters and the orchestrator only read a model, and a
re-generation builds a new one through ``model_copy_with_updates``.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from appforge.core.id import new_app_id
from appforge.core.json import safe_json_dumps
from appforge.core.validate import MAX_PROMPT_LENGTH, RequestValidator, UnknownTargetError


class Target(str, Enum):
    """Deployment surfaces that source can be emitted for."""

    IOS = "ios"
    ANDROID = "android"
    REACT_NATIVE = "react-native"
    WEB = "web"

    @classmethod
    def parse(cls, value: "str | Target") -> "Target":
        """Resolve a target id, raising UnknownTargetError for anything else."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownTargetError(str(value), [t.value for t in cls]) from None


class FrozenModel(BaseModel):
    """Immutable model with camelCase JSON aliases."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ============================================================================
# Components & Screens
# ============================================================================


class Binding(FrozenModel):
    """Named data binding on a component."""

    type: Literal["state", "constant", "computed"]
    source: str
    transform: str | None = None


class Component(FrozenModel):
    """UI component. ``type`` is an open vocabulary, not an enum."""

    id: str
    type: str
    props: dict[str, Any] = Field(default_factory=dict)
    children: tuple["Component", ...] = ()
    bindings: dict[str, Binding] = Field(default_factory=dict)


class NavigationAction(FrozenModel):
    """Navigation triggered from a screen."""

    type: Literal["push", "pop", "popToRoot", "switchTab", "present", "dismiss"]
    target: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)


class StateVariable(FrozenModel):
    """Global, screen or component scoped state."""

    id: str
    name: str
    type: Literal["string", "number", "boolean", "array", "object"]
    scope: Literal["global", "screen", "component"] = "global"
    default_value: Any = None


class Screen(FrozenModel):
    """One screen with its component tree."""

    id: str
    name: str
    components: tuple[Component, ...] = ()
    navigation: NavigationAction | None = None
    local_state: tuple[StateVariable, ...] = ()


# ============================================================================
# Navigation
# ============================================================================


class NavigationItem(FrozenModel):
    """Navigation tree node. Names a screen, nests items, or both."""

    id: str
    name: str
    path: str | None = None
    screen_id: str | None = None
    icon: str | None = None
    children: tuple["NavigationItem", ...] = ()

    @model_validator(mode="after")
    def _has_destination(self) -> "NavigationItem":
        if not self.screen_id and not self.children:
            raise ValueError(f"Navigation item {self.id!r} needs a screenId or children")
        return self


class NavigationConfig(FrozenModel):
    """Top-level navigation shape."""

    type: Literal["stack", "tab", "split", "drawer"] = "stack"
    structure: tuple[NavigationItem, ...] = ()
    initial_route: str | None = None


# ============================================================================
# Theme
# ============================================================================

DEFAULT_COLORS: dict[str, str] = {
    "primary": "#007AFF",
    "secondary": "#5856D6",
    "accent": "#FF9500",
    "background": "#FFFFFF",
    "surface": "#F2F2F7",
    "text": "#000000",
}


class ColorPalette(FrozenModel):
    """Six required colors, extensible with extra named colors."""

    model_config = ConfigDict(extra="allow")

    __pydantic_extra__: dict[str, str] = Field(init=False)

    primary: str = DEFAULT_COLORS["primary"]
    secondary: str = DEFAULT_COLORS["secondary"]
    accent: str = DEFAULT_COLORS["accent"]
    background: str = DEFAULT_COLORS["background"]
    surface: str = DEFAULT_COLORS["surface"]
    text: str = DEFAULT_COLORS["text"]

    @property
    def extra_colors(self) -> dict[str, str]:
        return dict(self.model_extra or {})


class TypographyConfig(FrozenModel):
    font_family: str | None = None
    sizes: dict[str, float] = Field(
        default_factory=lambda: {"h1": 32, "h2": 24, "h3": 20, "body": 16, "caption": 12}
    )


class SpacingConfig(FrozenModel):
    model_config = ConfigDict(extra="allow")

    __pydantic_extra__: dict[str, float] = Field(init=False)

    xs: float = 4
    sm: float = 8
    md: float = 16
    lg: float = 24
    xl: float = 32


class ThemeConfig(FrozenModel):
    colors: ColorPalette = Field(default_factory=ColorPalette)
    typography: TypographyConfig = Field(default_factory=TypographyConfig)
    spacing: SpacingConfig = Field(default_factory=SpacingConfig)
    corner_radius: float | None = None
    shadows: bool | None = None
    dark_mode: bool | None = None


# ============================================================================
# Data, Features, Permissions
# ============================================================================


class DataField(FrozenModel):
    name: str
    type: Literal[
        "string", "number", "boolean", "date", "datetime",
        "array", "object", "image", "file", "reference",
    ]
    required: bool = False
    default_value: Any = None
    validation: str | None = None


class Relationship(FrozenModel):
    type: Literal["one-to-one", "one-to-many", "many-to-many"]
    target: str
    field: str


class DataModel(FrozenModel):
    """Named record schema."""

    id: str
    name: str
    fields: tuple[DataField, ...] = ()
    relationships: tuple[Relationship, ...] = ()


class Feature(FrozenModel):
    id: str
    name: str = ""
    enabled: bool = True
    config: dict[str, Any] = Field(default_factory=dict)


class Permission(FrozenModel):
    id: str
    name: str = ""
    description: str = ""
    required: bool = False
    platform: Target | None = None


# ============================================================================
# Application Model
# ============================================================================


class ApplicationModel(FrozenModel):
    """Single source of truth for one generation session."""

    id: str = Field(default_factory=new_app_id)
    name: str = Field(min_length=1)
    description: str = ""
    platforms: tuple[Target, ...] = ()
    screens: tuple[Screen, ...] = ()
    navigation: NavigationConfig = Field(default_factory=NavigationConfig)
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    data_models: tuple[DataModel, ...] = ()
    global_state: tuple[StateVariable, ...] = ()
    features: tuple[Feature, ...] = ()
    permissions: tuple[Permission, ...] = ()

    @field_validator("platforms")
    @classmethod
    def _unique_platforms(cls, v: tuple[Target, ...]) -> tuple[Target, ...]:
        if len(set(v)) != len(v):
            raise ValueError("Duplicate platforms are not allowed")
        return v

    @field_validator("features", mode="before")
    @classmethod
    def _coerce_feature_names(cls, v: Any) -> Any:
        # Backends often answer with plain feature names
        if isinstance(v, (list, tuple)):
            return [{"id": f, "name": f} if isinstance(f, str) else f for f in v]
        return v

    @classmethod
    def default(cls, prompt: str, targets: "tuple[Target, ...] | list[Target]") -> "ApplicationModel":
        """Minimal valid model used when backend output cannot be parsed."""
        return cls(
            name="Generated App",
            description=prompt,
            platforms=tuple(targets),
            navigation=NavigationConfig(type="stack"),
            theme=ThemeConfig(colors=ColorPalette(**DEFAULT_COLORS)),
        )

    @property
    def enabled_features(self) -> list[str]:
        return [f.id for f in self.features if f.enabled]

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    def to_prompt_json(self) -> str:
        """Full model as indented JSON, for restating it to a backend."""
        return safe_json_dumps(self.to_dict(), indent=2)

    def model_copy_with_updates(self, **updates: Any) -> "ApplicationModel":
        """Create an updated, re-validated model (immutable pattern)."""
        data = self.model_dump()
        data.update(updates)
        return ApplicationModel.model_validate(data)


Component.model_rebuild()
NavigationItem.model_rebuild()


# ============================================================================
# Inbound Request
# ============================================================================


class BackendSettings(RequestValidator):
    """Per-request generation options."""

    model_config = ConfigDict(
        frozen=True, extra="allow", alias_generator=to_camel, populate_by_name=True
    )

    stack_id: str | None = None
    backend: str | None = None
    model: str | None = None


class GenerationRequest(RequestValidator):
    """Validated generation request."""

    model_config = ConfigDict(
        frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True
    )

    prompt: str = Field(min_length=1, max_length=MAX_PROMPT_LENGTH)
    targets: tuple[Target, ...] = Field(min_length=1)
    template_id: str | None = None
    backend_settings: BackendSettings | None = None

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, v: str) -> str:
        """Ensure prompt is non-empty after stripping."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Prompt cannot be empty")
        return stripped

    @field_validator("targets", mode="before")
    @classmethod
    def validate_targets(cls, v: Any) -> Any:
        """Resolve target ids; unknown ids raise UnknownTargetError, duplicates are rejected."""
        if isinstance(v, (str, Target)):
            v = [v]
        targets = [Target.parse(t) for t in v]
        if len(set(targets)) != len(targets):
            raise ValueError("Duplicate targets are not allowed")
        return tuple(targets)

    @property
    def stack_id(self) -> str | None:
        return self.backend_settings.stack_id if self.backend_settings else None

    @property
    def backend_id(self) -> str | None:
        return self.backend_settings.backend if self.backend_settings else None

    @property
    def model_hint(self) -> str | None:
        return self.backend_settings.model if self.backend_settings else None
