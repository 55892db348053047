"""
Web App Generator
Two phases: a specification from one backend call, then a deterministic scaffold.
"""

from typing import Any, List, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from appforge.clients.base import BackendAdapter, Usage
from appforge.core import (
    JSONParseError,
    find_balanced_object,
    get_logger,
    parse_object,
    safe_json_dumps,
)
from appforge.monitoring import metrics_collector, trace_operation
from .prompt import get_web_spec_prompt
from .stacks import MANIFESTS, StackProfile, resolve_stack


logger = get_logger(__name__)


# ============================================================================
# Specification
# ============================================================================


class WebTable(BaseModel):
    """Database table with its field names."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[str, ...] = ()

    @field_validator("fields", mode="before")
    @classmethod
    def _field_names(cls, v: Any) -> Any:
        # Fields arrive as names or as {"name": ...} objects
        if isinstance(v, (list, tuple)):
            return [f.get("name", "") if isinstance(f, dict) else f for f in v]
        return v


class WebSpecification(BaseModel):
    """Intermediate plan for the web target only."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    name: str = "WebApp"
    description: str = ""
    stack: str
    pages: tuple[str, ...] = ("Home",)
    components: tuple[str, ...] = ("Button",)
    api_endpoints: tuple[str, ...] = ()
    tables: tuple[WebTable, ...] = ()
    features: tuple[str, ...] = ()

    @field_validator("pages", "components", mode="before")
    @classmethod
    def _named_entries(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [entry.get("name", "") if isinstance(entry, dict) else entry for entry in v]
        return v

    @model_validator(mode="before")
    @classmethod
    def _lift_database_tables(cls, data: Any) -> Any:
        if isinstance(data, dict) and "tables" not in data:
            database = data.get("database")
            if isinstance(database, dict) and "tables" in database:
                data = {**data, "tables": database["tables"]}
        return data

    @classmethod
    def fallback(cls, prompt: str, stack: str) -> "WebSpecification":
        """Minimal specification used when backend output cannot be parsed."""
        return cls(
            name="WebApp",
            description=prompt,
            stack=stack,
            pages=("Home", "About", "Contact"),
            components=("Navbar", "Footer", "Button"),
            api_endpoints=(),
            features=("responsive",),
        )


# ============================================================================
# Scaffold
# ============================================================================


class WebBuild(BaseModel):
    """Rendered scaffold: descriptive sections plus the file manifest."""

    model_config = ConfigDict(frozen=True)

    stack: str
    frontend: Optional[str] = None
    backend: Optional[str] = None
    config: Optional[str] = None
    files: tuple[str, ...] = ()

    def flatten(self) -> str:
        """All sections as one text block."""
        parts = [section for section in (self.frontend, self.backend) if section]
        if self.config:
            parts.append(f"## Config\n```json\n{self.config}\n```")
        parts.append("## Files\n" + "\n".join(f"- {path}" for path in self.files))
        return "\n\n".join(parts)


class WebResult(BaseModel):
    """Both phases of one web generation."""

    model_config = ConfigDict(frozen=True)

    specification: WebSpecification
    build: WebBuild
    usage: Optional[Usage] = None
    recovered: bool = False


class WebPipeline:
    """Web stack sub-pipeline: specify, then render."""

    def __init__(self, default_stack: str = "nextjs") -> None:
        self.default_stack = default_stack

    def resolve(self, stack_id: Optional[str]) -> StackProfile:
        """Stack for a request. Raises UnknownStackError."""
        return resolve_stack(stack_id, self.default_stack)

    def specify(
        self,
        adapter: BackendAdapter,
        prompt: str,
        stack: StackProfile,
        model: Optional[str] = None,
    ) -> tuple[WebSpecification, Optional[Usage], bool]:
        """
        Phase 1: one backend call for the specification.

        Returns:
            (specification, usage, recovered)
        """
        system = get_web_spec_prompt(prompt, stack.conventions())
        with trace_operation("web_specify", backend=adapter.backend_id, stack=stack.id):
            completion = adapter.complete(prompt, system=system, model=model)

        spec = self.parse(completion.text, stack.id)
        if spec is None:
            metrics_collector.record_fallback("web_spec")
            return WebSpecification.fallback(prompt, stack.id), completion.usage, True
        return spec, completion.usage, False

    @staticmethod
    def parse(text: str, stack_id: str) -> Optional[WebSpecification]:
        """First balanced object, strictly parsed. None when nothing parses."""
        candidate = find_balanced_object(text)
        if candidate is None:
            logger.warning("web_spec_no_object", content_preview=text[:200])
            return None
        try:
            data = parse_object(candidate)
            data["stack"] = stack_id
            return WebSpecification.model_validate(data)
        except (JSONParseError, pydantic.ValidationError) as e:
            logger.warning("web_spec_parse_failed", error=str(e)[:500], content_preview=text[:200])
            return None

    def render(self, spec: WebSpecification) -> WebBuild:
        """
        Phase 2: deterministic scaffold, no backend call.

        Raises:
            UnknownStackError: If spec.stack is not a known stack
        """
        profile = resolve_stack(spec.stack)

        page_files = [profile.page_file(page) for page in spec.pages]
        component_files = [profile.component_file(component) for component in spec.components]

        frontend = None
        if profile.has_frontend:
            lines = [f"# {profile.name} {spec.name}", "", "## Pages"]
            lines += [f"- {path}" for path in page_files]
            lines += ["", "## Components"]
            lines += [f"- {path}" for path in component_files]
            frontend = "\n".join(lines)

        backend = None
        if profile.has_backend:
            lines = [f"# {profile.framework} API for {spec.name}"]
            if not profile.has_frontend:
                lines += ["", "## Templates"]
                lines += [f"- {path}" for path in page_files + component_files]
            if spec.api_endpoints:
                lines += ["", "## API Endpoints"]
                lines += [f"- {endpoint}" for endpoint in spec.api_endpoints]
            if spec.tables:
                lines += ["", "## Database Models"]
                lines += [f"- {table.name}: {', '.join(table.fields)}" for table in spec.tables]
            backend = "\n".join(lines)

        config = safe_json_dumps(MANIFESTS[profile.id](spec.name), indent=2)
        files = tuple(page_files + component_files + list(profile.config_files))

        return WebBuild(stack=profile.id, frontend=frontend, backend=backend, config=config, files=files)

    def generate(
        self,
        adapter: BackendAdapter,
        prompt: str,
        stack_id: Optional[str] = None,
        model: Optional[str] = None,
    ) -> WebResult:
        """Run both phases."""
        profile = self.resolve(stack_id)
        spec, usage, recovered = self.specify(adapter, prompt, profile, model=model)
        build = self.render(spec)

        logger.info(
            "web_generated",
            stack=profile.id,
            pages=len(spec.pages),
            components=len(spec.components),
            files=len(build.files),
            recovered=recovered,
        )
        return WebResult(specification=spec, build=build, usage=usage, recovered=recovered)


def manifest_size(spec: WebSpecification) -> int:
    """Expected file count for a specification."""
    return len(spec.pages) + len(spec.components) + len(resolve_stack(spec.stack).config_files)


__all__: List[str] = [
    "WebTable",
    "WebSpecification",
    "WebBuild",
    "WebResult",
    "WebPipeline",
    "manifest_size",
]
