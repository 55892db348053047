"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from appforge.agents.app_builder import ApplicationModelBuilder
from appforge.agents.orchestrator import GenerationResult, Orchestrator
from appforge.agents.templates import TemplateLibrary
from appforge.agents.web_generator import WebPipeline
from appforge.clients.registry import AdapterRegistry, build_default_registry
from appforge.handlers.generation import GenerationHandler
from .config import Settings, get_settings
from .store import MemoryStore

RESULT_STORE_SIZE = 500


class ResultStore(MemoryStore[GenerationResult]):
    """Generation results kept for the HTTP layer."""

    def __init__(self, max_size: int | None = RESULT_STORE_SIZE) -> None:
        super().__init__(max_size=max_size)


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_registry(self, settings: Settings) -> AdapterRegistry:
        """Provide one adapter per configured backend."""
        return build_default_registry(settings)

    @singleton
    @provider
    def provide_templates(self) -> TemplateLibrary:
        return TemplateLibrary()

    @singleton
    @provider
    def provide_web_pipeline(self, settings: Settings) -> WebPipeline:
        return WebPipeline(default_stack=settings.default_stack)

    @singleton
    @provider
    def provide_orchestrator(
        self,
        settings: Settings,
        registry: AdapterRegistry,
        templates: TemplateLibrary,
        web_pipeline: WebPipeline,
    ) -> Orchestrator:
        """Provide the orchestrator with all dependencies."""
        return Orchestrator(
            registry=registry,
            builder=ApplicationModelBuilder(templates),
            web_pipeline=web_pipeline,
            default_backend=settings.backend,
            max_parallel_targets=settings.max_parallel_targets,
        )

    @singleton
    @provider
    def provide_result_store(self) -> ResultStore:
        return ResultStore()

    @singleton
    @provider
    def provide_handler(
        self,
        orchestrator: Orchestrator,
        store: ResultStore,
        settings: Settings,
    ) -> GenerationHandler:
        return GenerationHandler(orchestrator, store, settings)


def create_container(settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(settings)])
