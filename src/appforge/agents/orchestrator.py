"""
Generation Orchestrator
Builds one Application Model, fans it out to the requested target emitters,
and aggregates the outcome. Stateless across calls.
"""

import contextvars
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from returns.pipeline import is_successful
from returns.result import Failure, Result, Success

from appforge.clients.base import BackendAdapter, Usage
from appforge.clients.registry import AdapterRegistry
from appforge.core import LogContext, get_logger, new_generation_id
from appforge.monitoring import metrics_collector, trace_operation
from .app_builder import ApplicationModelBuilder
from .emitters import Emission, TargetEmitter, WebEmitter, native_emitters
from .models import ApplicationModel, GenerationRequest, Target
from .stacks import StackProfile
from .web_generator import WebPipeline


logger = get_logger(__name__)


class TargetFailure(BaseModel):
    """Why one target produced no source."""

    model_config = ConfigDict(frozen=True)

    target: Target
    error_type: str
    message: str


class GenerationMetadata(BaseModel):
    """Provenance for one generation."""

    model_config = ConfigDict(frozen=True)

    backend: str
    model: str
    usage: Optional[Usage] = None
    duration_ms: float
    platforms: tuple[Target, ...]
    stack: Optional[str] = None
    recovered: bool = False


class GenerationResult(BaseModel):
    """Model, per-target source, failures, metadata."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_generation_id)
    app: ApplicationModel
    code: Dict[Target, str] = Field(default_factory=dict)
    failures: tuple[TargetFailure, ...] = ()
    files: tuple[str, ...] = ()
    metadata: GenerationMetadata


class Orchestrator:
    """
    Single entry point for generation.

    One backend serves every call of a request. Emitters run concurrently on a
    bounded thread pool; a failing target never aborts its siblings.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        builder: ApplicationModelBuilder,
        web_pipeline: WebPipeline,
        default_backend: str = "claude",
        max_parallel_targets: int = 4,
    ) -> None:
        self.registry = registry
        self.builder = builder
        self.web_pipeline = web_pipeline
        self.default_backend = default_backend
        self.max_parallel_targets = max_parallel_targets
        self.emitters: Dict[Target, TargetEmitter] = native_emitters()
        self.web_emitter = WebEmitter(web_pipeline)

    def generate(
        self,
        request: GenerationRequest,
        backend_id: Optional[str] = None,
        model: Optional[str] = None,
    ) -> GenerationResult:
        """
        Run one generation.

        Args:
            request: Validated request
            backend_id: Backend for the whole request (configured default if None)
            model: Optional model override

        Returns:
            GenerationResult, even when every target failed

        Raises:
            UnknownBackendError: Backend not registered
            UnknownStackError: Web requested with an unknown stack
            TemplateNotFound: Unknown template id
            BackendTransportError: Model build got no response
        """
        start_time = time.time()
        generation_id = new_generation_id()

        # Identifiers are resolved before any backend call
        adapter = self.registry.require(backend_id or self.default_backend)
        stack = self.web_pipeline.resolve(request.stack_id) if Target.WEB in request.targets else None
        if request.template_id is not None:
            self.builder.templates.require(request.template_id)

        with LogContext(generation_id=generation_id, backend=adapter.backend_id):
            logger.info(
                "generation_started",
                targets=[t.value for t in request.targets],
                template=request.template_id,
                stack=stack.id if stack else None,
            )

            with trace_operation("generate", backend=adapter.backend_id, targets=len(request.targets)):
                build = self.builder.build(
                    adapter, request.prompt, request.targets, request.template_id, model=model
                )
                results = self._fan_out(adapter, build.app, request.targets, stack, model)

            code: Dict[Target, str] = {}
            failures = []
            usages = [build.usage]
            files: tuple[str, ...] = ()
            for target in request.targets:
                result = results[target]
                if is_successful(result):
                    emission = result.unwrap()
                    code[target] = emission.text
                    usages.append(emission.usage)
                    if emission.web is not None:
                        files = emission.web.build.files
                    metrics_collector.record_target(target.value, "success")
                else:
                    failures.append(result.failure())
                    metrics_collector.record_target(target.value, "failure")

            duration_ms = (time.time() - start_time) * 1000
            metadata = GenerationMetadata(
                backend=adapter.backend_id,
                model=model or adapter.model,
                usage=Usage.combine(usages),
                duration_ms=duration_ms,
                platforms=request.targets,
                stack=stack.id if stack else None,
                recovered=build.recovered,
            )

            logger.info(
                "generation_complete",
                succeeded=[t.value for t in code],
                failed=[f.target.value for f in failures],
                duration_ms=duration_ms,
                recovered=build.recovered,
            )

        return GenerationResult(
            id=generation_id,
            app=build.app,
            code=code,
            failures=tuple(failures),
            files=files,
            metadata=metadata,
        )

    def _fan_out(
        self,
        adapter: BackendAdapter,
        app: ApplicationModel,
        targets: tuple[Target, ...],
        stack: Optional[StackProfile],
        model: Optional[str],
    ) -> Dict[Target, Result[Emission, TargetFailure]]:
        workers = max(1, min(self.max_parallel_targets, len(targets)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="emitter") as pool:
            # Each task carries the caller's log and trace context
            futures = {
                target: pool.submit(
                    contextvars.copy_context().run,
                    self._emit_target, adapter, app, target, stack, model,
                )
                for target in targets
            }
            return {target: future.result() for target, future in futures.items()}

    def _emit_target(
        self,
        adapter: BackendAdapter,
        app: ApplicationModel,
        target: Target,
        stack: Optional[StackProfile],
        model: Optional[str],
    ) -> Result[Emission, TargetFailure]:
        try:
            if target == Target.WEB:
                return Success(self.web_emitter.emit(adapter, app, stack, model=model))
            return Success(self.emitters[target].emit(adapter, app, model=model))
        except Exception as e:
            logger.warning("target_failed", target=target.value, error_type=type(e).__name__, error=str(e))
            metrics_collector.record_error(type(e).__name__, f"emitter.{target.value}")
            return Failure(TargetFailure(target=target, error_type=type(e).__name__, message=str(e)))
