"""Generation Handler."""

import time
from typing import Any, List, Mapping, Optional

import pydantic

from appforge.agents.models import ApplicationModel, GenerationRequest, Target
from appforge.agents.orchestrator import GenerationResult, Orchestrator
from appforge.agents.review import ReviewResult, StoreListing, StoreReviewValidator
from appforge.clients.base import BackendError
from appforge.core import Settings, Store, ValidationError, get_logger
from appforge.monitoring import metrics_collector, trace_operation


logger = get_logger(__name__)


def _validation_message(error: pydantic.ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
    return "; ".join(parts) or str(error)


class GenerationHandler:
    """Handles generation and review requests for the HTTP layer."""

    def __init__(
        self,
        orchestrator: Orchestrator,
        store: Store[GenerationResult],
        settings: Settings,
        validator: Optional[StoreReviewValidator] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.store = store
        self.settings = settings
        self.validator = validator or StoreReviewValidator()

    def parse_request(self, payload: Mapping[str, Any] | GenerationRequest) -> GenerationRequest:
        """
        Validate an inbound request.

        Raises:
            ValidationError: Malformed request
            UnknownTargetError: Unknown target id
        """
        if isinstance(payload, GenerationRequest):
            request = payload
        else:
            try:
                request = GenerationRequest.model_validate(payload)
            except pydantic.ValidationError as e:
                raise ValidationError(_validation_message(e)) from e

        if len(request.prompt) > self.settings.max_prompt_length:
            raise ValidationError(
                f"Prompt length {len(request.prompt)} exceeds maximum {self.settings.max_prompt_length}"
            )
        return request

    def generate(self, payload: Mapping[str, Any] | GenerationRequest) -> GenerationResult:
        """Generate, record metrics, and store the result."""
        start_time = time.time()

        try:
            request = self.parse_request(payload)
            logger.info("generate", prompt=request.prompt[:50], targets=[t.value for t in request.targets])

            with trace_operation("generation_request", targets=len(request.targets)):
                result = self.orchestrator.generate(
                    request,
                    backend_id=request.backend_id,
                    model=request.model_hint,
                )

        except ValidationError as e:
            metrics_collector.record_generation("validation_error", time.time() - start_time)
            logger.warning("validation", error=str(e))
            raise
        except BackendError as e:
            metrics_collector.record_generation("backend_error", time.time() - start_time)
            metrics_collector.record_error(type(e).__name__, "generation_handler")
            logger.error("backend", error=str(e), backend=e.backend)
            raise
        except Exception as e:
            metrics_collector.record_generation("error", time.time() - start_time)
            metrics_collector.record_error("generation_error", "generation_handler")
            logger.error("generation", error=str(e))
            raise

        status = "success" if not result.failures else "partial"
        metrics_collector.record_generation(status, time.time() - start_time)
        self.store.put(result.id, result)
        return result

    def get(self, generation_id: str) -> Optional[GenerationResult]:
        return self.store.get(generation_id)

    def list(self) -> List[GenerationResult]:
        return self.store.list()

    def delete(self, generation_id: str) -> bool:
        return self.store.delete(generation_id)

    def review(
        self,
        app: Mapping[str, Any] | ApplicationModel,
        target: str | Target,
        listing: Mapping[str, Any] | StoreListing | None = None,
    ) -> tuple[ReviewResult, str]:
        """
        Store review for a model and target.

        Returns:
            (result, markdown report)
        """
        resolved = Target.parse(target)
        try:
            model = app if isinstance(app, ApplicationModel) else ApplicationModel.model_validate(app)
            if listing is not None and not isinstance(listing, StoreListing):
                listing = StoreListing.model_validate(listing)
        except pydantic.ValidationError as e:
            raise ValidationError(_validation_message(e)) from e

        with trace_operation("store_review", target=resolved.value):
            result = self.validator.validate(model, resolved, listing)
        return result, self.validator.generate_report(result, resolved)
