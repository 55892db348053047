"""Application Model Builder - one backend call, strict parse, default on failure."""

from typing import Optional, Sequence

import pydantic
from pydantic import BaseModel, ConfigDict

from appforge.clients.base import BackendAdapter, Usage
from appforge.core import (
    JSONParseError,
    ValidationError,
    get_logger,
    parse_object,
    strip_code_fence,
    validate_json_depth,
    validate_json_size,
)
from appforge.core.validate import MAX_MODEL_JSON_SIZE
from appforge.monitoring import metrics_collector, trace_operation
from .models import ApplicationModel, Target
from .prompt import get_app_model_prompt
from .templates import TemplateLibrary


logger = get_logger(__name__)


class ModelBuild(BaseModel):
    """Outcome of one build: the model, the call's usage, and whether it is the default."""

    model_config = ConfigDict(frozen=True)

    app: ApplicationModel
    usage: Optional[Usage] = None
    recovered: bool = False


class ApplicationModelBuilder:
    """Turns a natural-language request into a canonical Application Model."""

    def __init__(self, templates: TemplateLibrary) -> None:
        self.templates = templates

    def resolve_prompt(self, prompt: str, template_id: Optional[str] = None) -> str:
        """
        Request prompt for the backend call.

        Raises:
            TemplateNotFound: If template_id is not in the catalog
        """
        if template_id is None:
            return prompt
        return self.templates.require(template_id).prompt

    def build(
        self,
        adapter: BackendAdapter,
        prompt: str,
        targets: Sequence[Target],
        template_id: Optional[str] = None,
        model: Optional[str] = None,
    ) -> ModelBuild:
        """
        Build the Application Model.

        Args:
            adapter: Backend serving this request
            prompt: Caller's natural-language request
            targets: Requested targets, copied into the model's platforms
            template_id: Optional template whose features replace the prompt
            model: Optional model override

        Returns:
            ModelBuild; ``recovered`` is set when the default model was substituted

        Raises:
            TemplateNotFound: Unknown template id
            BackendTransportError: No response from the backend
        """
        request_prompt = self.resolve_prompt(prompt, template_id)

        with trace_operation("build_app_model", backend=adapter.backend_id, template=template_id or ""):
            completion = adapter.complete(request_prompt, system=get_app_model_prompt(), model=model)

        app = self.parse(completion.text, targets)
        if app is None:
            # Description keeps the caller's literal prompt
            metrics_collector.record_fallback("app_model")
            return ModelBuild(
                app=ApplicationModel.default(prompt, targets),
                usage=completion.usage,
                recovered=True,
            )

        logger.info(
            "app_model_built",
            app_id=app.id,
            name=app.name,
            screens=len(app.screens),
            data_models=len(app.data_models),
        )
        return ModelBuild(app=app, usage=completion.usage, recovered=False)

    @staticmethod
    def parse(text: str, targets: Sequence[Target]) -> Optional[ApplicationModel]:
        """
        Strictly parse backend text into a model.

        Returns:
            The model with platforms set to ``targets``, or None if the text is
            not a valid Application Model
        """
        try:
            candidate = strip_code_fence(text)
            validate_json_size(candidate, MAX_MODEL_JSON_SIZE, "Application model")
            data = parse_object(candidate)
            validate_json_depth(data)
            data["platforms"] = [target.value for target in targets]
            return ApplicationModel.model_validate(data)
        except (JSONParseError, ValidationError, pydantic.ValidationError) as e:
            logger.warning("app_model_parse_failed", error=str(e)[:500], content_preview=text[:200])
            return None
