"""
Per-Target Code Emitters
Each emitter turns the shared Application Model into source text for one target.
Returned text is never validated.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from appforge.clients.base import BackendAdapter, Usage
from appforge.core import get_logger
from appforge.monitoring import trace_operation
from .models import ApplicationModel, Target
from .prompt import TARGET_SYSTEM_PROMPTS, get_target_prompt
from .stacks import StackProfile
from .web_generator import WebPipeline, WebResult


logger = get_logger(__name__)


class Emission(BaseModel):
    """Source text produced for one target."""

    model_config = ConfigDict(frozen=True)

    target: Target
    text: str
    usage: Optional[Usage] = None
    web: Optional[WebResult] = None


class TargetEmitter:
    """Emitter for ios, android and react-native."""

    def __init__(self, target: Target) -> None:
        if target not in TARGET_SYSTEM_PROMPTS:
            raise ValueError(f"No native emitter for target {target.value!r}")
        self.target = target

    def emit(
        self, adapter: BackendAdapter, app: ApplicationModel, model: Optional[str] = None
    ) -> Emission:
        """The full model restated to the backend, then the target instruction block."""
        prompt = get_target_prompt(self.target, app.to_prompt_json())

        with trace_operation("emit", target=self.target.value, backend=adapter.backend_id):
            completion = adapter.complete(
                prompt, system=TARGET_SYSTEM_PROMPTS[self.target], model=model
            )

        logger.info("emitted", target=self.target.value, chars=len(completion.text))
        return Emission(target=self.target, text=completion.text, usage=completion.usage)


def web_requirements(app: ApplicationModel) -> str:
    """Natural-language requirements for the web pipeline, derived from the model."""
    lines = [app.name]
    if app.description:
        lines.append(app.description)
    if app.screens:
        lines.append("Screens: " + ", ".join(screen.name for screen in app.screens))
    if app.data_models:
        lines.append("Data: " + ", ".join(data_model.name for data_model in app.data_models))
    if app.enabled_features:
        lines.append("Features: " + ", ".join(app.enabled_features))
    return "\n".join(lines)


class WebEmitter:
    """Emitter for the web target, via the two-phase web pipeline."""

    target = Target.WEB

    def __init__(self, pipeline: WebPipeline) -> None:
        self.pipeline = pipeline

    def emit(
        self,
        adapter: BackendAdapter,
        app: ApplicationModel,
        stack: StackProfile,
        model: Optional[str] = None,
    ) -> Emission:
        with trace_operation("emit", target=self.target.value, backend=adapter.backend_id, stack=stack.id):
            result = self.pipeline.generate(adapter, web_requirements(app), stack.id, model=model)

        return Emission(
            target=self.target,
            text=result.build.flatten(),
            usage=result.usage,
            web=result,
        )


def native_emitters() -> Dict[Target, TargetEmitter]:
    return {target: TargetEmitter(target) for target in TARGET_SYSTEM_PROMPTS}
