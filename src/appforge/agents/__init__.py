"""Application generation: model building, emitters and orchestration."""

from .models import ApplicationModel, GenerationRequest, Target
from .app_builder import ApplicationModelBuilder, ModelBuild
from .templates import Template, TemplateLibrary, TemplateNotFound
from .stacks import STACKS, StackProfile, UnknownStackError, resolve_stack
from .web_generator import WebBuild, WebPipeline, WebSpecification
from .emitters import Emission, TargetEmitter, WebEmitter
from .orchestrator import GenerationMetadata, GenerationResult, Orchestrator, TargetFailure
from .review import ReviewResult, StoreListing, StoreReviewValidator
from .verifier import BuildVerifier, CommandBuildVerifier, VerificationReport

__all__ = [
    "ApplicationModel",
    "GenerationRequest",
    "Target",
    "ApplicationModelBuilder",
    "ModelBuild",
    "Template",
    "TemplateLibrary",
    "TemplateNotFound",
    "STACKS",
    "StackProfile",
    "UnknownStackError",
    "resolve_stack",
    "WebBuild",
    "WebPipeline",
    "WebSpecification",
    "Emission",
    "TargetEmitter",
    "WebEmitter",
    "GenerationMetadata",
    "GenerationResult",
    "Orchestrator",
    "TargetFailure",
    "ReviewResult",
    "StoreListing",
    "StoreReviewValidator",
    "BuildVerifier",
    "CommandBuildVerifier",
    "VerificationReport",
]
