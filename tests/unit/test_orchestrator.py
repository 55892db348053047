"""Orchestrator tests: fan-out, failure isolation, aggregation."""

import pytest
from hypothesis import given, settings as hypothesis_settings, strategies as st

from appforge.agents.app_builder import ApplicationModelBuilder
from appforge.agents.models import GenerationRequest, Target
from appforge.agents.orchestrator import Orchestrator
from appforge.agents.stacks import STACKS, UnknownStackError
from appforge.agents.templates import TemplateLibrary, TemplateNotFound
from appforge.agents.web_generator import WebPipeline
from appforge.clients.base import BackendTransportError, UnknownBackendError
from appforge.clients.registry import AdapterRegistry

from conftest import (
    ANDROID_CALL,
    APP_MODEL_CALL,
    IOS_CALL,
    MINIMAL_APP_JSON,
    REACT_NATIVE_CALL,
    WEB_SPEC_CALL,
    WEB_SPEC_JSON,
    ScriptedAdapter,
    completion,
    transport_timeout,
)


def make_orchestrator(adapter: ScriptedAdapter, default_stack: str = "nextjs") -> Orchestrator:
    registry = AdapterRegistry()
    registry.register(adapter.backend_id, adapter)
    return Orchestrator(
        registry=registry,
        builder=ApplicationModelBuilder(TemplateLibrary()),
        web_pipeline=WebPipeline(default_stack=default_stack),
        default_backend=adapter.backend_id,
    )


def request(**kwargs) -> GenerationRequest:
    return GenerationRequest.model_validate(kwargs)


# ============================================================================
# Scenarios
# ============================================================================

@pytest.mark.unit
def test_single_target_valid_model(orchestrator, scripted_adapter):
    result = orchestrator.generate(request(prompt="todo app", targets=["ios"]))

    assert list(result.code) == [Target.IOS]
    assert result.code[Target.IOS] == "generated source"
    assert result.app.name == "Todo Master"
    assert result.app.description == "Keep track of everything you need to do"
    assert result.failures == ()
    assert result.metadata.recovered is False
    assert result.id.startswith("gen_")


@pytest.mark.unit
def test_prose_model_still_emits():
    adapter = ScriptedAdapter({APP_MODEL_CALL: "Happy to help! A todo app is a great idea."})
    result = make_orchestrator(adapter).generate(request(prompt="todo app", targets=["ios"]))

    assert result.metadata.recovered is True
    assert result.app.name == "Generated App"
    assert result.app.description == "todo app"
    assert result.code[Target.IOS] == "generated source"


@pytest.mark.unit
def test_web_default_stack_with_unparseable_spec():
    adapter = ScriptedAdapter({APP_MODEL_CALL: MINIMAL_APP_JSON, WEB_SPEC_CALL: "no spec here"})
    result = make_orchestrator(adapter).generate(request(prompt="todo app", targets=["web"]))

    assert result.metadata.stack == "nextjs"
    assert len(result.files) == 3 + 3 + len(STACKS["nextjs"].config_files)
    assert "app/home/page.tsx" in result.code[Target.WEB]


@pytest.mark.unit
def test_unknown_template_fails_before_any_call(orchestrator, scripted_adapter):
    with pytest.raises(TemplateNotFound):
        orchestrator.generate(request(prompt="todo app", targets=["ios"], templateId="unknown-id"))
    assert scripted_adapter.calls == []


@pytest.mark.unit
def test_one_target_timeout_isolated():
    adapter = ScriptedAdapter({
        APP_MODEL_CALL: MINIMAL_APP_JSON,
        ANDROID_CALL: transport_timeout(),
        WEB_SPEC_CALL: WEB_SPEC_JSON,
    })
    result = make_orchestrator(adapter).generate(
        request(prompt="todo app", targets=["ios", "android", "react-native", "web"])
    )

    assert set(result.code) == {Target.IOS, Target.REACT_NATIVE, Target.WEB}
    assert len(result.failures) == 1
    failure = result.failures[0]
    assert failure.target == Target.ANDROID
    assert failure.error_type == "BackendTransportError"
    assert "timed out" in failure.message


# ============================================================================
# Properties
# ============================================================================

@pytest.mark.unit
def test_all_targets_fail_still_returns_result():
    adapter = ScriptedAdapter({
        APP_MODEL_CALL: MINIMAL_APP_JSON,
        IOS_CALL: transport_timeout(),
        ANDROID_CALL: RuntimeError("emitter crashed"),
    })
    result = make_orchestrator(adapter).generate(request(prompt="x", targets=["ios", "android"]))

    assert result.code == {}
    assert [f.target for f in result.failures] == [Target.IOS, Target.ANDROID]
    assert result.failures[1].error_type == "RuntimeError"


@pytest.mark.unit
def test_builder_transport_failure_propagates():
    adapter = ScriptedAdapter({APP_MODEL_CALL: transport_timeout()})
    with pytest.raises(BackendTransportError):
        make_orchestrator(adapter).generate(request(prompt="x", targets=["ios"]))


@pytest.mark.unit
def test_unknown_stack_fails_before_any_call():
    adapter = ScriptedAdapter({APP_MODEL_CALL: MINIMAL_APP_JSON})
    with pytest.raises(UnknownStackError):
        make_orchestrator(adapter).generate(
            request(prompt="x", targets=["web"], backendSettings={"stackId": "rails"})
        )
    assert adapter.calls == []


@pytest.mark.unit
def test_stack_ignored_without_web_target():
    adapter = ScriptedAdapter({APP_MODEL_CALL: MINIMAL_APP_JSON})
    result = make_orchestrator(adapter).generate(
        request(prompt="x", targets=["ios"], backendSettings={"stackId": "rails"})
    )
    assert result.metadata.stack is None


@pytest.mark.unit
def test_unknown_backend(orchestrator):
    with pytest.raises(UnknownBackendError):
        orchestrator.generate(request(prompt="x", targets=["ios"]), backend_id="nonexistent")


@pytest.mark.unit
def test_model_built_once_and_restated_to_each_emitter(orchestrator, scripted_adapter):
    orchestrator.generate(request(prompt="x", targets=["ios", "android", "react-native"]))

    systems = [call["system"] for call in scripted_adapter.calls]
    assert sum(APP_MODEL_CALL in s for s in systems) == 1
    for key in (IOS_CALL, ANDROID_CALL, REACT_NATIVE_CALL):
        emitter_calls = [c for c in scripted_adapter.calls if key in c["system"]]
        assert len(emitter_calls) == 1
        assert "APP DEFINITION:" in emitter_calls[0]["prompt"]
        assert '"name": "Todo Master"' in emitter_calls[0]["prompt"]


@pytest.mark.unit
def test_usage_summed_over_reporting_calls():
    adapter = ScriptedAdapter({
        APP_MODEL_CALL: completion(MINIMAL_APP_JSON, 100, 50),
        IOS_CALL: completion("swift", 30, 20),
        ANDROID_CALL: "kotlin without usage",
    })
    result = make_orchestrator(adapter).generate(request(prompt="x", targets=["ios", "android"]))

    usage = result.metadata.usage
    assert usage.prompt_tokens == 130
    assert usage.completion_tokens == 70
    assert usage.total_tokens == 200


@pytest.mark.unit
def test_usage_absent_when_never_reported(orchestrator):
    result = orchestrator.generate(request(prompt="x", targets=["ios"]))
    assert result.metadata.usage is None


@pytest.mark.unit
def test_metadata(orchestrator):
    result = orchestrator.generate(request(prompt="x", targets=["android", "ios"]))

    assert result.metadata.backend == "scripted"
    assert result.metadata.model == "scripted-1"
    assert result.metadata.platforms == (Target.ANDROID, Target.IOS)
    assert result.metadata.duration_ms >= 0


@pytest.mark.unit
def test_model_hint_used_for_every_call(orchestrator, scripted_adapter):
    result = orchestrator.generate(request(prompt="x", targets=["ios", "web"]), model="scripted-2")

    assert result.metadata.model == "scripted-2"
    assert {call["model"] for call in scripted_adapter.calls} == {"scripted-2"}


@pytest.mark.unit
def test_default_stack_is_deterministic():
    stacks = []
    for _ in range(3):
        adapter = ScriptedAdapter({APP_MODEL_CALL: MINIMAL_APP_JSON, WEB_SPEC_CALL: WEB_SPEC_JSON})
        result = make_orchestrator(adapter).generate(request(prompt="todo", targets=["web"]))
        stacks.append((result.metadata.stack, result.files))

    assert stacks[0][0] == "nextjs"
    assert stacks.count(stacks[0]) == 3


@pytest.mark.unit
def test_configured_default_stack():
    adapter = ScriptedAdapter({APP_MODEL_CALL: MINIMAL_APP_JSON, WEB_SPEC_CALL: WEB_SPEC_JSON})
    result = make_orchestrator(adapter, default_stack="vue").generate(request(prompt="todo", targets=["web"]))

    assert result.metadata.stack == "vue"
    assert "nuxt.config.ts" in result.files


@pytest.mark.unit
def test_template_generation(orchestrator, scripted_adapter):
    result = orchestrator.generate(request(prompt="anything", targets=["ios"], templateId="calculator"))

    assert Target.IOS in result.code
    assert scripted_adapter.calls[0]["prompt"].startswith("Create a Calculator app with:")


@hypothesis_settings(max_examples=30, deadline=None)
@given(
    st.lists(st.sampled_from(list(Target)), min_size=1, max_size=4, unique=True),
    st.sets(st.sampled_from([IOS_CALL, ANDROID_CALL, REACT_NATIVE_CALL, WEB_SPEC_CALL])),
)
def test_code_keys_are_requested_successes(targets, failing_calls):
    rules = {APP_MODEL_CALL: MINIMAL_APP_JSON}
    rules.update({call: transport_timeout() for call in failing_calls})
    result = make_orchestrator(ScriptedAdapter(rules)).generate(
        GenerationRequest(prompt="x", targets=targets)
    )

    call_for = {
        Target.IOS: IOS_CALL,
        Target.ANDROID: ANDROID_CALL,
        Target.REACT_NATIVE: REACT_NATIVE_CALL,
        Target.WEB: WEB_SPEC_CALL,
    }
    expected_ok = {t for t in targets if call_for[t] not in failing_calls}
    assert set(result.code) == expected_ok
    assert {f.target for f in result.failures} == set(targets) - expected_ok
    assert set(result.code) <= set(targets)
