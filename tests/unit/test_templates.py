"""Template catalog tests."""

import pytest

from appforge.agents.models import Target
from appforge.agents.stacks import STACKS
from appforge.agents.templates import BUILTIN_TEMPLATES, TemplateLibrary, TemplateNotFound
from appforge.core import UnknownTargetError, ValidationError


@pytest.fixture
def library():
    return TemplateLibrary()


@pytest.mark.unit
def test_ids_unique():
    ids = [t.id for t in BUILTIN_TEMPLATES]
    assert len(ids) == len(set(ids))


@pytest.mark.unit
def test_web_templates_name_known_stacks():
    for template in BUILTIN_TEMPLATES:
        if template.category == "web":
            assert template.platforms == (Target.WEB,)
            assert template.stack in STACKS


@pytest.mark.unit
def test_get_and_require(library):
    assert library.get("todo-app").name == "Todo List"
    assert library.get("nope") is None

    with pytest.raises(TemplateNotFound) as exc_info:
        library.require("nope")
    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.identifier == "nope"


@pytest.mark.unit
def test_prompt_from_features(library):
    template = library.require("todo-app")
    assert template.prompt == (
        "Create a Todo List app with: add-task, delete-task, mark-complete, "
        "categories, local-storage, reminders"
    )


@pytest.mark.unit
def test_by_category(library):
    health = library.by_category("health")
    assert {t.id for t in health} == {"fitness-tracker", "water-tracker"}
    assert library.by_category("unknown") == []


@pytest.mark.unit
def test_by_platform(library):
    web = library.by_platform("web")
    assert web and all(Target.WEB in t.platforms for t in web)
    assert len(library.by_platform(Target.IOS)) == 16

    with pytest.raises(UnknownTargetError):
        library.by_platform("blackberry")


@pytest.mark.unit
def test_categories_sorted(library):
    categories = library.categories()
    assert categories == sorted(categories)
    assert "web" in categories


@pytest.mark.unit
def test_search(library):
    assert "qr-scanner" in {t.id for t in library.search("barcode")}
    assert "url-shortener" in {t.id for t in library.search("SHORTENER")}
    assert library.search("zzz-nothing") == []


@pytest.mark.unit
def test_custom_catalog():
    library = TemplateLibrary(BUILTIN_TEMPLATES[:2])
    assert len(library.list_all()) == 2
