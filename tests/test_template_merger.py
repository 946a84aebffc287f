import pytest

from config import DEFAULT_TEMPLATE_DIR
from exceptions import ConfigurationError
from models import GeneratedFile
from services.template_merger import TEMPLATE_FILES, TemplateLibrary, merge_with_templates


def _files(*pairs):
    return [GeneratedFile(path=p, content=c) for p, c in pairs]


def test_template_wins_path_collision():
    model = _files(("package.json", "from model"), ("src/app/page.tsx", "page"))
    templates = _files(("package.json", "from template"))

    merged = merge_with_templates(model, templates)

    by_path = {f.path: f.content for f in merged}
    assert by_path["package.json"] == "from template"
    assert [f.path for f in merged].count("package.json") == 1


def test_twelve_templates_plus_one_model_file():
    templates = _files(*[(f"t/{i}.txt", str(i)) for i in range(12)])
    model = _files(("src/app/page.tsx", "page"))
    assert len(merge_with_templates(model, templates)) == 13


def test_model_files_first_then_templates():
    merged = merge_with_templates(_files(("a", "1"), ("b", "2")), _files(("t", "3")))
    assert [f.path for f in merged] == ["a", "b", "t"]


def test_merge_is_idempotent():
    templates = _files(("t1", "x"), ("t2", "y"))
    once = merge_with_templates(_files(("a", "1"), ("t1", "model")), templates)
    assert merge_with_templates(once, templates) == once


def test_duplicate_model_paths_collapse():
    merged = merge_with_templates(_files(("a", "first"), ("b", "b"), ("a", "second")), [])
    assert merged == _files(("a", "second"), ("b", "b"))


def test_library_builds_all_templates_with_substitution():
    library = TemplateLibrary(DEFAULT_TEMPLATE_DIR)
    files = library.build_template_files("demo.myshopify.com", "tok_123")

    assert [f.path for f in files] == [path for path, _ in TEMPLATE_FILES]
    env = {f.path: f.content for f in files}[".env.local"]
    assert "SHOPIFY_STORE_DOMAIN=demo.myshopify.com" in env
    assert "SHOPIFY_STOREFRONT_ACCESS_TOKEN=tok_123" in env
    assert "{{" not in env


def test_library_only_substitutes_env_file(tmp_path):
    for _, filename in TEMPLATE_FILES:
        (tmp_path / filename).write_text("value={{SHOPIFY_DOMAIN}}", encoding="utf-8")

    files = TemplateLibrary(str(tmp_path)).build_template_files("shop", "tok")
    by_path = {f.path: f.content for f in files}
    assert by_path[".env.local"] == "value=shop"
    assert by_path["package.json"] == "value={{SHOPIFY_DOMAIN}}"


def test_missing_template_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError, match="Template file not found"):
        TemplateLibrary(str(tmp_path)).build_template_files("", "")
