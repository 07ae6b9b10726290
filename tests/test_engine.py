"""
File engine and settings tests
"""

import os

import pytest

from ejshtml.config.settings import AppSettings
from ejshtml.lib.engine import Engine, EngineError, render_file
from ejshtml.lib.errors import RenderError


@pytest.fixture
def views(tmp_path):
    """A template directory with a page using one custom element"""
    (tmp_path / "page.ejs").write_text(
        '<h1><%= locals["title"] %></h1><my-card label="x">Body</my-card>', encoding="utf-8"
    )
    (tmp_path / "my-card.ejs").write_text(
        '<div class="card"><%= locals["label"] %>: <eh-placeholder></eh-placeholder></div>', encoding="utf-8"
    )
    return tmp_path


class TestEngine:
    """Test loading, caching and custom element resolution"""

    def test_render(self, views):
        """Custom elements resolve to templates in the same directory"""
        engine = Engine(views)
        assert engine.render("page", {"title": "Home"}) == "<h1>Home</h1><div class=card>x: Body</div>"

    def test_render_with_extension(self, views):
        assert Engine(views).render("page.ejs", {"title": "Home"}).startswith("<h1>Home</h1>")

    def test_render_file(self, views):
        assert render_file(views / "page.ejs", {"title": "Home"}) == "<h1>Home</h1><div class=card>x: Body</div>"

    def test_cache(self, views):
        """An unchanged template is compiled once"""
        engine = Engine(views)
        assert engine.procedure_get("page") is engine.procedure_get("page")

    def test_recompile_on_change(self, views):
        """A modified template is recompiled"""
        engine = Engine(views)
        first = engine.procedure_get("page")

        path = views / "page.ejs"
        path.write_text("changed", encoding="utf-8")
        mtime = path.stat().st_mtime + 10
        os.utime(path, (mtime, mtime))

        second = engine.procedure_get("page")
        assert second is not first
        assert second() == "changed"

    def test_missing_template(self, tmp_path):
        with pytest.raises(EngineError, match="not found"):
            Engine(tmp_path).render("nothing")

    def test_missing_custom_element(self, tmp_path):
        """A custom element without a template fails while rendering"""
        (tmp_path / "page.ejs").write_text("<no-such></no-such>", encoding="utf-8")
        with pytest.raises(RenderError) as info:
            Engine(tmp_path).render("page")
        assert isinstance(info.value.__cause__, EngineError)

    def test_error_filename(self, tmp_path):
        """Render errors name the template file"""
        (tmp_path / "bad.ejs").write_text('<% raise ValueError("x") %>', encoding="utf-8")
        with pytest.raises(RenderError) as info:
            Engine(tmp_path).render("bad")
        assert info.value.filename == "bad.ejs"
        assert str(info.value).startswith("bad.ejs:1\n")

    def test_options_shared(self, views):
        """Options given to the engine apply to every template"""
        engine = Engine(views, compile_debug=False)
        assert not engine.procedure_get("page").options.compile_debug
        assert engine.procedure_get("page").options.filename == "page.ejs"


class TestSettings:
    """Test environment configuration"""

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("EJSHTML_COMPILE_DEBUG", "false")
        monkeypatch.setenv("EJSHTML_TEMPLATE_EXTENSION", ".html")
        settings = AppSettings()
        assert settings.compile_debug is False
        assert settings.template_extension == ".html"

    def test_template_name(self):
        settings = AppSettings(template_extension=".ejs")
        assert settings.templateName_resolve("my-tag") == "my-tag.ejs"
        assert settings.templateName_resolve("page.html") == "page.html"
        assert settings.templateName_resolve("a.b/my-tag") == "a.b/my-tag.ejs"
