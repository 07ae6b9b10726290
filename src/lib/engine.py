"""
File engine

Loads templates from a directory, compiles them once per modification
time, and resolves custom elements to sibling templates: ``<my-tag>`` is
rendered with ``<root>/my-tag.ejs``.

Example:
    >>> engine = Engine("views", vars=["title"])
    >>> engine.render("index", {"title": "Home"})  # doctest: +SKIP
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..config import appsettings
from ..models.options import Options
from .compiler import RenderProcedure, compile
from .log import LOG


class EngineError(Exception):
    """Raised when a template file cannot be found or read"""
    pass


class Engine:
    """
    Template loader and renderer for one directory

    Attributes:
        root: Directory holding the templates
        options: Compile options shared by all templates; ``filename`` is
                 replaced by each template's file name
        cache: Compiled templates keyed by path, with their mtime
    """

    def __init__(self, root: Union[str, Path], options: Optional[Options] = None, **overrides: Any):
        self.root = Path(root)
        self.options = Options.prepare(options, **overrides)
        self.cache: Dict[Path, Tuple[float, RenderProcedure]] = {}

    def path_resolve(self, name: str) -> Path:
        """Path of a template, adding the default extension when missing"""
        return self.root / appsettings.templateName_resolve(name)

    def procedure_get(self, name: str) -> RenderProcedure:
        """
        Return the compiled template, recompiling when the file changed

        Raises:
            EngineError: If the template file is missing or unreadable
        """
        path = self.path_resolve(name)
        try:
            mtime = path.stat().st_mtime
        except OSError as error:
            raise EngineError(f"Template not found: {path}") from error

        cached = self.cache.get(path)
        if cached and cached[0] == mtime:
            return cached[1]

        try:
            source = path.read_text(encoding="utf-8")
        except OSError as error:
            raise EngineError(f"Failed to read template {path}: {error}") from error

        LOG(f"Compiling template {path}", level=2)
        procedure = compile(source, self.options, filename=appsettings.templateName_resolve(name))
        self.cache[path] = (mtime, procedure)
        return procedure

    def render(self, name: str, locals: Optional[Mapping[str, Any]] = None) -> str:
        """Render a template; custom elements resolve to templates in the same root"""
        return self.procedure_get(name)(locals, self.custom_render)

    def custom_render(self, tag: str, locals: Mapping[str, Any]) -> str:
        LOG(f"Rendering custom element <{tag}>", level=3)
        return self.render(tag, locals)


def render_file(
    path: Union[str, Path],
    locals: Optional[Mapping[str, Any]] = None,
    **overrides: Any,
) -> str:
    """Render a single template file, resolving custom elements beside it"""
    path = Path(path)
    return Engine(path.parent, **overrides).render(path.name, locals)
