"""
Per-compile options

Options is immutable. ``Options.prepare()`` is the single entry point used
by every public operation: it fills unspecified fields from the application
settings and applies keyword overrides.
"""

import keyword
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..config import appsettings


# A transformer receives the parsed token tree and may edit it in place
# (returning None) or return a replacement tree.
Transformer = Callable[[List[Any]], Optional[List[Any]]]

# Names the generated render function already uses
RESERVED_NAMES = frozenset({"locals", "render_custom"})


@dataclass(frozen=True)
class Options:
    """
    Compile configuration

    Attributes:
        compile_debug: Emit line range markers and wrap render errors
        filename: Template name used in diagnostics
        transformer: Optional hook run on the token tree before reduction
        strict_mode: Bind ``vars`` with ``locals[name]`` (True) or
                     ``locals.get(name)`` (False)
        vars: Names bound from the render context at function entry
        source_map: Record a position map while generating code
    """
    compile_debug: bool = True
    filename: str = "ejs"
    transformer: Optional[Transformer] = None
    strict_mode: bool = True
    vars: Tuple[str, ...] = field(default_factory=tuple)
    source_map: bool = False

    def __post_init__(self):
        names = (self.vars,) if isinstance(self.vars, str) else self.vars
        object.__setattr__(self, "vars", tuple(names))
        for name in self.vars:
            varName_check(name)

    @classmethod
    def defaults_get(cls) -> Dict[str, Any]:
        """Defaults taken from the application settings"""
        return {
            "compile_debug": appsettings.compile_debug,
            "filename": appsettings.filename,
            "strict_mode": appsettings.strict_mode,
            "source_map": appsettings.source_map,
        }

    @classmethod
    def prepare(
        cls,
        options: Union["Options", Mapping[str, Any], None] = None,
        **overrides: Any,
    ) -> "Options":
        """
        Build an Options from an instance, a mapping, or nothing.

        Args:
            options: Existing Options (returned as is unless overridden),
                     a mapping of field values, or None for the defaults
            **overrides: Field values taking precedence over ``options``

        Returns:
            A ready-to-use Options instance

        Raises:
            TypeError: On unknown option names
            ValueError: On invalid ``vars`` entries

        Example:
            >>> Options.prepare(compile_debug=False).compile_debug
            False
            >>> Options.prepare({"vars": ["name"]}).vars
            ('name',)
        """
        if isinstance(options, Options):
            return replace(options, **overrides) if overrides else options

        values = cls.defaults_get()
        if options is not None:
            values.update(options)
        values.update(overrides)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise TypeError(f"Unknown option(s): {', '.join(unknown)}")
        return cls(**values)


def varName_check(name: str) -> None:
    """
    Validate a name to be bound from the render context.

    Raises:
        ValueError: If the name is not a plain identifier, is a keyword,
                    starts with a double underscore or clashes with a
                    parameter of the render function
    """
    if not isinstance(name, str) or not name.isidentifier():
        raise ValueError(f"Invalid var name: {name!r}")
    if keyword.iskeyword(name):
        raise ValueError(f"Var name is a Python keyword: {name!r}")
    if name.startswith("__") or name in RESERVED_NAMES:
        raise ValueError(f"Var name is reserved: {name!r}")


def varNames_split(names: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    """
    Split a comma separated list of var names (as given on the command line).

    Example:
        >>> varNames_split("title, closable")
        ('title', 'closable')
    """
    if not names:
        return ()
    if isinstance(names, str):
        names = names.split(",")
    return tuple(name.strip() for name in names if name.strip())
