"""
Models package for ejshtml

Contains data structures and type definitions for the compilation pipeline.
"""

from .state import ProgramState, pipeline
from .options import Options, varNames_split
from .sourcemap import SourceMap
from .tokens import (
    SourcePoint,
    TokenKind,
    Text,
    Directive,
    EvalDirective,
    EscapedDirective,
    RawDirective,
    Comment,
    Doctype,
    Element,
    SimpleAttribute,
    DynamicAttribute,
    BuilderDirective,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "Options",
    "varNames_split",
    "SourceMap",
    "SourcePoint",
    "TokenKind",
    "Text",
    "Directive",
    "EvalDirective",
    "EscapedDirective",
    "RawDirective",
    "Comment",
    "Doctype",
    "Element",
    "SimpleAttribute",
    "DynamicAttribute",
    "BuilderDirective",
]
