#!/usr/bin/env python3
"""
ejshtml - EJS-flavoured HTML template compiler

Compiles HTML templates with embedded Python directives into render
functions, and renders them against a YAML/JSON context.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Template syntax:
    <% statement %>     Python statement; a trailing ':' opens a block,
                        <% end %> closes it
    <%= expression %>   Output, HTML-escaped
    <%- expression %>   Output, unescaped
    <my-tag ...>        Custom element, rendered from my-tag.ejs

Usage:
    ejshtml inputdir/ outputdir/ --inputFile page.ejs [--context data.yaml]

    The rendered page is written to outputdir/. With --standalone, a Python
    module defining render(locals, render_custom) is written instead.

Examples:
    # Render a page
    ejshtml views/ out/ --inputFile index.ejs --context site.yaml --vars title,items

    # Emit a standalone module with its source map
    ejshtml views/ out/ --inputFile index.ejs --standalone --sourceMap

    # Verbose output, including generated code
    ejshtml views/ out/ --inputFile index.ejs -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

import yaml
from chris_plugin import chris_plugin
from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers.python import PythonLexer

from .lib import (
    __version__,
    LOG,
    state_connectToLogger,
    CompileError,
    Engine,
    EngineError,
    RenderError,
    TemplateSyntaxError,
    compile_standalone,
)
from .lib.lexer import EjsHtmlLexer
from .models import Options, ProgramState, pipeline, varNames_split


DISPLAY_TITLE = r"""
        _     _     _             _
   ___ (_)___| |__ | |_ _ __ ___ | |
  / _ \| / __| '_ \| __| '_ ` _ \| |
 |  __/| \__ \ | | | |_| | | | | | |
  \___|/ |___/_| |_|\__|_| |_| |_|_|
     |__/
  EJS-flavoured HTML template compiler
"""

# Define CLI arguments
parser = ArgumentParser(
    description="ejshtml - compile and render HTML templates with embedded Python",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Template file (relative to inputdir)"
)

parser.add_argument(
    "--context",
    default=None,
    type=str,
    help="YAML or JSON file with the render context (relative to inputdir)",
)

parser.add_argument(
    "--outputFile",
    default="",
    type=str,
    help="Output filename. Defaults to the template name with .html (or .py with --standalone)",
)

parser.add_argument(
    "--vars",
    default="",
    type=str,
    help="Comma separated context keys bound as plain names in directives",
)

parser.add_argument(
    "--standalone",
    action="store_true",
    help="Write a self-contained Python render module instead of rendering",
)

parser.add_argument(
    "--sourceMap",
    action="store_true",
    help="With --standalone, also write a source map next to the module",
)

parser.add_argument(
    "--noDebug",
    action="store_true",
    help="Compile without line markers (render errors are not annotated)",
)

parser.add_argument(
    "--loose",
    action="store_true",
    help="Bind --vars with locals.get() so missing keys become None",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def options_build(state: ProgramState) -> Options:
    """Compile options from the CLI flags"""
    return Options.prepare(
        compile_debug=not state.noDebug,
        filename=state.inputFile,
        strict_mode=not state.loose,
        vars=varNames_split(state.vars),
        source_map=state.sourceMap,
    )


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the template
            - contextFile: Resolved path to the context file (or None)
            - outputTarget: Path of the file to write
            - envOK: True if environment is valid

    Exits:
        1 if the template or the context file is not found
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.is_file():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)
    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    if state.context:
        context_file = state.inputdir / state.context
        if not context_file.is_file():
            print(f"Error: Context file not found: {context_file}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        state.contextFile = context_file
        LOG(f"Context file: {context_file}", level=2)

    if state.sourceMap and not state.standalone:
        print("Error: --sourceMap requires --standalone", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    output_name = state.outputFile or input_file.with_suffix(".py" if state.standalone else ".html").name
    state.outputdir.mkdir(parents=True, exist_ok=True)
    state.outputTarget = state.outputdir / output_name
    LOG(f"Output file: {state.outputTarget}", level=2)

    state.envOK = True
    return state


def context_load(inputstate: ProgramState) -> ProgramState:
    """
    Load the render context.

    JSON is a subset of YAML, so both go through yaml.safe_load.

    Returns:
        ProgramState with added field:
            - templateContext: Dict of context values ({} without --context)

    Exits:
        1 if the file cannot be parsed or does not hold a mapping
    """

    state = inputstate.copy()
    if not state.contextFile:
        state.templateContext = {}
        return state

    LOG("Loading render context...", level=1)
    try:
        with open(state.contextFile, "r", encoding="utf-8") as f:
            context = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print(f"Error parsing context file: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error reading context file: {e}", file=sys.stderr)
        sys.exit(1)

    if context is None:
        context = {}
    if not isinstance(context, dict):
        print(f"Error: Context file must hold a mapping, got {type(context).__name__}", file=sys.stderr)
        sys.exit(1)

    state.templateContext = context
    LOG(f"Loaded {len(context)} context keys", level=2)
    return state


def template_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile the template, and render it unless --standalone is given.

    Returns:
        ProgramState with added fields:
            - templateSource: Template text
            - compileResult: Dict containing:
                - output: str (rendered HTML or module source)
                - map: Optional[str] (source map JSON)
                - kind: "html" or "module"

    Exits:
        1 on syntax, compile or render errors
    """

    state = inputstate.copy()

    LOG("Compiling template...", level=1)
    try:
        options = options_build(state)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        state.templateSource = state.inputSourceFile.read_text(encoding="utf-8")
        if state.verbosity >= 3:
            LOG("Template source:\n" + highlight(state.templateSource, EjsHtmlLexer(), TerminalFormatter()), level=3)

        if state.standalone:
            result = compile_standalone(state.templateSource, options)
            state.compileResult = {"output": result.code, "map": result.map_with_source, "kind": "module"}
        else:
            engine = Engine(state.inputdir, options)
            procedure = engine.procedure_get(state.inputFile)
            if state.verbosity >= 3:
                LOG("Generated code:\n" + highlight(procedure.code, PythonLexer(), TerminalFormatter()), level=3)
            output = engine.render(state.inputFile, state.templateContext)
            state.compileResult = {"output": output, "map": None, "kind": "html"}
    except TemplateSyntaxError as e:
        print(f"Syntax error in {state.inputFile}:{e.position.line}: {e}", file=sys.stderr)
        sys.exit(1)
    except CompileError as e:
        print(f"Compile error: {e}", file=sys.stderr)
        sys.exit(1)
    except RenderError as e:
        print(f"Render error: {e}", file=sys.stderr)
        sys.exit(1)
    except (EngineError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Produced {len(state.compileResult['output'])} characters", level=2)
    return state


def output_write(inputstate: ProgramState) -> ProgramState:
    """
    Write the compile result (and source map) to the output directory.

    Returns:
        ProgramState with added field:
            - writtenFiles: Paths written

    Exits:
        1 if compileResult is None or writing fails
    """

    state = inputstate.copy()
    if not state.compileResult:
        print("Error: Nothing to write", file=sys.stderr)
        sys.exit(1)

    written = []
    try:
        state.outputTarget.write_text(state.compileResult["output"], encoding="utf-8")
        written.append(state.outputTarget)
        if state.compileResult["map"]:
            map_file = state.outputTarget.with_name(state.outputTarget.name + ".map")
            map_file.write_text(state.compileResult["map"], encoding="utf-8")
            written.append(map_file)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        sys.exit(1)

    state.writtenFiles = written
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display the written files to the user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)
    """
    state: ProgramState = inputstate.copy()
    LOG("✓ Template compiled successfully!", level=1)
    for path in state.writtenFiles:
        LOG(f"  Output: {path}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="ejshtml - EJS-flavoured HTML template compiler",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - compile and render a template.

    Orchestrates the pipeline:
        1. env_check: Validate paths and environment
        2. context_load: Read the YAML/JSON render context
        3. template_compile: Compile (and render) the template
        4. output_write: Write the output file(s)
        5. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the templates
        outputdir: Directory where output will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, context_load, template_compile, output_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
