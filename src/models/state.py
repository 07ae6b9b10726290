"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing the CLI stages.
"""

import dataclasses
from pathlib import Path
from argparse import Namespace
from functools import reduce
from typing import Any, Callable, Dict, Optional, Type, TypeVar
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the CLI pipeline (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, context,
          outputFile, vars, standalone, sourceMap, noDebug, loose
        - env_check: inputSourceFile, contextFile, outputTarget, envOK
        - context_load: templateContext
        - template_compile: templateSource, compileResult
        - output_write: writtenFiles
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the template (and custom elements)
        outputdir: Directory receiving the rendered output
        verbosity: Logging verbosity level (1-3)
        inputFile: Template filename (relative to inputdir)
        context: Optional YAML/JSON context filename (relative to inputdir)
        outputFile: Output filename; derived from inputFile when empty
        vars: Comma separated names bound from the context
        standalone: Write a Python module instead of rendered HTML
        sourceMap: With standalone, also write the source map
        noDebug: Compile without line markers
        loose: Bind vars with locals.get() instead of locals[]
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the template
        contextFile: Resolved path to the context file, if any
        outputTarget: Resolved output path
        templateContext: Render context loaded from contextFile
        templateSource: Template text
        compileResult: Output text and optional source map
        writtenFiles: Files written by output_write
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    context: Optional[str] = field(default=None)
    outputFile: str = field(default="")
    vars: str = field(default="")
    standalone: bool = field(default=False)
    sourceMap: bool = field(default=False)
    noDebug: bool = field(default=False)
    loose: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    contextFile: Optional[Path] = field(default=None)
    outputTarget: Path = field(default=Path("/"))
    templateContext: Dict[str, Any] = field(default_factory=dict)
    templateSource: str = field(default="")
    compileResult: Optional[Dict[str, Any]] = field(default=None)
    writtenFiles: list = field(default_factory=list)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (inputFile, context, etc.)
            inputdir: Directory containing template files
            outputdir: Directory for rendered output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}

        # Explicit directories override anything from the namespace
        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            context_load,
            template_compile,
            output_write,
            results_report
        )
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
