"""
Chart files.

Writes mermaid text to disk and, for image formats, renders it with the
mermaid CLI (``mmdc``).
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from ..config import get_machi_config
from ..errors import ChartRenderError
from ..trees.flow_tree import FlowTree
from ..types import Node
from .mermaid import THEMES, generate_mermaid, generate_mermaid_from_links, generate_mermaid_from_pathways
from .state_links import Link, StateLink

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("mmd", "png", "svg", "pdf")

Extension = Literal["mmd", "png", "svg", "pdf"]


def _default(name: str):
    return lambda: getattr(get_machi_config(), name)


class ChartOptions(BaseModel):
    """Options for writing a chart. Unset values come from MachiConfig."""
    output: Path = Path("chart.png")
    extension: Extension | None = None  # inferred from output when omitted
    direction: Literal["vertical", "horizontal"] = Field(default_factory=_default("chart_direction"))
    theme: Literal["dark", "light"] = Field(default_factory=_default("chart_theme"))
    width: int = Field(default_factory=_default("chart_width"), gt=0)
    height: int = Field(default_factory=_default("chart_height"), gt=0)
    mmdc_path: str = Field(default_factory=_default("mmdc_path"))

    @model_validator(mode="after")
    def _check_extension(self) -> "ChartOptions":
        suffix = self.output.suffix.lstrip(".")
        if self.extension is None:
            if suffix not in SUPPORTED_EXTENSIONS:
                raise ValueError(
                    f"{suffix or 'no'} output is not currently supported. "
                    f"Chart generation supports {', '.join(SUPPORTED_EXTENSIONS)} files."
                )
            self.extension = suffix
        elif suffix != self.extension:
            self.output = self.output.with_suffix(f".{self.extension}")
        return self


def _render(options: ChartOptions, source: Path) -> Path:
    background = THEMES[options.theme].background
    cmd = [
        options.mmdc_path,
        "-i", str(source),
        "-o", str(options.output),
        "-w", str(options.width),
        "-H", str(options.height),
        "-b", background,
    ]
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise ChartRenderError(
            f"Mermaid CLI not found at {options.mmdc_path!r}. "
            "Install with: npm install -g @mermaid-js/mermaid-cli"
        ) from e
    except subprocess.CalledProcessError as e:
        raise ChartRenderError(f"Mermaid CLI failed: {e.stderr or e.stdout}") from e
    return options.output


def write_chart(mermaid: str, options: ChartOptions) -> Path:
    """Write mermaid text to ``options.output``, rendering it if needed."""
    if options.extension == "mmd":
        options.output.write_text(mermaid, encoding="utf-8")
        logger.info("Chart written to %s", options.output)
        return options.output

    source = options.output.with_suffix(options.output.suffix + ".mmd")
    source.write_text(mermaid, encoding="utf-8")
    try:
        output = _render(options, source)
    finally:
        source.unlink(missing_ok=True)
    logger.info("Chart written to %s", output)
    return output


def generate_chart(states: list[Node] | FlowTree, options: ChartOptions) -> Path:
    mermaid = generate_mermaid(states, THEMES[options.theme], options.direction)
    return write_chart(mermaid, options)


def generate_chart_from_links(links: list[Link], options: ChartOptions) -> Path:
    mermaid = generate_mermaid_from_links(links, THEMES[options.theme], options.direction)
    return write_chart(mermaid, options)


def generate_chart_from_pathways(pathways: list[list[StateLink]], options: ChartOptions) -> Path:
    mermaid = generate_mermaid_from_pathways(pathways, THEMES[options.theme], options.direction)
    return write_chart(mermaid, options)
