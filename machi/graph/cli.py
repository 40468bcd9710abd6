#!/usr/bin/env python3
"""
Chart generator for machi flows.

Usage:
    machi-chart --states myapp.flow:states -o chart.png
    machi-chart --states myapp.flow -o chart.mmd --direction horizontal
    machi-chart --states myapp.flow -o paths.svg --paths "What's your name?"

``--states`` is an import path. ``module:attr`` points at the states list
directly; a bare module must export it as ``states`` or ``STATES``.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from ..config import get_machi_config
from ..errors import MachiError
from ..types import Node
from .chart import SUPPORTED_EXTENSIONS, ChartOptions, generate_chart, generate_chart_from_pathways
from .pathways import get_pathways_to_state

logger = logging.getLogger(__name__)


def load_states(spec: str) -> list[Node]:
    """Import the states list named by ``module[:attr]``."""
    module_name, _, attr = spec.partition(":")
    base_message = f"Could not import states from {spec}"
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise MachiError(f"{base_message} - {e}") from e

    names = [attr] if attr else ["states", "STATES"]
    for name in names:
        states = getattr(module, name, None)
        if states is not None:
            break
    else:
        raise MachiError(f'{base_message} - no {" or ".join(repr(n) for n in names)} export found')

    if not isinstance(states, (list, tuple)):
        raise MachiError(f"{base_message} - imported states must be a list")
    return list(states)


def build_parser() -> argparse.ArgumentParser:
    cfg = get_machi_config()
    parser = argparse.ArgumentParser(prog="machi-chart", description="Generate a chart of a machi flow")
    parser.add_argument("-s", "--states", required=True, help="Import path of the states list (module or module:attr)")
    parser.add_argument("-o", "--output", required=True, help="Path of the chart file to write")
    parser.add_argument("--extension", choices=SUPPORTED_EXTENSIONS, help="Output format (inferred from --output when omitted)")
    parser.add_argument("-d", "--direction", choices=["vertical", "horizontal"], default=cfg.chart_direction)
    parser.add_argument("-t", "--theme", choices=["dark", "light"], default=cfg.chart_theme)
    parser.add_argument("-p", "--paths", help="Chart every pathway to this entry id or fork name instead of the whole flow")
    parser.add_argument("-w", "--width", type=int, default=cfg.chart_width, help="Chart width (png and pdf only)")
    parser.add_argument("-H", "--height", type=int, default=cfg.chart_height, help="Chart height (png and pdf only)")
    parser.add_argument("--mmdc", default=cfg.mmdc_path, help="Path to the mermaid CLI executable")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = "DEBUG" if args.verbose else get_machi_config().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    # states modules are usually found relative to where the command is run
    if str(Path.cwd()) not in sys.path:
        sys.path.insert(0, str(Path.cwd()))

    try:
        options = ChartOptions(
            output=Path(args.output),
            extension=args.extension,
            direction=args.direction,
            theme=args.theme,
            width=args.width,
            height=args.height,
            mmdc_path=args.mmdc,
        )
        states = load_states(args.states)
        if args.paths:
            pathways = get_pathways_to_state(args.paths, states)
            if not pathways:
                logger.warning("No pathways found to %r", args.paths)
            output = generate_chart_from_pathways(pathways, options)
        else:
            output = generate_chart(states, options)
    except (MachiError, ValidationError) as e:
        logger.error("%s", e)
        return 1

    print(f"Chart generated to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
