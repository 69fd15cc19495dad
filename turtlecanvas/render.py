# turtlecanvas/render.py
"""
Headless rendering of turtle scripts to PNG images.

Usage:
    turtlecanvas-render single "(repeat 4 (fd 100) (lt 90))" output/square.png
    turtlecanvas-render --set width=256 --set height=256 csv spirals --col program_string
    turtlecanvas-render --log-level DEBUG --log-file render.log csv spirals
"""
import argparse
import asyncio
import dataclasses
import logging
import os
from typing import Optional

import numpy as np
import pandas as pd
from tqdm import tqdm

from .animation import ImmediateStrategy
from .config import GraphicsConfig, load_config
from .core import OUTPUT_DIR, export_image, parse_program
from .device import DeviceRegistry
from .errors import TurtleGraphicsError
from .languages.turtle_script import TurtleScriptInterpreter
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def render_program(program: str, config: Optional[GraphicsConfig] = None,
                   include_turtle: bool = False) -> np.ndarray:
    """
    Runs a turtle script on a fresh Cairo canvas and returns the drawing.

    Steps are executed back to back (no animation delay), so the result is the
    final state of the drawing.

    Args:
        program: Script text in S-expression form
        config: Settings for the canvas; the surface kind is forced to "cairo"
        include_turtle: Composite the turtle icon layer over the drawing

    Returns:
        numpy array of shape (height, width, 3) with RGB values in [0,1]

    Raises:
        ValueError: If the script does not parse
        TurtleGraphicsError: If a command fails

    Examples:
        >>> image = render_program("(circle 50)")
        >>> image.shape
        (400, 400, 3)
    """
    config = dataclasses.replace(config or GraphicsConfig(), surface="cairo")
    ast = parse_program(program)
    registry = DeviceRegistry(config, strategy=ImmediateStrategy())
    interpreter = TurtleScriptInterpreter(registry)
    asyncio.run(interpreter.evaluate(ast))
    turtle = interpreter.turtle
    if include_turtle and turtle.is_visible():
        turtle.draw_turtle_icon()
    return turtle.device.to_array(include_overlay=include_turtle)


## --- CSV Processing Utility ---
def render_from_csv(name: str, config: Optional[GraphicsConfig] = None,
                    program_col: str = "program_string") -> pd.DataFrame:
    """
    Batch renders the scripts of a CSV file to images.

    Rows whose script fails are reported and get an empty file path; the
    batch carries on with the next row.

    Args:
        name: Base name for the input CSV file and output directory
        config: Canvas settings used for every row
        program_col: Column name containing the scripts

    Input:
        - Reads from: output/{name}.csv

    Output:
        - Images saved to: output/{name}/images/{row_index}.png
        - Updated CSV saved to: output/{name}/rendered.csv

    Returns:
        The input rows with an added ``render_filepath`` column

    Raises:
        FileNotFoundError: If the input CSV file doesn't exist
        KeyError: If the specified program column isn't found in the CSV
    """
    input_csv_path = os.path.join(OUTPUT_DIR, f"{name}.csv")
    if not os.path.exists(input_csv_path):
        raise FileNotFoundError(f"Input CSV not found: {input_csv_path}")

    df = pd.read_csv(input_csv_path)
    if program_col not in df.columns:
        raise KeyError(f"Column '{program_col}' not found in {input_csv_path}")

    image_output_dir = os.path.join(OUTPUT_DIR, name, "images")
    os.makedirs(image_output_dir, exist_ok=True)

    render_filepaths = []
    for i, row in tqdm(df.iterrows(), desc=f"Rendering {name}", unit="script", total=len(df)):
        program_string = str(row[program_col])
        output_path = os.path.join(image_output_dir, f"{i}.png")
        try:
            image_array = render_program(program_string, config)
            export_image(image_array, output_path)
            render_filepaths.append(output_path)
        except (ValueError, TurtleGraphicsError) as e:
            tqdm.write(f"❌ Error processing row {i} ('{program_string[:50]}...'): {e}")
            logger.debug("Row %s failed", i, exc_info=True)
            render_filepaths.append("")

    df["render_filepath"] = render_filepaths
    rendered_csv_path = os.path.join(OUTPUT_DIR, name, "rendered.csv")
    df.to_csv(rendered_csv_path, index=False)
    print(f"\n✅ Wrote updated CSV with filepaths to: {rendered_csv_path}")
    return df


def main(argv=None):
    """Main execution function with command-line parsing."""
    parser = argparse.ArgumentParser(
        description="Render turtle scripts to PNG images.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument("--config", type=str, default=None, help="YAML file with canvas settings.")
    parser.add_argument("--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
                        help="Override a setting, e.g. --set width=256 (repeatable).")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default from config).")
    parser.add_argument("--log-file", type=str, default=None, help="Also write the log to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    # --- Parser for rendering a single program ---
    parser_single = subparsers.add_parser("single", help="Render a single script.")
    parser_single.add_argument("program", type=str, help="The script to render (in S-expression format).")
    parser_single.add_argument("output", type=str, help="The path to save the output PNG image.")
    parser_single.add_argument("--show-turtle", action="store_true", help="Draw the turtle icon too.")

    # --- Parser for rendering from a CSV file ---
    parser_csv = subparsers.add_parser("csv", help="Render all scripts from a CSV file.")
    parser_csv.add_argument("name", type=str, help="Base name of the CSV in 'output/' (e.g., 'spirals').")
    parser_csv.add_argument("--col", type=str, default="program_string", help="Column with the scripts.")

    args = parser.parse_args(argv)

    config = load_config(args.config, args.overrides)
    setup_logging(args.log_level or config.log_level, log_file=args.log_file)

    # --- Execute the chosen command ---
    if args.command == "single":
        print("Rendering single turtle script...")
        image_array = render_program(args.program, config, include_turtle=args.show_turtle)
        export_image(image_array, args.output)
        print(f"✅ Saved image to: {args.output}")

    elif args.command == "csv":
        print(f"Rendering CSV '{args.name}.csv'...")
        render_from_csv(args.name, config, program_col=args.col)


if __name__ == "__main__":
    main()
