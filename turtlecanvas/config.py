# turtlecanvas/config.py
"""
Configuration for the turtle graphics engine.

Settings are declared once as a structured dataclass and resolved with
OmegaConf, so a YAML file and ``key=value`` overrides (as given on the command
line) are validated against the same schema.

Exports:
    GraphicsConfig: The settings recognised at initialization.
    load_config: Merge defaults, an optional YAML file and dotlist overrides.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from .errors import InvalidArgumentError


@dataclass
class GraphicsConfig:
    """
    Settings recognised when a device registry is created.

    Attributes:
        canvas_id: Surface id used by turtles that do not name one
        width: Pixel width of newly created surfaces
        height: Pixel height of newly created surfaces
        surface: Kind of surface to create ("cairo" or "recording")
        animate: Whether motions are animated by default
        degrees: Whether heading()/towards() report degrees (else radians)
        time_factor: Milliseconds per speed unit in the speed-to-delay formula
        segment_length: World units per animation step
        pen_width: Default pen width of new turtles
        background: Default background color of new surfaces
        log_level: Level passed to setup_logging by the command line tool
    """
    canvas_id: str = "mycanvas"
    width: int = 400
    height: int = 400
    surface: str = "cairo"
    animate: bool = True
    degrees: bool = True
    time_factor: float = 5.0
    segment_length: float = 10.0
    pen_width: float = 2.0
    background: str = "white"
    log_level: str = "INFO"


def load_config(path: Optional[Union[str, Path]] = None,
                overrides: Sequence[str] = ()) -> GraphicsConfig:
    """
    Builds a GraphicsConfig from defaults, an optional YAML file and overrides.

    Args:
        path: YAML file whose keys override the defaults
        overrides: ``key=value`` strings applied last (e.g. ``["animate=false"]``)

    Returns:
        A validated GraphicsConfig instance

    Raises:
        InvalidArgumentError: If a key is unknown or a value has the wrong type

    Examples:
        >>> load_config(overrides=["width=640", "animate=false"]).width
        640
    """
    layers = [OmegaConf.structured(GraphicsConfig)]
    try:
        if path is not None:
            layers.append(OmegaConf.load(str(path)))
        if overrides:
            layers.append(OmegaConf.from_dotlist(list(overrides)))
        merged = OmegaConf.merge(*layers)
    except OmegaConfBaseException as e:
        raise InvalidArgumentError(f"Invalid configuration: {e}") from e
    return OmegaConf.to_object(merged)
