"""Text scene-file loader.

Each non-blank line holds one directive followed by whitespace-separated
arguments:

    NEAR <n>
    LEFT <l>
    RIGHT <r>
    BOTTOM <b>
    TOP <t>
    RES <x> <y>
    SPHERE <name> <pos x> <pos y> <pos z> <scl x> <scl y> <scl z> <r> <g> <b> <Ka> <Kd> <Ks> <Kr> <n>
    LIGHT <name> <pos x> <pos y> <pos z> <r> <g> <b>
    BACK <r> <g> <b>
    AMBIENT <r> <g> <b>
    OUTPUT <name>

Spheres and lights beyond MAX_SPHERES / MAX_LIGHTS are dropped without
error. Trailing extra tokens on a line are ignored.

Example:
    >>> from whitted.scene.loader import load_scene
    >>> scene = load_scene("examples/scenes/three_spheres.txt")
    >>> scene.width, scene.height
    (600, 600)
"""

import logging
from pathlib import Path

from whitted.scene.model import (
    MAX_LIGHTS,
    MAX_SPHERES,
    LightInfo,
    Scene,
    SphereInfo,
    ViewPlane,
)

logger = logging.getLogger(__name__)

# Minimum token count per directive, keyword included
_DIRECTIVE_ARITY = {
    "NEAR": 2,
    "LEFT": 2,
    "RIGHT": 2,
    "TOP": 2,
    "BOTTOM": 2,
    "RES": 3,
    "SPHERE": 16,
    "LIGHT": 8,
    "BACK": 4,
    "AMBIENT": 4,
    "OUTPUT": 2,
}

_PLANE_DIRECTIVES = ("NEAR", "LEFT", "RIGHT", "TOP", "BOTTOM")


class SceneFormatError(ValueError):
    """Raised when a scene file line cannot be parsed.

    Attributes:
        source: Name of the file (or "<string>") being parsed.
        line_number: 1-based line number of the offending line.
    """

    def __init__(self, message: str, source: str, line_number: int) -> None:
        super().__init__(f"{source}:{line_number}: {message}")
        self.source = source
        self.line_number = line_number


def _triple(tokens: list[str]) -> tuple[float, float, float]:
    return (float(tokens[0]), float(tokens[1]), float(tokens[2]))


def _parse_sphere(args: list[str]) -> SphereInfo:
    return SphereInfo(
        name=args[0],
        position=_triple(args[1:4]),
        scale=_triple(args[4:7]),
        color=_triple(args[7:10]),
        ka=float(args[10]),
        kd=float(args[11]),
        ks=float(args[12]),
        kr=float(args[13]),
        specular_exponent=float(args[14]),
    )


def _parse_light(args: list[str]) -> LightInfo:
    return LightInfo(name=args[0], position=_triple(args[1:4]), color=_triple(args[4:7]))


def parse_scene(text: str, source: str = "<string>") -> Scene:
    """Parse scene-file text into a Scene.

    Directives that never appear keep their defaults: zero planes, a 0x0
    resolution, black background and ambient, and "output.ppm".

    Args:
        text: The scene description.
        source: Name used in error messages.

    Returns:
        The parsed, immutable Scene.

    Raises:
        SceneFormatError: On an unknown directive, a missing argument, an
            unparseable number, or a sphere with a zero scale component.
    """
    planes = dict.fromkeys(_PLANE_DIRECTIVES, 0.0)
    width = 0
    height = 0
    spheres: list[SphereInfo] = []
    lights: list[LightInfo] = []
    background = (0.0, 0.0, 0.0)
    ambient = (0.0, 0.0, 0.0)
    output = "output.ppm"

    for line_number, line in enumerate(text.splitlines(), start=1):
        tokens = line.split()
        if not tokens:
            continue

        keyword = tokens[0]
        arity = _DIRECTIVE_ARITY.get(keyword)
        if arity is None:
            raise SceneFormatError(f"unknown directive {keyword!r}", source, line_number)
        if len(tokens) < arity:
            raise SceneFormatError(
                f"{keyword} expects {arity - 1} arguments, got {len(tokens) - 1}",
                source,
                line_number,
            )
        args = tokens[1:]

        try:
            if keyword in planes:
                planes[keyword] = float(args[0])
            elif keyword == "RES":
                width = int(float(args[0]))
                height = int(float(args[1]))
            elif keyword == "SPHERE":
                if len(spheres) < MAX_SPHERES:
                    spheres.append(_parse_sphere(args))
                else:
                    logger.debug("Dropping sphere %s: limit of %d reached", args[0], MAX_SPHERES)
            elif keyword == "LIGHT":
                if len(lights) < MAX_LIGHTS:
                    lights.append(_parse_light(args))
                else:
                    logger.debug("Dropping light %s: limit of %d reached", args[0], MAX_LIGHTS)
            elif keyword == "BACK":
                background = _triple(args)
            elif keyword == "AMBIENT":
                ambient = _triple(args)
            elif keyword == "OUTPUT":
                output = args[0]
        except ValueError as e:
            raise SceneFormatError(f"invalid {keyword} line: {e}", source, line_number) from e

    scene = Scene(
        view=ViewPlane(
            near=planes["NEAR"],
            left=planes["LEFT"],
            right=planes["RIGHT"],
            top=planes["TOP"],
            bottom=planes["BOTTOM"],
        ),
        width=width,
        height=height,
        spheres=tuple(spheres),
        lights=tuple(lights),
        background=background,
        ambient=ambient,
        output=output,
    )
    logger.debug(
        "Parsed %s: %dx%d, %d spheres, %d lights",
        source,
        width,
        height,
        len(scene.spheres),
        len(scene.lights),
    )
    return scene


def load_scene(path: str | Path) -> Scene:
    """Read and parse a scene file.

    Args:
        path: Path to the scene file.

    Returns:
        The parsed Scene.

    Raises:
        FileNotFoundError: If the file does not exist.
        SceneFormatError: If the contents are malformed.
    """
    path = Path(path)
    return parse_scene(path.read_text(), source=str(path))
