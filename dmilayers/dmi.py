# BYOND DMI sprite sheets: PNG images with a "# BEGIN DMI" description block

import io
import logging
import re
from typing import List, Tuple

import attr
import PIL.Image  # type: ignore
import PIL.PngImagePlugin  # type: ignore

from dmilayers import tiling

logger = logging.getLogger(__name__)

DESCRIPTION_KEY = "Description"
DEFAULT_VERSION = "4.0"
DIRECTION_DEPTHS = (1, 4, 8)
DIRECTION_NAMES = ("S", "N", "E", "W", "SE", "SW", "NE", "NW")


class DmiError(Exception):
    pass


class DecodeError(DmiError):
    pass


class TilingError(DmiError):
    def __init__(self, frame_number: int, frame_width: int, frame_height: int):
        super().__init__(
            f"Frame #{frame_number} ({frame_width}x{frame_height}px)"
            " falls outside the image"
        )
        self.frame_number = frame_number
        self.frame_width = frame_width
        self.frame_height = frame_height


Hotspot = Tuple[int, int, int]  # x, y, 1-based frame index


@attr.define
class DmiState:
    name: str
    dirs: int = 1
    frames: int = 1
    width: int = 32
    height: int = 32
    delays: List[float] = attr.Factory(list)
    loop: int = 0
    rewind: bool = False
    movement: bool = False
    hotspots: List[Hotspot] = attr.Factory(list)

    _images: List[List[PIL.Image.Image]] = attr.ib(
        init=False, repr=False, eq=False
    )

    def __attrs_post_init__(self):
        if self.dirs not in DIRECTION_DEPTHS:
            raise ValueError(f'State "{self.name}" has {self.dirs} dirs')
        if self.frames < 1:
            raise ValueError(f'State "{self.name}" has {self.frames} frames')
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Bad frame size {self.width}x{self.height}")
        size = (self.width, self.height)
        self._images = [
            [PIL.Image.new("RGBA", size) for f in range(self.frames)]
            for d in range(self.dirs)
        ]

    def get_frame(self, direction: int, frame: int) -> PIL.Image.Image:
        return self._images[direction][frame]

    def set_frame(self, image: PIL.Image.Image, direction: int, frame: int):
        if image.size != (self.width, self.height):
            raise ValueError(
                f'Frame size {image.size} != ({self.width}, {self.height})'
                f' in state "{self.name}"'
            )
        if not (0 <= direction < self.dirs and 0 <= frame < self.frames):
            raise IndexError(
                f'No dir={direction} frame={frame} in state "{self.name}"'
                f" ({self.dirs} dirs x {self.frames} frames)"
            )
        self._images[direction][frame] = image.convert("RGBA")


@attr.define
class DmiFile:
    frame_width: int
    frame_height: int
    version: str = DEFAULT_VERSION
    states: List[DmiState] = attr.Factory(list)

    def add_state(self, state: DmiState):
        size = (self.frame_width, self.frame_height)
        if (state.width, state.height) != size:
            raise ValueError(
                f'State "{state.name}" is {state.width}x{state.height},'
                f" file is {self.frame_width}x{self.frame_height}"
            )
        self.states.append(state)

    def find_states(self, name: str) -> List[DmiState]:
        return [state for state in self.states if state.name == name]

    @staticmethod
    def from_bytes(data: bytes) -> "DmiFile":
        try:
            with PIL.Image.open(io.BytesIO(data)) as image:
                if image.format != "PNG":
                    raise DecodeError(f"Not a PNG ({image.format} image)")
                image.load()
                text = image.text.get(DESCRIPTION_KEY)
                sheet = image.convert("RGBA")
        except (PIL.UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise DecodeError(f"Bad image data: {exc}") from exc

        if text is None:
            raise DecodeError(f'No "{DESCRIPTION_KEY}" text in PNG')

        dmi = parse_description(text, default_size=sheet.size)
        dmi._unpack_sheet(sheet)
        return dmi

    def to_bytes(self, *, compress_level: int = 9) -> bytes:
        info = PIL.PngImagePlugin.PngInfo()
        info.add_text(DESCRIPTION_KEY, format_description(self), zip=True)
        with io.BytesIO() as out:
            self.to_sheet().save(
                out, format="PNG", pnginfo=info, compress_level=compress_level
            )
            return out.getvalue()

    def to_sheet(self) -> PIL.Image.Image:
        columns, rows = tiling.sheet_grid(tiling.total_frames(self.states))
        fw, fh = self.frame_width, self.frame_height
        sheet = PIL.Image.new("RGBA", (columns * fw, rows * fh))
        for slot in tiling.iter_frames(self.states):
            offset = tiling.frame_offset(
                slot.frame_number, sheet.width, sheet.height, fw, fh
            )
            frame = slot.state.get_frame(slot.direction, slot.frame)
            sheet.paste(frame, box=offset)
        return sheet

    def _unpack_sheet(self, sheet: PIL.Image.Image):
        fw, fh = self.frame_width, self.frame_height
        if self.states and (sheet.width < fw or sheet.height < fh):
            raise TilingError(0, fw, fh)

        for slot in tiling.iter_frames(self.states):
            offset = tiling.frame_offset(
                slot.frame_number, sheet.width, sheet.height, fw, fh
            )
            box = tiling.frame_box(offset, fw, fh)
            if not tiling.box_inside(box, sheet.size):
                raise TilingError(slot.frame_number, fw, fh)
            slot.state.set_frame(sheet.crop(box), slot.direction, slot.frame)


#
# Description text
#

_line_re = re.compile(r"^\s*(\w+)\s*=\s*(.*?)\s*$")


def parse_description(
    text: str, *, default_size: Tuple[int, int] = (32, 32)
) -> DmiFile:
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines or lines[0].strip() != "# BEGIN DMI":
        raise DecodeError('Description does not start with "# BEGIN DMI"')
    if lines[-1].strip() != "# END DMI":
        raise DecodeError('Description does not end with "# END DMI"')

    header = {"version": DEFAULT_VERSION}
    state_entries: List[List[Tuple[str, str]]] = []
    for line in lines[1:-1]:
        match = _line_re.match(line)
        if not match:
            raise DecodeError(f"Bad description line: {line!r}")
        key, value = match.groups()
        if key == "state":
            state_entries.append([(key, value)])
        elif state_entries:
            state_entries[-1].append((key, value))
        else:
            header[key] = value

    try:
        width = int(header.get("width", default_size[0]))
        height = int(header.get("height", default_size[1]))
        dmi = DmiFile(
            frame_width=width, frame_height=height, version=header["version"]
        )
        for entries in state_entries:
            dmi.add_state(_parse_state(entries, width=width, height=height))
    except ValueError as exc:
        raise DecodeError(f"Bad DMI description: {exc}") from exc

    return dmi


def _parse_state(
    entries: List[Tuple[str, str]], *, width: int, height: int
) -> DmiState:
    name = _unquote(entries[0][1])
    values = {"dirs": "1", "frames": "1"}
    hotspots: List[Hotspot] = []
    for key, value in entries[1:]:
        if key == "hotspot":
            x, y, index = (int(v) for v in value.split(","))
            hotspots.append((x, y, index))
        elif key in ("dirs", "frames", "delay", "loop", "rewind", "movement"):
            values[key] = value
        else:
            logger.debug(f'Ignoring "{key}" in state "{name}"')

    state = DmiState(
        name=name,
        dirs=int(values["dirs"]),
        frames=int(values["frames"]),
        width=width,
        height=height,
        loop=int(values.get("loop", 0)),
        rewind=bool(int(values.get("rewind", 0))),
        movement=bool(int(values.get("movement", 0))),
        hotspots=hotspots,
    )
    if "delay" in values:
        state.delays = [float(d) for d in values["delay"].split(",")]
    return state


def format_description(dmi: DmiFile) -> str:
    lines = [
        "# BEGIN DMI",
        f"version = {dmi.version}",
        f"\twidth = {dmi.frame_width}",
        f"\theight = {dmi.frame_height}",
    ]
    for state in dmi.states:
        lines.append(f"state = {_quote(state.name)}")
        lines.append(f"\tdirs = {state.dirs}")
        lines.append(f"\tframes = {state.frames}")
        if state.delays:
            delays = ",".join(f"{d:g}" for d in state.delays)
            lines.append(f"\tdelay = {delays}")
        if state.loop:
            lines.append(f"\tloop = {state.loop}")
        if state.rewind:
            lines.append("\trewind = 1")
        if state.movement:
            lines.append("\tmovement = 1")
        for x, y, index in state.hotspots:
            lines.append(f"\thotspot = {x},{y},{index}")
    lines.append("# END DMI")
    return "\n".join(lines) + "\n"


def _quote(name: str) -> str:
    # one state per line; a line break would end the quoted name early
    if "".join(name.splitlines()) != name:
        raise DmiError(f"State name {name!r} contains a line break")
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _unquote(value: str) -> str:
    if len(value) < 2 or value[0] != '"' or value[-1] != '"':
        raise ValueError(f"Unquoted state name {value}")
    return re.sub(r"\\(.)", r"\1", value[1:-1])
