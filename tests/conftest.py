"""Shared pytest fixtures for dmilayers tests."""

import PIL.Image
import pytest

from dmilayers import tiling
from dmilayers.dmi import DmiFile, DmiState
from helpers import frame_color, png_bytes, solid


@pytest.fixture
def build_dmi():
    """Factory for containers whose frames are filled with frame_color."""

    def build(states, *, size=(32, 32)) -> DmiFile:
        fw, fh = size
        icon = DmiFile(frame_width=fw, frame_height=fh)
        for name, dirs, frames in states:
            icon.add_state(
                DmiState(
                    name=name, dirs=dirs, frames=frames, width=fw, height=fh
                )
            )
        for slot in tiling.iter_frames(icon.states):
            slot.state.set_frame(
                solid(size, frame_color(slot.frame_number)),
                slot.direction,
                slot.frame,
            )
        return icon

    return build


@pytest.fixture
def walk_idle(build_dmi) -> DmiFile:
    """Two states: walk (2 frames) and idle (1 frame), 32x32 frames."""
    icon = build_dmi([("walk", 1, 2), ("idle", 1, 1)])
    icon.states[0].delays = [1.0, 2.0]
    return icon


@pytest.fixture
def strip_sheet_bytes() -> bytes:
    """A hand-made 96x32 DMI holding 3 frames in a single row."""
    sheet = PIL.Image.new("RGBA", (96, 32))
    for n in range(3):
        sheet.paste(solid((32, 32), frame_color(n)), box=(32 * n, 0))
    description = (
        "# BEGIN DMI\n"
        "version = 4.0\n"
        "\twidth = 32\n"
        "\theight = 32\n"
        'state = "A"\n'
        "\tdirs = 1\n"
        "\tframes = 2\n"
        "\tdelay = 1,1\n"
        'state = "B"\n'
        "\tdirs = 1\n"
        "\tframes = 1\n"
        "# END DMI\n"
    )
    return png_bytes(sheet, description)
