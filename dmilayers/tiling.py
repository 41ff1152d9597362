# Row-major frame tiling for packed sprite sheets

import math
from typing import Any, Iterable, Iterator, Sequence, Tuple

import attr


@attr.frozen
class FrameSlot:
    state_index: int
    state: Any = attr.ib(repr=False)
    frame: int
    direction: int
    frame_number: int


def frame_offset(
    frame_number: int,
    total_width: int,
    total_height: int,
    frame_width: int,
    frame_height: int,
) -> Tuple[int, int]:
    """Top-left pixel of frame_number in a sheet of uniform frame cells.

    Cells run left to right, then top to bottom. Remainder pixels at the
    right edge are never addressed. total_height is unused; there is no
    bounds checking, so rows past the bottom are the caller's problem.
    """

    frames_per_row = total_width // frame_width
    row, col = divmod(frame_number, frames_per_row)
    return (col * frame_width, row * frame_height)


def frame_box(
    offset: Tuple[int, int], frame_width: int, frame_height: int
) -> Tuple[int, int, int, int]:
    x, y = offset
    return (x, y, x + frame_width, y + frame_height)


def box_inside(box: Tuple[int, int, int, int], size: Tuple[int, int]):
    left, upper, right, lower = box
    return left >= 0 and upper >= 0 and right <= size[0] and lower <= size[1]


def iter_frames(states: Sequence) -> Iterator[FrameSlot]:
    """Walks states, then frames, then directions; numbers frames from 0.

    Each state needs "frames" and "dirs" attributes.
    """

    frame_number = 0
    for state_index, state in enumerate(states):
        for frame in range(state.frames):
            for direction in range(state.dirs):
                yield FrameSlot(
                    state_index=state_index,
                    state=state,
                    frame=frame,
                    direction=direction,
                    frame_number=frame_number,
                )
                frame_number += 1


def total_frames(states: Iterable) -> int:
    return sum(state.frames * state.dirs for state in states)


def sheet_grid(frame_count: int) -> Tuple[int, int]:
    columns = max(1, math.ceil(math.sqrt(frame_count)))
    rows = max(1, math.ceil(frame_count / columns))
    return (columns, rows)
