#!/usr/bin/env python3

import argparse

from dmilayers import dmi, logging_setup, tiling

parser = argparse.ArgumentParser()
parser.add_argument("dmi_file", help="File to describe")
parser.add_argument("--text", action="store_true", help="Dump raw DMI text")
parser.add_argument("--debug", action="store_true")
args = parser.parse_args()
if args.debug:
    logging_setup.enable_debug()

print(f"=== Loading: {args.dmi_file}")
with open(args.dmi_file, "rb") as dmi_file:
    icon = dmi.DmiFile.from_bytes(dmi_file.read())
print()

frame_count = tiling.total_frames(icon.states)
columns, rows = tiling.sheet_grid(frame_count)
print(
    f"=== File: v{icon.version}"
    f" {icon.frame_width}x{icon.frame_height}px frames"
    f" {len(icon.states)}st {frame_count}fr"
    f" (saves as {columns}x{rows} grid)"
)

frame_number = 0
for si, state in enumerate(icon.states):
    flags = [
        name
        for name, value in (
            ("rewind", state.rewind),
            ("movement", state.movement),
        )
        if value
    ]
    dir_names = ",".join(dmi.DIRECTION_NAMES[: state.dirs])
    print(
        f"--- State S{si}: \"{state.name}\""
        f" dirs={state.dirs} ({dir_names})"
        f" frames={state.frames}"
        f" loop={state.loop or 'inf'}"
        f"{' [' + ','.join(flags) + ']' if flags else ''}"
    )
    last = frame_number + state.frames * state.dirs - 1
    print(f"    Frames: #{frame_number}-#{last}")
    if state.delays:
        print(f"    Delay: {', '.join(f'{d:g}' for d in state.delays)} ticks")
    for x, y, index in state.hotspots:
        print(f"    Hotspot: ({x},{y}) frame={index}")
    frame_number += state.frames * state.dirs

if args.text:
    print()
    print(dmi.format_description(icon), end="")
