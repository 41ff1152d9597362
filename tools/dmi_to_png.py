#!/usr/bin/env python3

import argparse

import PIL.Image  # type: ignore

from dmilayers import dmi, logging_setup

parser = argparse.ArgumentParser()
parser.add_argument("dmi_file", help="File to convert")
parser.add_argument("out_file", nargs="?", help="PNG file to write")
parser.add_argument("--state", help="Only this state, one frame per column")
args = parser.parse_args()

print(f"Reading: {args.dmi_file}")
with open(args.dmi_file, "rb") as dmi_file:
    icon = dmi.DmiFile.from_bytes(dmi_file.read())

if args.state:
    found = icon.find_states(args.state)
    if not found:
        raise SystemExit(f'No state "{args.state}" in {args.dmi_file}')
    state = found[0]
    fw, fh = icon.frame_width, icon.frame_height
    image = PIL.Image.new("RGBA", (state.frames * fw, state.dirs * fh))
    for direction in range(state.dirs):
        for frame in range(state.frames):
            image.paste(
                state.get_frame(direction, frame),
                box=(frame * fw, direction * fh),
            )
else:
    image = icon.to_sheet()

out_file = args.out_file or args.dmi_file.replace(".dmi", "") + ".png"
print(f"Writing: {out_file}")
image.save(out_file)
