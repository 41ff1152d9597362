#!/usr/bin/env python3

import argparse
from pathlib import Path

from dmilayers import config, document, layers, logging_setup

parser = argparse.ArgumentParser()
parser.add_argument("dmi_file", help="DMI file to split into layers")
parser.add_argument("out_dir", nargs="?", help="Document directory to write")
parser.add_argument("--config", help="Settings (TOML)")
parser.add_argument("--debug", action="store_true")
args = parser.parse_args()
if args.debug:
    logging_setup.enable_debug()

settings = config.load_config(args.config)

print(f"Reading: {args.dmi_file}")
with open(args.dmi_file, "rb") as dmi_file:
    doc = layers.load_document(dmi_file.read(), config=settings)

out_dir = Path(args.out_dir or args.dmi_file.replace(".dmi", "") + ".layers")
print(f"Writing: {out_dir} ({len(doc.layers)} layers)")
document.write_document(doc, out_dir)
