#!/usr/bin/env python3

import argparse

from dmilayers import config, document, layers, logging_setup

parser = argparse.ArgumentParser()
parser.add_argument("doc_dir", help="Document directory to convert")
parser.add_argument("out_file", nargs="?", help="DMI file to write")
parser.add_argument("--config", help="Settings (TOML)")
parser.add_argument("--debug", action="store_true")
parser.add_argument(
    "--synthesize",
    action="store_true",
    help="Ignore the original DMI, one single-frame state per layer",
)
args = parser.parse_args()
if args.debug:
    logging_setup.enable_debug()

settings = config.load_config(args.config)

print(f"Reading: {args.doc_dir}")
doc = document.read_document(args.doc_dir)
data = layers.save_document(doc, config=settings, synthesize=args.synthesize)

doc_base = args.doc_dir.rstrip("/").replace(".layers", "")
out_file = args.out_file or doc_base + ".dmi"
print(f"Writing: {out_file} ({len(data)}b)")
with open(out_file, "wb") as file:
    file.write(data)
