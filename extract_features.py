#!/usr/bin/env python3
"""
extract_features.py – Dense SIFT feature extraction

Samples a fixed number of SIFT keypoints on a regular grid over an image,
writes the keypoints and descriptors to a text feature file, and saves an
overlay image ``<prefix>_sift.png`` showing where the samples were taken.

Usage
-----
    python extract_features.py image.png features.txt
    python extract_features.py image.png features.txt 200
    python extract_features.py image.png features.txt 200 1 1
    python extract_features.py image.png features.txt --config configs/default.yaml

Positional flags: SAMPLING 0 = DoG (not implemented), 1 = dense;
SCALING 0 = keep aspect, 1 = stretch to a square first.
"""

import argparse
import logging
import os
import sys
import time

# Ensure the project root is on the Python path when invoked directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.descriptors.sift import EngineConfig, SiftDescriptorEngine
from src.extraction.extractor import SamplingMode, SiftExtractor
from src.utils.config import load_config
from src.utils.errors import DenseSiftError

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                                   "configs", "default.yaml")


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def banner(text: str) -> None:
    width = 60
    print("\n" + "─" * width)
    print(f"  {text}")
    print("─" * width)


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return n


def flag(value: str) -> int:
    if value not in ("0", "1"):
        raise argparse.ArgumentTypeError(f"expected 0 or 1, got {value!r}")
    return int(value)


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Extract a fixed number of dense SIFT features from an image"
    )
    p.add_argument("image", help="Input image file")
    p.add_argument("feature_file", help="Output feature file")
    p.add_argument("feature_num", nargs="?", type=positive_int, default=None,
                   help="Number of features (default: from config)")
    p.add_argument("sampling", nargs="?", type=flag, default=None,
                   help="Sampling: 0 = DoG, 1 = dense (default: from config)")
    p.add_argument("scaling", nargs="?", type=flag, default=None,
                   help="Square resize: 0 = off, 1 = on (default: from config)")
    p.add_argument(
        "--config", default=None,
        help="Path to YAML configuration file (default: configs/default.yaml)",
    )
    p.add_argument(
        "--prefix", default=None,
        help="Overlay image prefix; writes <prefix>_sift.png (default: from config)",
    )
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config_path = args.config
    if config_path is None and os.path.exists(DEFAULT_CONFIG_PATH):
        config_path = DEFAULT_CONFIG_PATH

    try:
        cfg = load_config(config_path)
    except DenseSiftError as exc:
        print(f"[ERROR] {exc}")
        return 1

    logging.basicConfig(
        level=str(cfg["logging"]["level"]).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    s_cfg = cfg["sampling"]
    feature_num = args.feature_num or s_cfg["feature_num"]
    if args.sampling is not None:
        mode = SamplingMode(args.sampling)
    else:
        mode = SamplingMode[s_cfg["mode"].upper()]
    resize = bool(args.scaling) if args.scaling is not None else bool(s_cfg["resize"])
    prefix = args.prefix or cfg["output"]["image_prefix"]

    banner("Dense SIFT Extraction")
    print(f"  Image   : {args.image}")
    print(f"  Features: {feature_num}")
    print(f"  Sampling: {mode.name.lower()}")
    print(f"  Resize  : {'enabled' if resize else 'disabled'}")
    print(f"  Output  : {args.feature_file}, {prefix}_sift.png")

    t0 = time.time()
    try:
        engine = SiftDescriptorEngine(EngineConfig.from_dict(cfg["engine"]))
        extractor = SiftExtractor(args.image, engine, resize=resize,
                                  max_extra_iterations=s_cfg["max_extra_iterations"])
        result = extractor.extract(mode, feature_num)
        extractor.save_features(args.feature_file)
        overlay = extractor.save_image(prefix)
    except DenseSiftError as exc:
        print(f"[ERROR] {exc}")
        return 1

    banner("Results Summary")
    params = result.params
    print(f"  Keypoints : {len(result.keypoints)}")
    print(f"  Dimension : {engine.descriptor_dimension()}")
    print(f"  Interval  : {params.interval:.3f}")
    print(f"  Scale     : {params.patch_scale:.3f}")
    print(f"  Offset    : {params.offset:.3f}")
    print(f"  Overlay   : {overlay}")
    print(f"\nExtraction complete in {time.time() - t0:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
