#!/usr/bin/env python3
"""
Command line interface for cave generation.

    reefgen generate --seed 7 --obj cave.obj --png cave.png
    reefgen batch --n 20 --output maps/
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from .config import ConfigurationError, load_config, STRATEGIES
from .engine import TerrainComposer, HeightmapAnalyzer
from .export import save_grid_npz, save_obj, save_preview_png

log = logging.getLogger(__name__)


def _add_config_args(parser: argparse.ArgumentParser):
    parser.add_argument("--config", type=str, default=None, help="JSON file with generation parameters")
    parser.add_argument("--width", type=int, default=None, help="Grid width in cells")
    parser.add_argument("--height", type=int, default=None, help="Grid height in cells")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--strategy", type=str, default=None, choices=STRATEGIES,
                        help="Formation strategy")
    parser.add_argument("--chunk-size", type=int, default=None, help="Cells per chunk side")


def _overrides(args) -> dict:
    values = {
        "width": args.width,
        "height": args.height,
        "seed": args.seed,
        "strategy": args.strategy,
        "chunk_size": args.chunk_size,
    }
    return {key: value for key, value in values.items() if value is not None}


def cmd_generate(args) -> int:
    """Generate one map, print its summary and write the requested exports."""

    config = load_config(args.config, **_overrides(args))
    result = TerrainComposer().generate(config)
    summary = HeightmapAnalyzer().analyze(result)

    if args.npz:
        save_grid_npz(result, args.npz)
        summary["npz"] = args.npz
    if args.obj:
        save_obj(result.meshes, args.obj)
        summary["obj"] = args.obj
    if args.png:
        save_preview_png(result.grid, args.png, scale=args.png_scale)
        summary["png"] = args.png

    print(json.dumps(summary, indent=2))
    return 0


def cmd_batch(args) -> int:
    """Generate maps for consecutive seeds and write a manifest."""

    base = load_config(args.config, **_overrides(args))
    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    composer = TerrainComposer()
    analyzer = HeightmapAnalyzer()
    entries = []

    with tqdm(total=args.n, desc="Generating caves") as pbar:
        for i in range(args.n):
            config = base.replace(seed=base.seed + i)
            result = composer.generate(config)

            stem = f"cave_{config.seed:06d}"
            save_grid_npz(result, output_dir / f"{stem}.npz")
            if args.png:
                save_preview_png(result.grid, output_dir / f"{stem}.png")

            entry = analyzer.analyze(result)
            entry["file"] = f"{stem}.npz"
            entries.append(entry)
            pbar.update(1)

    manifest = {
        "count": len(entries),
        "config": base.to_dict(),
        "maps": entries,
    }
    manifest_path = output_dir / "manifest.json"
    with open(manifest_path, 'w') as f:
        json.dump(manifest, f, indent=2)

    print(f"Generated {len(entries)} maps")
    print(f"Manifest saved to: {manifest_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reefgen", description="Procedural underwater cave generator")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Generate a single map")
    _add_config_args(gen)
    gen.add_argument("--npz", type=str, default=None, help="Write grid arrays to this .npz file")
    gen.add_argument("--obj", type=str, default=None, help="Write chunk meshes to this .obj file")
    gen.add_argument("--png", type=str, default=None, help="Write a top-down preview PNG")
    gen.add_argument("--png-scale", type=int, default=4, help="Pixels per cell in the preview")
    gen.set_defaults(func=cmd_generate)

    batch = subparsers.add_parser("batch", help="Generate maps for a range of seeds")
    _add_config_args(batch)
    batch.add_argument("--n", type=int, default=10, help="Number of maps to generate")
    batch.add_argument("--output", type=str, required=True, help="Output directory")
    batch.add_argument("--png", action="store_true", help="Also write preview PNGs")
    batch.set_defaults(func=cmd_batch)

    return parser


def main(argv=None) -> int:
    """CLI entry point."""

    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        return args.func(args)
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
