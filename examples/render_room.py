#!/usr/bin/env python3
"""Render the reference room scene.

Builds the sphere room, traces it with the path tracer and saves the result as
an sRGB PNG. Progress is printed after every row batch.

Usage:
    python examples/render_room.py [options]

Options:
    --width WIDTH         Image width in pixels (default: 512)
    --height HEIGHT       Image height in pixels (default: 512)
    --samples SAMPLES     Number of samples per pixel (default: 64)
    --seed SEED           Sampler seed (default: 0)
    --mirror CHANCE       Mirror chance of the cyan sphere (default: 0.0)
    --arch ARCH           Taichi backend: cpu, gpu, cuda, vulkan, metal (default: cpu)
    --output OUTPUT       Output file path (default: room.png)
    --quiet               Suppress progress output

Example:
    python examples/render_room.py --width 256 --height 256 --samples 32
"""

import argparse
import sys
import time
from pathlib import Path


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the reference room scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=512,
        help="Image width in pixels (default: 512)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=512,
        help="Image height in pixels (default: 512)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=64,
        help="Number of samples per pixel (default: 64)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Sampler seed (default: 0)")
    parser.add_argument(
        "--mirror",
        type=float,
        default=0.0,
        help="Mirror chance of the cyan sphere (default: 0.0)",
    )
    parser.add_argument("--arch", type=str, default="cpu", help="Taichi backend (default: cpu)")
    parser.add_argument(
        "--output",
        type=str,
        default="room.png",
        help="Output file path (default: room.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_room(
    width: int = 512,
    height: int = 512,
    samples_per_pixel: int = 64,
    seed: int = 0,
    mirror_chance: float = 0.0,
    output_path: str = "room.png",
    quiet: bool = False,
) -> Path:
    """Render the room scene and save it to a PNG file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of samples per pixel.
        seed: Sampler seed.
        mirror_chance: Probability of a mirror bounce on the cyan sphere.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    from sphere_pathtracer.config import RenderSettings
    from sphere_pathtracer.core.frame import FrameRenderer
    from sphere_pathtracer.preview.export import save_png
    from sphere_pathtracer.scene.room import RoomParams, create_room_scene

    if not quiet:
        print(f"Creating room scene ({width}x{height})...")

    scene, camera = create_room_scene(RoomParams(mirror_chance=mirror_chance))
    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        seed=seed,
    )
    renderer = FrameRenderer(scene, camera, settings)

    if not quiet:
        print(f"Rendering {samples_per_pixel} samples per pixel...")

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            progress_pct = (rows_done / total_rows) * 100
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows ({progress_pct:.1f}%)",
                end="",
                flush=True,
            )

    image = renderer.render(callback=progress_callback)

    if not quiet:
        print()

    output_file = Path(output_path)
    save_png(image, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    from sphere_pathtracer.config import init_backend

    try:
        init_backend(args.arch)
        render_room(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            seed=args.seed,
            mirror_chance=args.mirror,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
