"""Combat-zone overlay CLI entry point.

Renders the zones for every entity in a scene file to an image.

Usage:
    python -m combatzones --scene scenarios/skirmish.yaml
    python -m combatzones --scene s.yaml --output out.png --always-show-reach
    python -m combatzones --config custom.yaml --scene s.yaml --alpha 0.3
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import cv2

from combatzones.core.bus import EventBus
from combatzones.core.config import ZonesConfig
from combatzones.core.types import ZoneEvent
from combatzones.scene.loader import load_scene
from combatzones.utils.logging import setup_logging_from_config
from combatzones.zones.controller import ZoneController

logger = logging.getLogger("combatzones.cli")


async def _populate(controller: ZoneController, bus: EventBus) -> None:
    """Announce the scene and wait for actor data derivations to settle."""
    bus.publish(ZoneEvent.SCENE_READY)
    await controller.derivation.wait_idle()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="combatzones",
        description="Render facing wedges and weapon-reach rings for a scene",
    )
    parser.add_argument(
        "--config",
        "-c",
        default="config/default.yaml",
        help="Path to configuration YAML file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--scene",
        "-s",
        required=True,
        help="Path to scene YAML file",
    )
    parser.add_argument(
        "--output",
        "-o",
        default="zones.png",
        help="Output image path (default: zones.png)",
    )
    parser.add_argument(
        "--always-show-reach",
        action="store_true",
        default=False,
        help="Show reach rings for every entity regardless of viewer",
    )
    parser.add_argument(
        "--alpha",
        type=float,
        default=None,
        help="Override zone fill alpha (0.0-1.0)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        default=False,
        help="Validate config against Pydantic schema before rendering",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Path to log file (default: no file logging)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=False,
        help="Output logs as JSON instead of human-readable",
    )
    args = parser.parse_args(argv)

    bus = EventBus()
    config = ZonesConfig(args.config, bus=bus)
    try:
        config.load(validate=args.validate_config)
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: Config validation failed:\n{e}", file=sys.stderr)
        return 1

    setup_logging_from_config(
        config.section.get("system", {}) or {},
        level=args.log_level,
        log_file=args.log_file,
        log_json=args.log_json,
    )

    try:
        scene = load_scene(args.scene)
    except FileNotFoundError:
        print(f"Error: Scene file not found: {args.scene}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: Invalid scene file:\n{e}", file=sys.stderr)
        return 1

    controller = ZoneController(scene, config)
    controller.attach(bus)

    # CLI overrides arrive as ordinary setting changes
    config.override("combat_zones.display.enabled", True)
    if args.always_show_reach:
        config.override("combat_zones.display.reach_show_all", True)
    if args.alpha is not None:
        config.override("combat_zones.display.alpha", args.alpha)

    asyncio.run(_populate(controller, bus))
    frame = scene.render()
    try:
        written = cv2.imwrite(args.output, frame)
    except cv2.error:
        written = False
    if not written:
        print(f"Error: Could not write {args.output}", file=sys.stderr)
        return 1

    logger.info("Rendered %d entity zone(s) to %s", len(controller.renderer.tracked_ids), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
