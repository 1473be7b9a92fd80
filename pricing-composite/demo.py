"""Box-of-products walkthrough.

Run with:
    python demo.py [--log-level DEBUG]

Two boxes are built: the first holds bubble gum and a phone, the second
holds two TVs and is then placed inside the first.  The total price is
read from the outer box alone.
"""

from __future__ import annotations

import argparse
import logging

from composite import Container, Leaf, render

logger = logging.getLogger("demo")


def build_boxes() -> Container:
    """Build the two-box example and return the outer box."""
    box1 = Container()
    box1.add(Leaf("Bubble gum", 0.5))
    box1.add(Leaf("Samsung Note 20", 1005))

    box2 = Container()
    box2.add(Leaf("Samsung TV 20in", 300))
    box2.add(Leaf("Samsung TV 50in", 800))

    box1.add(box2)
    return box1


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (DEBUG shows every add)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> float:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    box = build_boxes()
    print(render(box))
    print(f"Total price: {box.price:.2f}")
    logger.info("%s, total %s", box.name, box.price)
    return box.price


if __name__ == "__main__":
    main()
