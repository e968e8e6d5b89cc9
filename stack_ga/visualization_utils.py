"""
Visualization utilities for the box stacking GA.

Draws a side elevation of a stack: each box is a rectangle whose width is
its footprint width and whose height is its height, centred over the base.
"""

from pathlib import Path
from typing import Tuple, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from .stack_builder import BoxStack


def stack_rectangles(stack: BoxStack) -> list[Tuple[float, int, int, int]]:
    """
    Compute the side-view rectangles of a stack.

    Returns:
        List of (x, y, width, height) tuples, bottom to top
    """
    rectangles = []
    y = 0
    for box in stack.boxes:
        x = -box.width / 2
        rectangles.append((x, y, box.width, box.height))
        y += box.height
    return rectangles


def plot_stack(
    stack: BoxStack,
    output_path: Union[str, Path],
    figsize: Tuple[int, int] = (6, 10),
    title: str = None
) -> Path:
    """
    Save a side elevation of a stack as an image.

    Args:
        stack: Stack to draw
        output_path: Path to save PNG file
        figsize: Figure size (width, height) in inches
        title: Plot title (defaults to height and box count)

    Returns:
        Path to saved image
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=figsize)
    cmap = plt.get_cmap('viridis')

    rectangles = stack_rectangles(stack)
    for i, (x, y, width, height) in enumerate(rectangles):
        color = cmap(i / max(1, len(rectangles) - 1))
        ax.add_patch(Rectangle((x, y), width, height, facecolor=color,
                               edgecolor='black', linewidth=0.5, alpha=0.8))

    base_width = stack.boxes[0].width if stack.boxes else 1
    ax.set_xlim(-base_width / 2 - 1, base_width / 2 + 1)
    ax.set_ylim(0, max(1, stack.height) * 1.02)
    ax.set_xlabel('Width')
    ax.set_ylabel('Height')
    ax.set_title(title or f"Stack height {stack.height} ({stack.num_boxes} boxes)")

    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)

    return output_path
