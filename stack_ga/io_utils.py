"""
I/O utilities for the box stacking GA.

Handles box file parsing, stack rendering and CSV export, generation
history logging, and the YAML run metadata sidecar.
"""

import csv
from pathlib import Path
from typing import List, Optional, Union
from datetime import datetime
import yaml

from .data_models import Box, GenerationStats, EvolutionResult
from .stack_builder import BoxStack


STACK_CSV_FIELDS = ['position', 'width', 'length', 'height', 'running_height']
HISTORY_CSV_FIELDS = [
    'generation', 'best_height', 'worst_height', 'average_height',
    'average_boxes', 'converged', 'mutation_rate'
]


def parse_box_line(line: str) -> Optional[Box]:
    """
    Parse one line of a box file.

    Format: three whitespace-separated positive integers, "width height length".

    Args:
        line: Raw line

    Returns:
        Box, or None if the line does not hold exactly three positive integers
    """
    parts = line.split()
    if len(parts) != 3:
        return None

    if not all(part.isascii() and part.isdigit() for part in parts):
        return None

    dimensions = [int(part) for part in parts]
    if any(value < 1 for value in dimensions):
        return None

    return Box.from_dimensions(dimensions)


def load_boxes(boxes_path: Union[str, Path]) -> List[Box]:
    """
    Load the master box list from a text file.

    Lines that do not parse are skipped silently, including lines with
    bytes that are not valid UTF-8.

    Args:
        boxes_path: Path to box file

    Returns:
        List of boxes in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        OSError: If the file can't be read
    """
    boxes_path = Path(boxes_path)

    if not boxes_path.exists():
        raise FileNotFoundError(f"Box file not found: {boxes_path}")

    boxes = []
    with open(boxes_path, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            box = parse_box_line(line)
            if box is not None:
                boxes.append(box)

    return boxes


def format_stack(stack: BoxStack) -> str:
    """
    Render a stack for the terminal, top to bottom.

    Each line is "width length height running_height", followed by the box
    count and the final height.

    Args:
        stack: Stack to render

    Returns:
        Multi-line string
    """
    lines = stack.describe_lines()
    lines.append(f"Number of boxes: {stack.num_boxes}")
    lines.append(f"Stack height: {stack.height}")
    return "\n".join(lines)


def save_stack_to_csv(
    stack: BoxStack,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save a stack to CSV file, bottom to top.

    CSV format:
        position,width,length,height,running_height
        0,5,5,1,1
        1,4,4,1,2
        ...

    Args:
        stack: Stack to save
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved CSV file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=STACK_CSV_FIELDS)
        writer.writeheader()

        running_height = 0
        for position, box in enumerate(stack.boxes):
            running_height += box.height
            writer.writerow({
                'position': position,
                'width': box.width,
                'length': box.length,
                'height': box.height,
                'running_height': running_height,
            })

    return output_path


def save_generation_log(
    history: List[GenerationStats],
    output_path: Union[str, Path]
) -> Path:
    """
    Save generation statistics to a CSV log.

    Args:
        history: Statistics, one per evaluated generation
        output_path: Path for CSV log

    Returns:
        Path to saved log file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=HISTORY_CSV_FIELDS)
        writer.writeheader()
        for stats in history:
            writer.writerow(stats.to_dict())

    return output_path


def save_run_metadata(
    result: EvolutionResult,
    output_path: Union[str, Path],
    extra: Optional[dict] = None
) -> Path:
    """
    Save run metadata to a YAML sidecar file.

    Args:
        result: Result of the run
        output_path: Path for output YAML
        extra: Additional entries (e.g. config, input file)

    Returns:
        Path to saved metadata file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    metadata = {"created_at": datetime.now().isoformat()}
    metadata.update(result.to_metadata())
    if extra:
        metadata.update(extra)

    with open(output_path, 'w') as f:
        yaml.dump(metadata, f, default_flow_style=False, sort_keys=False)

    return output_path
