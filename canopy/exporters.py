"""
Data exporters to convert a grown tree into renderer-friendly format.
Keeps rendering code decoupled from the growth engine.
"""

import json
from pathlib import Path
from typing import Dict, Any


def export_tree_data(tree, output_path: str) -> Dict[str, Any]:
    """
    Export a tree snapshot to JSON for rendering.

    Format:
    {
        "source_width": float,
        "source_height": float,
        "nodes": [
            {
                "index": int,
                "position": [x, y],
                "z": float,          # pseudo-3D depth axis
                "parent": int | null,
                "alive": bool,
                "weight": int,       # subtree size, dead nodes included
                "depth": int,        # distance from root
                "radius": float
            }
        ]
    }
    """
    nodes_data = []
    for view in tree.snapshot():
        nodes_data.append({
            "index": view.index,
            "position": [view.x, view.y],
            "z": view.z,
            "parent": view.parent,
            "alive": view.alive,
            "weight": view.weight,
            "depth": view.depth,
            "radius": view.radius,
        })

    data = {
        "source_width": tree.config.width,
        "source_height": tree.config.height,
        "nodes": nodes_data,
    }

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(data, f, indent=2)

    return data


def load_tree_data(path: str) -> Dict[str, Any]:
    with open(path, 'r') as f:
        return json.load(f)
