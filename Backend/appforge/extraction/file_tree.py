# appforge/extraction/file_tree.py
"""
Projects a generatedFiles mapping onto the nested tree the editor renders.
"""
from typing import Any, Dict, List

ROOT = "frontend"


def _clean(path: str) -> str:
    path = path.lstrip("/")
    if path.startswith(f"{ROOT}/"):
        path = path[len(ROOT) + 1:]
    return path


def _content(value: Any) -> Any:
    if isinstance(value, dict) and "code" in value:
        return value["code"]
    return value


def _flatten(files: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Accept both flat paths and nested directory objects."""
    flat: Dict[str, Any] = {}
    for key, value in files.items():
        path = f"{prefix}/{_clean(key)}" if prefix else _clean(key)
        if isinstance(value, dict) and "code" not in value:
            flat.update(_flatten(value, path))
        else:
            flat[path] = _content(value)
    return flat


def build_file_tree(generated_files: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Returns a list of nodes:
        {"name", "type": "file", "contents", "path"}
        {"name", "type": "directory", "children", "path"}
    Paths are rooted at frontend/.
    """
    root: List[Dict[str, Any]] = []
    directories: Dict[str, List[Dict[str, Any]]] = {"": root}

    for path, contents in _flatten(generated_files or {}).items():
        parts = [p for p in path.split("/") if p]
        if not parts:
            continue

        parent = ""
        for name in parts[:-1]:
            current = f"{parent}/{name}" if parent else name
            if current not in directories:
                children: List[Dict[str, Any]] = []
                directories[parent].append({
                    "name": name,
                    "type": "directory",
                    "children": children,
                    "path": f"{ROOT}/{current}",
                })
                directories[current] = children
            parent = current

        directories[parent].append({
            "name": parts[-1],
            "type": "file",
            "contents": contents,
            "path": f"{ROOT}/{'/'.join(parts)}",
        })

    return root
