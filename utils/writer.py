"""Write generated files to disk, refusing paths that escape the output dir."""

import os


def write_files(output_dir, files):
    """Write (path, content) pairs or FileEntry-like objects under output_dir.

    Returns the relative paths written.
    """
    os.makedirs(output_dir, exist_ok=True)
    root = os.path.realpath(output_dir)
    written = []
    for f in files:
        path, content = (f.path, f.content) if hasattr(f, "path") else f
        resolved = os.path.realpath(os.path.join(output_dir, path))
        if not resolved.startswith(root + os.sep):
            raise ValueError(f"Path escapes output directory: {path}")
        os.makedirs(os.path.dirname(resolved), exist_ok=True)
        with open(resolved, "w") as fp:
            fp.write(content)
        written.append(path)
    return written
