from pathlib import Path


def write_text_atomic(path: Path, content: str) -> None:
    """Write a text file atomically.

    Args:
        path: Destination file
        content: Text to write (UTF-8)
    """
    # Create parent directories
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_name(path.name + ".tmp")

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)

        # Atomic rename
        tmp_path.replace(path)
    except Exception:
        # Clean up temp file on error
        if tmp_path.exists():
            tmp_path.unlink()
        raise
