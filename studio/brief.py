"""Design brief files: markdown idea text with optional YAML frontmatter."""

import mimetypes
from pathlib import Path

import frontmatter

from studio.models import Constraints, ImageData

# frontmatter key -> Constraints field
_CONSTRAINT_KEYS = {
    "purpose": "purpose",
    "brand_tone": "brand_tone",
    "target_audience": "target_audience",
    "audience": "target_audience",
    "price_point": "price_point",
    "mode": "mode",
}

MODES = ("quick", "deep")


def parse_brief(file_path: Path) -> tuple[str, dict]:
    """Parse a brief file.

    Returns:
        (idea, metadata) where idea is the body text and metadata may hold
        purpose, brand_tone, target_audience, price_point, mode and image.
        If no frontmatter, metadata is {}.
    """
    post = frontmatter.load(str(file_path))
    return post.content.strip(), dict(post.metadata)


def apply_brief_constraints(constraints: Constraints, metadata: dict) -> Constraints:
    """Return a copy of constraints with frontmatter values filled in.

    Raises:
        ValueError: If the frontmatter names an unknown mode.
    """
    values = vars(constraints).copy()
    for key, field_name in _CONSTRAINT_KEYS.items():
        if key in metadata and metadata[key] is not None:
            values[field_name] = str(metadata[key])
    if values["mode"] not in MODES:
        raise ValueError(f"Unknown mode '{values['mode']}'; choose from {', '.join(MODES)}")
    return Constraints(**values)


def brief_image_path(file_path: Path, metadata: dict) -> Path | None:
    """Resolve the frontmatter ``image`` entry relative to the brief file."""
    raw = metadata.get("image")
    if not raw:
        return None
    path = Path(str(raw))
    return path if path.is_absolute() else file_path.parent / path


def load_image(path: Path) -> ImageData:
    """Read an image file into a MIME-typed payload.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file type is not an image.
    """
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValueError(f"Not an image file: {path}")
    return ImageData(data=path.read_bytes(), mime_type=mime_type)
