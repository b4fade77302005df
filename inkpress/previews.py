from __future__ import annotations

import secrets
from pathlib import Path

PREVIEW_ID_BYTES = 30


class PreviewAllocator:
    """Hands out private preview paths for drafts.

    ``output_dir`` must be the currently deployed output tree, not the staging
    tree being built, otherwise every rebuild would mint fresh identifiers.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def preview_url(self, draft) -> str | None:
        draft_dir = self.output_dir / "drafts" / draft.slug
        if not draft_dir.is_dir():
            return None
        existing = sorted(path for path in draft_dir.iterdir() if path.is_file())
        if not existing:
            return None
        return f"/drafts/{draft.slug}/{existing[0].stem}"

    def allocate(self, draft) -> tuple[str, bool]:
        """Return ``(relative path without extension, reused)`` for ``draft``."""
        url = self.preview_url(draft)
        if url:
            name = url.rsplit("/", 1)[-1]
        else:
            name = secrets.token_hex(PREVIEW_ID_BYTES)
        return f"drafts/{draft.slug}/{name}", url is not None
