"""Static asset handling for Inkwell.

Everything under the project's ``public/`` directory is published at the
output root unchanged in path. Raster images are re-encoded through Pillow;
all other files are copied. The RSS stylesheet shipped with the package is
written when the project does not provide its own.

Key components:
- AssetNotFoundError: Raised for a missing font or referenced image.
- resolve_static_image: Locate an entry's ``image`` under ``public/``.
- ImageProcessor, CopyProcessor: Per-file asset processors.
- AssetProcessorRegistry: Picks the processor for each file.
- StaticAssetPipeline: Copies ``public/`` into the output directory.
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path

from PIL import Image

from .routes import FEED_STYLESHEET_PATH


class AssetNotFoundError(Exception):
    """Error raised when an asset file is not found.

    Attributes:
        asset_name: The name of the asset that was requested.
        asset_type: The type of asset (e.g., "image", "font").
        searched_paths: List of paths that were searched.
    """

    def __init__(
        self,
        asset_name: str,
        asset_type: str,
        searched_paths: list[Path],
    ):
        self.asset_name = asset_name
        self.asset_type = asset_type
        self.searched_paths = searched_paths
        paths_str = ", ".join(str(p) for p in searched_paths)
        super().__init__(
            f"{asset_type} asset '{asset_name}' not found. Searched: {paths_str}"
        )


def is_remote(ref: str) -> bool:
    return ref.startswith(("http://", "https://", "//"))


def resolve_static_image(public_dir: Path, ref: str) -> Path | None:
    """Locate a static image referenced from front-matter.

    Args:
        public_dir: The project's public directory.
        ref: Reference such as ``/images/cover.png`` or ``images/cover.png``.

    Returns:
        Path of the file, or None for remote URLs which are not checked.

    Raises:
        AssetNotFoundError: If the file does not exist.
    """
    if is_remote(ref):
        return None
    candidate = public_dir / ref.lstrip("/")
    if not candidate.is_file():
        raise AssetNotFoundError(ref, "image", [candidate])
    return candidate


class BaseAssetProcessor(ABC):
    """Base class for asset processors.

    Each subclass handles one kind of file.
    """

    @property
    @abstractmethod
    def priority(self) -> int:
        """Return processor priority (higher = checked first)."""
        ...

    @abstractmethod
    def can_process(self, path: Path) -> bool:
        """Check if this processor can handle the given asset."""
        ...

    @abstractmethod
    def process(self, source: Path, dest: Path) -> None:
        """Write ``source`` to ``dest``."""
        ...

    def ensure_dest_dir(self, dest: Path) -> None:
        """Ensure the parent directory of the destination exists."""
        dest.parent.mkdir(parents=True, exist_ok=True)


class ImageProcessor(BaseAssetProcessor):
    """Re-encodes raster images with Pillow's optimizer.

    JPEGs keep their quantization tables so no quality is lost. WebP has no
    such option and is left to CopyProcessor. Files Pillow cannot read are
    copied unchanged.
    """

    SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg"}

    @property
    def priority(self) -> int:
        return 100

    def can_process(self, path: Path) -> bool:
        return path.suffix.lower() in self.SUPPORTED_EXTENSIONS

    def process(self, source: Path, dest: Path) -> None:
        self.ensure_dest_dir(dest)
        try:
            with Image.open(source) as img:
                options = {"optimize": True}
                if img.format == "JPEG":
                    options["quality"] = "keep"
                img.save(dest, **options)
            return
        except (OSError, ValueError):
            pass
        shutil.copy2(source, dest)


class CopyProcessor(BaseAssetProcessor):
    """Copies any file unchanged."""

    @property
    def priority(self) -> int:
        return 0

    def can_process(self, path: Path) -> bool:
        return True

    def process(self, source: Path, dest: Path) -> None:
        self.ensure_dest_dir(dest)
        shutil.copy2(source, dest)


class AssetProcessorRegistry:
    """Registry of asset processors, consulted in priority order."""

    def __init__(self) -> None:
        self._processors: list[BaseAssetProcessor] = []

    def register(self, processor: BaseAssetProcessor) -> None:
        self._processors.append(processor)
        self._processors.sort(key=lambda p: p.priority, reverse=True)

    def get_processor(self, path: Path) -> BaseAssetProcessor | None:
        for processor in self._processors:
            if processor.can_process(path):
                return processor
        return None

    def process(self, source: Path, dest: Path) -> bool:
        """Process one file with the first matching processor.

        Returns:
            True if a processor handled the file.
        """
        processor = self.get_processor(source)
        if processor is None:
            return False
        processor.process(source, dest)
        return True


def create_default_registry() -> AssetProcessorRegistry:
    registry = AssetProcessorRegistry()
    registry.register(ImageProcessor())
    registry.register(CopyProcessor())
    return registry


class StaticAssetPipeline:
    """Publishes the project's static files into the output directory.

    Attributes:
        public_dir: Directory of static files.
        output_dir: Build output directory.
        processor_registry: Registry of asset processors.
    """

    def __init__(
        self,
        public_dir: Path,
        output_dir: Path,
        processor_registry: AssetProcessorRegistry | None = None,
    ):
        self.public_dir = public_dir
        self.output_dir = output_dir
        self.processor_registry = processor_registry or create_default_registry()

    def run(self) -> list[Path]:
        """Copy every public file and the default feed stylesheet.

        Returns:
            Output paths written, in source order.
        """
        written: list[Path] = []
        if self.public_dir.exists():
            for item in sorted(self.public_dir.rglob("*")):
                if item.is_dir():
                    continue
                dest = self.output_dir / item.relative_to(self.public_dir)
                if self.processor_registry.process(item, dest):
                    written.append(dest)
        stylesheet = self.output_dir / FEED_STYLESHEET_PATH.lstrip("/")
        if not stylesheet.exists():
            stylesheet.parent.mkdir(parents=True, exist_ok=True)
            packaged = resources.files("inkwell") / "templates" / "styles.xsl"
            stylesheet.write_text(packaged.read_text(encoding="utf-8"), encoding="utf-8")
            written.append(stylesheet)
        return written
