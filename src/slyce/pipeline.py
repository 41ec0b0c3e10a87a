"""Batch cropping pipeline and command line interface."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import (
    Config,
    get_default_config,
    load_config,
    parse_color,
)
from .exceptions import InvalidCropDimensions, SlyceError
from .processors import get_image_files
from .session import CropSession
from .utils.logging_utils import (
    ProcessingProgress,
    configure_opencv_logging,
    console,
    log_processing_stats,
    setup_logging,
)

logger = logging.getLogger(__name__)


class SlycePipeline:
    """Detect content margins and crop every image of a directory."""

    def __init__(self, config: Config = None):
        """Initialize pipeline with configuration."""
        self.config = config or get_default_config()
        self.session = CropSession(self.config)

    @property
    def output_dir(self) -> Path:
        return Path(self.config.directories.output_dir)

    @property
    def debug_dir(self) -> Path:
        return Path(self.config.directories.debug_dir)

    def output_path_for(self, image_path: Path) -> Path:
        crop_config = self.config.crop
        extension = "jpg" if crop_config.output_format == "jpeg" else "png"
        return self.output_dir / f"{image_path.stem}{crop_config.output_suffix}.{extension}"

    def process_image(self, image_path: Path) -> Optional[Path]:
        """Crop a single image.

        Returns:
            Path of the written crop, or None if no content was found and
            ``crop.skip_empty`` is set

        Raises:
            InvalidCropDimensions: If no content was found and skipping is off
        """
        image_path = Path(image_path)
        session = self.session
        session.load(image_path)

        margins = session.margins()
        logger.info(f"{image_path.name}: margins {margins} at limit {session.limit}")

        if self.config.edge_detection.save_debug_images:
            session.detector.save_debug_image('overlay', session.preview())
            session.detector.save_debug_images_to_dir(self.debug_dir, prefix=image_path.stem)

        if margins.is_empty():
            if self.config.crop.skip_empty:
                logger.warning(f"No content found in {image_path.name} at limit "
                               f"{session.limit}; skipping")
                return None
            raise InvalidCropDimensions(margins.width(), margins.height(),
                                        image_path=str(image_path))

        output_path = self.output_path_for(image_path)
        return session.save_crop(output_path)

    def process_directory(self, input_dir: Path = None, show_progress: bool = True) -> List[Path]:
        """Crop all images in the input directory.

        Failures of single images are logged and counted; they do not stop
        the batch.
        """
        input_dir = Path(input_dir or self.config.directories.input_dir)

        if not input_dir.exists():
            raise ValueError(f"Input directory does not exist: {input_dir}")

        image_files = get_image_files(input_dir)

        if not image_files:
            logger.warning(f"No image files found in: {input_dir}")
            return []

        self.config.create_output_directories()

        outputs = []
        with log_processing_stats(f"cropping {input_dir}", logger) as stats, \
                ProcessingProgress("Cropping", len(image_files),
                                   show_progress=show_progress) as progress:
            for image_path in image_files:
                try:
                    output = self.process_image(image_path)
                except SlyceError as e:
                    logger.error(f"Error processing {image_path}: {e}")
                    stats["files_failed"] += 1
                    progress.update(success=False)
                    continue

                if output is None:
                    stats["files_skipped"] += 1
                else:
                    stats["files_processed"] += 1
                    outputs.append(output)
                progress.update()

        return outputs

    def margin_report(self, input_path: Path = None) -> Dict[str, Dict[str, Any]]:
        """Detected margins per image, without writing anything.

        Images that fail to load are reported with an ``error`` entry.
        """
        input_path = Path(input_path or self.config.directories.input_dir)
        if not input_path.exists():
            raise ValueError(f"Input path does not exist: {input_path}")

        paths = [input_path] if input_path.is_file() else get_image_files(input_path)
        report = {}
        for path in paths:
            try:
                self.session.load(path)
            except SlyceError as e:
                logger.error(f"Error processing {path}: {e}")
                report[path.name] = {"error": str(e)}
                continue
            report[path.name] = self.session.margin_info()
        return report

    def run(self, input_path: Path = None) -> List[Path]:
        """Process a single file or a whole directory."""
        input_path = Path(input_path or self.config.directories.input_dir)
        if input_path.is_file():
            self.config.create_output_directories()
            output = self.process_image(input_path)
            return [output] if output is not None else []
        return self.process_directory(input_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slyce",
        description="Detect content margins in images and crop or pad them",
    )
    parser.add_argument(
        "input", nargs="?", help="Input image or directory (default: use config)"
    )
    parser.add_argument("-o", "--output", help="Output directory (default: use config)")
    parser.add_argument("-c", "--config", help="Configuration file (JSON, YAML or TOML)")
    parser.add_argument("--limit", type=int, help="Edge strength limit 0-255")
    parser.add_argument("--margin", type=int, help="Pixels kept around the content")
    parser.add_argument("--mode", choices=["neighbor", "border"],
                        help="Compare pixels to neighbours or to the image border")
    parser.add_argument("--backend", choices=["numpy", "opencl"], help="Edge detection backend")
    parser.add_argument("--workers", type=int, help="Worker processes for edge detection")
    parser.add_argument("--padding-color", help="Padding colour as #rrggbb or #rrggbbaa")
    parser.add_argument("--format", choices=["png", "jpeg"], dest="output_format",
                        help="Output image format")
    parser.add_argument("--quality", type=int, help="JPEG quality 1-100")
    parser.add_argument("--keep-empty", action="store_true",
                        help="Fail on images without content instead of skipping them")
    parser.add_argument("--info", action="store_true",
                        help="Print detected margins as JSON without writing files")
    parser.add_argument("--debug", action="store_true", help="Save edge map and overlay images")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    """Load the configuration and apply command line overrides."""
    config = load_config(args.config) if args.config else get_default_config()

    if args.input:
        config.directories.input_dir = args.input
    if args.output:
        config.directories.output_dir = args.output
    if args.limit is not None:
        config.margins.limit = args.limit
    if args.margin is not None:
        config.margins.margin = args.margin
    if args.mode:
        config.edge_detection.mode = args.mode
    if args.backend:
        config.edge_detection.backend = args.backend
    if args.workers is not None:
        config.edge_detection.workers = args.workers
    if args.padding_color:
        config.crop.padding_color = parse_color(args.padding_color)
    if args.output_format:
        config.crop.output_format = args.output_format
    if args.quality is not None:
        config.crop.jpeg_quality = args.quality
    if args.keep_empty:
        config.crop.skip_empty = False
    if args.debug:
        config.edge_detection.save_debug_images = True
    if args.verbose:
        config.logging.level = "DEBUG"
    elif args.quiet:
        config.logging.level = "WARNING"
    return config


def print_margin_info(pipeline: SlycePipeline, input_path: Path) -> None:
    console.print_json(json.dumps(pipeline.margin_report(input_path)))


def main(argv: Optional[List[str]] = None) -> int:
    """Command line interface."""
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
    except (SlyceError, ValueError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    log_config = config.logging
    setup_logging(
        level=log_config.level,
        log_file=log_config.log_file,
        use_rich=log_config.use_rich,
        include_performance=log_config.include_performance,
        format_style=log_config.format_style,
    )
    configure_opencv_logging(logging.getLogger().level)

    pipeline = SlycePipeline(config)
    input_path = Path(config.directories.input_dir)

    try:
        if args.info:
            print_margin_info(pipeline, input_path)
            return 0
        outputs = pipeline.run(input_path)
    except (SlyceError, ValueError) as e:
        logger.error(str(e))
        return 1

    if outputs:
        console.print(f"Cropped {len(outputs)} image(s) into {pipeline.output_dir}")
    else:
        console.print("No images were cropped. Check the input path and limit.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
