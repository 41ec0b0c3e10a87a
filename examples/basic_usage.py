"""Basic usage example for Slyce."""

from pathlib import Path

from slyce import CropSession, SlycePipeline
from slyce.config import get_default_config


def main():
    """Example of interactive and batch usage."""

    # Create a custom configuration
    config = get_default_config()
    config.directories.input_dir = "input"
    config.directories.output_dir = "output"
    config.margins.limit = 20
    config.margins.margin = 16
    config.crop.padding_color = "#ffffff"

    print("Slyce margin detection - Example")
    print("=" * 40)

    input_dir = Path(config.directories.input_dir)
    if not input_dir.exists():
        print(f"Creating input directory: {input_dir}")
        input_dir.mkdir(parents=True, exist_ok=True)
        print("Please add some images to the input directory and run again.")
        return

    # Inspect the first image at a few limits; edges are only computed once
    images = sorted(input_dir.glob("*.png")) + sorted(input_dir.glob("*.jpg"))
    if images:
        session = CropSession(config)
        session.load(images[0])
        for limit in (5, 20, 60):
            print(f"{images[0].name} at limit {limit}: {session.margins(limit)}")

    # Crop everything in the input directory
    pipeline = SlycePipeline(config)
    try:
        output_files = pipeline.process_directory()
        print(f"\nSuccess! Created {len(output_files)} output files:")
        for output_file in output_files:
            print(f"  - {output_file}")

    except Exception as e:
        print(f"Error: {e}")


if __name__ == "__main__":
    main()
