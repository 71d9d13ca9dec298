#!/usr/bin/env python3
"""
Generate a benchmark corpus by replicating a sample text into many files.
"""

import argparse
from pathlib import Path

# Configuration
SOURCE_FILE = Path("examples/inputs/story.txt")
OUTPUT_DIR = Path("benchmark_inputs")


def generate_file(output_path: Path, target_size: int, source_content: bytes) -> int:
    """
    Generate a file by replicating source content until target size is reached.

    Args:
        output_path: Path where the output file should be written
        target_size: Target file size in bytes
        source_content: The content to replicate

    Returns:
        Size of the written file in bytes
    """
    if not source_content:
        raise ValueError("Source file is empty!")

    replications = max(1, target_size // len(source_content))
    with open(output_path, 'wb') as f:
        for _ in range(replications):
            f.write(source_content)

    return output_path.stat().st_size


def generate_corpus(output_dir: Path, num_files: int, target_size: int, source_content: bytes):
    """Write num_files copies named doc-0000.txt, doc-0001.txt, ..."""
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for i in range(num_files):
        path = output_dir / f"doc-{i:04d}.txt"
        generate_file(path, target_size, source_content)
        paths.append(path)
    return paths


def main():
    parser = argparse.ArgumentParser(description="Generate benchmark input files")
    parser.add_argument("--files", type=int, default=64, help="Number of files")
    parser.add_argument("--size-kb", type=int, default=256, help="Approximate size of each file")
    parser.add_argument("--source", type=Path, default=SOURCE_FILE, help="Text to replicate")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="Where to write files")
    args = parser.parse_args()

    if not args.source.exists():
        print(f"Source file not found: {args.source}")
        return 1

    paths = generate_corpus(args.output_dir, args.files, args.size_kb * 1024, args.source.read_bytes())
    total = sum(p.stat().st_size for p in paths)
    print(f"Created {len(paths)} files in {args.output_dir} ({total / (1024 * 1024):.2f} MB)")
    return 0


if __name__ == "__main__":
    exit(main())
