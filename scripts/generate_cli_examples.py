from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--width", "160", "--height", "160"]


@dataclass
class Expected:
    path: Path


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]
    clean: list[Path] | None = None

    def full_args(self) -> list[str]:
        return ["python", "render.py", *self.args]


def _example(name: str, filename: str, *args: str) -> Example:
    output = EXAMPLES_ROOT / name / filename
    return Example(
        name=name,
        args=[*BASE_ARGS, *args, "--output", str(output)],
        expected=[Expected(output)],
        clean=[EXAMPLES_ROOT / name],
    )


EXAMPLES: list[Example] = [
    _example("mandelbrot", "default.bmp"),
    _example("max-iterations", "shallow.bmp", "--max-iterations", "40"),
    _example("width", "wide.bmp", "--width", "240"),
    _example("height", "short.bmp", "--height", "96"),
    _example("real-range", "seahorse-valley.bmp", "--real-range", "-0.8", "-0.7", "--imag-range", "0.05", "0.15"),
    _example("julia", "seed.bmp", "--fractal", "julia", "--seed=-0.8+0.156j"),
    _example("julia-default", "default-seed.bmp", "--fractal", "julia"),
    _example("newton", "four-roots.bmp", "--fractal", "newton", "--max-iterations", "100"),
    _example(
        "newton-roots",
        "three-roots.bmp",
        "--fractal", "newton",
        "--max-iterations", "100",
        "--root", "1",
        "--root=-0.5+0.866j",
        "--root=-0.5-0.866j",
    ),
    _example("precision", "single.bmp", "--precision", "single"),
    _example("per-pixel", "scalar.bmp", "--width", "48", "--height", "48", "--per-pixel"),
    _example("format", "converted.png", "--format", "png"),
    _example("verbose", "diagnostic.bmp", "--verbose"),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(example: Example) -> None:
    clean = example.clean or []
    _ensure_clean(clean)
    for expected in example.expected:
        expected.path.parent.mkdir(parents=True, exist_ok=True)


def _verify(example: Example) -> None:
    for expected in example.expected:
        if not expected.path.is_file():
            raise RuntimeError(f"Expected file {expected.path} was not created")
        if expected.path.stat().st_size == 0:
            raise RuntimeError(f"File {expected.path} is empty")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _prepare(example)
        completed = subprocess.run(example.full_args(), check=True)
        if completed.returncode != 0:
            raise RuntimeError(f"Example {example.name} failed with {completed.returncode}")
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
