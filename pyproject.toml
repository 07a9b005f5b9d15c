[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bcdecode"
version = "0.2.0"
description = "Pure Python decoders for BC1-BC7 block-compressed texture data"
requires-python = ">=3.10"
dependencies = []
keywords = ["bcn", "dxt", "bc1", "bc4", "bc5", "bc6h", "bc7", "texture", "decompression"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["bcdecode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
