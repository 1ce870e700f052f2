[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "camclassify"
version = "0.1.0"
description = "Tiny RGB565 image classifier with camera, TFT panel and text-drawing helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["cifar10", "rgb565", "classification", "st7735", "ov7670", "neural network"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Image Recognition",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[project.scripts]
camclassify = "camclassify.pipeline:main"

[tool.hatch.build.targets.wheel]
packages = ["camclassify"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
