[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "learnkit"
version = "0.1.0"
description = "Small, readable learners in plain Python: a layered CNN toolkit, a single-kernel CNN and a Gini decision tree."
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = [
    "neural-network",
    "cnn",
    "convolution",
    "mnist",
    "decision-tree",
    "gini",
    "machine-learning",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
learnkit-cnn = "learnkit.network:main"
learnkit-simple-cnn = "learnkit.simple_cnn:main"
learnkit-tree = "learnkit.tree:main"

[tool.hatch.build.targets.wheel]
packages = ["learnkit"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
