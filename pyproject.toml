[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lwskit"
version = "0.1.0"
description = "LeaderWorkerSet API types, apply configurations and llama.cpp group tooling"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "leaderworkerset",
    "kubernetes",
    "distributed-inference",
    "apply-configuration",
    "llama.cpp",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lwskit-chat = "lwskit.chat:main"
lwskit-blobserver = "lwskit.blobserver:main"
lwskit-leader = "lwskit.leader:main"

[tool.hatch.build.targets.wheel]
packages = ["lwskit"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
