[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "swaystatus"
version = "0.1.0"
description = "Status bar building blocks for the sway window manager: IPC client, workspaces, window title, keyboard layout, binding mode, clock and network state"
requires-python = ">=3.10"
dependencies = []
keywords = ["sway", "wayland", "status bar", "ipc", "workspaces", "network"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment :: Window Managers :: Applets",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["swaystatus"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
