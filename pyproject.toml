[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "etshell"
version = "0.1.0"
description = "Building blocks for a reconnecting remote shell: ssh config parsing, session bootstrap over ssh, port tunnel specs and terminal handling"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "ssh",
    "shell",
    "terminal",
    "remote",
    "pty",
    "ssh-config",
    "port-forwarding",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
    "Topic :: Terminals",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["etshell"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
