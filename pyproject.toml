[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dsclient"
version = "0.1.0"
description = "Asynchronous client for the DeepSeek chat completions API, with typed request and response models, streaming and tool calls"
requires-python = ">=3.10"
keywords = ["deepseek", "api", "ai", "chat", "llm", "client", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Internet :: WWW/HTTP",
]
dependencies = [
    "httpx>=0.25",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.21",
    "respx>=0.20",
]

[project.scripts]
dsclient = "dsclient.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dsclient"]

[tool.hatch.build.targets.sdist]
include = ["dsclient", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
strict = true
packages = ["dsclient"]
