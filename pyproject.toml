[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "peclient"
version = "0.1.0"
description = "Clients for the Puppet Enterprise PuppetDB, Orchestrator and Node Classifier APIs, RBAC data types, and an interactive PuppetDB query shell"
requires-python = ">=3.10"
keywords = ["puppet", "puppetdb", "orchestrator", "classifier", "api-client"]
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
    "Topic :: System :: Systems Administration",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "requests>=2.28",
    "prompt-toolkit>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
    "responses>=0.23",
]

[project.scripts]
pe-pdb = "peclient.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["peclient"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
