[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tlsdoctor"
version = "0.1.0"
description = "Inspect TLS certificate chains from live servers or PEM bundles and scaffold complete bundles"
requires-python = ">=3.10"
keywords = ["tls", "ssl", "x509", "certificate", "chain", "pem", "aia", "diagnostics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Internet",
    "Topic :: Utilities",
]
dependencies = [
    "cryptography",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
tls-doctor = "tlsdoctor.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["tlsdoctor"]

[tool.pytest.ini_options]
addopts = "-ra"
