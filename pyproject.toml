[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "offchain-vault"
version = "0.1.0"
description = "Encrypted off-chain JSON storage with SHA-256 addressing and signed attestation reports"
requires-python = ">=3.10"
keywords = ["secure-storage", "attestation", "aes-ctr", "rsa-pss", "sha256", "iot", "json"]
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
    "Topic :: Security :: Cryptography",
]
dependencies = [
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
offchain-vault = "offchain_vault.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["offchain_vault"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
