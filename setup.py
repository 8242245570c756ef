"""
Setup script for foundgarten-practice.

Foundgarten Practice is the adaptive practice engine behind the
Foundgarten early-learning games. It serves three roles:

1. Statistics Store - Durable per-learner attempt counters for every item
2. Round Generation - Bootstrap coverage rounds and weighted adaptive rounds
3. Answer Recording - A single write path that never loses an increment

The engine is a library; the app shell embeds it through PracticeEngine.
"""

from setuptools import find_namespace_packages, setup

setup(
    name="foundgarten-practice",
    version="1.0.0",
    description="Adaptive practice engine for early-learning letter and number games",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Foundgarten",
    packages=find_namespace_packages(include=["src", "src.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # Database
        "sqlalchemy[asyncio]>=2.0.0",
        "aiosqlite>=0.19.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
        "postgres": [
            "asyncpg>=0.29.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning adaptive-practice education alphabet statistics",
)
